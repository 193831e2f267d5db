from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line.strip() for line in f.read().splitlines() if line.strip() and not line.startswith("#")]

setup(
    name="supasupp",
    version ="0.1",
    author = "Supasupp",
    packages = find_packages(exclude=["tests", "tests.*"]),
    install_requires = requirements,
    extras_require = {
        "test": ["pytest"],
    },
    python_requires = ">=3.9",
)
