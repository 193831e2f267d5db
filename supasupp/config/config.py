# supasupp/config/config.py
import os
from typing import Optional
from dotenv import load_dotenv

# ====================================================
# Load Environment Variables - MUST BE FIRST
# ====================================================
load_dotenv()

# ====================================================
# Generative backend (Gemini)
# ====================================================
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.0-pro")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta/models"
)

API_TIMEOUT = int(os.getenv("API_TIMEOUT", 30))  # seconds, no retries

GEN_TEMPERATURE = float(os.getenv("GEN_TEMPERATURE", 0.7))
GEN_TOP_P = float(os.getenv("GEN_TOP_P", 0.8))
GEN_TOP_K = int(os.getenv("GEN_TOP_K", 40))
GEN_MAX_OUTPUT_TOKENS = int(os.getenv("GEN_MAX_OUTPUT_TOKENS", 2048))

# ====================================================
# Flask surface
# ====================================================
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
PORT = int(os.getenv("PORT", 5000))
LOG_DIR = os.getenv("LOG_DIR", "logs")


class AISettings:
    """
    Settings handed to AIOrchestrator.

    Holds the single process-wide credential. The orchestrator reads it at
    call time, so set_credential() takes effect for the next generation even
    when the orchestrator was built earlier.
    """

    def __init__(
        self,
        credential: Optional[str] = None,
        model: str = GEMINI_MODEL,
        api_base: str = GEMINI_API_BASE,
        timeout: int = API_TIMEOUT,
        temperature: float = GEN_TEMPERATURE,
        top_p: float = GEN_TOP_P,
        top_k: int = GEN_TOP_K,
        max_output_tokens: int = GEN_MAX_OUTPUT_TOKENS,
    ):
        self._credential = credential or ""
        self.model = model
        self.api_base = api_base
        self.timeout = timeout
        self.temperature = temperature
        self.top_p = top_p
        self.top_k = top_k
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_env(cls) -> "AISettings":
        return cls(credential=GEMINI_API_KEY)

    def set_credential(self, value: Optional[str]):
        self._credential = (value or "").strip()

    def get_credential(self) -> str:
        return self._credential

    def has_credential(self) -> bool:
        return bool(self._credential)

    @property
    def endpoint(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.model}:generateContent"

    def generation_config(self) -> dict:
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
        }
