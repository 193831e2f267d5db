import json
import sys
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest
from langchain_core.callbacks import CallbackManagerForLLMRun
from langchain_core.language_models.llms import LLM

sys.path.insert(0, str(Path(__file__).parent.parent))

from supasupp.config.config import AISettings


class ScriptedLLM(LLM):
    """Answers every prompt through `handler` and remembers the prompts it saw."""
    handler: Callable[[str], str]
    prompts: List[str] = []

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _call(
        self,
        prompt: str,
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> str:
        self.prompts.append(prompt)
        return self.handler(prompt)


class ManualExecutor(Executor):
    """Executor whose jobs only run when the test says so."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def start(self, index: int) -> bool:
        return self.jobs[index][0].set_running_or_notify_cancel()

    def finish(self, index: int):
        future, fn, args, kwargs = self.jobs[index]
        if future.cancelled():
            return
        future.set_result(fn(*args, **kwargs))

    def run(self, index: int):
        if self.start(index):
            self.finish(index)


VALID_QUESTIONS = [
    {"id": "afternoon_energy", "question": "How do you feel in the afternoon?", "type": "select",
     "options": ["Energetic", "Slight dip", "Tired", "Crash"]},
    {"id": "symptoms", "question": "Which of these do you experience?", "type": "checkbox",
     "options": ["Brain fog", "Mood swings", "Cold hands"]},
    {"id": "sleep_rating", "question": "Rate your sleep this week", "type": "scale"},
]

VALID_RECOMMENDATIONS = [
    {"id": 1, "name": "Vitamin C", "dosage": "500mg daily", "priority": "high", "category": "Basic Essentials",
     "reason": "Low fruit intake.", "benefits": ["Immune support", "Skin health", "Iron absorption"],
     "timing": "With breakfast"},
    {"id": 2, "name": "Magnesium Citrate", "dosage": "300mg", "priority": "high", "category": "Basic Essentials",
     "reason": "High stress.", "benefits": ["Sleep", "Relaxation", "Energy"], "timing": "Before bed"},
    {"id": 3, "name": "Zinc", "dosage": "15mg", "priority": "medium", "category": "Advanced Support",
     "reason": "Immune goals.", "benefits": ["Immunity", "Skin", "Healing"], "timing": "With dinner"},
    {"id": 4, "name": "Ashwagandha", "dosage": "600mg", "priority": "low", "category": "Advanced Support",
     "reason": "Stress response.", "benefits": ["Calm", "Cortisol balance", "Sleep"], "timing": "Evening"},
    {"id": 5, "name": "Probiotic Blend", "dosage": "20 billion CFU", "priority": "medium",
     "category": "Advanced Support", "reason": "Bloating.", "benefits": ["Digestion", "Immunity", "Absorption"],
     "timing": "Morning"},
]


@pytest.fixture
def no_key_settings():
    return AISettings(credential="")


@pytest.fixture
def keyed_settings():
    return AISettings(credential="test-key")


@pytest.fixture
def valid_questions_json():
    return json.dumps(VALID_QUESTIONS)


@pytest.fixture
def valid_recommendations_json():
    return json.dumps(VALID_RECOMMENDATIONS)


@pytest.fixture
def manual_executor():
    return ManualExecutor()


def scripted_factory(handler: Callable[[str], str]):
    """Client factory returning a ScriptedLLM; the returned LLM list records every client built."""
    built = []

    def factory(settings):
        llm = ScriptedLLM(handler=handler, prompts=[])
        built.append(llm)
        return llm

    factory.built = built
    return factory


def route_by_prompt(questions: str = "", analysis: str = "", recommendations: str = ""):
    def handler(prompt: str) -> str:
        if "follow-up questions" in prompt:
            return questions
        if "supplement recommendation" in prompt:
            return recommendations
        return analysis

    return handler
