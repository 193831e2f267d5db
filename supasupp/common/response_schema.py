# supasupp/common/response_schema.py
"""
Shapes of the three AI-generated payloads and one validation function per
payload. Each validator takes the raw backend text and returns a ParseResult;
callers never see a partially parsed value.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

T = TypeVar("T")

QUESTION_TYPES = ("text", "select", "checkbox", "scale")

# Domain the UI renders for type="scale"; never supplied by the backend
SCALE_DOMAIN = list(range(1, 11))

FOLLOW_UP_QUESTION_COUNT = 3
MIN_RECOMMENDATIONS = 5
MIN_HIGH_PRIORITY = 2

_FENCE_RE = re.compile(r"^```(?:json|JSON)?\s*\n?(.*?)\n?```$", re.DOTALL)


class FollowUpQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    question: str = Field(min_length=1)
    type: Literal["text", "select", "checkbox", "scale"]
    options: Optional[List[str]] = None

    @field_validator("id", "question")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def _drop_ignored_options(cls, data: Any) -> Any:
        # text/scale questions ignore externally supplied options
        if isinstance(data, dict) and data.get("type") in ("text", "scale"):
            return {key: value for key, value in data.items() if key != "options"}
        return data

    @model_validator(mode="after")
    def _options_match_type(self) -> "FollowUpQuestion":
        if self.type in ("select", "checkbox") and not self.options:
            raise ValueError(f"options are required for type '{self.type}'")
        return self


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(min_length=1)
    dosage: str = Field(min_length=1)
    priority: Literal["high", "medium", "low"]
    category: str
    reason: str = Field(min_length=1)
    benefits: List[str]
    timing: str = Field(min_length=1)

    @field_validator("name", "dosage", "reason", "timing")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


_QUESTIONS_ADAPTER = TypeAdapter(List[FollowUpQuestion])
_RECOMMENDATIONS_ADAPTER = TypeAdapter(List[Recommendation])


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(ok=False, error=error)


def strip_code_fence(text: str) -> str:
    """Unwrap a reply of the form ```json ... ```; any other text is returned stripped."""
    if not isinstance(text, str):
        return ""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def _load_json_array(text: str) -> ParseResult[List[Any]]:
    try:
        data = json.loads(strip_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        return ParseResult.failure(f"reply is not valid JSON: {e}")
    if not isinstance(data, list):
        return ParseResult.failure(f"expected a JSON array, got {type(data).__name__}")
    return ParseResult.success(data)


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else err.get("msg", str(e))


def _has_duplicate_ids(items) -> bool:
    ids = [item.id for item in items]
    return len(ids) != len(set(ids))


def parse_follow_up_questions(text: str) -> ParseResult[List[FollowUpQuestion]]:
    loaded = _load_json_array(text)
    if not loaded.ok:
        return ParseResult.failure(loaded.error)

    try:
        questions = _QUESTIONS_ADAPTER.validate_python(loaded.value)
    except ValidationError as e:
        return ParseResult.failure(f"invalid follow-up question: {_first_error(e)}")

    if len(questions) != FOLLOW_UP_QUESTION_COUNT:
        return ParseResult.failure(
            f"expected {FOLLOW_UP_QUESTION_COUNT} questions, got {len(questions)}"
        )
    if _has_duplicate_ids(questions):
        return ParseResult.failure("follow-up question ids are not unique")
    return ParseResult.success(questions)


def parse_recommendations(text: str) -> ParseResult[List[Recommendation]]:
    loaded = _load_json_array(text)
    if not loaded.ok:
        return ParseResult.failure(loaded.error)

    try:
        recommendations = _RECOMMENDATIONS_ADAPTER.validate_python(loaded.value)
    except ValidationError as e:
        return ParseResult.failure(f"invalid recommendation: {_first_error(e)}")

    if len(recommendations) < MIN_RECOMMENDATIONS:
        return ParseResult.failure(
            f"expected at least {MIN_RECOMMENDATIONS} recommendations, got {len(recommendations)}"
        )
    high = sum(1 for rec in recommendations if rec.priority == "high")
    if high < MIN_HIGH_PRIORITY:
        return ParseResult.failure(
            f"expected at least {MIN_HIGH_PRIORITY} high-priority recommendations, got {high}"
        )
    if _has_duplicate_ids(recommendations):
        return ParseResult.failure("recommendation ids are not unique")
    return ParseResult.success(recommendations)


def parse_health_analysis(text: str) -> ParseResult[str]:
    if not isinstance(text, str) or not text.strip():
        return ParseResult.failure("analysis text is empty")
    return ParseResult.success(text.strip())
