# supasupp/components/answer_store.py
"""
Append/replace-only accumulator of assessment answers.

Values are a tagged union checked at write time: a string (free text, a
select choice or a number typed as text), a number, or a list of selected
option strings. Keys are never removed; a later write for the same key fully
replaces the earlier value.
"""
import copy
import math
import threading
from typing import Dict, List, Optional, Union

from supasupp.common.assessment_steps import FieldSpec
from supasupp.common.custom_exception import AnswerValidationError, WizardStateError
from supasupp.common.logger import get_logger
from supasupp.common.response_schema import SCALE_DOMAIN

logger = get_logger(__name__)

AnswerValue = Union[str, int, float, List[str]]


def _coerce_value(key: str, value) -> AnswerValue:
    """Check the value against the answer union; lists and tuples come back as a new list."""
    if isinstance(value, bool) or value is None:
        raise AnswerValidationError(f"Answer '{key}' must be text, a number or a list of options")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise AnswerValidationError(f"Answer '{key}' must be a finite number")
        return value
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise AnswerValidationError(f"Answer '{key}' options must all be strings")
        return list(value)
    raise AnswerValidationError(
        f"Answer '{key}' has unsupported type {type(value).__name__}"
    )


def _as_number(key: str, value) -> float:
    if isinstance(value, list):
        raise AnswerValidationError(f"Answer '{key}' must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise AnswerValidationError(f"Answer '{key}' must be numeric (got '{value}')")
    if not math.isfinite(number):
        raise AnswerValidationError(f"Answer '{key}' must be a finite number")
    return number


def check_field(spec: FieldSpec, value: AnswerValue):
    """Validate an already-coerced value against its field spec. Empty text means 'not answered'."""
    if value == "":
        return

    if spec.type == "number":
        number = _as_number(spec.name, value)
        if spec.min is not None and number < spec.min:
            raise AnswerValidationError(f"{spec.name} below minimum {spec.min}")
        if spec.max is not None and number > spec.max:
            raise AnswerValidationError(f"{spec.name} above maximum {spec.max}")

    elif spec.type == "scale":
        number = _as_number(spec.name, value)
        if number != int(number) or int(number) not in SCALE_DOMAIN:
            raise AnswerValidationError(
                f"{spec.name} must be a whole number from {SCALE_DOMAIN[0]} to {SCALE_DOMAIN[-1]}"
            )

    elif spec.type == "select":
        if not isinstance(value, str):
            raise AnswerValidationError(f"{spec.name} must be a single choice")
        if spec.options and value not in spec.options:
            raise AnswerValidationError(f"{spec.name} must be one of {spec.options} (got '{value}')")

    elif spec.type == "checkbox":
        if not isinstance(value, list):
            raise AnswerValidationError(f"{spec.name} must be a list of choices")
        unknown = [item for item in value if spec.options and item not in spec.options]
        if unknown:
            raise AnswerValidationError(f"{spec.name} has unknown choices {unknown}")

    elif spec.type == "text":
        if not isinstance(value, str):
            raise AnswerValidationError(f"{spec.name} must be text")


class AnswerStore:
    """
    Thread-safe answer accumulator.

    Args:
        field_specs: known fields keyed by answer key. Keys without a spec
            (e.g. AI follow-up question ids) only go through the type check.
    """

    def __init__(self, field_specs: Optional[Dict[str, FieldSpec]] = None):
        self._answers: Dict[str, AnswerValue] = {}
        self._field_specs = dict(field_specs or {})
        self._lock = threading.RLock()
        self._sealed = False

    def set(self, key: str, value, spec: Optional[FieldSpec] = None) -> AnswerValue:
        """Store a value; spec overrides the registered field spec for this write."""
        if not isinstance(key, str) or not key.strip():
            raise AnswerValidationError("Answer key must be a non-empty string")

        coerced = _coerce_value(key, value)
        spec = spec or self._field_specs.get(key)
        if spec is not None:
            check_field(spec, coerced)

        with self._lock:
            if self._sealed:
                raise WizardStateError(f"Answers are sealed; cannot set '{key}'")
            self._answers[key] = coerced
        logger.debug(f"Answer set: {key}")
        return coerced

    def get(self, key: str, default=None):
        with self._lock:
            value = self._answers.get(key, default)
            return copy.deepcopy(value)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._answers

    def __len__(self) -> int:
        with self._lock:
            return len(self._answers)

    def is_answered(self, key: str) -> bool:
        value = self.get(key)
        return value not in (None, "", [])

    def snapshot(self) -> Dict[str, AnswerValue]:
        """Deep copy of the current answers; later writes do not show up in it."""
        with self._lock:
            return copy.deepcopy(self._answers)

    def seal(self):
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed
