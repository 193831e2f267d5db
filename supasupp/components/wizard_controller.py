"""
Assessment wizard state machine.

Linear flow over a fixed list of steps. Entering the AI step starts a
background fetch of personalized follow-up questions; advancing past the last
step seals the answers and hands the snapshot to the results stage.

Usage:
    wizard = WizardController(AIOrchestrator(AISettings.from_env()))
    wizard.set_answer("age", "34")
    wizard.advance()
    ...
    wizard.advance()              # enters the AI step, fetch starts
    wizard.wait_for_follow_ups()
    wizard.advance()              # submits
"""
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from supasupp.common.assessment_steps import ASSESSMENT_STEPS, FieldSpec, WizardStep, ai_step_index, field_index
from supasupp.common.custom_exception import WizardStateError
from supasupp.common.fallbacks import fallback_follow_up_questions
from supasupp.common.logger import get_logger
from supasupp.common.response_schema import FollowUpQuestion
from supasupp.components.ai_orchestrator import ADVISORY_TRANSPORT, TRANSPORT_MESSAGE, Advisory, AIOrchestrator
from supasupp.components.answer_store import AnswerStore, AnswerValue

logger = get_logger(__name__)


class WizardPhase(Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


def follow_up_field_spec(question: FollowUpQuestion) -> FieldSpec:
    return FieldSpec(name=question.id, type=question.type, options=question.options)


class WizardController:
    """
    Args:
        orchestrator: source of follow-up questions for the AI step
        steps: ordered step list with exactly one AI step, not the first
        executor: runs follow-up fetches; a private thread pool is created if omitted
        on_submit: called with the final answer snapshot once the wizard submits
    """

    def __init__(
        self,
        orchestrator: AIOrchestrator,
        steps: Optional[List[WizardStep]] = None,
        executor: Optional[Executor] = None,
        on_submit: Optional[Callable[[Dict[str, AnswerValue]], Any]] = None,
    ):
        self.steps = list(steps if steps is not None else ASSESSMENT_STEPS)
        self.ai_step_index = ai_step_index(self.steps)
        self.answers = AnswerStore(field_index(self.steps))

        self._orchestrator = orchestrator
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="supasupp-followups")
        self._on_submit = on_submit

        self._lock = threading.RLock()
        self._follow_ups_changed = threading.Condition(self._lock)

        self._current_step_index = 0
        self._phase = WizardPhase.IN_PROGRESS
        self._submitted_answers: Optional[Dict[str, AnswerValue]] = None

        self._request_token = 0
        self._follow_up_future: Optional[Future] = None
        self._loading = False
        self._pending_follow_ups: List[FollowUpQuestion] = []
        self._follow_up_advisory: Optional[Advisory] = None

        logger.info(f"WizardController initialized: steps={len(self.steps)}, ai_step={self.ai_step_index}")

    # -------------------------
    # State
    # -------------------------
    @property
    def current_step_index(self) -> int:
        return self._current_step_index

    @property
    def current_step(self) -> WizardStep:
        return self.steps[self._current_step_index]

    @property
    def phase(self) -> WizardPhase:
        return self._phase

    @property
    def submitted(self) -> bool:
        return self._phase is WizardPhase.SUBMITTED

    @property
    def submitted_answers(self) -> Optional[Dict[str, AnswerValue]]:
        return self._submitted_answers

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def pending_follow_ups(self) -> List[FollowUpQuestion]:
        with self._lock:
            return list(self._pending_follow_ups)

    @property
    def follow_up_advisory(self) -> Optional[Advisory]:
        return self._follow_up_advisory

    @property
    def is_last_step(self) -> bool:
        return self._current_step_index == len(self.steps) - 1

    @property
    def progress(self) -> float:
        return (self._current_step_index + 1) / len(self.steps) * 100

    def step_status(self, index: Optional[int] = None) -> Dict[str, Any]:
        """Required fields of a step that have no answer yet."""
        index = self._current_step_index if index is None else index
        step = self.steps[index]
        missing = [spec.name for spec in step.fields if spec.required and not self.answers.is_answered(spec.name)]
        return {"index": index, "complete": not missing, "missing": missing}

    # -------------------------
    # Navigation
    # -------------------------
    def advance(self) -> WizardPhase:
        submitted_snapshot = None
        entered_ai_step = False

        with self._lock:
            if self.submitted:
                raise WizardStateError("Assessment already submitted")
            if self._current_step_index == self.ai_step_index and self._loading:
                raise WizardStateError("Follow-up questions are still loading")

            if self._current_step_index < len(self.steps) - 1:
                self._current_step_index += 1
                entered_ai_step = self._current_step_index == self.ai_step_index
                logger.info(f"Advanced to step {self._current_step_index}: {self.current_step.title}")
            else:
                self.answers.seal()
                submitted_snapshot = self.answers.snapshot()
                self._submitted_answers = submitted_snapshot
                self._phase = WizardPhase.SUBMITTED
                logger.info(f"Assessment submitted with {len(submitted_snapshot)} answers")

        if entered_ai_step:
            self._start_follow_up_fetch()
        if submitted_snapshot is not None and self._on_submit is not None:
            self._on_submit(submitted_snapshot)
        return self._phase

    def retreat(self) -> int:
        entered_ai_step = False
        with self._lock:
            if self.submitted or self._current_step_index == 0:
                return self._current_step_index
            self._current_step_index -= 1
            entered_ai_step = self._current_step_index == self.ai_step_index
            logger.info(f"Went back to step {self._current_step_index}: {self.current_step.title}")

        if entered_ai_step:
            self._start_follow_up_fetch()
        return self._current_step_index

    # -------------------------
    # Answers
    # -------------------------
    def set_answer(self, key: str, value) -> AnswerValue:
        with self._lock:
            if self.submitted:
                raise WizardStateError(f"Assessment already submitted; cannot set '{key}'")
            if self._loading and self.current_step.is_ai_step:
                raise WizardStateError(f"Follow-up questions are still loading; cannot set '{key}'")
            question = next((q for q in self._pending_follow_ups if q.id == key), None)
            spec = follow_up_field_spec(question) if question is not None else None
            return self.answers.set(key, value, spec=spec)

    def snapshot(self) -> Dict[str, AnswerValue]:
        return self.answers.snapshot()

    # -------------------------
    # AI step
    # -------------------------
    def _start_follow_up_fetch(self):
        with self._lock:
            self._request_token += 1
            token = self._request_token
            self._loading = True
            self._follow_up_advisory = None
            self._pending_follow_ups = []
            if self._follow_up_future is not None:
                # Only succeeds if the older fetch has not started yet
                self._follow_up_future.cancel()
            snapshot = self.answers.snapshot()
            self._follow_up_future = self._executor.submit(self._fetch_follow_ups, token, snapshot)
        logger.info(f"Follow-up question request #{token} started")

    def _fetch_follow_ups(self, token: int, snapshot: Dict[str, AnswerValue]):
        try:
            result = self._orchestrator.generate_follow_up_questions(snapshot)
            questions, advisory = list(result.value), result.advisory
        except Exception as e:
            logger.exception(f"Follow-up question request #{token} raised: {e}")
            questions = fallback_follow_up_questions()
            advisory = Advisory(ADVISORY_TRANSPORT, TRANSPORT_MESSAGE, str(e))

        with self._lock:
            if token != self._request_token:
                logger.info(f"Dropping stale follow-up result #{token} (latest is #{self._request_token})")
                return
            self._pending_follow_ups = questions
            self._follow_up_advisory = advisory
            self._loading = False
            self._follow_ups_changed.notify_all()
        logger.info(f"Follow-up question request #{token} committed {len(questions)} questions")

    def wait_for_follow_ups(self, timeout: Optional[float] = None) -> bool:
        """Block until the latest follow-up request has been committed. False on timeout."""
        with self._follow_ups_changed:
            return self._follow_ups_changed.wait_for(lambda: not self._loading, timeout)

    def close(self):
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            step = self.current_step
            return {
                "current_step_index": self._current_step_index,
                "total_steps": len(self.steps),
                "progress": round(self.progress),
                "phase": self._phase.value,
                "step": {
                    "title": step.title,
                    "description": step.description,
                    "is_ai_step": step.is_ai_step,
                    "fields": [
                        {"name": spec.name, "type": spec.type, "required": spec.required, "options": spec.options}
                        for spec in step.fields
                    ],
                },
                "status": self.step_status(),
                "loading": self._loading,
                "follow_up_questions": [q.model_dump() for q in self._pending_follow_ups],
                "advisory": self._follow_up_advisory.to_dict() if self._follow_up_advisory else None,
                "answers": self.answers.snapshot(),
            }
