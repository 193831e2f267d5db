# supasupp/components/ai_orchestrator.py
"""
AIOrchestrator

Turns an answer snapshot into three independent generations:
- follow-up questions for the AI step of the wizard
- a markdown health analysis
- a supplement recommendation list

Every generation is total. A missing credential, a transport/backend failure
or a reply that does not validate is converted into the deterministic
fallback from supasupp.common.fallbacks, together with an Advisory telling the
caller which of the three conditions occurred. Nothing is retried.
"""
import copy
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from langchain_core.language_models.llms import LLM

from supasupp.common.custom_exception import ConfigurationError, SchemaError, TransportError
from supasupp.common.fallbacks import (
    fallback_follow_up_questions,
    fallback_health_analysis,
    fallback_recommendations,
)
from supasupp.common.logger import get_logger
from supasupp.common.response_schema import (
    FollowUpQuestion,
    ParseResult,
    Recommendation,
    parse_follow_up_questions,
    parse_health_analysis,
    parse_recommendations,
)
from supasupp.common.templates import build_prompt
from supasupp.components.api_models import get_llm_client
from supasupp.config.config import AISettings

logger = get_logger(__name__)

T = TypeVar("T")

ADVISORY_CONFIGURATION = "configuration"
ADVISORY_TRANSPORT = "transport"
ADVISORY_SCHEMA = "schema"

NO_CREDENTIAL_MESSAGE = "No API key provided. Please add your Gemini API key in settings."
TRANSPORT_MESSAGE = "Failed to get AI response. Please try again later."
SCHEMA_MESSAGE = "Received invalid response format from AI. Using fallback {label}."


@dataclass(frozen=True)
class Advisory:
    """Non-blocking notice for the user; kind is configuration, transport or schema."""
    kind: str
    message: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


@dataclass(frozen=True)
class AIResult(Generic[T]):
    value: T
    advisory: Optional[Advisory] = None

    @property
    def used_fallback(self) -> bool:
        return self.advisory is not None


class AIOrchestrator:
    """
    Args:
        settings: holds the credential and backend parameters; read at call time
        client_factory: builds the LLM for one call (defaults to the Gemini client)
    """

    def __init__(
        self,
        settings: AISettings,
        client_factory: Callable[[AISettings], LLM] = get_llm_client,
    ):
        self.settings = settings
        self.client_factory = client_factory

    # -------------------------
    # Public generations
    # -------------------------
    def generate_follow_up_questions(self, answers: Dict[str, Any]) -> AIResult[List[FollowUpQuestion]]:
        return self._generate(
            "follow_up_questions",
            answers,
            parse_follow_up_questions,
            fallback_follow_up_questions,
            label="questions",
        )

    def generate_health_analysis(self, answers: Dict[str, Any]) -> AIResult[str]:
        return self._generate(
            "health_analysis",
            answers,
            parse_health_analysis,
            fallback_health_analysis,
            label="analysis",
        )

    def generate_recommendations(self, answers: Dict[str, Any]) -> AIResult[List[Recommendation]]:
        return self._generate(
            "recommendations",
            answers,
            parse_recommendations,
            fallback_recommendations,
            label="recommendations",
        )

    def generate_results(self, answers: Dict[str, Any]) -> Tuple[AIResult[str], AIResult[List[Recommendation]]]:
        """Analysis and recommendations in parallel; returns once both have finished."""
        snapshot = copy.deepcopy(answers or {})
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="supasupp-results") as executor:
            analysis_future = executor.submit(self.generate_health_analysis, snapshot)
            recommendations_future = executor.submit(self.generate_recommendations, snapshot)
            return analysis_future.result(), recommendations_future.result()

    # -------------------------
    # Request -> validate -> fallback
    # -------------------------
    def _request_text(self, kind: str, answers: Dict[str, Any]) -> str:
        if not self.settings.has_credential():
            raise ConfigurationError(NO_CREDENTIAL_MESSAGE)
        prompt = build_prompt(kind, answers)
        llm = self.client_factory(self.settings)
        return llm.invoke(prompt)

    def _generate(
        self,
        kind: str,
        answers: Dict[str, Any],
        parser: Callable[[str], ParseResult],
        fallback: Callable[[], Any],
        label: str,
    ) -> AIResult:
        try:
            text = self._request_text(kind, answers)
            parsed = parser(text)
            if not parsed.ok:
                raise SchemaError(f"Invalid {kind} reply: {parsed.error}")
            logger.info(f"AI {kind} generated from backend")
            return AIResult(parsed.value)

        except ConfigurationError as e:
            logger.warning(f"{kind}: no credential configured, using fallback {label}")
            advisory = Advisory(ADVISORY_CONFIGURATION, NO_CREDENTIAL_MESSAGE, str(e))
        except TransportError as e:
            logger.warning(f"{kind}: backend call failed ({e.message}), using fallback {label}")
            advisory = Advisory(ADVISORY_TRANSPORT, TRANSPORT_MESSAGE, str(e))
        except SchemaError as e:
            logger.warning(f"{kind}: {e.message}, using fallback {label}")
            advisory = Advisory(ADVISORY_SCHEMA, SCHEMA_MESSAGE.format(label=label), str(e))
        except Exception as e:
            # Any other client failure is a transport failure from the caller's point of view
            logger.exception(f"{kind}: unexpected error from LLM client: {e}")
            advisory = Advisory(ADVISORY_TRANSPORT, TRANSPORT_MESSAGE, str(e))

        return AIResult(fallback(), advisory)
