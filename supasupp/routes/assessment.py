# supasupp/routes/assessment.py
import threading
from typing import Callable, Optional

from flask import Blueprint, current_app, jsonify, request
from langchain_core.language_models.llms import LLM

from supasupp.common.custom_exception import AnswerValidationError, WizardStateError
from supasupp.common.logger import get_logger
from supasupp.components.ai_orchestrator import AIOrchestrator
from supasupp.components.api_models import get_llm_client
from supasupp.components.assessment_results import AssessmentResults, build_assessment_results
from supasupp.components.wizard_controller import WizardController
from supasupp.config.config import AISettings

bp = Blueprint("assessment", __name__)
logger = get_logger(__name__)

EXTENSION_KEY = "supasupp"


class AssessmentSession:
    """The one in-memory assessment served by this process. Nothing is persisted."""

    def __init__(self, settings: AISettings, client_factory: Callable[[AISettings], LLM] = get_llm_client):
        self.settings = settings
        self.orchestrator = AIOrchestrator(settings, client_factory)
        self._lock = threading.Lock()
        self._results: Optional[AssessmentResults] = None
        self.wizard = WizardController(self.orchestrator)

    def reset(self):
        with self._lock:
            self.wizard.close()
            self.wizard = WizardController(self.orchestrator)
            self._results = None
        logger.info("Assessment session reset")

    def results(self) -> AssessmentResults:
        with self._lock:
            if self._results is None:
                self._results = build_assessment_results(self.orchestrator, self.wizard.submitted_answers)
            return self._results


def _session() -> AssessmentSession:
    return current_app.extensions[EXTENSION_KEY]


@bp.route("/api/credential", methods=["POST"])
def set_credential():
    """
    Body: {"api_key": "<gemini key>"}; an empty value clears the credential.
    """
    data = request.get_json(silent=True) or {}
    api_key = data.get("api_key")
    if api_key is not None and not isinstance(api_key, str):
        return jsonify({"error": "api_key must be a string"}), 400

    settings = _session().settings
    settings.set_credential(api_key)
    logger.info(f"Credential {'configured' if settings.has_credential() else 'cleared'}")
    return jsonify({"configured": settings.has_credential()})


@bp.route("/api/assessment", methods=["GET"])
def get_assessment():
    return jsonify(_session().wizard.to_dict())


@bp.route("/api/assessment/answers", methods=["POST"])
def set_answer():
    """
    Body: {"key": "age", "value": "34"}
    """
    data = request.get_json(silent=True) or {}
    if "key" not in data or "value" not in data:
        return jsonify({"error": "key and value fields required"}), 400

    wizard = _session().wizard
    try:
        wizard.set_answer(data["key"], data["value"])
    except AnswerValidationError as e:
        return jsonify({"error": e.message}), 400
    except WizardStateError as e:
        return jsonify({"error": e.message}), 409
    return jsonify(wizard.to_dict())


@bp.route("/api/assessment/next", methods=["POST"])
def next_step():
    wizard = _session().wizard
    try:
        wizard.advance()
    except WizardStateError as e:
        return jsonify({"error": e.message}), 409
    return jsonify(wizard.to_dict())


@bp.route("/api/assessment/back", methods=["POST"])
def previous_step():
    wizard = _session().wizard
    wizard.retreat()
    return jsonify(wizard.to_dict())


@bp.route("/api/assessment/reset", methods=["POST"])
def reset_assessment():
    session = _session()
    session.reset()
    return jsonify(session.wizard.to_dict())


@bp.route("/api/results", methods=["GET"])
def get_results():
    session = _session()
    wizard = session.wizard
    if not wizard.submitted:
        return jsonify({"error": "Assessment not submitted yet"}), 409
    if not wizard.submitted_answers:
        return jsonify({"error": "No assessment data found. Please complete the assessment first."}), 400

    try:
        results = session.results()
    except Exception as e:
        logger.exception("Results generation failed: %s", e)
        return jsonify({"error": "Results failed", "detail": str(e)}), 500
    return jsonify(results.to_dict())
