# supasupp/application.py
import datetime
from typing import Callable, Optional

from flask import Flask, jsonify
from langchain_core.language_models.llms import LLM

from supasupp.common.logger import get_logger
from supasupp.components.api_models import get_llm_client
from supasupp.config.config import AISettings
from supasupp.routes.assessment import EXTENSION_KEY, AssessmentSession, bp as assessment_bp

logger = get_logger(__name__)


def create_app(
    settings: Optional[AISettings] = None,
    client_factory: Callable[[AISettings], LLM] = get_llm_client,
) -> Flask:
    app = Flask(__name__)
    settings = settings or AISettings.from_env()
    app.extensions[EXTENSION_KEY] = AssessmentSession(settings, client_factory)
    app.register_blueprint(assessment_bp)

    start_time = datetime.datetime.utcnow()

    @app.route("/health", methods=["GET"])
    def health():
        uptime = (datetime.datetime.utcnow() - start_time).total_seconds()
        return jsonify({
            "status": "ok",
            "uptime_seconds": int(uptime),
            "credential_configured": settings.has_credential(),
            "timestamp": datetime.datetime.utcnow().isoformat(),
        })

    if not settings.has_credential():
        logger.warning("⚠️ No Gemini API key configured. AI steps will use fallback content until one is set.")
    return app
