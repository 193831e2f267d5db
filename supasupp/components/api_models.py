import requests
from langchain_core.language_models.llms import LLM
from langchain_core.callbacks import CallbackManagerForLLMRun
from typing import Optional, List, Dict, Any
from pydantic import Field
from supasupp.common.logger import get_logger
from supasupp.common.custom_exception import ConfigurationError, TransportError
from supasupp.config.config import AISettings, API_TIMEOUT

logger = get_logger(__name__)


def extract_text(data: Any) -> str:
    """Pull candidates[0].content.parts[0].text out of a generateContent reply."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise TransportError("Gemini API response carried no generated text", e)
    if not isinstance(text, str):
        raise TransportError(f"Gemini API text field is {type(text).__name__}, not a string")
    return text


class GeminiLLM(LLM):
    """LangChain-compatible wrapper for the Gemini generateContent endpoint"""
    api_key: str = Field(default="")
    endpoint: str = Field(default="")
    timeout: int = Field(default=API_TIMEOUT)
    generation_config: Dict[str, Any] = Field(default_factory=dict)

    @property
    def _llm_type(self) -> str:
        return "gemini"

    @property
    def _identifying_params(self) -> Dict[str, Any]:
        return {"endpoint": self.endpoint, **self.generation_config}

    def _call(
        self,
        prompt: str,
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> str:
        """Single attempt; every failure surfaces as ConfigurationError or TransportError"""
        if not self.api_key:
            raise ConfigurationError("No API key provided. Please add your Gemini API key in settings.")

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {**self.generation_config, **kwargs},
        }

        try:
            response = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Gemini API request failed: {str(e)}")
            raise TransportError("Gemini API unreachable", e)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Gemini API returned a non-JSON body (HTTP {response.status_code})", e)

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.error(f"Gemini API error (HTTP {response.status_code}): {message}")
            raise TransportError(f"API Error: {message}")

        if not response.ok:
            raise TransportError(f"Gemini API returned HTTP {response.status_code}")

        return extract_text(data)


def get_llm_client(settings: AISettings) -> LLM:
    """Build a Gemini client bound to the credential configured right now."""
    return GeminiLLM(
        api_key=settings.get_credential(),
        endpoint=settings.endpoint,
        timeout=settings.timeout,
        generation_config=settings.generation_config(),
    )
