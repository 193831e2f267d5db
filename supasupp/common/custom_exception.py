# supasupp/common/custom_exception.py
"""
Error taxonomy for the assessment pipeline.

ConfigurationError, TransportError and SchemaError describe the three ways an
AI generation can fail. They are raised inside the orchestrator and always
converted into fallback content plus an advisory; they never reach callers of
AIOrchestrator. AnswerValidationError and WizardStateError are raised to the
caller of WizardController.
"""
import sys
from typing import Optional


class CustomException(Exception):
    def __init__(self, message: str, error_detail: Optional[BaseException] = None):
        self.message = message
        self.error_detail = error_detail
        self.error_message = self.get_detailed_error_message(message, error_detail)
        super().__init__(self.error_message)

    @staticmethod
    def get_detailed_error_message(message: str, error_detail: Optional[BaseException]) -> str:
        if error_detail is None:
            return message

        _, _, exc_tb = sys.exc_info()
        if exc_tb is None:
            return f"{message} | Error: {error_detail}"

        file_name = exc_tb.tb_frame.f_code.co_filename
        line_number = exc_tb.tb_lineno
        return f"{message} | Error: {error_detail} | File: {file_name} | Line: {line_number}"

    def __str__(self):
        return self.error_message


class ConfigurationError(CustomException):
    """No credential configured for the generative backend."""


class TransportError(CustomException):
    """Backend unreachable, non-2xx, error payload, or no text in the reply."""


class SchemaError(CustomException):
    """Backend replied, but the text is not valid JSON of the expected shape."""


class AnswerValidationError(CustomException):
    """An answer value is outside the accepted types or fails its field spec."""


class WizardStateError(CustomException):
    """A wizard operation is not allowed in the current state."""
