"""Error taxonomy for rule generation."""

from typing import Optional


class SiemGenError(Exception):
    """Base class for all siemgen errors."""


class ProviderError(SiemGenError):
    """The LLM backend rejected or failed the call (auth, network, rate limit)."""


class ExtractionError(SiemGenError):
    """No JSON object could be recovered from the model output."""


class ValidationError(SiemGenError):
    """The parsed payload lacks the fields a rule needs."""


class GenerationError(SiemGenError):
    """
    The single error type callers of the generator see.

    Wraps whatever failed below the facade and keeps its message.
    """

    def __init__(self, message: str, cause_message: Optional[str] = None):
        super().__init__(message)
        self.cause_message = cause_message if cause_message is not None else message
