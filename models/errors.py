"""
Error taxonomy for completion dispatch.

Per-candidate failures (CompletionError subclasses) are raised by completion
clients and recovered by the dispatcher. ExhaustionError is what surfaces when
every candidate in a pool failed.
"""


class ClaritoolError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ClaritoolError):
    """A required server credential or setting is missing."""


class CompletionError(ClaritoolError):
    """One completion attempt against one model failed."""

    code = "unknown"

    def __init__(self, message: str, *, model_id: str | None = None) -> None:
        super().__init__(message)
        self.model_id = model_id


class NetworkError(CompletionError):
    """The provider could not be reached (connection error, transport timeout)."""

    code = "network"


class OverloadError(CompletionError):
    """The provider answered 429: rate limited or overloaded."""

    code = "overloaded"


class ProviderError(CompletionError):
    """The provider answered with a non-2xx status other than 429."""

    code = "provider_error"

    def __init__(self, message: str, *, model_id: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, model_id=model_id)
        self.status_code = status_code


class MalformedResponseError(CompletionError):
    """A 2xx body that is not JSON or lacks the expected structure."""

    code = "invalid_response"


class EmptyAnswerError(CompletionError):
    """A well-formed 2xx body with no usable answer text."""

    code = "empty_response"


class ExhaustionError(ClaritoolError):
    """Every candidate in the pool failed; carries the last diagnostic message."""
