"""
Models package for dispatch results, conversation helpers and errors.
"""

from .dispatch import (
    AttemptRecord,
    ChatResult,
    CompletionResult,
    DispatchExhausted,
    DispatchOutcome,
    DispatchSuccess,
)
from .errors import (
    ClaritoolError,
    CompletionError,
    ConfigurationError,
    EmptyAnswerError,
    ExhaustionError,
    MalformedResponseError,
    NetworkError,
    OverloadError,
    ProviderError,
)

__all__ = [
    "AttemptRecord",
    "ChatResult",
    "ClaritoolError",
    "CompletionError",
    "CompletionResult",
    "ConfigurationError",
    "DispatchExhausted",
    "DispatchOutcome",
    "DispatchSuccess",
    "EmptyAnswerError",
    "ExhaustionError",
    "MalformedResponseError",
    "NetworkError",
    "OverloadError",
    "ProviderError",
]
