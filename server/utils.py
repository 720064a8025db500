"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping, Sequence
from typing import Any

from fastapi.responses import JSONResponse

SENSITIVE_HEADERS = {"authorization", "x-api-key"}
SENSITIVE_QUERY_PARAMS = {"key"}
REQUIRED_BODY_FIELDS = {"messages", "query"}
# absent, empty, or not a list where a list is expected
REQUIRED_ERROR_TYPES = {"missing", "too_short", "string_too_short", "list_type"}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validation_error_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Collapse pydantic validation errors into one user-facing message.

    Broken JSON or a missing body reads "Invalid JSON". A required top-level
    field that is absent or empty reads "<field> is required"; anything else
    reads "Invalid request: <field>: <detail>".
    """
    for err in errors:
        loc = tuple(err.get("loc") or ())
        if err.get("type") == "json_invalid" or loc == ("body",):
            return "Invalid JSON"
    for err in errors:
        loc = tuple(err.get("loc") or ())
        if (
            len(loc) == 2
            and loc[0] == "body"
            and loc[1] in REQUIRED_BODY_FIELDS
            and err.get("type") in REQUIRED_ERROR_TYPES
        ):
            return f"{loc[1]} is required"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in tuple(first.get("loc") or ())[1:])
        detail = first.get("msg", "invalid value")
        return f"Invalid request: {field}: {detail}" if field else f"Invalid request: {detail}"
    return "Invalid request"


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def redact_query_params(params: Mapping[str, str]) -> dict[str, str]:
    return {k: ("[REDACTED]" if k in SENSITIVE_QUERY_PARAMS and v else v) for k, v in params.items()}
