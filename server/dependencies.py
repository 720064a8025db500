"""FastAPI dependencies for monitoring auth and orchestrator access."""

import secrets

from fastapi import Header, HTTPException, Query, Request, status

from config.config import get_config
from server.utils import redact_query_params, redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def _extract_monitor_token(key: str | None, authorization: str | None) -> str | None:
    if key:
        return key
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return None


async def require_monitor_secret(
    request: Request,
    key: str | None = Query(None),
    authorization: str | None = Header(None),
):
    """Gate the activity log behind MONITOR_SECRET (query ?key= or Bearer token)."""
    expected = get_config().MONITOR_SECRET
    supplied = _extract_monitor_token(key, authorization)
    request_id = getattr(request.state, "request_id", "unknown")

    # compare bytes: compare_digest rejects non-ASCII str
    if not expected or not supplied or not secrets.compare_digest(
        supplied.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning(
            "Monitoring authentication failed",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "secret_configured": bool(expected),
                    "headers": redact_sensitive_headers(dict(request.headers)),
                    "query": redact_query_params(dict(request.query_params)),
                }
            },
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    return supplied


def get_orchestrator():
    """Dependency to get orchestrator instance (singleton pattern)."""
    from orchestrator.core import ClaritoolOrchestrator

    if not hasattr(get_orchestrator, "_instance"):
        get_orchestrator._instance = ClaritoolOrchestrator.from_config()
    return get_orchestrator._instance


async def shutdown_orchestrator() -> None:
    instance = getattr(get_orchestrator, "_instance", None)
    if instance is not None:
        await instance.aclose()
        del get_orchestrator._instance
