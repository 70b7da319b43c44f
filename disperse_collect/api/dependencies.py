import hmac
import logging
from typing import List

from fastapi import Header, HTTPException, Request, status

from disperse_collect.core.service import DistributionService

logger = logging.getLogger(__name__)

_ALLOWLIST_PATHS = {
    "/",
    "/health",
    "/docs",
    "/docs/oauth2-redirect",
    "/openapi.json",
    "/redoc",
}


def get_api_keys(request: Request) -> List[str]:
    return list(request.app.state.config.api_keys)


async def api_key_protection(
    request: Request,
    x_api_key: str = Header(default=None, alias="X-API-KEY"),
):
    """Require a configured API key on every non-allowlisted path.

    With no keys configured the guard is open (local development).
    """
    valid_keys = get_api_keys(request)
    if not valid_keys or request.url.path in _ALLOWLIST_PATHS:
        return

    candidate = (x_api_key or "").strip()
    ok = bool(candidate) and any(hmac.compare_digest(candidate, k) for k in valid_keys)
    if not ok:
        logger.info("API key check failed: path=%s header_present=%s", request.url.path, bool(x_api_key))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key",
        )


def get_distribution_service(request: Request) -> DistributionService:
    return request.app.state.distribution_service
