"""Error handling helpers for the HTTP layer."""
from typing import Any, Dict, Tuple
import logging

from disperse_collect.core.errors import DcError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"


class ErrorHandler:
    def to_response(self, exc: Exception, context: Dict[str, Any] = None) -> Tuple[int, Dict[str, str]]:
        """Map an exception to ``(status_code, {"error": message})``.

        Caller-fixable errors carry their message; everything else is logged
        and replaced with an opaque message.
        """
        if isinstance(exc, DcError) and exc.is_client_error:
            logger.info("Rejected request (%s): %s", exc.kind.value, exc)
            return 400, {"error": str(exc)}

        logger.error("Unhandled exception in request %s: %s", context or {}, exc, exc_info=exc)
        return 500, {"error": INTERNAL_ERROR_MESSAGE}

    def validation_response(self, message: str) -> Tuple[int, Dict[str, str]]:
        logger.info("Invalid request body: %s", message)
        return 400, {"error": f"invalid request: {message}"}
