"""Error taxonomy shared by the store service.

Business code raises these; ``register_exception_handlers`` renders them as
``{"success": false, "error": ..., "code": ...}`` with the class status code.
"""

from typing import Optional

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from libs.common.logging import get_logger

logger = get_logger(__name__)


class StoreError(Exception):
    """Base class for expected, client-presentable failures."""

    status_code: int = 500
    code: str = "store_error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(message)


class ValidationError(StoreError):
    """Missing or malformed input. Raised before any side effect."""

    status_code = 400
    code = "validation_error"


class NotFoundError(StoreError):
    status_code = 404
    code = "not_found"


class AuthenticityError(StoreError):
    """Signature mismatch on a payment confirmation or webhook."""

    status_code = 400
    code = "invalid_signature"


class InvalidTransitionError(StoreError):
    """A status change not present in the transition table."""

    status_code = 409
    code = "invalid_transition"


class ConfigurationError(StoreError):
    """Missing credentials or store configuration."""

    status_code = 500
    code = "configuration_error"


class UpstreamError(StoreError):
    """A gateway or carrier call failed."""

    status_code = 502
    code = "upstream_error"

    def __init__(
        self,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        response_data: Optional[dict] = None,
        code: Optional[str] = None,
    ):
        self.upstream_status = upstream_status
        self.response_data = response_data or {}
        super().__init__(message, code=code)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s",
            exc.message,
            extra={"extra_fields": {"code": exc.code}},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
