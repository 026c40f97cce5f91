"""Error taxonomy and the FastAPI handlers that render it.

Every error reaches the client as ``{"error": ..., "message": ...}``;
conflicts additionally carry ``currentVersion`` and ``yourVersion``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StockroomError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "InternalError"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class NotFound(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"
    default_message = "Not found"


class Forbidden(StockroomError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "You do not have permission to perform this action"


class Unauthorized(StockroomError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Sign in required"


class ValidationError(StockroomError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationError"
    default_message = "Invalid data"


class AlreadyExists(StockroomError):
    status_code = status.HTTP_409_CONFLICT
    error = "AlreadyExists"
    default_message = "Resource already exists"


class Conflict(StockroomError):
    """The caller's expected version no longer matches the stored one."""

    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    default_message = (
        "This resource was modified by another user. "
        "Please refresh the page and try again"
    )

    def __init__(
        self,
        current_version: int,
        your_version: int,
        message: str | None = None,
    ) -> None:
        self.current_version = current_version
        self.your_version = your_version
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "currentVersion": self.current_version,
            "yourVersion": self.your_version,
        }


class StoreError(StockroomError):
    """Persistence failure. The message never carries driver details."""

    error = "StoreError"
    default_message = "Database error"


class UpstreamAuthError(StockroomError):
    """The session oracle was unreachable or answered with garbage."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "UpstreamAuthError"
    default_message = "Session service unavailable"


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(StockroomError)
    async def stockroom_error_handler(request: Request, exc: StockroomError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else "Invalid data"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": ValidationError.error,
                "message": message,
                "details": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                    for e in errors
                ],
            },
        )
