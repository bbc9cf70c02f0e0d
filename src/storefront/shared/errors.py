"""Failure taxonomy for storefront operations.

Business rules raise one of the typed errors below. Each carries a stable
``reason`` string that clients branch on, so nobody has to parse the prose
``message``. The HTTP layer renders every failure as
``{"success": false, "message": ..., "reason": ..., **context}``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StorefrontError(Exception):
    status_code = 400
    default_reason = "error"

    def __init__(self, message: str, reason: str | None = None, **context):
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason
        self.context = context

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "reason": self.reason, **self.context}


class NotFoundError(StorefrontError):
    status_code = 404
    default_reason = "not_found"


class ConflictError(StorefrontError):
    status_code = 409
    default_reason = "conflict"


class ForbiddenError(StorefrontError):
    status_code = 403
    default_reason = "forbidden"


class InvalidRequestError(StorefrontError):
    status_code = 400
    default_reason = "validation_error"


def _flatten_messages(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            errors = errors if isinstance(errors, list | tuple) else [errors]
            parts.extend(f"{field}: {error}" for error in errors)
        return "; ".join(parts)
    return str(messages)


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then override them with the storefront envelope."""
    register_exception_handlers(app)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.info(
            "Request failed",
            path=request.url.path,
            status_code=exc.status_code,
            reason=exc.reason,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(ValidationError)
    async def domain_validation_handler(request: Request, exc: ValidationError):
        messages = getattr(exc, "messages", None) or {}
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": _flatten_messages(messages) or str(exc),
                "reason": "validation_error",
                "errors": messages,
            },
        )

    @app.exception_handler(ObjectNotFoundError)
    async def object_not_found_handler(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": str(exc) or "Not found", "reason": "not_found"},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "; ".join(f"{e['field']}: {e['message']}" for e in errors) or "Invalid request",
                "reason": "validation_error",
                "errors": errors,
            },
        )
