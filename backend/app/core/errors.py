import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map onto the response envelope."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, **self.extra}


class InvalidRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientStockError(InvalidRequestError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f'Insufficient stock for "{product_name}": {available} available, {requested} requested',
            product_id=product_id,
            available=available,
            requested=requested,
        )


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ReferenceConflictError(AppError):
    """Delete refused because other rows still point at the target."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, references: Optional[Dict[str, int]] = None):
        if references is None:
            super().__init__(message)
        else:
            super().__init__(message, references=references)


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    missing = []
    first_problem = None
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        if err.get("type") == "missing":
            missing.append(field)
        elif first_problem is None:
            first_problem = f"Invalid value for {field}: {err.get('msg')}"
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    return first_problem or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return _error(exc.status_code, f"Route not found: {request.method} {request.url.path}")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
