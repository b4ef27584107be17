from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.features.scan.exceptions import EvaluationError, NavigationError, ValidationError
from app.platform.logger import get_logger
from app.platform.response import error_response

logger = get_logger("exceptions")


def _request_validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        loc = error.get("loc") or ()
        if error.get("type") == "missing":
            return "URL required"
        if "url" in loc:
            return "Invalid URL format. Use http:// or https://"
    return "Invalid request body"


def add_exception_handlers(app):
    @app.exception_handler(ValidationError)
    async def scan_validation_handler(request: Request, exc: ValidationError):
        logger.info(f"Rejected scan request: {exc.message}")
        return error_response(exc.message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(NavigationError)
    @app.exception_handler(EvaluationError)
    async def scan_failure_handler(request: Request, exc):
        logger.error(f"Scan Error: {exc.message}")
        return error_response(f"Server error: {exc.message}")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _request_validation_message(exc)
        logger.info(f"Rejected request body on {request.url.path}: {message}")
        return error_response(message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Global Error: {exc}")
        return error_response("Unexpected server error")
