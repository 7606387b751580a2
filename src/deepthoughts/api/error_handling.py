"""Exception handlers — map the error taxonomy onto one response envelope.

    {"errors": [{"message": "You need to be logged in!", "code": "UNAUTHENTICATED"}]}

Learn: Unauthenticated (401) and BadUserInput (422) carry distinct codes
so clients can tell "log in first" from "fix your input".
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import structlog

from deepthoughts.errors import BadUserInput, DeepThoughtsError

logger = structlog.get_logger()


def _error_response(status_code: int, message: str, code: str, details: list | None = None) -> JSONResponse:
    error = {"message": message, "code": code}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"errors": [error]})


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for domain errors and malformed request bodies."""

    @app.exception_handler(DeepThoughtsError)
    async def handle_domain_error(request: Request, exc: DeepThoughtsError):
        logger.warning(
            "api.error",
            path=request.url.path,
            code=exc.code,
            status_code=exc.status_code,
        )
        details = exc.details if isinstance(exc, BadUserInput) else None
        return _error_response(exc.status_code, exc.message, exc.code, details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("api.malformed_request", path=request.url.path)
        return _error_response(
            BadUserInput.status_code,
            "Malformed request body",
            BadUserInput.code,
            jsonable_encoder(exc.errors()),
        )
