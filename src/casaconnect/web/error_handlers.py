import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from casaconnect.errors import AccessDeniedError, AuthenticationError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing.

    `success: false` matches the envelope the browser ApiClient expects.
    """
    content: dict[str, str | bool] = {"success": False, "message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def validation_error_handler(_: Request, exc: Exception) -> Response:
    """Answer malformed request bodies with the 400 envelope instead of FastAPI's 422."""
    assert isinstance(exc, RequestValidationError)  # noqa: S101
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{field}: {message}" if field else message)
    return create_json_error_response(
        status_code=400, message="; ".join(messages) or "Invalid request", error_type="validation_error"
    )


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500), including an unreachable session store."""
    logger.exception("unexpected_error", path=request.url.path, error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
