import traceback

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette import status
from slowapi.errors import RateLimitExceeded

from authserver.utils.logging import logger
from authserver.utils.response import error

# Semantic errors for the auth routes
class AuthError(HTTPException):
    def __init__(self, detail="Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class BadRequestError(HTTPException):
    def __init__(self, detail="Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

# ---- Exception handlers (registered in main.create_app) ----
async def handle_http_exception(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException {exc.status_code}: {exc.detail}")
    return error(exc.detail, status_code=exc.status_code, headers=getattr(exc, "headers", None))

async def handle_validation_error(request: Request, exc: RequestValidationError | ValidationError):
    logger.warning("ValidationError")
    return error(
        "validation_error",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=jsonable_encoder(exc.errors()),
    )

async def handle_rate_limit(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit hit on {request.url.path}: {exc.detail}")
    return error("rate_limited", status_code=status.HTTP_429_TOO_MANY_REQUESTS)

def _stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

async def handle_unhandled(request: Request, exc: Exception):
    """
    Last-resort handler: every error that escapes middleware or routes
    (CORS rejections included) ends up here and gets a 500.
    """
    stack = _stack(exc)
    logger.error(
        "Error details: %s",
        {"message": str(exc), "stack": stack, "query": getattr(exc, "query", None)},
    )

    body = {"message": "Something went wrong!", "error": str(exc)}
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.is_development:
        body["details"] = stack
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
