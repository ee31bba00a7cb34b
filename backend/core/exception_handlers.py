import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def validation_message(exc: RequestValidationError) -> str:
    """First failing field as a short human message."""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    err = errors[0]
    msg = str(err.get("msg", "invalid value"))
    # Our own field validators already name the field
    if err.get("type") == "value_error":
        return msg.removeprefix("Value error, ")
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    if loc:
        return f"{'.'.join(loc)}: {msg}"
    return msg


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            content={"error": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(content={"error": validation_message(exc)}, status_code=400)

    # Last resort for failures outside unhandled_errors (i.e. in outer middleware);
    # these responses bypass CORS
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        return internal_error_response(request, exc)


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(content={"error": "internal_server_error"}, status_code=500)


async def unhandled_errors(request: Request, call_next):
    """Turn route failures into a logged JSON 500 inside the CORS layer."""
    try:
        return await call_next(request)
    except Exception as exc:
        return internal_error_response(request, exc)
