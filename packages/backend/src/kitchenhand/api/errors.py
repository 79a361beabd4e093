"""Exception handlers — turn AppError and friends into themed pages.

Learn: 401/400/404 render their own HTML page. 500s render one generic
message and log the full exception server-side only. Anything no other
handler claims (a bug, a driver error outside SQLAlchemy) lands in the
catch-all and gets the same generic 500 page.

The 401 and 500 responses must never take the request down with them,
so if their template fails to render they fall back to plain text.
Every 401 also carries `WWW-Authenticate: Bearer`.
"""

import structlog
from fastapi import FastAPI, Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse, Response

from kitchenhand.api.templates import render
from kitchenhand.errors import (
    AppError,
    DatabaseFailure,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
)

logger = structlog.get_logger()

AUTH_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def unauthorized_response(request: Request) -> Response:
    try:
        response = render(request, NotAuthenticated.template, status_code=401)
    except Exception:
        logger.exception("errors.unauthorized_template_failed")
        response = PlainTextResponse("Authentication required", status_code=401)
    response.headers.update(AUTH_CHALLENGE)
    return response


def server_error_response(request: Request, status_code: int = 500) -> Response:
    try:
        return render(request, "500.html", status_code=status_code)
    except Exception:
        logger.exception("errors.server_error_template_failed")
        return PlainTextResponse("Internal Server Error", status_code=status_code)


async def app_error_handler(request: Request, exc: AppError) -> Response:
    if isinstance(exc, NotAuthenticated):
        return unauthorized_response(request)

    if isinstance(exc, InvalidCredentials):
        return render(request, exc.template, {"error": exc.message}, status_code=exc.status_code)

    if exc.status_code >= 500:
        logger.error(
            "request.failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            detail=exc.message,
            exc_info=exc,
        )
        return server_error_response(request, exc.status_code)

    return render(request, exc.template, {"message": exc.message}, status_code=exc.status_code)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> Response:
    logger.exception("db.error", path=request.url.path, exc_info=exc)
    return await app_error_handler(request, DatabaseFailure())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code == 404:
        return await app_error_handler(request, NotFound("Page not found"))
    if exc.status_code == 401:
        return unauthorized_response(request)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.exception(
        "request.unhandled",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return server_error_response(request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    # Starlette routes this one to ServerErrorMiddleware, which re-raises
    # after sending the response.
    app.add_exception_handler(Exception, unhandled_error_handler)
