"""
FastAPI application for the User Management service.

Builds the app, registers the routers, and maps every error to the uniform
body `{"status": ..., "code": ..., "message": [...]}`.

Run locally with:
    python -m user_management.api.main
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from user_management.config import AppConfig, settings
from user_management.database.session import close_engine, create_all_tables, ping_database
from user_management.errors import ErrorCode, UserManagementError
from user_management.schemas import ErrorResponse

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

STATUS_NAMES: Dict[int, str] = {
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_SERVER_ERROR",
}

_VALUE_ERROR_PREFIX = "Value error, "


def configure_logging(config: AppConfig | None = None) -> None:
    config = config or settings
    logging.basicConfig(level=config.api.log_level, format=LOG_FORMAT)


def error_body(http_status: int, code: ErrorCode, messages: List[str]) -> Dict[str, Any]:
    return ErrorResponse(
        status=STATUS_NAMES.get(http_status, "INTERNAL_SERVER_ERROR"),
        code=code.code,
        message=messages,
    ).model_dump()


def format_validation_error(error: Dict[str, Any]) -> str:
    """
    Render one request validation error as a client-facing message.

    Messages raised by our own validators are passed through; everything else
    becomes "Invalid value for field <field>, rejected value: <value>".
    """
    message = str(error.get("msg", ""))
    if error.get("type") == "value_error" and message.startswith(_VALUE_ERROR_PREFIX):
        return message[len(_VALUE_ERROR_PREFIX):]

    loc = [part for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = str(loc[-1]) if loc else "request"
    rejected = "null" if error.get("type") == "missing" else error.get("input")
    return ErrorCode.INVALID_REQUEST.format_message(field, rejected)


async def user_management_error_handler(
    request: Request, exc: UserManagementError
) -> JSONResponse:
    logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.errors}")
    return JSONResponse(
        status_code=exc.http_status,
        content=error_body(exc.http_status, exc.error_code, exc.errors),
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [format_validation_error(error) for error in exc.errors()]
    logger.error(f"Validation error on {request.method} {request.url.path}: {messages}")
    return JSONResponse(
        status_code=422,
        content=error_body(422, ErrorCode.INVALID_REQUEST, messages),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"System error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(500, ErrorCode.SYSTEM_ERROR, [ErrorCode.SYSTEM_ERROR.message_template]),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_all_tables()
    if not ping_database():
        logger.warning("Database did not answer the startup check")
    yield
    close_engine()


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        use_lifespan: Create tables on startup and dispose the engine on
            shutdown. Tests disable it and wire their own database.
    """
    from user_management.api.routes import health_router, router

    app = FastAPI(
        title="User Management API",
        description="User profiles with per-user settings",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_exception_handler(UserManagementError, user_management_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health_router)
    app.include_router(router)

    return app


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(
        create_app(),
        host=settings.api.host,
        port=settings.api.port,
    )
