from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from schedule_assistant.api.v1.router import api_router
from schedule_assistant.core.config import get_settings
from schedule_assistant.core.exceptions import AppError
from schedule_assistant.core.logging import configure_logging
from schedule_assistant.core.middleware import RequestIDMiddleware
from schedule_assistant.core.responses import app_error_response, error_response, success_response
from schedule_assistant.db.session import engine

logger = logging.getLogger(__name__)


def _jsonable_errors(errors: Any) -> Any:
    # Validation contexts can carry exception instances.
    if isinstance(errors, dict):
        return {key: _jsonable_errors(item) for key, item in errors.items()}
    if isinstance(errors, (list, tuple)):
        return [_jsonable_errors(item) for item in errors]
    if isinstance(errors, BaseException):
        return str(errors)
    return errors


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Application startup", extra={"env": get_settings().env})
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Application shutdown")


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    log_extra = {"code": exc.code, "path": request.url.path}
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, extra=log_extra)
    else:
        logger.info("Request rejected: %s", exc.message, extra=log_extra)
    return app_error_response(exc, request)


async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response("http_error", str(exc.detail), request=request),
        headers=exc.headers,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_response(
            "validation_error",
            "Request validation failed",
            {"errors": _jsonable_errors(exc.errors())},
            request=request,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content=error_response("internal_error", "Internal server error", request=request),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title=settings.project_name,
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Schedules", "description": "Schedule CRUD and the natural-language assistant"},
            {"name": "Health", "description": "Liveness probe"},
        ],
    )

    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(AppError, handle_app_error)
    application.add_exception_handler(HTTPException, handle_http_error)
    application.add_exception_handler(RequestValidationError, handle_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    application.include_router(api_router, prefix=settings.api_v1_prefix)

    @application.get("/healthz", tags=["Health"])
    async def healthz(request: Request):
        return success_response(data={"status": "ok"}, request=request)

    return application


app = create_app()
