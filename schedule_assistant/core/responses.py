from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from schedule_assistant.core.exceptions import AppError


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ResponseEnvelope(BaseModel):
    data: Any | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    error: ErrorBody | None = None


def build_meta(request: Request | None = None) -> dict[str, Any]:
    meta: dict[str, Any] = {"server_time": datetime.now(timezone.utc).isoformat()}
    request_id = getattr(request.state, "request_id", None) if request is not None else None
    if request_id:
        meta["request_id"] = request_id
    return meta


def success_response(data: Any, request: Request | None = None) -> dict[str, Any]:
    return ResponseEnvelope(data=data, meta=build_meta(request)).model_dump(mode="json")


def error_response(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    request: Request | None = None,
) -> dict[str, Any]:
    error = ErrorBody(code=code, message=message, details=details or None)
    return ResponseEnvelope(meta=build_meta(request), error=error).model_dump(mode="json")


def app_error_response(exc: AppError, request: Request | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.public_message, exc.public_details, request=request),
    )
