from __future__ import annotations

import logging
import re
from typing import Any, Dict, cast

from fastapi import Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from starlette import status
from fastapi.exceptions import RequestValidationError

from ...engine.errors import PositionError
from .session import SessionLimitError


logger = logging.getLogger(__name__)

# starlette renamed the 422 constant; the number is stable
HTTP_422 = 422


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: list[dict[str, str]] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _render(
    request: Request,
    status_code: int,
    message: str,
    field_errors: list[dict[str, str]] | None = None,
) -> JSONResponse:
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=message,
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=getattr(request.state, "request_id", ""),
        field_errors=field_errors,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _render(request, exc.status_code, detail)
    return await exception_handler(request, exc)


async def position_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Malformed positions that escaped an endpoint's own handling."""
    kind = _snake(type(exc).__name__) if isinstance(exc, PositionError) else "value_error"
    return _render(
        request,
        status.HTTP_400_BAD_REQUEST,
        f"invalid position: {exc}",
        field_errors=[{"field": "fen", "code": kind, "message": str(exc)}],
    )


async def session_limit_handler(request: Request, exc: Exception) -> JSONResponse:
    return _render(request, status.HTTP_409_CONFLICT, str(exc))


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, StarletteHTTPException):
        return await http_exception_handler(request, exc)
    # Otherwise, treat as internal error and log it
    logger.exception(
        "Unhandled exception", extra={"request_id": getattr(request.state, "request_id", "")}
    )
    return _render(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    # Map Pydantic/FastAPI validation errors to our structured envelope with 422
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        msg = e.get("msg", "invalid value")
        typ = e.get("type", "value_error")
        errors.append({"field": loc, "code": typ, "message": msg})
    return _render(request, HTTP_422, "Validation error", field_errors=errors or None)


def register_error_handlers(app: Any) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(PositionError, position_error_handler)
    app.add_exception_handler(SessionLimitError, session_limit_handler)
    app.add_exception_handler(Exception, exception_handler)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "unauthorized"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "forbidden"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code == HTTP_422:
        return "unprocessable_entity"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
