from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

GAME_PATH = re.compile(r"^/api/games/([^/]+)")


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, log request/response, and attach header.

    Requests addressed to a game session carry its ``game_id`` in the log
    records. Client errors log at WARNING so rejected moves and bad
    positions show up without enabling INFO.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        match = GAME_PATH.match(request.url.path)
        game_id = match.group(1) if match else None

        logger.info(
            "request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "game_id": game_id,
            },
        )

        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers["x-request-id"] = request_id

        level = logging.WARNING if 400 <= response.status_code < 500 else logging.INFO
        logger.log(
            level,
            "response",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "game_id": game_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
