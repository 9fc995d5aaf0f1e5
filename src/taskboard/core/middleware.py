"""Request correlation and access logging middleware."""

from __future__ import annotations

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .context import REQUEST_ID_HEADER, request_id_scope

access_logger = logging.getLogger("taskboard.access")

_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of each request and log its outcome.

    An inbound ``X-Request-ID`` is reused when it is a short token of safe
    characters; otherwise a fresh UUID is issued. The id is echoed on the
    response and attached to every log record emitted while handling it.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = self._resolve_request_id(request.headers.get(self._header_name))
        request.state.request_id = request_id
        started = time.perf_counter()
        with request_id_scope(request_id):
            response = await call_next(request)
            access_logger.info(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        response.headers.setdefault(self._header_name, request_id)
        return response

    @staticmethod
    def _resolve_request_id(candidate: str | None) -> str:
        if candidate and _ACCEPTED_REQUEST_ID.match(candidate):
            return candidate
        return uuid.uuid4().hex


__all__ = ["CorrelationIdMiddleware"]
