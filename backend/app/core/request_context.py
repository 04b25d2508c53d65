"""Request id propagation shared by the middleware, log records and traces."""
from __future__ import annotations

import re
from contextvars import ContextVar
from typing import Callable, Optional
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-Id"

# Client ids are echoed into headers and logs, so only short printable tokens are accepted.
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def current_request_id() -> Optional[str]:
    return _request_id.get()


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse the caller's id when it is well formed, otherwise mint a new one."""
    candidate = (header_value or "").strip()
    if _CLIENT_ID_PATTERN.match(candidate):
        return candidate
    return str(uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Expose the request id on ``request.state``, the log context and the response header."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
