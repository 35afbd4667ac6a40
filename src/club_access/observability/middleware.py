"""
club_access.observability.middleware

Request-scoped logging context.

Responsibilities:
- Accept or mint an `x-request-id` and echo it on the response.
- Bind request metadata, and later the authenticated caller, into structlog contextvars.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from club_access.observability.logging import get_logger

REQUEST_ID_HEADER = "x-request-id"

log = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
            if response.status_code in (401, 403):
                # Denials are the interesting events for an access-control service.
                log.info("request_denied", status=response.status_code)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def bind_principal(*, subject: str, token_id: str) -> None:
    structlog.contextvars.bind_contextvars(subject=subject, jti=token_id)
