"""
club_access.errors

Domain error taxonomy shared by services and guards.

Responsibilities:
- Give every access-control and business failure a stable HTTP status.
- Let the API layer render all of them through one exception handler.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AccessError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class Unauthorized(AccessError):
    # Missing/invalid/expired/revoked token or bad credentials.
    status_code = HTTP_401_UNAUTHORIZED


class Forbidden(AccessError):
    # Authenticated, but not allowed here.
    status_code = HTTP_403_FORBIDDEN


class NotFound(AccessError):
    status_code = HTTP_404_NOT_FOUND


class BadRequest(AccessError):
    status_code = HTTP_400_BAD_REQUEST


class Conflict(AccessError):
    status_code = HTTP_409_CONFLICT


# --- Module Notes -----------------------------------------------------------
# Registered on the app in `club_access.api.app.create_app`.
