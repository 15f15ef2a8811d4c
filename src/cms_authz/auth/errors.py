"""
cms_authz.auth.errors

Authorization error taxonomy and the JSON error envelope.

Responsibilities:
- Map denials onto stable HTTP statuses and machine-readable codes.
- Render `{"error": {"code", "message", "timestamp"}, "success": false}` bodies.
- Register FastAPI exception handlers for these errors.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)


class AuthorizationError(Exception):
    code = "FORBIDDEN"
    status_code = HTTP_403_FORBIDDEN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(AuthorizationError):
    """
    No identity, or an invalid / expired / inactive one. Terminal for the request.
    """

    code = "UNAUTHORIZED"
    status_code = HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class Forbidden(AuthorizationError):
    """
    Identity resolved but lacks the role, permission or ownership required.
    """

    code = "FORBIDDEN"
    status_code = HTTP_403_FORBIDDEN


class NotFound(Exception):
    code = "NOT_FOUND"
    status_code = HTTP_404_NOT_FOUND

    def __init__(self, what: str) -> None:
        super().__init__(f"{what} not found")
        self.message = f"{what} not found"


class Conflict(Exception):
    """
    The request collides with existing state (e.g. a unique email already in use).
    """

    code = "CONFLICT"
    status_code = HTTP_409_CONFLICT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def error_body(code: str, message: str) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": datetime.now(tz=UTC).isoformat(),
        },
        "success": False,
    }


async def _handle(request: Request, exc: Exception) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,  # type: ignore[attr-defined]
        content=error_body(exc.code, exc.message),  # type: ignore[attr-defined]
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthorizationError, _handle)
    app.add_exception_handler(NotFound, _handle)
    app.add_exception_handler(Conflict, _handle)


# --- Module Notes -----------------------------------------------------------
# The core (resolver / composer / evaluator) never raises these; they are raised
# only at the HTTP seam by `auth.gate.AuthorizationGate.enforce` and route handlers.
