"""
cms_authz.auth.jwt

Session token issuing and validation helpers.

Responsibilities:
- Issue short-lived session JWTs (dev minting and tests).
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).
- Extract the session subject; the role claim is informational only.

Note:
- The users table is authoritative for role and active flag; a token never grants a
  role by itself (see `auth.deps.get_current_user`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str


class JwtValidationError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class SessionClaims:
    subject: str
    role: str | None
    expires_at: datetime


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    role: str | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def session_claims(*, cfg: JwtConfig, token: str) -> SessionClaims:
    payload = decode_and_validate(cfg=cfg, token=token)
    subject = str(payload.get("sub") or "")
    if not subject:
        raise JwtValidationError("Token subject is empty")
    role = payload.get("role")
    return SessionClaims(
        subject=subject,
        role=str(role) if role is not None else None,
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
    )


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/dev_auth.py` (non-prod only) and the test suite.
