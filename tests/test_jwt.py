from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import pytest

from cms_authz.auth.jwt import (
    JwtConfig,
    JwtValidationError,
    decode_and_validate,
    issue_token,
    session_claims,
)

CFG = JwtConfig(alg="HS256", issuer="cms-authz", audience="cms-admin", secret="test-secret")


def test_issue_and_read_claims() -> None:
    token = issue_token(cfg=CFG, subject="u1", role="EDITOR")
    claims = session_claims(cfg=CFG, token=token)
    assert claims.subject == "u1"
    assert claims.role == "EDITOR"
    assert claims.expires_at > datetime.now(tz=UTC)


def test_expired_token_rejected() -> None:
    token = issue_token(cfg=CFG, subject="u1", ttl=timedelta(seconds=-10))
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


@pytest.mark.parametrize(
    "other",
    [
        JwtConfig(alg="HS256", issuer="cms-authz", audience="storefront", secret="test-secret"),
        JwtConfig(alg="HS256", issuer="elsewhere", audience="cms-admin", secret="test-secret"),
        JwtConfig(alg="HS256", issuer="cms-authz", audience="cms-admin", secret="wrong"),
    ],
)
def test_foreign_tokens_rejected(other: JwtConfig) -> None:
    token = issue_token(cfg=other, subject="u1")
    with pytest.raises(JwtValidationError):
        session_claims(cfg=CFG, token=token)


def test_missing_required_claims_rejected() -> None:
    token = pyjwt.encode({"sub": "u1", "iss": CFG.issuer, "aud": CFG.audience}, CFG.secret, algorithm="HS256")
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


def test_empty_subject_rejected() -> None:
    token = issue_token(cfg=CFG, subject="")
    with pytest.raises(JwtValidationError, match="subject"):
        session_claims(cfg=CFG, token=token)
