"""Tests for the JWT credential verifier."""

from __future__ import annotations

import time

import jwt
import pytest

from articlesync.auth.verifier import JWTVerifier, Principal
from articlesync.config.settings import AuthSettings
from articlesync.errors import Forbidden, Unauthorized

SECRET = "unit-secret-0123456789abcdef0123456789"


@pytest.fixture
def verifier() -> JWTVerifier:
    return JWTVerifier(AuthSettings(jwt_secret=SECRET))


class TestJWTVerifier:
    def test_valid_token(self, verifier: JWTVerifier) -> None:
        token = jwt.encode({"userId": 5, "email": "e@example.com"}, SECRET, algorithm="HS256")
        assert verifier.verify(token) == Principal(user_id=5, email="e@example.com")

    def test_sub_claim_fallback(self, verifier: JWTVerifier) -> None:
        token = jwt.encode({"sub": "9"}, SECRET, algorithm="HS256")
        principal = verifier.verify(token)
        assert principal.user_id == 9
        assert principal.email is None

    @pytest.mark.parametrize("credential", [None, ""])
    def test_missing_token(self, verifier: JWTVerifier, credential: str | None) -> None:
        with pytest.raises(Unauthorized, match="Token missing"):
            verifier.verify(credential)

    def test_wrong_secret(self, verifier: JWTVerifier) -> None:
        token = jwt.encode({"userId": 1}, "other-secret-0123456789abcdef012345678", algorithm="HS256")
        with pytest.raises(Forbidden, match="Invalid token"):
            verifier.verify(token)

    def test_expired_token(self, verifier: JWTVerifier) -> None:
        token = jwt.encode({"userId": 1, "exp": int(time.time()) - 60}, SECRET, algorithm="HS256")
        with pytest.raises(Forbidden):
            verifier.verify(token)

    def test_garbage_token(self, verifier: JWTVerifier) -> None:
        with pytest.raises(Forbidden):
            verifier.verify("not-a-jwt")

    def test_token_without_user(self, verifier: JWTVerifier) -> None:
        token = jwt.encode({"email": "e@example.com"}, SECRET, algorithm="HS256")
        with pytest.raises(Forbidden, match="does not identify"):
            verifier.verify(token)


class TestUnconfiguredSecret:
    def test_default_settings_reject_any_token(self) -> None:
        verifier = JWTVerifier(AuthSettings())
        forged = jwt.encode({"userId": 1}, "change-me-change-me-change-me-change-me", algorithm="HS256")
        with pytest.raises(Forbidden, match="Invalid token"):
            verifier.verify(forged)

    def test_missing_token_still_unauthorized(self) -> None:
        with pytest.raises(Unauthorized):
            JWTVerifier(AuthSettings()).verify(None)

    def test_empty_secret_treated_as_unset(self) -> None:
        assert AuthSettings(jwt_secret="").jwt_secret is None

    def test_short_secret_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least 32 characters"):
            AuthSettings(jwt_secret="change-me")
