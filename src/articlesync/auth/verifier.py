"""Credential verifiers.

A verifier turns a bearer credential into a :class:`Principal` or fails
closed. The core never depends on a concrete verifier, so tests can plug
in a stub and deployments can swap JWT for another scheme.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import jwt
from pydantic import BaseModel, Field

from articlesync.config.settings import AuthSettings
from articlesync.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    """The verified identity acting on a request."""

    user_id: int = Field(description="Author identifier")
    email: str | None = Field(default=None, description="Author email, when the credential carries one")


class CredentialVerifier(Protocol):
    """Anything that can verify a bearer credential."""

    def verify(self, credential: str | None) -> Principal:
        """Return the principal for *credential*.

        Raises:
            Unauthorized: If no credential was supplied.
            Forbidden: If the credential is invalid or expired.
        """
        ...


class JWTVerifier:
    """Verifies HMAC- or RSA-signed JWTs with PyJWT.

    The user id is read from the ``userId`` claim, falling back to ``sub``.
    Expiry (``exp``) is enforced by PyJWT when present.

    Args:
        settings: Secret and accepted algorithms.
    """

    def __init__(self, settings: AuthSettings) -> None:
        self._secret = settings.jwt_secret
        self._algorithms = list(settings.jwt_algorithms)
        if not self._secret:
            logger.warning("No JWT secret configured; all write requests will be rejected")

    def verify(self, credential: str | None) -> Principal:
        if not credential:
            raise Unauthorized("Token missing")
        if not self._secret:
            logger.error("Rejected bearer token: no JWT secret configured (set ARTICLESYNC_AUTH__JWT_SECRET)")
            raise Forbidden("Invalid token")

        try:
            payload: dict[str, Any] = jwt.decode(credential, self._secret, algorithms=self._algorithms)
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected bearer token: %s", e)
            raise Forbidden("Invalid token") from e

        raw_id = payload.get("userId", payload.get("sub"))
        try:
            user_id = int(raw_id)
        except (TypeError, ValueError) as e:
            raise Forbidden("Token does not identify a user") from e

        return Principal(user_id=user_id, email=payload.get("email"))
