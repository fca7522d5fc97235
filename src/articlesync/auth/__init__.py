"""Capability check — Verifies bearer credentials before mutations."""

from articlesync.auth.verifier import CredentialVerifier, JWTVerifier, Principal

__all__ = ["CredentialVerifier", "JWTVerifier", "Principal"]
