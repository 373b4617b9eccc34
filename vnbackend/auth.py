"""Admin authorisation: request parsing and JWT tokens."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import jwt

ALGORITHM = "HS256"


@dataclass(frozen=True)
class AuthConfig:
    """Key and lifetime used to sign tokens."""

    secret_key: str = ""
    ttl: timedelta = timedelta(0)


@dataclass(frozen=True)
class AuthorisationRequest:
    """Credentials sent by an admin who logs in."""

    email: str = ""
    password: str = ""

    @classmethod
    def from_json(cls, body: str | bytes) -> AuthorisationRequest:
        """Parse a request body; raise ValueError when it is malformed or incomplete."""
        try:
            data = json.loads(body)
        except (ValueError, TypeError) as exc:
            raise ValueError("invalid JSON format") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("invalid JSON format")
        email = data.get("email") or ""
        secret = data.get("password") or ""
        if not isinstance(email, str) or not isinstance(secret, str):
            raise ValueError("invalid JSON format")
        if not email or not secret:
            raise ValueError("email and password are required")
        return cls(email=email, password=secret)


def generate_token(user_id: str, role: str, auth_config: AuthConfig) -> str:
    """Sign a token carrying the user id and role, expiring after the configured TTL."""
    claims = {
        "user_id": user_id,
        "role": role,
        "exp": int(time.time() + auth_config.ttl.total_seconds()),
    }
    try:
        return jwt.encode(claims, auth_config.secret_key, algorithm=ALGORITHM)
    except jwt.PyJWTError as exc:
        raise ValueError(f"failed to create token: {exc}") from exc


def decode_token(token: str, auth_config: AuthConfig) -> dict[str, Any]:
    """Verify a token and return its claims; raises jwt.InvalidTokenError."""
    return jwt.decode(token, auth_config.secret_key, algorithms=[ALGORITHM])