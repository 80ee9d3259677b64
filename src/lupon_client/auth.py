"""Authentication helpers for backend requests."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import jwt
from pydantic import SecretStr

from .models import User

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from .config import Settings

# Refresh a little before the backend would start rejecting the token.
EXPIRY_LEEWAY_SECONDS = 30


class AuthenticationError(Exception):
    """Raised when no usable credentials are available."""


def secret_value(value: SecretStr | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return str(value)


def decode_claims(token: str) -> dict[str, Any]:
    """
    Read the payload of a backend JWT.

    The signing secret lives on the server, so the signature is not checked
    here; the claims are only used to decide whether to refresh and to
    identify the signed-in user.

    Raises:
        jwt.InvalidTokenError: If the token is not a well-formed JWT
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256"],
        )
    except jwt.DecodeError as exc:
        logger.warning("Malformed JWT: %s", exc)
        raise


def token_is_valid(token: str | None, *, now: float | None = None) -> bool:
    """True when ``token`` decodes and its ``exp`` is still in the future."""
    if not token:
        return False
    try:
        claims = decode_claims(token)
    except jwt.InvalidTokenError:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    current = time.time() if now is None else now
    return exp - EXPIRY_LEEWAY_SECONDS > current


def user_from_token(token: str | None) -> User | None:
    if not token:
        return None
    try:
        claims = decode_claims(token)
        return User.model_validate(claims)
    except (jwt.InvalidTokenError, ValueError) as exc:
        logger.warning("Could not read user from token: %s", exc)
        return None


class TokenStore:
    """
    Holds the bearer JWT plus the session cookies used to mint new ones.

    The backend sets ``token`` and ``user`` cookies at login; either a valid
    bearer or those cookies authenticate a request.
    """

    def __init__(
        self,
        token: str | None = None,
        cookies: dict[str, str] | None = None,
    ) -> None:
        self._token = token or None
        self.cookies: dict[str, str] = {k: v for k, v in (cookies or {}).items() if v}

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenStore":
        cookies = {
            settings.cookie_name: secret_value(settings.session_cookie).strip(),
            "user": secret_value(settings.user_cookie).strip(),
        }
        return cls(token=secret_value(settings.api_token).strip() or None, cookies=cookies)

    @property
    def token(self) -> str | None:
        return self._token

    def valid_token(self, *, now: float | None = None) -> str | None:
        if token_is_valid(self._token, now=now):
            return self._token
        return None

    def set_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
        self.cookies.clear()

    def drop_token(self) -> None:
        self._token = None

    @property
    def user(self) -> User | None:
        return user_from_token(self._token)
