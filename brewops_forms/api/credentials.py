"""Credential providers supplying the bearer token for API calls.

The browser front end read tokens ad hoc from local/session storage
under two different keys. Here the lookup is an injected provider; the
file-backed provider reads the preferred key first and falls back to
the legacy one.
"""

import base64
import binascii
import json
import logging
import time
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_KEY = "jwtToken"
LEGACY_TOKEN_KEYS = ("token",)


@runtime_checkable
class CredentialProvider(Protocol):
    """Anything that can hand out the current bearer token."""

    def get_token(self) -> str | None:
        """Return the bearer token, or None when not logged in."""
        ...

    def clear(self) -> None:
        """Forget any stored token."""
        ...


class StaticCredentials:
    """Provider holding a fixed token in memory."""

    def __init__(self, token: str | None = None) -> None:
        self.token = token

    def get_token(self) -> str | None:
        return self.token

    def clear(self) -> None:
        self.token = None


class SessionFileCredentials:
    """Provider backed by a local JSON session file.

    The file holds a flat object, e.g. ``{"jwtToken": "...", "userInfo": {...}}``.
    """

    def __init__(
        self,
        path: Path | str,
        token_key: str = DEFAULT_TOKEN_KEY,
        legacy_keys: tuple[str, ...] | list[str] = LEGACY_TOKEN_KEYS,
    ) -> None:
        """Initialize the provider.

        Args:
            path: Session file location. Need not exist yet.
            token_key: Preferred key for the token.
            legacy_keys: Keys checked, in order, when the preferred key is absent.
        """
        self.path = Path(path)
        self.token_key = token_key
        self.legacy_keys = tuple(legacy_keys)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable session file %s", self.path)
                return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def get_token(self) -> str | None:
        data = self._load()
        for key in (self.token_key, *self.legacy_keys):
            token = data.get(key)
            if token:
                return str(token)
        return None

    def save_token(self, token: str, user_info: dict[str, Any] | None = None) -> None:
        """Store a token under the preferred key, dropping legacy keys."""
        data = self._load()
        for key in self.legacy_keys:
            data.pop(key, None)
        data[self.token_key] = token
        if user_info is not None:
            data["userInfo"] = user_info
        self._save(data)

    def get_user_info(self) -> dict[str, Any]:
        info = self._load().get("userInfo")
        return info if isinstance(info, dict) else {}

    def update_user_info(self, **changes: Any) -> None:
        """Merge changes into the stored user info."""
        data = self._load()
        info = data.get("userInfo") if isinstance(data.get("userInfo"), dict) else {}
        info.update(changes)
        data["userInfo"] = info
        self._save(data)

    def clear(self) -> None:
        data = self._load()
        for key in (self.token_key, *self.legacy_keys, "userInfo"):
            data.pop(key, None)
        self._save(data)


class CurrentUser(BaseModel):
    """User identity carried in the token payload."""

    id: int | str | None = None
    email: str | None = None
    role: str | None = None
    name: str | None = None


class InvalidTokenError(ValueError):
    """Raised when a token payload cannot be decoded."""

    pass


def decode_claims(token: str) -> dict[str, Any]:
    """Decode a JWT payload without verifying the signature.

    Args:
        token: Encoded JWT.

    Returns:
        The payload claims.

    Raises:
        InvalidTokenError: If the token is not a decodable JWT.
    """
    parts = token.split(".")
    if len(parts) < 2:
        raise InvalidTokenError("Token is not a JWT")
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (binascii.Error, ValueError) as e:
        raise InvalidTokenError(f"Token payload is not valid JSON: {e}") from e
    if not isinstance(claims, dict):
        raise InvalidTokenError("Token payload is not an object")
    return claims


def current_user(provider: CredentialProvider, now: float | None = None) -> CurrentUser | None:
    """Resolve the logged-in user from the provider's token.

    Expired or undecodable tokens are cleared from the provider.

    Args:
        provider: Credential provider to read from.
        now: Current UNIX time, defaults to time.time().

    Returns:
        The current user, or None if not logged in.
    """
    token = provider.get_token()
    if not token:
        return None
    try:
        claims = decode_claims(token)
    except InvalidTokenError as e:
        logger.warning("Discarding invalid token: %s", e)
        provider.clear()
        return None

    now = time.time() if now is None else now
    exp = claims.get("exp")
    if exp is not None and exp < now:
        logger.info("Discarding expired token")
        provider.clear()
        return None

    return CurrentUser(
        id=claims.get("id"),
        email=claims.get("email"),
        role=claims.get("role"),
        name=claims.get("name"),
    )
