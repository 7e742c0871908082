"""Tests for credential providers and token decoding."""

import json
from pathlib import Path

import pytest

from brewops_forms.api import (
    InvalidTokenError,
    SessionFileCredentials,
    StaticCredentials,
    current_user,
    decode_claims,
)


class TestSessionFileCredentials:
    """Tests for the file-backed provider."""

    def test_missing_file_has_no_token(self, credentials: SessionFileCredentials) -> None:
        assert credentials.get_token() is None
        assert credentials.get_user_info() == {}

    def test_legacy_key_fallback(self, session_path: Path) -> None:
        session_path.write_text(json.dumps({"token": "legacy"}))

        assert SessionFileCredentials(session_path).get_token() == "legacy"

    def test_preferred_key_wins(self, session_path: Path) -> None:
        session_path.write_text(json.dumps({"token": "legacy", "jwtToken": "current"}))

        assert SessionFileCredentials(session_path).get_token() == "current"

    def test_save_token_drops_legacy_keys(
        self, session_path: Path, credentials: SessionFileCredentials
    ) -> None:
        session_path.write_text(json.dumps({"token": "legacy"}))

        credentials.save_token("current", {"name": "Ada"})

        data = json.loads(session_path.read_text())
        assert data == {"jwtToken": "current", "userInfo": {"name": "Ada"}}

    def test_update_user_info_merges(self, credentials: SessionFileCredentials) -> None:
        credentials.save_token("t", {"name": "Ada", "must_change_password": 1})

        credentials.update_user_info(must_change_password=0)

        assert credentials.get_user_info() == {"name": "Ada", "must_change_password": 0}

    def test_clear(self, credentials: SessionFileCredentials) -> None:
        credentials.save_token("t", {"name": "Ada"})

        credentials.clear()

        assert credentials.get_token() is None
        assert credentials.get_user_info() == {}

    def test_unreadable_file_is_ignored(self, session_path: Path) -> None:
        session_path.write_text("{not json")

        assert SessionFileCredentials(session_path).get_token() is None

    def test_custom_keys(self, session_path: Path) -> None:
        session_path.write_text(json.dumps({"authToken": "a"}))
        provider = SessionFileCredentials(
            session_path, token_key="bearer", legacy_keys=["authToken"]
        )

        assert provider.get_token() == "a"


class TestClaims:
    """Tests for JWT payload decoding."""

    def test_decode_claims(self, make_token) -> None:
        claims = decode_claims(make_token({"id": 4, "role": "supplier"}))

        assert claims == {"id": 4, "role": "supplier"}

    @pytest.mark.parametrize("token", ["nodots", "a.!!!.c", "a.bnVsbA.c"])
    def test_invalid_tokens(self, token: str) -> None:
        with pytest.raises(InvalidTokenError):
            decode_claims(token)


class TestCurrentUser:
    """Tests for resolving the logged-in user."""

    def test_not_logged_in(self) -> None:
        assert current_user(StaticCredentials()) is None

    def test_valid_token(self, make_token) -> None:
        token = make_token({"id": 4, "email": "ada@malt.io", "role": "supplier", "exp": 2000})

        user = current_user(StaticCredentials(token), now=1000)

        assert user.id == 4
        assert user.role == "supplier"

    def test_expired_token_is_cleared(self, make_token) -> None:
        provider = StaticCredentials(make_token({"id": 4, "exp": 1000}))

        assert current_user(provider, now=2000) is None
        assert provider.get_token() is None

    def test_invalid_token_is_cleared(self, credentials: SessionFileCredentials) -> None:
        credentials.save_token("garbage")

        assert current_user(credentials) is None
        assert credentials.get_token() is None
