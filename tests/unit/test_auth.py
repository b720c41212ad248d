"""Unit tests for HMAC-signed user tokens."""

from __future__ import annotations

import time

import pytest

from src.utils.auth import create_user_token, validate_user_token
from src.utils.errors import AuthenticationError

_SECRET = "test-secret"


class TestCreateUserToken:
    def test_format(self) -> None:
        token = create_user_token("user-1", _SECRET, issued_at=1700000000)
        user_id, timestamp, signature = token.split(":")
        assert (user_id, timestamp) == ("user-1", "1700000000")
        assert len(signature) == 64

    @pytest.mark.parametrize("user_id", ["", "a:b"])
    def test_rejects_bad_user_ids(self, user_id: str) -> None:
        with pytest.raises(ValueError):
            create_user_token(user_id, _SECRET)


class TestValidateUserToken:
    def test_round_trip(self) -> None:
        token = create_user_token("user-1", _SECRET)
        assert validate_user_token(token, _SECRET) == "user-1"

    def test_wrong_secret(self) -> None:
        token = create_user_token("user-1", _SECRET)
        with pytest.raises(AuthenticationError, match="Invalid session token"):
            validate_user_token(token, "other-secret")

    def test_tampered_user_id(self) -> None:
        _, timestamp, signature = create_user_token("user-1", _SECRET).split(":")
        with pytest.raises(AuthenticationError, match="Invalid session token"):
            validate_user_token(f"user-2:{timestamp}:{signature}", _SECRET)

    def test_expired(self) -> None:
        issued = int(time.time()) - 3 * 3600
        token = create_user_token("user-1", _SECRET, issued_at=issued)
        with pytest.raises(AuthenticationError, match="expired"):
            validate_user_token(token, _SECRET, ttl_hours=2)

    @pytest.mark.parametrize("token", ["", "user-1", "user-1:abc:deadbeef", ":1:sig", "a:b:c:d"])
    def test_malformed(self, token: str) -> None:
        with pytest.raises(AuthenticationError, match="Malformed"):
            validate_user_token(token, _SECRET)
