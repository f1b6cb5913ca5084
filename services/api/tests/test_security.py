"""Token verification and password hashing."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from devlink.errors import Unauthorized
from devlink.security import (
    Identity,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)


def test_issued_token_verifies(settings):
    token = create_access_token(Identity(id="u1", name="Alice"), settings)
    assert verify_access_token(token, settings) == Identity(id="u1", name="Alice")


def test_token_expires_after_one_hundred_hours(settings):
    token = create_access_token(Identity(id="u1", name="Alice"), settings)
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=["HS256"])
    assert payload["exp"] - payload["iat"] == 360000


@pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
def test_missing_or_malformed_token_is_rejected(settings, token):
    with pytest.raises(Unauthorized):
        verify_access_token(token, settings)


def test_token_signed_with_another_key_is_rejected(settings):
    forged = jwt.encode(
        {"user": {"id": "u1", "name": "Alice"}, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "some-other-secret",
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized):
        verify_access_token(forged, settings)


def test_expired_token_is_rejected(settings):
    expired = jwt.encode(
        {"user": {"id": "u1", "name": "Alice"}, "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
        settings.jwt_secret_key,
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized):
        verify_access_token(expired, settings)


def test_token_without_user_claim_is_rejected(settings):
    token = jwt.encode(
        {"sub": "u1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        settings.jwt_secret_key,
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized):
        verify_access_token(token, settings)


def test_password_hash_round():
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("wrong-password", hashed)
