"""Tests for owner bearer token verification."""

import pytest
from jose import jwt

from esign.core.config import settings
from esign.core.security import InvalidToken, create_access_token, decode_access_token


def test_round_trip():
    token = create_access_token("user-123", email="user@example.com")
    claims = decode_access_token(token)
    assert claims["sub"] == "user-123"
    assert claims["email"] == "user@example.com"
    assert claims["aud"] == settings.JWT_AUDIENCE


def test_expired_token_rejected():
    token = create_access_token("user-123", expires_minutes=-5)
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_wrong_secret_rejected():
    token = jwt.encode(
        {"sub": "user-123", "aud": settings.JWT_AUDIENCE}, "not-the-secret", algorithm="HS256"
    )
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_wrong_audience_rejected():
    token = jwt.encode({"sub": "user-123", "aud": "anon"}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_missing_subject_rejected():
    token = jwt.encode({"aud": settings.JWT_AUDIENCE}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken, match="no subject"):
        decode_access_token(token)


def test_garbage_rejected():
    with pytest.raises(InvalidToken):
        decode_access_token("not-a-jwt")
