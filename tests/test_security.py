# File: tests/test_security.py

from datetime import timedelta

import jwt
import pytest

from storefront.core import security
from storefront.core.config import settings
from storefront.core.exceptions import PasswordHashingError, TokenExpired, TokenInvalid
from storefront.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def _token(**overrides):
    kwargs = {"subject": "user_abc", "email": "alice@example.com", "role": "customer"}
    kwargs.update(overrides)
    return create_access_token(**kwargs)


def test_hash_is_salted_and_not_plaintext():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != "password123"
    assert first.startswith("$2")
    assert first != second
    assert verify_password("password123", first)
    assert verify_password("password123", second)


def test_verify_rejects_wrong_password():
    hashed = hash_password("password123")
    assert not verify_password("password124", hashed)


def test_verify_treats_malformed_hash_as_mismatch():
    assert not verify_password("password123", "not-a-bcrypt-hash")


def test_hash_uses_configured_cost():
    hashed = hash_password("password123", rounds=5)
    assert hashed.split("$")[2] == "05"


def test_hashing_failure_is_reported(monkeypatch):
    def boom(*args, **kwargs):
        raise ValueError("entropy source unavailable")

    monkeypatch.setattr(security.bcrypt, "hashpw", boom)
    with pytest.raises(PasswordHashingError):
        hash_password("password123")


def test_token_round_trip_carries_claims():
    identity = decode_access_token(_token(role="admin"))

    assert identity.subject_id == "user_abc"
    assert identity.email == "alice@example.com"
    assert identity.role == "admin"
    assert identity.jti
    assert identity.expires_at > identity.issued_at


def test_token_expires_after_24_hours_by_default():
    identity = decode_access_token(_token())
    lifetime = identity.expires_at - identity.issued_at
    assert lifetime == timedelta(minutes=settings.access_token_expire_minutes)
    assert lifetime == timedelta(hours=24)


def test_expired_token_is_rejected_even_with_valid_signature():
    token = _token(expires_delta=timedelta(seconds=-30))
    with pytest.raises(TokenExpired):
        decode_access_token(token)


def test_tampered_payload_is_rejected():
    header, payload, signature = _token().split(".")
    middle = len(payload) // 2
    swapped = "A" if payload[middle] != "A" else "B"
    tampered_payload = payload[:middle] + swapped + payload[middle + 1:]

    with pytest.raises(TokenInvalid):
        decode_access_token(".".join([header, tampered_payload, signature]))


def test_token_signed_with_another_secret_is_rejected():
    forged = jwt.encode(
        {"sub": "user_abc", "email": "a@b.co", "role": "admin", "iat": 0, "exp": 9999999999},
        "some-other-secret-key-of-sufficient-length",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalid):
        decode_access_token(forged)


def test_token_missing_role_claim_is_rejected():
    token = jwt.encode(
        {"sub": "user_abc", "email": "a@b.co", "iat": 0, "exp": 9999999999},
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    with pytest.raises(TokenInvalid):
        decode_access_token(token)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
def test_garbage_tokens_are_rejected(garbage):
    with pytest.raises(TokenInvalid):
        decode_access_token(garbage)
