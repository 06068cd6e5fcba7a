from datetime import timedelta

import jwt
import pytest

from utils.exceptions import Unauthorized
from utils.security import (
    create_jwt_token,
    decode_token,
    hash_password,
    utcnow,
    verify_password,
)


def test_hash_is_not_plaintext_and_verifies():
    hashed = hash_password("S1")
    assert hashed != "S1"
    assert hashed.startswith("$argon2")
    assert verify_password("S1", hashed)
    assert not verify_password("S2", hashed)


def test_verify_password_rejects_garbage_hash():
    assert verify_password("S1", "not-a-hash") is False


def test_token_round_trip_carries_subject_and_type():
    token = create_jwt_token("user-1", "secret", timedelta(minutes=5), "access")
    claims = decode_token(token, "secret", expected_type="access")
    assert claims["sub"] == "user-1"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 300


def test_tokens_minted_together_differ():
    now = utcnow()
    first = create_jwt_token("user-1", "secret", timedelta(minutes=5), "refresh", now=now)
    second = create_jwt_token("user-1", "secret", timedelta(minutes=5), "refresh", now=now)
    assert first != second


@pytest.mark.parametrize(
    "token, secret, expected_type, message",
    [
        (None, "secret", "access", "Access token is required"),
        ("not.a.jwt", "secret", "access", "Invalid token"),
    ],
)
def test_decode_rejects_missing_or_malformed(token, secret, expected_type, message):
    with pytest.raises(Unauthorized) as exc:
        decode_token(token, secret, expected_type=expected_type)
    assert message in exc.value.message


def test_decode_rejects_bad_signature():
    token = create_jwt_token("user-1", "secret", timedelta(minutes=5), "access")
    with pytest.raises(Unauthorized):
        decode_token(token, "other-secret")


def test_decode_rejects_expired():
    token = create_jwt_token(
        "user-1", "secret", timedelta(minutes=5), "access", now=utcnow() - timedelta(hours=1)
    )
    with pytest.raises(Unauthorized) as exc:
        decode_token(token, "secret")
    assert exc.value.message == "Token expired"


def test_decode_rejects_wrong_type():
    token = create_jwt_token("user-1", "secret", timedelta(minutes=5), "refresh")
    with pytest.raises(Unauthorized) as exc:
        decode_token(token, "secret", expected_type="access")
    assert exc.value.message == "Wrong token type"


def test_decode_requires_subject():
    token = jwt.encode({"exp": int((utcnow() + timedelta(minutes=5)).timestamp())}, "secret", algorithm="HS256")
    with pytest.raises(Unauthorized):
        decode_token(token, "secret")


def test_decode_rejects_foreign_issuer():
    token = create_jwt_token("user-1", "secret", timedelta(minutes=5), "access", issuer="someone-else")
    with pytest.raises(Unauthorized):
        decode_token(token, "secret")
    assert decode_token(token, "secret", issuer="someone-else")["iss"] == "someone-else"


def test_decode_requires_issuer():
    payload = {"sub": "user-1", "type": "access", "exp": int((utcnow() + timedelta(minutes=5)).timestamp())}
    token = jwt.encode(payload, "secret", algorithm="HS256")
    with pytest.raises(Unauthorized):
        decode_token(token, "secret")
