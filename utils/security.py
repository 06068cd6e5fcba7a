"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from utils.exceptions import Unauthorized

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_jwt_token(
    subject: str,
    secret: str,
    expires_in: timedelta,
    token_type: str,
    algorithm: str = "HS256",
    issuer: str = "auth-discovery-api",
    jti: str | None = None,
    now: datetime | None = None,
) -> str:
    """
    Sign a claim set {sub, iat, exp, jti, type, iss}.
    The jti keeps two tokens minted in the same second distinct.
    """
    issued = now or utcnow()
    payload = {
        "iss": issuer,
        "sub": str(subject),
        "iat": int(issued.timestamp()),
        "exp": int((issued + expires_in).timestamp()),
        "type": token_type,
        "jti": jti or generate_jti(),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    expected_type: str = "access",
    algorithm: str = "HS256",
    issuer: str = "auth-discovery-api",
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises Unauthorized on invalid signature/expired jwt
    expected type must be "access" or "refresh".
    """
    if not token:
        raise Unauthorized(f"{expected_type.capitalize()} token is required")
    try:
        decoded = jwt.decode(
            token, secret, algorithms=[algorithm], issuer=issuer,
            options={"require": ["exp", "sub", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError as exc:
        raise Unauthorized(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise Unauthorized("Wrong token type")
    return decoded
