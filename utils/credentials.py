"""
Credential verification: registration, login checks and
password / account-detail changes for an existing user.
"""
from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import storage
from models.user import User
from models.schemas.common import normalize_identifier
from utils.exceptions import Conflict, InvalidInput, NotFound, Unauthorized
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def _require(**values) -> None:
    missing = [name for name, value in values.items() if not value or not str(value).strip()]
    if missing:
        raise InvalidInput("All fields are required", details={"missing": missing})


def register(username: str, email: str, full_name: str, password: str) -> User:
    """Create a user; the password is stored as an argon2 hash only."""
    _require(username=username, email=email, fullName=full_name, password=password)
    username = normalize_identifier(username)
    email = normalize_identifier(email)

    session = storage.get_session()
    existing = session.query(User).filter(or_(User.username == username, User.email == email)).first()
    if existing:
        raise Conflict("User already exists")

    user = User(
        username=username,
        email=email,
        full_name=full_name.strip(),
        password_hash=hash_password(password),
    )
    storage.new(user)
    try:
        storage.save()
    except IntegrityError:
        # lost a race against a concurrent registration
        raise Conflict("User already exists")
    logger.info("Registered user %s", user.username)
    return user


def verify(identifier: str, password: str) -> User:
    """Return the user matching identifier (username or email) and password."""
    _require(identifier=identifier, password=password)
    user = storage.find_user(normalize_identifier(identifier))
    if not user:
        raise NotFound("User not found")
    if not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid password")
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    _require(currentPassword=current_password, newPassword=new_password)
    if not verify_password(current_password, user.password_hash):
        raise Unauthorized("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    user.save()
    logger.info("Password changed for user %s", user.username)


def update_account(user: User, full_name: str, email: str) -> User:
    """Update display name and email; the email must stay unique."""
    _require(fullName=full_name, email=email)
    email = normalize_identifier(email)
    session = storage.get_session()
    taken = session.query(User).filter(User.email == email, User.id != user.id).first()
    if taken:
        raise Conflict("Email already in use")
    user.full_name = full_name.strip()
    user.email = email
    try:
        user.save()
    except IntegrityError:
        raise Conflict("Email already in use")
    return user
