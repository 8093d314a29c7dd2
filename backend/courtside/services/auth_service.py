# Overview: Staff accounts and password authentication.

"""
Authentication Service

Passwords are hashed with bcrypt (cost factor 12) and must meet a minimum
strength policy. Session tokens are managed separately (see session_service.py).
"""

from __future__ import annotations

import re

import bcrypt

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from ..models.auth import VALID_ROLES


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


class AuthenticationError(Exception):
    """Bad credentials or inactive account."""


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter, one lowercase letter and one digit
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes simply fail."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(name: str, email: str, password: str, role: str) -> User:
    """
    Create a staff account.

    Raises ValidationError for a bad role or weak password and
    ConflictError when the email is taken.
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("email is required")
    if not name or not name.strip():
        raise ValidationError("name is required")
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of {', '.join(VALID_ROLES)}")

    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError(f"User with email {email} already exists")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User:
    user = db.session.query(User).filter_by(email=(email or "").strip().lower()).first()
    if not user or not verify_password(password or "", user.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


def set_user_active(user_id: int, is_active: bool) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    user.is_active = is_active
    db.session.commit()
    return user
