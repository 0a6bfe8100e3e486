# vidtube/core/security.py
"""
Security module for credentials and session tokens.
Handles password hashing and JWT signing/verification for the
access/refresh token pair.
"""
import datetime as dt
import uuid
from dataclasses import dataclass

import jwt  # PyJWT
from passlib.context import CryptContext

from vidtube.config import settings

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)


@dataclass(frozen=True)
class UserClaims:
    """
    Identity claims carried by an access token.

    Built from a user record once, then handed to the signing functions,
    so signing never touches the ORM entity.
    """
    id: str
    email: str
    username: str
    full_name: str

    @classmethod
    def from_user(cls, user) -> "UserClaims":
        return cls(
            id=str(user.id),
            email=user.email,
            username=user.username,
            full_name=user.full_name,
        )


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns False for a missing digest instead of raising.
    """
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def sign_token(claims: dict, secret: str, ttl: dt.timedelta) -> str:
    """
    Sign a JWT with the given claims and lifetime.

    `iat`, `exp` and a random `jti` are added here; callers only supply
    identity claims. The `jti` keeps two tokens minted in the same second
    distinct.
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        **claims,
        "iat": now,        # Issued at timestamp
        "exp": now + ttl,  # Expiration timestamp
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, secret: str) -> dict:
    """
    Decode and validate a JWT.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, malformed or signed with another secret
    """
    return jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])


def create_access_token(claims: UserClaims) -> str:
    """
    Create the short-lived access token.

    Payload: id, email, username, fullName (+ iat/exp).
    """
    return sign_token(
        {
            "id": claims.id,
            "email": claims.email,
            "username": claims.username,
            "fullName": claims.full_name,
        },
        settings.access_token_secret,
        dt.timedelta(minutes=settings.access_token_expiry_minutes),
    )


def create_refresh_token(user_id: str) -> str:
    """Create the long-lived refresh token. Payload carries only the user id."""
    return sign_token(
        {"id": user_id},
        settings.refresh_token_secret,
        dt.timedelta(days=settings.refresh_token_expiry_days),
    )


def decode_access_token(token: str) -> dict:
    return verify_token(token, settings.access_token_secret)


def decode_refresh_token(token: str) -> dict:
    return verify_token(token, settings.refresh_token_secret)
