"""
JWT token utilities for authentication.

Handles encoding and decoding JWT tokens with user_id payload. Every token
carries a jti so a single token can be revoked on sign-out.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4
from jose import JWTError, jwt
from pydantic_settings import BaseSettings, SettingsConfigDict


class JWTSettings(BaseSettings):
    """JWT configuration settings."""

    model_config = SettingsConfigDict(env_prefix="JWT_", env_file=".env", extra="ignore")

    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days


jwt_settings = JWTSettings()


def create_access_token(user_id: UUID) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's UUID

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "jti": str(uuid4()),
        "iat": now,
        "exp": now + timedelta(minutes=jwt_settings.access_token_expire_minutes),
    }
    return jwt.encode(
        payload, jwt_settings.secret_key, algorithm=jwt_settings.algorithm
    )


def decode_token_claims(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Returns:
        The claims dict if the signature and expiry are valid and a subject
        is present, None otherwise
    """
    try:
        payload = jwt.decode(
            token, jwt_settings.secret_key, algorithms=[jwt_settings.algorithm]
        )
    except JWTError:
        return None
    if payload.get("sub") is None:
        return None
    return payload


def decode_access_token(token: str) -> Optional[UUID]:
    """
    Decode a JWT access token to its user_id.

    Returns:
        user_id (UUID) if token is valid, None otherwise
    """
    payload = decode_token_claims(token)
    if payload is None:
        return None
    try:
        return UUID(payload["sub"])
    except ValueError:
        return None
