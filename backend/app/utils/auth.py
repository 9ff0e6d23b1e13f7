"""
Authentication utilities: JWT token validation and user extraction.
"""

from typing import Any, Dict
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.revoked_token import RevokedToken
from app.utils.jwt import decode_token_claims

security = HTTPBearer()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_claims(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Validate the bearer token and return its claims.

    Rejects tokens that fail signature or expiry checks and tokens revoked by
    sign-out.

    Raises:
        HTTPException: 401 if the token is invalid, expired or revoked
    """
    claims = decode_token_claims(credentials.credentials)
    if claims is None:
        raise _unauthorized()

    jti = claims.get("jti")
    if jti is not None and db.get(RevokedToken, jti) is not None:
        raise _unauthorized()

    return claims


def get_current_user_id(
    claims: Dict[str, Any] = Depends(get_token_claims),
) -> UUID:
    """
    Extract user_id from a validated JWT.

    This is a FastAPI dependency that can be used in route handlers.
    """
    try:
        return UUID(claims["sub"])
    except ValueError:
        raise _unauthorized()
