"""
Authentication endpoints: register, login, logout and password change.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.revoked_token import RevokedToken
from app.models.user import User
from app.utils.auth import get_current_user_id, get_token_claims
from app.utils.jwt import create_access_token
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72  # bcrypt input limit


class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=MAX_PASSWORD_LENGTH,
        description="Password (6-72 characters)",
    )


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class PasswordChangeRequest(BaseModel):
    """Password change request."""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class AuthResponse(BaseModel):
    """Authentication response with user_id and token."""

    user_id: UUID
    email: str
    token: str


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
):
    """
    Register a new user account.

    Creates a user with email and hashed password.
    Returns user_id and JWT token for authenticated requests.
    """
    email = request.email.lower()
    existing_user = db.query(User).filter(User.email == email).first()

    if existing_user:
        logger.warning("Registration rejected, email already registered: %s", email)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(email=email, password_hash=hash_password(request.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.user_id)

    return AuthResponse(
        user_id=user.user_id,
        email=user.email,
        token=create_access_token(user.user_id),
    )


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Login with email and password.

    Validates credentials and returns user_id and JWT token.
    """
    user = db.query(User).filter(User.email == request.email.lower()).first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    return AuthResponse(
        user_id=user.user_id,
        email=user.email,
        token=create_access_token(user.user_id),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    """
    Sign out by revoking the presented token.

    The token is rejected from now until it would have expired. Expired
    revocations are purged on the way.
    """
    now = datetime.now(timezone.utc)
    db.query(RevokedToken).filter(RevokedToken.expires_at < now).delete(
        synchronize_session=False
    )

    jti = claims.get("jti")
    if jti is not None:
        db.add(
            RevokedToken(
                jti=jti,
                user_id=UUID(claims["sub"]),
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            )
        )
    db.commit()
    logger.info("User %s signed out", claims["sub"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    request: PasswordChangeRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Change the current user's password.

    Requires the current password.
    """
    user = db.query(User).filter(User.user_id == current_user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    if not verify_password(request.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    user.password_hash = hash_password(request.new_password)
    db.commit()
    logger.info("Password changed for user %s", current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
