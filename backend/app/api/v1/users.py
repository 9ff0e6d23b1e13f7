"""
User endpoints: current user and profile (height, gender, birth date, goals, avatar).
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.database import get_db
from app.models.profile import UserProfile
from app.models.user import User
from app.services.profile_service import (
    ProfileService,
    age_on,
    missing_profile_fields,
)
from app.utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


class UserInfoResponse(BaseModel):
    """Current user information response."""

    user_id: UUID
    email: str
    created_at: datetime
    profile_complete: bool


class ProfileResponse(BaseModel):
    """User profile response. All fields are null until set."""

    user_id: UUID
    height_cm: Optional[float] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    avatar: Optional[str] = None
    goals: Dict[str, float] = Field(default_factory=dict)
    missing_fields: List[str] = Field(default_factory=list)


class ProfileUpdateRequest(BaseModel):
    """Request model for updating the profile. Omitted fields are left unchanged."""

    height_cm: Optional[float] = Field(None, gt=0, lt=300, description="Height in centimeters")
    gender: Optional[str] = Field(None, description="Gender: 'male' or 'female'")
    birth_date: Optional[date] = Field(None, description="Birth date (YYYY-MM-DD)")
    goals: Optional[Dict[str, float]] = Field(
        None, description="Target value per measurement, e.g. {\"Weight\": 75}"
    )


class AvatarUpdateRequest(BaseModel):
    """Request model for setting the avatar."""

    avatar: str = Field(..., description="Resized image as a base64 data URL")


def _profile_response(user_id: UUID, profile: Optional[UserProfile]) -> ProfileResponse:
    missing = missing_profile_fields(profile)
    if profile is None:
        return ProfileResponse(user_id=user_id, missing_fields=missing)
    return ProfileResponse(
        user_id=user_id,
        height_cm=profile.height_cm,
        gender=profile.gender,
        birth_date=profile.birth_date,
        age=age_on(profile.birth_date, date.today()),
        avatar=profile.avatar,
        goals=profile.goals or {},
        missing_fields=missing,
    )


def _profile_service(db: Session) -> ProfileService:
    return ProfileService(db, max_avatar_bytes=get_settings().max_avatar_bytes)


@router.get("/me", response_model=UserInfoResponse, status_code=status.HTTP_200_OK)
async def get_current_user_info(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Get current authenticated user information.

    profile_complete is false until both height and gender are set.
    """
    user = db.query(User).filter(User.user_id == current_user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    profile = _profile_service(db).get_profile(current_user_id)
    return UserInfoResponse(
        user_id=user.user_id,
        email=user.email,
        created_at=user.created_at,
        profile_complete=not missing_profile_fields(profile),
    )


@router.get("/me/profile", response_model=ProfileResponse, status_code=status.HTTP_200_OK)
async def get_profile(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get the current user's profile."""
    profile = _profile_service(db).get_profile(current_user_id)
    return _profile_response(current_user_id, profile)


@router.put("/me/profile", response_model=ProfileResponse, status_code=status.HTTP_200_OK)
async def update_profile(
    request: ProfileUpdateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Update the current user's profile.

    Requires authentication.
    """
    try:
        profile = _profile_service(db).update_profile(
            user_id=current_user_id,
            height_cm=request.height_cm,
            gender=request.gender,
            birth_date=request.birth_date,
            goals=request.goals,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        logger.exception("update_profile failed for user %s", current_user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update profile: {str(e)}",
        )

    return _profile_response(current_user_id, profile)


@router.put("/me/avatar", response_model=ProfileResponse, status_code=status.HTTP_200_OK)
async def update_avatar(
    request: AvatarUpdateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Set the avatar image.

    The client resizes the image before upload; the payload is only size
    checked here.
    """
    try:
        profile = _profile_service(db).set_avatar(current_user_id, request.avatar)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return _profile_response(current_user_id, profile)


@router.delete("/me/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def delete_avatar(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Remove the avatar image."""
    if not _profile_service(db).clear_avatar(current_user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No avatar set",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
