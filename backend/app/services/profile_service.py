"""
Profile service.

Reads and writes the per-user biometric profile (height, gender, birth date,
avatar, goals) and converts it into the BiometricProfile the metrics engine
consumes.
"""

import base64
import binascii
import logging
import math
import re
from datetime import date
from typing import Dict, Mapping, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.domain.measurement_types import normalize_name
from app.models.profile import UserProfile
from app.services.fitness_metrics import GENDERS, BiometricProfile

logger = logging.getLogger(__name__)

# Same limit the client enforces before resizing
DEFAULT_MAX_AVATAR_BYTES = 1024 * 1024

_DATA_URL = re.compile(r"^data:(image/[a-z0-9.+-]+);base64,(.+)$", re.IGNORECASE | re.DOTALL)


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    """Whole years between birth_date and today, or None."""
    if birth_date is None or birth_date > today:
        return None
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def to_biometric_profile(
    profile: Optional[UserProfile], today: Optional[date] = None
) -> BiometricProfile:
    """Engine input for a stored profile. A missing profile yields an empty one."""
    if profile is None:
        return BiometricProfile()
    return BiometricProfile(
        gender=profile.gender,
        height_cm=profile.height_cm,
        age=age_on(profile.birth_date, today or date.today()),
    )


def missing_profile_fields(profile: Optional[UserProfile]) -> list[str]:
    """Profile fields the metrics need but the user has not filled in yet."""
    missing = []
    if profile is None or not profile.height_cm:
        missing.append("height_cm")
    if profile is None or not profile.gender:
        missing.append("gender")
    return missing


class ProfileService:
    """Service for the per-user profile document."""

    def __init__(self, db: Session, max_avatar_bytes: int = DEFAULT_MAX_AVATAR_BYTES):
        self.db = db
        self.max_avatar_bytes = max_avatar_bytes

    def get_profile(self, user_id: UUID) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.user_id == user_id).first()

    def _get_or_create(self, user_id: UUID) -> UserProfile:
        profile = self.get_profile(user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id, goals={})
            self.db.add(profile)
        return profile

    def update_profile(
        self,
        user_id: UUID,
        height_cm: Optional[float] = None,
        gender: Optional[str] = None,
        birth_date: Optional[date] = None,
        goals: Optional[Mapping[str, float]] = None,
    ) -> UserProfile:
        """
        Merge the given fields into the user's profile, creating it if needed.

        Fields left as None keep their stored value. Goals replace the stored
        goal map; their keys are normalized like measurement names.

        Raises:
            ValueError: For an unknown gender, non-positive height, a birth
                date in the future, or a non-positive goal
        """
        if gender is not None and gender not in GENDERS:
            raise ValueError("Gender must be 'male' or 'female'")
        if height_cm is not None and height_cm <= 0:
            raise ValueError("Height must be a positive value")
        if birth_date is not None and birth_date > date.today():
            raise ValueError("Birth date cannot be in the future")

        normalized_goals: Optional[Dict[str, float]] = None
        if goals is not None:
            normalized_goals = {}
            for name, target in goals.items():
                if target is None or not math.isfinite(target) or target <= 0:
                    raise ValueError(f"Goal for '{name}' must be a positive value")
                normalized_goals[normalize_name(name)] = float(target)

        profile = self._get_or_create(user_id)
        if height_cm is not None:
            profile.height_cm = height_cm
        if gender is not None:
            profile.gender = gender
        if birth_date is not None:
            profile.birth_date = birth_date
        if normalized_goals is not None:
            profile.goals = normalized_goals

        self.db.commit()
        self.db.refresh(profile)
        logger.info("Updated profile for user %s", user_id)
        return profile

    def set_avatar(self, user_id: UUID, data_url: str) -> UserProfile:
        """
        Store an already-resized avatar given as a base64 data URL.

        Raises:
            ValueError: If the payload is not a base64 image data URL or its
                decoded size exceeds the configured limit
        """
        match = _DATA_URL.match(data_url.strip())
        if not match:
            raise ValueError("Avatar must be a base64 image data URL")

        try:
            raw = base64.b64decode(match.group(2), validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Avatar is not valid base64")

        if len(raw) > self.max_avatar_bytes:
            raise ValueError(
                f"Avatar too large ({len(raw)} bytes, max {self.max_avatar_bytes})"
            )

        profile = self._get_or_create(user_id)
        profile.avatar = data_url.strip()
        self.db.commit()
        self.db.refresh(profile)
        logger.info("Updated avatar for user %s (%d bytes)", user_id, len(raw))
        return profile

    def clear_avatar(self, user_id: UUID) -> bool:
        """Remove the avatar. Returns False if there was none."""
        profile = self.get_profile(user_id)
        if profile is None or profile.avatar is None:
            return False
        profile.avatar = None
        self.db.commit()
        return True
