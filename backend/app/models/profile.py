from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.sql import func
from app.db.database import Base
from app.db.types import GUID, JSONB


class UserProfile(Base):
    """Per-user biometric profile. One row per user, created on first write."""

    __tablename__ = "user_profiles"

    user_id = Column(
        GUID(),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    height_cm = Column(Float, nullable=True)
    gender = Column(String(10), nullable=True)  # "male" or "female"
    birth_date = Column(Date, nullable=True)

    # data:image/...;base64 URL, already resized by the client
    avatar = Column(Text, nullable=True)

    # {"weight": 75.0, "waist": 80.0} keyed by canonical measurement name
    goals = Column(JSONB(), nullable=False, default=dict)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
