from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from app.db.database import Base
from app.db.types import GUID


class RevokedToken(Base):
    """Access tokens invalidated by sign-out, kept until they would expire anyway."""

    __tablename__ = "revoked_tokens"

    jti = Column(String(36), primary_key=True)
    user_id = Column(GUID(), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
