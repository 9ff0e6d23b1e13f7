from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.sql import func
import uuid
from app.db.database import Base
from app.db.types import GUID


class Measurement(Base):
    """A single named value recorded on a given day ("Weight" = 80.0 on 2024-03-01)."""

    __tablename__ = "measurements"
    __table_args__ = (Index("ix_measurements_user_day", "user_id", "measured_on"),)

    measurement_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(64), nullable=False)
    value = Column(Float, nullable=False)
    measured_on = Column(Date, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
