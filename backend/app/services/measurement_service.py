"""
Measurement service.

CRUD for dated measurement records, plus the per-day operations the client's
entry form uses (save a whole day, delete a whole day) and the JSON backup
export.
"""

import logging
import math
from uuid import UUID
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc

from app.models.measurement import Measurement

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64


def _clean_name(name: str) -> str:
    cleaned = " ".join((name or "").split())
    if not cleaned:
        raise ValueError("Measurement name must not be empty")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValueError(f"Measurement name must be at most {MAX_NAME_LENGTH} characters")
    return cleaned


def _check_value(value: float) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        raise ValueError("Measurement value must be a positive number")
    return float(value)


class MeasurementService:
    """Service for managing a user's measurement records."""

    def __init__(self, db: Session):
        self.db = db

    def add_measurement(
        self, user_id: UUID, name: str, value: float, measured_on: date
    ) -> Measurement:
        """
        Record a single measurement.

        Args:
            user_id: Owner
            name: Display name, e.g. "Weight" or "Waist"
            value: Kilograms for weight, centimeters otherwise
            measured_on: Day of the measurement

        Returns:
            Created Measurement

        Raises:
            ValueError: If the name is empty or the value is not positive
        """
        measurement = Measurement(
            user_id=user_id,
            name=_clean_name(name),
            value=_check_value(value),
            measured_on=measured_on,
        )
        self.db.add(measurement)
        self.db.commit()
        self.db.refresh(measurement)

        logger.info(
            "Added measurement %s for user %s on %s",
            measurement.name,
            user_id,
            measured_on,
        )
        return measurement

    def get_measurement(
        self, measurement_id: UUID, user_id: UUID
    ) -> Optional[Measurement]:
        """Get a measurement owned by user_id, or None."""
        return (
            self.db.query(Measurement)
            .filter(
                and_(
                    Measurement.measurement_id == measurement_id,
                    Measurement.user_id == user_id,
                )
            )
            .first()
        )

    def list_measurements(self, user_id: UUID) -> List[Measurement]:
        """All of a user's records, newest day first, then by name."""
        return (
            self.db.query(Measurement)
            .filter(Measurement.user_id == user_id)
            .order_by(desc(Measurement.measured_on), Measurement.name)
            .all()
        )

    def list_day(self, user_id: UUID, measured_on: date) -> List[Measurement]:
        return (
            self.db.query(Measurement)
            .filter(
                and_(
                    Measurement.user_id == user_id,
                    Measurement.measured_on == measured_on,
                )
            )
            .order_by(Measurement.name)
            .all()
        )

    def update_measurement(
        self,
        measurement_id: UUID,
        user_id: UUID,
        value: Optional[float] = None,
        measured_on: Optional[date] = None,
    ) -> Measurement:
        """
        Change the value and/or date of a measurement.

        Raises:
            ValueError: If the measurement does not exist for this user or the
                value is not positive
        """
        measurement = self.get_measurement(measurement_id, user_id)
        if not measurement:
            raise ValueError(f"Measurement {measurement_id} not found")

        if value is not None:
            measurement.value = _check_value(value)
        if measured_on is not None:
            measurement.measured_on = measured_on

        self.db.commit()
        self.db.refresh(measurement)
        return measurement

    def delete_measurement(self, measurement_id: UUID, user_id: UUID) -> bool:
        """
        Delete a measurement.

        Returns:
            True if deleted, False if not found
        """
        measurement = self.get_measurement(measurement_id, user_id)
        if not measurement:
            return False

        self.db.delete(measurement)
        self.db.commit()
        return True

    def save_day(
        self,
        user_id: UUID,
        measured_on: date,
        values: Mapping[str, Optional[float]],
        previous_date: Optional[date] = None,
    ) -> List[Measurement]:
        """
        Save the entry form for one day.

        Without previous_date every non-empty value becomes a new record.
        With previous_date the day being edited is reconciled against the
        submitted values: matching names are updated (and moved to
        measured_on), new names are added, and records of that day that
        were not resubmitted are deleted. Empty values are skipped, so
        clearing a field deletes that record.

        Returns:
            The records stored for measured_on after the save
        """
        submitted: Dict[str, float] = {}
        for name, value in values.items():
            if value is None or value == "":
                continue
            submitted[_clean_name(name)] = _check_value(value)

        existing: Dict[str, List[Measurement]] = {}
        if previous_date is not None:
            for m in self.list_day(user_id, previous_date):
                existing.setdefault(m.name, []).append(m)

        stale: List[Measurement] = []
        added = updated = 0
        for name, value in submitted.items():
            records = existing.pop(name, [])
            if records:
                # Duplicates of one name collapse into the first record
                record, *surplus = records
                stale.extend(surplus)
                record.value = value
                record.measured_on = measured_on
                updated += 1
            else:
                self.db.add(
                    Measurement(
                        user_id=user_id,
                        name=name,
                        value=value,
                        measured_on=measured_on,
                    )
                )
                added += 1

        for records in existing.values():
            stale.extend(records)
        for record in stale:
            self.db.delete(record)

        self.db.commit()
        logger.info(
            "Saved day %s for user %s: %d added, %d updated, %d removed",
            measured_on,
            user_id,
            added,
            updated,
            len(stale),
        )
        return self.list_day(user_id, measured_on)

    def delete_day(self, user_id: UUID, measured_on: date) -> int:
        """Delete every record of one day. Returns the number deleted."""
        records = self.list_day(user_id, measured_on)
        for record in records:
            self.db.delete(record)
        self.db.commit()

        logger.info("Deleted %d measurement(s) of %s for user %s", len(records), measured_on, user_id)
        return len(records)

    def export(self, user_id: UUID) -> List[Dict[str, Any]]:
        """Backup rows in the {id, name, value, timestamp} format, newest first."""
        return [
            {
                "id": str(m.measurement_id),
                "name": m.name,
                "value": m.value,
                "timestamp": m.measured_on.isoformat(),
            }
            for m in self.list_measurements(user_id)
        ]
