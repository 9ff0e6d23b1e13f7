"""
Measurement endpoints.

Handles CRUD for single measurement records, the per-day operations used by
the entry form and history table, and the JSON backup export.
"""

import json
import logging
from uuid import UUID
from datetime import date, datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.domain.measurement_types import Unit, unit_for
from app.models.measurement import Measurement
from app.services.measurement_service import MeasurementService
from app.services.snapshot_service import group_by_date
from app.utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


class MeasurementCreateRequest(BaseModel):
    """Request model for recording a measurement."""

    name: str = Field(..., min_length=1, max_length=64, description="Measurement name, e.g. 'Weight'")
    value: float = Field(..., gt=0, description="Kilograms for weight, centimeters otherwise")
    measured_on: date = Field(..., description="Day of the measurement (YYYY-MM-DD)")


class MeasurementUpdateRequest(BaseModel):
    """Request model for updating a measurement."""

    value: Optional[float] = Field(None, gt=0)
    measured_on: Optional[date] = None


class MeasurementResponse(BaseModel):
    """Response model for a measurement."""

    measurement_id: UUID
    name: str
    value: float
    unit: Unit
    measured_on: date
    created_at: datetime


class DayResponse(BaseModel):
    """All measurements recorded on one day."""

    measured_on: date
    items: List[MeasurementResponse]


class DaySaveRequest(BaseModel):
    """
    Request model for saving a day from the entry form.

    Empty values are skipped. When previous_date is set, the records of that
    day are replaced by the submitted values and moved to the target date.
    """

    values: Dict[str, Optional[float]] = Field(
        ..., description="Measurement name -> value, e.g. {\"Weight\": 80.2, \"Waist\": 84}"
    )
    previous_date: Optional[date] = Field(
        None, description="Day being edited; omit when entering a new day"
    )


def to_response(measurement: Measurement) -> MeasurementResponse:
    return MeasurementResponse(
        measurement_id=measurement.measurement_id,
        name=measurement.name,
        value=measurement.value,
        unit=unit_for(measurement.name),
        measured_on=measurement.measured_on,
        created_at=measurement.created_at,
    )


@router.post(
    "/measurements",
    response_model=MeasurementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_measurement(
    request: MeasurementCreateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Record a single measurement.

    Requires authentication.
    """
    service = MeasurementService(db)

    try:
        measurement = service.add_measurement(
            user_id=current_user_id,
            name=request.name,
            value=request.value,
            measured_on=request.measured_on,
        )
        return to_response(measurement)

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        logger.exception("create_measurement failed for user %s", current_user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create measurement: {str(e)}",
        )


@router.get(
    "/measurements",
    response_model=List[MeasurementResponse],
    status_code=status.HTTP_200_OK,
)
async def list_measurements(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    List all of the user's measurements, newest day first.
    """
    service = MeasurementService(db)
    return [to_response(m) for m in service.list_measurements(current_user_id)]


@router.get(
    "/measurements/days",
    response_model=List[DayResponse],
    status_code=status.HTTP_200_OK,
)
async def list_days(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Measurements grouped by day, newest first; items sorted by name.
    """
    service = MeasurementService(db)
    groups = group_by_date(service.list_measurements(current_user_id))
    return [
        DayResponse(
            measured_on=group.measured_on,
            items=[to_response(m) for m in group.items],
        )
        for group in groups
    ]


@router.put(
    "/measurements/days/{measured_on}",
    response_model=DayResponse,
    status_code=status.HTTP_200_OK,
)
async def save_day(
    measured_on: date,
    request: DaySaveRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Save the entry form for one day.

    Requires authentication.
    """
    service = MeasurementService(db)

    try:
        items = service.save_day(
            user_id=current_user_id,
            measured_on=measured_on,
            values=request.values,
            previous_date=request.previous_date,
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        db.rollback()
        logger.exception("save_day failed for user %s", current_user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save measurements: {str(e)}",
        )

    return DayResponse(measured_on=measured_on, items=[to_response(m) for m in items])


@router.delete(
    "/measurements/days/{measured_on}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_day(
    measured_on: date,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Delete every measurement of one day.
    """
    service = MeasurementService(db)
    if service.delete_day(current_user_id, measured_on) == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No measurements on this day",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/measurements/export", status_code=status.HTTP_200_OK)
async def export_measurements(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Download all measurements as a JSON backup file.
    """
    service = MeasurementService(db)
    rows = service.export(current_user_id)
    filename = f"backup_{date.today().isoformat()}.json"
    return Response(
        content=json.dumps(rows, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get(
    "/measurements/{measurement_id}",
    response_model=MeasurementResponse,
    status_code=status.HTTP_200_OK,
)
async def get_measurement(
    measurement_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Get a specific measurement by ID.

    Users can only access their own measurements.
    """
    service = MeasurementService(db)
    measurement = service.get_measurement(measurement_id, current_user_id)

    if not measurement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Measurement not found",
        )

    return to_response(measurement)


@router.put(
    "/measurements/{measurement_id}",
    response_model=MeasurementResponse,
    status_code=status.HTTP_200_OK,
)
async def update_measurement(
    measurement_id: UUID,
    request: MeasurementUpdateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Update the value and/or date of a measurement.
    """
    service = MeasurementService(db)

    try:
        measurement = service.update_measurement(
            measurement_id=measurement_id,
            user_id=current_user_id,
            value=request.value,
            measured_on=request.measured_on,
        )
        return to_response(measurement)

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND
            if "not found" in str(e)
            else status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.delete(
    "/measurements/{measurement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_measurement(
    measurement_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Delete a measurement.
    """
    service = MeasurementService(db)
    deleted = service.delete_measurement(measurement_id, current_user_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Measurement not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
