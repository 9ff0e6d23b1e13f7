"""
Fitness metrics endpoints.

Serves BMI, Navy body fat and waist-to-height ratio for the user's latest day,
a given day or the whole history, plus chart series and goal progress.
"""

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.services.fitness_metrics import BiometricProfile, DerivedMetrics, compute_metrics
from app.services.measurement_service import MeasurementService
from app.services.profile_service import (
    ProfileService,
    missing_profile_fields,
    to_biometric_profile,
)
from app.services.snapshot_service import (
    GoalProgress,
    MeasurementSeries,
    build_snapshot,
    goal_progress,
    group_by_date,
    measurement_series,
    normalize_snapshot,
    unified_series,
)
from app.utils.auth import get_current_user_id

router = APIRouter()


class DayMetricsResponse(BaseModel):
    """Metrics for one recorded day. Metrics without enough data are omitted."""

    measured_on: date
    snapshot: Dict[str, float]
    metrics: DerivedMetrics
    missing_profile_fields: List[str] = Field(default_factory=list)


class ComputeRequest(BaseModel):
    """Ad-hoc computation input; snapshot names are normalized before use."""

    snapshot: Dict[str, Any]
    profile: Optional[BiometricProfile] = None


class SeriesResponse(BaseModel):
    """Chart data: one combined table plus one series per measurement."""

    unified: List[Dict[str, Any]]
    series: List[MeasurementSeries]


def _day_metrics(db: Session, user_id: UUID) -> List[DayMetricsResponse]:
    records = MeasurementService(db).list_measurements(user_id)
    profile = ProfileService(db).get_profile(user_id)
    biometrics = to_biometric_profile(profile)
    missing = missing_profile_fields(profile)

    days = []
    for group in group_by_date(records):
        snapshot = build_snapshot(group.items)
        days.append(
            DayMetricsResponse(
                measured_on=group.measured_on,
                snapshot=snapshot,
                metrics=compute_metrics(snapshot, biometrics),
                missing_profile_fields=missing,
            )
        )
    return days


@router.get(
    "/metrics/latest",
    response_model=DayMetricsResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def get_latest_metrics(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Metrics for the most recent day with measurements.

    Returns 404 if nothing has been recorded yet.
    """
    days = _day_metrics(db, current_user_id)
    if not days:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No measurements found for user",
        )
    return days[0]


@router.get(
    "/metrics/history",
    response_model=List[DayMetricsResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def get_metrics_history(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Metrics for every recorded day, newest first."""
    return _day_metrics(db, current_user_id)


@router.get(
    "/metrics/series",
    response_model=SeriesResponse,
    status_code=status.HTTP_200_OK,
)
async def get_series(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Trend data for the charts, in ascending date order."""
    records = MeasurementService(db).list_measurements(current_user_id)
    return SeriesResponse(
        unified=unified_series(records),
        series=measurement_series(records),
    )


@router.get(
    "/metrics/goals",
    response_model=List[GoalProgress],
    status_code=status.HTTP_200_OK,
)
async def get_goal_progress(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Latest value against each goal set on the profile."""
    profile = ProfileService(db).get_profile(current_user_id)
    if profile is None or not profile.goals:
        return []
    records = MeasurementService(db).list_measurements(current_user_id)
    return goal_progress(records, profile.goals)


@router.post(
    "/metrics/compute",
    response_model=DerivedMetrics,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def compute(request: ComputeRequest):
    """
    Compute metrics for an arbitrary snapshot without storing anything.

    No authentication required.
    """
    return compute_metrics(normalize_snapshot(request.snapshot), request.profile)


@router.get(
    "/metrics/{measured_on}",
    response_model=DayMetricsResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def get_day_metrics(
    measured_on: date,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Metrics for a given day.

    Returns 404 if nothing was recorded on that day.
    """
    records = MeasurementService(db).list_day(current_user_id, measured_on)
    if not records:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No measurements on this day",
        )
    profile = ProfileService(db).get_profile(current_user_id)
    snapshot = build_snapshot(records)
    return DayMetricsResponse(
        measured_on=measured_on,
        snapshot=snapshot,
        metrics=compute_metrics(snapshot, to_biometric_profile(profile)),
        missing_profile_fields=missing_profile_fields(profile),
    )
