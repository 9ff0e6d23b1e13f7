"""
Snapshot service.

Turns the flat list of measurement records ({name, value, measured_on}) into
the shapes the client works with: per-day groups for the history table,
per-day snapshots for the metrics engine and time series for the charts.

All functions are pure and accept any objects exposing name, value and
measured_on attributes.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from app.domain.measurement_types import MeasurementKey, normalize_name


class DayGroup(BaseModel):
    """All records sharing one date."""

    measured_on: date
    items: List[Any]


class SeriesPoint(BaseModel):
    measured_on: date
    value: float


class MeasurementSeries(BaseModel):
    key: str
    display_name: str
    points: List[SeriesPoint]


class GoalProgress(BaseModel):
    key: str
    target: float
    latest_value: Optional[float] = None
    latest_date: Optional[date] = None
    remaining: Optional[float] = None


def group_by_date(records: Iterable[Any]) -> List[DayGroup]:
    """Group records by date, newest day first, items sorted by name."""
    groups: Dict[date, List[Any]] = defaultdict(list)
    for record in records:
        groups[record.measured_on].append(record)

    return [
        DayGroup(
            measured_on=day,
            items=sorted(groups[day], key=lambda r: r.name.casefold()),
        )
        for day in sorted(groups, reverse=True)
    ]


def _created_key(record: Any):
    created_at = getattr(record, "created_at", None)
    return (created_at is not None, created_at)


def build_snapshot(items: Iterable[Any]) -> Dict[str, float]:
    """
    Canonical-key mapping for one day's records.

    If two records normalize to the same key, the one created last wins.
    """
    ordered = sorted(items, key=_created_key)
    snapshot: Dict[str, float] = {}
    for record in ordered:
        snapshot[normalize_name(record.name)] = record.value
    return snapshot


def normalize_snapshot(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Re-key a raw {display name: value} mapping onto canonical keys."""
    return {normalize_name(name): value for name, value in values.items()}


def snapshots_by_date(records: Iterable[Any]) -> Dict[date, Dict[str, float]]:
    """One snapshot per recorded day."""
    return {group.measured_on: build_snapshot(group.items) for group in group_by_date(records)}


def latest_snapshot(records: Iterable[Any]) -> Optional[Tuple[date, Dict[str, float]]]:
    """(date, snapshot) for the most recent day, or None when there are no records."""
    groups = group_by_date(records)
    if not groups:
        return None
    return groups[0].measured_on, build_snapshot(groups[0].items)


def unified_series(records: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    One row per day in ascending date order, one column per normalized name.

    Feeds the combined trend chart: {"date": "2024-03-01", "weight": 80.1, "waist": 85.0}.
    Columns match the keys of measurement_series(), so "Peso" and "Weight"
    share a column; within a day the record created last wins.
    """
    rows: Dict[date, Dict[str, Any]] = {}
    for record in sorted(records, key=_created_key):
        row = rows.setdefault(record.measured_on, {"date": record.measured_on.isoformat()})
        row[normalize_name(record.name)] = record.value
    return [rows[day] for day in sorted(rows)]


def _display_name(raw: str) -> str:
    raw = raw.strip()
    return raw[:1].upper() + raw[1:]


def measurement_series(records: Iterable[Any]) -> List[MeasurementSeries]:
    """
    Per-measurement time series for the small-multiple charts.

    Records are grouped by normalized name. Weight comes first, the rest
    alphabetically by key; points are in ascending date order.
    """
    grouped: Dict[str, List[Any]] = defaultdict(list)
    display: Dict[str, str] = {}
    for record in records:
        key = normalize_name(record.name)
        grouped[key].append(record)
        display.setdefault(key, _display_name(record.name))

    keys = sorted(grouped)
    weight = MeasurementKey.WEIGHT.value
    if weight in keys:
        keys.remove(weight)
        keys.insert(0, weight)

    return [
        MeasurementSeries(
            key=key,
            display_name=display[key],
            points=[
                SeriesPoint(measured_on=r.measured_on, value=r.value)
                for r in sorted(grouped[key], key=lambda r: r.measured_on)
            ],
        )
        for key in keys
    ]


def goal_progress(records: Iterable[Any], goals: Mapping[str, float]) -> List[GoalProgress]:
    """Latest recorded value against each goal, with the distance still to go."""
    latest: Dict[str, Any] = {}
    for record in records:
        key = normalize_name(record.name)
        current = latest.get(key)
        if current is None or record.measured_on >= current.measured_on:
            latest[key] = record

    progress = []
    for name, target in sorted(goals.items()):
        key = normalize_name(name)
        record = latest.get(key)
        if record is None:
            progress.append(GoalProgress(key=key, target=target))
            continue
        progress.append(
            GoalProgress(
                key=key,
                target=target,
                latest_value=record.value,
                latest_date=record.measured_on,
                remaining=round(target - record.value, 1),
            )
        )
    return progress
