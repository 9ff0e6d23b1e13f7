"""
Measurement catalog.

Defines the canonical measurement keys the metrics engine reads, their units,
and every display name or alias that maps onto them. Record names are free
text, so all grouping goes through normalize_name() instead of comparing
display strings.
"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class MeasurementKey(str, Enum):
    """Canonical measurement keys."""

    WEIGHT = "weight"
    CHEST = "chest"
    WAIST = "waist"
    HIPS = "hips"
    THIGH = "thigh"
    BICEP_LEFT = "bicep_left"
    BICEP_RIGHT = "bicep_right"
    CALF = "calf"
    NECK = "neck"


class Unit(str, Enum):
    KG = "kg"
    CM = "cm"


class MeasurementType(BaseModel):
    """A measurement the client offers in its entry form."""

    key: MeasurementKey
    label: str = Field(..., description="Display name stored on new records")
    unit: Unit
    step: float = 0.1
    aliases: List[str] = Field(default_factory=list)


MEASUREMENT_TYPES: List[MeasurementType] = [
    MeasurementType(
        key=MeasurementKey.WEIGHT,
        label="Weight",
        unit=Unit.KG,
        aliases=["peso", "body weight", "bodyweight"],
    ),
    MeasurementType(
        key=MeasurementKey.CHEST,
        label="Chest",
        unit=Unit.CM,
        aliases=["petto"],
    ),
    MeasurementType(
        key=MeasurementKey.WAIST,
        label="Waist",
        unit=Unit.CM,
        aliases=["vita", "abdomen"],
    ),
    MeasurementType(
        key=MeasurementKey.HIPS,
        label="Hips",
        unit=Unit.CM,
        aliases=["fianchi", "hip"],
    ),
    MeasurementType(
        key=MeasurementKey.THIGH,
        label="Thigh",
        unit=Unit.CM,
        aliases=["coscia"],
    ),
    MeasurementType(
        key=MeasurementKey.BICEP_LEFT,
        label="Bicep L",
        unit=Unit.CM,
        aliases=["bicipite sx", "bicep left", "left bicep", "bicep_l"],
    ),
    MeasurementType(
        key=MeasurementKey.BICEP_RIGHT,
        label="Bicep R",
        unit=Unit.CM,
        aliases=["bicipite dx", "bicep right", "right bicep", "bicep_r"],
    ),
    MeasurementType(
        key=MeasurementKey.CALF,
        label="Calf",
        unit=Unit.CM,
        aliases=["polpaccio"],
    ),
    MeasurementType(
        key=MeasurementKey.NECK,
        label="Neck",
        unit=Unit.CM,
        aliases=["collo"],
    ),
]


def _fold(name: str) -> str:
    return " ".join(name.split()).casefold()


def _build_alias_index() -> Dict[str, MeasurementKey]:
    index: Dict[str, MeasurementKey] = {}
    for mtype in MEASUREMENT_TYPES:
        for alias in [mtype.key.value, mtype.label, *mtype.aliases]:
            index[_fold(alias)] = mtype.key
    return index


_ALIASES = _build_alias_index()
_TYPES_BY_KEY = {mtype.key.value: mtype for mtype in MEASUREMENT_TYPES}


def normalize_name(name: str) -> str:
    """
    Map a record name onto its canonical key.

    Known names and aliases ("Peso", " peso ", "Waist", "abdomen") resolve to
    the catalog key. Anything else is returned trimmed and case-folded so
    that free-form names still group consistently.
    """
    folded = _fold(name)
    key = _ALIASES.get(folded)
    return key.value if key is not None else folded


def get_measurement_type(name: str) -> Optional[MeasurementType]:
    """Catalog entry for a record name, or None for custom measurements."""
    return _TYPES_BY_KEY.get(normalize_name(name))


def unit_for(name: str) -> Unit:
    """Weight is in kilograms, every other measurement in centimeters."""
    mtype = get_measurement_type(name)
    return mtype.unit if mtype is not None else Unit.CM
