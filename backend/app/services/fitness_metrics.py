"""
Fitness metrics service.

Derives BMI, U.S. Navy body fat percentage and waist-to-height ratio from a
single day's measurements and the user's biometric profile.

Every metric is independent: missing, non-numeric or non-positive inputs only
suppress the metric that needs them, and nothing in this module raises for bad
data. Inputs are centimeters and kilograms.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from enum import IntEnum
from numbers import Real
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.domain.measurement_types import MeasurementKey

logger = logging.getLogger(__name__)

NAVY_METHOD = "Navy Method"

# Body fat estimates outside this open interval are treated as implausible
BODY_FAT_MIN = 0.0
BODY_FAT_MAX = 70.0

GENDERS = ("male", "female")


class SeverityTier(IntEnum):
    """Ordinal severity of a classification, lowest first."""

    BELOW_RANGE = 0
    IN_RANGE = 1
    ABOVE_RANGE = 2
    HIGH_RISK = 3


class BiometricProfile(BaseModel):
    """Biometric inputs that are not measurements."""

    model_config = ConfigDict(frozen=True)

    gender: Optional[str] = Field(None, description="'male' or 'female'")
    height_cm: Optional[float] = Field(None, description="Height in centimeters")
    age: Optional[int] = Field(None, description="Age in years (not used by any formula yet)")


class BmiMetric(BaseModel):
    value: float
    status: str
    severity_tier: SeverityTier


class BodyFatMetric(BaseModel):
    value: float
    method: str = NAVY_METHOD


class WhtrMetric(BaseModel):
    value: float
    status: str
    severity_tier: SeverityTier


class DerivedMetrics(BaseModel):
    """Metrics derived from one snapshot. A field is None when data is insufficient."""

    bmi: Optional[BmiMetric] = None
    body_fat: Optional[BodyFatMetric] = None
    whtr: Optional[WhtrMetric] = None


def _number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is not a real number."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def _positive(value: Any) -> Optional[float]:
    number = _number(value)
    if number is None or number <= 0:
        return None
    return number


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero on the shortest decimal representation."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def classify_bmi(bmi: float) -> tuple[str, SeverityTier]:
    """WHO adult BMI categories."""
    if bmi < 18.5:
        return "Underweight", SeverityTier.BELOW_RANGE
    elif bmi < 25:
        return "Normal", SeverityTier.IN_RANGE
    elif bmi < 30:
        return "Overweight", SeverityTier.ABOVE_RANGE
    else:
        return "Obese", SeverityTier.HIGH_RISK


def classify_whtr(ratio: float) -> tuple[str, SeverityTier]:
    """Waist-to-height cut-offs. Upper bounds are inclusive."""
    if ratio <= 0.34:
        return "Extremely lean", SeverityTier.BELOW_RANGE
    elif ratio <= 0.49:
        return "Healthy", SeverityTier.IN_RANGE
    elif ratio <= 0.59:
        return "Overweight", SeverityTier.ABOVE_RANGE
    else:
        return "High risk", SeverityTier.HIGH_RISK


class FitnessMetricsCalculator:
    """Closed-form anthropometric formulas. All methods return None instead of raising."""

    @staticmethod
    def calculate_bmi(weight_kg: Any, height_cm: Any) -> Optional[BmiMetric]:
        """
        Body mass index: weight / height_m^2.

        Classified on the unrounded value; the reported value is rounded
        to 1 decimal.
        """
        weight = _positive(weight_kg)
        height = _positive(height_cm)
        if weight is None or height is None:
            return None

        height_m = height / 100.0
        bmi = weight / (height_m * height_m)
        status, tier = classify_bmi(bmi)
        return BmiMetric(value=round_half_up(bmi, 1), status=status, severity_tier=tier)

    @staticmethod
    def calculate_navy_body_fat(
        gender: Any,
        height_cm: Any,
        waist_cm: Any,
        neck_cm: Any,
        hips_cm: Any = None,
    ) -> Optional[BodyFatMetric]:
        """
        Body fat percentage using the U.S. Navy circumference method.

        Args:
            gender: "male" or "female"
            height_cm: Height in centimeters
            waist_cm: Waist circumference in centimeters
            neck_cm: Neck circumference in centimeters
            hips_cm: Hip circumference in centimeters (required for women)

        Returns:
            BodyFatMetric rounded to 1 decimal, or None when inputs are
            insufficient or the estimate falls outside (0, 70).
        """
        if gender not in GENDERS:
            return None

        height = _positive(height_cm)
        waist = _positive(waist_cm)
        neck = _positive(neck_cm)
        if height is None or waist is None or neck is None:
            return None

        try:
            if gender == "male":
                girth = waist - neck
                if girth <= 0:
                    return None
                bf = (
                    495
                    / (
                        1.0324
                        - 0.19077 * math.log10(girth)
                        + 0.15456 * math.log10(height)
                    )
                    - 450
                )
            else:
                hips = _positive(hips_cm)
                if hips is None:
                    return None
                girth = waist + hips - neck
                if girth <= 0:
                    return None
                bf = (
                    495
                    / (
                        1.29579
                        - 0.35004 * math.log10(girth)
                        + 0.22100 * math.log10(height)
                    )
                    - 450
                )
        except (ValueError, ZeroDivisionError):
            return None

        if not BODY_FAT_MIN < bf < BODY_FAT_MAX:
            logger.debug("Discarding implausible body fat estimate %.2f%%", bf)
            return None

        return BodyFatMetric(value=round_half_up(bf, 1))

    @staticmethod
    def calculate_whtr(waist_cm: Any, height_cm: Any) -> Optional[WhtrMetric]:
        """Waist-to-height ratio, rounded to 2 decimals and classified on that value."""
        waist = _positive(waist_cm)
        height = _positive(height_cm)
        if waist is None or height is None:
            return None

        value = round_half_up(waist / height, 2)
        status, tier = classify_whtr(value)
        return WhtrMetric(value=value, status=status, severity_tier=tier)


def _profile_fields(
    profile: Union[BiometricProfile, Mapping[str, Any], None],
) -> tuple[Any, Any]:
    if profile is None:
        return None, None
    if isinstance(profile, Mapping):
        height = profile.get("height_cm", profile.get("heightCm"))
        return profile.get("gender"), height
    return getattr(profile, "gender", None), getattr(profile, "height_cm", None)


def compute_metrics(
    snapshot: Mapping[str, Any],
    profile: Union[BiometricProfile, Mapping[str, Any], None] = None,
) -> DerivedMetrics:
    """
    Derive every metric the snapshot and profile have enough data for.

    Args:
        snapshot: Canonical measurement key -> value for a single day
            (see app.domain.measurement_types.normalize_name)
        profile: BiometricProfile, a plain mapping with the same fields,
            or None

    Returns:
        A fresh DerivedMetrics; absent metrics are None
    """
    if not isinstance(snapshot, Mapping):
        snapshot = {}
    gender, height_cm = _profile_fields(profile)

    weight = snapshot.get(MeasurementKey.WEIGHT.value)
    waist = snapshot.get(MeasurementKey.WAIST.value)
    neck = snapshot.get(MeasurementKey.NECK.value)
    hips = snapshot.get(MeasurementKey.HIPS.value)

    calculator = FitnessMetricsCalculator
    return DerivedMetrics(
        bmi=calculator.calculate_bmi(weight, height_cm),
        body_fat=calculator.calculate_navy_body_fat(
            gender, height_cm, waist, neck, hips
        ),
        whtr=calculator.calculate_whtr(waist, height_cm),
    )
