"""
Clinical Measurements
=====================
Scalar smile-analysis metrics computed from the landmarks, the derived
structures and (for millimetre values) the calibration.

Every field is independent and None when its inputs are missing. All
divisions are guarded, so no field is ever NaN or infinite.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional
import logging
import math

from smiledesign.config import (
    DEFAULT_IMAGE_WIDTH,
    GOLDEN_PROPORTION,
    GOLDEN_PROPORTION_RANGE,
    RED_PROPORTION_RANGE,
    RED_PROPORTION_TARGET,
)
from smiledesign.model.calibration import CalibrationData, normalized_to_mm
from smiledesign.model.derived import DerivedStructures
from smiledesign.model.geometry_utils import angle_between_lines, distance, perpendicular_distance
from smiledesign.model.landmarks import LandmarkInput, LandmarkMap, LandmarkType as LT, as_landmark_map

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidthRatios:
    # r11_12 compares tooth 11 with tooth 21 (left/right symmetry); no landmark
    # pair measures tooth 12 directly. r12_13 is reserved and never computed.
    r11_12: Optional[float] = None
    r12_13: Optional[float] = None


@dataclass(frozen=True)
class Measurements:
    midline_deviation_mm: Optional[float] = None
    midline_deviation_deg: Optional[float] = None
    incisal_plane_angle_deg: Optional[float] = None
    width_ratios: WidthRatios = field(default_factory=WidthRatios)
    central_dominance: Optional[float] = None
    red_proportion: Optional[float] = None
    golden_proportion_deviation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "midlineDeviationMm": self.midline_deviation_mm,
            "midlineDeviationDeg": self.midline_deviation_deg,
            "incisalPlaneAngleDeg": self.incisal_plane_angle_deg,
            "widthRatios": {"r11_12": self.width_ratios.r11_12, "r12_13": self.width_ratios.r12_13},
            "centralDominance": self.central_dominance,
            "redProportion": self.red_proportion,
            "goldenProportionDeviation": self.golden_proportion_deviation,
        }


def round_half_up(value: float, digits: int) -> float:
    """Round halves towards +infinity, as the readouts expect (not banker's rounding)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def compute_measurements(
    landmarks: LandmarkInput,
    derived: DerivedStructures,
    calibration: Optional[CalibrationData],
    image_width: float = DEFAULT_IMAGE_WIDTH,
) -> Measurements:
    lms = as_landmark_map(landmarks)

    midline_mm: Optional[float] = None
    midline_deg: Optional[float] = None
    if derived.facial_midline is not None and derived.dental_midline is not None:
        # Deviation is measured at the dental midline's start point
        normalized_dev = perpendicular_distance(derived.dental_midline.start, derived.facial_midline)
        midline_mm = _to_mm(normalized_dev, calibration, image_width)
        midline_deg = angle_between_lines(derived.facial_midline, derived.dental_midline)

    incisal_angle: Optional[float] = None
    if derived.incisal_plane is not None and derived.interpupillary_line is not None:
        incisal_angle = angle_between_lines(derived.incisal_plane, derived.interpupillary_line)

    w11 = _width(lms, LT.INCISAL_11_LEFT, LT.INCISAL_11_RIGHT)
    w21 = _width(lms, LT.INCISAL_21_LEFT, LT.INCISAL_21_RIGHT)
    intercanine = _width(lms, LT.CUSP_13, LT.CUSP_23)

    central_dominance: Optional[float] = None
    if w11 and intercanine:
        central_dominance = round_half_up(w11 / intercanine, 2)

    r11_12: Optional[float] = None
    if w11 and w21:
        r11_12 = round_half_up(w11 / w21, 2)

    red = _red_proportion(w11, w21, intercanine)
    golden_dev = round_half_up(red - GOLDEN_PROPORTION, 3) if red is not None else None

    return Measurements(
        midline_deviation_mm=midline_mm,
        midline_deviation_deg=midline_deg,
        incisal_plane_angle_deg=incisal_angle,
        width_ratios=WidthRatios(r11_12=r11_12),
        central_dominance=central_dominance,
        red_proportion=red,
        golden_proportion_deviation=golden_dev,
    )


def _to_mm(normalized_dist: float, calibration: Optional[CalibrationData], image_width: float) -> Optional[float]:
    if calibration is None or not image_width:
        return None
    return normalized_to_mm(normalized_dist, image_width, calibration.mm_per_pixel)

def _width(lms: LandmarkMap, a: LT, b: LT) -> Optional[float]:
    if a in lms and b in lms:
        return distance(lms[a], lms[b])
    return None

def _red_proportion(w11: Optional[float], w21: Optional[float], intercanine: Optional[float]) -> Optional[float]:
    """
    Lateral / central width ratio.

    The lateral width is not landmarked; it is estimated as what is left of
    the intercanine width after both centrals, split over two laterals.
    """
    if not w11 or not intercanine:
        return None
    avg_central = (w11 + w21) / 2 if w21 else w11
    lateral_approx = (intercanine - 2 * avg_central) / 2
    if avg_central <= 0 or lateral_approx <= 0:
        logger.debug("Intercanine width too small for a lateral estimate; RED proportion skipped.")
        return None
    return round_half_up(lateral_approx / avg_central, 2)


# ------------------------------------------------------------------------------
# Presentation helpers
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ProportionAssessment:
    label: str
    value: float
    target: float
    low: float
    high: float

    @property
    def in_range(self) -> bool:
        return self.low <= self.value <= self.high

    @property
    def position(self) -> float:
        """Where the value sits in [low, high], clamped to [0, 1]."""
        return min(1.0, max(0.0, (self.value - self.low) / (self.high - self.low)))

    @property
    def target_position(self) -> float:
        return (self.target - self.low) / (self.high - self.low)


def assess_proportions(measurements: Measurements) -> list[ProportionAssessment]:
    """Compare the RED proportion against the RED and golden-proportion targets."""
    red = measurements.red_proportion
    if red is None:
        return []
    return [
        ProportionAssessment("RED", red, RED_PROPORTION_TARGET, *RED_PROPORTION_RANGE),
        ProportionAssessment("Golden proportion", red, GOLDEN_PROPORTION, *GOLDEN_PROPORTION_RANGE),
    ]


@dataclass(frozen=True)
class MeasurementRow:
    label: str
    value: Optional[str]
    unit: str


def measurement_rows(measurements: Measurements) -> Iterator[MeasurementRow]:
    """Formatted readout rows; value is None where the metric is unavailable."""
    m = measurements

    def fixed(value: Optional[float], digits: int) -> Optional[str]:
        return f"{value:.{digits}f}" if value is not None else None

    def percent(value: Optional[float]) -> Optional[str]:
        return f"{value * 100:.0f}%" if value is not None else None

    golden: Optional[str] = None
    if m.golden_proportion_deviation is not None:
        sign = "+" if m.golden_proportion_deviation > 0 else ""
        golden = f"{sign}{m.golden_proportion_deviation * 100:.1f}%"

    yield MeasurementRow("Midline deviation", fixed(m.midline_deviation_mm, 1), "mm")
    yield MeasurementRow("Midline angle", fixed(m.midline_deviation_deg, 1), "°")
    yield MeasurementRow("Incisal plane angle", fixed(m.incisal_plane_angle_deg, 1), "°")
    yield MeasurementRow("Width 11:21", fixed(m.width_ratios.r11_12, 2), "")
    yield MeasurementRow("Central dominance", percent(m.central_dominance), "")
    yield MeasurementRow("RED proportion", percent(m.red_proportion), "")
    yield MeasurementRow("Golden proportion deviation", golden, "")
