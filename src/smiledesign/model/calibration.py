"""
Calibration
===========
Pixel-to-millimetre scale from a clinician-picked reference distance
(a measured interpupillary distance, a ruler sticker, ...).

Note: both axes of the normalized points are scaled by the image WIDTH, so
the y coordinate is treated as a fraction of the width as well.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from smiledesign.model.geometry_primitives import Point
from smiledesign.model.geometry_utils import distance


def compute_mm_per_pixel(p1: Point, p2: Point, known_distance_mm: float, image_width: float) -> float:
    """
    Millimetres per pixel from two normalized reference points.

    Returns 0 when the points coincide, never NaN or infinity.
    """
    pixel_dist = distance(p1.scaled(image_width), p2.scaled(image_width))
    if pixel_dist == 0:
        return 0.0
    return known_distance_mm / pixel_dist

def normalized_to_mm(normalized_dist: float, image_width: float, mm_per_pixel: float) -> float:
    return normalized_dist * image_width * mm_per_pixel

def pixel_to_mm(pixel_dist: float, mm_per_pixel: float) -> float:
    return pixel_dist * mm_per_pixel


@dataclass(frozen=True)
class CalibrationData:
    point1: Point
    point2: Point
    known_distance_mm: float
    mm_per_pixel: float

    @classmethod
    def from_points(cls, point1: Point, point2: Point, known_distance_mm: float, image_width: float) -> CalibrationData:
        """Build calibration from the two picked points and the entered reference distance."""
        if known_distance_mm <= 0:
            raise ValueError(f"Known distance must be positive, got {known_distance_mm} mm.")
        if image_width <= 0:
            raise ValueError(f"Image width must be positive, got {image_width} px.")
        return cls(
            point1=point1,
            point2=point2,
            known_distance_mm=known_distance_mm,
            mm_per_pixel=compute_mm_per_pixel(point1, point2, known_distance_mm, image_width),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "point1": self.point1.to_dict(),
            "point2": self.point2.to_dict(),
            "knownDistanceMm": float(self.known_distance_mm),
            "mmPerPixel": float(self.mm_per_pixel),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> CalibrationData:
        return CalibrationData(
            point1=Point.from_dict(data["point1"]),
            point2=Point.from_dict(data["point2"]),
            known_distance_mm=float(data["knownDistanceMm"]),
            mm_per_pixel=float(data["mmPerPixel"]),
        )
