"""
Derived Structures
==================
Reference lines and curves reconstructed from the placed landmarks.

Every structure is computed independently. When a structure's landmarks are
missing the field is None; nothing here raises on an incomplete (or empty)
landmark set.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import logging

from smiledesign.config import (
    ASPECT_HALF_WIDTH_FACTOR,
    CONTACT_BULGE_FACTOR,
    CONTACT_TICK_HALF_WIDTH,
    DENTAL_MIDLINE_EXTENSION,
    GINGIVAL_CURVE_SEGMENTS,
    GINGIVAL_SHOULDER_FRACTION,
    INCISAL_SHOULDER_FRACTION,
    INCISAL_WIDTH_FACTOR,
    SMILE_ARC_SEGMENTS,
    TOOTH_OUTLINE_SEGMENTS,
)
from smiledesign.model.geometry_primitives import Line, Point, Vector
from smiledesign.model.geometry_utils import (
    catmull_rom_spline,
    least_squares_line,
    line_from_points,
    midpoint,
)
from smiledesign.model.landmarks import LandmarkInput, LandmarkMap, LandmarkType as LT, as_landmark_map, collect

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Landmark groups feeding each structure
# ------------------------------------------------------------------------------
FACIAL_MIDLINE_LANDMARKS = (LT.GLABELLA, LT.NASION, LT.SUBNASALE, LT.PHILTRUM_MID, LT.POGONION)

INCISAL_PLANE_LANDMARKS = (
    LT.INCISAL_11_LEFT, LT.INCISAL_11_RIGHT, LT.INCISAL_21_LEFT, LT.INCISAL_21_RIGHT,
    LT.INCISAL_12, LT.INCISAL_22,
)

SMILE_ARC_LANDMARKS = (
    LT.COMMISSURE_LEFT, LT.CUSP_13, LT.INCISAL_12,
    LT.INCISAL_11_LEFT, LT.INCISAL_11_RIGHT, LT.INCISAL_21_LEFT, LT.INCISAL_21_RIGHT,
    LT.INCISAL_22, LT.CUSP_23, LT.COMMISSURE_RIGHT,
)

GINGIVAL_CURVE_LANDMARKS = (
    LT.GINGIVAL_13, LT.CONTACT_11_12, LT.GINGIVAL_12, LT.GINGIVAL_11, LT.CONTACT_11_21,
    LT.GINGIVAL_21, LT.GINGIVAL_22, LT.CONTACT_21_22, LT.GINGIVAL_23,
)

CONTACT_LANDMARKS = (LT.CONTACT_11_21, LT.CONTACT_11_12, LT.CONTACT_21_22)


@dataclass(frozen=True)
class ToothSpec:
    """Which landmarks outline one anterior tooth."""
    tooth: int
    gingival: LT
    incisal: tuple[LT, ...]
    left_contact: Optional[LT]
    right_contact: Optional[LT]


# Walk order of the outline: gingival -> right side -> incisal -> left side.
TOOTH_SPECS: tuple[ToothSpec, ...] = (
    ToothSpec(13, LT.GINGIVAL_13, (LT.CUSP_13,), None, LT.CONTACT_11_12),
    ToothSpec(12, LT.GINGIVAL_12, (LT.INCISAL_12,), LT.CONTACT_11_12, None),
    ToothSpec(11, LT.GINGIVAL_11, (LT.INCISAL_11_LEFT, LT.INCISAL_11_RIGHT), LT.CONTACT_11_21, LT.CONTACT_11_12),
    ToothSpec(21, LT.GINGIVAL_21, (LT.INCISAL_21_LEFT, LT.INCISAL_21_RIGHT), LT.CONTACT_11_21, LT.CONTACT_21_22),
    ToothSpec(22, LT.GINGIVAL_22, (LT.INCISAL_22,), None, LT.CONTACT_21_22),
    ToothSpec(23, LT.GINGIVAL_23, (LT.CUSP_23,), LT.CONTACT_21_22, None),
)


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ToothOutline:
    """Closed, smoothed outline of one tooth (first sample == last sample)."""
    tooth: int
    points: List[Point]

    def to_dict(self) -> Dict[str, Any]:
        return {"tooth": self.tooth, "points": [p.to_dict() for p in self.points]}


@dataclass(frozen=True)
class DerivedStructures:
    facial_midline: Optional[Line] = None
    interpupillary_line: Optional[Line] = None
    commissure_line: Optional[Line] = None
    dental_midline: Optional[Line] = None
    incisal_plane: Optional[Line] = None
    smile_arc: Optional[List[Point]] = None
    gingival_curve: Optional[List[Point]] = None
    tooth_outlines: Optional[List[ToothOutline]] = None
    contact_lines: Optional[List[Line]] = None

    def to_dict(self) -> Dict[str, Any]:
        def _line(line: Optional[Line]) -> Optional[Dict[str, Any]]:
            return line.to_dict() if line is not None else None

        def _curve(points: Optional[List[Point]]) -> Optional[List[Dict[str, float]]]:
            return [p.to_dict() for p in points] if points is not None else None

        return {
            "facialMidline": _line(self.facial_midline),
            "interpupillaryLine": _line(self.interpupillary_line),
            "commissureLine": _line(self.commissure_line),
            "dentalMidline": _line(self.dental_midline),
            "incisalPlane": _line(self.incisal_plane),
            "smileArc": _curve(self.smile_arc),
            "gingivalCurve": _curve(self.gingival_curve),
            "toothOutlines": (
                [o.to_dict() for o in self.tooth_outlines] if self.tooth_outlines is not None else None
            ),
            "contactLines": (
                [c.to_dict() for c in self.contact_lines] if self.contact_lines is not None else None
            ),
        }


# ------------------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------------------
def compute_derived_structures(landmarks: LandmarkInput) -> DerivedStructures:
    """Reconstruct every reference line and curve the landmark set supports."""
    lms = as_landmark_map(landmarks)

    incisal_plane = _fit_line(lms, INCISAL_PLANE_LANDMARKS)

    return DerivedStructures(
        facial_midline=_fit_line(lms, FACIAL_MIDLINE_LANDMARKS),
        interpupillary_line=_two_point_line(lms, LT.PUPIL_LEFT, LT.PUPIL_RIGHT),
        commissure_line=_two_point_line(lms, LT.COMMISSURE_LEFT, LT.COMMISSURE_RIGHT),
        dental_midline=_dental_midline(lms, incisal_plane),
        incisal_plane=incisal_plane,
        smile_arc=_sorted_curve(lms, SMILE_ARC_LANDMARKS, SMILE_ARC_SEGMENTS),
        gingival_curve=_sorted_curve(lms, GINGIVAL_CURVE_LANDMARKS, GINGIVAL_CURVE_SEGMENTS),
        tooth_outlines=_tooth_outlines(lms),
        contact_lines=_contact_lines(lms),
    )


def _fit_line(lms: LandmarkMap, types: Sequence[LT]) -> Optional[Line]:
    points = collect(lms, types)
    if len(points) < 2:
        return None
    return least_squares_line(points)

def _two_point_line(lms: LandmarkMap, a: LT, b: LT) -> Optional[Line]:
    if a in lms and b in lms:
        return line_from_points(lms[a], lms[b])
    return None

def _dental_midline(lms: LandmarkMap, incisal_plane: Optional[Line]) -> Optional[Line]:
    """
    Line through the central contact point, perpendicular to the incisal plane.

    Without an incisal plane the midline is drawn straight down the image.
    """
    contact = lms.get(LT.CONTACT_11_21)
    if contact is None:
        return None

    if incisal_plane is None:
        return Line(
            start=Point(contact.x, contact.y - DENTAL_MIDLINE_EXTENSION),
            end=Point(contact.x, contact.y + DENTAL_MIDLINE_EXTENSION),
        )

    direction = incisal_plane.to_vector()
    if direction.magnitude == 0:
        logger.debug("Incisal plane has zero length; dental midline skipped.")
        return None

    offset = direction.normalize().normal() * DENTAL_MIDLINE_EXTENSION
    return Line(start=contact - offset, end=contact + offset)

def _sorted_curve(lms: LandmarkMap, types: Sequence[LT], segments: int) -> Optional[List[Point]]:
    points = sorted(collect(lms, types), key=lambda p: p.x)
    if len(points) < 3:
        return None
    return catmull_rom_spline(points, segments)

def _contact_lines(lms: LandmarkMap) -> Optional[List[Line]]:
    ticks = [
        Line(
            start=Point(cp.x - CONTACT_TICK_HALF_WIDTH, cp.y),
            end=Point(cp.x + CONTACT_TICK_HALF_WIDTH, cp.y),
        )
        for cp in collect(lms, CONTACT_LANDMARKS)
    ]
    return ticks or None


# --- Tooth outlines ---

def _tooth_outlines(lms: LandmarkMap) -> Optional[List[ToothOutline]]:
    outlines: List[ToothOutline] = []
    for spec in TOOTH_SPECS:
        gingival = lms.get(spec.gingival)
        incisal = collect(lms, spec.incisal)
        if gingival is None or len(incisal) != len(spec.incisal):
            logger.debug(f"Tooth {spec.tooth}: gingival/incisal landmarks missing, outline skipped.")
            continue

        left = lms.get(spec.left_contact) if spec.left_contact else None
        right = lms.get(spec.right_contact) if spec.right_contact else None
        outlines.append(ToothOutline(tooth=spec.tooth, points=build_tooth_outline(gingival, incisal, left, right)))

    return outlines or None

def build_tooth_outline(
    gingival: Point,
    incisal: Sequence[Point],
    left_contact: Optional[Point],
    right_contact: Optional[Point],
) -> List[Point]:
    """
    Closed outline through the actual landmark dots of one tooth.

    Args:
        gingival: Gingival margin (top of the crown).
        incisal: One incisal/cusp point, or the (left, right) incisal corners.
        left_contact: Proximal contact on the left side, if placed.
        right_contact: Proximal contact on the right side, if placed.

    Returns:
        A Catmull-Rom ring starting and ending at the gingival point. Sides
        without a contact landmark are estimated from the crown's proportions.
    """
    incisal_mid = midpoint(incisal[0], incisal[1]) if len(incisal) == 2 else incisal[0]
    center_x = (gingival.x + incisal_mid.x) / 2
    half_h = abs(incisal_mid.y - gingival.y) / 2
    mid_y = (gingival.y + incisal_mid.y) / 2

    if left_contact is not None and right_contact is not None:
        half_w = abs(right_contact.x - left_contact.x) / 2
    elif len(incisal) == 2:
        half_w = abs(incisal[1].x - incisal[0].x) / 2 * INCISAL_WIDTH_FACTOR
    else:
        half_w = half_h * ASPECT_HALF_WIDTH_FACTOR

    ring: List[Point] = [gingival]

    # Right side, top to bottom
    if right_contact is not None:
        ring.extend(_contact_side(gingival, right_contact, incisal_mid))
    else:
        ring.extend(_estimated_side(center_x, half_w, half_h, gingival.y, mid_y, side=1.0))

    # Incisal dots exactly, right corner first
    ring.extend(reversed(incisal) if len(incisal) == 2 else [incisal_mid])

    # Left side, bottom to top
    if left_contact is not None:
        ring.extend(reversed(_contact_side(gingival, left_contact, incisal_mid)))
    else:
        ring.extend(reversed(_estimated_side(center_x, half_w, half_h, gingival.y, mid_y, side=-1.0)))

    ring.append(gingival)
    return catmull_rom_spline(ring, TOOTH_OUTLINE_SEGMENTS)

def _contact_side(gingival: Point, contact: Point, incisal_mid: Point) -> List[Point]:
    """Shoulder above the contact, the contact dot itself, shoulder below (top to bottom)."""
    return [
        Point(contact.x, gingival.y + (contact.y - gingival.y) * GINGIVAL_SHOULDER_FRACTION),
        contact,
        Point(contact.x, contact.y + (incisal_mid.y - contact.y) * INCISAL_SHOULDER_FRACTION),
    ]

def _estimated_side(center_x: float, half_w: float, half_h: float, top_y: float, mid_y: float, side: float) -> List[Point]:
    """Estimated side profile (top to bottom); side is +1 for right, -1 for left."""
    offset = Vector(side * half_w, 0.0)
    return [
        Point(center_x, top_y + half_h * 0.5) + offset,
        Point(center_x, mid_y) + offset * CONTACT_BULGE_FACTOR,
        Point(center_x, mid_y + half_h * 0.5) + offset,
    ]
