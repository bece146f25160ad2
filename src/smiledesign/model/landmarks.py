"""
Landmark Catalog
================
The fixed set of facial and dental landmarks a clinician can place on a
smile photo, plus helpers to move between the placement list and the
type -> point mapping the engines work on.

Tooth numbers follow the FDI scheme: 11/21 are the upper central incisors,
12/22 the laterals and 13/23 the canines (1x on the patient's right).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Iterable, Mapping, Union

from smiledesign.model.geometry_primitives import Point


class LandmarkGroup(StrEnum):
    FACIAL = "facial"
    DENTAL = "dental"


class LandmarkType(StrEnum):
    # Facial
    GLABELLA = "GLABELLA"
    NASION = "NASION"
    SUBNASALE = "SUBNASALE"
    PHILTRUM_MID = "PHILTRUM_MID"
    POGONION = "POGONION"
    PUPIL_LEFT = "PUPIL_LEFT"
    PUPIL_RIGHT = "PUPIL_RIGHT"
    COMMISSURE_LEFT = "COMMISSURE_LEFT"
    COMMISSURE_RIGHT = "COMMISSURE_RIGHT"
    # Dental
    INCISAL_11_LEFT = "INCISAL_11_LEFT"
    INCISAL_11_RIGHT = "INCISAL_11_RIGHT"
    INCISAL_21_LEFT = "INCISAL_21_LEFT"
    INCISAL_21_RIGHT = "INCISAL_21_RIGHT"
    INCISAL_12 = "INCISAL_12"
    INCISAL_22 = "INCISAL_22"
    GINGIVAL_11 = "GINGIVAL_11"
    GINGIVAL_21 = "GINGIVAL_21"
    GINGIVAL_12 = "GINGIVAL_12"
    GINGIVAL_22 = "GINGIVAL_22"
    GINGIVAL_13 = "GINGIVAL_13"
    GINGIVAL_23 = "GINGIVAL_23"
    CONTACT_11_21 = "CONTACT_11_21"
    CONTACT_11_12 = "CONTACT_11_12"
    CONTACT_21_22 = "CONTACT_21_22"
    CUSP_13 = "CUSP_13"
    CUSP_23 = "CUSP_23"


# Placement-guide order
FACIAL_LANDMARKS: tuple[LandmarkType, ...] = (
    LandmarkType.GLABELLA, LandmarkType.NASION, LandmarkType.SUBNASALE,
    LandmarkType.PHILTRUM_MID, LandmarkType.POGONION,
    LandmarkType.PUPIL_LEFT, LandmarkType.PUPIL_RIGHT,
    LandmarkType.COMMISSURE_LEFT, LandmarkType.COMMISSURE_RIGHT,
)

DENTAL_LANDMARKS: tuple[LandmarkType, ...] = (
    LandmarkType.INCISAL_11_LEFT, LandmarkType.INCISAL_11_RIGHT,
    LandmarkType.INCISAL_21_LEFT, LandmarkType.INCISAL_21_RIGHT,
    LandmarkType.INCISAL_12, LandmarkType.INCISAL_22,
    LandmarkType.GINGIVAL_11, LandmarkType.GINGIVAL_21, LandmarkType.GINGIVAL_12,
    LandmarkType.GINGIVAL_22, LandmarkType.GINGIVAL_13, LandmarkType.GINGIVAL_23,
    LandmarkType.CONTACT_11_21, LandmarkType.CONTACT_11_12, LandmarkType.CONTACT_21_22,
    LandmarkType.CUSP_13, LandmarkType.CUSP_23,
)

ALL_LANDMARKS: tuple[LandmarkType, ...] = FACIAL_LANDMARKS + DENTAL_LANDMARKS

LANDMARK_LABELS: Dict[LandmarkType, str] = {
    LandmarkType.GLABELLA: "Glabella",
    LandmarkType.NASION: "Nasion",
    LandmarkType.SUBNASALE: "Subnasale",
    LandmarkType.PHILTRUM_MID: "Philtrum Mid",
    LandmarkType.POGONION: "Pogonion",
    LandmarkType.PUPIL_LEFT: "Left Pupil",
    LandmarkType.PUPIL_RIGHT: "Right Pupil",
    LandmarkType.COMMISSURE_LEFT: "Left Commissure",
    LandmarkType.COMMISSURE_RIGHT: "Right Commissure",
    LandmarkType.INCISAL_11_LEFT: "Incisal 11L",
    LandmarkType.INCISAL_11_RIGHT: "Incisal 11R",
    LandmarkType.INCISAL_21_LEFT: "Incisal 21L",
    LandmarkType.INCISAL_21_RIGHT: "Incisal 21R",
    LandmarkType.INCISAL_12: "Incisal 12",
    LandmarkType.INCISAL_22: "Incisal 22",
    LandmarkType.GINGIVAL_11: "Gingival 11",
    LandmarkType.GINGIVAL_21: "Gingival 21",
    LandmarkType.GINGIVAL_12: "Gingival 12",
    LandmarkType.GINGIVAL_22: "Gingival 22",
    LandmarkType.GINGIVAL_13: "Gingival 13",
    LandmarkType.GINGIVAL_23: "Gingival 23",
    LandmarkType.CONTACT_11_21: "Contact 11-21",
    LandmarkType.CONTACT_11_12: "Contact 11-12",
    LandmarkType.CONTACT_21_22: "Contact 21-22",
    LandmarkType.CUSP_13: "Cusp 13",
    LandmarkType.CUSP_23: "Cusp 23",
}


def landmark_group(landmark_type: LandmarkType) -> LandmarkGroup:
    if landmark_type in FACIAL_LANDMARKS:
        return LandmarkGroup.FACIAL
    return LandmarkGroup.DENTAL

def is_facial_landmark(landmark_type: LandmarkType) -> bool:
    return landmark_group(landmark_type) is LandmarkGroup.FACIAL


@dataclass(frozen=True)
class LandmarkPoint:
    """A placed landmark. x and y are normalized to the photo's natural size."""
    type: LandmarkType
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "x": float(self.x), "y": float(self.y)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> LandmarkPoint:
        # LandmarkType(...) raises ValueError for names outside the catalog
        return LandmarkPoint(type=LandmarkType(data["type"]), x=float(data["x"]), y=float(data["y"]))


LandmarkMap = Dict[LandmarkType, Point]
LandmarkInput = Union[Mapping[LandmarkType, Point], Iterable[LandmarkPoint]]


def as_landmark_map(landmarks: LandmarkInput) -> LandmarkMap:
    """
    Normalise engine input to a type -> point mapping.

    Accepts either a mapping or an iterable of LandmarkPoint. When the
    iterable repeats a type, the later entry wins.
    """
    if isinstance(landmarks, Mapping):
        return {LandmarkType(t): p for t, p in landmarks.items()}
    return {lm.type: lm.point for lm in landmarks}

def to_landmark_points(landmarks: Mapping[LandmarkType, Point]) -> list[LandmarkPoint]:
    """Flatten a mapping back to placement records, in catalog order."""
    return [
        LandmarkPoint(type=t, x=landmarks[t].x, y=landmarks[t].y)
        for t in ALL_LANDMARKS if t in landmarks
    ]

def collect(landmarks: Mapping[LandmarkType, Point], types: Iterable[LandmarkType]) -> list[Point]:
    """Points for whichever of `types` are present, in the order given."""
    return [landmarks[t] for t in types if t in landmarks]
