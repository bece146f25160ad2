from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from smiledesign.model.geometry_primitives import Point
from smiledesign.model.landmarks import LandmarkPoint, LandmarkType as LT


# A frontal smile photo with a straight facial midline at x=0.5, level pupils
# and anterior teeth whose laterals are 0.7x the central width.
SMILE_COORDS: dict[LT, tuple[float, float]] = {
    LT.GLABELLA: (0.50, 0.10),
    LT.NASION: (0.50, 0.15),
    LT.SUBNASALE: (0.50, 0.30),
    LT.PHILTRUM_MID: (0.50, 0.35),
    LT.POGONION: (0.50, 0.60),
    LT.PUPIL_LEFT: (0.35, 0.20),
    LT.PUPIL_RIGHT: (0.65, 0.20),
    LT.COMMISSURE_LEFT: (0.38, 0.45),
    LT.COMMISSURE_RIGHT: (0.62, 0.45),
    LT.CUSP_13: (0.449, 0.46),
    LT.INCISAL_12: (0.46, 0.465),
    LT.INCISAL_11_LEFT: (0.47, 0.47),
    LT.INCISAL_11_RIGHT: (0.50, 0.47),
    LT.INCISAL_21_LEFT: (0.50, 0.47),
    LT.INCISAL_21_RIGHT: (0.53, 0.47),
    LT.INCISAL_22: (0.54, 0.465),
    LT.CUSP_23: (0.551, 0.46),
    LT.GINGIVAL_13: (0.449, 0.41),
    LT.GINGIVAL_12: (0.46, 0.415),
    LT.GINGIVAL_11: (0.485, 0.41),
    LT.GINGIVAL_21: (0.515, 0.41),
    LT.GINGIVAL_22: (0.54, 0.415),
    LT.GINGIVAL_23: (0.551, 0.41),
    LT.CONTACT_11_21: (0.50, 0.43),
    LT.CONTACT_11_12: (0.47, 0.435),
    LT.CONTACT_21_22: (0.53, 0.435),
}


@pytest.fixture
def smile_landmarks() -> dict[LT, Point]:
    return {t: Point(x, y) for t, (x, y) in SMILE_COORDS.items()}


@pytest.fixture
def smile_points() -> list[LandmarkPoint]:
    return [LandmarkPoint(type=t, x=x, y=y) for t, (x, y) in SMILE_COORDS.items()]


@pytest.fixture(scope="session")
def qt_core_app() -> QCoreApplication:
    # Signals deliver directly without an event loop, but Qt expects an app instance
    return QCoreApplication.instance() or QCoreApplication([])
