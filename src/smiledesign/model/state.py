"""
Design Version (Data Model)
===========================
This module defines what gets persisted for a smile design.

Why is this file needed?
------------------------
1. Persistence: A version stores only the clinician's inputs (landmarks and
   calibration). Derived structures and measurements travel along for
   reference but are always recomputed on load.
2. Decoupling: The persistence collaborator and the session store exchange
   this object instead of reaching into each other's state.

Classes:
    ImageSize: Natural pixel size of the analysed photo.
    DesignVersion: One saved snapshot of a design.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional

from smiledesign.model.calibration import CalibrationData
from smiledesign.model.derived import DerivedStructures
from smiledesign.model.landmarks import LandmarkPoint
from smiledesign.model.measurements import Measurements

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}.")


@dataclass
class DesignVersion:
    """
    A persisted snapshot. Only `landmarks` and `calibration` are inputs; the
    computed fields are informational.
    """
    landmarks: List[LandmarkPoint] = field(default_factory=list)
    calibration: Optional[CalibrationData] = None
    measurements: Optional[Measurements] = None
    derived_structures: Optional[DerivedStructures] = None
    notes: Optional[str] = None
    version_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persistence API's JSON shape."""
        return {
            "versionNumber": self.version_number,
            "landmarkData": [lm.to_dict() for lm in self.landmarks],
            "calibrationData": self.calibration.to_dict() if self.calibration else None,
            "measurements": self.measurements.to_dict() if self.measurements else None,
            "derivedLines": self.derived_structures.to_dict() if self.derived_structures else None,
            "notes": self.notes,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> DesignVersion:
        """
        Restore the inputs of a version. Stored measurements and derived lines
        are not read back; the store recomputes them.
        """
        if "landmarkData" not in data:
            raise ValueError("Version data has no 'landmarkData'.")

        calibration_data = data.get("calibrationData")
        version = DesignVersion(
            landmarks=[LandmarkPoint.from_dict(d) for d in data["landmarkData"]],
            calibration=CalibrationData.from_dict(calibration_data) if calibration_data else None,
            notes=data.get("notes"),
            version_number=data.get("versionNumber"),
        )
        logger.debug(f"Version parsed with {len(version.landmarks)} landmarks.")
        return version
