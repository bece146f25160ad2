from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Iterable, Optional

from PySide6.QtCore import QObject, Signal

from smiledesign.config import DEFAULT_IMAGE_WIDTH, ZOOM_MAX, ZOOM_MIN
from smiledesign.model.calibration import CalibrationData
from smiledesign.model.derived import DerivedStructures, compute_derived_structures
from smiledesign.model.geometry_primitives import Point
from smiledesign.model.landmarks import (
    LandmarkGroup,
    LandmarkMap,
    LandmarkPoint,
    LandmarkType,
    as_landmark_map,
    landmark_group,
    to_landmark_points,
)
from smiledesign.model.measurements import Measurements, compute_measurements
from smiledesign.model.state import DesignVersion, ImageSize

logger = logging.getLogger(__name__)


class CanvasMode(StrEnum):
    PAN = "pan"
    LANDMARK = "landmark"
    CALIBRATION = "calibration"

class PanelTab(StrEnum):
    GUIDE = "guide"
    LANDMARKS = "landmarks"
    MEASUREMENTS = "measurements"
    CALIBRATION = "calibration"
    VERSIONS = "versions"
    EXPORT = "export"

@dataclass
class LayerVisibility:
    landmarks: bool = True
    derived_lines: bool = True
    measurements: bool = True
    golden_overlay: bool = False

@dataclass
class DesignInfo:
    """Which design/photo the session is editing."""
    design_id: Optional[str] = None
    patient_id: Optional[str] = None
    image_url: Optional[str] = None
    image_natural_size: Optional[ImageSize] = None

@dataclass
class ViewState:
    """Canvas interaction state. Held here for the canvas; never read by the engines."""
    canvas_mode: CanvasMode = CanvasMode.PAN
    zoom: float = 1.0
    pan_offset: Point = field(default_factory=lambda: Point(0.0, 0.0))
    active_landmark_type: Optional[LandmarkType] = None
    selected_landmark: Optional[LandmarkType] = None
    layers: LayerVisibility = field(default_factory=LayerVisibility)
    right_panel_tab: PanelTab = PanelTab.GUIDE


class LandmarkStore(QObject):
    """
    Session state for one smile design.

    Every landmark or calibration mutation recomputes the derived structures
    and measurements synchronously before returning, so readers never see
    stale outputs. Not safe for concurrent mutation.
    """
    landmarks_changed = Signal(object)
    calibration_changed = Signal(object)
    structures_changed = Signal(object, object)
    dirty_changed = Signal(bool)
    view_changed = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        self.design = DesignInfo()
        self.view = ViewState()
        self._landmarks: LandmarkMap = {}
        self._calibration: Optional[CalibrationData] = None
        self._derived: Optional[DerivedStructures] = None
        self._measurements: Optional[Measurements] = None
        self._is_dirty = False
        self.is_saving = False

    # --- Read access ---

    @property
    def landmarks(self) -> LandmarkMap:
        return dict(self._landmarks)

    @property
    def landmark_points(self) -> list[LandmarkPoint]:
        return to_landmark_points(self._landmarks)

    @property
    def calibration(self) -> Optional[CalibrationData]:
        return self._calibration

    @property
    def derived_structures(self) -> Optional[DerivedStructures]:
        return self._derived

    @property
    def measurements(self) -> Optional[Measurements]:
        return self._measurements

    @property
    def is_dirty(self) -> bool:
        return self._is_dirty

    @property
    def image_width(self) -> int:
        size = self.design.image_natural_size
        return size.width if size is not None else DEFAULT_IMAGE_WIDTH

    # --- Recomputation ---

    def recompute(self) -> None:
        """Re-derive structures and measurements from the current inputs."""
        self._derived = compute_derived_structures(self._landmarks)
        self._measurements = compute_measurements(
            self._landmarks, self._derived, self._calibration, self.image_width
        )
        self.structures_changed.emit(self._derived, self._measurements)

    def _set_dirty(self, dirty: bool) -> None:
        if dirty != self._is_dirty:
            self._is_dirty = dirty
            self.dirty_changed.emit(dirty)

    def _landmarks_edited(self) -> None:
        self.landmarks_changed.emit(self.landmarks)
        self.recompute()
        self._set_dirty(True)

    # --- Landmark mutations ---

    def place_landmark(self, point: LandmarkPoint) -> None:
        """Place a landmark, replacing any existing landmark of the same type."""
        logger.debug(f"Placing {point.type} at ({point.x:.4f}, {point.y:.4f})")
        self._landmarks[point.type] = point.point
        self._landmarks_edited()

    def remove_landmark(self, landmark_type: LandmarkType) -> None:
        logger.debug(f"Removing {landmark_type}")
        self._landmarks.pop(landmark_type, None)
        self._landmarks_edited()

    def move_landmark(self, landmark_type: LandmarkType, x: float, y: float) -> None:
        """
        Reposition an existing landmark. An unplaced type is never created, but
        the move still counts as an edit and dirties the session.
        """
        if landmark_type in self._landmarks:
            self._landmarks[landmark_type] = Point(x, y)
        else:
            logger.debug(f"Move of unplaced landmark {landmark_type} leaves the set unchanged")
        self._landmarks_edited()

    def set_all_landmarks(self, points: Iterable[LandmarkPoint]) -> None:
        """Replace the whole landmark set (later duplicates of a type win)."""
        self._landmarks = as_landmark_map(points)
        logger.debug(f"Landmark set replaced ({len(self._landmarks)} landmarks)")
        self._landmarks_edited()

    def replace_landmark_group(self, group: LandmarkGroup, points: Iterable[LandmarkPoint]) -> None:
        """Replace every facial (or dental) landmark, keeping the other group."""
        kept = {t: p for t, p in self._landmarks.items() if landmark_group(t) is not group}
        kept.update(as_landmark_map(p for p in points if landmark_group(p.type) is group))
        self._landmarks = kept
        self._landmarks_edited()

    # --- Calibration ---

    def set_calibration(self, calibration: Optional[CalibrationData]) -> None:
        self._calibration = calibration
        self.calibration_changed.emit(calibration)
        self.recompute()
        self._set_dirty(True)

    def calibrate(self, point1: Point, point2: Point, known_distance_mm: float) -> CalibrationData:
        """Calibrate from two picked points using the current image width."""
        calibration = CalibrationData.from_points(point1, point2, known_distance_mm, self.image_width)
        logger.debug(f"Calibrated: {calibration.mm_per_pixel:.4f} mm/px")
        self.set_calibration(calibration)
        return calibration

    # --- Persistence hooks ---

    def load_version(self, design_version: DesignVersion) -> None:
        """Restore landmarks and calibration from a saved version. Leaves the session clean."""
        self._landmarks = as_landmark_map(design_version.landmarks)
        self._calibration = design_version.calibration
        logger.info(f"Loaded version {design_version.version_number} ({len(self._landmarks)} landmarks)")
        self.landmarks_changed.emit(self.landmarks)
        self.calibration_changed.emit(self._calibration)
        self.recompute()
        self._set_dirty(False)

    def snapshot(self, notes: Optional[str] = None) -> DesignVersion:
        """Current inputs and outputs, ready for the persistence collaborator."""
        return DesignVersion(
            landmarks=self.landmark_points,
            calibration=self._calibration,
            measurements=self._measurements,
            derived_structures=self._derived,
            notes=notes,
        )

    def mark_clean(self) -> None:
        self._set_dirty(False)

    def set_saving(self, saving: bool) -> None:
        self.is_saving = saving

    # --- Design / view pass-through ---

    def set_design(self, design_id: str, patient_id: str, image_url: str) -> None:
        self.design.design_id = design_id
        self.design.patient_id = patient_id
        self.design.image_url = image_url

    def set_image_natural_size(self, size: ImageSize) -> None:
        # mm conversion depends on the width; editing state is unchanged
        self.design.image_natural_size = size
        self.recompute()

    def set_canvas_mode(self, mode: CanvasMode) -> None:
        self.view.canvas_mode = mode
        self.view_changed.emit(self.view)

    def set_zoom(self, zoom: float) -> None:
        self.view.zoom = max(ZOOM_MIN, min(ZOOM_MAX, zoom))
        self.view_changed.emit(self.view)

    def set_pan_offset(self, offset: Point) -> None:
        self.view.pan_offset = offset
        self.view_changed.emit(self.view)

    def set_active_landmark_type(self, landmark_type: Optional[LandmarkType]) -> None:
        self.view.active_landmark_type = landmark_type
        self.view_changed.emit(self.view)

    def set_selected_landmark(self, landmark_type: Optional[LandmarkType]) -> None:
        self.view.selected_landmark = landmark_type
        self.view_changed.emit(self.view)

    def toggle_layer(self, layer: str) -> None:
        layers = self.view.layers
        if not hasattr(layers, layer):
            raise ValueError(f"Unknown layer '{layer}'.")
        setattr(layers, layer, not getattr(layers, layer))
        self.view_changed.emit(self.view)

    def set_right_panel_tab(self, tab: PanelTab) -> None:
        self.view.right_panel_tab = tab
        self.view_changed.emit(self.view)

    def reset(self) -> None:
        """Clear the whole session back to its initial state."""
        self.design = DesignInfo()
        self.view = ViewState()
        self._landmarks = {}
        self._calibration = None
        self._derived = None
        self._measurements = None
        self.is_saving = False
        self._set_dirty(False)
        self.landmarks_changed.emit(self.landmarks)
        self.calibration_changed.emit(None)
        self.structures_changed.emit(None, None)
        self.view_changed.emit(self.view)
        logger.info("Design session has been reset.")
