"""Tests for the LandmarkStore session coordinator."""
import pytest

from smiledesign.app.state import CanvasMode, LandmarkStore, PanelTab
from smiledesign.model.calibration import CalibrationData
from smiledesign.model.geometry_primitives import Point
from smiledesign.model.landmarks import LandmarkGroup, LandmarkPoint, LandmarkType as LT
from smiledesign.model.state import DesignVersion, ImageSize

CALIBRATION = CalibrationData(Point(0.3, 0.3), Point(0.7, 0.3), 62.0, 0.155)


@pytest.fixture
def store(qt_core_app) -> LandmarkStore:
    return LandmarkStore()


def test_initial_state(store):
    assert store.landmarks == {}
    assert store.calibration is None
    assert store.derived_structures is None
    assert store.measurements is None
    assert not store.is_dirty
    assert store.image_width == 1


class TestLandmarkMutations:

    def test_place_replaces_same_type(self, store):
        store.place_landmark(LandmarkPoint(LT.NASION, 0.5, 0.15))
        store.place_landmark(LandmarkPoint(LT.NASION, 0.51, 0.16))
        assert len(store.landmarks) == 1
        assert store.landmarks[LT.NASION] == Point(0.51, 0.16)

    def test_place_recomputes(self, store):
        store.place_landmark(LandmarkPoint(LT.CONTACT_11_21, 0.5, 0.40))
        midline = store.derived_structures.dental_midline
        assert midline.start.y == pytest.approx(0.25)
        assert midline.end.y == pytest.approx(0.55)
        assert store.measurements is not None

    def test_remove(self, store):
        store.place_landmark(LandmarkPoint(LT.CONTACT_11_21, 0.5, 0.40))
        store.remove_landmark(LT.CONTACT_11_21)
        assert store.landmarks == {}
        assert store.derived_structures.dental_midline is None

    def test_move_existing(self, store):
        store.place_landmark(LandmarkPoint(LT.POGONION, 0.5, 0.6))
        store.move_landmark(LT.POGONION, 0.49, 0.62)
        assert store.landmarks[LT.POGONION] == Point(0.49, 0.62)

    def test_move_missing_does_not_create_but_dirties(self, store):
        store.place_landmark(LandmarkPoint(LT.POGONION, 0.5, 0.6))
        store.mark_clean()
        store.move_landmark(LT.NASION, 0.5, 0.15)
        assert store.landmarks == {LT.POGONION: Point(0.5, 0.6)}
        assert store.measurements is not None
        assert store.is_dirty

    def test_set_all_landmarks(self, store, smile_points):
        store.place_landmark(LandmarkPoint(LT.NASION, 0.1, 0.1))
        store.set_all_landmarks(smile_points)
        assert len(store.landmarks) == len(smile_points)
        assert store.landmarks[LT.NASION] == Point(0.50, 0.15)
        assert store.measurements.red_proportion == pytest.approx(0.70)

    def test_replace_landmark_group_keeps_other_group(self, store, smile_points):
        store.set_all_landmarks(smile_points)
        store.replace_landmark_group(LandmarkGroup.FACIAL, [LandmarkPoint(LT.NASION, 0.45, 0.14)])
        lms = store.landmarks
        assert lms[LT.NASION] == Point(0.45, 0.14)
        assert LT.GLABELLA not in lms
        assert LT.CUSP_13 in lms


class TestDirtyFlag:

    @pytest.mark.parametrize("mutate", [
        lambda s: s.place_landmark(LandmarkPoint(LT.NASION, 0.5, 0.2)),
        lambda s: s.remove_landmark(LT.POGONION),
        lambda s: s.move_landmark(LT.POGONION, 0.5, 0.61),
        lambda s: s.move_landmark(LT.NASION, 0.5, 0.15),
        lambda s: s.set_calibration(CALIBRATION),
        lambda s: s.set_all_landmarks([]),
        lambda s: s.replace_landmark_group(LandmarkGroup.DENTAL, []),
    ])
    def test_mutators_dirty_the_session(self, store, mutate):
        store.load_version(DesignVersion(landmarks=[LandmarkPoint(LT.POGONION, 0.5, 0.6)]))
        assert not store.is_dirty
        mutate(store)
        assert store.is_dirty

    def test_load_version_is_clean(self, store, smile_points):
        store.place_landmark(LandmarkPoint(LT.NASION, 0.5, 0.2))
        store.load_version(DesignVersion(landmarks=smile_points, calibration=CALIBRATION))
        assert not store.is_dirty
        assert store.calibration == CALIBRATION
        assert len(store.landmarks) == len(smile_points)
        assert store.derived_structures.tooth_outlines is not None

    def test_mark_clean(self, store):
        store.place_landmark(LandmarkPoint(LT.NASION, 0.5, 0.2))
        store.mark_clean()
        assert not store.is_dirty


class TestCalibration:

    def test_calibration_enables_mm(self, store):
        store.set_image_natural_size(ImageSize(1000, 750))
        store.set_all_landmarks([
            LandmarkPoint(LT.GLABELLA, 0.5, 0.1),
            LandmarkPoint(LT.POGONION, 0.5, 0.6),
            LandmarkPoint(LT.CONTACT_11_21, 0.52, 0.43),
        ])
        assert store.measurements.midline_deviation_mm is None

        cal = store.calibrate(Point(0.3, 0.3), Point(0.7, 0.3), 62.0)
        assert cal.mm_per_pixel == pytest.approx(0.155)
        assert store.measurements.midline_deviation_mm == pytest.approx(3.1)

    def test_image_size_change_recomputes_without_dirtying(self, store):
        store.load_version(DesignVersion(
            landmarks=[
                LandmarkPoint(LT.GLABELLA, 0.5, 0.1),
                LandmarkPoint(LT.POGONION, 0.5, 0.6),
                LandmarkPoint(LT.CONTACT_11_21, 0.52, 0.43),
            ],
            calibration=CALIBRATION,
        ))
        store.set_image_natural_size(ImageSize(2000, 1500))
        assert store.measurements.midline_deviation_mm == pytest.approx(6.2)
        assert not store.is_dirty


class TestSignals:

    def test_mutation_emits(self, store):
        structures, dirty, landmarks = [], [], []
        store.structures_changed.connect(lambda d, m: structures.append((d, m)))
        store.dirty_changed.connect(lambda value: dirty.append(value))
        store.landmarks_changed.connect(lambda lms: landmarks.append(lms))

        store.place_landmark(LandmarkPoint(LT.NASION, 0.5, 0.2))
        store.place_landmark(LandmarkPoint(LT.POGONION, 0.5, 0.6))
        store.mark_clean()

        assert len(structures) == 2
        assert structures[-1][0].facial_midline is not None
        assert dirty == [True, False]
        assert set(landmarks[-1]) == {LT.NASION, LT.POGONION}


def test_snapshot_round_trips_through_load(store, smile_points):
    store.set_all_landmarks(smile_points)
    store.set_calibration(CALIBRATION)
    version = store.snapshot(notes="initial")
    assert version.measurements == store.measurements

    other = LandmarkStore()
    other.load_version(DesignVersion.from_dict(version.to_dict()))
    assert other.landmarks == store.landmarks
    assert other.measurements == store.measurements


class TestViewState:

    def test_zoom_is_clamped(self, store):
        store.set_zoom(50)
        assert store.view.zoom == 10.0
        store.set_zoom(0.01)
        assert store.view.zoom == 0.1

    def test_view_changes_do_not_dirty(self, store):
        store.set_canvas_mode(CanvasMode.LANDMARK)
        store.set_active_landmark_type(LT.NASION)
        store.set_selected_landmark(LT.NASION)
        store.set_pan_offset(Point(10.0, -4.0))
        store.toggle_layer("golden_overlay")
        store.set_right_panel_tab(PanelTab.MEASUREMENTS)
        assert store.view.canvas_mode is CanvasMode.LANDMARK
        assert store.view.layers.golden_overlay
        assert not store.is_dirty

    def test_unknown_layer(self, store):
        with pytest.raises(ValueError):
            store.toggle_layer("xray")


def test_reset(store, smile_points):
    store.set_design("design-1", "patient-1", "https://example.org/photo.jpg")
    store.set_image_natural_size(ImageSize(1000, 750))
    store.set_all_landmarks(smile_points)
    store.set_calibration(CALIBRATION)
    store.set_saving(True)
    store.set_zoom(3.0)

    store.reset()

    assert store.landmarks == {}
    assert store.calibration is None
    assert store.derived_structures is None
    assert store.measurements is None
    assert store.design.design_id is None
    assert store.image_width == 1
    assert store.view.zoom == 1.0
    assert not store.is_dirty
    assert not store.is_saving
