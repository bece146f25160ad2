"""Tests for the derived-structures engine."""
from dataclasses import fields

import pytest

from smiledesign.model.derived import DerivedStructures, build_tooth_outline, compute_derived_structures
from smiledesign.model.geometry_primitives import Point
from smiledesign.model.landmarks import LandmarkPoint, LandmarkType as LT


def assert_point(actual: Point, x: float, y: float) -> None:
    assert actual.x == pytest.approx(x)
    assert actual.y == pytest.approx(y)


def test_empty_landmarks_give_empty_structures():
    derived = compute_derived_structures([])
    assert all(getattr(derived, f.name) is None for f in fields(DerivedStructures))


def test_full_smile_produces_every_structure(smile_landmarks):
    derived = compute_derived_structures(smile_landmarks)
    assert all(getattr(derived, f.name) is not None for f in fields(DerivedStructures))


def test_list_and_mapping_inputs_agree(smile_landmarks, smile_points):
    assert compute_derived_structures(smile_points) == compute_derived_structures(smile_landmarks)


class TestFacialMidline:

    def test_vertical_fit(self):
        lms = {
            LT.GLABELLA: Point(0.5, 0.10),
            LT.NASION: Point(0.5, 0.15),
            LT.SUBNASALE: Point(0.5, 0.30),
            LT.POGONION: Point(0.5, 0.60),
        }
        midline = compute_derived_structures(lms).facial_midline
        assert_point(midline.start, 0.5, 0.10)
        assert_point(midline.end, 0.5, 0.60)

    def test_single_point_is_not_enough(self):
        assert compute_derived_structures({LT.NASION: Point(0.5, 0.15)}).facial_midline is None


def test_two_point_lines_need_both_landmarks():
    derived = compute_derived_structures({LT.PUPIL_LEFT: Point(0.35, 0.2), LT.COMMISSURE_RIGHT: Point(0.62, 0.45)})
    assert derived.interpupillary_line is None
    assert derived.commissure_line is None

    derived = compute_derived_structures({LT.PUPIL_LEFT: Point(0.35, 0.2), LT.PUPIL_RIGHT: Point(0.65, 0.21)})
    assert derived.interpupillary_line.start == Point(0.35, 0.2)
    assert derived.interpupillary_line.end == Point(0.65, 0.21)


class TestDentalMidline:

    def test_vertical_fallback_without_incisal_plane(self):
        derived = compute_derived_structures([LandmarkPoint(LT.CONTACT_11_21, 0.5, 0.40)])
        assert derived.incisal_plane is None
        assert_point(derived.dental_midline.start, 0.5, 0.25)
        assert_point(derived.dental_midline.end, 0.5, 0.55)

    def test_perpendicular_to_canted_incisal_plane(self):
        lms = {
            LT.INCISAL_11_LEFT: Point(0.4, 0.5),
            LT.INCISAL_21_RIGHT: Point(0.6, 0.6),
            LT.CONTACT_11_21: Point(0.5, 0.45),
        }
        derived = compute_derived_structures(lms)
        plane = derived.incisal_plane.to_vector()
        midline = derived.dental_midline
        assert midline.to_vector().dot(plane) == pytest.approx(0.0)
        assert midline.length == pytest.approx(0.30)
        centre = Point((midline.start.x + midline.end.x) / 2, (midline.start.y + midline.end.y) / 2)
        assert_point(centre, 0.5, 0.45)

    def test_missing_contact(self, smile_landmarks):
        del smile_landmarks[LT.CONTACT_11_21]
        assert compute_derived_structures(smile_landmarks).dental_midline is None


class TestCurves:

    def test_smile_arc_is_sorted_by_x(self):
        lms = {
            LT.COMMISSURE_RIGHT: Point(0.62, 0.45),
            LT.INCISAL_11_RIGHT: Point(0.50, 0.47),
            LT.COMMISSURE_LEFT: Point(0.38, 0.45),
        }
        arc = compute_derived_structures(lms).smile_arc
        assert len(arc) == 2 * 41
        assert_point(arc[0], 0.38, 0.45)
        assert_point(arc[-1], 0.62, 0.45)

    def test_smile_arc_needs_three_points(self):
        lms = {LT.COMMISSURE_LEFT: Point(0.38, 0.45), LT.COMMISSURE_RIGHT: Point(0.62, 0.45)}
        assert compute_derived_structures(lms).smile_arc is None

    def test_gingival_curve_passes_through_landmarks(self):
        lms = {
            LT.GINGIVAL_21: Point(0.515, 0.41),
            LT.CONTACT_11_21: Point(0.50, 0.43),
            LT.GINGIVAL_11: Point(0.485, 0.41),
        }
        curve = compute_derived_structures(lms).gingival_curve
        assert len(curve) == 2 * 51
        assert_point(curve[0], 0.485, 0.41)
        assert_point(curve[51], 0.50, 0.43)
        assert_point(curve[-1], 0.515, 0.41)


class TestToothOutlines:

    def test_all_six_teeth(self, smile_landmarks):
        outlines = compute_derived_structures(smile_landmarks).tooth_outlines
        assert [o.tooth for o in outlines] == [13, 12, 11, 21, 22, 23]

    def test_outline_is_closed_at_gingival_point(self, smile_landmarks):
        outlines = {o.tooth: o for o in compute_derived_structures(smile_landmarks).tooth_outlines}
        central = outlines[11].points
        assert_point(central[0], 0.485, 0.41)
        assert_point(central[-1], 0.485, 0.41)
        # gingival, 3 right, 2 incisal, 3 left, gingival -> 9 intervals
        assert len(central) == 9 * 41
        # single incisal point -> 8 intervals
        assert len(outlines[12].points) == 8 * 41

    def test_outline_passes_through_contact_and_incisal_dots(self, smile_landmarks):
        outlines = {o.tooth: o for o in compute_derived_structures(smile_landmarks).tooth_outlines}
        points = outlines[11].points
        for expected in (smile_landmarks[LT.CONTACT_11_12], smile_landmarks[LT.INCISAL_11_RIGHT],
                         smile_landmarks[LT.INCISAL_11_LEFT], smile_landmarks[LT.CONTACT_11_21]):
            assert any(p.x == pytest.approx(expected.x) and p.y == pytest.approx(expected.y) for p in points)

    def test_missing_incisal_corner_omits_tooth(self, smile_landmarks):
        del smile_landmarks[LT.INCISAL_11_RIGHT]
        teeth = [o.tooth for o in compute_derived_structures(smile_landmarks).tooth_outlines]
        assert 11 not in teeth
        assert 21 in teeth

    def test_missing_contacts_are_estimated(self, smile_landmarks):
        for t in (LT.CONTACT_11_21, LT.CONTACT_11_12, LT.CONTACT_21_22):
            del smile_landmarks[t]
        teeth = [o.tooth for o in compute_derived_structures(smile_landmarks).tooth_outlines]
        assert teeth == [13, 12, 11, 21, 22, 23]

    def test_estimated_width_from_incisal_corners(self):
        gingival = Point(0.5, 0.40)
        incisal = [Point(0.48, 0.50), Point(0.52, 0.50)]
        ring = build_tooth_outline(gingival, incisal, None, None)
        # widest estimated point: centre +/- half-width (0.02 * 1.1) * 1.05
        widest = 0.02 * 1.1 * 1.05
        assert max(p.x for p in ring) >= 0.5 + widest - 1e-9
        assert min(p.x for p in ring) <= 0.5 - widest + 1e-9

    def test_no_outline_without_gingival(self):
        lms = {LT.INCISAL_12: Point(0.46, 0.465)}
        assert compute_derived_structures(lms).tooth_outlines is None


def test_contact_ticks_are_centred_on_contacts():
    derived = compute_derived_structures({LT.CONTACT_11_21: Point(0.5, 0.43)})
    assert len(derived.contact_lines) == 1
    tick = derived.contact_lines[0]
    assert_point(tick.start, 0.492, 0.43)
    assert_point(tick.end, 0.508, 0.43)


def test_never_raises_on_degenerate_input():
    # identical incisal points: zero-length incisal plane
    lms = {
        LT.INCISAL_11_LEFT: Point(0.5, 0.5),
        LT.INCISAL_11_RIGHT: Point(0.5, 0.5),
        LT.CONTACT_11_21: Point(0.5, 0.45),
    }
    derived = compute_derived_structures(lms)
    assert derived.incisal_plane is not None
    assert derived.dental_midline is None
