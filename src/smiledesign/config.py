"""
Configuration & Global Constants
================================
This module serves as the central registry for the numeric constants used by
the landmark engines and the session store.

Why is this file needed?
------------------------
1. Traceability: Clinical reference values (golden proportion, RED target) and
   reconstruction factors live in one place instead of being re-typed inline.
2. Consistency: The derived-structures engine, the measurements engine and the
   store all read the same values.

All distances are in normalized image units (0-1 of the photo's natural width)
unless the name says otherwise.
"""

# --- Clinical reference proportions ---
GOLDEN_PROPORTION: float = 0.618
RED_PROPORTION_TARGET: float = 0.70
RED_PROPORTION_RANGE: tuple[float, float] = (0.60, 0.80)
GOLDEN_PROPORTION_RANGE: tuple[float, float] = (0.55, 0.68)

# --- Derived structure geometry ---
DENTAL_MIDLINE_EXTENSION: float = 0.15
CONTACT_TICK_HALF_WIDTH: float = 0.008
VERTICAL_FIT_EPSILON: float = 1e-10

# Catmull-Rom samples per interval
DEFAULT_SPLINE_SEGMENTS: int = 20
SMILE_ARC_SEGMENTS: int = 40
GINGIVAL_CURVE_SEGMENTS: int = 50
TOOTH_OUTLINE_SEGMENTS: int = 40

# --- Tooth outline reconstruction ---
INCISAL_WIDTH_FACTOR: float = 1.1       # half-width from two incisal corners
ASPECT_HALF_WIDTH_FACTOR: float = 0.5   # half-width from half-height
CONTACT_BULGE_FACTOR: float = 1.05      # widest point of an estimated side
GINGIVAL_SHOULDER_FRACTION: float = 0.4
INCISAL_SHOULDER_FRACTION: float = 0.5

# --- Session / view ---
ZOOM_MIN: float = 0.1
ZOOM_MAX: float = 10.0
DEFAULT_IMAGE_WIDTH: int = 1
