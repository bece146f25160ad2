"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt) or of the session store.
It deals with Landmarks, Geometry, Calibration, Measurements and I/O.
"""
