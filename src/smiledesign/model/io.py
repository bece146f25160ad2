"""
Input/Output Manager (HDF5)
Handles saving and loading DesignVersion snapshots to .h5 files.
"""
import json
import logging
from importlib.metadata import version, PackageNotFoundError

import h5py
import numpy as np

from smiledesign.model.calibration import CalibrationData
from smiledesign.model.geometry_primitives import Point
from smiledesign.model.landmarks import LandmarkPoint, LandmarkType
from smiledesign.model.state import DesignVersion

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("smiledesign")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class IOManager:

    @staticmethod
    def save_version(design_version: DesignVersion, filepath: str) -> None:
        logger.info(f"Saving design version to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                if design_version.version_number is not None:
                    f.attrs["version_number"] = design_version.version_number
                if design_version.notes:
                    f.attrs["notes"] = design_version.notes

                # --- 1. SAVE LANDMARKS ---
                # Coordinates as an (n, 2) matrix; the row order is given by the type list
                grp_lm = f.create_group("landmarks")
                coords = np.array(
                    [[lm.x, lm.y] for lm in design_version.landmarks], dtype=np.float64
                ).reshape(-1, 2)
                grp_lm.create_dataset("coordinates", data=coords)
                grp_lm.attrs["types_json"] = json.dumps([lm.type.value for lm in design_version.landmarks])

                # --- 2. SAVE CALIBRATION ---
                cal = design_version.calibration
                if cal is not None:
                    grp_cal = f.create_group("calibration")
                    grp_cal.attrs["point1"] = cal.point1.to_array()
                    grp_cal.attrs["point2"] = cal.point2.to_array()
                    grp_cal.attrs["known_distance_mm"] = cal.known_distance_mm
                    grp_cal.attrs["mm_per_pixel"] = cal.mm_per_pixel

                # --- 3. SAVE COMPUTED OUTPUTS (reference only) ---
                outputs = {
                    "measurements": design_version.measurements.to_dict() if design_version.measurements else None,
                    "derivedLines": (
                        design_version.derived_structures.to_dict() if design_version.derived_structures else None
                    ),
                }
                outputs_json = json.dumps(outputs)
                # Tooth outlines can exceed the HDF5 attribute size limit (64KB)
                if len(outputs_json) > 60000:
                    logger.debug(f"Computed outputs are large ({len(outputs_json)} bytes), using dataset")
                    f.create_dataset("outputs", data=np.void(outputs_json.encode("utf-8")))
                else:
                    f.attrs["outputs_json"] = outputs_json

            logger.info(f"Design version saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save design version: {e}")
            raise

    @staticmethod
    def load_version(filepath: str) -> DesignVersion:
        """
        Load the inputs of a saved version. Computed outputs stored in the file
        are ignored; the store recomputes them.
        """
        logger.info(f"Loading design version from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                if "landmarks" not in f:
                    raise ValueError(f"File '{filepath}' contains no landmark data.")

                grp_lm = f["landmarks"]
                types = json.loads(grp_lm.attrs["types_json"])
                coords = grp_lm["coordinates"][:]
                landmarks = [
                    LandmarkPoint(type=LandmarkType(t), x=float(xy[0]), y=float(xy[1]))
                    for t, xy in zip(types, coords)
                ]

                calibration = None
                if "calibration" in f:
                    grp_cal = f["calibration"]
                    p1 = grp_cal.attrs["point1"]
                    p2 = grp_cal.attrs["point2"]
                    calibration = CalibrationData(
                        point1=Point(float(p1[0]), float(p1[1])),
                        point2=Point(float(p2[0]), float(p2[1])),
                        known_distance_mm=float(grp_cal.attrs["known_distance_mm"]),
                        mm_per_pixel=float(grp_cal.attrs["mm_per_pixel"]),
                    )

                version_number = int(f.attrs["version_number"]) if "version_number" in f.attrs else None
                notes = str(f.attrs["notes"]) if "notes" in f.attrs else None

            logger.debug(f"Loaded {len(landmarks)} landmarks, calibration={'yes' if calibration else 'no'}.")
            logger.info(f"Design version loaded from: {filepath}")
            return DesignVersion(
                landmarks=landmarks,
                calibration=calibration,
                notes=notes,
                version_number=version_number,
            )

        except Exception as e:
            logger.exception(f"Failed to load design version: {e}")
            raise
