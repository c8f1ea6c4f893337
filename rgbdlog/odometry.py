"""Ground-truth camera poses read from a trajectory file."""

from __future__ import annotations

import os
from typing import Dict

import numpy as np

# Poses in the file are stored in the iSAM basis; this matrix undoes it.
_ISAM_BASIS = np.array(
    [
        [0.0, 0.0, 1.0, 0.0],
        [-1.0, 0.0, 0.0, 0.0],
        [0.0, -1.0, 0.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ]
)
_ISAM_BASIS_INV = np.linalg.inv(_ISAM_BASIS)


def _rotation_matrix(qw: float, qx: float, qy: float, qz: float) -> np.ndarray:
    tx, ty, tz = 2.0 * qx, 2.0 * qy, 2.0 * qz
    twx, twy, twz = tx * qw, ty * qw, tz * qw
    txx, txy, txz = tx * qx, ty * qx, tz * qx
    tyy, tyz, tzz = ty * qy, tz * qy, tz * qz
    return np.array(
        [
            [1.0 - (tyy + tzz), txy - twz, txz + twy],
            [txy + twz, 1.0 - (txx + tzz), tyz - twx],
            [txz - twy, tyz + twx, 1.0 - (txx + tyy)],
        ]
    )


def load_trajectory(filename: str | os.PathLike) -> Dict[int, np.ndarray]:
    """Read ``utime,x,y,z,qx,qy,qz,qw`` lines into 4x4 pose matrices by time."""
    trajectory: Dict[int, np.ndarray] = {}
    with open(filename, encoding="utf-8") as file:
        for line_number, line in enumerate(file, start=1):
            text = line.strip()
            if not text:
                continue
            fields = text.split(",")
            if len(fields) != 8:
                raise ValueError(
                    f"{filename}:{line_number}: expected 8 fields, got {len(fields)}"
                )
            try:
                utime = int(fields[0])
                x, y, z, qx, qy, qz, qw = (float(field) for field in fields[1:])
            except ValueError as exc:
                raise ValueError(f"{filename}:{line_number}: {exc}") from exc
            if utime < 0:
                raise ValueError(f"{filename}:{line_number}: negative timestamp")
            pose = np.identity(4)
            pose[:3, :3] = _rotation_matrix(qw, qx, qy, qz)
            pose[:3, 3] = (x, y, z)
            trajectory[utime] = pose
    return trajectory


class GroundTruthOdometry:
    """Looks up camera poses from a recorded trajectory."""

    def __init__(self, filename: str | os.PathLike) -> None:
        self._trajectory = load_trajectory(filename)
        self._last_utime = 0

    def get_transformation(self, timestamp: int) -> np.ndarray:
        """Return the 4x4 pose for ``timestamp``.

        The first call returns the identity and anchors the trajectory;
        later calls return the stored pose converted out of the iSAM basis.
        Raises KeyError when the trajectory has no pose for ``timestamp``.
        """
        pose = np.identity(4)
        if self._last_utime != 0:
            if self._last_utime not in self._trajectory:
                self._last_utime = timestamp
                return pose
            try:
                transform = self._trajectory[timestamp]
            except KeyError:
                raise KeyError(f"no pose recorded for timestamp {timestamp}") from None
            pose = _ISAM_BASIS_INV @ transform @ _ISAM_BASIS
        else:
            try:
                self._trajectory[0] = self._trajectory[timestamp]
            except KeyError:
                raise KeyError(f"no pose recorded for timestamp {timestamp}") from None
        self._last_utime = timestamp
        return pose

    def get_covariance(self) -> np.ndarray:
        """Return the fixed 6x6 pose covariance."""
        return np.diag([0.1, 0.1, 0.1, 0.5, 0.5, 0.5])