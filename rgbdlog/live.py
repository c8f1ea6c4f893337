"""Reading frames straight from a live depth camera."""

from __future__ import annotations

import enum
import logging
import os
import time
from typing import Optional, Union

import numpy as np

from rgbdlog.cameras import CameraInterface, RealSenseInterface, ZedInterface
from rgbdlog.logreader import LogReader
from rgbdlog.openni import OpenNI2Interface

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.033333
_MAX_FRAMES = 2**31 - 1


class CameraType(enum.Enum):
    """Kinds of live camera the reader can open."""

    OPENNI2 = "OpenNI2"
    REALSENSE = "RealSense"
    ZED = "Zed"


def create_camera(camera_type: CameraType, width: int, height: int) -> CameraInterface:
    """Open a camera of the given type producing frames of ``width`` x ``height``."""
    if camera_type is CameraType.OPENNI2:
        return OpenNI2Interface(width, height)
    if camera_type is CameraType.REALSENSE:
        return RealSenseInterface(width, height)
    if camera_type is CameraType.ZED:
        return ZedInterface(width, height)
    raise ValueError(f"unknown camera type: {camera_type!r}")


class LiveLogReader(LogReader):
    """Serves the newest frame a live camera has written to its ring."""

    def __init__(
        self,
        file: str | os.PathLike,
        flip_colors: bool,
        camera: Union[CameraType, CameraInterface],
        width: int = 640,
        height: int = 480,
        base_dir: Optional[str | os.PathLike] = None,
    ) -> None:
        super().__init__(file, flip_colors, width, height)
        self._base_dir = os.fspath(base_dir) if base_dir is not None else os.getcwd()
        self._last_frame_time = -1
        self._last_got = -1
        if isinstance(camera, CameraType):
            camera = create_camera(camera, width, height)
        self.cam = camera
        if self.cam.ok():
            logger.info("Creating live capture... success!")
        else:
            logger.warning("Creating live capture... failed! %s", self.cam.error())

    def wait_for_first_frame(self, timeout: Optional[float] = None) -> int:
        """Block until the camera has delivered a frame and return its index.

        Raises RuntimeError if the camera failed to start and TimeoutError if
        no frame arrives within ``timeout`` seconds.
        """
        if not self.cam.ok():
            raise RuntimeError(f"camera not available: {self.cam.error()}")
        deadline = None if timeout is None else time.monotonic() + timeout
        latest = self.cam.latest_depth_index.get_value()
        while latest == -1:
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError("no frame received from the camera")
            time.sleep(_POLL_SECONDS)
            latest = self.cam.latest_depth_index.get_value()
        return latest

    def get_next(self) -> None:
        latest = self.cam.latest_depth_index.get_value()
        if latest == -1:
            raise RuntimeError("the camera has not delivered a frame yet")
        index = latest % self.cam.num_buffers
        if index == self._last_got:
            return
        slot = self.cam.frame_buffers[index]
        if self._last_frame_time == slot.timestamp:
            return
        self.depth = np.array(slot.depth, dtype=np.uint16, copy=True)
        rgb = np.array(slot.rgb, dtype=np.uint8, copy=True)
        self._last_frame_time = slot.timestamp
        self.timestamp = slot.timestamp
        if self.flip_colors:
            rgb = np.ascontiguousarray(rgb[:, :, ::-1])
        self.rgb = rgb

    def num_frames(self) -> int:
        return _MAX_FRAMES

    def has_more(self) -> bool:
        return True

    def rewound(self) -> bool:
        return False

    def rewind(self) -> None:
        """A live stream cannot be rewound."""

    def get_back(self) -> None:
        """A live stream has no earlier frames to return to."""

    def fast_forward(self, frame: int) -> None:
        """A live stream cannot skip ahead."""

    def get_file(self) -> str:
        return os.path.join(self._base_dir, "live")

    def set_auto(self, value: bool) -> None:
        self.cam.set_auto_exposure(value)
        self.cam.set_auto_white_balance(value)