"""Camera sources that fill a ring of depth and colour frame buffers."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List

import numpy as np

from rgbdlog.sync import ThreadMutexObject


@dataclass
class FrameBuffer:
    """One slot of a camera's frame ring: depth, colour and capture time."""

    depth: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=np.uint16))
    rgb: np.ndarray = field(default_factory=lambda: np.zeros((0, 0, 3), dtype=np.uint8))
    timestamp: int = 0

    @classmethod
    def blank(cls, width: int, height: int) -> "FrameBuffer":
        """Return a zero-filled buffer for frames of the given size."""
        return cls(
            depth=np.zeros((height, width), dtype=np.uint16),
            rgb=np.zeros((height, width, 3), dtype=np.uint8),
            timestamp=0,
        )


class CameraInterface(abc.ABC):
    """A live depth camera writing frames into a ring of buffers.

    ``latest_depth_index`` counts the frames written so far, starting at -1
    before the first; the newest frame lives in
    ``frame_buffers[latest_depth_index % num_buffers]``.
    """

    num_buffers = 10

    def __init__(self) -> None:
        self.latest_depth_index: ThreadMutexObject[int] = ThreadMutexObject(-1)
        self.frame_buffers: List[FrameBuffer] = []

    @abc.abstractmethod
    def ok(self) -> bool:
        """Return whether the camera started successfully."""

    @abc.abstractmethod
    def error(self) -> str:
        """Return the text describing why the camera failed to start."""

    @abc.abstractmethod
    def set_auto_exposure(self, value: bool) -> None:
        """Switch automatic exposure on or off."""

    @abc.abstractmethod
    def set_auto_white_balance(self, value: bool) -> None:
        """Switch automatic white balance on or off."""


class RealSenseInterface(CameraInterface):
    """An Intel RealSense camera; unavailable without its capture library."""

    def __init__(self, width: int = 640, height: int = 480, fps: int = 30) -> None:
        super().__init__()
        self.width = width
        self.height = height
        self.fps = fps
        self._init_successful = False
        self._error_text = "Compiled without Intel RealSense library"

    def ok(self) -> bool:
        return self._init_successful

    def error(self) -> str:
        return self._error_text

    def set_auto_exposure(self, value: bool) -> None:
        """No camera is attached, so there is no setting to change."""

    def set_auto_white_balance(self, value: bool) -> None:
        """No camera is attached, so there is no setting to change."""

    def get_auto_exposure(self) -> bool:
        return False

    def get_auto_white_balance(self) -> bool:
        return False


class ZedInterface(CameraInterface):
    """A Stereolabs ZED camera; unavailable without its capture library."""

    def __init__(self, width: int = 1280, height: int = 720) -> None:
        super().__init__()
        self.width = width
        self.height = height
        self._init_successful = False
        self._error_text = "Compiled without stereolabs zed library"

    def ok(self) -> bool:
        return self._init_successful

    def error(self) -> str:
        return self._error_text

    def set_auto_exposure(self, value: bool) -> None:
        """No camera is attached, so there is no setting to change."""

    def set_auto_white_balance(self, value: bool) -> None:
        """No camera is attached, so there is no setting to change."""

    def get_auto_exposure(self) -> bool:
        return False

    def get_auto_white_balance(self) -> bool:
        return False