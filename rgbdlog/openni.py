"""OpenNI2 depth cameras: video modes, frame callbacks and the camera source."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np

from rgbdlog.cameras import CameraInterface, FrameBuffer
from rgbdlog.sync import ThreadMutexObject


class PixelFormat(enum.Enum):
    """Pixel formats a stream can deliver, with their display labels."""

    DEPTH_1_MM = "1mm"
    DEPTH_100_UM = "100um"
    SHIFT_9_2 = "Shift 9 2"
    SHIFT_9_3 = "Shift 9 3"
    RGB888 = "RGB888"
    YUV422 = "YUV422"
    GRAY8 = "GRAY8"
    GRAY16 = "GRAY16"
    JPEG = "JPEG"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class VideoMode:
    """Resolution, frame rate and pixel format of a stream."""

    resolution_x: int
    resolution_y: int
    fps: int
    pixel_format: Optional[PixelFormat] = None

    def __str__(self) -> str:
        label = self.pixel_format.label if self.pixel_format is not None else ""
        return f"{self.resolution_x}x{self.resolution_y} @ {self.fps}fps {label}"


def _supports(modes: Sequence[VideoMode], x: int, y: int, fps: int) -> bool:
    return any(
        mode.resolution_x == x and mode.resolution_y == y and mode.fps == fps
        for mode in modes
    )


def find_mode(
    depth_modes: Sequence[VideoMode],
    rgb_modes: Sequence[VideoMode],
    x: int,
    y: int,
    fps: int,
) -> bool:
    """Return whether both the depth and colour streams support ``x``x``y`` at ``fps``."""
    return _supports(depth_modes, x, y, fps) and _supports(rgb_modes, x, y, fps)


def format_modes(
    current_depth: VideoMode,
    depth_modes: Sequence[VideoMode],
    current_rgb: VideoMode,
    rgb_modes: Sequence[VideoMode],
) -> str:
    """Describe the current and supported modes of both streams, one per line."""
    lines = [f"Depth Modes: ({current_depth})"]
    lines.extend(str(mode) for mode in depth_modes)
    lines.append(f"RGB Modes: ({current_rgb})")
    lines.extend(str(mode) for mode in rgb_modes)
    return "\n".join(lines)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _copy_into(target: np.ndarray, data: Any) -> None:
    if isinstance(data, (bytes, bytearray, memoryview)):
        array = np.frombuffer(data, dtype=target.dtype)
    else:
        array = np.asarray(data, dtype=target.dtype)
    if array.size != target.size:
        raise ValueError(f"frame holds {array.size} values, expected {target.size}")
    target[...] = array.reshape(target.shape)


class RGBCallback:
    """Stores each new colour frame in the next slot of a ring of buffers."""

    def __init__(
        self,
        latest_rgb_index: ThreadMutexObject[int],
        rgb_buffers: List[FrameBuffer],
    ) -> None:
        self.latest_rgb_index = latest_rgb_index
        self.rgb_buffers = rgb_buffers
        self.last_rgb_time = 0

    def on_new_frame(self, data: Any, timestamp: Optional[int] = None) -> None:
        """Copy a colour frame into the ring and advance the latest index."""
        self.last_rgb_time = _now_ms() if timestamp is None else timestamp
        index = (self.latest_rgb_index.get_value() + 1) % len(self.rgb_buffers)
        slot = self.rgb_buffers[index]
        _copy_into(slot.rgb, data)
        slot.timestamp = self.last_rgb_time
        self.latest_rgb_index.increment()


class DepthCallback:
    """Pairs each new depth frame with the latest colour frame."""

    def __init__(
        self,
        latest_depth_index: ThreadMutexObject[int],
        latest_rgb_index: ThreadMutexObject[int],
        rgb_buffers: List[FrameBuffer],
        frame_buffers: List[FrameBuffer],
    ) -> None:
        self.latest_depth_index = latest_depth_index
        self.latest_rgb_index = latest_rgb_index
        self.rgb_buffers = rgb_buffers
        self.frame_buffers = frame_buffers
        self.last_depth_time = 0

    def on_new_frame(self, data: Any, timestamp: Optional[int] = None) -> None:
        """Copy a depth frame into the ring.

        The latest index only advances once a colour frame has arrived to
        pair it with.
        """
        self.last_depth_time = _now_ms() if timestamp is None else timestamp
        index = (self.latest_depth_index.get_value() + 1) % len(self.frame_buffers)
        slot = self.frame_buffers[index]
        _copy_into(slot.depth, data)
        slot.timestamp = self.last_depth_time

        last_image = self.latest_rgb_index.get_value()
        if last_image == -1:
            return
        source = self.rgb_buffers[last_image % len(self.rgb_buffers)]
        slot.rgb[...] = source.rgb
        self.latest_depth_index.increment()


class OpenNI2Interface(CameraInterface):
    """A depth camera driven through an OpenNI2 device object.

    The device is any object offering ``depth_modes`` and ``rgb_modes``
    sequences of VideoMode, ``start(depth_mode, color_mode)`` (raising
    OSError on failure), ``add_listeners(depth_callback, rgb_callback)``,
    ``stop()``, and the ``set_``/``get_`` auto exposure and auto white
    balance methods.
    """

    def __init__(
        self,
        width: int = 672,
        height: int = 376,
        fps: int = 30,
        device: Any = None,
    ) -> None:
        super().__init__()
        self.width = width
        self.height = height
        self.fps = fps
        self._device = device
        self._error_text = ""
        self._init_successful = True
        self.latest_rgb_index: ThreadMutexObject[int] = ThreadMutexObject(-1)
        self.rgb_buffers: List[FrameBuffer] = []
        self.rgb_callback: Optional[RGBCallback] = None
        self.depth_callback: Optional[DepthCallback] = None

        if device is None:
            self._error_text = "No OpenNI2 device available"
            self._init_successful = False
            return

        depth_mode = VideoMode(width, height, fps, PixelFormat.DEPTH_1_MM)
        color_mode = VideoMode(width, height, fps, PixelFormat.RGB888)
        try:
            device.start(depth_mode, color_mode)
        except OSError as exc:
            self._error_text += str(exc)
            self._init_successful = False
            return

        if not find_mode(device.depth_modes, device.rgb_modes, width, height, fps):
            device.stop()
            raise ValueError("Sorry, mode not supported!")

        self.latest_depth_index.assign(-1)
        self.latest_rgb_index.assign(-1)
        self.rgb_buffers = [
            FrameBuffer.blank(width, height) for _ in range(self.num_buffers)
        ]
        self.frame_buffers = [
            FrameBuffer.blank(width, height) for _ in range(self.num_buffers)
        ]
        self.rgb_callback = RGBCallback(self.latest_rgb_index, self.rgb_buffers)
        self.depth_callback = DepthCallback(
            self.latest_depth_index,
            self.latest_rgb_index,
            self.rgb_buffers,
            self.frame_buffers,
        )

        self.set_auto_exposure(True)
        self.set_auto_white_balance(True)
        device.add_listeners(self.depth_callback, self.rgb_callback)

    def ok(self) -> bool:
        return self._init_successful

    def error(self) -> str:
        self._error_text = self._error_text.replace("\t", "")
        return self._error_text

    def set_auto_exposure(self, value: bool) -> None:
        if self._device is not None:
            self._device.set_auto_exposure(value)

    def set_auto_white_balance(self, value: bool) -> None:
        if self._device is not None:
            self._device.set_auto_white_balance(value)

    def get_auto_exposure(self) -> bool:
        return self._device is not None and bool(self._device.get_auto_exposure())

    def get_auto_white_balance(self) -> bool:
        return self._device is not None and bool(self._device.get_auto_white_balance())

    def close(self) -> None:
        """Stop the device if it was started."""
        if self._init_successful and self._device is not None:
            self._device.stop()
            self._init_successful = False