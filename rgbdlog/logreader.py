"""Readers for logs of depth and colour frames."""

from __future__ import annotations

import abc
import os
import struct
import zlib
from typing import List, Optional

import numpy as np

from rgbdlog.jpeg import JPEGDecodeError, decode_jpeg

_COUNT = struct.Struct("<i")
_FRAME_HEADER = struct.Struct("<qii")


class LogFormatError(ValueError):
    """Raised when a log file is truncated or holds malformed frames."""


class LogReader(abc.ABC):
    """A source of depth and colour frames."""

    def __init__(
        self,
        file: str | os.PathLike,
        flip_colors: bool = False,
        width: int = 640,
        height: int = 480,
    ) -> None:
        self.flip_colors = flip_colors
        self.timestamp = 0
        self.depth: Optional[np.ndarray] = None
        self.rgb: Optional[np.ndarray] = None
        self.current_frame = 0
        self.file = os.fspath(file)
        self.width = width
        self.height = height
        self.num_pixels = width * height

    @abc.abstractmethod
    def get_next(self) -> None:
        """Load the next frame into ``depth``, ``rgb`` and ``timestamp``."""

    @abc.abstractmethod
    def num_frames(self) -> int:
        """Return the number of frames in the log."""

    @abc.abstractmethod
    def has_more(self) -> bool:
        """Return whether another frame can be read."""

    @abc.abstractmethod
    def rewound(self) -> bool:
        """Return whether the reader is back at the start."""

    @abc.abstractmethod
    def rewind(self) -> None:
        """Go back to the first frame."""

    @abc.abstractmethod
    def get_back(self) -> None:
        """Load the frame before the current one."""

    @abc.abstractmethod
    def fast_forward(self, frame: int) -> None:
        """Skip ahead until ``current_frame`` reaches ``frame``."""

    @abc.abstractmethod
    def get_file(self) -> str:
        """Return the name of the log."""

    @abc.abstractmethod
    def set_auto(self, value: bool) -> None:
        """Switch automatic exposure and white balance, where supported."""


class RawLogReader(LogReader):
    """Reads frames from a raw log file.

    The file starts with a little-endian int32 frame count. Each frame is an
    int64 timestamp, int32 depth size and int32 image size, followed by the
    depth bytes (raw uint16 or zlib-compressed) and image bytes (raw 3-byte
    pixels, JPEG, or absent).
    """

    def __init__(
        self,
        file: str | os.PathLike,
        flip_colors: bool = False,
        width: int = 640,
        height: int = 480,
    ) -> None:
        super().__init__(file, flip_colors, width, height)
        self.auto_settings = False
        self._file_pointers: List[int] = []
        self._fp = open(self.file, "rb")
        try:
            self._num_frames = self._read_count()
        except BaseException:
            self._fp.close()
            raise

    def _read_exact(self, size: int) -> bytes:
        data = self._fp.read(size)
        if len(data) != size:
            raise LogFormatError(f"{self.file}: unexpected end of log")
        return data

    def _read_count(self) -> int:
        (count,) = _COUNT.unpack(self._read_exact(_COUNT.size))
        return count

    def _read_header(self) -> tuple:
        timestamp, depth_size, image_size = _FRAME_HEADER.unpack(
            self._read_exact(_FRAME_HEADER.size)
        )
        if depth_size < 0:
            raise LogFormatError(f"{self.file}: negative depth size {depth_size}")
        self.timestamp = timestamp
        return depth_size, image_size

    def _read_payload(self) -> tuple:
        depth_size, image_size = self._read_header()
        depth_bytes = self._read_exact(depth_size)
        image_bytes = self._read_exact(image_size) if image_size > 0 else b""
        return depth_bytes, image_bytes

    def _decode_depth(self, data: bytes) -> np.ndarray:
        expected = self.num_pixels * 2
        if len(data) != expected:
            try:
                data = zlib.decompress(data)
            except zlib.error as exc:
                raise LogFormatError(f"{self.file}: bad depth data: {exc}") from exc
            if len(data) != expected:
                raise LogFormatError(
                    f"{self.file}: depth decompressed to {len(data)} bytes, "
                    f"expected {expected}"
                )
        return np.frombuffer(data, dtype="<u2").reshape(self.height, self.width).copy()

    def _decode_image(self, data: bytes) -> np.ndarray:
        shape = (self.height, self.width, 3)
        if len(data) == self.num_pixels * 3:
            return np.frombuffer(data, dtype=np.uint8).reshape(shape).copy()
        if data:
            try:
                pixels = decode_jpeg(data)
            except JPEGDecodeError as exc:
                raise LogFormatError(f"{self.file}: {exc}") from exc
            if pixels.shape != shape:
                raise LogFormatError(
                    f"{self.file}: image is {pixels.shape[1]}x{pixels.shape[0]}, "
                    f"expected {self.width}x{self.height}"
                )
            return pixels
        return np.zeros(shape, dtype=np.uint8)

    def _get_core(self) -> None:
        depth_bytes, image_bytes = self._read_payload()
        self.depth = self._decode_depth(depth_bytes)
        rgb = self._decode_image(image_bytes)
        if self.flip_colors:
            rgb = np.ascontiguousarray(rgb[:, :, ::-1])
        self.rgb = rgb
        self.current_frame += 1

    def get_next(self) -> None:
        self._file_pointers.append(self._fp.tell())
        self._get_core()

    def get_back(self) -> None:
        if not self._file_pointers:
            raise IndexError("no earlier frame to go back to")
        self._fp.seek(self._file_pointers.pop())
        self._get_core()

    def fast_forward(self, frame: int) -> None:
        while self.current_frame < frame and self.has_more():
            self._file_pointers.append(self._fp.tell())
            self._read_payload()
            self.current_frame += 1

    def num_frames(self) -> int:
        return self._num_frames

    def has_more(self) -> bool:
        return self.current_frame + 1 < self._num_frames

    def rewind(self) -> None:
        self._file_pointers.clear()
        self._fp.close()
        self._fp = open(self.file, "rb")
        self._num_frames = self._read_count()
        self.current_frame = 0

    def rewound(self) -> bool:
        return not self._file_pointers

    def get_file(self) -> str:
        return self.file

    def set_auto(self, value: bool) -> None:
        """Record the requested setting; a recorded log has no camera to change."""
        self.auto_settings = bool(value)

    def close(self) -> None:
        """Close the underlying file."""
        self._fp.close()

    def __enter__(self) -> "RawLogReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()