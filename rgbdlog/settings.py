"""Command-line settings for a fusion run, and camera calibration files."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, TypeVar

_MAX_INT = 2**31 - 1
_MAX_TICK = 2**16 - 1

V = TypeVar("V")


class CalibrationError(ValueError):
    """Raised when a calibration file does not hold ``fx fy cx cy``."""


@dataclass(frozen=True)
class Intrinsics:
    """Pinhole camera intrinsics: focal lengths and principal point."""

    fx: float = 528.0
    fy: float = 528.0
    cx: float = 320.0
    cy: float = 240.0


def load_calibration(filename: str | os.PathLike) -> Intrinsics:
    """Read intrinsics from the first line of a file holding ``fx fy cx cy``."""
    with open(filename, encoding="utf-8") as file:
        line = file.readline()
    fields = line.split()
    if len(fields) < 4:
        raise CalibrationError(
            f"{filename}: the calibration file should contain a single line "
            "with fx fy cx cy"
        )
    try:
        fx, fy, cx, cy = (float(value) for value in fields[:4])
    except ValueError as exc:
        raise CalibrationError(f"{filename}: {exc}") from exc
    return Intrinsics(fx, fy, cx, cy)


@dataclass
class Settings:
    """Everything a fusion run is configured with."""

    iclnuim: bool = False
    intrinsics: Intrinsics = field(default_factory=Intrinsics)
    width: int = 640
    height: int = 480
    log_file: str = ""
    pose_file: str = ""
    confidence: float = 10.0
    depth: float = 3.0
    icp: float = 10.0
    icp_err_thresh: float = 5e-05
    cov_thresh: float = 1e-05
    photo_thresh: float = 115.0
    fern_thresh: float = 0.3095
    time_delta: int = 200
    icp_count_thresh: int = 40000
    start: int = 1
    end: int = _MAX_TICK
    so3: bool = True
    flip_colors: bool = False
    open_loop: bool = False
    reloc: bool = False
    frameskip: bool = False
    quiet: bool = False
    fast_odom: bool = False
    rewind: bool = False
    frame_to_frame_rgb: bool = False
    showcase: bool = False

    @property
    def live(self) -> bool:
        """Whether frames come from a live camera rather than a log file."""
        return not self.log_file

    def fusion_time_delta(self) -> int:
        """Return the time window handed to fusion; open loop widens it fully."""
        return _MAX_INT // 2 if self.open_loop else self.time_delta


class _Args:
    def __init__(self, argv: Sequence[str]) -> None:
        self._argv: List[str] = list(argv)

    def has(self, flag: str) -> bool:
        return flag in self._argv

    def value(self, flag: str, default: V, convert: Callable[[str], V]) -> V:
        if flag not in self._argv:
            return default
        index = self._argv.index(flag)
        if index + 1 >= len(self._argv):
            return default
        text = self._argv[index + 1]
        try:
            return convert(text)
        except ValueError as exc:
            raise ValueError(f"bad value for {flag}: {text!r}") from exc


def parse_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """Build settings from command-line arguments (without the program name)."""
    args = _Args(sys.argv[1:] if argv is None else argv)
    defaults = Settings()

    calibration_file = args.value("-cal", "", str)
    intrinsics = load_calibration(calibration_file) if calibration_file else Intrinsics()
    pose_file = args.value("-p", "", str) if args.has("-p") else ""

    return Settings(
        iclnuim=args.has("-icl"),
        intrinsics=intrinsics,
        log_file=args.value("-l", "", str),
        pose_file=pose_file,
        confidence=args.value("-c", defaults.confidence, float),
        depth=args.value("-d", defaults.depth, float),
        icp=args.value("-i", defaults.icp, float),
        icp_err_thresh=args.value("-ie", defaults.icp_err_thresh, float),
        cov_thresh=args.value("-cv", defaults.cov_thresh, float),
        photo_thresh=args.value("-pt", defaults.photo_thresh, float),
        fern_thresh=args.value("-ft", defaults.fern_thresh, float),
        time_delta=args.value("-t", defaults.time_delta, int),
        icp_count_thresh=args.value("-ic", defaults.icp_count_thresh, int),
        start=args.value("-s", defaults.start, int),
        end=args.value("-e", defaults.end, int),
        so3=not args.has("-nso"),
        flip_colors=args.has("-f"),
        open_loop=not pose_file and args.has("-o"),
        reloc=args.has("-rl"),
        frameskip=args.has("-fs"),
        quiet=args.has("-q"),
        fast_odom=args.has("-fo"),
        rewind=args.has("-r"),
        frame_to_frame_rgb=args.has("-ftf"),
        showcase=args.has("-sc"),
    )