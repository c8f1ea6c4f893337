"""Readers for RGB-D frame logs, live camera buffers, ground-truth trajectories and run settings."""

__version__ = "0.1.0"

__all__ = ["cameras", "jpeg", "live", "logreader", "odometry", "openni", "settings", "sync"]