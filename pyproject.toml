[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rgbdlog"
version = "0.1.0"
description = "Readers for RGB-D frame logs, live depth camera buffers and ground-truth trajectories"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = ["rgbd", "depth", "slam", "log", "odometry", "camera", "trajectory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rgbdlog"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
