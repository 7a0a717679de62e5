[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "perseus"
version = "0.1.0"
description = "Region-based 3D pose tracking primitives: quaternions, camera projection, OBJ models, software rasterisation and gradient-descent pose optimisation."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "pose estimation",
    "3d tracking",
    "rasterisation",
    "quaternion",
    "camera calibration",
    "wavefront obj",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["perseus"]

[tool.pytest.ini_options]
addopts = "-ra"
