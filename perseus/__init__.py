"""Region-based 3D pose tracking: vectors, quaternions, camera projection, OBJ models, software rasterisation and gradient-descent pose optimisation."""

__version__ = "0.1.0"