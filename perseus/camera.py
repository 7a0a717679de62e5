"""Pinhole camera intrinsics with an optional FOV-model radial distortion."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np


def _intrinsic_matrix(
    fx: float, fy: float, cx: float, cy: float, depth_sign: float, size_y: float
) -> np.ndarray:
    """A 3x4 intrinsic matrix whose y row is flipped to image-bottom origin."""
    k = np.zeros((3, 4))
    k[0, 0] = fx
    k[1, 1] = fy
    k[0, 2] = cx
    k[1, 2] = cy
    k[2, 2] = depth_sign
    k[1, :] = (size_y - 1) * k[2, :] - k[1, :]
    return k


class Camera:
    """Camera calibration: image size, focal length and principal point.

    ``k`` is the intrinsic matrix used for the renderer's own projection and
    ``k_gl`` the variant used for an OpenGL-style projection, both 3x4.
    """

    def __init__(
        self,
        size_x: float,
        size_y: float,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        name: str = "",
        distortion: float = 0.0,
    ) -> None:
        if fx == 0 or fy == 0:
            raise ValueError("focal lengths must be non-zero")
        self.name = name
        self.size_x = float(size_x)
        self.size_y = float(size_y)
        self.focal_length = (float(fx), float(fy))
        self.center_point = (float(cx), float(cy))
        self.inv_focal = (1.0 / fx, 1.0 / fy)

        self.distortion = float(distortion)
        if self.distortion != 0.0:
            self._d2_tan = 2.0 * math.tan(self.distortion / 2.0)
            self._one_over_2_tan = 1.0 / self._d2_tan
            self._w_inv = 1.0 / self.distortion
        else:
            self._d2_tan = self._one_over_2_tan = self._w_inv = 0.0

        self.k = _intrinsic_matrix(fx, fy, cx, cy, 1.0, self.size_y)
        self.k_gl = _intrinsic_matrix(fx, fy, -cx, -cy, -1.0, self.size_y)

        self.last_r = 0.0
        self.last_factor = 0.0
        self.last_dist_r = 0.0

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Camera:
        """Read a calibration file: name, size, focal length, principal point."""
        tokens = Path(path).read_text().split()
        if len(tokens) < 7:
            raise ValueError(f"incomplete camera calibration in {path}")
        name = tokens[0]
        try:
            size_x, size_y, fx, fy, cx, cy = (float(t) for t in tokens[1:7])
        except ValueError as exc:
            raise ValueError(f"malformed camera calibration in {path}") from exc
        return cls(size_x, size_y, fx, fy, cx, cy, name=name)

    def invrtrans(self, r: float) -> float:
        """Undistorted radius for a distorted radius ``r``."""
        if self.distortion == 0.0:
            return r
        return math.tan(r * self.distortion) * self._one_over_2_tan

    def rtrans_factor(self, r: float) -> float:
        """Scale factor taking an undistorted radius to a distorted one."""
        if r < 0.001 or self.distortion == 0.0:
            return 1.0
        return self._w_inv * math.atan(r * self._d2_tan) / r

    def project(self, point: Sequence[float]) -> Tuple[float, float]:
        """Project normalised camera coordinates to pixel coordinates."""
        x, y = float(point[0]), float(point[1])
        factor = self.rtrans_factor(math.sqrt(x * x + y * y))
        return (
            self.center_point[0] + self.focal_length[0] * factor * x,
            self.center_point[1] + self.focal_length[1] * factor * y,
        )

    def unproject(self, point: Sequence[float]) -> Tuple[float, float]:
        """Map pixel coordinates back to normalised camera coordinates."""
        dx = (float(point[0]) - self.center_point[0]) * self.inv_focal[0]
        dy = (float(point[1]) - self.center_point[1]) * self.inv_focal[1]
        self.last_dist_r = math.sqrt(dx * dx + dy * dy)
        self.last_r = self.invrtrans(self.last_dist_r)

        factor = self.last_r / self.last_dist_r if self.last_dist_r > 0.01 else 1.0
        self.last_factor = 1.0 / factor
        return (factor * dx, factor * dy)