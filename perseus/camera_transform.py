"""Projection matrices built from camera calibration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np

from perseus.camera import Camera


def _norm(values: np.ndarray) -> float:
    length = math.sqrt(float(values @ values))
    if length == 0.0:
        raise ValueError("degenerate camera matrix")
    return length


def decompose_k_matrix(source: Sequence[Sequence[float]]) -> Tuple[np.ndarray, np.ndarray]:
    """Split a 3x4 camera matrix into upper-triangular intrinsics and a rigid part.

    Returns ``(cpara, trans)``, both 3x4, with ``cpara[2, 2] == 1`` and
    ``cpara[:, :3] @ trans`` equal to the source scaled to a unit third row.
    """
    src = np.asarray(source, dtype=float).reshape(3, 4)
    c = src.copy() if src[2, 3] >= 0 else -src

    cpara = np.zeros((3, 4))
    trans = np.zeros((3, 4))

    cpara[2, 2] = _norm(c[2, :3])
    trans[2] = c[2] / cpara[2, 2]

    cpara[1, 2] = trans[2, :3] @ c[1, :3]
    rem = c[1, :3] - cpara[1, 2] * trans[2, :3]
    cpara[1, 1] = _norm(rem)
    trans[1, :3] = rem / cpara[1, 1]

    cpara[0, 2] = trans[2, :3] @ c[0, :3]
    cpara[0, 1] = trans[1, :3] @ c[0, :3]
    rem = c[0, :3] - cpara[0, 1] * trans[1, :3] - cpara[0, 2] * trans[2, :3]
    cpara[0, 0] = _norm(rem)
    trans[0, :3] = rem / cpara[0, 0]

    trans[1, 3] = (c[1, 3] - cpara[1, 2] * trans[2, 3]) / cpara[1, 1]
    trans[0, 3] = (
        c[0, 3] - cpara[0, 1] * trans[1, 3] - cpara[0, 2] * trans[2, 3]
    ) / cpara[0, 0]

    cpara[:, :3] /= cpara[2, 2]
    return cpara, trans


def _column_major(q: np.ndarray, trans: np.ndarray) -> np.ndarray:
    """The 4x4 product ``q * [trans; 0 0 0 1]`` as 16 column-major values."""
    product = q[:, :3] @ trans
    product[:, 3] += q[:, 3]
    return product.T.reshape(16).copy()


def _invert(matrix: np.ndarray) -> np.ndarray:
    # Inverting the transposed layout gives the transposed inverse.
    return np.linalg.inv(np.asarray(matrix, dtype=float).reshape(4, 4)).reshape(16)


@dataclass
class ProjectionParams:
    """The six non-trivial entries of a perspective projection matrix."""

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @property
    def all(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)


def _perspective(fovy: float, aspect: float, z_near: float, z_far: float) -> np.ndarray:
    matrix = np.zeros(16)
    f = 1.0 / math.tan(math.pi / 180 * fovy / 2)
    matrix[0] = f / aspect
    matrix[5] = f
    matrix[10] = -1 * (z_far + z_near) / (z_far - z_near)
    matrix[11] = -1
    matrix[14] = -2 * (z_far * z_near) / (z_far - z_near)
    return matrix


class CameraTransform:
    """Camera projection, held as 16 column-major values."""

    def __init__(self) -> None:
        self.projection_matrix = np.zeros(16)
        self.projection_matrix_gl = np.zeros(16)
        self.z_far = 0.0
        self.z_near = 0.0
        self.fovy = 0.0

    def set_from_matrix(self, matrix: Sequence[float]) -> None:
        """Copy the perspective entries 0, 5, 8, 9, 10 and 14 of ``matrix``."""
        for index in (0, 5, 8, 9, 10, 14):
            self.projection_matrix[index] = matrix[index]

    def set_identity(self) -> None:
        """Set the diagonal entries to one."""
        for index in (0, 5, 10, 15):
            self.projection_matrix[index] = 1.0

    def set_perspective(
        self, fovy: float, aspect: float, z_near: float, z_far: float
    ) -> None:
        """A symmetric perspective projection with vertical field of view in degrees."""
        self.z_far = z_far
        self.z_near = z_near
        self.fovy = fovy
        self.projection_matrix = _perspective(fovy, aspect, z_near, z_far)

    def set_from_camera(self, camera: Camera, z_near: float, z_far: float) -> None:
        """Build both projection matrices from a calibrated camera."""
        if z_near <= 0 or z_far <= 0:
            raise ValueError(
                f"invalid projection: z_near {z_near}, z_far {z_far} must be positive"
            )
        z_near, z_far = float(z_near), float(z_far)
        sx, sy = camera.size_x, camera.size_y

        cpara, trans = decompose_k_matrix(camera.k)
        p = cpara[:, :3] / cpara[2, 2]
        q = np.array(
            [
                [2.0 * p[0, 0] / sx, 2.0 * p[0, 1] / sx, 2.0 * p[0, 2] / sx - 1.0, 0.0],
                [0.0, -(2.0 * p[1, 1] / sy), 2.0 * p[1, 2] / sy - 1.0, 0.0],
                [
                    0.0,
                    0.0,
                    (z_far + z_near) / (z_far - z_near),
                    -2.0 * z_far * z_near / (z_far - z_near),
                ],
                [0.0, 0.0, 1.0, 0.0],
            ]
        )
        self.projection_matrix = _column_major(q, trans)

        cpara, trans = decompose_k_matrix(camera.k_gl)
        p = cpara[:, :3] / cpara[2, 2]
        q_gl = np.array(
            [
                [2.0 * p[0, 0] / sx, 2.0 * p[0, 1] / sx, 1.0 - 2.0 * p[0, 2] / sx, 0.0],
                [0.0, 2.0 * p[1, 1] / sy, 2.0 * p[1, 2] / sy - 1.0, 0.0],
                [
                    0.0,
                    0.0,
                    (z_far + z_near) / (z_near - z_far),
                    2.0 * z_far * z_near / (z_near - z_far),
                ],
                [0.0, 0.0, -1.0, 0.0],
            ]
        )
        self.projection_matrix_gl = _column_major(q_gl, trans)

    def set_from_file(
        self, path: Union[str, Path], z_near: float, z_far: float
    ) -> None:
        """Build the projection from a camera calibration file."""
        camera = Camera.from_file(path)
        self.z_far = z_far
        self.z_near = z_near
        self.set_from_camera(camera, z_near, z_far)

    def projection_parameters(self) -> ProjectionParams:
        """The perspective entries of the projection matrix."""
        m = self.projection_matrix
        return ProjectionParams(
            float(m[0]), float(m[5]), float(m[8]), float(m[9]), float(m[10]), float(m[14])
        )

    def inverse_projection(self) -> np.ndarray:
        """The inverse projection matrix, column-major."""
        return _invert(self.projection_matrix)