"""A combined model-view and projection transform."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from perseus.camera import Camera
from perseus.camera_transform import ProjectionParams, decompose_k_matrix
from perseus.quaternion import Quaternion
from perseus.vectors import Vector3D

_ROTATION_ENTRIES = [0, 1, 2, 4, 5, 6, 8, 9, 10]


def _product(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """The matrix product ``A * B`` of two column-major 4x4 matrices."""
    return (np.asarray(b, dtype=float).reshape(4, 4) @ np.asarray(a, dtype=float).reshape(4, 4)).reshape(16)


def _invert(matrix: np.ndarray) -> np.ndarray:
    return np.linalg.inv(np.asarray(matrix, dtype=float).reshape(4, 4)).reshape(16)


class CoordinateTransform:
    """Translation, rotation, projection and viewport of a renderer camera."""

    def __init__(self) -> None:
        self.model_view = np.zeros(16)
        self.projection_matrix = np.zeros(16)
        self.view: List[int] = [0, 0, 0, 0]
        self.translation = Vector3D(0.0, 0.0, 0.0)
        self.rotation: Optional[Quaternion] = None
        self.qrotation = Quaternion(0.0, 0.0, 0.0, 0.0)
        self.z_far = 0.0
        self.z_near = 0.0
        self.fovy = 0.0

    def set_translation(self, translation: Iterable[float]) -> None:
        """Set the translation from a vector or three values."""
        x, y, z = translation
        self.translation = Vector3D(x, y, z)

    def add_translation(self, translation: Iterable[float]) -> None:
        """Add a vector or three values to the translation."""
        x, y, z = translation
        self.translation.x += x
        self.translation.y += y
        self.translation.z += z

    def set_rotation(self, rotation: Quaternion) -> None:
        """Use ``rotation`` (shared, not copied) as the rotation."""
        self.rotation = rotation

    def set_from_matrix(self, matrix: Sequence[float]) -> None:
        """Copy the perspective entries 0, 5, 10, 11 and 14 of ``matrix``."""
        for index in (0, 5, 10, 11, 14):
            self.projection_matrix[index] = matrix[index]

    def set_identity(self) -> None:
        """Set the diagonal entries of the projection to one."""
        for index in (0, 5, 10, 15):
            self.projection_matrix[index] = 1.0

    def set_perspective(
        self, fovy: float, aspect: float, z_near: float, z_far: float
    ) -> None:
        """A symmetric perspective projection with vertical field of view in degrees."""
        self.z_far = z_far
        self.z_near = z_near
        self.fovy = fovy
        matrix = np.zeros(16)
        f = 1.0 / np.tan(np.pi / 180 * fovy / 2)
        matrix[0] = f / aspect
        matrix[5] = f
        matrix[10] = -1 * (z_far + z_near) / (z_far - z_near)
        matrix[11] = -1
        matrix[14] = -2 * (z_far * z_near) / (z_far - z_near)
        self.projection_matrix = matrix

    def set_from_camera(self, camera: Camera, z_near: float, z_far: float) -> None:
        """Build the projection from a calibrated camera."""
        z_near, z_far = float(z_near), float(z_far)
        sx, sy = camera.size_x, camera.size_y

        cpara, trans = decompose_k_matrix(camera.k)
        p = cpara[:, :3] / cpara[2, 2]
        q = np.array(
            [
                [2.0 * p[0, 0] / sx, 2.0 * p[0, 1] / sx, 1.0 - 2.0 * p[0, 2] / sx, 0.0],
                [0.0, -(2.0 * p[1, 1] / sy), 1.0 - 2.0 * p[1, 2] / sy, 0.0],
                [
                    0.0,
                    0.0,
                    -(z_far + z_near) / (z_near - z_far),
                    -2 * (z_far * z_near) / (z_near - z_far),
                ],
                [0.0, 0.0, 1.0, 0.0],
            ]
        )
        product = q[:, :3] @ trans
        product[:, 3] += q[:, 3]
        self.projection_matrix = product.T.reshape(16).copy()

    def set_viewport(self, x: int, y: int, width: int, height: int) -> None:
        """Set the viewport origin and size."""
        self.view = [x, y, width, height]

    def projection_parameters(self) -> ProjectionParams:
        """The perspective entries of the projection matrix."""
        m = self.projection_matrix
        return ProjectionParams(
            float(m[0]), float(m[5]), float(m[8]), float(m[9]), float(m[10]), float(m[14])
        )

    def model_view_matrix(self) -> np.ndarray:
        """Rotation and translation as 16 column-major values."""
        if self.rotation is None:
            raise ValueError("no rotation has been set")
        matrix = np.zeros(16)
        rotation = self.rotation.opengl_matrix()
        matrix[_ROTATION_ENTRIES] = rotation[_ROTATION_ENTRIES]
        matrix[12] = self.translation.x
        matrix[13] = self.translation.y
        matrix[14] = self.translation.z
        matrix[15] = 1.0
        matrix /= matrix[15]
        self.model_view = matrix.copy()
        return matrix

    def pm_matrix(self) -> np.ndarray:
        """Projection times model-view, column-major."""
        return _product(self.projection_matrix, self.model_view_matrix())

    def inverse_pm_matrix(self) -> np.ndarray:
        """The inverse of projection times model-view, column-major."""
        return _invert(self.pm_matrix())

    def inverse_projection(self) -> np.ndarray:
        """The inverse projection matrix, column-major."""
        return _invert(self.projection_matrix)