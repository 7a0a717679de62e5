"""Rigid pose of an object: a translation and a rotation quaternion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from perseus.quaternion import Quaternion
from perseus.vectors import Vector3D


@dataclass
class ObjectTransform:
    """Object pose relative to a camera."""

    rotation: Quaternion = field(default_factory=Quaternion)
    translation: Vector3D = field(default_factory=Vector3D)

    def set_from_euler(
        self, tx: float, ty: float, tz: float, rx: float, ry: float, rz: float
    ) -> None:
        """Set the translation and a rotation from Euler angles in degrees."""
        self.translation.x, self.translation.y, self.translation.z = tx, ty, tz
        self.rotation.set_from_euler(rx, ry, rz)

    def set_from_quaternion(
        self,
        tx: float,
        ty: float,
        tz: float,
        rx: float,
        ry: float,
        rz: float,
        rw: float,
    ) -> None:
        """Set the translation and the raw quaternion components."""
        self.translation.x, self.translation.y, self.translation.z = tx, ty, tz
        self.rotation.set(rx, ry, rz, rw)

    def set_from_array(self, pose: Sequence[float]) -> None:
        """Set from seven values: translation then quaternion x, y, z, w."""
        tx, ty, tz, rx, ry, rz, rw = pose
        self.set_from_quaternion(tx, ty, tz, rx, ry, rz, rw)

    def set_from(self, other: ObjectTransform) -> None:
        """Copy another pose's values into this one."""
        other.copy_into(self)

    def copy_into(self, other: ObjectTransform) -> None:
        """Copy this pose's values into ``other``."""
        self.translation.copy_into(other.translation)
        self.rotation.copy_into(other.rotation)

    def clear(self) -> None:
        """Zero the translation and every quaternion component."""
        self.set_from_quaternion(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    def model_view_matrix(self) -> np.ndarray:
        """The 4x4 model-view matrix as 16 values in column-major order."""
        matrix = self.rotation.opengl_matrix()
        matrix[3] = matrix[7] = matrix[11] = 0.0
        matrix[12] = self.translation.x
        matrix[13] = self.translation.y
        matrix[14] = self.translation.z
        matrix[15] = 1.0
        return matrix