"""Rotation quaternions as used by the renderer and the pose optimiser."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

import numpy as np

from perseus.vectors import Vector3D


def _pick_axis(candidates: Sequence[float]) -> float:
    """Choose the smallest-magnitude candidate among those differing at 1e-3."""
    axis = candidates[0]
    for candidate in candidates[1:]:
        if int(1000 * abs(axis)) != int(1000 * abs(candidate)):
            axis = axis if abs(axis) < abs(candidate) else candidate
    return axis


@dataclass
class Quaternion:
    """A quaternion ``x i + y j + z k + w``; the default is the identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    def set(self, x: float, y: float, z: float, w: float) -> None:
        """Set all four components."""
        self.x, self.y, self.z, self.w = x, y, z, w

    def set_from_euler(self, rx: float, ry: float, rz: float) -> None:
        """Set from Euler angles in degrees (bank X, heading Y, attitude Z)."""
        rx, ry, rz = math.radians(rx), math.radians(ry), math.radians(rz)

        c1, s1 = math.cos(ry / 2), math.sin(ry / 2)
        c2, s2 = math.cos(rz / 2), math.sin(rz / 2)
        c3, s3 = math.cos(rx / 2), math.sin(rx / 2)

        c1c2 = c1 * c2
        s1s2 = s1 * s2
        self.w = c1c2 * c3 - s1s2 * s3
        self.x = c1c2 * s3 + s1s2 * c3
        self.y = s1 * c2 * c3 + c1 * s2 * s3
        self.z = c1 * s2 * c3 - s1 * c2 * s3
        self.normalize()

    def set_from_matrix(self, matrix: Sequence[float]) -> None:
        """Set from a 3x3 rotation matrix given as nine row-major values."""
        m = np.asarray(matrix, dtype=float).reshape(3, 3)
        trace = m[0, 0] + m[1, 1] + m[2, 2]
        if trace > 0:
            s = 0.5 / math.sqrt(trace + 1.0)
            self.w = 0.25 / s
            self.x = (m[2, 1] - m[1, 2]) * s
            self.y = (m[0, 2] - m[2, 0]) * s
            self.z = (m[1, 0] - m[0, 1]) * s
        elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
            s = 2.0 * math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
            self.w = (m[2, 1] - m[1, 2]) / s
            self.x = 0.25 * s
            self.y = (m[0, 1] + m[1, 0]) / s
            self.z = (m[0, 2] + m[2, 0]) / s
        elif m[1, 1] > m[2, 2]:
            s = 2.0 * math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
            self.w = (m[0, 2] - m[2, 0]) / s
            self.x = (m[0, 1] + m[1, 0]) / s
            self.y = 0.25 * s
            self.z = (m[1, 2] + m[2, 1]) / s
        else:
            s = 2.0 * math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
            self.w = (m[1, 0] - m[0, 1]) / s
            self.x = (m[0, 2] + m[2, 0]) / s
            self.y = (m[1, 2] + m[2, 1]) / s
            self.z = 0.25 * s

    def _rotation_matrix(self) -> np.ndarray:
        sqw, sqx = self.w * self.w, self.x * self.x
        sqy, sqz = self.y * self.y, self.z * self.z
        invs = 1 / (sqx + sqy + sqz + sqw)

        m = np.zeros((4, 4))
        m[0, 0] = (sqx - sqy - sqz + sqw) * invs
        m[1, 1] = (-sqx + sqy - sqz + sqw) * invs
        m[2, 2] = (-sqx - sqy + sqz + sqw) * invs

        tmp1, tmp2 = self.x * self.y, self.z * self.w
        m[1, 0] = 2.0 * (tmp1 + tmp2) * invs
        m[0, 1] = 2.0 * (tmp1 - tmp2) * invs

        tmp1, tmp2 = self.x * self.z, self.y * self.w
        m[2, 0] = 2.0 * (tmp1 - tmp2) * invs
        m[0, 2] = 2.0 * (tmp1 + tmp2) * invs

        tmp1, tmp2 = self.y * self.z, self.x * self.w
        m[2, 1] = 2.0 * (tmp1 + tmp2) * invs
        m[1, 2] = 2.0 * (tmp1 - tmp2) * invs

        m[3, 3] = 1.0
        return m

    def opengl_matrix(self) -> np.ndarray:
        """The 4x4 rotation matrix as 16 values in column-major order."""
        return self._rotation_matrix().T.reshape(16).copy()

    def normalize(self) -> None:
        """Scale to unit length."""
        norm = 1 / math.sqrt(
            self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w
        )
        self.x *= norm
        self.y *= norm
        self.z *= norm
        self.w *= norm

    def invert(self) -> None:
        """Conjugate in place (the inverse of a unit quaternion)."""
        self.x = -self.x
        self.y = -self.y
        self.z = -self.z

    def to_euler(self) -> Vector3D:
        """Euler angles in degrees; at the poles the attitude is reported as +-180."""
        sqw, sqx = self.w * self.w, self.x * self.x
        sqy, sqz = self.y * self.y, self.z * self.z
        unit = sqx + sqy + sqz + sqw
        test = self.x * self.y + self.z * self.w

        if test > 0.499 * unit:
            heading = 2 * math.atan2(self.x, self.w)
            return Vector3D(0.0, math.degrees(heading), math.degrees(math.pi))
        if test < -0.499 * unit:
            heading = -2 * math.atan2(self.x, self.w)
            return Vector3D(0.0, math.degrees(heading), math.degrees(-math.pi))

        heading = math.atan2(
            2 * self.y * self.w - 2 * self.x * self.z, sqx - sqy - sqz + sqw
        )
        attitude = math.asin(2 * test / unit)
        bank = math.atan2(
            2 * self.x * self.w - 2 * self.y * self.z, -sqx + sqy - sqz + sqw
        )
        return Vector3D(math.degrees(bank), math.degrees(heading), math.degrees(attitude))

    def derivatives(
        self,
        x_unprojected: Sequence[float],
        x_source: Sequence[float],
        other_info: Sequence[float],
    ) -> List[float]:
        """Energy derivatives with respect to the four quaternion components."""
        qx2, qy2, qz2, qw2 = 2 * self.x, 2 * self.y, 2 * self.z, 2 * self.w
        s0, s1, s2 = x_source[0], x_source[1], x_source[2]
        u0, u1, u2 = x_unprojected[0], x_unprojected[1], x_unprojected[2]

        partials = (
            (
                qy2 * s1 + qz2 * s2,
                qy2 * s0 - 2 * qx2 * s1 - qw2 * s2,
                qz2 * s0 + qw2 * s1 - 2 * qx2 * s2,
            ),
            (
                qx2 * s1 - 2 * qy2 * s0 + qw2 * s2,
                qx2 * s0 + qz2 * s2,
                qz2 * s1 - qw2 * s0 - 2 * qy2 * s2,
            ),
            (
                qx2 * s2 - qw2 * s1 - 2 * qz2 * s0,
                qw2 * s0 - 2 * qz2 * s1 + qy2 * s2,
                qx2 * s0 + qy2 * s1,
            ),
            (
                qy2 * s2 - qz2 * s1,
                qz2 * s0 - qx2 * s2,
                qx2 * s1 - qy2 * s0,
            ),
        )

        precalc_xy = u2 * u2
        precalc_x = -other_info[0] / precalc_xy
        precalc_y = -other_info[1] / precalc_xy

        return [
            precalc_x * (u2 * dx - u0 * dz) + precalc_y * (u2 * dy - u1 * dz)
            for dx, dy, dz in partials
        ]

    def __mul__(self, other: Quaternion) -> Quaternion:
        return Quaternion(
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y + self.y * other.w + self.z * other.x - self.x * other.z,
            self.w * other.z + self.z * other.w + self.x * other.y - self.y * other.x,
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def add(self, other: Quaternion) -> None:
        """Compose ``other`` before this rotation: ``self = other * self``."""
        (other * self).copy_into(self)

    def add_post(self, other: Quaternion) -> None:
        """Compose ``other`` after this rotation: ``self = self * other``."""
        (self * other).copy_into(self)

    def sum_of(self, first: Quaternion, second: Quaternion) -> None:
        """Set to the product ``first * second``."""
        (first * second).copy_into(self)

    def copy_into(self, other: Quaternion) -> None:
        """Write this quaternion's components into ``other``."""
        other.set(self.x, self.y, self.z, self.w)

    def copy(self) -> Quaternion:
        """An independent copy."""
        return Quaternion(self.x, self.y, self.z, self.w)

    def from_point_and_reference(
        self,
        ref: Sequence[float],
        point: Sequence[float],
        kind: Optional[int] = None,
    ) -> None:
        """Set to the rotation carrying ``ref`` towards ``point``.

        Without ``kind`` the full rotation is used; with ``kind`` 0-3 only
        selected axis components are kept.
        """
        ref_x, ref_y, ref_z = (float(v) for v in ref)
        px, py, pz = (float(v) for v in point)

        if kind is None:
            self.x = px * ref_z - pz * ref_x
            self.y = py * ref_z - pz * ref_y
            self.z = py * ref_x - px * ref_y
            self.w = 1.0 + px * ref_x + py * ref_y + pz * ref_z
            self.normalize()
            return

        if math.sqrt(px * px + py * py + pz * pz) == 0 or math.sqrt(
            ref_x * ref_x + ref_y * ref_y + ref_z * ref_z
        ) == 0:
            self.set(0.0, 0.0, 0.0, 1.0)
            return

        # Components are normalised one after another, each using the
        # already updated earlier ones.
        px = px / math.sqrt(px * px + py * py + pz * pz)
        py = py / math.sqrt(px * px + py * py + pz * pz)
        pz = pz / math.sqrt(px * px + py * py + pz * pz)
        ref_x = ref_x / math.sqrt(ref_x * ref_x + ref_y * ref_y + ref_z * ref_z)
        ref_y = ref_y / math.sqrt(ref_x * ref_x + ref_y * ref_y + ref_z * ref_z)
        ref_z = ref_z / math.sqrt(ref_x * ref_x + ref_y * ref_y + ref_z * ref_z)

        axis_z = 0.000001

        # Sign that treats zero (and negative zero) as positive.
        sign_pz = -1.0 if pz < 0.0 else 1.0
        sign_ref_z = -1.0 if ref_z < 0.0 else 1.0

        axis_x = _pick_axis(
            (
                math.sqrt(pz * pz + py * py) * ref_x * sign_pz
                - px * math.sqrt(ref_z * ref_z + ref_y * ref_y) * sign_ref_z,
                math.sqrt(pz * pz + py * py) * ref_x
                - px * math.sqrt(ref_z * ref_z + ref_y * ref_y),
                pz * ref_x - px * ref_z,
            )
        )
        axis_y = _pick_axis(
            (
                math.sqrt(pz * pz + px * px) * ref_y * sign_pz
                - py * math.sqrt(ref_z * ref_z + ref_x * ref_x) * sign_ref_z,
                math.sqrt(pz * pz + px * px) * ref_y
                - py * math.sqrt(ref_z * ref_z + ref_x * ref_x),
                pz * ref_y - py * ref_z,
            )
        )

        w = 1.0 + px * ref_x + py * ref_y + pz * ref_z
        if kind == 0:
            self.set(axis_x, 0.0, 0.0, w)
        elif kind == 1:
            self.set(0.0, axis_y, 0.0, w)
        elif kind == 2:
            self.set(0.0, 0.0, axis_z, w)
        elif kind == 3:
            self.set(axis_y, axis_x, 0.0, w)

        self.normalize()