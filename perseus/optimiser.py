"""Gradient-descent pose optimisation over a set of object/view targets."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from perseus.object_transform import ObjectTransform


@dataclass
class StepSize:
    """Step sizes for the rotation and each translation axis."""

    r: float = 0.0
    tx: float = 0.0
    ty: float = 0.0
    tz: float = 0.0

    def __mul__(self, other: StepSize) -> StepSize:
        return StepSize(
            self.r * other.r, self.tx * other.tx, self.ty * other.ty, self.tz * other.tz
        )


class IterationTarget(enum.Enum):
    """Which part of the pose a descent step updates."""

    BOTH = 0
    TRANSLATION = 1
    ROTATION = 2


def _zero_transform() -> ObjectTransform:
    transform = ObjectTransform()
    transform.clear()
    return transform


@dataclass
class Target:
    """One object seen in one view, with its pose, gradient and step scale.

    ``on_pose_change`` is called with the target whenever the optimiser has
    changed ``pose``, so that renderers can follow it.
    """

    view_id: int = 0
    object_id: int = 0
    initial_pose: ObjectTransform = field(default_factory=ObjectTransform)
    pose: ObjectTransform = field(default_factory=ObjectTransform)
    dpose: ObjectTransform = field(default_factory=_zero_transform)
    step_size: StepSize = field(default_factory=lambda: StepSize(1.0, 1.0, 1.0, 1.0))
    on_pose_change: Optional[Callable[[Target], None]] = None


class EnergyFunction(ABC):
    """An energy whose first derivatives drive the pose descent."""

    @abstractmethod
    def prepare_iteration(self, targets: Sequence[Target], config: Any) -> None:
        """Render and preprocess whatever the derivatives need."""

    @abstractmethod
    def first_derivatives(self, targets: Sequence[Target], config: Any) -> None:
        """Store the energy gradient of every target in its ``dpose``."""


def preset_step_sizes() -> List[StepSize]:
    """The eight descent levels used by one multi-level iteration."""
    return [
        StepSize(r=-0.0008, tx=-0.005, ty=-0.005, tz=-0.005),
        StepSize(r=-0.0003, tx=-0.003, ty=-0.003, tz=-0.003),
        StepSize(r=-0.0003, tx=-0.003, ty=-0.003, tz=-0.003),
        StepSize(r=-0.0003, tx=-0.002, ty=-0.002, tz=-0.003),
        StepSize(r=-0.0003, tx=-0.002, ty=-0.002, tz=-0.003),
        StepSize(r=-0.0003, tx=-0.002, ty=-0.002, tz=-0.003),
        StepSize(r=-0.0002, tx=-0.001, ty=-0.001, tz=-0.002),
        StepSize(r=-0.0002, tx=-0.001, ty=-0.001, tz=-0.002),
    ]


def advance_translation(
    pose: ObjectTransform, dpose: ObjectTransform, step: StepSize
) -> None:
    """Move the translation against the gradient by the per-axis steps."""
    pose.translation.x -= step.tx * dpose.translation.x
    pose.translation.y -= step.ty * dpose.translation.y
    pose.translation.z -= step.tz * dpose.translation.z


def advance_rotation(
    pose: ObjectTransform, dpose: ObjectTransform, step: StepSize
) -> None:
    """Move every quaternion component against the gradient by the rotation step."""
    pose.rotation.x -= step.r * dpose.rotation.x
    pose.rotation.y -= step.r * dpose.rotation.y
    pose.rotation.z -= step.r * dpose.rotation.z
    pose.rotation.w -= step.r * dpose.rotation.w


def _iter_count(config: Any) -> int:
    return int(getattr(config, "iter_count", 1))


def _iter_target(config: Any) -> IterationTarget:
    return getattr(config, "iter_target", IterationTarget.BOTH)


def _notify(target: Target) -> None:
    if target.on_pose_change is not None:
        target.on_pose_change(target)


class Optimiser:
    """Multi-level gradient descent on object poses.

    ``config`` objects passed to the methods are read for ``iter_count``
    (default 1) and ``iter_target`` (default ``IterationTarget.BOTH``) and are
    handed unchanged to the energy function.
    """

    def __init__(
        self,
        energy_function: EnergyFunction,
        step_sizes: Optional[Sequence[StepSize]] = None,
    ) -> None:
        self.energy_function = energy_function
        self.step_sizes: List[StepSize] = (
            list(step_sizes) if step_sizes is not None else preset_step_sizes()
        )

    def _reset(self, targets: Sequence[Target]) -> None:
        for target in targets:
            target.initial_pose.copy_into(target.pose)
            _notify(target)

    def _has_converged(self) -> bool:
        return False

    def _run_single(self, targets: Sequence[Target], preset: StepSize, config: Any) -> None:
        self.energy_function.prepare_iteration(targets, config)
        self.energy_function.first_derivatives(targets, config)
        self.descend(targets, preset, _iter_target(config))

    def _run_multi(self, targets: Sequence[Target], config: Any) -> None:
        for preset in self.step_sizes:
            self._run_single(targets, preset, config)
            if self._has_converged():
                return
        self._normalise_rotation(targets)

    def _normalise_rotation(self, targets: Sequence[Target]) -> None:
        for target in targets:
            target.pose.rotation.normalize()
            _notify(target)

    def minimise(self, targets: Sequence[Target], config: Any) -> None:
        """Start from each initial pose and run the configured multi-level iterations."""
        self._reset(targets)
        for _ in range(_iter_count(config)):
            self._run_multi(targets, config)

    def minimise_single(self, targets: Sequence[Target], config: Any, level: int) -> None:
        """Start from each initial pose and descend repeatedly at one step level."""
        if not 0 <= level < len(self.step_sizes):
            raise ValueError(
                f"step level must be from 0 to {len(self.step_sizes) - 1}, got {level}"
            )
        self._reset(targets)
        for _ in range(_iter_count(config)):
            self._run_single(targets, self.step_sizes[level], config)
            if self._has_converged():
                return

    def descend(
        self,
        targets: Sequence[Target],
        preset: StepSize,
        target_kind: IterationTarget,
    ) -> None:
        """Take one gradient step on each target, scaled by its own step size."""
        for target in targets:
            step = preset * target.step_size
            if target_kind in (IterationTarget.BOTH, IterationTarget.TRANSLATION):
                advance_translation(target.pose, target.dpose, step)
            if target_kind in (IterationTarget.BOTH, IterationTarget.ROTATION):
                advance_rotation(target.pose, target.dpose, step)
            _notify(target)