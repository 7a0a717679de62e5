"""Renderable objects and views: a mesh with per-view poses, and a camera."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

import numpy as np

from perseus.camera import Camera
from perseus.camera_transform import CameraTransform, ProjectionParams
from perseus.model import DrawingModel, Model
from perseus.object_transform import ObjectTransform


class RenderObject:
    """A mesh with one pose and one drawing model for each view."""

    def __init__(self, model: Model, view_count: int, object_id: int) -> None:
        if view_count < 1:
            raise ValueError(f"view count must be positive, got {view_count}")
        self.model = model
        self.view_count = view_count
        self.object_id = object_id
        self.transforms: List[ObjectTransform] = [
            ObjectTransform() for _ in range(view_count)
        ]
        self.drawing_models: List[DrawingModel] = [
            model.to_drawing_model() for _ in range(view_count)
        ]

    @classmethod
    def from_path(
        cls, path: Union[str, Path], view_count: int, object_id: int
    ) -> RenderObject:
        """Load the mesh from an OBJ file."""
        return cls(Model.from_path(path), view_count, object_id)

    def model_view_matrix(self, view_id: int) -> np.ndarray:
        """The object's model-view matrix in the given view, column-major."""
        return self.transforms[view_id].model_view_matrix()


class RenderView:
    """A calibrated camera with its projection and viewport."""

    def __init__(
        self,
        width: int,
        height: int,
        camera: Camera,
        z_near: float,
        z_far: float,
        view_id: int,
    ) -> None:
        self.camera = camera
        self.camera_transform = CameraTransform()
        self.camera_transform.set_from_camera(camera, z_near, z_far)
        self.camera_transform.z_near = z_near
        self.camera_transform.z_far = z_far
        self.projection_params: ProjectionParams = (
            self.camera_transform.projection_parameters()
        )
        # Inverse projection, needed by the energy function.
        self.inv_p: np.ndarray = self.camera_transform.inverse_projection()
        self.view_id = view_id
        self.view: List[int] = [0, 0, 0, 0]
        self.roi_generated: List[int] = [0] * 6
        self.set_viewport(0, 0, width, height)

    @classmethod
    def from_calibration(
        cls,
        width: int,
        height: int,
        path: Union[str, Path],
        z_near: float,
        z_far: float,
        view_id: int,
    ) -> RenderView:
        """Build a view from a camera calibration file."""
        return cls(width, height, Camera.from_file(path), z_near, z_far, view_id)

    @classmethod
    def from_intrinsics(
        cls,
        width: int,
        height: int,
        size_x: float,
        size_y: float,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        z_near: float,
        z_far: float,
        view_id: int,
    ) -> RenderView:
        """Build a view from image size, focal lengths and principal point."""
        camera = Camera(size_x, size_y, fx, fy, cx, cy)
        return cls(width, height, camera, z_near, z_far, view_id)

    def set_viewport(self, x: int, y: int, width: int, height: int) -> None:
        """Set the viewport origin and size."""
        self.view = [x, y, width, height]