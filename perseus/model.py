"""Triangle meshes read from Wavefront OBJ files, and their drawing buffers."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Union

import numpy as np

from perseus.vectors import Vector3D

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class Face:
    """A polygon given by zero-based indices into the model's vertex list."""

    vertices: List[int] = field(default_factory=list)
    is_visible: bool = False
    is_invisible: bool = False

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)


@dataclass
class Group:
    """A named set of faces."""

    name: str = ""
    faces: List[Face] = field(default_factory=list)


@dataclass
class DrawingModel:
    """Per-view working copy of a model for the rasteriser.

    Vertex arrays have shape ``(vertex_count, 4)``; ``original_vertices`` are
    the model-space homogeneous vertices and ``vertices`` receives their
    screen-space projection. ``groups`` is shared with the source model.
    """

    groups: List[Group]
    original_vertices: np.ndarray
    vertices: np.ndarray
    vertices_pre_p: np.ndarray
    face_buffer: np.ndarray
    min_z: float
    face_count: int

    @property
    def vertex_count(self) -> int:
        return len(self.original_vertices)


@dataclass
class Model:
    """A mesh: vertex positions and faces organised in groups."""

    groups: List[Group] = field(default_factory=list)
    vertices: List[Vector3D] = field(default_factory=list)

    @property
    def face_count(self) -> int:
        return sum(len(group.faces) for group in self.groups)

    @property
    def min_z(self) -> float:
        """The largest vertex z; the renderer has always kept it under this name."""
        if not self.vertices:
            raise ValueError("model has no vertices")
        return max(vertex.z for vertex in self.vertices)

    @property
    def vertices_vector(self) -> np.ndarray:
        """Homogeneous vertices as an array of shape ``(vertex_count, 4)``."""
        vector = np.ones((len(self.vertices), 4))
        for row, vertex in zip(vector, self.vertices):
            row[:3] = (vertex.x, vertex.y, vertex.z)
        return vector

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> Model:
        """Read a model from an OBJ file."""
        with open(path, "r") as stream:
            return parse_obj(stream)

    def clone(self) -> Model:
        """An independent copy of the groups, faces and vertices."""
        return Model(groups=copy.deepcopy(self.groups), vertices=copy.deepcopy(self.vertices))

    def face_vertex_buffer(self) -> np.ndarray:
        """Per-face triangle corners, shape ``(face_count, 4, 4)``.

        Slot ``k < 3`` of each face holds its ``k``-th vertex with ``w = 1``;
        the fourth slot is padding and stays zero.
        """
        buffer = np.zeros((self.face_count, 4, 4))
        faces = (face for group in self.groups for face in group.faces)
        for slots, face in zip(buffer, faces):
            if face.vertex_count < 3:
                raise ValueError(f"face {face.vertices} has fewer than three vertices")
            for slot, index in zip(slots, face.vertices[:3]):
                vertex = self.vertices[index]
                slot[:] = (vertex.x, vertex.y, vertex.z, 1.0)
        return buffer

    def to_drawing_model(self) -> DrawingModel:
        """Allocate a drawing model for one view of this mesh."""
        if not self.groups:
            raise ValueError("cannot build a drawing model from a model without groups")
        count = len(self.vertices)
        return DrawingModel(
            groups=self.groups,
            original_vertices=self.vertices_vector,
            vertices=np.zeros((count, 4)),
            vertices_pre_p=np.zeros((count, 4)),
            face_buffer=self.face_vertex_buffer(),
            min_z=self.min_z,
            face_count=self.face_count,
        )


def _face_indices(tokens: Iterable[str]) -> List[int]:
    """Zero-based indices from face tokens, up to the first one without a number."""
    indices = []
    for token in tokens:
        match = _LEADING_INT.match(token)
        if match is None:
            break
        indices.append(int(match.group(1)) - 1)
    return indices


def parse_obj(stream: TextIO) -> Model:
    """Parse OBJ text into a model.

    Vertex (``v``), group (``g``/``o``) and face (``f``) records are used;
    everything else is ignored. Faces seen before any group go into a group
    named ``default``. Face tokens such as ``3/1/2`` use their vertex index.
    """
    groups: List[Group] = []
    vertices: List[Vector3D] = []
    default = Group("default")
    current: Optional[Group] = default

    for line_no, line in enumerate(stream, 1):
        tokens = line.split()
        if not tokens:
            continue
        keyword = tokens[0]
        lead = keyword[0]

        if keyword == "v":
            try:
                x, y, z = (float(t) for t in tokens[1:4])
            except ValueError as exc:
                raise ValueError(f"line {line_no}: malformed vertex {line.strip()!r}") from exc
            vertices.append(Vector3D(x, y, z))
        elif lead in "go":
            current = Group(" ".join(tokens[1:]))
            groups.append(current)
        elif lead == "f":
            indices = _face_indices(tokens[1:])
            if not indices:
                raise ValueError(f"line {line_no}: malformed face {line.strip()!r}")
            if current is default and not any(g is default for g in groups):
                groups.append(default)
            current.faces.append(Face(indices))

    if not vertices:
        raise ValueError("model has no vertices")
    return Model(groups=groups, vertices=vertices)