"""Software rasterisation of projected meshes: wireframes, filled silhouettes and depth."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from perseus.image import Image
from perseus.lines import draw_line
from perseus.model import DrawingModel, Face
from perseus.object_transform import ObjectTransform
from perseus.render_objects import RenderView

MAX_INT = 65535
"""Depth values in [0, 1] are scaled by this into the integer z-buffers."""

_Point = List[float]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _byte(value: int) -> int:
    return int(value) & 0xFF


@dataclass
class RenderTarget:
    """The buffers a filled rendering writes to.

    ``image_fill`` holds the face colour, ``zbuffer`` the nearest depth,
    ``zbuffer_inverse`` the farthest depth and ``objects`` the id plus one of
    the object seen at each pixel.
    """

    width: int
    height: int
    image_fill: Image = field(init=False)
    zbuffer: Image = field(init=False)
    zbuffer_inverse: Image = field(init=False)
    objects: Image = field(init=False)

    def __post_init__(self) -> None:
        self.image_fill = Image(self.width, self.height)
        self.zbuffer = Image(self.width, self.height, dtype=np.uint32)
        self.zbuffer_inverse = Image(self.width, self.height, dtype=np.uint32)
        self.objects = Image(self.width, self.height)
        self.clear_zbuffer()

    def clear(self) -> None:
        """Blank the colour and object-id buffers."""
        self.image_fill.clear()
        self.objects.clear()

    def clear_zbuffer(self) -> None:
        """Reset the near depth to the far limit and the far depth to zero."""
        self.zbuffer.pixels.fill(MAX_INT)
        self.zbuffer_inverse.pixels.fill(0)


def pm_matrices(
    view: RenderView, transform: ObjectTransform
) -> Tuple[np.ndarray, np.ndarray]:
    """Projection times model-view for an object pose, and its inverse.

    Both are 16 column-major values.
    """
    projection = np.asarray(view.camera_transform.projection_matrix, dtype=float)
    model_view = np.asarray(transform.model_view_matrix(), dtype=float)
    pm = (model_view.reshape(4, 4) @ projection.reshape(4, 4)).reshape(16)
    inv_pm = np.linalg.inv(pm.reshape(4, 4)).reshape(16)
    return pm, inv_pm


def apply_coordinate_transform(
    view: RenderView, drawing_model: DrawingModel, pm_matrix: Sequence[float]
) -> None:
    """Project the model's original vertices into viewport pixels.

    The results go into ``drawing_model.vertices``: x and y in pixels and z
    mapped from [-1, 1] to [0, 1].
    """
    matrix = np.asarray(pm_matrix, dtype=float).reshape(4, 4)
    projected = np.asarray(drawing_model.original_vertices, dtype=float) @ matrix

    w = projected[:, 3:4]
    safe = np.where(w != 0, w, 1.0)
    projected = np.where(w != 0, projected / safe, projected)
    projected[:, 3] = np.where(w[:, 0] != 0, 1.0, projected[:, 3])

    x0, y0, vw, vh = view.view
    projected[:, 0] = x0 + vw * (projected[:, 0] + 1.0) / 2.0
    projected[:, 1] = y0 + vh * (projected[:, 1] + 1.0) / 2.0
    projected[:, 2] = (projected[:, 2] + 1.0) / 2.0
    drawing_model.vertices[:] = projected


def _triangle(face: Face, drawing_model: DrawingModel) -> Optional[List[_Point]]:
    """The three screen-space corners of a triangular face, or None."""
    if face.vertex_count != 3:
        return None
    count = drawing_model.vertex_count
    if any(not 0 <= index < count for index in face.vertices):
        return None
    return [
        [float(v) for v in drawing_model.vertices[index][:3]] for index in face.vertices
    ]


def draw_face_edges(
    image: Image, face: Face, drawing_model: DrawingModel, color: int
) -> Optional[Tuple[int, int, int, int]]:
    """Draw a triangle's outline; return its bounding box (min x, min y, max x, max y).

    Faces that are not triangles or that index past the vertex list are
    skipped and give None.
    """
    corners = _triangle(face, drawing_model)
    if corners is None:
        return None
    (x1, y1, _), (x2, y2, _), (x3, y3, _) = corners
    if not math.isfinite(x1):
        raise ValueError("invalid projected x coordinate")

    colour = _byte(color)
    draw_line(image, int(x1), int(y1), int(x2), int(y2), colour)
    draw_line(image, int(x2), int(y2), int(x3), int(y3), colour)
    draw_line(image, int(x1), int(y1), int(x3), int(y3), colour)

    min_x, min_y, max_x, max_y = int(x1), int(y1), int(x1), int(y1)
    for x, y in ((x2, y2), (x3, y3)):
        min_x = int(min(min_x, x))
        min_y = int(min(min_y, y))
        max_x = int(max(max_x, x))
        max_y = int(max(max_y, y))
    return min_x, min_y, max_x, max_y


def draw_wireframe(image: Image, drawing_model: DrawingModel) -> List[int]:
    """Draw every face's outline; return the region of interest.

    The region is ``[min x, min y, max x, max y, width, height]``.
    """
    roi = [0xFFFF, 0xFFFF, -1, -1, 0, 0]
    local = (0, 0, 0, 0)
    for group in drawing_model.groups:
        for face in group.faces:
            extremes = draw_face_edges(image, face, drawing_model, 254)
            if extremes is not None:
                local = extremes
            roi[0] = min(roi[0], local[0])
            roi[1] = min(roi[1], local[1])
            roi[2] = max(roi[2], local[2])
            roi[3] = max(roi[3], local[3])
    roi[4] = roi[2] - roi[0] + 1
    roi[5] = roi[3] - roi[1] + 1
    return roi


def _order_by_y(a: _Point, b: _Point, c: _Point) -> Tuple[_Point, _Point, _Point]:
    y1, y2, y3 = a[1], b[1], c[1]
    if y1 < y2:
        if y3 < y1:
            return c, a, b
        if y3 < y2:
            return a, c, b
        return a, b, c
    if y3 < y2:
        return c, b, a
    if y3 < y1:
        return b, c, a
    return b, a, c


def _walk(
    s: _Point,
    e: _Point,
    stop_y: float,
    steps: Tuple[float, float, float, float],
    width: int,
    height: int,
) -> Iterator[Tuple[float, int, float, float, float]]:
    dxa, dxb, dza, dzb = steps
    while s[1] <= stop_y:
        dz_x = (e[2] - s[2]) / (e[0] - s[0]) if e[0] != s[0] else 0.0
        row = _clamp(s[1], 0, height - 1)
        start = _clamp(s[0], 0, width - 1)
        end = _clamp(e[0], 0, width - 1)
        yield row, int(start), end, s[2], dz_x
        s[1] += 1
        e[1] += 1
        s[0] += dxa
        e[0] += dxb
        s[2] += dza
        e[2] += dzb


def _spans(
    corners: List[_Point], width: int, height: int
) -> Iterator[Tuple[float, int, float, float, float]]:
    """Scanlines of a triangle: (row, first column, column limit, z, dz per column)."""
    a, b, c = (list(p) for p in _order_by_y(*corners))

    dx1 = (b[0] - a[0]) / (b[1] - a[1]) if b[1] - a[1] > 0 else b[0] - a[0]
    dx2 = (c[0] - a[0]) / (c[1] - a[1]) if c[1] - a[1] > 0 else 0.0
    dx3 = (c[0] - b[0]) / (c[1] - b[1]) if c[1] - b[1] > 0 else 0.0

    dz1 = (b[2] - a[2]) / (b[1] - a[1]) if b[1] - a[1] != 0 else 0.0
    dz2 = (c[2] - a[2]) / (c[1] - a[1]) if c[1] - a[1] != 0 else 0.0
    dz3 = (c[2] - b[2]) / (c[1] - b[1]) if c[1] - b[1] != 0 else 0.0

    s, e = list(a), list(a)
    b[1] = math.floor(b[1] - 0.5)
    c[1] = math.floor(c[1] - 0.5)

    if dx1 > dx2:
        steps = (dx2, dx1, dz2, dz1)
    else:
        steps = (dx1, dx2, dz1, dz2)
    yield from _walk(s, e, b[1], steps, width, height)

    if dx1 > dx2:
        steps = (dx2, dx3, dz2, dz3)
        e = list(b)
    else:
        steps = (dx3, dx2, dz3, dz2)
        s = list(b)
    yield from _walk(s, e, c[1], steps, width, height)


def draw_face_filled(
    target: RenderTarget,
    face: Face,
    drawing_model: DrawingModel,
    object_id: int,
    color: int,
) -> None:
    """Fill a triangle with depth testing into a render target."""
    corners = _triangle(face, drawing_model)
    if corners is None:
        return
    width = target.width
    fill = target.image_fill.pixels.reshape(-1)
    zbuffer = target.zbuffer.pixels.reshape(-1)
    zinverse = target.zbuffer_inverse.pixels.reshape(-1)
    objects = target.objects.pixels.reshape(-1)
    colour = _byte(color)
    object_value = _byte(object_id + 1)

    for row, start, end, z, dz_x in _spans(corners, width, target.height):
        for i in range(start, math.ceil(end)):
            index = int(i + row * width)
            int_z = max(0, int(MAX_INT * z))
            if int_z < zbuffer[index]:
                fill[index] = colour
                zbuffer[index] = int_z
                objects[index] = object_value
            if int_z > zinverse[index]:
                zinverse[index] = int_z
            z += dz_x


def draw_filled(target: RenderTarget, drawing_model: DrawingModel, object_id: int) -> None:
    """Fill every face of a model, coloured by its object id."""
    colour = 24 * (object_id + 1)
    for group in drawing_model.groups:
        for face in group.faces:
            draw_face_filled(target, face, drawing_model, object_id, colour)


def draw_face_mask(
    image: Image, face: Face, drawing_model: DrawingModel, color: int
) -> None:
    """Fill a triangle's silhouette into a single image, without depth."""
    corners = _triangle(face, drawing_model)
    if corners is None:
        return
    corners = [[x, y, 0.0] for x, y, _ in corners]
    width = image.width
    pixels = image.pixels.reshape(-1)
    colour = _byte(color)
    for row, start, end, _, _ in _spans(corners, width, image.height):
        for i in range(start, math.ceil(end)):
            pixels[int(i + row * width)] = colour


def draw_mask(image: Image, drawing_model: DrawingModel, object_id: int) -> None:
    """Fill every face's silhouette, coloured by the object id."""
    colour = 24 * (object_id + 1)
    for group in drawing_model.groups:
        for face in group.faces:
            draw_face_mask(image, face, drawing_model, colour)


def expand_roi(
    roi: Sequence[int], band_size: int, width: int, height: int
) -> List[int]:
    """Grow a region of interest by a band, clamped to the image."""
    x0 = int(_clamp(roi[0] - band_size, 0, width))
    y0 = int(_clamp(roi[1] - band_size, 0, height))
    x1 = int(_clamp(roi[2] + band_size, 0, width))
    y1 = int(_clamp(roi[3] + band_size, 0, height))
    return [x0, y0, x1, y1, x1 - x0, y1 - y0]