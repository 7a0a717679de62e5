import numpy as np
import pytest

from perseus.drawing import (
    MAX_INT,
    RenderTarget,
    apply_coordinate_transform,
    draw_face_edges,
    draw_face_filled,
    draw_filled,
    draw_mask,
    draw_wireframe,
    expand_roi,
    pm_matrices,
)
from perseus.image import Image
from perseus.model import Face, Group, Model
from perseus.object_transform import ObjectTransform
from perseus.render_objects import RenderView
from perseus.vectors import Vector3D


def _screen_model(points, faces):
    """A drawing model whose projected vertices are the given screen points."""
    model = Model(
        groups=[Group("g", [Face(list(f)) for f in faces])],
        vertices=[Vector3D(*p) for p in points],
    )
    drawing = model.to_drawing_model()
    for row, (x, y, z) in zip(drawing.vertices, points):
        row[:] = (x, y, z, 1.0)
    return drawing


TRIANGLE = [(1.0, 1.0, 0.5), (8.0, 1.0, 0.5), (1.0, 6.0, 0.5)]


def _view():
    return RenderView.from_intrinsics(
        640, 480, 640, 480, 500, 500, 320, 240, 1.0, 1000.0, 0
    )


def test_clear_zbuffer_resets_depths():
    target = RenderTarget(4, 3)
    target.zbuffer.pixels[:] = 5
    target.zbuffer_inverse.pixels[:] = 5
    target.clear_zbuffer()
    assert (target.zbuffer.pixels == MAX_INT).all()
    assert (target.zbuffer_inverse.pixels == 0).all()


def test_clear_blanks_fill_and_objects():
    target = RenderTarget(4, 3)
    target.image_fill.pixels[:] = 7
    target.objects.pixels[:] = 2
    target.clear()
    assert not target.image_fill.pixels.any()
    assert not target.objects.pixels.any()


def test_expand_roi_grows_by_band():
    assert expand_roi([10, 10, 20, 20, 11, 11], 5, 100, 100) == [5, 5, 25, 25, 20, 20]


def test_expand_roi_clamps_to_image():
    assert expand_roi([2, 3, 98, 97, 0, 0], 8, 100, 100) == [0, 0, 100, 100, 100, 100]


def test_draw_face_edges_returns_bounding_box_and_marks_corners():
    image = Image(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    box = draw_face_edges(image, drawing.groups[0].faces[0], drawing, 254)
    assert box == (1, 1, 8, 6)
    assert image.pixels[1, 1] == 254
    assert image.pixels[1, 8] == 254
    assert image.pixels[6, 1] == 254


def test_draw_face_edges_skips_non_triangles():
    image = Image(12, 10)
    points = TRIANGLE + [(5.0, 5.0, 0.5)]
    drawing = _screen_model(points, [(0, 1, 2, 3)])
    assert draw_face_edges(image, drawing.groups[0].faces[0], drawing, 254) is None
    assert not image.pixels.any()


def test_draw_face_edges_rejects_non_finite():
    image = Image(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    drawing.vertices[0, 0] = np.nan
    with pytest.raises(ValueError):
        draw_face_edges(image, drawing.groups[0].faces[0], drawing, 254)


def test_draw_wireframe_roi_matches_triangle():
    image = Image(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    roi = draw_wireframe(image, drawing)
    assert roi[:4] == [1, 1, 8, 6]
    assert roi[4] == roi[2] - roi[0] + 1
    assert roi[5] == roi[3] - roi[1] + 1


def test_draw_filled_marks_objects_where_filled():
    target = RenderTarget(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    draw_filled(target, drawing, 1)
    filled = target.image_fill.pixels != 0
    assert filled.any()
    assert (target.image_fill.pixels[filled] == 48).all()
    assert (target.objects.pixels[filled] == 2).all()
    assert ((target.objects.pixels != 0) == filled).all()
    assert (target.zbuffer.pixels[filled] < MAX_INT).all()
    assert (target.zbuffer.pixels[~filled] == MAX_INT).all()


def test_mask_matches_filled_silhouette():
    target = RenderTarget(12, 10)
    mask = Image(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    draw_filled(target, drawing, 0)
    draw_mask(mask, drawing, 0)
    assert ((mask.pixels != 0) == (target.image_fill.pixels != 0)).all()
    assert (mask.pixels[mask.pixels != 0] == 24).all()


def test_nearest_face_wins_regardless_of_order():
    near = _screen_model([(x, y, 0.3) for x, y, _ in TRIANGLE], [(0, 1, 2)])
    far = _screen_model([(x, y, 0.6) for x, y, _ in TRIANGLE], [(0, 1, 2)])
    results = []
    for order in ((near, 0, far, 1), (far, 1, near, 0)):
        target = RenderTarget(12, 10)
        first, first_id, second, second_id = order
        draw_face_filled(target, first.groups[0].faces[0], first, first_id, 10)
        draw_face_filled(target, second.groups[0].faces[0], second, second_id, 20)
        results.append(target)
    a, b = results
    assert (a.objects.pixels == b.objects.pixels).all()
    filled = a.objects.pixels != 0
    assert (a.objects.pixels[filled] == 1).all()
    assert (a.zbuffer_inverse.pixels[filled] > a.zbuffer.pixels[filled]).all()


def test_draw_face_filled_ignores_out_of_range_indices():
    target = RenderTarget(12, 10)
    drawing = _screen_model(TRIANGLE, [(0, 1, 2)])
    draw_face_filled(target, Face([0, 1, 9]), drawing, 0, 24)
    assert not target.image_fill.pixels.any()
    assert (target.zbuffer.pixels == MAX_INT).all()


def test_apply_coordinate_transform_maps_to_viewport():
    view = _view()
    view.set_viewport(0, 0, 100, 50)
    model = Model(
        groups=[Group("g", [Face([0, 1, 0])])],
        vertices=[Vector3D(-1.0, -1.0, -1.0), Vector3D(1.0, 1.0, 1.0)],
    )
    drawing = model.to_drawing_model()
    apply_coordinate_transform(view, drawing, np.eye(4).reshape(16))
    assert np.allclose(drawing.vertices[0, :3], [0.0, 0.0, 0.0])
    assert np.allclose(drawing.vertices[1, :3], [100.0, 50.0, 1.0])


def test_pm_matrices_identity_pose_gives_projection():
    view = _view()
    pm, inv_pm = pm_matrices(view, ObjectTransform())
    assert np.allclose(pm, view.camera_transform.projection_matrix)
    product = pm.reshape(4, 4) @ inv_pm.reshape(4, 4)
    assert np.allclose(product, np.eye(4))


def test_pm_matrices_inverse_round_trip_with_pose():
    view = _view()
    pose = ObjectTransform()
    pose.set_from_euler(1.0, 3.0, 30.0, 180.0, 80.0, 60.0)
    pm, inv_pm = pm_matrices(view, pose)
    assert np.allclose(inv_pm.reshape(4, 4) @ pm.reshape(4, 4), np.eye(4))