import numpy as np
import pytest

from perseus.render_objects import RenderObject, RenderView

MESH = """\
v 0 0 0
v 1 0 0
v 0 1 0
o tri
f 1 2 3
"""

CALIBRATION = "cam 640 480 500 500 320 240\n"


@pytest.fixture
def mesh_path(tmp_path):
    path = tmp_path / "tri.obj"
    path.write_text(MESH)
    return path


@pytest.fixture
def calibration_path(tmp_path):
    path = tmp_path / "cam.cal"
    path.write_text(CALIBRATION)
    return path


def test_render_object_has_one_drawing_model_per_view(mesh_path):
    obj = RenderObject.from_path(mesh_path, 3, 7)
    assert obj.object_id == 7
    assert obj.view_count == 3
    assert len(obj.drawing_models) == 3
    assert len(obj.transforms) == 3
    assert obj.drawing_models[0] is not obj.drawing_models[1]
    assert obj.drawing_models[0].vertices is not obj.drawing_models[1].vertices
    assert obj.drawing_models[2].groups is obj.model.groups


def test_render_object_rejects_zero_views(mesh_path):
    with pytest.raises(ValueError):
        RenderObject.from_path(mesh_path, 0, 0)


def test_model_view_matrix_follows_the_view_pose(mesh_path):
    obj = RenderObject.from_path(mesh_path, 2, 0)
    obj.transforms[1].set_from_quaternion(1.0, 2.0, 3.0, 0.0, 0.0, 0.0, 1.0)
    matrix = obj.model_view_matrix(1).reshape(4, 4)
    assert np.allclose(matrix[:3, :3], np.eye(3))
    assert list(matrix[3]) == [1.0, 2.0, 3.0, 1.0]
    assert np.allclose(obj.model_view_matrix(0).reshape(4, 4), np.eye(4))


def test_view_from_calibration_sets_viewport(calibration_path):
    view = RenderView.from_calibration(640, 480, calibration_path, 1.0, 100.0, 2)
    assert view.view == [0, 0, 640, 480]
    assert view.view_id == 2
    assert view.camera.name == "cam"


def test_view_inverse_projection_inverts_projection(calibration_path):
    view = RenderView.from_calibration(640, 480, calibration_path, 1.0, 100.0, 0)
    product = view.inv_p.reshape(4, 4) @ view.camera_transform.projection_matrix.reshape(4, 4)
    assert np.allclose(product, np.eye(4))


def test_view_projection_params_match_transform(calibration_path):
    view = RenderView.from_calibration(640, 480, calibration_path, 1.0, 100.0, 0)
    assert view.projection_params == view.camera_transform.projection_parameters()
    assert view.camera_transform.z_near == 1.0
    assert view.camera_transform.z_far == 100.0


def test_view_from_intrinsics_matches_calibration_file(calibration_path):
    from_file = RenderView.from_calibration(640, 480, calibration_path, 1.0, 100.0, 0)
    direct = RenderView.from_intrinsics(
        640, 480, 640, 480, 500, 500, 320, 240, 1.0, 100.0, 0
    )
    assert np.allclose(
        direct.camera_transform.projection_matrix,
        from_file.camera_transform.projection_matrix,
    )
    assert np.allclose(direct.inv_p, from_file.inv_p)


def test_view_rejects_non_positive_depth_range():
    with pytest.raises(ValueError):
        RenderView.from_intrinsics(640, 480, 640, 480, 500, 500, 320, 240, 0.0, 100.0, 0)


def test_set_viewport_replaces_view():
    view = RenderView.from_intrinsics(640, 480, 640, 480, 500, 500, 320, 240, 1.0, 10.0, 0)
    view.set_viewport(5, 6, 7, 8)
    assert view.view == [5, 6, 7, 8]