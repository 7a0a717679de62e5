import pytest

from perseus.camera import Camera


def make_camera(distortion=0.0):
    return Camera(640, 480, 500, 520, 320, 240, name="cam", distortion=distortion)


def test_intrinsic_matrix_holds_focal_and_center():
    cam = make_camera()
    assert cam.k[0, 0] == 500
    assert cam.k[0, 2] == 320
    assert cam.k[2, 2] == 1
    assert cam.k[1, 1] == -520
    assert cam.k[1, 2] == (480 - 1) - 240
    assert cam.k[:, 3].tolist() == [0, 0, 0]


def test_gl_matrix_uses_negated_center_and_depth():
    cam = make_camera()
    assert cam.k_gl[0, 0] == 500
    assert cam.k_gl[0, 2] == -320
    assert cam.k_gl[2, 2] == -1
    assert cam.k_gl[1, 1] == -520
    assert cam.k_gl[1, 2] == 240 - (480 - 1)


def test_from_file_matches_direct_construction(tmp_path):
    path = tmp_path / "camera.cal"
    path.write_text("cam\n640 480\n500 520\n320 240\n")
    loaded = Camera.from_file(path)
    direct = make_camera()
    assert loaded.name == "cam"
    assert loaded.size_x == direct.size_x
    assert loaded.size_y == direct.size_y
    assert loaded.focal_length == direct.focal_length
    assert loaded.center_point == direct.center_point
    assert (loaded.k == direct.k).all()
    assert (loaded.k_gl == direct.k_gl).all()


def test_from_file_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Camera.from_file(tmp_path / "absent.cal")


def test_from_file_incomplete_raises(tmp_path):
    path = tmp_path / "short.cal"
    path.write_text("cam 640 480 500")
    with pytest.raises(ValueError):
        Camera.from_file(path)


def test_from_file_malformed_raises(tmp_path):
    path = tmp_path / "bad.cal"
    path.write_text("cam 640 480 five 500 320 240")
    with pytest.raises(ValueError):
        Camera.from_file(path)


def test_zero_focal_length_raises():
    with pytest.raises(ValueError):
        Camera(640, 480, 0, 500, 320, 240)


def test_project_origin_is_principal_point():
    cam = make_camera(distortion=0.4)
    assert cam.project((0.0, 0.0)) == cam.center_point


def test_small_radius_factor_is_one():
    cam = make_camera(distortion=0.4)
    assert cam.rtrans_factor(0.0005) == 1.0


def test_no_distortion_radius_is_unchanged():
    cam = make_camera()
    assert cam.invrtrans(0.37) == 0.37
    assert cam.rtrans_factor(0.37) == 1.0


@pytest.mark.parametrize("distortion", [0.0, 0.5])
def test_unproject_then_project_round_trip(distortion):
    cam = make_camera(distortion)
    pixel = (400.0, 300.0)
    back = cam.project(cam.unproject(pixel))
    assert back == pytest.approx(pixel)


def test_unproject_records_last_values():
    cam = make_camera()
    cam.unproject((420.0, 240.0))
    assert cam.last_dist_r == pytest.approx(100 / 500)
    assert cam.last_r == cam.last_dist_r
    assert cam.last_factor == 1.0