import math

from perseus.vectors import Pixel, Vector2D, Vector3D, Vector4D


def test_vector2d_add_sub_round_trip():
    a = Vector2D(1.5, -2.0)
    b = Vector2D(3.0, 4.0)
    assert (a + b) - b == a


def test_vector2d_scalar_multiplication_both_sides():
    a = Vector2D(2, 3)
    assert a * 4 == 4 * a
    assert (a * 4).x == a.x * 4


def test_vector2d_dot_commutes():
    a = Vector2D(2, 5)
    b = Vector2D(-1, 7)
    assert a.dot(b) == b.dot(a)


def test_vector2d_cross_swaps_components_when_arguments_swap():
    a = Vector2D(1, 2)
    b = Vector2D(3, 4)
    ab = a.cross(b)
    ba = b.cross(a)
    assert ab == Vector2D(ba.y, ba.x)


def test_vector3d_add_sub_round_trip():
    a = Vector3D(1, 2, 3)
    b = Vector3D(-4, 0.5, 9)
    assert (a + b) - b == a


def test_vector3d_cross_of_unit_axes():
    assert Vector3D(1, 0, 0).cross(Vector3D(0, 1, 0)) == Vector3D(0, 0, 1)


def test_vector3d_norm():
    assert math.isclose(Vector3D(3, 4, 0).norm(), 5.0)


def test_vector3d_norm_matches_dot_with_self():
    v = Vector3D(1.5, -2.5, 7.0)
    assert math.isclose(v.norm() ** 2, v.dot(v))


def test_vector3d_copy_into():
    src = Vector3D(1, 2, 3)
    dest = Vector3D()
    src.copy_into(dest)
    assert dest == src
    assert dest is not src


def test_vector3d_scaling_scales_norm():
    v = Vector3D(1, 2, 2)
    assert math.isclose((v * 3).norm(), v.norm() * 3)


def test_vector4d_dot_orthogonal_is_zero():
    assert Vector4D(1, 0, 0, 0).dot(Vector4D(0, 1, 0, 0)) == 0


def test_vector4d_dot_commutes():
    a = Vector4D(1, 2, 3, 4)
    b = Vector4D(-2, 5, 0.5, 1)
    assert a.dot(b) == b.dot(a)


def test_vector4d_subtraction_sums_w():
    a = Vector4D(5, 5, 5, 2)
    b = Vector4D(1, 2, 3, 3)
    diff = a - b
    assert diff.w == a.w + b.w
    assert diff.x == a.x - b.x


def test_pixel_default_alpha_is_opaque():
    p = Pixel()
    p.set_from(10, 20, 30)
    assert tuple(p) == (10, 20, 30, 255)


def test_pixel_filled_and_int_conversion():
    p = Pixel.filled(42)
    assert tuple(p) == (42, 42, 42, 42)
    assert int(p) == 42


def test_pixel_channels_wrap_to_bytes():
    p = Pixel(256 + 3, 0, 0, 0)
    assert p.x == 3