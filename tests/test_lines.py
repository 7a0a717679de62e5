import numpy as np

from perseus.image import Image
from perseus.lines import draw_line, sgn


def test_sgn():
    assert sgn(5) == 1
    assert sgn(-3) == -1
    assert sgn(0) == 0


def test_horizontal_line_fills_row():
    img = Image(8, 4)
    draw_line(img, 1, 2, 5, 2, 9)
    assert (img.pixels[2, 1:6] == 9).all()
    assert np.count_nonzero(img.pixels) == 5


def test_reverse_horizontal_line_same_pixels():
    a = Image(8, 4)
    b = Image(8, 4)
    draw_line(a, 1, 2, 5, 2, 9)
    draw_line(b, 5, 2, 1, 2, 9)
    assert (a.pixels == b.pixels).all()


def test_diagonal_line_hits_diagonal():
    img = Image(5, 5)
    draw_line(img, 0, 0, 4, 4, 1)
    assert (np.diag(img.pixels) == 1).all()
    assert np.count_nonzero(img.pixels) == 5


def test_steep_line_has_one_pixel_per_row_and_hits_endpoints():
    img = Image(6, 10)
    draw_line(img, 1, 0, 3, 9, 7)
    assert all(np.count_nonzero(row) == 1 for row in img.pixels)
    assert img.pixels[0, 1] == 7
    assert img.pixels[9, 3] == 7


def test_shallow_line_has_one_pixel_per_column():
    img = Image(12, 6)
    draw_line(img, 0, 1, 11, 4, 3)
    assert all(np.count_nonzero(col) == 1 for col in img.pixels.T)
    assert img.pixels[1, 0] == 3
    assert img.pixels[4, 11] == 3


def test_single_point_line():
    img = Image(3, 3)
    draw_line(img, 1, 1, 1, 1, 5)
    assert img.pixels[1, 1] == 5
    assert np.count_nonzero(img.pixels) == 1


def test_points_outside_are_clamped_to_border():
    img = Image(10, 5)
    draw_line(img, -5, 2, 20, 2, 1)
    assert (img.pixels[2] == 1).all()
    assert np.count_nonzero(img.pixels) == img.width