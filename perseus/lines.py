"""Fixed-point line rasterisation."""

from __future__ import annotations

from typing import Any, Iterator, Tuple

from perseus.image import Image


def sgn(num: int) -> int:
    """Sign of ``num`` as -1, 0 or 1."""
    if num > 0:
        return 1
    if num < 0:
        return -1
    return 0


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _line_points(x: int, y: int, x2: int, y2: int) -> Iterator[Tuple[int, int]]:
    short_len = y2 - y
    long_len = x2 - x
    y_longer = abs(short_len) > abs(long_len)
    if y_longer:
        short_len, long_len = long_len, short_len

    dec_inc = 0 if long_len == 0 else _trunc_div(short_len << 16, long_len)
    step = 1 if long_len > 0 else -1
    major_start, minor_start = (y, x) if y_longer else (x, y)

    j = 0x8000 + (minor_start << 16)
    for k in range(abs(long_len) + 1):
        major = major_start + k * step
        minor = j >> 16
        yield (minor, major) if y_longer else (major, minor)
        j += step * dec_inc


def draw_line(image: Image, x1: int, y1: int, x2: int, y2: int, color: Any) -> None:
    """Draw a line into ``image``, clamping every point to the image border."""
    max_x = image.width - 1
    max_y = image.height - 1
    for px, py in _line_points(int(x1), int(y1), int(x2), int(y2)):
        image.pixels[_clamp(py, 0, max_y), _clamp(px, 0, max_x)] = color