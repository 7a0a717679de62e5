"""A two-dimensional pixel buffer."""

from __future__ import annotations

from typing import Any

import numpy as np


class Image:
    """A ``width`` x ``height`` image stored as a numpy array.

    ``pixels`` has shape ``(height, width)`` or ``(height, width, channels)``.
    Integer indexing addresses pixels in row-major order; tuple indexing is
    passed straight to the array.
    """

    def __init__(
        self, width: int, height: int, dtype: Any = np.uint8, channels: int = 1
    ) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"invalid image size {width}x{height}")
        if channels < 1:
            raise ValueError(f"invalid channel count {channels}")
        self.width = width
        self.height = height
        shape = (height, width) if channels == 1 else (height, width, channels)
        self.pixels = np.zeros(shape, dtype=dtype)

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else self.pixels.shape[2]

    def __len__(self) -> int:
        return self.width * self.height

    def _flat(self) -> np.ndarray:
        return self.pixels.reshape(self.width * self.height, *self.pixels.shape[2:])

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple):
            return self.pixels[key]
        return self._flat()[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(key, tuple):
            self.pixels[key] = value
        else:
            self._flat()[key] = value

    def clear(self, value: Any = 0) -> None:
        """Fill every byte of the buffer with the low byte of ``int(value)``."""
        self.pixels.view(np.uint8).fill(int(value) & 0xFF)