"""
256-color palettes used to render palette-index layers.
"""

from typing import Union

import numpy as np

PALETTE_SIZE = 256


class Palette(object):
    """A 256-entry RGB color table."""

    def __init__(self, colors: np.ndarray):
        colors = np.asarray(colors, dtype=np.uint8)
        if colors.shape != (PALETTE_SIZE, 3):
            raise ValueError(f"Palette must have shape (256, 3), got {colors.shape}")
        self._colors = colors

    @property
    def colors(self) -> np.ndarray:
        """Array of shape (256, 3) with RGB values."""
        return self._colors

    def __getitem__(self, index: int):
        return tuple(int(c) for c in self._colors[index])

    @staticmethod
    def grayscale() -> 'Palette':
        ramp = np.arange(PALETTE_SIZE, dtype=np.uint8)
        return Palette(np.stack([ramp, ramp, ramp], axis=-1))

    @staticmethod
    def from_bytes(data: Union[bytes, bytearray]) -> 'Palette':
        """
        Build a palette from raw palette file contents.

        Accepts 1024 bytes of RGBX quads (the fourth byte is ignored) or
        768 bytes of RGB triplets.

        Raises:
            ValueError: For any other size
        """
        raw = np.frombuffer(bytes(data), dtype=np.uint8)
        if raw.size == PALETTE_SIZE * 4:
            return Palette(raw.reshape(PALETTE_SIZE, 4)[:, :3])
        if raw.size == PALETTE_SIZE * 3:
            return Palette(raw.reshape(PALETTE_SIZE, 3))
        raise ValueError(f"Unsupported palette size: {raw.size} bytes (expected 1024 or 768)")


def load_palette(path: str) -> Palette:
    with open(path, 'rb') as fp:
        return Palette.from_bytes(fp.read())
