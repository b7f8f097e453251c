"""
Packed 16-bit color conversion.

ARGB4444 uses 4 bits for each component (alpha, red, green, blue), so each
component ranges from 0 to 15.

ARGB1555 stores 1 bit for alpha and 5 bits for red, green and blue, so alpha
ranges from 0-1 and the other components from 0-31.

Scaling to 8 bits is a linear rescale, round(v * 255 / max), with halves
rounded up.
"""

from enum import Enum
from typing import Tuple

import numpy as np

ARGBComponents = Tuple[int, int, int, int]


class PixelFormat(Enum):
    ARGB4444 = 'argb4444'
    ARGB1555 = 'argb1555'


def _scale(component, max_value: int):
    # Integer form of round-half-up; works on ints and numpy arrays
    return (component * 255 + max_value // 2) // max_value


def convert_4bit_to_8bit(component: int) -> int:
    return _scale(component, 15)


def convert_5bit_to_8bit(component: int) -> int:
    return _scale(component, 31)


def argb4444_to_components(pixel: int) -> ARGBComponents:
    """
    Split an ARGB4444 pixel into its 4-bit components.

    Each component keeps its 0-15 value; use convert_4bit_to_8bit to scale.
    """
    alpha = (pixel & 0xF000) >> 12
    red = (pixel & 0x0F00) >> 8
    green = (pixel & 0x00F0) >> 4
    blue = pixel & 0x000F
    return alpha, red, green, blue


def argb1555_to_scaled_8bit_components(pixel: int) -> ARGBComponents:
    """
    Convert an ARGB1555 pixel to 8 bits per component.

    alpha: 1 bit (0-1) becomes 0 or 255
    red, green, blue: 5 bits (0-31) become 0-255
    """
    alpha = 255 if pixel & 0x8000 else 0
    red = convert_5bit_to_8bit((pixel & 0x7C00) >> 10)
    green = convert_5bit_to_8bit((pixel & 0x03E0) >> 5)
    blue = convert_5bit_to_8bit(pixel & 0x001F)
    return alpha, red, green, blue


def convert_packed_color_to_components(pixel: int, pixel_format: PixelFormat) -> ARGBComponents:
    """
    Convert a packed 16-bit pixel to (alpha, red, green, blue), 0-255 each.

    Raises:
        ValueError: If the pixel format is unknown
    """
    if pixel_format == PixelFormat.ARGB4444:
        return tuple(convert_4bit_to_8bit(c) for c in argb4444_to_components(pixel))
    if pixel_format == PixelFormat.ARGB1555:
        return argb1555_to_scaled_8bit_components(pixel)
    raise ValueError(f"Unknown pixel format: {pixel_format}")


def packed_to_rgba(pixels: np.ndarray, pixel_format: PixelFormat) -> np.ndarray:
    """
    Convert an array of packed pixels to an RGBA uint8 array.

    Args:
        pixels: Array of shape (height, width) holding packed 16-bit values
        pixel_format: Packing of the values

    Returns:
        Array of shape (height, width, 4) in R, G, B, A order
    """
    p = pixels.astype(np.uint32)
    if pixel_format == PixelFormat.ARGB4444:
        alpha = _scale((p >> 12) & 0xF, 15)
        red = _scale((p >> 8) & 0xF, 15)
        green = _scale((p >> 4) & 0xF, 15)
        blue = _scale(p & 0xF, 15)
    elif pixel_format == PixelFormat.ARGB1555:
        alpha = np.where(p & 0x8000, 255, 0)
        red = _scale((p >> 10) & 0x1F, 31)
        green = _scale((p >> 5) & 0x1F, 31)
        blue = _scale(p & 0x1F, 31)
    else:
        raise ValueError(f"Unknown pixel format: {pixel_format}")

    return np.stack([red, green, blue, alpha], axis=-1).astype(np.uint8)
