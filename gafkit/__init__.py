"""gafkit package entrypoints."""

from .colors import PixelFormat, convert_packed_color_to_components
from .decoder import GafDecoder, decode
from .errors import GafError, InvalidNesting, OutOfBounds, RowWidthAnomaly, UnsupportedCompression
from .gaf_file import ColorLayer, CompositeFrame, GafEntry, GafFile, GafFrame, PaletteLayer
from .palette import Palette, load_palette

__all__ = [
    'decode', 'GafDecoder',
    'GafFile', 'GafEntry', 'GafFrame', 'CompositeFrame', 'PaletteLayer', 'ColorLayer',
    'PixelFormat', 'convert_packed_color_to_components',
    'Palette', 'load_palette',
    'GafError', 'OutOfBounds', 'UnsupportedCompression', 'InvalidNesting', 'RowWidthAnomaly',
]
