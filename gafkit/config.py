"""
Configuration constants for gafkit.
"""


class Config:
    """Configuration constants for the GAF decoder and command line tool."""

    # Decoder
    NAME_CAPACITY = 32
    MAX_FRAME_DEPTH = 2  # composite frame -> leaf frames, never deeper

    # Rendering
    FRAME_DELAY_MS = 66
    DEFAULT_TRANSPARENT_COLOR = (0, 0, 0, 0)
    IMAGE_FORMATS = ('webp', 'png')

    DEBUG_MODE = False

    # Output directory
    OUTPUT_DIR = 'out'

    # Field mappings for CSV output
    FIELD_MAPPINGS = {
        "entry": "Entry",
        "name": "Name",
        "frame": "Frame",
        "kind": "Kind",
        "layers": "Layers",
        "width": "Width",
        "height": "Height",
        "x_offset": "X Offset",
        "y_offset": "Y Offset",
        "compression": "Compression",
        "transparency_index": "Transparency Index",
        "duration": "Duration",
        "offset": "Offset",
    }
