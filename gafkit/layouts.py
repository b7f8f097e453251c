"""
Binary record layouts of the GAF container (all little-endian).
"""

from .byte_reader import ByteSpan, FieldType, size_of
from .config import Config

U8 = FieldType.U8
U16 = FieldType.U16
U32 = FieldType.U32


GAF_HEADER_STRUCT = (
    ('version_id', U32),
    ('entry_count', U32),
    ('reserved', U32),
)

GAF_HEADER_STRUCT_SIZE = size_of(GAF_HEADER_STRUCT)

GAF_ENTRY_STRUCT = (
    ('frame_count', U16),
    ('reserved1', U16),
    ('reserved2', U32),
    ('name', ByteSpan(Config.NAME_CAPACITY)),
)

GAF_ENTRY_STRUCT_SIZE = size_of(GAF_ENTRY_STRUCT)

# One per frame, contiguous after the entry record
GAF_FRAME_STRUCT = (
    ('frame_data_pointer', U32),
    ('duration', U32),
)

GAF_FRAME_STRUCT_SIZE = size_of(GAF_FRAME_STRUCT)

GAF_FRAME_DATA_STRUCT = (
    ('width', U16),
    ('height', U16),
    ('x_offset', U16),
    ('y_offset', U16),
    ('transparency_index', U8),
    ('compression', U8),
    ('sub_frame_count', U16),
    ('reserved1', U32),
    ('data_pointer', U32),
    ('reserved2', U32),
)

GAF_FRAME_DATA_STRUCT_SIZE = size_of(GAF_FRAME_DATA_STRUCT)

POINTER_SIZE = U32.width

LAYOUTS = {
    'header': (GAF_HEADER_STRUCT, GAF_HEADER_STRUCT_SIZE),
    'entry': (GAF_ENTRY_STRUCT, GAF_ENTRY_STRUCT_SIZE),
    'frame': (GAF_FRAME_STRUCT, GAF_FRAME_STRUCT_SIZE),
    'frame_data': (GAF_FRAME_DATA_STRUCT, GAF_FRAME_DATA_STRUCT_SIZE),
}
