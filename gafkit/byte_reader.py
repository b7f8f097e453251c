"""
Declarative fixed-layout struct reading over an in-memory byte buffer.

A layout is an ordered sequence of ``(field_name, field_type)`` pairs. Fields are
read strictly in declared order with a single cursor, and every field is bounds
checked before it is read.
"""

from enum import Enum
from struct import unpack_from
from typing import Dict, List, Sequence, Tuple, Union

from .errors import OutOfBounds


class Endianness(Enum):
    LITTLE = '<'
    BIG = '>'


class FieldType(Enum):
    """Fixed-width integer field kinds: (struct format character, byte width)."""
    U8 = ('B', 1)
    I8 = ('b', 1)
    U16 = ('H', 2)
    I16 = ('h', 2)
    U32 = ('I', 4)
    I32 = ('i', 4)

    def __init__(self, fmt: str, width: int):
        self.fmt = fmt
        self.width = width


class ByteSpan(object):
    """Opaque fixed-length run of bytes, exposed as a read-only view."""

    def __init__(self, length: int):
        if length < 0:
            raise ValueError(f"Byte span length must be positive, got {length}")
        self.width = length

    def __eq__(self, other):
        return isinstance(other, ByteSpan) and other.width == self.width

    def __hash__(self):
        return hash(('ByteSpan', self.width))

    def __repr__(self):
        return f"ByteSpan({self.width})"


Field = Union[FieldType, ByteSpan]
Layout = Sequence[Tuple[str, Field]]
Buffer = Union[bytes, bytearray, memoryview]


def as_view(buffer: Buffer) -> memoryview:
    """Wrap a bytes-like object as a flat, read-only byte view."""
    view = memoryview(buffer)
    if view.format != 'B' or view.ndim != 1:
        view = view.cast('B')
    return view.toreadonly()


def check_bounds(view: memoryview, offset: int, size: int, record: str = None) -> None:
    """Raise OutOfBounds unless ``size`` bytes can be read at ``offset``."""
    if offset < 0 or size < 0 or offset + size > len(view):
        raise OutOfBounds(offset, size, len(view), record=record)


def size_of(layout: Layout) -> int:
    """Total byte width of a layout."""
    return sum(field_type.width for _, field_type in layout)


def read_integer(
    buffer: Buffer,
    offset: int,
    field_type: FieldType,
    endianness: Endianness = Endianness.LITTLE,
    record: str = None,
) -> int:
    view = as_view(buffer)
    check_bounds(view, offset, field_type.width, record)
    return unpack_from(endianness.value + field_type.fmt, view, offset)[0]


def read_struct(
    buffer: Buffer,
    offset: int,
    layout: Layout,
    endianness: Endianness = Endianness.LITTLE,
    record: str = None,
) -> Dict[str, Union[int, memoryview]]:
    """
    Read one fixed-layout record.

    Args:
        buffer: Source bytes (never modified)
        offset: Absolute offset of the first field
        layout: Ordered (name, type) pairs
        endianness: Byte order of the integer fields
        record: Record kind, used in error messages

    Returns:
        Dictionary mapping field names to integers, or to read-only
        memoryviews for ByteSpan fields

    Raises:
        OutOfBounds: If any field would extend past the end of the buffer
    """
    view = as_view(buffer)
    result = {}
    cursor = offset

    for name, field_type in layout:
        check_bounds(view, cursor, field_type.width, record)
        if isinstance(field_type, ByteSpan):
            result[name] = view[cursor:cursor + field_type.width]
        else:
            result[name] = unpack_from(endianness.value + field_type.fmt, view, cursor)[0]
        cursor += field_type.width

    return result


def read_pointer_table(buffer: Buffer, offset: int, count: int, record: str = None) -> List[int]:
    """Read ``count`` contiguous little-endian u32 pointers."""
    view = as_view(buffer)
    check_bounds(view, offset, count * FieldType.U32.width, record)
    return list(unpack_from(f'<{count}I', view, offset))


def read_name(buffer: Buffer, offset: int = 0, capacity: int = 32) -> str:
    """
    Decode a NUL-terminated ASCII name stored in a fixed-size field.

    A name that fills the whole field without a terminator is valid and is
    returned in full.
    """
    view = as_view(buffer)
    if offset < 0 or offset > len(view):
        raise OutOfBounds(offset, capacity, len(view), record='name')

    chunk = bytes(view[offset:offset + capacity])
    end = chunk.find(b'\x00')
    if end == -1:
        if len(chunk) < capacity:
            raise OutOfBounds(offset, capacity, len(view), record='name')
        end = capacity

    return chunk[:end].decode('ascii', errors='replace')
