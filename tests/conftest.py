import struct
from typing import List, Optional, Sequence

import pytest

VERSION_ID = 0x00010100


def pack_frame_data(
    width: int,
    height: int,
    data_pointer: int,
    compression: int = 0,
    sub_frame_count: int = 0,
    x_offset: int = 0,
    y_offset: int = 0,
    transparency_index: int = 0,
) -> bytes:
    return struct.pack(
        '<HHHHBBHIII',
        width, height, x_offset, y_offset,
        transparency_index, compression, sub_frame_count,
        0, data_pointer, 0,
    )


def rle_row(*chunks: Sequence[int]) -> bytes:
    """One RLE scanline: u16 byte count followed by the control/payload bytes."""
    body = bytes(b for chunk in chunks for b in chunk)
    return struct.pack('<H', len(body)) + body


class GafBuilder:
    """
    Builds GAF buffers record by record.

    The header and entry pointer table are reserved up front; everything else
    is appended and referenced by the offsets the helpers return.
    """

    def __init__(self, entry_count: int, version_id: int = VERSION_ID):
        self.entry_count = entry_count
        self.version_id = version_id
        self.data = bytearray(12 + 4 * entry_count)
        self._next_entry = 0

    def append(self, blob: bytes) -> int:
        offset = len(self.data)
        self.data += blob
        return offset

    def leaf(self, width: int, height: int, pixels: bytes, compression: int = 0, **kwargs) -> int:
        pixel_offset = self.append(pixels)
        return self.append(pack_frame_data(width, height, pixel_offset, compression, **kwargs))

    def composite(self, width: int, height: int, sub_offsets: List[int], **kwargs) -> int:
        table = self.append(struct.pack(f'<{len(sub_offsets)}I', *sub_offsets))
        return self.append(
            pack_frame_data(width, height, table, sub_frame_count=len(sub_offsets), **kwargs)
        )

    def entry(self, name, frame_offsets: List[int], durations: Optional[List[int]] = None) -> int:
        if isinstance(name, str):
            name = name.encode('ascii')
        durations = durations or [0] * len(frame_offsets)
        record = struct.pack('<HHI32s', len(frame_offsets), 1, 0, name)
        for pointer, duration in zip(frame_offsets, durations):
            record += struct.pack('<II', pointer, duration)
        offset = self.append(record)
        struct.pack_into('<I', self.data, 12 + 4 * self._next_entry, offset)
        self._next_entry += 1
        return offset

    def build(self) -> bytes:
        struct.pack_into('<III', self.data, 0, self.version_id, self.entry_count, 0)
        return bytes(self.data)


@pytest.fixture
def unit_gaf() -> bytes:
    """One entry "unit" with one raw 2x1 frame holding indices [7, 9]."""
    builder = GafBuilder(1, version_id=100)
    frame = builder.leaf(2, 1, bytes([7, 9]))
    builder.entry("unit", [frame])
    return builder.build()


@pytest.fixture
def sample_gaf() -> bytes:
    """Two entries: an RLE animation of two frames and a multi-layer frame."""
    builder = GafBuilder(2)

    walk_1 = builder.leaf(
        3, 2,
        rle_row([0x08, 1, 2, 3]) + rle_row([0x03, 0x06, 4]),
        compression=1, x_offset=1, y_offset=1, transparency_index=9,
    )
    walk_2 = builder.leaf(
        3, 2,
        rle_row([0x0A, 5]) + rle_row([0x05, 0x00, 6]),
        compression=1, x_offset=1, y_offset=1, transparency_index=9,
    )
    builder.entry("walk", [walk_1, walk_2], durations=[2, 4])

    base = builder.leaf(2, 2, bytes([1, 2, 3, 4]), x_offset=2, y_offset=2)
    turret = builder.leaf(1, 1, bytes([5]))
    multi = builder.composite(4, 4, [base, turret], x_offset=2, y_offset=2)
    builder.entry("tower", [multi])

    return builder.build()
