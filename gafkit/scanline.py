"""
Pixel data decoding for a single GAF layer.

Supported compression flags:
- 0: uncompressed palette indices
- 1: run-length encoded palette indices, one byte-counted scanline at a time
- 4: raw ARGB4444 packed colors
- 5: raw ARGB1555 packed colors
"""

from enum import IntEnum
from struct import unpack_from
from typing import List, Optional

import numpy as np

from .byte_reader import Buffer, as_view, check_bounds
from .colors import PixelFormat
from .errors import RowWidthAnomaly, UnsupportedCompression
from .gaf_file import ColorLayer, Layer, PaletteLayer
from .normalize import normalize_rows


class Compression(IntEnum):
    RAW_PALETTE = 0
    RLE_PALETTE = 1
    ARGB4444 = 4
    ARGB1555 = 5


PACKED_FORMATS = {
    Compression.ARGB4444: PixelFormat.ARGB4444,
    Compression.ARGB1555: PixelFormat.ARGB1555,
}

# RLE control byte bits
TRANSPARENCY_MASK = 0x01
REPEAT_MASK = 0x02


def _write_run(row: bytearray, x: int, data, fill: int) -> None:
    end = x + len(data)
    if end > len(row):
        # Row grows past its declared width; normalized later
        row.extend(bytes([fill]) * (end - len(row)))
    row[x:end] = data


def decode_raw_rows(buffer: Buffer, offset: int, width: int, height: int) -> List[bytearray]:
    """Copy ``width * height`` palette indices as ``height`` rows."""
    view = as_view(buffer)
    check_bounds(view, offset, width * height, 'pixel_data')
    return [
        bytearray(view[offset + y * width:offset + (y + 1) * width])
        for y in range(height)
    ]


def decode_rle_rows(
    buffer: Buffer,
    offset: int,
    width: int,
    height: int,
    transparency_index: int,
) -> List[bytearray]:
    """
    Decode ``height`` run-length encoded scanlines.

    Each scanline starts with a u16 byte count N, followed by N bytes of
    control bytes and payload. For each control byte ``m``:

    - bit0 set: skip ``m >> 1`` pixels (left at the transparency index)
    - bit1 set: repeat the next payload byte ``(m >> 2) + 1`` times
    - otherwise: copy the next ``(m >> 2) + 1`` payload bytes

    Rows start as ``width`` copies of ``transparency_index``. The next scanline
    always begins exactly N bytes after the count, whatever the runs covered.

    Returns:
        One bytearray per scanline. Rows whose runs went past ``width`` are
        longer than ``width``.

    Raises:
        OutOfBounds: If a count, control byte or payload byte lies outside
            the buffer
    """
    view = as_view(buffer)
    rows = []
    pos = offset

    for _ in range(height):
        check_bounds(view, pos, 2, 'rle_scanline')
        byte_count = unpack_from('<H', view, pos)[0]
        pos += 2

        row = bytearray([transparency_index]) * width
        x = 0
        count = 0

        while count < byte_count:
            check_bounds(view, pos + count, 1, 'rle_scanline')
            mask = view[pos + count]
            count += 1

            if mask & TRANSPARENCY_MASK:
                x += mask >> 1
            elif mask & REPEAT_MASK:
                repeat = (mask >> 2) + 1
                check_bounds(view, pos + count, 1, 'rle_scanline')
                _write_run(row, x, bytes([view[pos + count]]) * repeat, transparency_index)
                count += 1
                x += repeat
            else:
                read = (mask >> 2) + 1
                check_bounds(view, pos + count, read, 'rle_scanline')
                _write_run(row, x, view[pos + count:pos + count + read], transparency_index)
                count += read
                x += read

        pos += byte_count
        rows.append(row)

    return rows


def decode_packed_colors(buffer: Buffer, offset: int, width: int, height: int) -> np.ndarray:
    """Copy ``width * height`` little-endian u16 packed colors."""
    view = as_view(buffer)
    count = width * height
    check_bounds(view, offset, count * 2, 'pixel_data')
    if count == 0:
        return np.zeros((height, width), dtype=np.uint16)
    pixels = np.frombuffer(view, dtype='<u2', count=count, offset=offset)
    return pixels.reshape(height, width).astype(np.uint16)


def rows_to_array(rows: List[bytearray], width: int) -> np.ndarray:
    """Stack equal-width rows into a (height, width) uint8 array."""
    if not rows:
        return np.zeros((0, width), dtype=np.uint8)
    row_width = len(rows[0])
    if row_width == 0:
        return np.zeros((len(rows), 0), dtype=np.uint8)
    data = bytes(b''.join(rows))
    return np.frombuffer(data, dtype=np.uint8).reshape(len(rows), row_width).copy()


def decode_layer(
    buffer: Buffer,
    compression: int,
    offset: int,
    width: int,
    height: int,
    transparency_index: int,
    anomalies: Optional[List[RowWidthAnomaly]] = None,
    record_offset: Optional[int] = None,
) -> Layer:
    """
    Decode the pixel data of one single-layer frame.

    Palette rows are passed through the row normalizer before they are
    flattened into the layer array.

    Args:
        buffer: Whole GAF buffer
        compression: Compression flag of the frame data record
        offset: Absolute offset of the pixel data
        width: Frame width in pixels
        height: Frame height in pixels
        transparency_index: Palette index used for skipped pixels
        anomalies: Optional list collecting RowWidthAnomaly reports
        record_offset: Offset of the frame data record, for diagnostics

    Returns:
        PaletteLayer for flags 0 and 1, ColorLayer for flags 4 and 5

    Raises:
        UnsupportedCompression: For any other flag
        OutOfBounds: If the pixel data runs past the end of the buffer
    """
    if compression == Compression.RAW_PALETTE:
        rows = decode_raw_rows(buffer, offset, width, height)
        fill = 0
    elif compression == Compression.RLE_PALETTE:
        rows = decode_rle_rows(buffer, offset, width, height, transparency_index)
        fill = transparency_index
    elif compression in PACKED_FORMATS:
        pixels = decode_packed_colors(buffer, offset, width, height)
        return ColorLayer(pixels, PACKED_FORMATS[Compression(compression)])
    else:
        raise UnsupportedCompression(compression, offset=record_offset)

    rows, anomaly = normalize_rows(rows, fill, offset=record_offset)
    if anomaly is not None and anomalies is not None:
        anomalies.append(anomaly)

    return PaletteLayer(rows_to_array(rows, width))
