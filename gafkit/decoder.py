"""
GAF container decoder.

The container is a tree of records linked by absolute offsets:

    header -> entry pointer table -> entry -> frame table -> frame data

A frame data record either points at pixel data (single layer) or at a table
of pointers to further frame data records (multi layer). Multi-layer records
may only reference single-layer records.
"""

import logging
from io import IOBase
from typing import List

from .byte_reader import Buffer, as_view, read_name, read_pointer_table, read_struct
from .config import Config
from .errors import InvalidNesting, RowWidthAnomaly
from .gaf_file import CompositeFrame, Frame, GafEntry, GafFile, GafFrame
from .layouts import (
    GAF_ENTRY_STRUCT,
    GAF_ENTRY_STRUCT_SIZE,
    GAF_FRAME_DATA_STRUCT,
    GAF_FRAME_STRUCT,
    GAF_FRAME_STRUCT_SIZE,
    GAF_HEADER_STRUCT,
    GAF_HEADER_STRUCT_SIZE,
)
from .scanline import decode_layer

logger = logging.getLogger(__name__)


class GafDecoder(object):
    """Decodes one in-memory GAF buffer. The buffer is never modified."""

    def __init__(self, buffer: Buffer):
        self._data = as_view(buffer)
        self._anomalies: List[RowWidthAnomaly] = []

    def decode(self) -> GafFile:
        """
        Decode every entry of the container.

        Returns:
            GafFile with entries in pointer-table order

        Raises:
            OutOfBounds: If any record or pixel data lies outside the buffer
            UnsupportedCompression: If a frame uses an unknown compression flag
            InvalidNesting: If a multi-layer frame references another one
        """
        self._anomalies = []
        header = read_struct(self._data, 0, GAF_HEADER_STRUCT, record='header')
        entry_count = header['entry_count']
        logger.debug(
            "GAF version 0x%08X with %d entries (%d bytes)",
            header['version_id'], entry_count, len(self._data),
        )

        pointers = read_pointer_table(
            self._data, GAF_HEADER_STRUCT_SIZE, entry_count, record='entry_pointers'
        )
        entries = [self._read_entry(pointer) for pointer in pointers]

        return GafFile(header['version_id'], entries, self._anomalies)

    def _read_entry(self, offset: int) -> GafEntry:
        entry_struct = read_struct(self._data, offset, GAF_ENTRY_STRUCT, record='entry')
        name = read_name(entry_struct['name'], 0, Config.NAME_CAPACITY)
        frame_count = entry_struct['frame_count']
        logger.debug("Entry '%s' at 0x%X: %d frames", name, offset, frame_count)

        frames = []
        frames_start = offset + GAF_ENTRY_STRUCT_SIZE

        for i in range(frame_count):
            frame_struct = read_struct(
                self._data,
                frames_start + (i * GAF_FRAME_STRUCT_SIZE),
                GAF_FRAME_STRUCT,
                record='frame',
            )
            frame = self._read_frame_data(frame_struct['frame_data_pointer'])
            frame.duration = frame_struct['duration']
            frames.append(frame)

        return GafEntry(name=name, frames=frames, offset=offset)

    def _read_frame_data(self, offset: int, depth: int = 0, parent_offset: int = None) -> Frame:
        frame_data = read_struct(self._data, offset, GAF_FRAME_DATA_STRUCT, record='frame_data')
        sub_frame_count = frame_data['sub_frame_count']

        if sub_frame_count == 0:  # data_pointer points to pixel data
            layer = decode_layer(
                self._data,
                frame_data['compression'],
                frame_data['data_pointer'],
                frame_data['width'],
                frame_data['height'],
                frame_data['transparency_index'],
                anomalies=self._anomalies,
                record_offset=offset,
            )
            return GafFrame(
                width=frame_data['width'],
                height=frame_data['height'],
                x_offset=frame_data['x_offset'],
                y_offset=frame_data['y_offset'],
                transparency_index=frame_data['transparency_index'],
                compression=frame_data['compression'],
                layer=layer,
                offset=offset,
            )

        # data_pointer points to a table of pointers to single-layer records
        if depth + 1 >= Config.MAX_FRAME_DEPTH:
            raise InvalidNesting(offset, parent_offset=parent_offset)

        pointers = read_pointer_table(
            self._data, frame_data['data_pointer'], sub_frame_count, record='sub_frame_pointers'
        )
        logger.debug("Multi-layer frame at 0x%X: %d layers", offset, sub_frame_count)

        layers = [
            self._read_frame_data(pointer, depth=depth + 1, parent_offset=offset)
            for pointer in pointers
        ]

        return CompositeFrame(
            width=frame_data['width'],
            height=frame_data['height'],
            x_offset=frame_data['x_offset'],
            y_offset=frame_data['y_offset'],
            transparency_index=frame_data['transparency_index'],
            layers=layers,
            offset=offset,
        )

    @staticmethod
    def decode_bytes(buffer: Buffer) -> GafFile:
        return GafDecoder(buffer).decode()

    @staticmethod
    def decode_file(file_path: str) -> GafFile:
        with open(file_path, 'rb') as fp:
            return GafDecoder.decode_stream(fp)

    @staticmethod
    def decode_stream(fp: IOBase) -> GafFile:
        return GafDecoder(fp.read()).decode()


def decode(buffer: Buffer) -> GafFile:
    """Decode a whole GAF buffer into entries, frames and layers."""
    return GafDecoder(buffer).decode()
