"""
Error types raised while decoding GAF containers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class GafError(ValueError):
    """Base exception for GAF decoding errors."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        record: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.offset = offset
        self.record = record
        self.context = context or {}
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.record is not None:
            where.append(f"record={self.record}")
        if self.offset is not None:
            where.append(f"offset=0x{self.offset:X}")
        for key, value in self.context.items():
            where.append(f"{key}={value}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class OutOfBounds(GafError):
    """A read would fall outside the input buffer."""

    def __init__(self, offset: int, size: int, buffer_length: int, record: Optional[str] = None):
        self.size = size
        self.buffer_length = buffer_length
        super().__init__(
            f"Read of {size} byte(s) exceeds buffer",
            offset=offset,
            record=record,
            context={'buffer_length': buffer_length},
        )


class UnsupportedCompression(GafError):
    """The compression flag of a frame data record is not recognised."""

    def __init__(self, flag: int, offset: Optional[int] = None):
        self.flag = flag
        super().__init__(
            f"Unsupported compression flag {flag}",
            offset=offset,
            record='frame_data',
        )


class InvalidNesting(GafError):
    """A composite frame references another composite frame."""

    def __init__(self, offset: int, parent_offset: Optional[int] = None):
        self.parent_offset = parent_offset
        context = {}
        if parent_offset is not None:
            context['parent_offset'] = f"0x{parent_offset:X}"
        super().__init__(
            "Multi-layer frames cannot contain other multi-layer frames",
            offset=offset,
            record='frame_data',
            context=context,
        )


@dataclass
class RowWidthAnomaly:
    """Non-fatal report: the rows of one layer decoded to different widths."""
    offset: Optional[int]
    row_widths: List[int] = field(default_factory=list)
    max_width: int = 0

    def __str__(self) -> str:
        where = f" at 0x{self.offset:X}" if self.offset is not None else ""
        widths = sorted(set(self.row_widths))
        return (
            f"Layer{where} has pixel rows with different widths {widths}; "
            f"padded to {self.max_width}"
        )
