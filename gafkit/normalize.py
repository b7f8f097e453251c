import logging
from typing import List, Optional, Tuple

from .errors import RowWidthAnomaly

logger = logging.getLogger(__name__)


def normalize_rows(
    rows: List[bytearray],
    fill: int,
    offset: Optional[int] = None,
) -> Tuple[List[bytearray], Optional[RowWidthAnomaly]]:
    """
    Make every pixel row of a layer the same width.

    Rows are only ever padded on the right with ``fill``, never truncated.

    Args:
        rows: Decoded pixel rows of one layer
        fill: Value used for the padding (transparency index for RLE rows,
            zero for raw rows)
        offset: Offset of the layer's frame data record, for the report

    Returns:
        Tuple of (rows, anomaly). When all rows already share a width the same
        list is returned with ``None``; otherwise the padded rows are returned
        with a single RowWidthAnomaly.
    """
    if len(rows) <= 1:
        return rows, None

    widths = [len(row) for row in rows]
    max_width = max(widths)
    if min(widths) == max_width:
        return rows, None

    anomaly = RowWidthAnomaly(offset=offset, row_widths=widths, max_width=max_width)
    logger.warning("%s", anomaly)

    normalized = []
    for row in rows:
        if len(row) == max_width:
            normalized.append(row)
            continue
        out_row = bytearray(row)
        out_row.extend(bytes([fill]) * (max_width - len(row)))
        normalized.append(out_row)

    return normalized, anomaly
