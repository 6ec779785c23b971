"""
Turn raw export bytes into header + string-keyed rows.

Responsibilities:
- encoding detection + decoding
- newline normalization
- header/cell stripping
- row length enforcement
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Dict, List, Tuple

from charset_normalizer import from_bytes

from .errors import EmptyCsvError
from .rules import TARGET_ENCODING

logger = logging.getLogger(__name__)

Row = Dict[str, str]


def decode_csv_bytes(raw: bytes) -> str:
    """
    Decode export bytes to text with LF newlines.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is consumed, never kept as part of the first header.
    - If decode fails, fall back to UTF-8, then to UTF-8 with replacement characters.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or TARGET_ENCODING
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8", "utf_8_sig")):
        decode_used = "utf-8-sig"

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode(TARGET_ENCODING)
            decode_used = TARGET_ENCODING
        except UnicodeDecodeError:
            text = raw.decode(TARGET_ENCODING, errors="replace")
            logger.warning("Undecodable bytes replaced (detected encoding: %s)", detected)

    logger.debug("Decoded %d bytes as %s", len(raw), decode_used)

    return text.removeprefix("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def read_csv_rows(text: str) -> Tuple[List[str], List[Row]]:
    """
    Parse CSV text into its header and a list of rows keyed by header name.

    Short rows are padded with empty cells, long rows are truncated to the header width.
    Raises EmptyCsvError when there is no header row at all.
    """
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header_row = next(reader)
    except StopIteration:
        raise EmptyCsvError() from None

    headers = [h.strip() for h in header_row]
    width_expected = len(headers)

    rows: List[Row] = []
    for line_no, cells in enumerate(reader, start=2):
        if not cells:
            continue

        if len(cells) < width_expected:
            logger.warning("Row %d too short (%d cells), padded to %d", line_no, len(cells), width_expected)
            cells = cells + [""] * (width_expected - len(cells))
        elif len(cells) > width_expected:
            logger.warning("Row %d too long (%d cells), truncated to %d", line_no, len(cells), width_expected)
            cells = cells[:width_expected]

        rows.append({header: cell.strip() for header, cell in zip(headers, cells)})

    return headers, rows
