"""
CSV parsing module for well, forecast, price and well-log uploads.

The parser is deliberately minimal: lines are split on newline and fields on
comma. Quoted values, escaped delimiters and embedded newlines are NOT
supported, so a comma inside a value corrupts that row. Callers choose how
rows with the wrong number of fields are treated via ``strict``.
"""

import logging
from typing import Dict, List, Union, IO

logger = logging.getLogger(__name__)

TextSource = Union[str, bytes, IO]


def read_text(source: TextSource) -> str:
    """
    Read raw text from an uploaded file, a byte string or a plain string.

    Args:
        source: String, UTF-8 bytes, or a file-like object (e.g. a Streamlit
            UploadedFile) exposing getvalue() or read().

    Returns:
        Decoded text with any UTF-8 byte-order mark removed.
    """
    if hasattr(source, 'getvalue'):
        source = source.getvalue()
    elif hasattr(source, 'read'):
        source = source.read()

    if isinstance(source, bytes):
        source = source.decode('utf-8-sig', errors='replace')

    return source.lstrip('\ufeff')


def parse_csv(text: str, strict: bool = False) -> List[Dict[str, str]]:
    """
    Parse delimited text into a list of header -> value mappings.

    Args:
        text: Raw CSV text with a header line.
        strict: When False, short rows are padded with empty strings and extra
            tokens ignored. When True, rows whose field count differs from the
            header count are dropped.

    Returns:
        List of row dictionaries, values trimmed but not coerced. Empty when
        the text has fewer than two non-empty lines.
    """
    lines = [line for line in text.split('\n') if line.strip()]

    if len(lines) < 2:
        return []

    headers = _split_headers(lines[0])

    rows = []
    for line_no, line in enumerate(lines[1:], start=2):
        values = [value.strip() for value in line.split(',')]
        # spreadsheet exports pad rows with trailing commas
        while len(values) > len(headers) and values[-1] == '':
            values.pop()

        if strict and len(values) != len(headers):
            logger.debug("Dropping line %d: %d fields, expected %d", line_no, len(values), len(headers))
            continue

        row = {}
        for i, header in enumerate(headers):
            row[header] = values[i] if i < len(values) else ''
        rows.append(row)

    return rows


def _split_headers(line: str) -> List[str]:
    headers = [header.strip() for header in line.split(',')]
    while len(headers) > 1 and headers[-1] == '':
        headers.pop()
    return headers


def get_headers(text: str) -> List[str]:
    """Return the trimmed header names of the first non-empty line, minus trailing blanks."""
    for line in text.split('\n'):
        if line.strip():
            return _split_headers(line)
    return []
