"""
Well log upload module (drilling and petrophysics curves by depth).
"""

import logging

import pandas as pd

from petrovision.csv_parser import parse_csv, get_headers
from petrovision.exceptions import InvalidCSVError, MissingHeadersError

logger = logging.getLogger(__name__)

WELL_LOG_HEADERS = ["Depth", "WOB", "SURF_RPM", "ROP_AVG", "PHIF", "VSH", "SW", "KLOGH"]


def parse_well_logs_csv(text: str) -> pd.DataFrame:
    """
    Parse a well log upload with the exact WELL_LOG_HEADERS columns.

    Args:
        text: Raw CSV text.

    Returns:
        DataFrame of float curves sorted as in the file, plus POROSITY_PCT
        (PHIF as a percentage). Unparsable values are NaN.

    Raises:
        InvalidCSVError: If the file has no data rows.
        MissingHeadersError: If any required header is absent.
    """
    rows = parse_csv(text, strict=True)
    headers = get_headers(text)

    if len([line for line in text.split('\n') if line.strip()]) < 2:
        raise InvalidCSVError("well logs")

    missing = [h for h in WELL_LOG_HEADERS if h not in headers]
    if missing:
        raise MissingHeadersError("well logs", missing)

    df = pd.DataFrame(rows, columns=headers)
    for col in WELL_LOG_HEADERS:
        df[col] = pd.to_numeric(df[col], errors='coerce')

    df['POROSITY_PCT'] = df['PHIF'] * 100

    logger.info("Loaded %d well log samples", len(df))
    return df
