"""
Well record normalisation module.

This module maps parsed well-data CSV rows onto the canonical well table used
by the dashboard, and writes that table back out as CSV (export and
download templates). Numeric fields follow a parse-or-zero policy: an
unparsable value never raises, it becomes 0.
"""

import re
import logging
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from petrovision.config import STATUSES, UNKNOWN_STATUS
from petrovision.csv_parser import parse_csv

logger = logging.getLogger(__name__)

WELL_CSV_HEADERS = [
    "Well Name",
    "Field",
    "Status",
    "Production (BOE/d)",
    "% Change",
    "Water Cut (%)",
]

WELL_COLUMNS = [
    'WELL_ID', 'WELL_NAME', 'FIELD', 'STATUS',
    'PRODUCTION', 'CHANGE_PCT', 'WATER_CUT'
]

_COLUMN_DTYPES = {
    'WELL_ID': 'int64',
    'WELL_NAME': 'object',
    'FIELD': 'object',
    'STATUS': 'object',
    'PRODUCTION': 'int64',
    'CHANGE_PCT': 'float64',
    'WATER_CUT': 'float64',
}

_INT_PATTERN = re.compile(r'^\s*[+-]?\d+')
_FLOAT_PATTERN = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')

_STATUS_LOOKUP = {
    re.sub(r'[\s_-]', '', status.lower()): status
    for status in STATUSES + [UNKNOWN_STATUS]
}


def parse_int_or_zero(value: Optional[str]) -> int:
    """Parse the leading integer of a string ("1250.7 bbl" -> 1250), else 0."""
    if value is None:
        return 0
    match = _INT_PATTERN.match(str(value))
    return int(match.group()) if match else 0


def parse_float_or_zero(value: Optional[str]) -> float:
    """Parse the leading float of a string ("22.5%" -> 22.5), else 0.0."""
    if value is None:
        return 0.0
    match = _FLOAT_PATTERN.match(str(value))
    return float(match.group()) if match else 0.0


def normalize_status(value: Optional[str]) -> str:
    """
    Map a raw status string onto the canonical status set.

    Matching ignores case, spaces, hyphens and underscores, so "shut in" and
    "SHUT-IN" both become "Shut-in". Unrecognised values become "Unknown".
    """
    if not value:
        return UNKNOWN_STATUS
    key = re.sub(r'[\s_-]', '', str(value).lower())
    status = _STATUS_LOOKUP.get(key)
    if status is None:
        logger.debug("Unrecognised status %r normalised to %s", value, UNKNOWN_STATUS)
        return UNKNOWN_STATUS
    return status


def empty_wells_frame() -> pd.DataFrame:
    """Return an empty well table with the canonical columns and dtypes."""
    return pd.DataFrame(columns=WELL_COLUMNS).astype(_COLUMN_DTYPES)


def wells_frame(records: List[Dict]) -> pd.DataFrame:
    """Build a canonical well table from a list of record dictionaries."""
    if not records:
        return empty_wells_frame()
    df = pd.DataFrame(records, columns=WELL_COLUMNS)
    return df.astype(_COLUMN_DTYPES)


def normalize_well_rows(rows: List[Dict[str, str]]) -> pd.DataFrame:
    """
    Convert parsed CSV rows into the canonical well table.

    Args:
        rows: Output of parse_csv(), one mapping of header -> raw string per well.

    Returns:
        DataFrame with WELL_COLUMNS. WELL_ID is the 1-based row position in
        this call; it is not stable across reloads.
    """
    records = []
    for index, row in enumerate(rows, start=1):
        records.append({
            'WELL_ID': index,
            'WELL_NAME': row.get("Well Name") or f"Well #{index}",
            'FIELD': row.get("Field") or "Unknown",
            'STATUS': normalize_status(row.get("Status")),
            'PRODUCTION': parse_int_or_zero(row.get("Production (BOE/d)")),
            'CHANGE_PCT': parse_float_or_zero(row.get("% Change")),
            'WATER_CUT': parse_float_or_zero(row.get("Water Cut (%)")),
        })
    return wells_frame(records)


def load_well_csv(text: str) -> pd.DataFrame:
    """Parse well-data CSV text (lenient row handling) into the well table."""
    rows = parse_csv(text, strict=False)
    df = normalize_well_rows(rows)
    logger.info("Loaded %d well records from CSV", len(df))
    return df


def format_number(value) -> str:
    """Render a number the way it was typed: 22.0 -> "22", 1.5 -> "1.5"."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def export_wells_csv(wells: pd.DataFrame) -> str:
    """
    Serialise the well table to the 6-column well-data CSV schema.

    Args:
        wells: Canonical well table.

    Returns:
        CSV text (no quoting, newline separated) that load_well_csv() reads back
        to the same names, fields, statuses and numeric values.
    """
    lines = [",".join(WELL_CSV_HEADERS)]
    for _, row in wells.iterrows():
        lines.append(",".join([
            str(row['WELL_NAME']),
            str(row['FIELD']),
            str(row['STATUS']),
            str(int(row['PRODUCTION'])),
            format_number(row['CHANGE_PCT']),
            format_number(row['WATER_CUT']),
        ]))
    return "\n".join(lines)


def make_well_template_csv() -> str:
    """Return the downloadable well-data template: header plus one sample row."""
    sample = ["EF #101-205", "Eagle Ford", "Producing", "1250", "1.5", "22.1"]
    return "\n".join([",".join(WELL_CSV_HEADERS), ",".join(sample)])


def make_forecast_template_csv(
    base: float = 25000.0,
    monthly_decline: float = 0.05,
    start: Optional[date] = None,
    months: int = 12
) -> str:
    """
    Return a downloadable forecast template in the simple Month/Production layout.

    Args:
        base: Production of the first month (BOE/d).
        monthly_decline: Fractional decline applied month over month.
        start: First month; defaults to the current month.
        months: Number of rows.

    Returns:
        CSV text with `Mon-YY` month labels and declining production values.
    """
    start = start or date.today().replace(day=1)
    month_starts = pd.date_range(start=pd.Timestamp(start).replace(day=1), periods=months, freq='MS')

    lines = ["Month,Production (BOE/d)"]
    q = base
    for month_start in month_starts:
        lines.append(f"{month_start.strftime('%b-%y')},{int(round(q))}")
        q = q * (1 - monthly_decline)
    return "\n".join(lines)


def field_slug(field_name: str) -> str:
    """Filter key for a field name, e.g. "Adar Yale" -> "adar-yale"."""
    return re.sub(r'\s', '-', str(field_name).lower())


def status_counts(wells: pd.DataFrame) -> Dict[str, int]:
    """Count wells per canonical status, including zero counts."""
    counts = wells['STATUS'].value_counts().to_dict() if len(wells) > 0 else {}
    return {status: int(counts.get(status, 0)) for status in STATUSES + [UNKNOWN_STATUS]}


def field_production(wells: pd.DataFrame) -> pd.DataFrame:
    """
    Sum producing-well production per field.

    Fields appear in first-seen order; fields without producing wells show 0.
    """
    if len(wells) == 0:
        return pd.DataFrame(columns=['FIELD', 'PRODUCTION'])

    producing = wells['PRODUCTION'].where(wells['STATUS'] == "Producing", 0)
    totals = producing.groupby(wells['FIELD'], sort=False).sum()
    return totals.reset_index()


def top_producing_wells(wells: pd.DataFrame, n: int = 5) -> pd.DataFrame:
    """Return the n producing wells with the highest production."""
    producing = wells[wells['STATUS'] == "Producing"]
    return producing.sort_values('PRODUCTION', ascending=False, kind='stable').head(n)
