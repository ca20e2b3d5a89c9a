"""
Forecast upload interpreter.

Reads forecast/production CSV uploads in one of three layouts and converts
them to a single ForecastUploadData shape:

- production: wide month columns plus ``Category`` and ``Field`` columns;
  only "Oil Production" rows count.
- regional: wide month columns, first column is the field name.
- simple: one row per month, with a month/date column and a
  production/BOE column located by fuzzy header match.

Layout detection looks for month columns (``Mon-YY``) first, then for the
Category/Field pair, and only falls back to the simple layout when no month
columns exist. A file can look like more than one layout; this order decides.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from petrovision.csv_parser import parse_csv, get_headers

logger = logging.getLogger(__name__)

PRODUCTION_FORMAT = "production"
REGIONAL_FORMAT = "regional"
SIMPLE_FORMAT = "simple"

MONTH_COLUMN_PATTERN = re.compile(r'^[A-Za-z]{3}-\d{2}$')
MONTH_KEYWORDS = ["month", "date"]
PRODUCTION_KEYWORDS = ["production", "boe"]
OIL_PRODUCTION_CATEGORY = "Oil Production"
_MISSING_VALUES = ('', '-')


@dataclass
class ForecastUploadData:
    """Canonical forecast upload: month labels, monthly totals, per-field values."""

    months: List[str]
    total: List[float]
    fields: Dict[str, Dict[str, float]] = field(default_factory=dict)


@dataclass
class ForecastSchema:
    """Result of header sniffing: the matched layout and its column mapping."""

    format: Optional[str]
    month_columns: List[str] = field(default_factory=list)
    category_column: Optional[str] = None
    field_column: Optional[str] = None
    month_column: Optional[str] = None
    production_column: Optional[str] = None
    reason: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.format is not None


def is_month_column(header: str) -> bool:
    return bool(MONTH_COLUMN_PATTERN.match(header.strip()))


def _find_header(headers: List[str], keywords: List[str], exclude: Optional[str] = None) -> Optional[str]:
    for header in headers:
        if header == exclude:
            continue
        lowered = header.lower()
        if any(keyword in lowered for keyword in keywords):
            return header
    return None


def sniff_forecast_schema(headers: List[str]) -> ForecastSchema:
    """
    Decide which forecast layout a header row belongs to.

    Args:
        headers: Trimmed header names in file order.

    Returns:
        ForecastSchema with the matched format and column names, or with
        format None and a reason when no layout fits.
    """
    if not headers:
        return ForecastSchema(format=None, reason="File has no header row")

    month_columns = [h for h in headers if is_month_column(h)]

    if month_columns:
        if "Category" in headers and "Field" in headers:
            return ForecastSchema(
                format=PRODUCTION_FORMAT,
                month_columns=month_columns,
                category_column="Category",
                field_column="Field"
            )

        if is_month_column(headers[0]):
            return ForecastSchema(
                format=None,
                month_columns=month_columns,
                reason="Month columns found but the first column is not a field name"
            )

        return ForecastSchema(
            format=REGIONAL_FORMAT,
            month_columns=month_columns,
            field_column=headers[0]
        )

    # one column per role; a header matching only the month role is preferred
    month_only = [h for h in headers if _find_header([h], PRODUCTION_KEYWORDS) is None]
    month_column = _find_header(month_only, MONTH_KEYWORDS) or _find_header(headers, MONTH_KEYWORDS)
    production_column = _find_header(headers, PRODUCTION_KEYWORDS, exclude=month_column)

    if month_column is None or production_column is None:
        missing = []
        if month_column is None:
            missing.append("month/date")
        if production_column is None:
            missing.append("production/BOE")
        return ForecastSchema(
            format=None,
            reason=f"No Mon-YY columns and no {' or '.join(missing)} column found"
        )

    return ForecastSchema(
        format=SIMPLE_FORMAT,
        month_column=month_column,
        production_column=production_column
    )


def parse_number(raw: Optional[str]) -> float:
    """Strip everything but digits, sign and decimal point, then parse; 0.0 on failure."""
    cleaned = re.sub(r'[^0-9.\-]', '', raw or '')
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _cell_value(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() in _MISSING_VALUES:
        return None
    return parse_number(raw)


def _is_total_row(name: str) -> bool:
    return name.strip().lower() == "total"


def _accumulate_wide_rows(rows: List[Dict[str, str]], schema: ForecastSchema) -> Optional[ForecastUploadData]:
    months = schema.month_columns
    totals = {month: 0.0 for month in months}
    fields: Dict[str, Dict[str, float]] = {}

    for row in rows:
        if schema.format == PRODUCTION_FORMAT and row.get(schema.category_column) != OIL_PRODUCTION_CATEGORY:
            continue

        name = (row.get(schema.field_column) or '').strip()
        if name in _MISSING_VALUES or _is_total_row(name):
            continue

        values = {month: _cell_value(row.get(month)) for month in months}
        if all(value is None for value in values.values()):
            continue

        field_values = fields.setdefault(name, {month: 0.0 for month in months})
        for month, value in values.items():
            value = value or 0.0
            field_values[month] += value
            totals[month] += value

    if not fields:
        return None

    return ForecastUploadData(
        months=list(months),
        total=[totals[month] for month in months],
        fields=fields
    )


def _collect_simple_rows(rows: List[Dict[str, str]], schema: ForecastSchema) -> Optional[ForecastUploadData]:
    months = []
    total = []

    for row in rows:
        month = (row.get(schema.month_column) or '').strip()
        if not month:
            continue
        months.append(month)
        total.append(parse_number(row.get(schema.production_column)))

    if not months:
        return None

    return ForecastUploadData(months=months, total=total, fields={})


def parse_forecast_csv(text: str, strict: bool = True) -> Optional[ForecastUploadData]:
    """
    Interpret a forecast upload in any of the supported layouts.

    Args:
        text: Raw CSV text.
        strict: Drop rows whose field count does not match the header row.

    Returns:
        ForecastUploadData, or None when the layout is not recognised or no
        usable rows remain. Never raises for malformed input.
    """
    schema = sniff_forecast_schema(get_headers(text))

    if not schema.matched:
        logger.warning("Forecast upload not recognised: %s", schema.reason)
        return None

    rows = parse_csv(text, strict=strict)

    if schema.format == SIMPLE_FORMAT:
        result = _collect_simple_rows(rows, schema)
    else:
        result = _accumulate_wide_rows(rows, schema)

    if result is None:
        logger.warning("Forecast upload (%s layout) contained no usable rows", schema.format)
    else:
        logger.info("Parsed %s forecast upload: %d months, %d fields",
                    schema.format, len(result.months), len(result.fields))

    return result
