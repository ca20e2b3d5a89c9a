"""
Regional price data module for the management page.

Price uploads are matched on header substrings (case-insensitive) so that
variants like "Town Name" or "Price (USD/bbl)" are accepted.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from petrovision.csv_parser import parse_csv, get_headers
from petrovision.exceptions import InvalidCSVError, MissingHeadersError

logger = logging.getLogger(__name__)

REQUIRED_PRICE_KEYS = ["TOWN", "STATE", "DATE", "PRICE"]
OPTIONAL_PRICE_KEYS = ["INDEX"]
PRICE_COLUMNS = REQUIRED_PRICE_KEYS + OPTIONAL_PRICE_KEYS

_PLACEHOLDER_TOWNS = {'', 'null', 'undefined', 'nan'}


def match_price_headers(headers: List[str]) -> Dict[str, Optional[str]]:
    """
    Map each canonical price key to the first header that contains it.

    An exact (case-insensitive) match wins over a substring match.

    Returns:
        Dictionary of canonical key -> source header, None when absent.
    """
    mapping = {}
    for key in PRICE_COLUMNS:
        exact = [h for h in headers if h.upper() == key]
        partial = [h for h in headers if key in h.upper()]
        candidates = exact or partial
        mapping[key] = candidates[0] if candidates else None
    return mapping


def parse_price_csv(text: str) -> pd.DataFrame:
    """
    Parse a price data upload.

    Args:
        text: Raw CSV text with TOWN, STATE, DATE and PRICE-like headers.

    Returns:
        DataFrame with TOWN, STATE, DATE, PRICE and INDEX columns. Unparsable
        prices are NaN; INDEX is None when the file has no index column.

    Raises:
        InvalidCSVError: If the file has no data rows.
        MissingHeadersError: If any required header cannot be matched.
    """
    rows = parse_csv(text, strict=True)
    headers = get_headers(text)

    if not headers or len([line for line in text.split('\n') if line.strip()]) < 2:
        raise InvalidCSVError("price data")

    mapping = match_price_headers(headers)
    missing = [key for key in REQUIRED_PRICE_KEYS if mapping[key] is None]
    if missing:
        raise MissingHeadersError("price data", missing)

    records = []
    for row in rows:
        records.append({
            key: (row.get(source) if source is not None else None)
            for key, source in mapping.items()
        })

    df = pd.DataFrame(records, columns=PRICE_COLUMNS)
    df['PRICE'] = pd.to_numeric(df['PRICE'], errors='coerce')

    logger.info("Loaded %d price records", len(df))
    return df


def _date_sort_key(label: str) -> pd.Timestamp:
    for candidate in (label, str(label).replace('/', '-')):
        try:
            ts = pd.Timestamp(candidate)
        except (ValueError, TypeError):
            continue
        if not pd.isna(ts):
            return ts
    return pd.Timestamp.min


def price_series_by_town(prices: pd.DataFrame, max_towns: int = 5) -> Dict[str, Any]:
    """
    Build per-town price series over a shared, chronologically sorted date axis.

    Args:
        prices: Output of parse_price_csv().
        max_towns: Number of towns to include, in first-seen order.

    Returns:
        Dictionary with 'dates' (sorted labels) and 'series' (town -> list of
        prices aligned to dates, None where the town has no price).
    """
    if len(prices) == 0:
        return {'dates': [], 'series': {}}

    towns = [
        town for town in prices['TOWN'].dropna().unique()
        if str(town).strip().lower() not in _PLACEHOLDER_TOWNS
    ][:max_towns]

    dates = sorted(prices['DATE'].dropna().unique(), key=_date_sort_key)

    series = {}
    for town in towns:
        town_prices = prices[prices['TOWN'] == town].drop_duplicates('DATE', keep='first')
        lookup = dict(zip(town_prices['DATE'], town_prices['PRICE']))
        series[town] = [
            None if pd.isna(lookup.get(date, float('nan'))) else float(lookup[date])
            for date in dates
        ]

    return {'dates': list(dates), 'series': series}


def town_price_averages(prices: pd.DataFrame, top: int = 8) -> pd.DataFrame:
    """
    Average price per town, highest first.

    Returns:
        DataFrame with TOWN, STATE and AVG_PRICE for the top towns.
    """
    if len(prices) == 0:
        return pd.DataFrame(columns=['TOWN', 'STATE', 'AVG_PRICE'])

    summary = prices.groupby('TOWN', sort=False).agg(
        STATE=('STATE', 'first'),
        AVG_PRICE=('PRICE', 'mean')
    ).reset_index()

    summary = summary.sort_values('AVG_PRICE', ascending=False, kind='stable')
    return summary.head(top).reset_index(drop=True)
