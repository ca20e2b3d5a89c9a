"""
Analytics module for well-level KPIs, anomaly flags and decline forecasts.

All functions are pure: they read the canonical well table and never modify
it. KPI averages over an empty producing subset are 0, never NaN.
"""

import math
import logging
from typing import Any, Dict, List

import pandas as pd

from petrovision.config import (ANOMALY_CHANGE_PCT, HIGH_WATER_CUT_PCT,
                                FORECAST_MONTHS, MONTHLY_DECLINE)
from petrovision.well_records import WELL_COLUMNS, format_number

logger = logging.getLogger(__name__)

ANOMALY_COLUMNS = WELL_COLUMNS + ['FLAGS']


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def producing_wells(wells: pd.DataFrame) -> pd.DataFrame:
    return wells[wells['STATUS'] == "Producing"]


def compute_kpis(wells: pd.DataFrame) -> Dict[str, Any]:
    """
    Compute the headline KPIs for the dashboard.

    Production totals and averages only count wells with status "Producing".

    Args:
        wells: Canonical well table.

    Returns:
        Dictionary with total_wells, total_production, avg_production and
        avg_water_cut. Averages are 0 when there are no producing wells.
    """
    producing = producing_wells(wells)
    n_producing = len(producing)

    total_production = int(producing['PRODUCTION'].sum()) if n_producing > 0 else 0
    avg_production = total_production / n_producing if n_producing > 0 else 0
    avg_water_cut = float(producing['WATER_CUT'].fillna(0).mean()) if n_producing > 0 else 0

    return {
        'total_wells': len(wells),
        'total_production': total_production,
        'avg_production': avg_production,
        'avg_water_cut': avg_water_cut,
        'producing_wells': n_producing,
    }


def detect_anomalies(
    wells: pd.DataFrame,
    change_threshold: float = ANOMALY_CHANGE_PCT,
    high_water_cut: float = HIGH_WATER_CUT_PCT
) -> List[Dict[str, Any]]:
    """
    Flag wells with large production changes, high water cut, or zero output
    while marked as producing.

    Args:
        wells: Canonical well table.
        change_threshold: Absolute % change at or above which a well is flagged.
        high_water_cut: Water cut % at or above which a well is flagged.

    Returns:
        List of anomaly dictionaries: the well's fields plus a non-empty FLAGS
        list. Wells that trigger no rule are not included.
    """
    anomalies = []

    for record in wells.to_dict('records'):
        flags = []

        change = record['CHANGE_PCT']
        if pd.notna(change) and abs(change) >= change_threshold:
            flags.append(f"Large change: {format_number(change)}%")

        water_cut = record['WATER_CUT']
        if pd.notna(water_cut) and water_cut >= high_water_cut:
            flags.append(f"High water cut: {format_number(water_cut)}%")

        if record['PRODUCTION'] == 0 and record['STATUS'] == "Producing":
            flags.append("Zero production while Producing")

        if flags:
            anomalies.append({**record, 'FLAGS': flags})

    if anomalies:
        logger.debug("Flagged %d of %d wells as anomalous", len(anomalies), len(wells))

    return anomalies


def anomalies_frame(
    wells: pd.DataFrame,
    change_threshold: float = ANOMALY_CHANGE_PCT,
    high_water_cut: float = HIGH_WATER_CUT_PCT
) -> pd.DataFrame:
    """Same as detect_anomalies() but as a DataFrame with a FLAGS column."""
    anomalies = detect_anomalies(wells, change_threshold, high_water_cut)

    if not anomalies:
        return pd.DataFrame(columns=ANOMALY_COLUMNS)

    return pd.DataFrame(anomalies, columns=ANOMALY_COLUMNS)


def decline_series(base: float, monthly_decline: float = MONTHLY_DECLINE,
                   months: int = FORECAST_MONTHS) -> List[int]:
    """
    Project a rate forward with a fixed monthly exponential decline.

    Each month is computed from the previous month's rounded value, so
    rounding error compounds: base 1000 at 7% gives 930, 865, 804.

    Args:
        base: Current rate.
        monthly_decline: Fractional decline per month.
        months: Number of months to project.

    Returns:
        List of non-negative integer rates, one per month.
    """
    series = []
    q = base
    for _ in range(months):
        q = max(0, round_half_up(q * (1 - monthly_decline)))
        series.append(q)
    return series


def forecast_decline(
    wells: pd.DataFrame,
    monthly_decline: float = MONTHLY_DECLINE,
    months: int = FORECAST_MONTHS
) -> Dict[str, List[int]]:
    """
    Forecast field production from the current producing total of each field.

    This is a fixed-rate exponential approximation, not a fitted Arps model;
    only the current snapshot is used.

    Args:
        wells: Canonical well table.
        monthly_decline: Fractional decline per month.
        months: Forecast horizon in months.

    Returns:
        Mapping of field name to its forecast series. Fields without producing
        wells are absent.
    """
    producing = producing_wells(wells)

    if len(producing) == 0:
        return {}

    field_totals = producing.groupby('FIELD', sort=False)['PRODUCTION'].sum()

    return {
        field: decline_series(float(base), monthly_decline, months)
        for field, base in field_totals.items()
    }


def forecast_month_labels(months: int = FORECAST_MONTHS) -> List[str]:
    """Axis labels for a decline forecast: M1, M2, ..."""
    return [f"M{i}" for i in range(1, months + 1)]


def field_water_cut(wells: pd.DataFrame) -> pd.DataFrame:
    """
    Average water cut of producing wells per field.

    Returns:
        DataFrame with FIELD and AVG_WATER_CUT, sorted by field name.
    """
    producing = producing_wells(wells)

    if len(producing) == 0:
        return pd.DataFrame(columns=['FIELD', 'AVG_WATER_CUT'])

    summary = producing.groupby('FIELD')['WATER_CUT'].mean().reset_index()
    summary.columns = ['FIELD', 'AVG_WATER_CUT']
    return summary
