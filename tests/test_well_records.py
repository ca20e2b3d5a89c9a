"""
Unit tests for well record normalisation, export and templates.
"""

from datetime import date

import pandas as pd

from petrovision.well_records import (
    WELL_COLUMNS, parse_int_or_zero, parse_float_or_zero, normalize_status,
    load_well_csv, export_wells_csv, make_well_template_csv,
    make_forecast_template_csv, field_slug, status_counts, field_production,
    top_producing_wells, empty_wells_frame, format_number)
from petrovision.forecast_upload import parse_forecast_csv, SIMPLE_FORMAT, sniff_forecast_schema
from petrovision.csv_parser import get_headers


def test_load_well_csv(well_csv_text):
    wells = load_well_csv(well_csv_text)

    assert list(wells.columns) == WELL_COLUMNS
    assert len(wells) == 3
    assert wells['WELL_ID'].tolist() == [1, 2, 3]
    assert wells.iloc[0]['WELL_NAME'] == "Paloch #112-407"
    assert wells.iloc[2]['CHANGE_PCT'] == -3.3
    assert wells.iloc[1]['STATUS'] == "Shut-in"


def test_missing_values_get_defaults():
    """Blank cells fall back to the documented defaults instead of failing."""
    text = (
        "Well Name,Field,Status,Production (BOE/d),% Change,Water Cut (%)\n"
        ",,,abc,x,\n"
        "Only Name\n"
    )
    wells = load_well_csv(text)

    first = wells.iloc[0]
    assert first['WELL_NAME'] == "Well #1"
    assert first['FIELD'] == "Unknown"
    assert first['STATUS'] == "Unknown"
    assert first['PRODUCTION'] == 0
    assert first['CHANGE_PCT'] == 0.0
    assert first['WATER_CUT'] == 0.0

    second = wells.iloc[1]
    assert second['WELL_NAME'] == "Only Name"
    assert second['WELL_ID'] == 2


def test_water_cut_is_not_clamped():
    text = "Well Name,Field,Status,Production (BOE/d),% Change,Water Cut (%)\nW,F,Producing,10,0,135\n"

    assert load_well_csv(text).iloc[0]['WATER_CUT'] == 135.0


def test_parse_int_or_zero():
    assert parse_int_or_zero("1250") == 1250
    assert parse_int_or_zero("1250.7 bbl") == 1250
    assert parse_int_or_zero("-5") == -5
    assert parse_int_or_zero("abc") == 0
    assert parse_int_or_zero("") == 0
    assert parse_int_or_zero(None) == 0


def test_parse_float_or_zero():
    assert parse_float_or_zero("22.5%") == 22.5
    assert parse_float_or_zero("-1.8") == -1.8
    assert parse_float_or_zero(".5") == 0.5
    assert parse_float_or_zero("n/a") == 0.0
    assert parse_float_or_zero(None) == 0.0


def test_normalize_status():
    assert normalize_status("Producing") == "Producing"
    assert normalize_status("producing") == "Producing"
    assert normalize_status("shut in") == "Shut-in"
    assert normalize_status("SHUT-IN") == "Shut-in"
    assert normalize_status("shut_in") == "Shut-in"
    assert normalize_status("Flowing") == "Unknown"
    assert normalize_status("") == "Unknown"
    assert normalize_status(None) == "Unknown"


def test_export_round_trip(mixed_wells):
    """Exporting and re-loading keeps every well attribute except the id."""
    reloaded = load_well_csv(export_wells_csv(mixed_wells))

    columns = ['WELL_NAME', 'FIELD', 'STATUS', 'PRODUCTION', 'CHANGE_PCT', 'WATER_CUT']
    pd.testing.assert_frame_equal(reloaded[columns], mixed_wells[columns])


def test_export_header_and_number_format(mixed_wells):
    lines = export_wells_csv(mixed_wells).split("\n")

    assert lines[0] == "Well Name,Field,Status,Production (BOE/d),% Change,Water Cut (%)"
    assert lines[1] == "Paloch #101-201,Paloch,Producing,1200,1.5,22.1"
    assert lines[3] == "Paloch #103-203,Paloch,Shut-in,0,0,0"


def test_format_number():
    assert format_number(22.0) == "22"
    assert format_number(1.5) == "1.5"
    assert format_number(-15) == "-15"


def test_well_template_loads():
    wells = load_well_csv(make_well_template_csv())

    assert len(wells) == 1
    assert wells.iloc[0]['FIELD'] == "Eagle Ford"
    assert wells.iloc[0]['PRODUCTION'] == 1250


def test_forecast_template():
    """The forecast template is declining and readable by the forecast interpreter."""
    text = make_forecast_template_csv(base=1000, monthly_decline=0.1, start=date(2024, 1, 1), months=3)

    assert text.split("\n") == ["Month,Production (BOE/d)", "Jan-24,1000", "Feb-24,900", "Mar-24,810"]
    assert sniff_forecast_schema(get_headers(text)).format == SIMPLE_FORMAT

    data = parse_forecast_csv(text)
    assert data.months == ["Jan-24", "Feb-24", "Mar-24"]
    assert data.total == [1000.0, 900.0, 810.0]


def test_forecast_template_default_length():
    assert len(make_forecast_template_csv().split("\n")) == 13


def test_field_slug():
    assert field_slug("Adar Yale") == "adar-yale"
    assert field_slug("Paloch") == "paloch"


def test_status_counts(mixed_wells):
    counts = status_counts(mixed_wells)

    assert counts == {'Producing': 3, 'Shut-in': 1, 'Abandoned': 0, 'Drilling': 1, 'Unknown': 0}
    assert sum(status_counts(empty_wells_frame()).values()) == 0


def test_field_production_counts_producing_only(mixed_wells):
    summary = field_production(mixed_wells)

    assert summary['FIELD'].tolist() == ["Paloch", "Adar Yale"]
    assert summary['PRODUCTION'].tolist() == [2000, 600]


def test_top_producing_wells(mixed_wells):
    top = top_producing_wells(mixed_wells, n=2)

    assert top['WELL_ID'].tolist() == [1, 2]
    assert (top['STATUS'] == "Producing").all()
