"""
Pytest configuration and shared fixtures for the wells dashboard tests.
"""

import pytest
import numpy as np

from petrovision.well_records import wells_frame


def make_well(well_id, **overrides):
    """Build one well record with sensible producing defaults."""
    record = {
        'WELL_ID': well_id,
        'WELL_NAME': f"Test #{well_id}",
        'FIELD': "Paloch",
        'STATUS': "Producing",
        'PRODUCTION': 1000,
        'CHANGE_PCT': 0.0,
        'WATER_CUT': 20.0,
    }
    record.update(overrides)
    return record


@pytest.fixture
def rng():
    """Seeded random generator for reproducible sample data."""
    return np.random.default_rng(42)


@pytest.fixture
def mixed_wells():
    """Small well table covering every status and two fields."""
    return wells_frame([
        make_well(1, WELL_NAME="Paloch #101-201", PRODUCTION=1200, CHANGE_PCT=1.5, WATER_CUT=22.1),
        make_well(2, WELL_NAME="Paloch #102-202", PRODUCTION=800, CHANGE_PCT=-1.8, WATER_CUT=30.0),
        make_well(3, WELL_NAME="Paloch #103-203", STATUS="Shut-in", PRODUCTION=0, WATER_CUT=0.0),
        make_well(4, WELL_NAME="Adar #201-301", FIELD="Adar Yale", PRODUCTION=600, WATER_CUT=40.5),
        make_well(5, WELL_NAME="Adar #202-302", FIELD="Adar Yale", STATUS="Drilling",
                  PRODUCTION=150, WATER_CUT=12.5),
    ])


@pytest.fixture
def well_csv_text():
    return (
        "Well Name,Field,Status,Production (BOE/d),% Change,Water Cut (%)\n"
        "Paloch #112-407,Paloch,Producing,1680,2.3,24.5\n"
        "Adar #204-331,Adar Yale,Shut-in,0,0,0\n"
        "Heglig #503-127,Heglig,Producing,760,-3.3,48.2\n"
    )
