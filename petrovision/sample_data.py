"""
Synthetic well data generator.

Used whenever no well-data CSV can be loaded. Output is random by default;
pass a seeded numpy Generator for reproducible data.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from petrovision.config import FIELDS, STATUSES, STATUS_DISTRIBUTION
from petrovision.well_records import wells_frame

logger = logging.getLogger(__name__)


def weighted_random_index(weights: Sequence[float], rng: np.random.Generator) -> int:
    """Draw an index with probability proportional to its weight."""
    w = np.asarray(weights, dtype=float)
    return int(rng.choice(len(w), p=w / w.sum()))


def make_well_name(field_name: str, rng: np.random.Generator) -> str:
    """Synthesise a well name such as "Adar #412-877"."""
    prefix = field_name.split(" ")[0]
    return f"{prefix} #{rng.integers(100, 1000)}-{rng.integers(100, 1000)}"


def generate_sample_wells(
    fields: Optional[List[Dict]] = None,
    status_weights: Sequence[float] = STATUS_DISTRIBUTION,
    rng: Optional[np.random.Generator] = None
) -> pd.DataFrame:
    """
    Generate a synthetic well table from the field catalogue.

    Producing wells get 500-1500 BOE/d scaled by the field factor, a +/-5%
    change and 10-35% water cut. Drilling wells get 0-200 BOE/d scaled by the
    field factor and 5-20% water cut. Shut-in and abandoned wells are all zero.

    Args:
        fields: Field catalogue entries with name, production_factor and
            well_count. Defaults to the built-in South Sudan fields.
        status_weights: Relative weights for Producing, Shut-in, Abandoned, Drilling.
        rng: Random generator; an unseeded one is created when omitted.

    Returns:
        Canonical well table with sequential WELL_IDs.
    """
    fields = FIELDS if fields is None else fields
    rng = rng if rng is not None else np.random.default_rng()

    records = []
    well_id = 1

    for field in fields:
        factor = field['production_factor']

        for _ in range(field['well_count']):
            status = STATUSES[weighted_random_index(status_weights, rng)]

            production = 0
            change = 0.0
            water_cut = 0.0

            if status == "Producing":
                production = int(round(rng.uniform(500, 1500) * factor))
                change = round(rng.uniform(-5, 5), 1)
                water_cut = round(rng.uniform(10, 35), 1)
            elif status == "Drilling":
                production = int(round(rng.uniform(0, 200) * factor))
                water_cut = round(rng.uniform(5, 20), 1)

            records.append({
                'WELL_ID': well_id,
                'WELL_NAME': make_well_name(field['name'], rng),
                'FIELD': field['name'],
                'STATUS': status,
                'PRODUCTION': production,
                'CHANGE_PCT': change,
                'WATER_CUT': water_cut,
            })
            well_id += 1

    logger.info("Generated %d synthetic well records", len(records))
    return wells_frame(records)
