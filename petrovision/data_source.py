"""
Live data sources applied on each dashboard refresh tick.

The random walk stands in for a telemetry feed; swapping the source does not
touch the analytics module.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Produces the next snapshot of the well table."""

    @abstractmethod
    def next_snapshot(self, wells: pd.DataFrame) -> pd.DataFrame:
        """Return the well table for the next tick."""
        raise NotImplementedError


class StaticSource(DataSource):
    """Returns the well table unchanged."""

    def next_snapshot(self, wells: pd.DataFrame) -> pd.DataFrame:
        return wells


class RandomWalkSource(DataSource):
    """
    Perturbs producing wells in place.

    Production moves by a uniform step in [-production_step, +production_step],
    rounded and floored at 0. The % change is redrawn in
    [-change_range, +change_range] to one decimal.
    """

    def __init__(self,
                 rng: Optional[np.random.Generator] = None,
                 production_step: float = 10.0,
                 change_range: float = 2.0):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.production_step = production_step
        self.change_range = change_range

    def next_snapshot(self, wells: pd.DataFrame) -> pd.DataFrame:
        mask = wells['STATUS'] == "Producing"
        n = int(mask.sum())

        if n == 0:
            return wells

        delta = self.rng.uniform(-self.production_step, self.production_step, size=n)
        production = wells.loc[mask, 'PRODUCTION'].to_numpy(dtype=float) + delta
        wells.loc[mask, 'PRODUCTION'] = np.maximum(0, np.floor(production + 0.5)).astype('int64')

        change = self.rng.uniform(-self.change_range, self.change_range, size=n)
        wells.loc[mask, 'CHANGE_PCT'] = np.round(change, 1)

        logger.debug("Random walk applied to %d producing wells", n)
        return wells
