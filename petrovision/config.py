"""
Configuration module for the PetroVision wells dashboard.

Holds the field catalogue, analytics thresholds and fallback values used
across the dashboard, plus a small environment-driven runtime config.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent.parent
DATA_PATH = str(APP_DIR / "data" / "south_sudan_wells.csv")
PRICE_DATA_PATH = str(APP_DIR / "data" / "prices.csv")

STATUSES = ["Producing", "Shut-in", "Abandoned", "Drilling"]
UNKNOWN_STATUS = "Unknown"
STATUS_DISTRIBUTION = [0.7, 0.18, 0.07, 0.05]

# South Sudan production is predominantly oil with small gas/NGL associated
PRODUCTION_TYPE_SHARE = {"oil": 0.9, "gas": 0.08, "ngl": 0.02}

FIELDS: List[Dict] = [
    {"name": "Paloch", "production_factor": 1.5, "well_count": 24},
    {"name": "Adar Yale", "production_factor": 1.2, "well_count": 16},
    {"name": "Melut Basin", "production_factor": 1.3, "well_count": 18},
    {"name": "Muglad Basin", "production_factor": 1.1, "well_count": 14},
    {"name": "Heglig", "production_factor": 1.0, "well_count": 12},
    {"name": "Unity", "production_factor": 0.95, "well_count": 10},
    {"name": "Thar Jath", "production_factor": 1.0, "well_count": 8},
    {"name": "Bentiu", "production_factor": 0.9, "well_count": 6},
    {"name": "Rubkona", "production_factor": 0.9, "well_count": 6},
    {"name": "Toma South", "production_factor": 1.1, "well_count": 8},
]

ANOMALY_CHANGE_PCT = 15.0
HIGH_WATER_CUT_PCT = 50.0
FORECAST_MONTHS = 12
MONTHLY_DECLINE = 0.07

REFRESH_INTERVAL_MS = 60000
ROWS_PER_PAGE = 10

EIA_SERIES = {
    "BRENT": "PET.RBRTE.D",
    "WTI": "PET.RWTC.D",
}
EIA_BASE_URL = "https://api.eia.gov/series/"
COUNTRY_FACTS_URL = "https://restcountries.com/v3.1/name/south%20sudan"

FALLBACK_BENCHMARKS = {
    "brent": {"price": 86.2, "unit": "USD/bbl", "source": "fallback"},
    "wti": {"price": 82.7, "unit": "USD/bbl", "source": "fallback"},
    "dubai": {"price": 83.9, "unit": "USD/bbl", "source": "fallback"},
}

FALLBACK_COUNTRY_FACTS = {
    "capital": "Juba",
    "population": 11000000,
    "region": "Africa",
    "subregion": "Eastern Africa",
    "languages": "English, Arabic, indigenous languages",
    "flag": "",
}


class DashboardConfig(BaseSettings):
    """
    Runtime settings.

    Values come from PETROVISION_* environment variables, e.g.
    PETROVISION_REFRESH_INTERVAL_MS=0 disables live refresh.
    """

    model_config = SettingsConfigDict(env_prefix="PETROVISION_", frozen=True)

    data_path: str = DATA_PATH
    price_data_path: str = PRICE_DATA_PATH
    eia_api_key: Optional[str] = None
    refresh_interval_ms: int = REFRESH_INTERVAL_MS
    rows_per_page: int = ROWS_PER_PAGE
    log_level: str = "INFO"

    @field_validator('refresh_interval_ms', 'rows_per_page', mode='before')
    @classmethod
    def _int_or_default(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-integer %s=%r, using %s", info.field_name, value, default)
            return default
        return max(0 if info.field_name == 'refresh_interval_ms' else 1, number)

    @field_validator('eia_api_key', mode='before')
    @classmethod
    def _blank_key_is_none(cls, value: Any) -> Optional[str]:
        return value or None

    @field_validator('log_level', mode='before')
    @classmethod
    def _upper_log_level(cls, value: Any) -> str:
        return str(value or "INFO").upper()

    @property
    def refresh_enabled(self) -> bool:
        return bool(self.refresh_interval_ms)


def load_config() -> DashboardConfig:
    """
    Build the dashboard configuration from PETROVISION_* environment variables.

    Returns:
        DashboardConfig with environment overrides applied on top of the defaults.
    """
    return DashboardConfig()
