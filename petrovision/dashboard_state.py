"""
Dashboard orchestration: the in-memory well table and the page/filter state
around it.

DashboardState owns all domain data for a session. Views receive read-only
results through the DashboardView capability methods and only call back into
DashboardState to trigger reloads, uploads or navigation.
"""

import math
import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from petrovision.config import DashboardConfig, load_config
from petrovision.csv_parser import TextSource, read_text
from petrovision.exceptions import DashboardError
from petrovision.well_records import (empty_wells_frame, load_well_csv, export_wells_csv,
                                      field_slug, status_counts, field_production,
                                      top_producing_wells)
from petrovision.sample_data import generate_sample_wells
from petrovision.analytics import (compute_kpis, detect_anomalies, forecast_decline,
                                   forecast_month_labels, field_water_cut)
from petrovision.forecast_upload import ForecastUploadData, parse_forecast_csv
from petrovision.price_data import parse_price_csv
from petrovision.well_logs import parse_well_logs_csv
from petrovision.data_source import DataSource, RandomWalkSource

logger = logging.getLogger(__name__)

ALL_FIELDS = "all"
FORECAST_TARGETS = ("dashboard", "management")
ROWS_PER_PAGE_CHOICES = (10, 25, 50, 100)


class DashboardView:
    """
    Display capabilities the dashboard pushes results into.

    Every method is a no-op here; a concrete view overrides the ones it can
    render. DashboardState calls all of them unconditionally.
    """

    def update_kpis(self, kpis: Dict[str, Any]) -> None:
        pass

    def update_top_wells(self, wells: pd.DataFrame) -> None:
        pass

    def update_charts(self, charts: Dict[str, Any]) -> None:
        pass

    def update_table(self, rows: pd.DataFrame, page: int, total_pages: int, total_rows: int) -> None:
        pass

    def show_anomalies(self, anomalies: List[Dict[str, Any]]) -> None:
        pass

    def update_forecast_upload(self, target: str, data: ForecastUploadData) -> None:
        pass

    def update_prices(self, prices: pd.DataFrame) -> None:
        pass

    def update_well_logs(self, logs: pd.DataFrame) -> None:
        pass

    def notify(self, level: str, message: str) -> None:
        pass


class DashboardState:
    """
    Owns the well table, filters, pagination and uploaded datasets.

    Loads are latest-wins: every load takes a generation token from
    begin_load() and commit_load() discards results from superseded loads.
    """

    def __init__(self,
                 config: Optional[DashboardConfig] = None,
                 view: Optional[DashboardView] = None,
                 data_source: Optional[DataSource] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or load_config()
        self.view = view or DashboardView()
        self.rng = rng
        self.data_source = data_source or RandomWalkSource(rng=rng)

        self.wells = empty_wells_frame()
        self.field_filter = ALL_FIELDS
        self.current_page = 1
        self.rows_per_page = self.config.rows_per_page
        self.refresh_interval_ms = self.config.refresh_interval_ms

        self.forecast_upload: Optional[ForecastUploadData] = None
        self.price_data: Optional[pd.DataFrame] = None
        self.well_logs: Optional[pd.DataFrame] = None
        self.status_message: Optional[Dict[str, str]] = None

        self._generation = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    def begin_load(self) -> int:
        """Start a load and return its generation token."""
        self._generation += 1
        return self._generation

    def commit_load(self, token: int, wells: pd.DataFrame) -> bool:
        """
        Replace the well table if the token belongs to the latest load.

        Returns:
            True if applied, False if a newer load superseded this one.
        """
        if token != self._generation:
            logger.info("Discarding stale load %d (current generation %d)", token, self._generation)
            return False

        self.wells = wells
        self.current_page = 1
        self.refresh()
        return True

    def load_initial(self, path: Optional[str] = None) -> pd.DataFrame:
        """
        Load the bundled well CSV, falling back to synthetic data.

        Any read failure or an empty file silently switches to generated
        sample wells, so the dashboard always has data to show.
        """
        path = path or self.config.data_path
        token = self.begin_load()

        wells = None
        try:
            with open(path, encoding='utf-8-sig') as f:
                wells = load_well_csv(f.read())
        except (OSError, ValueError) as e:
            logger.info("Bundled well data unavailable (%s), generating sample data", e)

        if wells is None or len(wells) == 0:
            wells = generate_sample_wells(rng=self.rng)

        self.commit_load(token, wells)
        return self.wells

    def load_initial_prices(self, path: Optional[str] = None) -> Optional[pd.DataFrame]:
        """Load bundled price data if present; absence is not an error."""
        path = path or self.config.price_data_path
        try:
            with open(path, encoding='utf-8-sig') as f:
                self.price_data = parse_price_csv(f.read())
        except (OSError, DashboardError) as e:
            logger.info("No existing price data loaded (%s)", e)
            self.price_data = None
            return None

        self.view.update_prices(self.price_data)
        return self.price_data

    def upload_wells(self, source: TextSource) -> bool:
        """
        Replace the well table with an uploaded well-data CSV.

        An upload with no data rows is rejected and the current data kept.
        """
        token = self.begin_load()
        wells = load_well_csv(read_text(source))

        if len(wells) == 0:
            self._notify("error", "No well records found in the uploaded file.")
            return False

        applied = self.commit_load(token, wells)
        if applied:
            self._notify("success", f"Data processed successfully: {len(wells)} wells loaded.")
        return applied

    def upload_forecast(self, source: TextSource) -> Optional[ForecastUploadData]:
        """Parse a forecast upload and push it to both forecast consumers."""
        data = parse_forecast_csv(read_text(source))

        if data is None:
            self._notify("error", "Could not recognise the forecast file format. "
                                  "Expected Mon-YY month columns or Month/Production columns.")
            return None

        self.forecast_upload = data
        for target in FORECAST_TARGETS:
            self.view.update_forecast_upload(target, data)

        self._notify("success", f"Forecast data processed: {len(data.months)} months.")
        return data

    def upload_prices(self, source: TextSource) -> Optional[pd.DataFrame]:
        try:
            prices = parse_price_csv(read_text(source))
        except DashboardError as e:
            self._notify("error", f"Error processing price data: {e}")
            return None

        self.price_data = prices
        self.view.update_prices(prices)
        self._notify("success", "Price data processed successfully.")
        return prices

    def upload_well_logs(self, source: TextSource) -> Optional[pd.DataFrame]:
        try:
            logs = parse_well_logs_csv(read_text(source))
        except DashboardError as e:
            self._notify("error", f"Error processing well logs: {e}")
            return None

        self.well_logs = logs
        self.view.update_well_logs(logs)
        self._notify("success", "Well logs data processed successfully!")
        return logs

    # ------------------------------------------------------------------
    # Refresh tick
    # ------------------------------------------------------------------

    @property
    def refresh_enabled(self) -> bool:
        return bool(self.refresh_interval_ms)

    def set_refresh_interval(self, interval_ms: int) -> None:
        """Change the tick interval; 0 disables live refresh."""
        self.refresh_interval_ms = max(0, int(interval_ms or 0))

    def tick(self) -> pd.DataFrame:
        """Advance the data source one step and recompute everything."""
        self.wells = self.data_source.next_snapshot(self.wells)
        self.refresh()
        return self.wells

    def refresh(self) -> None:
        """Push KPIs, charts, the table page and anomalies to the view."""
        self.view.update_kpis(self.kpis())
        self.view.update_top_wells(top_producing_wells(self.wells))
        self.view.update_charts(self.chart_data())
        self._update_table()
        self.view.show_anomalies(self.anomalies())

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    def kpis(self) -> Dict[str, Any]:
        return compute_kpis(self.wells)

    def anomalies(self) -> List[Dict[str, Any]]:
        return detect_anomalies(self.wells)

    def forecast(self) -> Dict[str, List[int]]:
        return forecast_decline(self.wells)

    def chart_data(self) -> Dict[str, Any]:
        forecast = self.forecast()
        months = len(next(iter(forecast.values()))) if forecast else 0
        return {
            'status_counts': status_counts(self.wells),
            'field_production': field_production(self.wells),
            'field_water_cut': field_water_cut(self.wells),
            'forecast': forecast,
            'forecast_labels': forecast_month_labels(months) if forecast else [],
        }

    # ------------------------------------------------------------------
    # Filtering and pagination
    # ------------------------------------------------------------------

    def field_options(self) -> Dict[str, str]:
        """Filter key -> display name for every field in the data."""
        return {field_slug(name): name for name in self.wells['FIELD'].unique()}

    def filtered_wells(self) -> pd.DataFrame:
        if self.field_filter == ALL_FIELDS:
            return self.wells
        return self.wells[self.wells['FIELD'].map(field_slug) == self.field_filter]

    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.filtered_wells()) / self.rows_per_page))

    def page_rows(self) -> pd.DataFrame:
        start = (self.current_page - 1) * self.rows_per_page
        return self.filtered_wells().iloc[start:start + self.rows_per_page]

    def set_field_filter(self, field_key: str) -> None:
        self.field_filter = field_key or ALL_FIELDS
        self.current_page = 1
        self._update_table()

    def rows_per_page_options(self) -> List[int]:
        """Page size choices, always including the current page size."""
        return sorted(set(ROWS_PER_PAGE_CHOICES) | {self.rows_per_page})

    def set_rows_per_page(self, rows: int) -> None:
        self.rows_per_page = max(1, int(rows))
        self.current_page = 1
        self._update_table()

    def next_page(self) -> None:
        if self.current_page < self.total_pages():
            self.current_page += 1
            self._update_table()

    def prev_page(self) -> None:
        if self.current_page > 1:
            self.current_page -= 1
            self._update_table()

    def find_well(self, well_id) -> Optional[Dict[str, Any]]:
        matches = self.wells[self.wells['WELL_ID'].astype(str) == str(well_id)]
        if len(matches) == 0:
            return None
        return matches.iloc[0].to_dict()

    def export_csv(self) -> str:
        return export_wells_csv(self.wells)

    # ------------------------------------------------------------------

    def _update_table(self) -> None:
        self.view.update_table(self.page_rows(), self.current_page,
                               self.total_pages(), len(self.filtered_wells()))

    def _notify(self, level: str, message: str) -> None:
        self.status_message = {'level': level, 'message': message}
        if level == "error":
            logger.warning(message)
        else:
            logger.info(message)
        self.view.notify(level, message)
