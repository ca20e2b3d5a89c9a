"""
Unit tests for the dashboard orchestrator.
"""

import numpy as np
import pytest

from petrovision.config import DashboardConfig, FIELDS
from petrovision.dashboard_state import ALL_FIELDS, DashboardState, DashboardView
from petrovision.data_source import StaticSource
from petrovision.well_records import WELL_CSV_HEADERS, export_wells_csv


class RecordingView(DashboardView):
    """View double that records every call it receives."""

    def __init__(self):
        self.calls = []
        self.forecast_uploads = {}
        self.messages = []

    def update_kpis(self, kpis):
        self.calls.append(('kpis', kpis))

    def update_table(self, rows, page, total_pages, total_rows):
        self.calls.append(('table', (page, total_pages, total_rows)))

    def show_anomalies(self, anomalies):
        self.calls.append(('anomalies', anomalies))

    def update_forecast_upload(self, target, data):
        self.forecast_uploads[target] = data

    def notify(self, level, message):
        self.messages.append((level, message))

    def last(self, kind):
        values = [value for name, value in self.calls if name == kind]
        return values[-1] if values else None


HEADER = ",".join(WELL_CSV_HEADERS)


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def state(tmp_path, view):
    config = DashboardConfig(
        data_path=str(tmp_path / "missing.csv"),
        price_data_path=str(tmp_path / "missing_prices.csv"),
        refresh_interval_ms=0,
        rows_per_page=2,
    )
    return DashboardState(config=config, view=view, data_source=StaticSource(),
                          rng=np.random.default_rng(5))


@pytest.fixture
def loaded_state(state, mixed_wells):
    state.upload_wells(export_wells_csv(mixed_wells))
    return state


class TestLoading:

    def test_missing_file_falls_back_to_sample_data(self, state, view):
        wells = state.load_initial()

        assert len(wells) == sum(field['well_count'] for field in FIELDS)
        assert view.last('kpis')['total_wells'] == len(wells)

    def test_empty_file_falls_back_to_sample_data(self, state, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text(HEADER + "\n")

        assert len(state.load_initial(str(path))) > 0

    def test_undecodable_file_falls_back_to_sample_data(self, state, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes(HEADER.encode("utf-8") + b"\n\xff\xfeW,F,Producing,10,0,1\n")

        wells = state.load_initial(str(path))

        assert len(wells) == sum(field['well_count'] for field in FIELDS)

    def test_bundled_file_is_used(self, state, tmp_path, well_csv_text):
        path = tmp_path / "wells.csv"
        path.write_text(well_csv_text)

        wells = state.load_initial(str(path))

        assert wells['WELL_NAME'].tolist() == ["Paloch #112-407", "Adar #204-331", "Heglig #503-127"]

    def test_missing_price_file_is_not_an_error(self, state):
        assert state.load_initial_prices() is None
        assert state.price_data is None

    def test_stale_load_is_discarded(self, state, mixed_wells):
        """Only the most recently started load may replace the table."""
        first = state.begin_load()
        second = state.begin_load()

        assert state.generation == second
        assert state.commit_load(first, mixed_wells) is False
        assert len(state.wells) == 0

        assert state.commit_load(second, mixed_wells) is True
        assert len(state.wells) == 5

    def test_upload_supersedes_pending_load(self, state, mixed_wells, well_csv_text):
        token = state.begin_load()
        state.upload_wells(well_csv_text)

        assert state.commit_load(token, mixed_wells) is False
        assert len(state.wells) == 3


class TestUploads:

    def test_upload_wells(self, state, view, well_csv_text):
        assert state.upload_wells(well_csv_text.encode("utf-8")) is True

        assert len(state.wells) == 3
        assert view.messages[-1] == ("success", "Data processed successfully: 3 wells loaded.")
        assert state.status_message == {'level': "success",
                                        'message': "Data processed successfully: 3 wells loaded."}
        assert view.last('kpis')['total_production'] == 1680 + 760

    def test_empty_upload_keeps_previous_data(self, loaded_state, view):
        assert loaded_state.upload_wells(HEADER + "\n") is False

        assert len(loaded_state.wells) == 5
        assert view.messages[-1][0] == "error"

    def test_upload_resets_page(self, loaded_state, well_csv_text):
        loaded_state.next_page()
        loaded_state.upload_wells(well_csv_text)

        assert loaded_state.current_page == 1

    def test_forecast_goes_to_both_consumers(self, state, view):
        data = state.upload_forecast("Field,Jan-24,Feb-24\nHeglig,10,20\n")

        assert data is not None
        assert state.forecast_upload is data
        assert view.forecast_uploads["dashboard"] is data
        assert view.forecast_uploads["management"] is data

    def test_bad_forecast_keeps_previous(self, state, view):
        previous = state.upload_forecast("Month,Production\nJan-24,100\n")
        result = state.upload_forecast("Name,Value\na,1\n")

        assert result is None
        assert state.forecast_upload is previous
        assert view.messages[-1][0] == "error"

    def test_bad_price_upload_keeps_previous(self, state, view):
        good = state.upload_prices("TOWN,STATE,DATE,PRICE\nJuba,CE,2024-01-01,90\n")
        result = state.upload_prices("TOWN,STATE,DATE\nJuba,CE,2024-01-01\n")

        assert result is None
        assert state.price_data is good
        assert view.messages[-1] == ("error", "Error processing price data: Missing headers for price data: PRICE")

    def test_well_logs_upload(self, state, view):
        logs = state.upload_well_logs(
            "Depth,WOB,SURF_RPM,ROP_AVG,PHIF,VSH,SW,KLOGH\n1000,12,120,45,0.2,0.3,0.4,150\n")

        assert state.well_logs is logs
        assert view.messages[-1][0] == "success"

        assert state.upload_well_logs("Depth\n1\n") is None
        assert state.well_logs is logs
        assert view.messages[-1][1].startswith("Error processing well logs:")


class TestNavigation:

    def test_pagination(self, loaded_state, view):
        assert loaded_state.total_pages() == 3
        assert len(loaded_state.page_rows()) == 2

        loaded_state.next_page()
        loaded_state.next_page()
        loaded_state.next_page()

        assert loaded_state.current_page == 3
        assert loaded_state.page_rows()['WELL_ID'].tolist() == [5]
        assert view.last('table') == (3, 3, 5)

        loaded_state.prev_page()
        assert loaded_state.current_page == 2

    def test_prev_page_stops_at_first(self, loaded_state):
        loaded_state.prev_page()

        assert loaded_state.current_page == 1

    def test_field_filter(self, loaded_state):
        assert loaded_state.field_options() == {'paloch': "Paloch", 'adar-yale': "Adar Yale"}

        loaded_state.next_page()
        loaded_state.set_field_filter("adar-yale")

        assert loaded_state.current_page == 1
        assert loaded_state.filtered_wells()['FIELD'].unique().tolist() == ["Adar Yale"]
        assert loaded_state.total_pages() == 1

        loaded_state.set_field_filter(ALL_FIELDS)
        assert len(loaded_state.filtered_wells()) == 5

    def test_empty_filter_has_one_page(self, loaded_state):
        loaded_state.set_field_filter("no-such-field")

        assert loaded_state.total_pages() == 1
        assert len(loaded_state.page_rows()) == 0

    def test_rows_per_page(self, loaded_state):
        loaded_state.set_rows_per_page(10)

        assert loaded_state.total_pages() == 1
        assert len(loaded_state.page_rows()) == 5

    def test_rows_per_page_options_keep_configured_size(self, loaded_state):
        assert loaded_state.rows_per_page_options() == [2, 10, 25, 50, 100]

        loaded_state.set_rows_per_page(25)
        assert loaded_state.rows_per_page_options() == [10, 25, 50, 100]

    def test_find_well(self, loaded_state):
        assert loaded_state.find_well(4)['WELL_NAME'] == "Adar #201-301"
        assert loaded_state.find_well("4")['FIELD'] == "Adar Yale"
        assert loaded_state.find_well(99) is None


class TestRefresh:

    def test_tick_pushes_fresh_results(self, loaded_state, view):
        count = len([name for name, _ in view.calls if name == 'kpis'])

        loaded_state.tick()

        assert len([name for name, _ in view.calls if name == 'kpis']) == count + 1
        assert view.last('anomalies') == loaded_state.anomalies()

    def test_refresh_interval(self, state):
        assert not state.refresh_enabled

        state.set_refresh_interval(30000)
        assert state.refresh_enabled
        assert state.refresh_interval_ms == 30000

        state.set_refresh_interval(-5)
        assert not state.refresh_enabled

    def test_chart_data(self, loaded_state):
        charts = loaded_state.chart_data()

        assert charts['status_counts']['Producing'] == 3
        assert set(charts['forecast']) == {"Paloch", "Adar Yale"}
        assert charts['forecast_labels'][0] == "M1"
        assert len(charts['forecast_labels']) == len(charts['forecast']["Paloch"])

    def test_export_csv(self, loaded_state, mixed_wells):
        assert loaded_state.export_csv() == export_wells_csv(mixed_wells)
