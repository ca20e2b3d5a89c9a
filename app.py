"""
PetroVision Wells Dashboard - South Sudan Oilfields

A Streamlit application for monitoring well status, production KPIs,
anomalies and simple decline forecasts from well-data CSV files, with
management views for forecasts, regional prices and well logs.
"""

import streamlit as st
import pandas as pd
import logging
import os
from datetime import datetime, timedelta

import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from petrovision.config import PRODUCTION_TYPE_SHARE, load_config
from petrovision.dashboard_state import ALL_FIELDS, DashboardState, DashboardView
from petrovision.well_records import make_well_template_csv, make_forecast_template_csv
from petrovision.price_data import price_series_by_town, town_price_averages
from petrovision.external_data import get_benchmarks, get_country_facts
from petrovision.visualizations import (
    plot_status_distribution, plot_field_production, plot_water_cut_by_field,
    plot_production_type, plot_decline_forecast, plot_forecast_upload,
    plot_anomaly_flags, plot_price_fluctuation, plot_well_logs)

st.set_page_config(page_title="PetroVision Wells",
                   page_icon="🛢️",
                   layout="wide",
                   initial_sidebar_state="expanded")

CONFIG = load_config()

logging.basicConfig(
    level=getattr(logging, CONFIG.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


class StreamlitView(DashboardView):
    """Keeps the latest pushed results for the page renderers."""

    def __init__(self):
        self.kpis = {}
        self.top_wells = pd.DataFrame()
        self.charts = {}
        self.table = pd.DataFrame()
        self.table_info = (1, 1, 0)
        self.anomalies = []
        self.forecast_uploads = {}
        self.messages = []

    def update_kpis(self, kpis):
        self.kpis = kpis

    def update_top_wells(self, wells):
        self.top_wells = wells

    def update_charts(self, charts):
        self.charts = charts

    def update_table(self, rows, page, total_pages, total_rows):
        self.table = rows
        self.table_info = (page, total_pages, total_rows)

    def show_anomalies(self, anomalies):
        self.anomalies = anomalies

    def update_forecast_upload(self, target, data):
        self.forecast_uploads[target] = data

    def notify(self, level, message):
        self.messages.append((level, message))


def get_state() -> DashboardState:
    """Return the session's dashboard state, loading initial data once."""
    if 'dashboard' not in st.session_state:
        state = DashboardState(config=CONFIG, view=StreamlitView())
        state.load_initial()
        state.load_initial_prices()
        logger.info("Dashboard state ready with %d wells", len(state.wells))
        st.session_state['dashboard'] = state
    return st.session_state['dashboard']


@st.cache_data(ttl=3600)
def load_benchmarks(api_key):
    return get_benchmarks(api_key)


@st.cache_data(ttl=86400)
def load_country_facts():
    return get_country_facts()


def show_messages(view: StreamlitView):
    """Render and clear pending notifications."""
    for level, message in view.messages:
        if level == "error":
            st.error(message)
        else:
            st.success(message)
    view.messages.clear()


def format_table(rows: pd.DataFrame) -> pd.DataFrame:
    display_df = rows[[
        'WELL_ID', 'WELL_NAME', 'FIELD', 'STATUS', 'PRODUCTION', 'CHANGE_PCT',
        'WATER_CUT'
    ]].copy()
    display_df.columns = [
        'ID', 'Well Name', 'Field', 'Status', 'Production (BOE/d)',
        '% Change', 'Water Cut (%)'
    ]
    return display_df


def render_sidebar(state: DashboardState):
    """Render the sidebar with navigation and settings."""
    with st.sidebar:
        st.title("🛢️ PetroVision Wells")
        st.caption(datetime.now().strftime("%B %d, %Y %H:%M"))

        st.markdown("---")

        page = st.radio("Navigation", [
            "Dashboard", "Wells", "Analytics", "Management", "Data Upload"
        ],
                        label_visibility="collapsed")

        st.markdown("---")

        with st.expander("⚙️ Settings", expanded=False):
            interval = st.number_input(
                "Refresh Interval (ms)",
                min_value=0,
                max_value=3600000,
                value=int(state.refresh_interval_ms),
                step=10000,
                help="0 disables live refresh")
            if st.button("Save Settings"):
                state.set_refresh_interval(interval)
                st.success(f"Refresh interval set to {interval} ms")

    return page


def render_kpis(state: DashboardState):
    kpis = state.view.kpis

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric(label="Total Wells", value=f"{kpis.get('total_wells', 0):,}")

    with col2:
        st.metric(label="Daily Production",
                  value=f"{kpis.get('total_production', 0):,} BOE/d",
                  help="Sum over producing wells")

    with col3:
        st.metric(label="Avg Production",
                  value=f"{kpis.get('avg_production', 0):.1f} BOE/d",
                  help="Average over producing wells")

    with col4:
        st.metric(label="Avg Water Cut",
                  value=f"{kpis.get('avg_water_cut', 0):.1f}%",
                  help="Average over producing wells")


def render_dashboard_page(state: DashboardState):
    """Render the main dashboard with KPIs and charts."""
    st.header("Production Dashboard")

    render_kpis(state)

    charts = state.view.charts

    col1, col2 = st.columns(2)

    with col1:
        st.plotly_chart(plot_status_distribution(charts.get('status_counts', {})),
                        use_container_width=True)

    with col2:
        st.plotly_chart(plot_production_type(PRODUCTION_TYPE_SHARE),
                        use_container_width=True)

    st.plotly_chart(plot_field_production(charts.get('field_production', pd.DataFrame())),
                    use_container_width=True)

    st.subheader("Top Producing Wells")
    top = state.view.top_wells
    if len(top) > 0:
        for _, well in top.iterrows():
            st.markdown(f"**{well['WELL_NAME']}**: {well['PRODUCTION']:,} BOE/d")
    else:
        st.info("No producing wells.")

    st.subheader("Decline Forecast")
    st.plotly_chart(plot_decline_forecast(charts.get('forecast', {}),
                                          charts.get('forecast_labels', [])),
                    use_container_width=True)

    st.subheader("Uploaded Forecast")
    st.plotly_chart(plot_forecast_upload(state.view.forecast_uploads.get("dashboard")),
                    use_container_width=True)


def render_wells_page(state: DashboardState):
    """Render the paginated, field-filtered wells table."""
    st.header("Wells")

    options = {ALL_FIELDS: "All Fields"}
    options.update(state.field_options())
    keys = list(options.keys())

    col1, col2 = st.columns([2, 1])

    with col1:
        selected = st.selectbox("Field",
                                keys,
                                index=keys.index(state.field_filter)
                                if state.field_filter in keys else 0,
                                format_func=lambda key: options[key])
        if selected != state.field_filter:
            state.set_field_filter(selected)

    with col2:
        row_options = state.rows_per_page_options()
        rows = st.selectbox("Rows per page", row_options,
                            index=row_options.index(state.rows_per_page))
        if rows != state.rows_per_page:
            state.set_rows_per_page(rows)

    page_rows = state.view.table
    page, total_pages, total_rows = state.view.table_info
    start = (page - 1) * state.rows_per_page

    st.dataframe(format_table(page_rows), use_container_width=True, hide_index=True)
    st.caption(f"Showing {start + 1 if total_rows else 0}-{start + len(page_rows)} of {total_rows} wells")

    col1, col2, col3 = st.columns([1, 1, 4])
    with col1:
        if st.button("Previous", disabled=page <= 1):
            state.prev_page()
            st.rerun()
    with col2:
        if st.button("Next", disabled=page >= total_pages):
            state.next_page()
            st.rerun()

    st.subheader("Well Details")
    well_id = st.selectbox("Select Well", page_rows['WELL_ID'].tolist(),
                           format_func=lambda wid: state.find_well(wid)['WELL_NAME'])
    if well_id is not None:
        well = state.find_well(well_id)
        col1, col2 = st.columns(2)
        with col1:
            st.markdown(f"**Name:** {well['WELL_NAME']}")
            st.markdown(f"**Field:** {well['FIELD']}")
            st.markdown(f"**Status:** {well['STATUS']}")
        with col2:
            change = well['CHANGE_PCT']
            st.markdown(f"**Production:** {int(well['PRODUCTION']):,} BOE/d")
            st.markdown(f"**% Change:** {'+' if change > 0 else ''}{change}%")
            st.markdown(f"**Water Cut:** {well['WATER_CUT']}%")

    st.download_button(label="Export Well Data (CSV)",
                       data=state.export_csv(),
                       file_name="well_data_export.csv",
                       mime="text/csv")


def render_analytics_page(state: DashboardState):
    """Render anomaly flags and water cut analysis."""
    st.header("Analytics")

    anomalies = state.view.anomalies

    col1, col2 = st.columns([1, 1])

    with col1:
        st.plotly_chart(plot_anomaly_flags(anomalies), use_container_width=True)

    with col2:
        st.plotly_chart(plot_water_cut_by_field(
            state.view.charts.get('field_water_cut', pd.DataFrame())),
                        use_container_width=True)

    st.subheader("Anomalies")
    if anomalies:
        for anomaly in anomalies:
            st.markdown(
                f"**{anomaly['WELL_NAME']}** ({anomaly['FIELD']}) - "
                f"{anomaly['PRODUCTION']:,} BOE/d  \n"
                f"<small>{' | '.join(anomaly['FLAGS'])}</small>",
                unsafe_allow_html=True)
    else:
        st.success("No anomalies detected")


def render_management_page(state: DashboardState):
    """Render the management summary: snapshot, benchmarks, forecasts, prices, logs."""
    st.header("Management Summary")

    kpis = state.view.kpis

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total Production", f"{kpis.get('total_production', 0):,} BOE/d")
    with col2:
        st.metric("Producing Wells", f"{kpis.get('producing_wells', 0):,}")
    with col3:
        st.metric("Avg Water Cut", f"{kpis.get('avg_water_cut', 0):.1f}%")

    st.subheader("Crude Benchmarks")
    benchmarks = load_benchmarks(CONFIG.eia_api_key)
    cols = st.columns(3)
    for col, (name, quote) in zip(cols, benchmarks.items()):
        with col:
            st.metric(name.title(), f"${quote['price']:.2f}", help=f"Source: {quote['source']}")

    with st.expander("Country Facts", expanded=False):
        facts = load_country_facts()
        st.write(f"- Capital: {facts['capital']}")
        st.write(f"- Population: {facts['population']:,}")
        st.write(f"- Region: {facts['region']} / {facts['subregion']}")
        st.write(f"- Languages: {facts['languages']}")

    charts = state.view.charts
    st.plotly_chart(plot_decline_forecast(charts.get('forecast', {}),
                                          charts.get('forecast_labels', []),
                                          title='Field Decline Forecast (Management)'),
                    use_container_width=True)
    st.plotly_chart(plot_forecast_upload(state.view.forecast_uploads.get("management"),
                                         title='Uploaded Forecast (Management)'),
                    use_container_width=True)

    st.subheader("Regional Prices")
    if state.price_data is not None and len(state.price_data) > 0:
        st.plotly_chart(plot_price_fluctuation(price_series_by_town(state.price_data)),
                        use_container_width=True)
        averages = town_price_averages(state.price_data)
        averages['AVG_PRICE'] = averages['AVG_PRICE'].round(2)
        averages.columns = ['Town', 'State', 'Avg Price (USD)']
        st.dataframe(averages, use_container_width=True, hide_index=True)
    else:
        st.info("No price data loaded. Upload a price CSV on the Data Upload page.")

    if state.well_logs is not None:
        st.subheader("Well Logs")
        st.plotly_chart(plot_well_logs(state.well_logs), use_container_width=True)


def render_upload_page(state: DashboardState):
    """Render file uploaders for well, forecast, price and well-log data."""
    st.header("Data Upload")

    show_messages(state.view)

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("### Well Data")
        well_file = st.file_uploader("Well data CSV", type=['csv'], key="well_upload")
        if st.button("Process Well Data", disabled=well_file is None):
            state.upload_wells(well_file)
            st.rerun()
        st.download_button("Download Well Template",
                           data=make_well_template_csv(),
                           file_name="well_data_template.csv",
                           mime="text/csv")

    with col2:
        st.markdown("### Forecast Data")
        forecast_file = st.file_uploader("Forecast CSV", type=['csv'], key="forecast_upload")
        if st.button("Process Forecast", disabled=forecast_file is None):
            state.upload_forecast(forecast_file)
            st.rerun()
        st.download_button("Download Forecast Template",
                           data=make_forecast_template_csv(),
                           file_name="forecast_template.csv",
                           mime="text/csv")

    st.markdown("---")

    col3, col4 = st.columns(2)

    with col3:
        st.markdown("### Price Data")
        price_file = st.file_uploader("Price CSV (TOWN, STATE, DATE, PRICE)",
                                      type=['csv'], key="price_upload")
        if st.button("Process Price Data", disabled=price_file is None):
            state.upload_prices(price_file)
            st.rerun()

    with col4:
        st.markdown("### Well Logs")
        logs_file = st.file_uploader("Well logs CSV", type=['csv'], key="logs_upload")
        if st.button("Process Well Logs", disabled=logs_file is None):
            state.upload_well_logs(logs_file)
            st.rerun()


def main():
    """Main application entry point."""
    state = get_state()
    page = render_sidebar(state)

    run_every = timedelta(milliseconds=state.refresh_interval_ms) if state.refresh_enabled else None

    @st.fragment(run_every=run_every)
    def live_page():
        last_tick = st.session_state.get('ticked_at')
        if run_every is not None and last_tick is not None and datetime.now() - last_tick >= run_every:
            state.tick()
            st.session_state['ticked_at'] = datetime.now()
        elif last_tick is None:
            st.session_state['ticked_at'] = datetime.now()

        if page == "Dashboard":
            render_dashboard_page(state)
        elif page == "Wells":
            render_wells_page(state)
        elif page == "Analytics":
            render_analytics_page(state)
        elif page == "Management":
            render_management_page(state)

    if page == "Data Upload":
        render_upload_page(state)
    else:
        show_messages(state.view)
        live_page()


if __name__ == "__main__":
    main()
