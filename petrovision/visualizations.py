"""
Visualization module for the wells dashboard.

This module provides Plotly figures for the status breakdown, field
production, decline forecasts, uploaded forecasts, price fluctuation and
well log charts.
"""

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from typing import Any, Dict, List, Optional

from petrovision.forecast_upload import ForecastUploadData

STATUS_COLORS = {
    'Producing': '#4caf50',
    'Shut-in': '#ff9800',
    'Abandoned': '#f44336',
    'Drilling': '#2c5985',
    'Unknown': '#9e9e9e'
}

SERIES_COLORS = ['#2c5985', '#f6851f', '#4a7bab', '#6c757d', '#20c997']


def _empty_figure(message: str, height: int = 250) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(x=0.5,
                       y=0.5,
                       text=message,
                       showarrow=False,
                       font=dict(size=18))
    fig.update_layout(height=height,
                      xaxis=dict(visible=False),
                      yaxis=dict(visible=False))
    return fig


def plot_status_distribution(counts: Dict[str, int]) -> go.Figure:
    """
    Create a donut chart of well counts by status.

    Args:
        counts: Mapping of status to number of wells.

    Returns:
        Plotly Figure object.
    """
    labels = [status for status, count in counts.items() if count > 0]
    if not labels:
        return _empty_figure("No wells loaded")

    fig = go.Figure()

    fig.add_trace(
        go.Pie(labels=labels,
               values=[counts[status] for status in labels],
               marker_colors=[STATUS_COLORS.get(s, '#888888') for s in labels],
               hole=0.7,
               textinfo='value+label',
               hovertemplate='%{label}: %{value} wells<extra></extra>'))

    fig.update_layout(title='Well Status Distribution',
                      height=350,
                      showlegend=True,
                      legend=dict(orientation="h", y=-0.1))

    return fig


def plot_field_production(field_df: pd.DataFrame) -> go.Figure:
    """
    Create a bar chart of producing-well production by field.

    Args:
        field_df: DataFrame with FIELD and PRODUCTION columns.

    Returns:
        Plotly Figure object.
    """
    if len(field_df) == 0:
        return _empty_figure("No field production")

    fig = go.Figure()

    fig.add_trace(
        go.Bar(x=field_df['FIELD'],
               y=field_df['PRODUCTION'],
               marker_color='#2c5985',
               hovertemplate='%{x}<br>Production: %{y:,.0f} BOE/d<extra></extra>'))

    fig.update_layout(title='Production by Field',
                      xaxis_title='Field',
                      yaxis_title='Production (BOE/d)',
                      height=400,
                      showlegend=False)

    return fig


def plot_water_cut_by_field(water_cut_df: pd.DataFrame) -> go.Figure:
    """Horizontal bar chart of average producing-well water cut per field."""
    if len(water_cut_df) == 0:
        return _empty_figure("No producing wells")

    df = water_cut_df.sort_values('AVG_WATER_CUT', ascending=True)

    fig = go.Figure()

    fig.add_trace(
        go.Bar(x=df['AVG_WATER_CUT'],
               y=df['FIELD'],
               orientation='h',
               marker_color='#1282c4',
               hovertemplate='%{y}<br>Water Cut: %{x:.1f}%<extra></extra>'))

    fig.update_layout(title='Water Cut by Field',
                      xaxis_title='Water Cut (%)',
                      xaxis_range=[0, 100],
                      yaxis_title='Field',
                      height=max(300, len(df) * 35),
                      showlegend=False)

    return fig


def plot_production_type(shares: Dict[str, float]) -> go.Figure:
    """Pie chart of the oil/gas/NGL production split."""
    labels = ['Oil', 'Gas', 'NGL']
    values = [round(shares.get(key, 0) * 100) for key in ('oil', 'gas', 'ngl')]

    fig = px.pie(names=labels,
                 values=values,
                 color_discrete_sequence=['#f6851f', '#2c5985', '#4a7bab'],
                 title='Production by Type (%)')
    fig.update_layout(height=350)

    return fig


def plot_decline_forecast(forecast: Dict[str, List[int]],
                          labels: List[str],
                          title: str = 'Field Decline Forecast') -> go.Figure:
    """
    Create a line chart of per-field decline forecasts.

    Args:
        forecast: Mapping of field name to forecast series.
        labels: Month labels for the x axis (M1, M2, ...).
        title: Chart title.

    Returns:
        Plotly Figure object.
    """
    if not forecast:
        return _empty_figure("No producing fields to forecast")

    fig = go.Figure()

    for idx, (field, series) in enumerate(forecast.items()):
        fig.add_trace(
            go.Scatter(x=labels,
                       y=series,
                       name=f'{field} (forecast)',
                       mode='lines',
                       line=dict(color=SERIES_COLORS[idx % len(SERIES_COLORS)],
                                 width=2),
                       hovertemplate='%{x}<br>%{y:,.0f} BOE/d<extra></extra>'))

    fig.update_layout(title=title,
                      xaxis_title='Forecast Month',
                      yaxis_title='Production (BOE/d)',
                      height=450,
                      legend=dict(orientation="h", y=-0.2),
                      hovermode='x unified')

    return fig


def plot_forecast_upload(data: Optional[ForecastUploadData],
                         title: str = 'Uploaded Production Forecast') -> go.Figure:
    """
    Create a chart of an uploaded forecast: total line plus one line per field.

    Args:
        data: Parsed forecast upload, or None when nothing was uploaded.
        title: Chart title.

    Returns:
        Plotly Figure object.
    """
    if data is None or not data.months:
        return _empty_figure("Upload a forecast file to see it here")

    fig = go.Figure()

    fig.add_trace(
        go.Scatter(x=data.months,
                   y=data.total,
                   name='Total',
                   mode='lines+markers',
                   line=dict(color='#f6851f', width=3),
                   hovertemplate='%{x}<br>Total: %{y:,.0f}<extra></extra>'))

    for idx, (field, values) in enumerate(data.fields.items()):
        fig.add_trace(
            go.Scatter(x=data.months,
                       y=[values.get(month, 0) for month in data.months],
                       name=field,
                       mode='lines',
                       line=dict(color=SERIES_COLORS[idx % len(SERIES_COLORS)],
                                 width=1.5,
                                 dash='dot')))

    fig.update_layout(title=title,
                      xaxis_title='Month',
                      yaxis_title='Production',
                      height=450,
                      legend=dict(orientation="h", y=-0.2),
                      hovermode='x unified')

    return fig


def plot_anomaly_flags(anomalies: List[Dict[str, Any]]) -> go.Figure:
    """Pie chart of anomaly rule hits by rule."""
    if not anomalies:
        return _empty_figure("No anomalies detected", height=200)

    rule_counts: Dict[str, int] = {}
    for anomaly in anomalies:
        for flag in anomaly['FLAGS']:
            rule = flag.split(':')[0]
            rule_counts[rule] = rule_counts.get(rule, 0) + 1

    fig = go.Figure()

    fig.add_trace(
        go.Pie(labels=list(rule_counts.keys()),
               values=list(rule_counts.values()),
               marker_colors=['#ff6b6b', '#45b7d1', '#f9c74f'],
               hole=0.4,
               textinfo='value+label'))

    fig.update_layout(height=350,
                      showlegend=False,
                      title_text='Anomalies by Rule')

    return fig


def plot_price_fluctuation(price_series: Dict[str, Any]) -> go.Figure:
    """
    Create a line chart of prices by town over time.

    Args:
        price_series: Output of price_series_by_town().

    Returns:
        Plotly Figure object.
    """
    if not price_series.get('series'):
        return _empty_figure("No price data loaded")

    fig = go.Figure()

    colors = ['#1282c4', '#7dd56f', '#ff9800', '#f44336', '#9c27b0']

    for idx, (town, prices) in enumerate(price_series['series'].items()):
        fig.add_trace(
            go.Scatter(x=price_series['dates'],
                       y=prices,
                       name=town,
                       mode='lines+markers',
                       connectgaps=False,
                       line=dict(color=colors[idx % len(colors)], width=2)))

    fig.update_layout(title='Price Fluctuation by Region',
                      xaxis_title='Date',
                      yaxis_title='Price (USD/bbl)',
                      height=400,
                      legend=dict(orientation="h", y=1.1))

    return fig


def plot_well_logs(logs: pd.DataFrame) -> go.Figure:
    """
    Create a dual-axis chart of rate of penetration and porosity versus depth.

    Args:
        logs: Output of parse_well_logs_csv().

    Returns:
        Plotly Figure object.
    """
    if logs is None or len(logs) == 0:
        return _empty_figure("No well logs loaded")

    fig = make_subplots(specs=[[{"secondary_y": True}]])

    fig.add_trace(go.Scatter(x=logs['Depth'],
                             y=logs['ROP_AVG'],
                             name='ROP (ft/hr)',
                             line=dict(color='#1282c4', width=2)),
                  secondary_y=False)

    fig.add_trace(go.Scatter(x=logs['Depth'],
                             y=logs['POROSITY_PCT'],
                             name='Porosity (%)',
                             line=dict(color='#7dd56f', width=2)),
                  secondary_y=True)

    fig.update_layout(title='Well Logs Analysis',
                      height=450,
                      hovermode='x unified')

    fig.update_xaxes(title_text="Depth (ft)")
    fig.update_yaxes(title_text="ROP (ft/hr)", secondary_y=False)
    fig.update_yaxes(title_text="Porosity (%)", secondary_y=True)

    return fig
