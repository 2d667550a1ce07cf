# ============================================================================
# chart_figures.py - Chart Figures Module
# ============================================================================
"""
This module handles:
- Plotting IRFs with confidence bands
- Stacked FEVD and historical decomposition bars
- Forecast paths with intervals
- Factor scree plots
"""

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

# ============================================================================
# IRF
# ============================================================================

def plot_irf(datum):
    """IRF line for one response, with a shaded band when both bounds exist"""
    fig = go.Figure()
    periods = list(datum.horizon)

    if datum.lower is not None and datum.upper is not None:
        fig.add_trace(go.Scatter(
            x=periods + periods[::-1],
            y=np.concatenate([datum.upper, datum.lower[::-1]]),
            fill='toself',
            fillcolor='rgba(0,100,200,0.2)',
            line=dict(color='rgba(255,255,255,0)'),
            name='Confidence band',
            hoverinfo='skip'
        ))

    fig.add_trace(go.Scatter(
        x=periods,
        y=datum.irf,
        mode='lines',
        name='IRF',
        line=dict(color='darkblue', width=2),
        hovertemplate='Horizon: %{x}<br>Response: %{y:.4f}<extra></extra>'
    ))

    fig.add_hline(y=0, line_dash="dash", line_color="red", opacity=0.5)

    fig.update_layout(
        title=f"Impulse Response: {datum.impulse} → {datum.response}",
        xaxis_title="Horizon",
        yaxis_title="Response",
        hovermode='x unified',
        height=400
    )
    return fig

# ============================================================================
# FEVD
# ============================================================================

def plot_fevd(datum):
    """Stacked bars: share of forecast error variance by shock at each horizon"""
    fig = go.Figure()
    for series in datum.decomposition:
        fig.add_trace(go.Bar(
            name=series.shock,
            x=datum.horizon,
            y=series.values,
            hovertemplate=f'<b>{series.shock}</b><br>Share: %{{y:.3f}}<extra></extra>'
        ))

    fig.update_layout(
        barmode='stack',
        title=f'FEVD for {datum.variable}',
        xaxis_title='Forecast Horizon',
        yaxis_title='Share of Variance',
        legend=dict(title='Shock Source'),
        hovermode='x unified',
        height=400
    )
    return fig

# ============================================================================
# HISTORICAL DECOMPOSITION
# ============================================================================

def plot_hd(datum):
    """Shock contributions per period; positive and negative parts stack apart"""
    fig = go.Figure()
    for series in datum.contributions:
        fig.add_trace(go.Bar(
            name=series.shock,
            x=datum.dates,
            y=series.values
        ))

    fig.update_layout(
        barmode='relative',
        title=f'Historical Decomposition of {datum.variable}',
        xaxis_title='Period',
        yaxis_title='Contribution',
        legend=dict(title='Shock'),
        height=400
    )
    return fig

# ============================================================================
# FORECAST
# ============================================================================

def plot_forecast(data):
    fig = go.Figure()
    dates = list(data.dates)

    if data.actual:
        fig.add_trace(go.Scatter(
            x=dates[:len(data.actual)],
            y=data.actual,
            mode='lines',
            name='Actual',
            line=dict(color='black', width=2)
        ))

    if data.lower is not None and data.upper is not None:
        fig.add_trace(go.Scatter(
            x=dates + dates[::-1],
            y=np.concatenate([data.upper, data.lower[::-1]]),
            fill='toself',
            fillcolor='rgba(255,0,0,0.15)',
            line=dict(color='rgba(255,255,255,0)'),
            name='Forecast interval',
            hoverinfo='skip'
        ))

    fig.add_trace(go.Scatter(
        x=dates,
        y=data.forecast,
        mode='lines+markers',
        name='Forecast',
        line=dict(color='red', width=2, dash='dash')
    ))

    fig.update_layout(
        title='Forecast',
        xaxis_title='Horizon',
        yaxis_title='Value',
        hovermode='x unified',
        height=400
    )
    return fig

# ============================================================================
# SCREE PLOT
# ============================================================================

def plot_scree(data):
    """Eigenvalue bars with cumulative explained variance on a second axis"""
    factors = [d.factor for d in data]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(go.Bar(
        x=factors,
        y=[d.eigenvalue for d in data],
        name='Eigenvalue',
        marker_color='steelblue'
    ), secondary_y=False)
    fig.add_trace(go.Scatter(
        x=factors,
        y=[d.cumulative_variance for d in data],
        mode='lines+markers',
        name='Cumulative variance',
        line=dict(color='darkorange', width=2)
    ), secondary_y=True)

    fig.update_layout(title='Scree Plot', xaxis_title='Factor', height=400)
    fig.update_yaxes(title_text='Eigenvalue', secondary_y=False)
    fig.update_yaxes(title_text='Cumulative variance', secondary_y=True)
    return fig

# ============================================================================
# DISPATCH
# ============================================================================

def build_figures(match):
    """Figures for a ChartMatch from result_charts.classify"""
    if match.kind == "irf":
        return [plot_irf(datum) for datum in match.data]
    if match.kind == "fevd":
        return [plot_fevd(datum) for datum in match.data]
    if match.kind == "hd":
        return [plot_hd(datum) for datum in match.data]
    if match.kind == "forecast":
        return [plot_forecast(match.data)]
    if match.kind == "scree":
        return [plot_scree(match.data)]
    raise ValueError(f"Unknown chart kind: {match.kind}")
