# ============================================================================
# result_charts.py - Result Classification and Chart Reshaping Module
# ============================================================================
"""
This module handles:
- Recognising which chart a tabular engine result can feed
  (IRF, FEVD, historical decomposition, forecast, scree plot)
- Reshaping flat result rows into the structure each chart needs
- Numeric coercion so charts never receive non-numeric values

Results carry no explicit "kind" tag: the command family narrows the
candidate chart and the column names decide whether the rows fit it.
Anything that does not fit yields None so the caller can fall back to a
plain table.
"""

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np
import pandas as pd

# ============================================================================
# CHART DATA TYPES
# ============================================================================

@dataclass
class IRFDatum:
    impulse: str
    response: str
    horizon: List[float]
    irf: List[float]
    lower: Optional[List[float]] = None
    upper: Optional[List[float]] = None


@dataclass
class ShockSeries:
    shock: str
    values: List[float]


@dataclass
class FEVDDatum:
    variable: str
    horizon: List[float]
    decomposition: List[ShockSeries]


@dataclass
class HDDatum:
    variable: str
    dates: List[str]
    contributions: List[ShockSeries]


@dataclass
class ForecastData:
    dates: List[str]
    forecast: List[float]
    actual: List[float] = field(default_factory=list)
    lower: Optional[List[float]] = None
    upper: Optional[List[float]] = None


@dataclass
class ScreeDatum:
    factor: float
    eigenvalue: float
    cumulative_variance: float


@dataclass
class ChartMatch:
    kind: str
    data: object

# ============================================================================
# HELPERS
# ============================================================================

CI_SUFFIXES = ("_lower", "_upper", "_16pct", "_84pct")
LOWER_SUFFIXES = ("_lower", "_16pct")
UPPER_SUFFIXES = ("_upper", "_84pct")
CONTRIB_PREFIX = "contrib_"


def to_number(value):
    """Permissive numeric parse; anything that is not a number becomes NaN"""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (numbers.Real, str)):
        try:
            return float(value)
        except (OverflowError, ValueError):
            return np.nan
    return np.nan


def _is_missing(value):
    return value is None or (isinstance(value, float) and math.isnan(value))


def _text(value):
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def result_frame(result):
    """
    Load a tabular result into a DataFrame.

    Rows must all be mappings; the column set is taken from the first row and
    columns missing from later rows are filled with NaN. Returns None for
    anything that is not a non-empty list of rows.
    """
    if not isinstance(result, list) or not result:
        return None
    if not all(isinstance(row, Mapping) for row in result):
        return None

    columns = list(result[0].keys())
    return pd.DataFrame([dict(row) for row in result], columns=columns, dtype=object)


def _numbers(frame, column):
    return [to_number(v) for v in frame[column].tolist()]


def _find_band(columns, name, suffixes):
    for suffix in suffixes:
        candidate = f"{name}{suffix}"
        if candidate in columns:
            return candidate
    return None

# ============================================================================
# IRF TRANSFORM
# ============================================================================

def transform_irf(result):
    """One IRF series per response column, with optional confidence bands"""
    frame = result_frame(result)
    if frame is None or "horizon" not in frame.columns:
        return None

    columns = list(frame.columns)
    base_vars = [
        c for c in columns
        if c != "horizon" and not any(str(c).endswith(s) for s in CI_SUFFIXES)
    ]
    if not base_vars:
        return None

    horizons = _numbers(frame, "horizon")

    data = []
    for var_name in base_vars:
        datum = IRFDatum(
            impulse="Shock",
            response=str(var_name),
            horizon=list(horizons),
            irf=_numbers(frame, var_name),
        )

        lower_key = _find_band(columns, var_name, LOWER_SUFFIXES)
        upper_key = _find_band(columns, var_name, UPPER_SUFFIXES)
        if lower_key is not None:
            datum.lower = _numbers(frame, lower_key)
        if upper_key is not None:
            datum.upper = _numbers(frame, upper_key)

        data.append(datum)

    return data

# ============================================================================
# FEVD TRANSFORM
# ============================================================================

def transform_fevd(result):
    """Single response: every non-horizon column is one shock's variance share"""
    frame = result_frame(result)
    if frame is None or "horizon" not in frame.columns:
        return None

    shock_names = [c for c in frame.columns if c != "horizon"]
    if not shock_names:
        return None

    decomposition = [ShockSeries(str(shock), _numbers(frame, shock)) for shock in shock_names]
    return [FEVDDatum(variable="Response", horizon=_numbers(frame, "horizon"),
                      decomposition=decomposition)]

# ============================================================================
# HISTORICAL DECOMPOSITION TRANSFORM
# ============================================================================

def transform_hd(result):
    """Shock contributions over time; only contrib_* columns are drawn"""
    frame = result_frame(result)
    if frame is None or "period" not in frame.columns:
        return None

    contrib_keys = [c for c in frame.columns if str(c).startswith(CONTRIB_PREFIX)]
    if not contrib_keys:
        return None

    dates = [_text(v) for v in frame["period"].tolist()]
    contributions = [
        ShockSeries(str(k)[len(CONTRIB_PREFIX):], _numbers(frame, k))
        for k in contrib_keys
    ]
    return [HDDatum(variable="Variable", dates=dates, contributions=contributions)]

# ============================================================================
# FORECAST TRANSFORM
# ============================================================================

def transform_forecast(result):
    """Forecast path with optional ci_lower/ci_upper bounds"""
    frame = result_frame(result)
    if frame is None or "forecast" not in frame.columns:
        return None

    n_rows = len(frame)
    horizons = frame["horizon"].tolist() if "horizon" in frame.columns else [None] * n_rows
    periods = frame["period"].tolist() if "period" in frame.columns else [None] * n_rows
    dates = [
        _text(h) if not _is_missing(h) else _text(p)
        for h, p in zip(horizons, periods)
    ]

    # The engine never returns history alongside a forecast
    data = ForecastData(dates=dates, forecast=_numbers(frame, "forecast"), actual=[])

    if "ci_lower" in frame.columns:
        data.lower = _numbers(frame, "ci_lower")
    if "ci_upper" in frame.columns:
        data.upper = _numbers(frame, "ci_upper")

    return data

# ============================================================================
# SCREE TRANSFORM
# ============================================================================

SCREE_COLUMNS = ("component", "eigenvalue", "cumulative")


def transform_scree(result):
    """Factor eigenvalues and cumulative explained variance, one point per row"""
    frame = result_frame(result)
    if frame is None or not all(c in frame.columns for c in SCREE_COLUMNS):
        return None

    components = _numbers(frame, "component")
    eigenvalues = _numbers(frame, "eigenvalue")
    cumulative = _numbers(frame, "cumulative")
    return [
        ScreeDatum(factor=c, eigenvalue=e, cumulative_variance=v)
        for c, e, v in zip(components, eigenvalues, cumulative)
    ]

# ============================================================================
# DISPATCHER
# ============================================================================

@dataclass(frozen=True)
class ChartRule:
    kind: str
    commands: frozenset
    transform: Callable


CHART_RULES = (
    ChartRule("irf", frozenset({"var-irf", "bvar-irf", "lp-irf", "irf-compute"}), transform_irf),
    ChartRule("fevd", frozenset({"var-fevd", "bvar-fevd", "lp-fevd", "fevd-compute"}), transform_fevd),
    ChartRule("hd", frozenset({"var-hd", "bvar-hd", "lp-hd", "hd-compute"}), transform_hd),
    ChartRule(
        "forecast",
        frozenset({"var-forecast", "bvar-forecast", "lp-forecast", "arima-forecast", "factor-forecast"}),
        transform_forecast,
    ),
    ChartRule(
        "scree",
        frozenset({"factor-estimate", "factor-static", "factor-dynamic", "factor-gdfm"}),
        transform_scree,
    ),
)


def chart_kind(command):
    for rule in CHART_RULES:
        if command in rule.commands:
            return rule.kind
    return None


def classify(command, result):
    """
    Chart data for a command result, or None when no chart can be drawn.
    Commands outside every chart family never look at the result.
    """
    for rule in CHART_RULES:
        if command in rule.commands:
            data = rule.transform(result)
            if data is None:
                return None
            return ChartMatch(kind=rule.kind, data=data)
    return None
