from __future__ import annotations

import math

import pytest

from result_charts import (
    CHART_RULES,
    ChartMatch,
    ForecastData,
    chart_kind,
    classify,
    to_number,
    transform_fevd,
    transform_forecast,
    transform_hd,
    transform_irf,
    transform_scree,
)


# ---------------------------------------------------------------------------
# to_number
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, 1.0), (0.25, 0.25), ("2.5", 2.5), (" 3 ", 3.0), (True, 1.0), (False, 0.0)],
)
def test_to_number_parses_numbers(value: object, expected: float) -> None:
    assert to_number(value) == expected


@pytest.mark.parametrize("value", [None, "abc", "", [1], {"a": 1}, float("nan"), 10**400])
def test_to_number_falls_back_to_nan(value: object) -> None:
    assert math.isnan(to_number(value))


# ---------------------------------------------------------------------------
# IRF
# ---------------------------------------------------------------------------


def test_irf_with_lower_upper_bands() -> None:
    rows = [
        {"horizon": 0, "gdp": 0.5, "gdp_lower": 0.3, "gdp_upper": 0.7, "cpi": 0.1, "cpi_lower": 0.0, "cpi_upper": 0.2},
        {"horizon": 1, "gdp": 0.4, "gdp_lower": 0.2, "gdp_upper": 0.6, "cpi": 0.15, "cpi_lower": 0.05, "cpi_upper": 0.25},
    ]
    data = transform_irf(rows)
    assert data is not None
    assert [d.response for d in data] == ["gdp", "cpi"]

    gdp = data[0]
    assert gdp.impulse == "Shock"
    assert gdp.horizon == [0, 1]
    assert gdp.irf == [0.5, 0.4]
    assert gdp.lower == [0.3, 0.2]
    assert gdp.upper == [0.7, 0.6]
    assert data[1].irf == [0.1, 0.15]


def test_irf_classified_for_every_irf_command() -> None:
    rows = [
        {"horizon": 0, "gdp": 0.5, "gdp_lower": 0.3, "gdp_upper": 0.7},
        {"horizon": 1, "gdp": 0.4, "gdp_lower": 0.2, "gdp_upper": 0.6},
    ]
    for command in ("var-irf", "bvar-irf", "lp-irf", "irf-compute"):
        match = classify(command, rows)
        assert match is not None
        assert match.kind == "irf"
        assert len(match.data) == 1
        assert match.data[0].horizon == [0, 1]
        assert match.data[0].irf == [0.5, 0.4]
        assert match.data[0].lower == [0.3, 0.2]
        assert match.data[0].upper == [0.7, 0.6]


def test_irf_percentile_band_convention_matches_lower_upper() -> None:
    percentile = transform_irf([
        {"horizon": 0, "y": 1.0, "y_16pct": 0.8, "y_84pct": 1.2},
        {"horizon": 1, "y": 0.9, "y_16pct": 0.7, "y_84pct": 1.1},
    ])
    named = transform_irf([
        {"horizon": 0, "y": 1.0, "y_lower": 0.8, "y_upper": 1.2},
        {"horizon": 1, "y": 0.9, "y_lower": 0.7, "y_upper": 1.1},
    ])
    assert percentile is not None and named is not None
    assert percentile == named
    assert percentile[0].lower == [0.8, 0.7]
    assert percentile[0].upper == [1.2, 1.1]


def test_irf_without_bands() -> None:
    data = transform_irf([{"horizon": 0, "y": 1.0}, {"horizon": 1, "y": 0.9}])
    assert data is not None
    assert data[0].lower is None
    assert data[0].upper is None


def test_irf_one_sided_band() -> None:
    data = transform_irf([{"horizon": 0, "y": 1.0, "y_lower": 0.5}])
    assert data is not None
    assert data[0].lower == [0.5]
    assert data[0].upper is None


def test_irf_requires_horizon_and_a_base_column() -> None:
    assert transform_irf([{"gdp": 0.5}]) is None
    assert transform_irf([{"horizon": 0}]) is None
    assert transform_irf([{"horizon": 0, "gdp_lower": 0.1, "gdp_upper": 0.2}]) is None


def test_irf_coerces_non_numeric_values() -> None:
    data = transform_irf([{"horizon": "0", "y": "0.5"}, {"horizon": 1, "y": None}])
    assert data is not None
    assert data[0].horizon == [0.0, 1.0]
    assert data[0].irf[0] == 0.5
    assert math.isnan(data[0].irf[1])


# ---------------------------------------------------------------------------
# FEVD
# ---------------------------------------------------------------------------


def test_fevd_single_response_with_one_series_per_shock() -> None:
    rows = [
        {"horizon": 1, "gdp": 0.8, "cpi": 0.2},
        {"horizon": 2, "gdp": 0.7, "cpi": 0.3},
    ]
    data = transform_fevd(rows)
    assert data is not None
    assert len(data) == 1
    assert data[0].variable == "Response"
    assert data[0].horizon == [1, 2]
    assert [(s.shock, s.values) for s in data[0].decomposition] == [
        ("gdp", [0.8, 0.7]),
        ("cpi", [0.2, 0.3]),
    ]


def test_fevd_requires_horizon_and_a_shock() -> None:
    assert transform_fevd([{"gdp": 0.8}]) is None
    assert transform_fevd([{"horizon": 1}]) is None


# ---------------------------------------------------------------------------
# Historical decomposition
# ---------------------------------------------------------------------------


def test_hd_requires_a_contribution_column() -> None:
    assert transform_hd([{"period": 1, "actual": 100}]) is None
    assert classify("var-hd", [{"period": 1, "actual": 100}]) is None


def test_hd_single_contribution() -> None:
    match = classify("var-hd", [{"period": 1, "contrib_x": 0.5}])
    assert match is not None
    assert match.kind == "hd"
    assert len(match.data) == 1
    assert match.data[0].dates == ["1"]
    assert len(match.data[0].contributions) == 1
    assert match.data[0].contributions[0].shock == "x"
    assert match.data[0].contributions[0].values == [0.5]


def test_hd_ignores_level_columns_and_strips_prefix() -> None:
    rows = [
        {"period": "2020Q1", "actual": 1.0, "initial": 0.2, "contrib_demand": 0.5, "contrib_supply": 0.3},
        {"period": "2020Q2", "actual": 1.1, "initial": 0.2, "contrib_demand": 0.6, "contrib_supply": 0.3},
    ]
    data = transform_hd(rows)
    assert data is not None
    assert data[0].variable == "Variable"
    assert data[0].dates == ["2020Q1", "2020Q2"]
    assert [c.shock for c in data[0].contributions] == ["demand", "supply"]


def test_hd_requires_period() -> None:
    assert transform_hd([{"contrib_x": 0.5}]) is None


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


def test_forecast_with_interval() -> None:
    rows = [
        {"horizon": 1, "forecast": 2.0, "ci_lower": 1.5, "ci_upper": 2.5},
        {"horizon": 2, "forecast": 2.1, "ci_lower": 1.4, "ci_upper": 2.8},
    ]
    data = transform_forecast(rows)
    assert data == ForecastData(
        dates=["1", "2"],
        forecast=[2.0, 2.1],
        actual=[],
        lower=[1.5, 1.4],
        upper=[2.5, 2.8],
    )


def test_forecast_date_axis_falls_back_to_period_then_blank() -> None:
    by_period = transform_forecast([{"period": "2024-01", "forecast": 1.0}])
    assert by_period is not None
    assert by_period.dates == ["2024-01"]

    blank = transform_forecast([{"forecast": 1.0}, {"forecast": 2.0}])
    assert blank is not None
    assert blank.dates == ["", ""]
    assert blank.lower is None and blank.upper is None
    assert blank.actual == []


def test_forecast_null_horizon_uses_period_per_row() -> None:
    data = transform_forecast([
        {"horizon": None, "period": "p1", "forecast": 1.0},
        {"horizon": 2, "period": "p2", "forecast": 1.0},
    ])
    assert data is not None
    assert data.dates == ["p1", "2"]


def test_forecast_requires_forecast_column() -> None:
    assert transform_forecast([{"horizon": 1, "value": 2.0}]) is None


def test_forecast_family_includes_arima_and_factor() -> None:
    rows = [{"horizon": 1, "forecast": 2.0}]
    for command in ("var-forecast", "bvar-forecast", "lp-forecast", "arima-forecast", "factor-forecast"):
        match = classify(command, rows)
        assert match is not None and match.kind == "forecast"


# ---------------------------------------------------------------------------
# Scree
# ---------------------------------------------------------------------------

SCREE_ROWS = [
    {"component": 1, "eigenvalue": 3.2, "cumulative": 0.55},
    {"component": 2, "eigenvalue": 1.1, "cumulative": 0.74},
]


def test_scree_one_point_per_row() -> None:
    match = classify("factor-estimate", SCREE_ROWS)
    assert match is not None
    assert match.kind == "scree"
    assert [(d.factor, d.eigenvalue, d.cumulative_variance) for d in match.data] == [
        (1, 3.2, 0.55),
        (2, 1.1, 0.74),
    ]


@pytest.mark.parametrize("dropped", ["component", "eigenvalue", "cumulative"])
def test_scree_requires_all_three_columns(dropped: str) -> None:
    rows = [{k: v for k, v in row.items() if k != dropped} for row in SCREE_ROWS]
    assert transform_scree(SCREE_ROWS) is not None
    assert transform_scree(rows) is None
    assert classify("factor-estimate", rows) is None


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def test_commands_outside_every_family_never_classify() -> None:
    rows = [{"horizon": 0, "gdp": 0.5}]
    for command in ("var-estimate", "test-adf", "gmm-estimate", "__main_menu", ""):
        assert classify(command, rows) is None
        assert chart_kind(command) is None


def test_families_do_not_overlap() -> None:
    seen: set[str] = set()
    for rule in CHART_RULES:
        assert not (rule.commands & seen)
        seen |= rule.commands


@pytest.mark.parametrize(
    "result",
    [
        None,
        [],
        [{}],
        [{}, {}],
        {},
        {"horizon": [0, 1]},
        "horizon",
        42,
        True,
        [None],
        [1, 2, 3],
        [[0, 1]],
        [{"horizon": 0, "gdp": 1.0}, "oops"],
        [{"horizon": {"nested": 1}, "gdp": [1, 2], "forecast": None}],
    ],
)
def test_classify_is_total(result: object) -> None:
    for rule in CHART_RULES:
        for command in rule.commands:
            match = classify(command, result)
            assert match is None or isinstance(match, ChartMatch)


def test_odd_inputs_yield_none() -> None:
    for result in (None, [], [{}], {}, "x", 3, [None]):
        for command in ("var-irf", "var-fevd", "var-hd", "var-forecast", "factor-estimate"):
            assert classify(command, result) is None


def test_heterogeneous_rows_use_first_row_columns() -> None:
    data = transform_irf([{"horizon": 0, "y": 1.0}, {"horizon": 1, "z": 2.0}])
    assert data is not None
    assert [d.response for d in data] == ["y"]
    assert data[0].irf[0] == 1.0
    assert math.isnan(data[0].irf[1])


def test_classify_is_idempotent() -> None:
    rows = [{"horizon": 0, "y": 1.0, "y_lower": 0.5, "y_upper": 1.5}]
    assert classify("var-irf", rows) == classify("var-irf", rows)
    assert rows == [{"horizon": 0, "y": 1.0, "y_lower": 0.5, "y_upper": 1.5}]
