# ============================================================================
# command_forms.py - Command Parameter Forms Module
# ============================================================================
"""
This module handles:
- The parameter fields shown for each engine command
- Converting raw form input (strings) into engine parameters
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

# ============================================================================
# FIELD TYPES
# ============================================================================

NUMBER = "number"
SELECT = "select"
TEXT = "text"
FLAG = "flag"


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    kind: str = NUMBER
    placeholder: str = ""
    options: Tuple[Tuple[str, str], ...] = ()
    min_value: Optional[float] = None
    max_value: Optional[float] = None


def number(name, label, placeholder="auto", min_value=None, max_value=None):
    return FormField(name, label, NUMBER, placeholder, (), min_value, max_value)


def select(name, label, options):
    return FormField(name, label, SELECT, options=options)


def text(name, label, placeholder="optional"):
    return FormField(name, label, TEXT, placeholder)


def flag(name, label):
    return FormField(name, label, FLAG)

# ============================================================================
# SHARED OPTION SETS
# ============================================================================

TREND_OPTIONS = (("none", "None"), ("constant", "Constant"), ("trend", "Trend"), ("both", "Both"))
CRITERION_OPTIONS = (("aic", "AIC"), ("bic", "BIC"), ("hqc", "HQC"))
VCOV_OPTIONS = (("hac", "HAC"), ("hc", "HC"), ("ols", "OLS"))
ID_OPTIONS = (
    ("cholesky", "Cholesky"),
    ("sign", "Sign Restrictions"),
    ("narrative", "Narrative"),
    ("longrun", "Long-Run"),
    ("arias", "Arias"),
)
CI_OPTIONS = (("none", "None"), ("bootstrap", "Bootstrap"), ("theoretical", "Theoretical"))
PRIOR_OPTIONS = (("minnesota", "Minnesota"), ("normal-wishart", "Normal-Wishart"), ("ssvs", "SSVS"))
SAMPLER_OPTIONS = (("gibbs", "Gibbs"), ("mh", "Metropolis-Hastings"))
WEIGHTING_OPTIONS = (("optimal", "Optimal"), ("two-step", "Two-Step"), ("identity", "Identity"))

LAGS = number("lags", "Lags", min_value=1, max_value=24)
HORIZONS = number("horizons", "Horizons", "20", min_value=1, max_value=100)
COLUMN = number("column", "Column", "1", min_value=1)
TREND = select("trend", "Trend", TREND_OPTIONS)
IDENTIFICATION = select("id", "Identification", ID_OPTIONS)
SHOCK = number("shock", "Shock (column)", min_value=0)
CONTROL_LAGS = number("control_lags", "Control Lags", min_value=0, max_value=24)
VCOV = select("vcov", "VCov", VCOV_OPTIONS)
DRAWS = number("draws", "Draws", "1000", min_value=100)
SAMPLER = select("sampler", "Sampler", SAMPLER_OPTIONS)
CONFIG = text("config", "Config (TOML path)")
BAYESIAN = flag("bayesian", "Bayesian")

ARIMA_ORDER = (
    COLUMN,
    number("p", "p (AR)", "1", min_value=0),
    number("d", "d (Diff)", "0", min_value=0, max_value=3),
    number("q", "q (MA)", "0", min_value=0),
)

IRF_FIELDS = (
    SHOCK,
    HORIZONS,
    LAGS,
    IDENTIFICATION,
    select("ci", "Confidence Interval", CI_OPTIONS),
    number("replications", "Replications", "500", min_value=100),
    CONFIG,
)

FEVD_FIELDS = (HORIZONS, LAGS, IDENTIFICATION, CONFIG)
HD_FIELDS = (LAGS, IDENTIFICATION, CONFIG)
FORECAST_FIELDS = (LAGS, HORIZONS, number("confidence", "Confidence", "0.95"))
UNIT_ROOT_FIELDS = (COLUMN, number("max_lags", "Max Lags", min_value=1, max_value=24), TREND)
LP_FIELDS = (SHOCK, HORIZONS, CONTROL_LAGS, VCOV)
BVAR_POST_FIELDS = (LAGS, DRAWS, SAMPLER, CONFIG)
FACTOR_FIELDS = (number("nfactors", "Number of Factors", min_value=1), text("criterion", "Criterion"))

# ============================================================================
# FORMS PER COMMAND
# ============================================================================

COMMAND_FORMS = {
    # VAR
    "var-estimate": (LAGS, TREND),
    "var-lagselect": (number("max_lags", "Max Lags", min_value=1, max_value=24),
                      select("criterion", "Criterion", CRITERION_OPTIONS)),
    "var-stability": (LAGS,),
    "var-irf": IRF_FIELDS,
    "var-fevd": FEVD_FIELDS,
    "var-hd": HD_FIELDS,
    "var-forecast": FORECAST_FIELDS,
    # BVAR
    "bvar-estimate": (LAGS, select("prior", "Prior", PRIOR_OPTIONS), DRAWS, SAMPLER, CONFIG),
    "bvar-posterior": (LAGS, DRAWS, SAMPLER, text("method", "Method"), CONFIG),
    "bvar-irf": (SHOCK, HORIZONS, IDENTIFICATION) + BVAR_POST_FIELDS,
    "bvar-fevd": (HORIZONS, IDENTIFICATION) + BVAR_POST_FIELDS,
    "bvar-hd": (IDENTIFICATION,) + BVAR_POST_FIELDS,
    "bvar-forecast": (HORIZONS,) + BVAR_POST_FIELDS,
    # Generic engine commands
    "irf-compute": IRF_FIELDS + (BAYESIAN, DRAWS, SAMPLER),
    "fevd-compute": FEVD_FIELDS + (BAYESIAN, DRAWS, SAMPLER),
    "hd-compute": HD_FIELDS + (BAYESIAN, DRAWS, SAMPLER),
    # Local projections
    "lp-estimate": LP_FIELDS,
    "lp-irf": LP_FIELDS,
    "lp-fevd": (SHOCK, HORIZONS, CONTROL_LAGS),
    "lp-hd": (SHOCK, CONTROL_LAGS),
    "lp-forecast": (SHOCK, HORIZONS, CONTROL_LAGS),
    "lp-iv": (SHOCK, text("instruments", "Instruments", "column indices"), HORIZONS, CONTROL_LAGS, VCOV),
    "lp-smooth": (SHOCK, HORIZONS, number("knots", "Knots", min_value=1), number("lambda", "Lambda")),
    "lp-state": (SHOCK, number("state_var", "State Variable", "column index", min_value=0), HORIZONS,
                 number("gamma", "Gamma"), text("method", "Method")),
    "lp-propensity": (number("treatment", "Treatment (column)", min_value=0), HORIZONS,
                      text("score_method", "Score Method")),
    "lp-multi": (text("shocks", "Shocks", "e.g. 1,2"), HORIZONS, CONTROL_LAGS, VCOV),
    "lp-robust": (number("treatment", "Treatment (column)", min_value=0), HORIZONS,
                  text("score_method", "Score Method")),
    # Factor models
    "factor-estimate": (select("model", "Model", (("static", "Static"), ("dynamic", "Dynamic"),
                                                   ("gdfm", "GDFM"))),) + FACTOR_FIELDS,
    "factor-forecast": (number("nfactors", "Number of Factors", min_value=1), HORIZONS),
    "factor-static": FACTOR_FIELDS,
    "factor-dynamic": (number("nfactors", "Number of Factors", min_value=1),
                       number("factor_lags", "Factor Lags", min_value=1), text("method", "Method")),
    "factor-gdfm": (number("nfactors", "Number of Factors", min_value=1),
                    number("dynamic_rank", "Dynamic Rank", min_value=1)),
    # Non-Gaussian SVAR
    "nongaussian-normality": (LAGS,),
    "nongaussian-fastica": (LAGS, text("method", "Method")),
    "nongaussian-ml": (LAGS, text("distribution", "Distribution")),
    "nongaussian-heteroskedasticity": (LAGS, text("method", "Method")),
    "nongaussian-identifiability": (LAGS, text("test", "Test")),
    # Unit root tests
    "test-adf": UNIT_ROOT_FIELDS,
    "test-kpss": (COLUMN, TREND),
    "test-pp": (COLUMN, TREND),
    "test-za": (COLUMN, TREND, number("trim", "Trim", "0.15")),
    "test-np": (COLUMN, TREND),
    "test-johansen": (LAGS, TREND),
    # GMM / ARIMA
    "gmm-estimate": (CONFIG, select("weighting", "Weighting", WEIGHTING_OPTIONS)),
    "arima-estimate": ARIMA_ORDER + (text("method", "Method"),),
    "arima-auto": (COLUMN, number("max_p", "Max p", "5", min_value=0, max_value=24),
                   number("max_d", "Max d", "2", min_value=0, max_value=3),
                   number("max_q", "Max q", "5", min_value=0, max_value=24),
                   select("criterion", "Criterion", CRITERION_OPTIONS), text("method", "Method")),
    "arima-forecast": ARIMA_ORDER + (number("horizons", "Horizons", "10", min_value=1),
                                     number("confidence", "Confidence", "0.95"),
                                     text("method", "Method")),
}


def form_fields(command):
    """Fields for a command's form; commands without a form take only the dataset"""
    return COMMAND_FORMS.get(command, ())

# ============================================================================
# PARAMETER CONVERSION
# ============================================================================

def parse_number(raw):
    """Parse form text as int or float, or None when it is not a number"""
    if raw is None:
        return None
    raw = str(raw).strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def build_params(command, fields, data_path):
    """
    Turn raw form values into engine parameters.

    Number fields are kept only when they parse, text and select fields only
    when non-blank, flags only when set to "true".
    """
    params = {"data": data_path}

    for form_field in form_fields(command):
        raw = fields.get(form_field.name)
        if raw is None:
            continue

        if form_field.kind == NUMBER:
            value = parse_number(raw)
            if value is not None:
                params[form_field.name] = value
        elif form_field.kind == FLAG:
            if raw is True or str(raw).strip().lower() == "true":
                params[form_field.name] = True
        else:
            value = str(raw).strip()
            if value:
                params[form_field.name] = value

    return params
