# ============================================================================
# workflow_graph.py - Analysis Journal Workflow Module
# ============================================================================
"""
This module handles:
- The top menu (with the "load data first" short-circuit)
- Static sub-menus for each analysis family
- Next-step prompts after a command completes, including the
  stability-dependent branch after a VAR stability check

Every query is a pure function of its arguments. The journal keeps the
history; this module only answers "what should the user see next".
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Tuple

from command_catalog import MAIN_MENU, NAVIGATE_DATA

# ============================================================================
# PROMPT TYPES
# ============================================================================

@dataclass(frozen=True)
class Choice:
    label: str
    command: str
    description: str


@dataclass(frozen=True)
class Prompt:
    message: str
    options: Tuple[Choice, ...]

    @property
    def commands(self):
        return [option.command for option in self.options]


def _prompt(message, *options):
    return Prompt(message, tuple(Choice(*option) for option in options))


NEW_ANALYSIS = ("New Analysis", MAIN_MENU, "Start fresh")

# ============================================================================
# TOP MENU
# ============================================================================

NO_DATA_MENU = _prompt(
    "Welcome to the analysis journal. Load a dataset first to begin your analysis.",
    ("Go to Data Page", NAVIGATE_DATA, "Import CSV or Excel data"),
)

MAIN_MENU_PROMPT = _prompt(
    "What would you like to do?",
    ("Unit Root Tests", "__menu_unitroot", "ADF, KPSS, PP, ZA, NP tests"),
    ("VAR Analysis", "__menu_var", "Vector Autoregression"),
    ("BVAR Analysis", "__menu_bvar", "Bayesian VAR"),
    ("Local Projections", "__menu_lp", "LP estimation methods"),
    ("Factor Models", "__menu_factor", "Static, Dynamic, GDFM"),
    ("ARIMA", "__menu_arima", "Univariate time series"),
    ("GMM", "__menu_gmm", "Generalized Method of Moments"),
    ("Non-Gaussian SVAR", "__menu_nongaussian", "ICA, ML, heteroskedasticity identification"),
)


def top_menu(has_data):
    """Entry prompt; without a dataset the only way forward is the data page"""
    if not has_data:
        return NO_DATA_MENU
    return MAIN_MENU_PROMPT

# ============================================================================
# SUB-MENUS
# ============================================================================

VAR_POST_ESTIMATION = (
    ("VAR IRF", "var-irf", "Impulse response functions"),
    ("VAR FEVD", "var-fevd", "Variance decomposition"),
    ("VAR HD", "var-hd", "Historical decomposition"),
    ("VAR Forecast", "var-forecast", "Point forecasts"),
)

BVAR_POST_ESTIMATION = (
    ("BVAR IRF", "bvar-irf", "Bayesian impulse responses"),
    ("BVAR FEVD", "bvar-fevd", "Bayesian variance decomposition"),
    ("BVAR HD", "bvar-hd", "Bayesian historical decomposition"),
    ("BVAR Forecast", "bvar-forecast", "Bayesian forecasts"),
)

LP_POST_ESTIMATION = (
    ("LP IRF", "lp-irf", "Structural LP impulse responses"),
    ("LP FEVD", "lp-fevd", "LP variance decomposition"),
    ("LP HD", "lp-hd", "LP historical decomposition"),
    ("LP Forecast", "lp-forecast", "Direct LP forecasts"),
)

MENU_GRAPH = {
    "__menu_unitroot": _prompt(
        "Which unit root test would you like to run?",
        ("ADF Test", "test-adf", "Augmented Dickey-Fuller"),
        ("KPSS Test", "test-kpss", "Kwiatkowski-Phillips-Schmidt-Shin"),
        ("Phillips-Perron", "test-pp", "Phillips-Perron test"),
        ("Zivot-Andrews", "test-za", "Structural break unit root"),
        ("Ng-Perron", "test-np", "Modified unit root tests"),
    ),
    "__menu_var": _prompt(
        "VAR Analysis: estimation",
        ("Lag Selection", "var-lagselect", "Select optimal lag order"),
        ("VAR Estimate", "var-estimate", "Estimate the VAR model"),
        ("Stability Check", "var-stability", "Check eigenvalue stability"),
    ),
    "__menu_var2": _prompt("VAR Analysis: post-estimation", *VAR_POST_ESTIMATION),
    "__menu_bvar": _prompt(
        "BVAR Analysis: estimation",
        ("BVAR Estimate", "bvar-estimate", "Estimate Bayesian VAR"),
        ("BVAR Posterior", "bvar-posterior", "Posterior analysis"),
    ),
    "__menu_bvar2": _prompt("BVAR Analysis: post-estimation", *BVAR_POST_ESTIMATION),
    "__menu_lp": _prompt(
        "Local Projections: estimation",
        ("LP Estimate", "lp-estimate", "LP estimation (method selected in form)"),
    ),
    "__menu_lp2": _prompt("Local Projections: post-estimation", *LP_POST_ESTIMATION),
    "__menu_factor": _prompt(
        "Which factor model operation?",
        ("Factor Estimate", "factor-estimate", "Estimate factor model (static/dynamic/gdfm)"),
        ("Factor Forecast", "factor-forecast", "Forecast using factor model"),
    ),
    "__menu_arima": _prompt(
        "ARIMA: what would you like to do?",
        ("ARIMA Estimate", "arima-estimate", "ARIMA(p,d,q) or auto (omit p)"),
        ("ARIMA Forecast", "arima-forecast", "Generate forecasts"),
    ),
    "__menu_gmm": _prompt(
        "GMM Estimation",
        ("GMM Estimate", "gmm-estimate", "Generalized Method of Moments"),
    ),
    "__menu_nongaussian": _prompt(
        "Non-Gaussian SVAR: which method?",
        ("Normality Tests", "nongaussian-normality", "Test VAR residual normality"),
        ("FastICA", "nongaussian-fastica", "ICA-based identification"),
        ("ML Estimation", "nongaussian-ml", "Maximum likelihood non-Gaussian"),
        ("Heteroskedasticity", "nongaussian-heteroskedasticity", "Volatility-based identification"),
        ("Identifiability Tests", "nongaussian-identifiability", "Test identification conditions"),
    ),
}


def sub_menu(token) -> Optional[Prompt]:
    """Sub-menu for a menu token, or None when the token is not a menu"""
    return MENU_GRAPH.get(token)

# ============================================================================
# NEXT STEPS
# ============================================================================

FALLBACK_PROMPT = _prompt(
    "What would you like to do next?",
    ("Main Menu", MAIN_MENU, "Back to main menu"),
)

STABLE_FIELDS = ("stable", "is_stable")

VAR_STABLE = _prompt("VAR is stable. Proceed with analysis:", *VAR_POST_ESTIMATION)

VAR_UNSTABLE = _prompt(
    "VAR may be unstable. Consider re-estimating with different lags.",
    ("Re-estimate VAR", "var-estimate", "Try different specification"),
    ("Lag Selection", "var-lagselect", "Re-select optimal lags"),
    ("VAR IRF (anyway)", "var-irf", "Proceed despite instability"),
)


def is_stable(result):
    """
    Read the stability flag from a stability-check result.
    Stable when either flag field holds a real boolean True.
    """
    if not isinstance(result, Mapping):
        return False
    return any(result.get(field) is True for field in STABLE_FIELDS)


def _after_stability(result):
    return VAR_STABLE if is_stable(result) else VAR_UNSTABLE


UNIT_ROOT_DONE = _prompt(
    "Unit root test complete. What next?",
    ("Run Another Test", "__menu_unitroot", "Compare with another test"),
    ("Johansen Cointegration", "test-johansen", "Multivariate cointegration"),
    ("Proceed to Estimation", MAIN_MENU, "Back to main menu"),
)

COMPUTATION_DONE = _prompt(
    "Computation complete.",
    ("New Analysis", MAIN_MENU, "Start a new analysis"),
)

BVAR_DONE = _prompt(
    "BVAR analysis complete. What next?",
    ("More BVAR Analysis", "__menu_bvar2", "Other BVAR post-estimation"),
    NEW_ANALYSIS,
)

LP_DONE = _prompt(
    "LP analysis complete. What next?",
    ("More LP Analysis", "__menu_lp2", "Other LP post-estimation"),
    NEW_ANALYSIS,
)

NONGAUSSIAN_IDENTIFIED = _prompt(
    "Non-Gaussian SVAR identified. What next?",
    ("Identifiability Tests", "nongaussian-identifiability", "Verify identification"),
    ("Try Another Method", "__menu_nongaussian", "Different identification method"),
    NEW_ANALYSIS,
)

TRANSITIONS = {
    # Unit root tests
    "test-adf": UNIT_ROOT_DONE,
    "test-kpss": UNIT_ROOT_DONE,
    "test-pp": UNIT_ROOT_DONE,
    "test-za": UNIT_ROOT_DONE,
    "test-np": UNIT_ROOT_DONE,
    "test-johansen": _prompt(
        "Cointegration test complete. What next?",
        ("VAR Analysis", "__menu_var", "Estimate a VAR model"),
        ("Main Menu", MAIN_MENU, "Back to main menu"),
    ),
    # VAR
    "var-lagselect": _prompt(
        "Lag selection complete. Proceed with VAR estimation?",
        ("VAR Estimate", "var-estimate", "Estimate the VAR model"),
        ("Main Menu", MAIN_MENU, "Back to main menu"),
    ),
    "var-estimate": _prompt(
        "VAR estimated. What next?",
        ("Stability Check", "var-stability", "Check eigenvalue stability"),
        *VAR_POST_ESTIMATION,
    ),
    "var-stability": _after_stability,
    "var-irf": _prompt(
        "VAR IRF computed. What next?",
        ("VAR FEVD", "var-fevd", "Variance decomposition"),
        ("VAR HD", "var-hd", "Historical decomposition"),
        NEW_ANALYSIS,
    ),
    "var-fevd": _prompt(
        "VAR FEVD computed. What next?",
        ("VAR HD", "var-hd", "Historical decomposition"),
        ("VAR IRF", "var-irf", "Impulse response functions"),
        NEW_ANALYSIS,
    ),
    "var-hd": COMPUTATION_DONE,
    "var-forecast": COMPUTATION_DONE,
    # BVAR
    "bvar-estimate": _prompt(
        "BVAR estimated. What next?",
        ("BVAR Posterior", "bvar-posterior", "Posterior analysis"),
        *BVAR_POST_ESTIMATION,
    ),
    "bvar-posterior": _prompt(
        "Posterior analysis complete. What next?",
        ("BVAR IRF", "bvar-irf", "Bayesian impulse responses"),
        NEW_ANALYSIS,
    ),
    "bvar-irf": BVAR_DONE,
    "bvar-fevd": BVAR_DONE,
    "bvar-hd": BVAR_DONE,
    "bvar-forecast": BVAR_DONE,
    # Local projections
    "lp-estimate": _prompt(
        "Local projection estimated. What next?",
        *LP_POST_ESTIMATION,
        ("Try Another Method", "lp-estimate", "Estimate with different method"),
    ),
    "lp-irf": LP_DONE,
    "lp-fevd": LP_DONE,
    "lp-hd": LP_DONE,
    "lp-forecast": LP_DONE,
    # Factor models
    "factor-estimate": _prompt(
        "Factor model estimated. What next?",
        ("Factor Forecast", "factor-forecast", "Forecast using factor model"),
        NEW_ANALYSIS,
    ),
    "factor-forecast": _prompt(
        "Factor forecast generated. What next?",
        ("Try Another Model", "__menu_factor", "Different factor model"),
        NEW_ANALYSIS,
    ),
    # ARIMA
    "arima-estimate": _prompt(
        "ARIMA estimated. What next?",
        ("ARIMA Forecast", "arima-forecast", "Generate forecasts"),
        NEW_ANALYSIS,
    ),
    "arima-forecast": _prompt("Forecast generated.", NEW_ANALYSIS),
    # Non-Gaussian SVAR
    "nongaussian-normality": _prompt(
        "Normality tests complete. What next?",
        ("FastICA Identification", "nongaussian-fastica", "ICA-based non-Gaussian SVAR"),
        ("ML Identification", "nongaussian-ml", "Maximum likelihood approach"),
        ("Identifiability Tests", "nongaussian-identifiability", "Test identification conditions"),
        NEW_ANALYSIS,
    ),
    "nongaussian-fastica": NONGAUSSIAN_IDENTIFIED,
    "nongaussian-ml": NONGAUSSIAN_IDENTIFIED,
    "nongaussian-heteroskedasticity": NONGAUSSIAN_IDENTIFIED,
    "nongaussian-identifiability": _prompt(
        "Identifiability tests complete. What next?",
        ("Try Another Method", "__menu_nongaussian", "Different identification method"),
        NEW_ANALYSIS,
    ),
    # GMM
    "gmm-estimate": _prompt("GMM estimated.", NEW_ANALYSIS),
}


def next_steps(completed_command, result=None) -> Prompt:
    """Prompt shown after a command completes; unknown commands fall back to the main menu"""
    rule = TRANSITIONS.get(completed_command, FALLBACK_PROMPT)
    if callable(rule):
        return rule(result)
    return rule


def referenced_commands():
    """Every command token that appears in any menu or transition prompt"""
    prompts = [NO_DATA_MENU, MAIN_MENU_PROMPT, FALLBACK_PROMPT, VAR_STABLE, VAR_UNSTABLE]
    prompts.extend(MENU_GRAPH.values())
    prompts.extend(rule for rule in TRANSITIONS.values() if isinstance(rule, Prompt))
    commands = set(TRANSITIONS)
    for prompt in prompts:
        commands.update(prompt.commands)
    return commands
