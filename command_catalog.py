# ============================================================================
# command_catalog.py - Command Catalog Module
# ============================================================================
"""
This module handles:
- Human-readable labels for every engine command
- Control tokens used by the journal menus (never sent to the engine)
- Parsing a command token into a closed set of command kinds
"""

from dataclasses import dataclass

# ============================================================================
# CONTROL TOKENS
# ============================================================================

NAVIGATE_DATA = "__navigate_data"
MAIN_MENU = "__main_menu"
MENU_PREFIX = "__menu_"

# ============================================================================
# COMMAND LABELS
# ============================================================================

COMMAND_LABELS = {
    # VAR
    "var-estimate": "VAR Estimation",
    "var-lagselect": "VAR Lag Selection",
    "var-stability": "VAR Stability Check",
    "var-irf": "VAR IRF",
    "var-fevd": "VAR FEVD",
    "var-hd": "VAR Historical Decomposition",
    "var-forecast": "VAR Forecast",
    # BVAR
    "bvar-estimate": "BVAR Estimation",
    "bvar-posterior": "BVAR Posterior",
    "bvar-irf": "BVAR IRF",
    "bvar-fevd": "BVAR FEVD",
    "bvar-hd": "BVAR Historical Decomposition",
    "bvar-forecast": "BVAR Forecast",
    # Local projections
    "lp-estimate": "Local Projections",
    "lp-irf": "LP IRF",
    "lp-fevd": "LP FEVD",
    "lp-hd": "LP Historical Decomposition",
    "lp-forecast": "LP Forecast",
    # Factor models
    "factor-estimate": "Factor Model Estimation",
    "factor-forecast": "Factor Forecast",
    # Non-Gaussian SVAR
    "nongaussian-fastica": "Non-Gaussian SVAR (FastICA)",
    "nongaussian-ml": "Non-Gaussian SVAR (ML)",
    "nongaussian-heteroskedasticity": "Heteroskedasticity SVAR",
    "nongaussian-normality": "Normality Tests",
    "nongaussian-identifiability": "Identifiability Tests",
    # Unit root and cointegration
    "test-adf": "ADF Test",
    "test-kpss": "KPSS Test",
    "test-pp": "Phillips-Perron Test",
    "test-za": "Zivot-Andrews Test",
    "test-np": "Ng-Perron Test",
    "test-johansen": "Johansen Cointegration Test",
    # GMM / ARIMA
    "gmm-estimate": "GMM Estimation",
    "arima-estimate": "ARIMA Estimation",
    "arima-forecast": "ARIMA Forecast",
}

# Engine commands reachable outside the journal menus
EXTRA_COMMAND_LABELS = {
    "irf-compute": "Impulse Responses",
    "fevd-compute": "Variance Decomposition",
    "hd-compute": "Historical Decomposition",
    "lp-iv": "LP-IV Estimation",
    "lp-smooth": "Smooth LP Estimation",
    "lp-state": "State-Dependent LP",
    "lp-propensity": "LP Propensity Score",
    "lp-multi": "Multi-Shock LP",
    "lp-robust": "Doubly Robust LP",
    "factor-static": "Static Factor Model",
    "factor-dynamic": "Dynamic Factor Model",
    "factor-gdfm": "Generalized Dynamic Factor Model",
    "arima-auto": "Auto ARIMA",
}

BACKEND_COMMANDS = frozenset(COMMAND_LABELS) | frozenset(EXTRA_COMMAND_LABELS)


def command_label(command):
    """Label for a command token, falling back to the token itself"""
    label = COMMAND_LABELS.get(command)
    if label is None:
        label = EXTRA_COMMAND_LABELS.get(command, command)
    return label

# ============================================================================
# COMMAND KINDS
# ============================================================================

@dataclass(frozen=True)
class BackendCommand:
    name: str


@dataclass(frozen=True)
class NavigateData:
    pass


@dataclass(frozen=True)
class ReturnToMainMenu:
    pass


@dataclass(frozen=True)
class OpenSubMenu:
    token: str


def parse_command(token):
    """
    Classify a choice token as a backend command or a journal control action.
    Any token that is not a control token is treated as a backend command.
    """
    if token == NAVIGATE_DATA:
        return NavigateData()
    if token == MAIN_MENU:
        return ReturnToMainMenu()
    if token.startswith(MENU_PREFIX):
        return OpenSubMenu(token)
    return BackendCommand(token)


def is_control_token(token):
    return not isinstance(parse_command(token), BackendCommand)
