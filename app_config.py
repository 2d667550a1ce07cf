# ============================================================================
# app_config.py - Configuration Module
# ============================================================================
"""
This module handles:
- Loading the journal configuration from a YAML file
- Defaults for the engine sidecar and the application
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path("journal.yaml")
CONFIG_ENV_VAR = "ANALYSIS_JOURNAL_CONFIG"


class ConfigError(Exception):
    """Raised when the configuration file cannot be used"""

# ============================================================================
# CONFIGURATION TYPES
# ============================================================================

@dataclass
class SidecarConfig:
    binary: str = ""
    julia: str = "julia"
    project_dir: str = "sidecar"
    script: str = "sidecar/main.jl"
    timeout: float = 600.0


@dataclass
class JournalConfig:
    title: str = "Analysis Journal"
    log_level: str = "INFO"
    sidecar: SidecarConfig = field(default_factory=SidecarConfig)

# ============================================================================
# YAML LOADER
# ============================================================================

def _section(config, name):
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def _string(section, key, default):
    value = section.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value


def config_path():
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))


def load_config(path=None):
    """Load the journal configuration; a missing file means defaults"""
    yaml_path = Path(path) if path is not None else config_path()
    if not yaml_path.exists():
        return JournalConfig()

    try:
        with open(yaml_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{yaml_path} must contain a mapping at the top level")

    defaults = JournalConfig()
    app = _section(config, 'app')
    sidecar = _section(config, 'sidecar')

    timeout = sidecar.get('timeout', defaults.sidecar.timeout)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError("'timeout' must be a positive number of seconds")

    return JournalConfig(
        title=_string(app, 'title', defaults.title),
        log_level=_string(app, 'log_level', defaults.log_level).upper(),
        sidecar=SidecarConfig(
            binary=_string(sidecar, 'binary', defaults.sidecar.binary),
            julia=_string(sidecar, 'julia', defaults.sidecar.julia),
            project_dir=_string(sidecar, 'project_dir', defaults.sidecar.project_dir),
            script=_string(sidecar, 'script', defaults.sidecar.script),
            timeout=float(timeout),
        ),
    )
