# ============================================================================
# sidecar.py - Engine Sidecar Client Module
# ============================================================================
"""
This module handles:
- Locating the engine command-line sidecar (binary or Julia dev mode)
- Translating a journal command and its parameters into CLI arguments
- Running one command and parsing its JSON output

The journal only ever sees the parsed JSON value or one of the
SidecarError exceptions below.
"""

import json
import logging
import shutil
import subprocess
from pathlib import Path

from command_catalog import BACKEND_COMMANDS, command_label, is_control_token

log = logging.getLogger(__name__)

CLI_NAMES = ("friedman-cli", "friedman-cli.exe")

# ============================================================================
# ERRORS
# ============================================================================

class SidecarError(Exception):
    """Base class for engine call failures"""


class SidecarExecError(SidecarError):
    """The sidecar could not be started or did not finish in time"""


class SidecarExitError(SidecarError):
    def __init__(self, code, stderr):
        self.code = code
        self.stderr = stderr
        super().__init__(f"Sidecar returned non-zero exit ({code}): {stderr.strip()}")


class JsonParseError(SidecarError):
    """The sidecar output was not valid JSON"""


class InvalidParamsError(SidecarError):
    """The command or its parameters cannot be sent to the engine"""

# ============================================================================
# SIDECAR RESOLUTION
# ============================================================================

def resolve_sidecar(config):
    """
    Command prefix used to run the engine CLI.

    Priority:
    1. Binary configured explicitly
    2. friedman-cli found on PATH
    3. Dev mode: julia --project=<project_dir> --startup-file=no <script>
    """
    if config.binary:
        binary = Path(config.binary)
        if not binary.exists():
            raise SidecarExecError(f"Configured sidecar binary not found: {binary}")
        return [str(binary)]

    for name in CLI_NAMES:
        found = shutil.which(name)
        if found:
            return [found]

    script = Path(config.script)
    if script.exists():
        julia = shutil.which(config.julia) or config.julia
        return [julia, f"--project={config.project_dir}", "--startup-file=no", str(script)]

    raise SidecarExecError(
        "Engine CLI not found. Install friedman-cli or set sidecar.binary in the config file."
    )

# ============================================================================
# ARGUMENT BUILDING
# ============================================================================

def _format_value(value):
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def build_cli_args(command, params):
    """
    'var-irf' with {'data': 'x.csv', 'max_lags': 4} becomes
    ['var', 'irf', 'x.csv', '--max-lags', '4'].
    """
    group, _, subcommand = command.partition("-")
    if not group or not subcommand:
        raise InvalidParamsError(f"Cannot map command '{command}' to the engine CLI")

    params = dict(params)
    data = params.pop("data", None)
    if not data:
        raise InvalidParamsError(f"{command_label(command)} requires a dataset path")

    args = [group, subcommand, str(data)]
    for key, value in params.items():
        if value is None or value is False:
            continue
        if isinstance(value, str) and not value.strip():
            continue

        flag = "--" + str(key).replace("_", "-")
        if value is True:
            args.append(flag)
        else:
            args.extend([flag, _format_value(value)])

    return args

# ============================================================================
# COMMAND EXECUTION
# ============================================================================

def run_command(command, params, config):
    """Run one engine command and return its parsed JSON output"""
    if is_control_token(command):
        raise InvalidParamsError(f"Control token '{command}' cannot be sent to the engine")
    if command not in BACKEND_COMMANDS:
        raise InvalidParamsError(f"Unknown command: {command}")

    argv = resolve_sidecar(config) + build_cli_args(command, params) + ["--format=json"]
    log.info("Running %s: %s", command, " ".join(argv))

    try:
        completed = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=config.timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise SidecarExecError(f"{command_label(command)} timed out after {config.timeout:g}s") from e
    except OSError as e:
        raise SidecarExecError(f"Failed to spawn sidecar: {e}") from e

    if completed.returncode != 0:
        log.error("%s exited with code %s", command, completed.returncode)
        raise SidecarExitError(completed.returncode, completed.stderr or "")

    try:
        result = json.loads(completed.stdout)
    except json.JSONDecodeError as e:
        raise JsonParseError(f"{e}: {completed.stdout[:500]}") from e

    log.info("%s completed", command)
    return result


def make_invoke(config):
    """Bind a configuration so the journal can call invoke(command, params)"""
    def invoke(command, params):
        return run_command(command, params, config)
    return invoke
