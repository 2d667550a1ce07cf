# ============================================================================
# journal.py - Analysis Journal Session Module
# ============================================================================
"""
This module handles:
- The append-only session journal (prompts, choices, forms, results, errors)
- Dispatching a selected choice (data page, main menu, sub-menu, command form)
- Running a command through the engine and offering the next steps
- In-memory saved results and the output log
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from command_catalog import (
    MAIN_MENU,
    BackendCommand,
    NavigateData,
    OpenSubMenu,
    ReturnToMainMenu,
    command_label,
    parse_command,
)
from sidecar import SidecarError
from workflow_graph import Choice, Prompt, next_steps, sub_menu, top_menu

log = logging.getLogger(__name__)

RETRY_PROMPT = Prompt(
    "Something went wrong. Would you like to try again?",
    (Choice("Main Menu", MAIN_MENU, "Back to main menu"),),
)

# ============================================================================
# JOURNAL ENTRIES
# ============================================================================

@dataclass
class SystemEntry:
    id: str
    text: str
    options: Tuple[Choice, ...] = ()


@dataclass
class UserChoiceEntry:
    id: str
    label: str


@dataclass
class FormEntry:
    id: str
    command: str
    status: str = "filling"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ResultEntry:
    id: str
    command: str
    data: Any
    result_id: str


@dataclass
class ErrorEntry:
    id: str
    message: str

# ============================================================================
# SAVED RESULTS
# ============================================================================

@dataclass
class SavedResult:
    id: str
    timestamp: float
    command: str
    label: str
    params: Dict[str, Any]
    data: Any


class ResultStore:
    """Results of completed commands, newest first"""

    def __init__(self):
        self.results: List[SavedResult] = []
        self._ids = itertools.count()

    def add(self, command, label, params, data):
        saved = SavedResult(
            id=f"result-{next(self._ids)}",
            timestamp=time.time(),
            command=command,
            label=label,
            params=dict(params),
            data=data,
        )
        self.results.insert(0, saved)
        return saved

    def get(self, result_id):
        for saved in self.results:
            if saved.id == result_id:
                return saved
        return None

    def remove(self, result_id):
        self.results = [r for r in self.results if r.id != result_id]

    def clear(self):
        self.results = []

# ============================================================================
# OUTPUT LOG
# ============================================================================

LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class OutputLine:
    id: str
    timestamp: float
    level: str
    message: str


class OutputLog:
    """Status lines for the user, mirrored to the module logger"""

    def __init__(self):
        self.lines: List[OutputLine] = []
        self._ids = itertools.count()

    def add(self, level, message):
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown output level: {level}")
        line = OutputLine(f"line-{next(self._ids)}", time.time(), level, message)
        self.lines.append(line)
        log.log(LOG_LEVELS[level], message)
        return line

    def clear(self):
        self.lines = []

# ============================================================================
# JOURNAL
# ============================================================================

class AnalysisJournal:
    """
    Session timeline for one user.

    Entries are only ever appended (forms change status in place); the last
    system entry is the prompt currently offered to the user.
    """

    def __init__(self, results=None, output=None):
        self.entries = []
        self.results = results if results is not None else ResultStore()
        self.output = output if output is not None else OutputLog()
        self._ids = itertools.count()

    def _next_id(self):
        return f"entry-{next(self._ids)}"

    # ------------------------------------------------------------------------
    # Appending entries
    # ------------------------------------------------------------------------

    def add_prompt(self, prompt):
        entry = SystemEntry(self._next_id(), prompt.message, prompt.options)
        self.entries.append(entry)
        return entry

    def add_user_choice(self, label):
        entry = UserChoiceEntry(self._next_id(), label)
        self.entries.append(entry)
        return entry

    def add_form(self, command):
        entry = FormEntry(self._next_id(), command)
        self.entries.append(entry)
        return entry

    def add_error(self, message):
        entry = ErrorEntry(self._next_id(), message)
        self.entries.append(entry)
        return entry

    # ------------------------------------------------------------------------
    # Session flow
    # ------------------------------------------------------------------------

    def start(self, has_data):
        """Seed an empty journal with the top menu"""
        if not self.entries:
            self.add_prompt(top_menu(has_data))

    def data_loaded(self):
        """Offer the analysis menu once a dataset becomes available"""
        self.add_prompt(top_menu(True))

    def new_session(self, has_data):
        self.entries = []
        self.start(has_data)

    def last_prompt(self):
        for entry in reversed(self.entries):
            if isinstance(entry, SystemEntry):
                return Prompt(entry.text, tuple(entry.options))
        return None

    def form(self, form_id):
        for entry in self.entries:
            if isinstance(entry, FormEntry) and entry.id == form_id:
                return entry
        raise KeyError(form_id)

    def open_forms(self):
        return [e for e in self.entries if isinstance(e, FormEntry) and e.status != "done"]

    def active_form(self):
        """The newest form while it is still open; older forms can no longer be run"""
        for entry in reversed(self.entries):
            if isinstance(entry, FormEntry):
                return entry if entry.status != "done" else None
        return None

    def select(self, choice, has_data):
        """
        Apply a user choice and return the parsed command.
        Navigation to the data page is left to the caller and not journaled.
        """
        command = parse_command(choice.command)
        if isinstance(command, NavigateData):
            return command

        self.add_user_choice(choice.label)

        if isinstance(command, ReturnToMainMenu):
            self.add_prompt(top_menu(has_data))
        elif isinstance(command, OpenSubMenu):
            menu = sub_menu(command.token)
            if menu is not None:
                self.add_prompt(menu)
            else:
                log.warning("No sub-menu for %s, opening it as a command form", command.token)
                self.add_form(command.token)
        elif isinstance(command, BackendCommand):
            self.add_form(command.name)

        return command

    def run(self, form_id, params, invoke):
        """
        Run the command of the active form through invoke(command, params).
        Returns the saved result, or None when the engine call failed.
        """
        entry = self.form(form_id)
        if entry is not self.active_form():
            raise ValueError(f"Form {form_id} is not the active form")
        label = command_label(entry.command)
        entry.status = "running"
        self.output.add("info", f"Running {label}...")

        try:
            result = invoke(entry.command, params)
        except SidecarError as e:
            self.output.add("error", f"{label} failed: {e}")
            self.add_error(str(e))
            self.add_prompt(RETRY_PROMPT)
            return None
        finally:
            entry.status = "done"

        entry.params = dict(params)
        self.output.add("success", f"{label} completed.")

        saved = self.results.add(entry.command, label, params, result)
        self.entries.append(ResultEntry(self._next_id(), entry.command, result, saved.id))
        self.add_prompt(next_steps(entry.command, result))
        return saved
