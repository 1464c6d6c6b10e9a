"""
formatter.py -- Renders ValidationResult to terminal output or JSON.
"""

import json
import os
import re
import sys
from dataclasses import asdict
from typing import Any, Optional

from .models import TestResult, TestResultStatus, ValidationResult

W = 68  # output width

# ---------------------------------------------------------------------------
# ANSI color control
# ---------------------------------------------------------------------------

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from a string."""
    return _ANSI_RE.sub("", text)


def _use_color() -> bool:
    """Return True if stdout is a TTY and color has not been disabled.

    Respects NO_COLOR env var (https://no-color.org) and checks sys.stdout.isatty().
    Can be overridden by calling disable_color() / enable_color().
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_color_enabled: Optional[bool] = None  # None = auto-detect


def disable_color() -> None:
    """Force-disable color output (called when --no-color flag is set)."""
    global _color_enabled
    _color_enabled = False


def enable_color() -> None:
    global _color_enabled
    _color_enabled = True


def _color_active() -> bool:
    if _color_enabled is not None:
        return _color_enabled
    return _use_color()


# ---------------------------------------------------------------------------
# ANSI code helpers -- return empty string when color is off
# ---------------------------------------------------------------------------

STATUS_COLORS = {
    TestResultStatus.success: "\033[92m",  # green
    TestResultStatus.failure: "\033[91m",  # red
    TestResultStatus.not_found: "\033[93m",  # yellow
}


def _reset() -> str:
    return "\033[0m" if _color_active() else ""


def _bold() -> str:
    return "\033[1m" if _color_active() else ""


def _dim() -> str:
    return "\033[2m" if _color_active() else ""


def _status_color(status: TestResultStatus) -> str:
    return STATUS_COLORS.get(status, "") if _color_active() else ""


# ---------------------------------------------------------------------------
# Layout helpers
# ---------------------------------------------------------------------------


def _bar(char: str = "═") -> str:
    return char * W


def _section(title: str) -> str:
    bold = _bold()
    reset = _reset()
    return f"\n  {bold}{title}{reset}\n  {'─' * (W - 2)}"


def status_text(result: TestResult) -> str:
    """Success, Not Found, or the error count."""
    if result.status == TestResultStatus.success:
        return "Success"
    if result.status == TestResultStatus.not_found:
        return "Not Found"
    return f"{len(result.errors)} error(s) found"


# ---------------------------------------------------------------------------
# Terminal renderer
# ---------------------------------------------------------------------------


def print_header(source: str, result: ValidationResult) -> None:
    bold = _bold()
    reset = _reset()
    print(f"\n{bold}{_bar()}{reset}")
    print(f"  {bold}{source}{reset}  │  CSAF {result.version.value}  │  preset {result.preset.value}")
    print(f"{bold}{_bar()}{reset}")


def print_test_result(result: TestResult) -> None:
    color = _status_color(result.status)
    reset = _reset()
    dim = _dim()
    print(f"  Executing Test {result.test_id}... {color}{status_text(result)}{reset}")
    for error in result.errors:
        print(f"      {dim}{error.instance_path}{reset}: {error.message}")


def print_terminal(source: str, result: ValidationResult, only_failures: bool = False) -> None:
    print_header(source, result)
    print(_section("TESTS"))
    for test_result in result.test_results:
        if only_failures and not test_result.failed:
            continue
        print_test_result(test_result)
    print_summary(result)


def print_summary(result: ValidationResult) -> None:
    bold = _bold()
    reset = _reset()
    counts = {status: 0 for status in TestResultStatus}
    for test_result in result.test_results:
        counts[test_result.status] += 1

    outcome = TestResultStatus.success if result.success else TestResultStatus.failure
    verdict = "VALID" if result.success else "INVALID"
    print(f"\n{_bar('─')}")
    print(
        f"  {_status_color(outcome)}{bold}{verdict}{reset}  "
        f"{counts[TestResultStatus.success]} passed, "
        f"{counts[TestResultStatus.failure]} failed, "
        f"{counts[TestResultStatus.not_found]} not found, "
        f"{result.num_errors} error(s)"
    )
    print(f"{_bar()}\n")


# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def result_to_dict(result: ValidationResult) -> dict[str, Any]:
    """Plain dict with enum members replaced by their values."""
    d = asdict(result)
    d["version"] = result.version.value
    d["preset"] = result.preset.value
    for test_result in d["test_results"]:
        test_result["status"] = test_result["status"].value
    return d


def to_json(result: ValidationResult) -> str:
    return json.dumps(result_to_dict(result), indent=2)
