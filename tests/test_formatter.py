"""
tests/test_formatter.py -- Unit tests for core/formatter.py.

Coverage:
  - status_text for each status
  - result_to_dict / to_json: enum values and error fields
  - print_terminal: verdict line, per-test lines, only_failures filtering
  - color control: disable_color / enable_color and strip_ansi
"""

from __future__ import annotations

import json

import pytest

from core import formatter
from core.models import CsafVersion, TestResult, TestResultStatus, ValidationError, ValidationPreset, ValidationResult


def _result(*test_results: TestResult) -> ValidationResult:
    return ValidationResult.from_test_results(CsafVersion.X21, ValidationPreset.basic, list(test_results))


PASSED = TestResult("6.1.1", TestResultStatus.success)
FAILED = TestResult(
    "6.1.23",
    TestResultStatus.failure,
    [ValidationError("Duplicate CVE CVE-2024-0001", "/vulnerabilities/1/cve")],
)
MISSING = TestResult("6.1.99", TestResultStatus.not_found)


@pytest.fixture(autouse=True)
def no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(formatter, "_color_enabled", False)


class TestStatusText:
    def test_status_text(self) -> None:
        assert formatter.status_text(PASSED) == "Success"
        assert formatter.status_text(MISSING) == "Not Found"
        assert formatter.status_text(FAILED) == "1 error(s) found"


class TestJson:
    def test_result_to_dict(self) -> None:
        data = formatter.result_to_dict(_result(PASSED, FAILED))
        assert data["success"] is False
        assert data["version"] == "2.1"
        assert data["preset"] == "basic"
        assert data["num_errors"] == 1
        assert [r["status"] for r in data["test_results"]] == ["success", "failure"]
        assert data["test_results"][1]["errors"] == [
            {"message": "Duplicate CVE CVE-2024-0001", "instance_path": "/vulnerabilities/1/cve"}
        ]

    def test_to_json_round_trips_through_json(self) -> None:
        assert json.loads(formatter.to_json(_result(PASSED)))["success"] is True


class TestTerminal:
    def test_valid_result(self, capsys: pytest.CaptureFixture[str]) -> None:
        formatter.print_terminal("advisory.json", _result(PASSED, MISSING))
        out = capsys.readouterr().out
        assert "advisory.json" in out
        assert "Executing Test 6.1.1... Success" in out
        assert "Executing Test 6.1.99... Not Found" in out
        assert "VALID  1 passed, 0 failed, 1 not found, 0 error(s)" in out

    def test_errors_are_listed(self, capsys: pytest.CaptureFixture[str]) -> None:
        formatter.print_terminal("advisory.json", _result(PASSED, FAILED))
        out = capsys.readouterr().out
        assert "INVALID" in out
        assert "/vulnerabilities/1/cve: Duplicate CVE CVE-2024-0001" in out

    def test_only_failures(self, capsys: pytest.CaptureFixture[str]) -> None:
        formatter.print_terminal("advisory.json", _result(PASSED, FAILED, MISSING), only_failures=True)
        out = capsys.readouterr().out
        assert "Executing Test 6.1.23" in out
        assert "Executing Test 6.1.1..." not in out
        assert "Executing Test 6.1.99" not in out

    def test_no_escape_codes_when_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        formatter.disable_color()
        formatter.print_terminal("advisory.json", _result(FAILED))
        assert "\x1b[" not in capsys.readouterr().out


class TestColor:
    def test_enable_color(self, capsys: pytest.CaptureFixture[str]) -> None:
        formatter.enable_color()
        formatter.print_test_result(FAILED)
        out = capsys.readouterr().out
        assert "\x1b[91m" in out
        assert "Executing Test 6.1.23... 1 error(s) found" in formatter.strip_ansi(out)

    def test_strip_ansi(self) -> None:
        assert formatter.strip_ansi("\x1b[1mbold\x1b[0m") == "bold"
