from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Canonical CVE ID format.
CVE_PATTERN = r"^CVE-[0-9]{4}-[0-9]{4,}$"


class CsafVersion(str, Enum):
    X20 = "2.0"
    X21 = "2.1"


class ValidationPreset(str, Enum):
    basic = "basic"
    extended = "extended"
    full = "full"


class TestResultStatus(str, Enum):
    __test__ = False

    success = "success"
    failure = "failure"
    not_found = "not_found"


@dataclass(frozen=True)
class ValidationError:
    """One violation of one normative rule at one location in the document."""

    message: str
    instance_path: str


@dataclass
class TestResult:
    __test__ = False

    test_id: str
    status: TestResultStatus
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == TestResultStatus.failure


@dataclass
class ValidationResult:
    success: bool
    version: CsafVersion
    preset: ValidationPreset
    test_results: list[TestResult] = field(default_factory=list)
    num_errors: int = 0

    @classmethod
    def from_test_results(
        cls,
        version: CsafVersion,
        preset: ValidationPreset,
        test_results: list[TestResult],
    ) -> "ValidationResult":
        num_errors = sum(len(r.errors) for r in test_results)
        return cls(
            success=not any(r.failed for r in test_results),
            version=version,
            preset=preset,
            test_results=test_results,
            num_errors=num_errors,
        )

    @property
    def errors(self) -> list[ValidationError]:
        return [e for r in self.test_results for e in r.errors]
