"""
API request and response models for the CSAF validator REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.models import CsafVersion, TestResultStatus, ValidationPreset, ValidationResult

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TEST_ID_PATTERN = r"^\d+(\.\d+){1,3}$"

_TestId = Annotated[str, Field(pattern=TEST_ID_PATTERN, max_length=16)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ValidateRequest(BaseModel):
    """Request body for POST /api/v1/validate.

    test_ids takes precedence over preset. Without either, the server's
    DEFAULT_PRESET applies.
    """

    document: dict[str, Any] = Field(description="The CSAF document as a JSON object.")
    preset: Optional[ValidationPreset] = None
    test_ids: Optional[list[_TestId]] = Field(default=None, max_length=200)
    csaf_version: Optional[CsafVersion] = Field(
        default=None,
        description="Force the schema version instead of reading /document/csaf_version.",
    )

    @field_validator("test_ids", mode="before")
    @classmethod
    def strip_ids(cls, values: Optional[list]) -> Optional[list[str]]:
        if values is None:
            return None
        return [str(v).strip() for v in values]


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ErrorItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    instance_path: str


class TestResultItem(BaseModel):
    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_id: str
    status: TestResultStatus
    errors: list[ErrorItem] = []


class ValidateResponse(BaseModel):
    """Response for POST /api/v1/validate."""

    model_config = ConfigDict(frozen=True)

    success: bool
    version: CsafVersion
    preset: ValidationPreset
    num_errors: int
    test_results: list[TestResultItem]

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidateResponse":
        return cls(
            success=result.success,
            version=result.version,
            preset=result.preset,
            num_errors=result.num_errors,
            test_results=[
                TestResultItem(
                    test_id=r.test_id,
                    status=r.status,
                    errors=[ErrorItem(message=e.message, instance_path=e.instance_path) for e in r.errors],
                )
                for r in result.test_results
            ],
        )


class TestCatalogResponse(BaseModel):
    """Response for GET /api/v1/tests."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    version: CsafVersion
    test_ids: list[str]
    presets: dict[str, list[str]]


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
