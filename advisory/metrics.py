"""
advisory/metrics.py -- Metric typing for scores/metrics content and the SSVC model.

A content object may carry several metric kinds at once. MetricType names
one of them together with its version where the JSON declares one, so
"CVSS-v3.1" and "CVSS-v3.0" count as different metrics for a product.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .traits import ContentTrait


@dataclass(frozen=True)
class MetricType:
    prop_name: str
    label: str

    def __str__(self) -> str:
        return self.label


EPSS = MetricType("epss", "EPSS")
SSVC_V2 = MetricType("ssvc_v2", "SSVC-v2")


def _cvss_type(prop_name: str, data: dict[str, Any], fallback: str) -> MetricType:
    version = data.get("version") if isinstance(data.get("version"), str) else fallback
    return MetricType(prop_name, f"CVSS-v{version}")


def metric_types(content: ContentTrait) -> list[MetricType]:
    """Every metric kind present in a content object, in schema order."""
    types: list[MetricType] = []
    if content.get_cvss_v2():
        types.append(_cvss_type("cvss_v2", content.get_cvss_v2(), "2"))
    if content.get_cvss_v3():
        types.append(_cvss_type("cvss_v3", content.get_cvss_v3(), "3"))
    if content.get_cvss_v4():
        types.append(_cvss_type("cvss_v4", content.get_cvss_v4(), "4"))
    if content.get_epss():
        types.append(EPSS)
    if content.get_ssvc_v2():
        types.append(SSVC_V2)
    return types


# ---------------------------------------------------------------------------
# SSVC
# ---------------------------------------------------------------------------


class SsvcValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str
    name: Optional[str] = None


class SsvcSelection(BaseModel):
    model_config = ConfigDict(extra="allow")

    namespace: str
    key: str
    version: str
    values: list[SsvcValue] = Field(min_length=1)
    name: Optional[str] = None


class SsvcSelectionList(BaseModel):
    """An SSVC decision point selection list as embedded in content.ssvc_v2."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_version: str = Field(alias="schemaVersion")
    timestamp: AwareDatetime
    selections: list[SsvcSelection] = Field(min_length=1)
    target_ids: Optional[list[str]] = None
    decision_point_resources: Optional[list[dict[str, Any]]] = None


class InvalidSsvc(ValueError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid SSVC object: {detail}")


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def parse_ssvc(data: dict[str, Any]) -> SsvcSelectionList:
    """Parse an ssvc_v2 object, raising InvalidSsvc with a readable reason."""
    try:
        return SsvcSelectionList.model_validate(data)
    except PydanticValidationError as exc:
        raise InvalidSsvc(_describe(exc)) from exc
