"""
validations/metrics.py -- Checks over scores (2.0) and metrics (2.1).

Covers 6.1.7 to 6.1.10, 6.1.46 to 6.1.49, 6.2.3 and 6.3.1.
The accessors hide the scores/metrics difference; content paths come from
ContentTrait.get_content_json_path so errors point into the right layout.
"""

from typing import Any, Iterator, Optional

from advisory.catalogs import cvss_validator, ssvc_catalog
from advisory.cvss import (
    CvssVector,
    InvalidVector,
    optional_vector,
    parse_v2_vector,
    parse_v3_vector,
    score_v2,
    score_v3,
    scores_equal,
)
from advisory.metrics import InvalidSsvc, MetricType, metric_types, parse_ssvc
from advisory.revisions import RevisionDates
from advisory.traits import ContentTrait, CsafTrait, DocumentStatus, MetricTrait
from core.models import ValidationError


def _iter_metrics(doc: CsafTrait) -> Iterator[tuple[int, int, MetricTrait, ContentTrait, str]]:
    """Yield (vulnerability index, metric index, metric, content, content path)."""
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        for m_i, metric in enumerate(vuln.get_metrics() or []):
            content = metric.get_content()
            yield v_i, m_i, metric, content, content.get_content_json_path(v_i, m_i)


# ---------------------------------------------------------------------------
# 6.1.7 Multiple scores with same version per product
# ---------------------------------------------------------------------------


def test_6_1_07_multiple_same_scores_per_product(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        # product -> metric type -> source -> content paths
        seen: dict[str, dict[MetricType, dict[Optional[str], list[str]]]] = {}
        for m_i, metric in enumerate(vuln.get_metrics() or []):
            content = metric.get_content()
            path = content.get_content_json_path(v_i, m_i)
            types = metric_types(content)
            for product_id in metric.get_products():
                for metric_type in types:
                    (
                        seen.setdefault(product_id, {})
                        .setdefault(metric_type, {})
                        .setdefault(metric.get_source(), [])
                        .append(path)
                    )

        for product_id, by_type in seen.items():
            for metric_type, by_source in by_type.items():
                for source, paths in by_source.items():
                    if len(paths) < 2:
                        continue
                    origin = "by author" if source is None else f"for source: {source}"
                    errors += [
                        ValidationError(
                            f"Multiple {metric_type} scores are given for {product_id} {origin}.",
                            f"{path}/{metric_type.prop_name}",
                        )
                        for path in paths
                    ]
    return errors


# ---------------------------------------------------------------------------
# 6.1.8 / 6.1.9 / 6.1.10 CVSS
# ---------------------------------------------------------------------------


def _cvss_v3_schema_version(data: dict[str, Any]) -> str:
    """3.0 or 3.1, from the version property or else the vector prefix."""
    version = data.get("version")
    if version in ("3.0", "3.1"):
        return version
    vector = data.get("vectorString")
    if isinstance(vector, str) and vector.startswith("CVSS:3.0/"):
        return "3.0"
    return "3.1"


def _schema_errors(schema_version: str, data: dict[str, Any], path: str) -> list[ValidationError]:
    found = cvss_validator(schema_version).iter_errors(data)
    return [
        ValidationError(err.message, path + "".join(f"/{part}" for part in err.absolute_path))
        for err in sorted(found, key=lambda e: ([str(p) for p in e.absolute_path], e.message))
    ]


def test_6_1_08_invalid_cvss(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for _, _, _, content, path in _iter_metrics(doc):
        if content.get_cvss_v2():
            errors += _schema_errors("2.0", content.get_cvss_v2(), f"{path}/cvss_v2")
        if content.get_cvss_v3():
            v3 = content.get_cvss_v3()
            errors += _schema_errors(_cvss_v3_schema_version(v3), v3, f"{path}/cvss_v3")
        if content.get_cvss_v4():
            errors += _schema_errors("4.0", content.get_cvss_v4(), f"{path}/cvss_v4")
    return errors


def _cvss_objects(doc: CsafTrait) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """Yield (JSON path of the cvss object, property name, cvss object)."""
    for _, _, _, content, path in _iter_metrics(doc):
        if content.get_cvss_v2():
            yield f"{path}/cvss_v2", "cvss_v2", content.get_cvss_v2()
        if content.get_cvss_v3():
            yield f"{path}/cvss_v3", "cvss_v3", content.get_cvss_v3()


def _parse(prop_name: str, vector: str) -> CvssVector:
    return parse_v2_vector(vector) if prop_name == "cvss_v2" else parse_v3_vector(vector)


def _computation_error(path: str, key: str, given: Any, computed: Any, vector: str) -> ValidationError:
    return ValidationError(
        f"Invalid CVSS computation: {key} is {given} but the vector string {vector} yields {computed}",
        f"{path}/{key}",
    )


def test_6_1_09_invalid_cvss_computation(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for path, prop_name, data in _cvss_objects(doc):
        vector = optional_vector(data)
        if vector is None:
            continue
        try:
            parsed = _parse(prop_name, vector)
        except InvalidVector:
            continue

        if parsed.is_v3:
            v3 = score_v3(parsed)
            expected_scores = {"baseScore": v3.base_score, "temporalScore": v3.temporal_score}
            expected_severities = {"baseSeverity": v3.base_severity, "temporalSeverity": v3.temporal_severity}
        else:
            v2 = score_v2(parsed)
            expected_scores = {"baseScore": v2.base_score, "temporalScore": v2.temporal_score}
            expected_severities = {}

        for key, computed in expected_scores.items():
            if key in data and not scores_equal(data[key], computed):
                errors.append(_computation_error(path, key, data[key], computed, vector))
        for key, computed in expected_severities.items():
            if key in data and data[key] != computed:
                errors.append(_computation_error(path, key, data[key], computed, vector))
    return errors


def test_6_1_10_inconsistent_cvss(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for path, prop_name, data in _cvss_objects(doc):
        vector = optional_vector(data)
        if vector is None:
            continue
        try:
            parsed = _parse(prop_name, vector)
        except InvalidVector as exc:
            errors.append(
                ValidationError(f"Invalid CVSS vector string '{vector}': {exc.reason}", f"{path}/vectorString")
            )
            continue

        version = data.get("version")
        if parsed.is_v3 and version is not None and version != parsed.version:
            errors.append(
                ValidationError(
                    f"CVSS version {version} is inconsistent with the vector string {vector}",
                    f"{path}/version",
                )
            )
        for key, implied in parsed.properties().items():
            given = data.get(key)
            if given is not None and given != implied:
                errors.append(
                    ValidationError(
                        f"Value {given} of {key} is inconsistent with the vector string {vector} "
                        f"which implies {implied}",
                        f"{path}/{key}",
                    )
                )
    return errors


# ---------------------------------------------------------------------------
# SSVC (2.1 only)
# ---------------------------------------------------------------------------


def _invalid_ssvc(exc: InvalidSsvc, content_path: str) -> list[ValidationError]:
    return [ValidationError(str(exc), f"{content_path}/ssvc_v2")]


def test_6_1_46_invalid_ssvc(doc: CsafTrait) -> list[ValidationError]:
    """First-found: the first ssvc_v2 object that does not parse."""
    for _, _, _, content, path in _iter_metrics(doc):
        if not content.get_ssvc_v2():
            continue
        try:
            parse_ssvc(content.get_ssvc_v2())
        except InvalidSsvc as exc:
            return _invalid_ssvc(exc, path)
    return []


def test_6_1_47_inconsistent_ssvc_id(doc: CsafTrait) -> list[ValidationError]:
    """First-found: each SSVC target id must name the document, the CVE or one of the vulnerability ids."""
    vulnerabilities = doc.get_vulnerabilities()
    document_id = doc.get_document().get_tracking().get_id()

    for v_i, vuln in enumerate(vulnerabilities):
        known_ids = {vid.get_text() for vid in vuln.get_ids() or []}
        if vuln.get_cve() is not None:
            known_ids.add(vuln.get_cve())

        for m_i, metric in enumerate(vuln.get_metrics() or []):
            content = metric.get_content()
            if not content.get_ssvc_v2():
                continue
            path = content.get_content_json_path(v_i, m_i)
            try:
                ssvc = parse_ssvc(content.get_ssvc_v2())
            except InvalidSsvc as exc:
                return _invalid_ssvc(exc, path)

            for t_i, target_id in enumerate(ssvc.target_ids or []):
                target_path = f"{path}/ssvc_v2/target_ids/{t_i}"
                if target_id == document_id:
                    if len(vulnerabilities) > 1:
                        return [
                            ValidationError(
                                f"The SSVC target ID equals the document ID '{document_id}' and the "
                                "document contains multiple vulnerabilities",
                                target_path,
                            )
                        ]
                    continue
                if target_id not in known_ids:
                    return [
                        ValidationError(
                            f"The SSVC target ID '{target_id}' does not match the document ID, the CVE ID "
                            "or any ID in the IDs array of the vulnerability",
                            target_path,
                        )
                    ]
    return []


def test_6_1_48_ssvc_decision_points(doc: CsafTrait) -> list[ValidationError]:
    """First-found: selections in a registered namespace must use known decision points and values, in order."""
    catalog = ssvc_catalog()
    for _, _, _, content, path in _iter_metrics(doc):
        if not content.get_ssvc_v2():
            continue
        try:
            ssvc = parse_ssvc(content.get_ssvc_v2())
        except InvalidSsvc as exc:
            return _invalid_ssvc(exc, path)

        for s_i, selection in enumerate(ssvc.selections):
            if not catalog.is_registered(selection.namespace):
                continue
            selection_path = f"{path}/ssvc_v2/selections/{s_i}"
            dp = catalog.find(selection.namespace, selection.key, selection.version)
            if dp is None:
                return [
                    ValidationError(
                        f"Unknown SSVC decision point '{selection.namespace}::{selection.key}' "
                        f"with version '{selection.version}'",
                        selection_path,
                    )
                ]

            label = f"'{dp.namespace}::{dp.name}' (version {dp.version})"
            last_index = -1
            for j, value in enumerate(selection.values):
                value_path = f"{selection_path}/values/{j}"
                if value.key not in dp.values:
                    return [
                        ValidationError(
                            f"The SSVC decision point {label} doesn't have a value with key '{value.key}'",
                            value_path,
                        )
                    ]
                index = dp.values.index(value.key)
                if index < last_index:
                    return [
                        ValidationError(
                            f"The values for SSVC decision point {label} are not in correct order",
                            value_path,
                        )
                    ]
                last_index = index
    return []


def test_6_1_49_inconsistent_ssvc_timestamp(doc: CsafTrait) -> list[ValidationError]:
    """First-found: SSVC timestamps must not be later than the newest revision of a final/interim document."""
    status = doc.get_document().get_tracking().get_status()
    if status not in (DocumentStatus.final.value, DocumentStatus.interim.value):
        return []

    dates = RevisionDates.from_document(doc)
    if dates.errors:
        return dates.errors
    newest = dates.newest()
    if newest is None:
        return []

    for v_i, _, _, content, path in _iter_metrics(doc):
        if not content.get_ssvc_v2():
            continue
        try:
            ssvc = parse_ssvc(content.get_ssvc_v2())
        except InvalidSsvc as exc:
            return _invalid_ssvc(exc, path)
        if ssvc.timestamp > newest:
            return [
                ValidationError(
                    f"SSVC timestamp ({ssvc.timestamp.isoformat()}) for vulnerability at index {v_i} "
                    f"is later than the newest revision date ({newest.isoformat()})",
                    f"{path}/ssvc_v2/timestamp",
                )
            ]
    return []


# ---------------------------------------------------------------------------
# Optional / informative
# ---------------------------------------------------------------------------

_AFFECTED_LISTS = ("first_affected", "known_affected", "last_affected")


def test_6_2_03_missing_metric(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        if status is None:
            continue
        scored = {pid for metric in vuln.get_metrics() or [] for pid in metric.get_products()}
        for name in _AFFECTED_LISTS:
            for i, product_id in enumerate(getattr(status, f"get_{name}")() or []):
                if product_id not in scored:
                    errors.append(
                        ValidationError(
                            f"Missing at least one metric for product ID '{product_id}' "
                            f"in product status group '{name}'",
                            f"/vulnerabilities/{v_i}/product_status/{name}/{i}",
                        )
                    )
    return errors


def test_6_3_01_use_of_cvss_v2_as_only_scoring_system(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        kinds: dict[str, set[str]] = {}
        paths: dict[str, list[str]] = {}
        for m_i, metric in enumerate(vuln.get_metrics() or []):
            content = metric.get_content()
            path = content.get_content_json_path(v_i, m_i)
            types = metric_types(content)
            for product_id in metric.get_products():
                kinds.setdefault(product_id, set()).update(t.prop_name for t in types)
                product_paths = paths.setdefault(product_id, [])
                if path not in product_paths:
                    product_paths.append(path)

        reported: set[str] = set()
        for product_id, found in kinds.items():
            if found != {"cvss_v2"}:
                continue
            for path in paths[product_id]:
                if path not in reported:
                    reported.add(path)
                    errors.append(ValidationError("Vulnerability uses CVSS v2 as the only scoring system", path))
    return errors
