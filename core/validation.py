"""
core/validation.py -- Rule registry and validation driver.

No side effects beyond logging. Called by both the CLI (main.py) and the
REST API (api/routes/v1/validate.py).

Every rule is a pure function taking a document that implements CsafTrait
and returning a list of ValidationErrors. The registry below maps the test
id (e.g. "6.1.27.4") to that function and the schema versions it applies to.
Test ids are ordered numerically, so "6.1.9" runs before "6.1.10".
"""

import logging
from typing import Callable, Iterable, Optional

from advisory.traits import CsafTrait
from validations import (
    branches,
    dates,
    distribution,
    document,
    identification,
    language,
    metrics,
    product_ids,
    product_status,
    profiles,
    revision_history,
    vulnerabilities,
)

from .config import get_settings
from .models import CsafVersion, TestResult, TestResultStatus, ValidationError, ValidationPreset, ValidationResult

logger = logging.getLogger("csafvalidator.validation")

Rule = Callable[[CsafTrait], list[ValidationError]]

BOTH = (CsafVersion.X20, CsafVersion.X21)
ONLY_20 = (CsafVersion.X20,)
ONLY_21 = (CsafVersion.X21,)

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_RULES: list[tuple[str, Rule, tuple[CsafVersion, ...]]] = [
    # 6.1 mandatory tests
    ("6.1.1", product_ids.test_6_1_01_missing_definition_of_product_id, BOTH),
    ("6.1.2", product_ids.test_6_1_02_multiple_definition_of_product_id, BOTH),
    ("6.1.3", product_ids.test_6_1_03_circular_definition_of_product_id, BOTH),
    ("6.1.4", product_ids.test_6_1_04_missing_definition_of_product_group_id, BOTH),
    ("6.1.5", product_ids.test_6_1_05_multiple_definition_of_product_group_id, BOTH),
    ("6.1.6", product_status.test_6_1_06_contradicting_product_status, BOTH),
    ("6.1.7", metrics.test_6_1_07_multiple_same_scores_per_product, BOTH),
    ("6.1.8", metrics.test_6_1_08_invalid_cvss, BOTH),
    ("6.1.9", metrics.test_6_1_09_invalid_cvss_computation, BOTH),
    ("6.1.10", metrics.test_6_1_10_inconsistent_cvss, BOTH),
    ("6.1.11", vulnerabilities.test_6_1_11_cwe, BOTH),
    ("6.1.12", language.test_6_1_12_language, BOTH),
    ("6.1.13", identification.test_6_1_13_purl, BOTH),
    ("6.1.14", revision_history.test_6_1_14_sorted_revision_history, BOTH),
    ("6.1.15", language.test_6_1_15_translator, BOTH),
    ("6.1.16", revision_history.test_6_1_16_latest_document_version, BOTH),
    ("6.1.17", revision_history.test_6_1_17_document_status_draft, BOTH),
    ("6.1.18", revision_history.test_6_1_18_released_revision_history, BOTH),
    ("6.1.19", revision_history.test_6_1_19_revision_history_entries_for_prerelease_versions, BOTH),
    ("6.1.20", revision_history.test_6_1_20_non_draft_document_version, BOTH),
    ("6.1.21", revision_history.test_6_1_21_missing_item_in_revision_history, BOTH),
    ("6.1.22", revision_history.test_6_1_22_multiple_definition_in_revision_history, BOTH),
    ("6.1.23", vulnerabilities.test_6_1_23_multiple_use_of_same_cve, BOTH),
    ("6.1.24", vulnerabilities.test_6_1_24_multiple_definition_in_involvements, BOTH),
    ("6.1.25", identification.test_6_1_25_multiple_use_of_same_hash_algorithm, BOTH),
    ("6.1.26", document.test_6_1_26_prohibited_document_category, BOTH),
    ("6.1.27.1", profiles.test_6_1_27_01_document_notes, BOTH),
    ("6.1.27.2", profiles.test_6_1_27_02_document_references, BOTH),
    ("6.1.27.3", profiles.test_6_1_27_03_vulnerabilities, BOTH),
    ("6.1.27.4", profiles.test_6_1_27_04_product_tree, BOTH),
    ("6.1.27.5", profiles.test_6_1_27_05_vulnerability_notes, BOTH),
    ("6.1.27.6", profiles.test_6_1_27_06_product_status, BOTH),
    ("6.1.27.7", profiles.test_6_1_27_07_vex_product_status, BOTH),
    ("6.1.27.8", profiles.test_6_1_27_08_vulnerability_id, BOTH),
    ("6.1.27.9", profiles.test_6_1_27_09_impact_statement, BOTH),
    ("6.1.27.10", profiles.test_6_1_27_10_action_statement, BOTH),
    ("6.1.27.11", profiles.test_6_1_27_11_vulnerabilities, BOTH),
    ("6.1.28", language.test_6_1_28_translation, BOTH),
    ("6.1.29", vulnerabilities.test_6_1_29_remediation_without_product_reference, BOTH),
    ("6.1.30", revision_history.test_6_1_30_mixed_integer_and_semantic_versioning, BOTH),
    ("6.1.31", branches.test_6_1_31_version_range_in_product_version, BOTH),
    ("6.1.32", vulnerabilities.test_6_1_32_flag_without_product_reference, BOTH),
    ("6.1.33", vulnerabilities.test_6_1_33_multiple_flags_with_vex_codes_per_product, BOTH),
    ("6.1.34", branches.test_6_1_34_branches_recursion_depth, ONLY_21),
    ("6.1.35", vulnerabilities.test_6_1_35_contradicting_remediations, ONLY_21),
    ("6.1.36", product_status.test_6_1_36_status_group_contradicting_remediation_categories, ONLY_21),
    ("6.1.37", dates.test_6_1_37_date_and_time, BOTH),
    ("6.1.38", distribution.test_6_1_38_non_public_sharing_group_max_uuid, ONLY_21),
    ("6.1.39", distribution.test_6_1_39_public_sharing_group_with_no_max_uuid, ONLY_21),
    ("6.1.40", distribution.test_6_1_40_invalid_sharing_group_name, ONLY_21),
    ("6.1.41", distribution.test_6_1_41_missing_sharing_group_name, ONLY_21),
    ("6.1.42", identification.test_6_1_42_purl_consistency, ONLY_21),
    ("6.1.43", identification.test_6_1_43_multiple_stars_in_model_number, ONLY_21),
    ("6.1.44", identification.test_6_1_44_multiple_stars_in_serial_number, ONLY_21),
    ("6.1.45", dates.test_6_1_45_inconsistent_disclosure_date, ONLY_21),
    ("6.1.46", metrics.test_6_1_46_invalid_ssvc, ONLY_21),
    ("6.1.47", metrics.test_6_1_47_inconsistent_ssvc_id, ONLY_21),
    ("6.1.48", metrics.test_6_1_48_ssvc_decision_points, ONLY_21),
    ("6.1.49", metrics.test_6_1_49_inconsistent_ssvc_timestamp, ONLY_21),
    # 6.2 optional tests
    ("6.2.1", product_ids.test_6_2_01_unused_definition_of_product_id, BOTH),
    ("6.2.2", vulnerabilities.test_6_2_02_missing_remediation, BOTH),
    ("6.2.3", metrics.test_6_2_03_missing_metric, BOTH),
    ("6.2.4", revision_history.test_6_2_04_build_metadata_in_rev_history, BOTH),
    ("6.2.5", revision_history.test_6_2_05_older_init_release_than_rev_history, BOTH),
    ("6.2.6", revision_history.test_6_2_06_older_current_release_than_rev_history, BOTH),
    ("6.2.7", vulnerabilities.test_6_2_07_missing_date_in_involvements, BOTH),
    ("6.2.8", identification.test_6_2_08_use_of_md5_as_only_hash_algo, BOTH),
    ("6.2.9", identification.test_6_2_09_use_of_sha1_as_only_hash_algo, BOTH),
    ("6.2.10", document.test_6_2_10_missing_tlp_label, ONLY_20),
    ("6.2.11", document.test_6_2_11_missing_canonical_url, BOTH),
    ("6.2.12", language.test_6_2_12_missing_document_language, BOTH),
    ("6.2.13", document.test_6_2_13_sorting, BOTH),
    ("6.2.15", language.test_6_2_15_use_of_default_language, BOTH),
    ("6.2.16", identification.test_6_2_16_missing_product_identification_helper, BOTH),
    ("6.2.17", vulnerabilities.test_6_2_17_cve_in_field_ids, BOTH),
    ("6.2.18", branches.test_6_2_18_product_version_range_without_vers, BOTH),
    # 6.3 informative tests
    ("6.3.1", metrics.test_6_3_01_use_of_cvss_v2_as_only_scoring_system, BOTH),
    ("6.3.3", vulnerabilities.test_6_3_03_missing_cve, BOTH),
    ("6.3.5", identification.test_6_3_05_use_of_short_hash, BOTH),
    ("6.3.10", branches.test_6_3_10_usage_of_product_version_range, BOTH),
    ("6.3.11", branches.test_6_3_11_usage_of_v_as_version_indicator, BOTH),
]

# Sections included by each preset; each preset extends the previous one.
_PRESET_SECTIONS = {
    ValidationPreset.basic: ("6.1",),
    ValidationPreset.extended: ("6.1", "6.2"),
    ValidationPreset.full: ("6.1", "6.2", "6.3"),
}


def id_sort_key(test_id: str) -> tuple[int, ...]:
    """Numeric sort key for a dotted test id; unparsable ids sort last."""
    try:
        return tuple(int(part) for part in test_id.split("."))
    except ValueError:
        return (10**9,)


def get_tests(version: CsafVersion) -> dict[str, Rule]:
    """All rules registered for a schema version, ordered by test id."""
    rules = {test_id: rule for test_id, rule, versions in _RULES if version in versions}
    return {test_id: rules[test_id] for test_id in sorted(rules, key=id_sort_key)}


def get_preset_test_ids(version: CsafVersion, preset: ValidationPreset) -> list[str]:
    sections = _PRESET_SECTIONS[preset]
    return [test_id for test_id in get_tests(version) if _section_of(test_id) in sections]


def _section_of(test_id: str) -> str:
    return ".".join(test_id.split(".")[:2])


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def validate_by_test(doc: CsafTrait, test_id: str, version: CsafVersion) -> TestResult:
    """Run one rule. Unknown ids, or ids not registered for the version, give not_found."""
    rule = get_tests(version).get(test_id)
    if rule is None:
        logger.debug("Test %s not found for CSAF %s", test_id, version.value)
        return TestResult(test_id, TestResultStatus.not_found)

    try:
        errors = rule(doc)
    except Exception as exc:
        logger.exception("Test %s raised while validating", test_id)
        errors = [ValidationError(f"Test {test_id} could not be executed: {exc}", "")]

    status = TestResultStatus.failure if errors else TestResultStatus.success
    logger.debug("Test %s: %s (%d error(s))", test_id, status.value, len(errors))
    return TestResult(test_id, status, list(errors))


def validate_by_tests(
    doc: CsafTrait,
    test_ids: Iterable[str],
    version: CsafVersion,
    preset: ValidationPreset,
) -> ValidationResult:
    """Run the given rules in the order requested; duplicates run once."""
    seen: set[str] = set()
    results = []
    for test_id in test_ids:
        if test_id in seen:
            continue
        seen.add(test_id)
        results.append(validate_by_test(doc, test_id, version))

    result = ValidationResult.from_test_results(version, preset, results)
    logger.info(
        "Validated CSAF %s document: %d test(s), %d failed, %d error(s)",
        version.value,
        len(results),
        sum(1 for r in results if r.failed),
        result.num_errors,
    )
    return result


def validate_by_preset(doc: CsafTrait, preset: ValidationPreset, version: CsafVersion) -> ValidationResult:
    return validate_by_tests(doc, get_preset_test_ids(version, preset), version, preset)


def validate_document(
    doc: CsafTrait,
    preset: Optional[ValidationPreset] = None,
    test_ids: Optional[list[str]] = None,
) -> ValidationResult:
    """Validate with the document's own CSAF version.

    Explicit test ids take precedence over the preset; without either, the
    configured default preset is used.
    """
    version = doc.get_document().get_csaf_version()
    preset = preset or get_settings().default_preset
    if test_ids:
        return validate_by_tests(doc, test_ids, version, preset)
    return validate_by_preset(doc, preset, version)
