"""
validations/vulnerabilities.py -- Checks local to a single vulnerability item.

Covers 6.1.11, 6.1.23, 6.1.24, 6.1.29, 6.1.32, 6.1.33, 6.1.35, 6.2.2, 6.2.7,
6.2.17 and 6.3.3.
"""

import re
from collections import defaultdict
from datetime import datetime
from typing import Optional

from advisory.catalogs import cwe_catalog
from advisory.dates import InvalidDateTime, parse_csaf_datetime
from advisory.products import resolve_product_groups, resolve_product_ids
from advisory.traits import CsafTrait, RemediationCategory
from core.models import CVE_PATTERN, CsafVersion, ValidationError


def test_6_1_23_multiple_use_of_same_cve(doc: CsafTrait) -> list[ValidationError]:
    indices: dict[str, list[int]] = defaultdict(list)
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        if vuln.get_cve() is not None:
            indices[vuln.get_cve()].append(v_i)

    errors = []
    for cve, positions in indices.items():
        if len(positions) > 1:
            errors += [
                ValidationError(f"Duplicate usage of same CVE identifier '{cve}'", f"/vulnerabilities/{v_i}/cve")
                for v_i in positions
            ]
    return errors


def test_6_1_24_multiple_definition_in_involvements(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        # (date, party) -> [(involvement index, raw date)]
        seen: dict[tuple[Optional[datetime], str], list[tuple[int, Optional[str]]]] = defaultdict(list)
        for i_i, involvement in enumerate(vuln.get_involvements() or []):
            raw = involvement.get_date()
            date = None
            if raw is not None:
                try:
                    date = parse_csaf_datetime(raw)
                except InvalidDateTime as exc:
                    errors.append(exc.to_validation_error(f"/vulnerabilities/{v_i}/involvements/{i_i}/date"))
                    continue
            seen[(date, involvement.get_party())].append((i_i, raw))

        for (_, party), entries in seen.items():
            if len(entries) < 2:
                continue
            errors += [
                ValidationError(
                    f"Duplicate usage of tuple of involvement date {raw or 'none'} and party {party}",
                    f"/vulnerabilities/{v_i}/involvements/{i_i}",
                )
                for i_i, raw in entries
            ]
    return errors


# ---------------------------------------------------------------------------
# 6.1.11 CWE
# ---------------------------------------------------------------------------


def _cwe_paths(doc: CsafTrait, v_i: int, count: int) -> list[str]:
    if doc.get_document().get_csaf_version() == CsafVersion.X20:
        return [f"/vulnerabilities/{v_i}/cwe"]
    return [f"/vulnerabilities/{v_i}/cwes/{c_i}" for c_i in range(count)]


def test_6_1_11_cwe(doc: CsafTrait) -> list[ValidationError]:
    """CWE ids must exist in the stated (or release-date implied) catalog version under their catalog name."""
    catalog = cwe_catalog()
    try:
        released = parse_csaf_datetime(doc.get_document().get_tracking().get_current_release_date())
    except InvalidDateTime:
        released = None
    default_version = catalog.latest_version(released)

    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        cwes = vuln.get_cwes() or []
        for path, cwe in zip(_cwe_paths(doc, v_i, len(cwes)), cwes):
            version = cwe.get_version() or default_version
            if not catalog.has_version(version):
                errors.append(ValidationError(f"Unknown CWE version {version}.", f"{path}/version"))
                continue
            name = catalog.name_of(cwe.get_id())
            if name is None:
                errors.append(
                    ValidationError(f"CWE '{cwe.get_id()}' does not exist in version {version}.", f"{path}/id")
                )
            elif name != cwe.get_name():
                errors.append(
                    ValidationError(
                        f"CWE '{cwe.get_id()}' exists in version {version}, however its name is '{name}'.",
                        f"{path}/name",
                    )
                )
    return errors


# ---------------------------------------------------------------------------
# Product references on remediations and flags
# ---------------------------------------------------------------------------


def test_6_1_29_remediation_without_product_reference(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(
            "A remediation needs to at least have one of the elements group_ids or product_ids",
            f"/vulnerabilities/{v_i}/remediations/{r_i}",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        for r_i, remediation in enumerate(vuln.get_remediations())
        if not remediation.get_product_ids() and not remediation.get_group_ids()
    ]


def test_6_1_32_flag_without_product_reference(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(
            "Each flag must reference at least one group_id or product_id",
            f"/vulnerabilities/{v_i}/flags/{f_i}",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        for f_i, flag in enumerate(vuln.get_flags() or [])
        if not flag.get_product_ids() and not flag.get_group_ids()
    ]


def test_6_1_33_multiple_flags_with_vex_codes_per_product(doc: CsafTrait) -> list[ValidationError]:
    groups = resolve_product_groups(doc)
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        # product_id -> [(label, flag index, group_id it was reached through)]
        flags_of: dict[str, list[tuple[str, int, Optional[str]]]] = defaultdict(list)
        for f_i, flag in enumerate(vuln.get_flags() or []):
            label = flag.get_label()
            for product_id in flag.get_product_ids() or []:
                flags_of[product_id].append((label, f_i, None))
            for group_id in flag.get_group_ids() or []:
                for product_id in groups.get(group_id, []):
                    flags_of[product_id].append((label, f_i, group_id))

        for product_id, entries in flags_of.items():
            if len(entries) < 2:
                continue
            labels = ", ".join(sorted(label for label, _, _ in entries))
            for label, f_i, group_id in entries:
                via = f"(via group: {group_id})" if group_id is not None else ""
                errors.append(
                    ValidationError(
                        f"Product '{product_id}' is associated with multiple flag labels: [{labels}] {via}, "
                        f"it has flag label {label} on this path",
                        f"/vulnerabilities/{v_i}/flags/{f_i}",
                    )
                )
    return errors


# ---------------------------------------------------------------------------
# 6.1.35 Contradicting remediations
# ---------------------------------------------------------------------------

# Cannot be combined with any other category.
_EXCLUSIVE = frozenset((RemediationCategory.none_available.value, RemediationCategory.optional_patch.value))
# At most one of these per product.
_MUTUALLY_EXCLUSIVE = frozenset(
    (
        RemediationCategory.no_fix_planned.value,
        RemediationCategory.fix_planned.value,
        RemediationCategory.vendor_fix.value,
    )
)


def _contradicts(existing: list[str], category: str) -> bool:
    first = existing[0]
    if category in _EXCLUSIVE and first != category:
        return True
    if first in _EXCLUSIVE:
        return True
    return category in _MUTUALLY_EXCLUSIVE and any(c in _MUTUALLY_EXCLUSIVE for c in existing)


def test_6_1_35_contradicting_remediations(doc: CsafTrait) -> list[ValidationError]:
    """First-found: the first remediation contradicting an earlier one for the same product."""
    groups = resolve_product_groups(doc)
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        categories_of: dict[str, list[str]] = {}
        for r_i, remediation in enumerate(vuln.get_remediations()):
            category = remediation.get_category()
            for product_id in resolve_product_ids(remediation.get_product_ids(), remediation.get_group_ids(), groups):
                existing = categories_of.setdefault(product_id, [])
                if existing and _contradicts(existing, category):
                    return [
                        ValidationError(
                            f"Product {product_id} has contradicting remediations: "
                            f"{', '.join(existing)} and {category}",
                            f"/vulnerabilities/{v_i}/remediations/{r_i}",
                        )
                    ]
                existing.append(category)
    return []


# ---------------------------------------------------------------------------
# Optional / informative
# ---------------------------------------------------------------------------

_REMEDIATION_REQUIRED = ("first_affected", "known_affected", "last_affected", "under_investigation")
_NO_FIX = frozenset((RemediationCategory.none_available.value, RemediationCategory.no_fix_planned.value))


def test_6_2_02_missing_remediation(doc: CsafTrait) -> list[ValidationError]:
    groups = resolve_product_groups(doc)
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        if status is None:
            continue
        covered = {
            product_id
            for remediation in vuln.get_remediations()
            if remediation.get_category() in _NO_FIX
            for product_id in resolve_product_ids(remediation.get_product_ids(), remediation.get_group_ids(), groups)
        }
        for name in _REMEDIATION_REQUIRED:
            for i, product_id in enumerate(getattr(status, f"get_{name}")() or []):
                if product_id not in covered:
                    errors.append(
                        ValidationError(
                            "Missing at least a remediation of category 'none_available' or 'no_fix_planned' "
                            f"for product ID '{product_id}' in product status group '{name}'",
                            f"/vulnerabilities/{v_i}/product_status/{name}/{i}",
                        )
                    )
    return errors


def test_6_2_07_missing_date_in_involvements(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(
            "Involvement item is missing required 'date' field",
            f"/vulnerabilities/{v_i}/involvements/{i_i}",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        for i_i, involvement in enumerate(vuln.get_involvements() or [])
        if involvement.get_date() is None
    ]


def test_6_2_17_cve_in_field_ids(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(
            f"Vulnerability ID text '{vid.get_text()}' matches CVE format",
            f"/vulnerabilities/{v_i}/ids/{i_i}/text",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        for i_i, vid in enumerate(vuln.get_ids() or [])
        if re.fullmatch(CVE_PATTERN, vid.get_text())
    ]


def test_6_3_03_missing_cve(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError("Vulnerability is missing 'cve' property", f"/vulnerabilities/{v_i}")
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        if vuln.get_cve() is None
    ]
