"""
validations/product_status.py -- Consistency of product_status lists (6.1.6, 6.1.36).
"""

from advisory.products import (
    STATUS_GROUP_OF,
    iter_product_status,
    product_status_groups,
    resolve_product_groups,
    resolve_product_ids,
)
from advisory.traits import CsafTrait, ProductStatusGroup, RemediationCategory
from core.models import ValidationError

_GROUP_ORDER = list(ProductStatusGroup)


def test_6_1_06_contradicting_product_status(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        if status is None:
            continue
        groups_of: dict[str, list[ProductStatusGroup]] = {}
        for name, _, product_id in iter_product_status(status):
            group = STATUS_GROUP_OF.get(name)
            if group is None:
                continue
            groups = groups_of.setdefault(product_id, [])
            if group not in groups:
                groups.append(group)

        for product_id, groups in groups_of.items():
            if len(groups) < 2:
                continue
            names = ", ".join(f"'{g.value}'" for g in sorted(groups, key=_GROUP_ORDER.index))
            errors.append(
                ValidationError(
                    f"Product {product_id} is member of contradicting product status groups: {names}",
                    f"/vulnerabilities/{v_i}/product_status",
                )
            )
    return errors


_NOT_AFFECTED_CONFLICTS = frozenset(
    c.value
    for c in (
        RemediationCategory.workaround,
        RemediationCategory.mitigation,
        RemediationCategory.vendor_fix,
        RemediationCategory.none_available,
    )
)
_FIXED_CONFLICTS = frozenset(
    c.value
    for c in (
        RemediationCategory.none_available,
        RemediationCategory.fix_planned,
        RemediationCategory.no_fix_planned,
        RemediationCategory.vendor_fix,
        RemediationCategory.mitigation,
        RemediationCategory.workaround,
    )
)


def test_6_1_36_status_group_contradicting_remediation_categories(doc: CsafTrait) -> list[ValidationError]:
    """First-found: the first remediation whose category contradicts a product's status group."""
    groups = resolve_product_groups(doc)
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        if status is None:
            continue
        by_group = product_status_groups(status)
        affected = set(by_group.get(ProductStatusGroup.affected, []))
        not_affected = set(by_group.get(ProductStatusGroup.not_affected, []))
        fixed = set(by_group.get(ProductStatusGroup.fixed, []))

        for r_i, remediation in enumerate(vuln.get_remediations()):
            category = remediation.get_category()
            path = f"/vulnerabilities/{v_i}/remediations/{r_i}"
            for product_id in resolve_product_ids(remediation.get_product_ids(), remediation.get_group_ids(), groups):
                if product_id in affected and category == RemediationCategory.optional_patch:
                    conflict = "affected"
                elif product_id in not_affected and category in _NOT_AFFECTED_CONFLICTS:
                    conflict = "not affected"
                elif product_id in fixed and category in _FIXED_CONFLICTS:
                    conflict = "fixed"
                else:
                    continue
                return [
                    ValidationError(
                        f"Product {product_id} is listed as {conflict} but has conflicting "
                        f"remediation category {category}",
                        path,
                    )
                ]
    return []
