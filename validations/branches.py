"""
validations/branches.py -- Product tree branch names and depth (6.1.31, 6.1.34, 6.2.18, 6.3.10, 6.3.11).
"""

import re
from typing import Iterator

from advisory.products import find_excessive_branch_depth, visit_all_branches
from advisory.traits import BranchCategory, BranchTrait, CsafTrait
from core.models import ValidationError

MAX_BRANCH_DEPTH = 30

VERS_RE = re.compile(r"^vers:[a-z.\-+][a-z0-9.\-+]*/.+")
V_VERSION_RE = re.compile(r"^[vV][0-9].*$")

# Two-character operators are matched (and removed) before their one-character prefixes.
_RANGE_OPERATORS = (">=", ">", "<=", "<")
_RANGE_KEYWORDS = ("after", "all", "before", "earlier", "later", "prior", "versions")


def _branches_of(doc: CsafTrait, category: BranchCategory) -> Iterator[tuple[BranchTrait, str]]:
    for branch, path in visit_all_branches(doc):
        if branch.get_category() == category.value:
            yield branch, path


def version_range_markers(name: str) -> list[str]:
    """Operators and keywords in a product_version name that express a range.

    >>> version_range_markers("prior to 4.2 and >= 3")
    ['>=', 'prior']
    """
    found = []
    remaining = name.lower()
    for operator in _RANGE_OPERATORS:
        if operator in remaining:
            found.append(operator)
        remaining = remaining.replace(operator, "")
    found += [token for token in remaining.split() if token in _RANGE_KEYWORDS]
    return found


def test_6_1_31_version_range_in_product_version(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for branch, path in _branches_of(doc, BranchCategory.product_version):
        markers = version_range_markers(branch.get_name())
        if not markers:
            continue
        if len(markers) > 1:
            described = "substrings '" + "', '".join(markers) + "'"
        else:
            described = f"substring '{markers[0]}'"
        errors.append(
            ValidationError(f"Product version '{branch.get_name()}' contains forbidden {described}", f"{path}/name")
        )
    return errors


def test_6_1_34_branches_recursion_depth(doc: CsafTrait) -> list[ValidationError]:
    """First-found: the first branch nested deeper than MAX_BRANCH_DEPTH."""
    path = find_excessive_branch_depth(doc, MAX_BRANCH_DEPTH)
    if path is None:
        return []
    return [ValidationError(f"Branches recursion depth too big (> {MAX_BRANCH_DEPTH})", path)]


def test_6_2_18_product_version_range_without_vers(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(f"Product version range {branch.get_name()} does not match vers syntax", f"{path}/name")
        for branch, path in _branches_of(doc, BranchCategory.product_version_range)
        if not VERS_RE.match(branch.get_name())
    ]


def test_6_3_10_usage_of_product_version_range(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError("Usage of 'product_version_range' branch category is not recommended", path)
        for _, path in _branches_of(doc, BranchCategory.product_version_range)
    ]


def test_6_3_11_usage_of_v_as_version_indicator(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError(
            f"Product version name {branch.get_name()} starting with 'v' or 'V' as version indicator "
            "is not recommended",
            f"{path}/name",
        )
        for branch, path in _branches_of(doc, BranchCategory.product_version)
        if V_VERSION_RE.match(branch.get_name())
    ]
