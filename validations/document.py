"""
validations/document.py -- Document level metadata checks (6.1.26, 6.2.10, 6.2.11, 6.2.13).
"""

import re
from typing import Any, Iterator

from advisory.categories import (
    KNOWN_PROFILES,
    is_known_profile,
    known_profiles_concat,
    normalize_category,
    starts_with_csaf_underscore,
)
from advisory.traits import CsafTrait, ReferenceCategory
from core.models import ValidationError

CATEGORY_PATH = "/document/category"

_FILENAME_INVALID_CHARS = re.compile(r"[^+\-a-z0-9]+")


def test_6_1_26_prohibited_document_category(doc: CsafTrait) -> list[ValidationError]:
    document = doc.get_document()
    version = document.get_csaf_version()
    category = document.get_category()
    if is_known_profile(category, version):
        return []

    if starts_with_csaf_underscore(category):
        return [
            ValidationError(
                f"Document category '{category}' is prohibited. Only the following values starting "
                f"with 'csaf_' are allowed: {known_profiles_concat(version)}",
                CATEGORY_PATH,
            )
        ]

    normalized = normalize_category(category)
    for known in KNOWN_PROFILES[version]:
        if normalized == normalize_category(known):
            return [
                ValidationError(
                    f"Document category '{category}' is prohibited. It is too similar to the known category: {known}",
                    CATEGORY_PATH,
                )
            ]
    return []


def test_6_2_10_missing_tlp_label(doc: CsafTrait) -> list[ValidationError]:
    """CSAF 2.0 only; 2.1 makes the label mandatory in the schema."""
    distribution = doc.get_document().get_distribution()
    tlp = distribution.get_tlp() if distribution is not None else None
    if tlp is not None and tlp.get_label() is not None:
        return []
    return [ValidationError("The CSAF document has no TLP label", "/document/distribution/tlp/label")]


def canonical_filename(tracking_id: str) -> str:
    """File name a CSAF document with this tracking id must be published under.

    >>> canonical_filename("Example Company-2024:001")
    'example_company-2024_001.json'
    """
    return f"{_FILENAME_INVALID_CHARS.sub('_', tracking_id.lower())}.json"


def test_6_2_11_missing_canonical_url(doc: CsafTrait) -> list[ValidationError]:
    document = doc.get_document()
    filename = canonical_filename(document.get_tracking().get_id())
    for reference in document.get_references() or []:
        url = reference.get_url()
        if (
            reference.get_category() == ReferenceCategory.self_.value
            and url.startswith("https://")
            and url.endswith(filename)
        ):
            return []
    return [ValidationError("Document is missing a canonical URL", "/document/references")]


# ---------------------------------------------------------------------------
# 6.2.13 Sorting
# ---------------------------------------------------------------------------


def _objects(value: Any, path: str = "") -> Iterator[tuple[dict[str, Any], str]]:
    """Yield every JSON object in document order, with its JSON pointer."""
    stack = [(value, path)]
    while stack:
        current, current_path = stack.pop()
        if isinstance(current, dict):
            yield current, current_path or "/"
            children = [(v, f"{current_path}/{k}") for k, v in current.items()]
        elif isinstance(current, list):
            children = [(v, f"{current_path}/{i}") for i, v in enumerate(current)]
        else:
            continue
        stack.extend(reversed(children))


def test_6_2_13_sorting(doc: CsafTrait) -> list[ValidationError]:
    """Keys of every object must appear in ascending order; reports the first unsorted object."""
    for obj, path in _objects(doc.get_raw()):
        keys = list(obj)
        if keys != sorted(keys):
            return [ValidationError("The keys in the CSAF document are not sorted alphabetically", path)]
    return []
