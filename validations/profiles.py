"""
validations/profiles.py -- Profile specific requirements (6.1.27.1 - 6.1.27.11).

Each rule only applies to the document categories named in its
CategoryScope; documents of any other category pass trivially.
"""

from advisory.categories import (
    CSAF_DEPRECATED_SECURITY_ADVISORY,
    CSAF_INFORMATIONAL_ADVISORY,
    CSAF_SECURITY_ADVISORY,
    CSAF_SECURITY_INCIDENT_RESPONSE,
    CSAF_SUPERSEDED,
    CSAF_VEX,
    CSAF_WITHDRAWN,
    CategoryScope,
)
from advisory.products import resolve_product_groups, resolve_product_ids
from advisory.traits import CsafTrait, NoteCategory, ReferenceCategory, ThreatCategory
from core.models import ValidationError

DOCUMENT_NOTES = CategoryScope(shared=(CSAF_INFORMATIONAL_ADVISORY, CSAF_SECURITY_INCIDENT_RESPONSE))
DOCUMENT_REFERENCES = DOCUMENT_NOTES
VULNERABILITIES_FORBIDDEN = CategoryScope(
    csaf20=(CSAF_INFORMATIONAL_ADVISORY,),
    csaf21=(CSAF_INFORMATIONAL_ADVISORY, CSAF_WITHDRAWN, CSAF_SUPERSEDED),
)
ADVISORY_OR_VEX = CategoryScope(
    shared=(CSAF_SECURITY_ADVISORY, CSAF_VEX),
    csaf21=(CSAF_DEPRECATED_SECURITY_ADVISORY,),
)
ADVISORY = CategoryScope(shared=(CSAF_SECURITY_ADVISORY,), csaf21=(CSAF_DEPRECATED_SECURITY_ADVISORY,))
VEX = CategoryScope(shared=(CSAF_VEX,))

_DESCRIPTIVE_NOTES = frozenset(
    c.value for c in (NoteCategory.description, NoteCategory.details, NoteCategory.general, NoteCategory.summary)
)


def _category_in(doc: CsafTrait, scope: CategoryScope) -> str:
    """The document category if the scope applies to it, else an empty string."""
    document = doc.get_document()
    category = document.get_category()
    return category if scope.applies_to(document.get_csaf_version(), category) else ""


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------


def test_6_1_27_01_document_notes(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, DOCUMENT_NOTES)
    if not category:
        return []
    notes = doc.get_document().get_notes() or []
    if any(note.get_category() in _DESCRIPTIVE_NOTES for note in notes):
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must have at least one document note with category "
            "'description', 'details', 'general' or 'summary'",
            "/document/notes",
        )
    ]


def test_6_1_27_02_document_references(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, DOCUMENT_REFERENCES)
    if not category:
        return []
    references = doc.get_document().get_references() or []
    # A reference without category is external.
    if any(ref.get_category() in (None, ReferenceCategory.external.value) for ref in references):
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must have at least one reference with category 'external'",
            "/document/references",
        )
    ]


def test_6_1_27_03_vulnerabilities(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, VULNERABILITIES_FORBIDDEN)
    if not category or not doc.get_vulnerabilities():
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must not have a '/vulnerabilities' element",
            "/vulnerabilities",
        )
    ]


def test_6_1_27_04_product_tree(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, ADVISORY_OR_VEX)
    if not category or doc.get_product_tree() is not None:
        return []
    return [ValidationError(f"Document with category '{category}' must have a '/product_tree' element", "/product_tree")]


def test_6_1_27_11_vulnerabilities(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, ADVISORY_OR_VEX)
    if not category or doc.get_vulnerabilities():
        return []
    return [
        ValidationError(f"Document with category '{category}' must have a '/vulnerabilities' element", "/vulnerabilities")
    ]


# ---------------------------------------------------------------------------
# Per vulnerability
# ---------------------------------------------------------------------------


def test_6_1_27_05_vulnerability_notes(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, ADVISORY_OR_VEX)
    if not category:
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must have a notes element in each vulnerability",
            f"/vulnerabilities/{v_i}/notes",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        if not vuln.get_notes()
    ]


def test_6_1_27_06_product_status(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, ADVISORY)
    if not category:
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must have a product_status element in each vulnerability",
            f"/vulnerabilities/{v_i}/product_status",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        if vuln.get_product_status() is None
    ]


def test_6_1_27_07_vex_product_status(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, VEX)
    if not category:
        return []
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        if status is None:
            continue
        if any(
            lst is not None
            for lst in (
                status.get_fixed(),
                status.get_known_affected(),
                status.get_known_not_affected(),
                status.get_under_investigation(),
            )
        ):
            continue
        errors.append(
            ValidationError(
                f"Document with category '{category}' must provide at least one fixed, known_affected, "
                "known_not_affected or under_investigation product_status in each vulnerability",
                f"/vulnerabilities/{v_i}/product_status",
            )
        )
    return errors


def test_6_1_27_08_vulnerability_id(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, VEX)
    if not category:
        return []
    return [
        ValidationError(
            f"Document with category '{category}' must provide at least either cve or ids in each vulnerability",
            f"/vulnerabilities/{v_i}",
        )
        for v_i, vuln in enumerate(doc.get_vulnerabilities())
        if vuln.get_cve() is None and vuln.get_ids() is None
    ]


def test_6_1_27_09_impact_statement(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, VEX)
    if not category:
        return []
    groups = resolve_product_groups(doc)
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        known_not_affected = (status.get_known_not_affected() if status is not None else None) or []
        if not known_not_affected:
            continue

        stated: set[str] = set()
        for flag in vuln.get_flags() or []:
            stated.update(resolve_product_ids(flag.get_product_ids(), flag.get_group_ids(), groups))
        for threat in vuln.get_threats():
            if threat.get_category() == ThreatCategory.impact.value:
                stated.update(resolve_product_ids(threat.get_product_ids(), threat.get_group_ids(), groups))

        errors += [
            ValidationError(
                f"In documents with category '{category}', vulnerability product status 'known_not_affected' "
                "entries must have a corresponding impact statement in 'flags' or 'threats' with category "
                f"'impact'. Found 'known_not_affected' product status entry '{product_id}' without impact statement.",
                f"/vulnerabilities/{v_i}/product_status/known_not_affected/{k_i}",
            )
            for k_i, product_id in enumerate(known_not_affected)
            if product_id not in stated
        ]
    return errors


def test_6_1_27_10_action_statement(doc: CsafTrait) -> list[ValidationError]:
    category = _category_in(doc, VEX)
    if not category:
        return []
    groups = resolve_product_groups(doc)
    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        status = vuln.get_product_status()
        known_affected = (status.get_known_affected() if status is not None else None) or []
        if not known_affected:
            continue

        remediated = {
            product_id
            for remediation in vuln.get_remediations()
            for product_id in resolve_product_ids(remediation.get_product_ids(), remediation.get_group_ids(), groups)
        }
        errors += [
            ValidationError(
                f"In documents with category '{category}', vulnerability product status 'known_affected' "
                "entries must have a corresponding action statement in 'remediations'. "
                f"Found 'known_affected' product status entry '{product_id}' without action statement.",
                f"/vulnerabilities/{v_i}/product_status/known_affected/{k_i}",
            )
            for k_i, product_id in enumerate(known_affected)
            if product_id not in remediated
        ]
    return errors
