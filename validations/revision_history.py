"""
validations/revision_history.py -- /document/tracking version and revision_history checks.

Covers 6.1.14, 6.1.16 - 6.1.22, 6.1.30 and 6.2.4 - 6.2.6.

Rules that need a sorted history return the parse and mixed-scheme errors of
RevisionHistory instead of their own findings when the history cannot be
ordered; integer and semantic versions have no common ordering.
"""

from collections import defaultdict
from typing import Optional, Union

from advisory.dates import InvalidDateTime, parse_csaf_datetime
from advisory.revisions import REVISION_HISTORY_PATH, RevisionDates, RevisionHistory
from advisory.traits import CsafTrait, DocumentStatus
from advisory.versions import IntVer, SemVer, VersionNumber, VersionNumberError, parse_version
from core.models import ValidationError

VERSION_PATH = "/document/tracking/version"
INITIAL_RELEASE_DATE_PATH = "/document/tracking/initial_release_date"
CURRENT_RELEASE_DATE_PATH = "/document/tracking/current_release_date"

_RELEASED = (DocumentStatus.final.value, DocumentStatus.interim.value)


def _document_version(doc: CsafTrait) -> Union[VersionNumber, ValidationError]:
    """The parsed /document/tracking/version, or the error explaining why it does not parse."""
    try:
        return parse_version(doc.get_document().get_tracking().get_version())
    except VersionNumberError as exc:
        return exc.to_validation_error(VERSION_PATH)


def _number_path(index: int) -> str:
    return f"{REVISION_HISTORY_PATH}/{index}/number"


def _is_zero_major(number: VersionNumber) -> bool:
    return number.major == 0


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def test_6_1_14_sorted_revision_history(doc: CsafTrait) -> list[ValidationError]:
    history = RevisionHistory.from_document(doc)
    if not history.is_valid:
        return history.errors

    by_date = history.sorted_by_date_then_number()
    by_number = history.sorted_by_number()
    return [
        ValidationError(
            f"Revision history is not sorted by date, revision with number {dated.raw_number} is out of place",
            dated.path,
        )
        for dated, numbered in zip(by_date, by_number)
        if dated.date != numbered.date
    ]


def test_6_1_16_latest_document_version(doc: CsafTrait) -> list[ValidationError]:
    version = _document_version(doc)
    if isinstance(version, ValidationError):
        return [version]

    history = RevisionHistory.from_document(doc)
    if not history.is_valid:
        return history.errors
    if not len(history):
        return []

    status = doc.get_document().get_tracking().get_status()
    latest = history.sorted_by_date_then_number()[-1].number
    if isinstance(version, IntVer) and isinstance(latest, IntVer):
        if version == latest:
            return []
    elif isinstance(version, SemVer) and isinstance(latest, SemVer):
        if version.same_release(latest, include_prerelease=status != DocumentStatus.draft.value):
            return []

    return [
        ValidationError(
            f"The document version '{version}' is not equal to the latest revision history number "
            f"'{latest}' in document with status '{status}'",
            VERSION_PATH,
        )
    ]


# ---------------------------------------------------------------------------
# Draft and released documents
# ---------------------------------------------------------------------------


def _draft_reason(version: VersionNumber) -> Optional[str]:
    if isinstance(version, IntVer):
        return "Version 0 is" if version.value == 0 else None
    if version.major == 0:
        return "Versions 0.y.z are"
    if version.prerelease:
        return "Versions with prerelease are"
    return None


def test_6_1_17_document_status_draft(doc: CsafTrait) -> list[ValidationError]:
    status = doc.get_document().get_tracking().get_status()
    if status == DocumentStatus.draft.value:
        return []

    version = _document_version(doc)
    if isinstance(version, ValidationError):
        return [version]

    reason = _draft_reason(version)
    if reason is None:
        return []
    return [
        ValidationError(
            f"The document version is '{version}' but the document status is '{status}'. "
            f"{reason} reserved for document status 'Draft'",
            VERSION_PATH,
        )
    ]


def test_6_1_18_released_revision_history(doc: CsafTrait) -> list[ValidationError]:
    tracking = doc.get_document().get_tracking()
    status = tracking.get_status()
    if status not in _RELEASED:
        return []

    errors = []
    for i, revision in enumerate(tracking.get_revision_history()):
        try:
            number = parse_version(revision.get_number())
        except VersionNumberError:
            continue
        if _is_zero_major(number):
            errors.append(
                ValidationError(
                    f"Document with status '{status}' contains a revision history item with number "
                    f"'{revision.get_number()}'",
                    _number_path(i),
                )
            )
    return errors


def test_6_1_19_revision_history_entries_for_prerelease_versions(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for i, revision in enumerate(doc.get_document().get_tracking().get_revision_history()):
        try:
            number = parse_version(revision.get_number())
        except VersionNumberError as exc:
            errors.append(exc.to_validation_error(_number_path(i)))
            continue
        if isinstance(number, SemVer) and number.prerelease:
            errors.append(
                ValidationError(f"revision history item number '{number}' contains a pre-release part", _number_path(i))
            )
    return errors


def test_6_1_20_non_draft_document_version(doc: CsafTrait) -> list[ValidationError]:
    status = doc.get_document().get_tracking().get_status()
    if status not in _RELEASED:
        return []

    version = _document_version(doc)
    if isinstance(version, ValidationError):
        return [version]
    if isinstance(version, SemVer) and version.prerelease:
        return [
            ValidationError(
                f"The document status is {status} but the document version {version} contains a pre-release part",
                VERSION_PATH,
            )
        ]
    return []


# ---------------------------------------------------------------------------
# Completeness and uniqueness
# ---------------------------------------------------------------------------


def _describe(number: VersionNumber, major: int) -> str:
    return f"integer version {major}" if isinstance(number, IntVer) else f"semver version {major}.y.z"


def _describe_range(number: VersionNumber, first: int, last: int) -> str:
    if isinstance(number, IntVer):
        return f"integer version range {first} to {last}"
    return f"semver version range {first}.y.z to {last}.y.z"


def test_6_1_21_missing_item_in_revision_history(doc: CsafTrait) -> list[ValidationError]:
    history = RevisionHistory.from_document(doc)
    if not history.is_valid:
        return history.errors
    if not len(history):
        return []

    items = history.sorted_by_date_then_number()
    first = items[0]
    first_major = first.number.major
    if first_major > 1:
        expected = "integer version of 0 or 1" if isinstance(first.number, IntVer) else "semver version of 0.y.z or 1.y.z"
        return [
            ValidationError(
                f"The first revision history item should have {expected}, but was {first.number}",
                first.path,
            )
        ]

    last_major = items[-1].number.major
    present = {item.number.major for item in items}
    return [
        ValidationError(
            f"Missing revision history item with {_describe(first.number, major)} number "
            f"{_describe_range(first.number, first_major, last_major)}",
            REVISION_HISTORY_PATH,
        )
        for major in range(first_major + 1, last_major)
        if major not in present
    ]


def test_6_1_22_multiple_definition_in_revision_history(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    indices: dict[VersionNumber, list[int]] = defaultdict(list)
    for i, revision in enumerate(doc.get_document().get_tracking().get_revision_history()):
        try:
            indices[parse_version(revision.get_number())].append(i)
        except VersionNumberError as exc:
            errors.append(exc.to_validation_error(_number_path(i)))

    for number, positions in indices.items():
        if len(positions) > 1:
            errors += [
                ValidationError(f"Duplicate definition of revision history number {number}", _number_path(i))
                for i in positions
            ]
    return errors


def test_6_1_30_mixed_integer_and_semantic_versioning(doc: CsafTrait) -> list[ValidationError]:
    """The document version decides which scheme the revision numbers must follow."""
    version = _document_version(doc)
    if isinstance(version, ValidationError):
        return [version]

    errors = []
    for i, revision in enumerate(doc.get_document().get_tracking().get_revision_history()):
        try:
            number = parse_version(revision.get_number())
        except VersionNumberError as exc:
            errors.append(exc.to_validation_error(_number_path(i)))
            continue
        if type(number) is not type(version):
            errors.append(
                ValidationError(
                    f"The document version '{version}' and revision history number '{number}' "
                    "use different versioning schemes",
                    _number_path(i),
                )
            )
    return errors


# ---------------------------------------------------------------------------
# Optional
# ---------------------------------------------------------------------------


def test_6_2_04_build_metadata_in_rev_history(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for i, revision in enumerate(doc.get_document().get_tracking().get_revision_history()):
        try:
            number = parse_version(revision.get_number())
        except VersionNumberError:
            continue
        if isinstance(number, SemVer) and number.build:
            errors.append(
                ValidationError(
                    f"Revision history item with number '{revision.get_number()}' contains build metadata",
                    _number_path(i),
                )
            )
    return errors


def test_6_2_05_older_init_release_than_rev_history(doc: CsafTrait) -> list[ValidationError]:
    raw = doc.get_document().get_tracking().get_initial_release_date()
    try:
        initial = parse_csaf_datetime(raw)
    except InvalidDateTime as exc:
        return [exc.to_validation_error(INITIAL_RELEASE_DATE_PATH)]

    dates = RevisionDates.from_document(doc)
    if dates.errors:
        return dates.errors
    oldest = dates.oldest()
    if oldest is None or initial >= oldest:
        return []
    return [
        ValidationError(
            f"Initial release date '{raw}' is older than the earliest revision history date '{dates.raw[oldest]}'",
            INITIAL_RELEASE_DATE_PATH,
        )
    ]


def test_6_2_06_older_current_release_than_rev_history(doc: CsafTrait) -> list[ValidationError]:
    raw = doc.get_document().get_tracking().get_current_release_date()
    try:
        current = parse_csaf_datetime(raw)
    except InvalidDateTime as exc:
        return [exc.to_validation_error(CURRENT_RELEASE_DATE_PATH)]

    dates = RevisionDates.from_document(doc)
    if dates.errors:
        return dates.errors
    newest = dates.newest()
    if newest is None or current >= newest:
        return []
    return [
        ValidationError(
            f"Current release date '{raw}' is older than the newest revision history date '{dates.raw[newest]}'",
            CURRENT_RELEASE_DATE_PATH,
        )
    ]
