"""
advisory/revisions.py -- Parsed view of /document/tracking/revision_history.

The revision history is consumed by many rules (sorting, latest version,
missing items, release dates). RevisionHistory parses every date and number
once and keeps the failures as ValidationErrors so each rule can decide
whether to report them or bail out.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from core.models import ValidationError

from .dates import InvalidDateTime, parse_csaf_datetime
from .traits import CsafTrait, RevisionTrait
from .versions import IntVer, VersionNumber, VersionNumberError, parse_version

REVISION_HISTORY_PATH = "/document/tracking/revision_history"


def _scheme_name(number: VersionNumber) -> str:
    return "integer versioning" if isinstance(number, IntVer) else "semantic versioning"


@dataclass(frozen=True)
class RevisionItem:
    index: int
    date: datetime
    number: VersionNumber
    raw_number: str

    @property
    def path(self) -> str:
        return f"{REVISION_HISTORY_PATH}/{self.index}"


class RevisionHistory:
    """Revision history items whose date and number both parsed.

    Sorting requires a single versioning scheme; callers must check
    ``errors`` (or ``is_valid``) before calling the sorted_* methods.
    """

    def __init__(self, revisions: Sequence[RevisionTrait]) -> None:
        self.items: list[RevisionItem] = []
        self.date_errors: list[ValidationError] = []
        self.number_errors: list[ValidationError] = []
        self.mixed_scheme_errors: list[ValidationError] = []

        first_number: Optional[VersionNumber] = None
        for i, revision in enumerate(revisions):
            date: Optional[datetime] = None
            number: Optional[VersionNumber] = None
            try:
                date = parse_csaf_datetime(revision.get_date())
            except InvalidDateTime as exc:
                self.date_errors.append(exc.to_validation_error(f"{REVISION_HISTORY_PATH}/{i}/date"))
            try:
                number = parse_version(revision.get_number())
            except VersionNumberError as exc:
                self.number_errors.append(exc.to_validation_error(f"{REVISION_HISTORY_PATH}/{i}/number"))

            if number is not None:
                if first_number is None:
                    first_number = number
                elif type(number) is not type(first_number):
                    self.mixed_scheme_errors.append(
                        ValidationError(
                            message=(
                                "Mixed versioning schemes detected in revision history between "
                                f"{_scheme_name(first_number)} and {_scheme_name(number)}"
                            ),
                            instance_path=f"{REVISION_HISTORY_PATH}/{i}/number",
                        )
                    )
            if date is not None and number is not None:
                self.items.append(RevisionItem(i, date, number, revision.get_number()))

    @classmethod
    def from_document(cls, doc: CsafTrait) -> "RevisionHistory":
        return cls(doc.get_document().get_tracking().get_revision_history())

    @property
    def errors(self) -> list[ValidationError]:
        return self.date_errors + self.number_errors + self.mixed_scheme_errors

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __len__(self) -> int:
        return len(self.items)

    def sorted_by_date_then_number(self) -> list[RevisionItem]:
        return sorted(self.items, key=lambda item: (item.date, item.number))

    def sorted_by_number(self) -> list[RevisionItem]:
        return sorted(self.items, key=lambda item: item.number)


class RevisionDates:
    """Dates-only view for rules that never look at revision numbers.

    ``raw`` maps each parsed date back to the string it was written as.
    """

    def __init__(self, revisions: Sequence[RevisionTrait]) -> None:
        self.dates: list[datetime] = []
        self.raw: dict[datetime, str] = {}
        self.errors: list[ValidationError] = []
        for i, revision in enumerate(revisions):
            try:
                date = parse_csaf_datetime(revision.get_date())
                self.dates.append(date)
                self.raw.setdefault(date, revision.get_date())
            except InvalidDateTime as exc:
                self.errors.append(exc.to_validation_error(f"{REVISION_HISTORY_PATH}/{i}/date"))

    @classmethod
    def from_document(cls, doc: CsafTrait) -> "RevisionDates":
        return cls(doc.get_document().get_tracking().get_revision_history())

    def newest(self) -> Optional[datetime]:
        return max(self.dates, default=None)

    def oldest(self) -> Optional[datetime]:
        return min(self.dates, default=None)
