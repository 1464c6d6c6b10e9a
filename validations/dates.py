"""
validations/dates.py -- Date-time format and ordering (6.1.37, 6.1.45).

6.1.37 walks the date fields in a fixed order and reports only the first
offending one:

  tracking  initial_release_date, current_release_date, generator/date,
            revision_history[]/date
  each vulnerability in array order
            disclosure (2.0: release) date, discovery_date, flags[]/date,
            involvements[]/date, remediations[]/date, threats[]/date,
            first_known_exploitation_dates[]/date and /exploitation_date
"""

from typing import Iterator, Optional

from advisory.dates import InvalidDateTime, parse_csaf_datetime
from advisory.revisions import RevisionDates
from advisory.traits import CsafTrait, DocumentStatus, TlpLabel
from core.models import ValidationError


def iter_date_fields(doc: CsafTrait) -> Iterator[tuple[str, str]]:
    """Yield (raw date-time, JSON path) for every date field that is present."""
    tracking = doc.get_document().get_tracking()
    yield tracking.get_initial_release_date(), "/document/tracking/initial_release_date"
    yield tracking.get_current_release_date(), "/document/tracking/current_release_date"
    generator = tracking.get_generator()
    if generator is not None and generator.get_date() is not None:
        yield generator.get_date(), "/document/tracking/generator/date"
    for i, revision in enumerate(tracking.get_revision_history()):
        yield revision.get_date(), f"/document/tracking/revision_history/{i}/date"

    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        prefix = f"/vulnerabilities/{v_i}"
        if vuln.get_disclosure_date() is not None:
            yield vuln.get_disclosure_date(), f"{prefix}/{vuln.get_disclosure_date_key()}"
        if vuln.get_discovery_date() is not None:
            yield vuln.get_discovery_date(), f"{prefix}/discovery_date"
        for name, items in (
            ("flags", vuln.get_flags() or []),
            ("involvements", vuln.get_involvements() or []),
            ("remediations", vuln.get_remediations()),
            ("threats", vuln.get_threats()),
        ):
            for i, item in enumerate(items):
                if item.get_date() is not None:
                    yield item.get_date(), f"{prefix}/{name}/{i}/date"
        for i, exploitation in enumerate(vuln.get_first_known_exploitation_dates() or []):
            path = f"{prefix}/first_known_exploitation_dates/{i}"
            yield exploitation.get_date(), f"{path}/date"
            yield exploitation.get_exploitation_date(), f"{path}/exploitation_date"


def test_6_1_37_date_and_time(doc: CsafTrait) -> list[ValidationError]:
    """First-found in the traversal order of iter_date_fields."""
    for raw, path in iter_date_fields(doc):
        try:
            parse_csaf_datetime(raw)
        except InvalidDateTime as exc:
            return [exc.to_validation_error(path)]
    return []


def _is_tlp_clear(doc: CsafTrait) -> bool:
    distribution = doc.get_document().get_distribution()
    tlp = distribution.get_tlp() if distribution is not None else None
    label: Optional[str] = tlp.get_label() if tlp is not None else None
    return label == TlpLabel.CLEAR.value


def test_6_1_45_inconsistent_disclosure_date(doc: CsafTrait) -> list[ValidationError]:
    """Public final/interim documents must not disclose after their newest revision."""
    status = doc.get_document().get_tracking().get_status()
    if status not in (DocumentStatus.final.value, DocumentStatus.interim.value) or not _is_tlp_clear(doc):
        return []

    dates = RevisionDates.from_document(doc)
    if dates.errors:
        return dates.errors
    newest = dates.newest()
    if newest is None:
        return []

    errors = []
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        raw = vuln.get_disclosure_date()
        if raw is None:
            continue
        path = f"/vulnerabilities/{v_i}/{vuln.get_disclosure_date_key()}"
        try:
            disclosed = parse_csaf_datetime(raw)
        except InvalidDateTime as exc:
            errors.append(exc.to_validation_error(path))
            continue
        if disclosed > newest:
            errors.append(
                ValidationError(
                    "Disclosure date must not be later than the newest revision history date "
                    "for TLP:CLEAR documents with final or interim status",
                    path,
                )
            )
    return errors
