"""
tests/test_dates.py -- Unit tests for date-time parsing and the date rules.

Coverage:
  - advisory.dates.parse_csaf_datetime: accepted forms, rejected forms, offsets
  - 6.1.37 first invalid date-time in traversal order
  - 6.1.45 disclosure date later than the newest revision
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from advisory.dates import InvalidDateTime, is_valid_datetime, parse_csaf_datetime
from core.loader import parse_document
from core.models import ValidationError
from validations import dates


class TestParseCsafDatetime:
    def test_utc(self) -> None:
        assert parse_csaf_datetime("2024-01-24T10:00:00Z") == datetime(2024, 1, 24, 10, tzinfo=timezone.utc)

    def test_offset_and_fraction(self) -> None:
        parsed = parse_csaf_datetime("2024-01-24T12:00:00.123456789+02:00")
        assert parsed == datetime(2024, 1, 24, 10, 0, 0, 123456, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "raw",
        [
            "2024-01-24",
            "2024-01-24T10:00:00",
            "2024-01-24 10:00:00Z",
            "2024-01-24T10:00:00+0200",
            "2024-01-24T10:00:00.000Z\n",
            "2024-01-24T10:00:60Z",
        ],
    )
    def test_rejects_non_rfc3339(self, raw: str) -> None:
        with pytest.raises(InvalidDateTime) as exc_info:
            parse_csaf_datetime(raw)
        assert "expected RFC3339-compliant format" in exc_info.value.message

    def test_rejects_impossible_date(self) -> None:
        with pytest.raises(InvalidDateTime) as exc_info:
            parse_csaf_datetime("2023-02-30T10:00:00Z")
        assert "not a valid calendar date-time" in exc_info.value.message

    def test_is_valid_datetime(self) -> None:
        assert is_valid_datetime("2024-01-24T10:00:00.000Z")
        assert not is_valid_datetime("yesterday")

    def test_only_ascii_digits(self) -> None:
        assert not is_valid_datetime("\u0662\u0660\u0662\u0664-01-24T10:00:00Z")


class TestDateAndTime:
    def test_minimal_document_passes(self, doc21: dict) -> None:
        assert dates.test_6_1_37_date_and_time(parse_document(doc21)) == []

    def test_first_invalid_date_only(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["current_release_date"] = "2024-01-24"
        doc21["vulnerabilities"] = [{"discovery_date": "2024-13-01T00:00:00Z"}]
        errors = dates.test_6_1_37_date_and_time(parse_document(doc21))
        assert len(errors) == 1
        assert errors[0].instance_path == "/document/tracking/current_release_date"

    def test_exact_error(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["initial_release_date"] = "2024-01-24 10:00:00.000Z"
        assert dates.test_6_1_37_date_and_time(parse_document(doc21)) == [
            ValidationError(
                "Invalid date-time string 2024-01-24 10:00:00.000Z, expected RFC3339-compliant format "
                "with non-empty timezone",
                "/document/tracking/initial_release_date",
            )
        ]

    def test_trailing_newline_reported(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["initial_release_date"] = "2024-01-24T10:00:00.000Z\n"
        errors = dates.test_6_1_37_date_and_time(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/document/tracking/initial_release_date"]

    def test_vulnerability_dates(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {
                "first_known_exploitation_dates": [
                    {"date": "2024-01-20T00:00:00Z", "exploitation_date": "2024-01-19"}
                ]
            }
        ]
        errors = dates.test_6_1_37_date_and_time(parse_document(doc21))
        assert [e.instance_path for e in errors] == [
            "/vulnerabilities/0/first_known_exploitation_dates/0/exploitation_date"
        ]

    def test_csaf_20_release_date(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [{"release_date": "not a date"}]
        errors = dates.test_6_1_37_date_and_time(parse_document(doc20))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/release_date"]

    def test_traversal_order(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {
                "discovery_date": "2024-01-01T00:00:00Z",
                "disclosure_date": "2024-01-02T00:00:00Z",
                "flags": [{"date": "2024-01-03T00:00:00Z", "label": "component_not_present"}],
            }
        ]
        paths = [path for _, path in dates.iter_date_fields(parse_document(doc21))]
        assert paths[-3:] == [
            "/vulnerabilities/0/disclosure_date",
            "/vulnerabilities/0/discovery_date",
            "/vulnerabilities/0/flags/0/date",
        ]


class TestInconsistentDisclosureDate:
    def test_disclosure_after_newest_revision(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"disclosure_date": "2024-02-01T00:00:00Z"}]
        errors = dates.test_6_1_45_inconsistent_disclosure_date(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/disclosure_date"]

    def test_disclosure_before_newest_revision(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"disclosure_date": "2024-01-01T00:00:00Z"}]
        assert dates.test_6_1_45_inconsistent_disclosure_date(parse_document(doc21)) == []

    def test_only_for_tlp_clear(self, doc21: dict) -> None:
        doc21["document"]["distribution"]["tlp"]["label"] = "GREEN"
        doc21["vulnerabilities"] = [{"disclosure_date": "2024-02-01T00:00:00Z"}]
        assert dates.test_6_1_45_inconsistent_disclosure_date(parse_document(doc21)) == []

    def test_only_for_released_documents(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["status"] = "draft"
        doc21["vulnerabilities"] = [{"disclosure_date": "2024-02-01T00:00:00Z"}]
        assert dates.test_6_1_45_inconsistent_disclosure_date(parse_document(doc21)) == []
