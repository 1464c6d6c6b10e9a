"""
tests/test_distribution.py -- Unit tests for TLP label and sharing group rules (CSAF 2.1).

Coverage:
  - 6.1.38 max UUID requires TLP CLEAR
  - 6.1.39 TLP CLEAR sharing groups need max UUID, or nil UUID in drafts
  - 6.1.40 / 6.1.41 reserved sharing group names
"""

from __future__ import annotations

from core.loader import parse_document
from validations import distribution
from validations.distribution import MAX_UUID, NIL_UUID

OTHER_UUID = "5f5c9a3c-3a45-4a8c-9d33-0e4a6f4f0b6e"


def _with_group(data: dict, group_id: str, name: str | None = None, label: str = "CLEAR") -> dict:
    group = {"id": group_id}
    if name is not None:
        group["name"] = name
    data["document"]["distribution"] = {"sharing_group": group, "tlp": {"label": label}}
    return data


class TestMaxUuid:
    def test_max_uuid_with_clear(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, MAX_UUID, "Public"))
        assert distribution.test_6_1_38_non_public_sharing_group_max_uuid(doc) == []

    def test_max_uuid_with_amber(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, MAX_UUID, "Public", label="AMBER"))
        errors = distribution.test_6_1_38_non_public_sharing_group_max_uuid(doc)
        assert [e.instance_path for e in errors] == ["/document/distribution/tlp/label"]

    def test_max_uuid_case_insensitive(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, MAX_UUID.upper(), "Public", label="RED"))
        assert len(distribution.test_6_1_38_non_public_sharing_group_max_uuid(doc)) == 1


class TestPublicSharingGroup:
    def test_clear_with_other_uuid(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, OTHER_UUID, "Partners"))
        errors = distribution.test_6_1_39_public_sharing_group_with_no_max_uuid(doc)
        assert [e.instance_path for e in errors] == ["/document/distribution/sharing_group/id"]

    def test_clear_with_nil_uuid_in_draft(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["status"] = "draft"
        doc = parse_document(_with_group(doc21, NIL_UUID, "No sharing allowed"))
        assert distribution.test_6_1_39_public_sharing_group_with_no_max_uuid(doc) == []

    def test_clear_with_nil_uuid_when_final(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, NIL_UUID, "No sharing allowed"))
        assert len(distribution.test_6_1_39_public_sharing_group_with_no_max_uuid(doc)) == 1

    def test_no_sharing_group(self, doc21: dict) -> None:
        doc = parse_document(doc21)
        assert distribution.test_6_1_39_public_sharing_group_with_no_max_uuid(doc) == []
        assert distribution.test_6_1_41_missing_sharing_group_name(doc) == []


class TestSharingGroupNames:
    def test_public_name_without_max_uuid(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, OTHER_UUID, "Public", label="GREEN"))
        errors = distribution.test_6_1_40_invalid_sharing_group_name(doc)
        assert [e.instance_path for e in errors] == ["/document/distribution/sharing_group/name"]

    def test_private_name_without_nil_uuid(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, OTHER_UUID, "No sharing allowed", label="RED"))
        errors = distribution.test_6_1_40_invalid_sharing_group_name(doc)
        assert "without nil UUID" in errors[0].message

    def test_max_uuid_needs_public_name(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, MAX_UUID))
        errors = distribution.test_6_1_41_missing_sharing_group_name(doc)
        assert len(errors) == 1
        assert '"Public"' in errors[0].message

    def test_nil_uuid_needs_private_name(self, doc21: dict) -> None:
        doc = parse_document(_with_group(doc21, NIL_UUID, "Nobody", label="RED"))
        errors = distribution.test_6_1_41_missing_sharing_group_name(doc)
        assert '"No sharing allowed"' in errors[0].message
