"""
tests/test_vulnerabilities.py -- Unit tests for rules local to a vulnerability item.

Coverage:
  - 6.1.11 CWE ids and names against the bundled catalog (2.0 cwe, 2.1 cwes)
  - 6.1.23 duplicate CVE, 6.1.24 duplicate involvements
  - 6.1.29 / 6.1.32 remediations and flags without product reference
  - 6.1.33 several VEX flags per product (direct and via groups)
  - 6.1.35 contradicting remediations
  - 6.2.2 missing remediation, 6.2.7 involvement without date
  - 6.2.17 CVE in ids, 6.3.3 missing CVE
"""

from __future__ import annotations

import json

import pytest
from conftest import product_tree

from core.config import get_settings
from core.loader import parse_document
from validations import vulnerabilities


def _remediation(category: str, *product_ids: str, group_ids: list[str] | None = None) -> dict:
    remediation = {"category": category, "details": "Details."}
    if group_ids:
        remediation["group_ids"] = group_ids
    if product_ids:
        remediation["product_ids"] = list(product_ids)
    return remediation


XSS = "Improper Neutralization of Input During Web Page Generation ('Cross-site Scripting')"


class TestCwe:
    def test_known_cwe(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"cwes": [{"id": "CWE-79", "name": XSS, "version": "4.13"}]}]
        assert vulnerabilities.test_6_1_11_cwe(parse_document(doc21)) == []

    def test_wrong_name_uses_release_date_version(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {"cwes": [{"id": "CWE-20", "name": "Improper Input Validation"}, {"id": "CWE-79", "name": "XSS"}]}
        ]
        errors = vulnerabilities.test_6_1_11_cwe(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            (f"CWE 'CWE-79' exists in version 4.13, however its name is '{XSS}'.", "/vulnerabilities/0/cwes/1/name")
        ]

    def test_unknown_id(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"cwes": [{"id": "CWE-99999", "name": "Nothing", "version": "4.16"}]}]
        errors = vulnerabilities.test_6_1_11_cwe(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            ("CWE 'CWE-99999' does not exist in version 4.16.", "/vulnerabilities/0/cwes/0/id")
        ]

    def test_unknown_version(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"cwes": [{"id": "CWE-79", "name": XSS, "version": "1.0"}]}]
        errors = vulnerabilities.test_6_1_11_cwe(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            ("Unknown CWE version 1.0.", "/vulnerabilities/0/cwes/0/version")
        ]

    def test_release_before_every_catalog_uses_newest(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["current_release_date"] = "2020-01-01T00:00:00Z"
        doc21["vulnerabilities"] = [{"cwes": [{"id": "CWE-79", "name": "XSS"}]}]
        errors = vulnerabilities.test_6_1_11_cwe(parse_document(doc21))
        assert "in version 4.16" in errors[0].message

    def test_csaf_20_single_cwe(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [{"cwe": {"id": "CWE-79", "name": "XSS"}}]
        errors = vulnerabilities.test_6_1_11_cwe(parse_document(doc20))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/cwe/name"]

    def test_catalog_path_from_settings(self, doc21: dict, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        catalog = {"release_dates": {"5.0": "2024-01-01"}, "entries": {"CWE-79": "XSS"}}
        path = tmp_path / "cwe.json"
        path.write_text(json.dumps(catalog), encoding="utf-8")
        monkeypatch.setenv("CWE_CATALOG_PATH", str(path))
        get_settings.cache_clear()
        try:
            doc21["vulnerabilities"] = [{"cwes": [{"id": "CWE-79", "name": "XSS"}]}]
            assert vulnerabilities.test_6_1_11_cwe(parse_document(doc21)) == []
        finally:
            get_settings.cache_clear()


class TestDuplicates:
    def test_same_cve_twice(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"cve": "CVE-2024-0001"}, {"cve": "CVE-2024-0002"}, {"cve": "CVE-2024-0001"}]
        errors = vulnerabilities.test_6_1_23_multiple_use_of_same_cve(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/cve", "/vulnerabilities/2/cve"]

    def test_duplicate_involvement(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {
                "involvements": [
                    {"date": "2024-01-10T00:00:00Z", "party": "vendor", "status": "in_progress"},
                    {"date": "2024-01-10T02:00:00+02:00", "party": "vendor", "status": "completed"},
                    {"date": "2024-01-10T00:00:00Z", "party": "coordinator", "status": "completed"},
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_24_multiple_definition_in_involvements(parse_document(doc21))
        assert [e.instance_path for e in errors] == [
            "/vulnerabilities/0/involvements/0",
            "/vulnerabilities/0/involvements/1",
        ]
        assert errors[0].message == (
            "Duplicate usage of tuple of involvement date 2024-01-10T00:00:00Z and party vendor"
        )

    def test_involvements_without_date(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {
                "involvements": [
                    {"party": "vendor", "status": "open"},
                    {"party": "vendor", "status": "completed"},
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_24_multiple_definition_in_involvements(parse_document(doc21))
        assert len(errors) == 2
        assert "involvement date none and party vendor" in errors[0].message


class TestProductReferences:
    def test_remediation_without_products(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"remediations": [_remediation("vendor_fix")]}]
        errors = vulnerabilities.test_6_1_29_remediation_without_product_reference(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/remediations/0"]

    def test_flag_without_products(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {"flags": [{"label": "component_not_present", "product_ids": ["CSAFPID-0001"]}, {"label": "component_not_present"}]}
        ]
        errors = vulnerabilities.test_6_1_32_flag_without_product_reference(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/flags/1"]


class TestVexFlags:
    def test_two_flags_for_one_product(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001", "CSAFPID-0002")
        doc21["vulnerabilities"] = [
            {
                "flags": [
                    {"label": "component_not_present", "product_ids": ["CSAFPID-0001"]},
                    {"label": "vulnerable_code_not_present", "product_ids": ["CSAFPID-0001", "CSAFPID-0002"]},
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_33_multiple_flags_with_vex_codes_per_product(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/flags/0", "/vulnerabilities/0/flags/1"]
        assert "[component_not_present, vulnerable_code_not_present]" in errors[0].message

    def test_flag_via_group(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001", "CSAFPID-0002")
        doc21["product_tree"]["product_groups"] = [
            {"group_id": "CSAFGID-0001", "product_ids": ["CSAFPID-0001", "CSAFPID-0002"]}
        ]
        doc21["vulnerabilities"] = [
            {
                "flags": [
                    {"label": "component_not_present", "group_ids": ["CSAFGID-0001"]},
                    {"label": "inline_mitigations_already_exist", "product_ids": ["CSAFPID-0002"]},
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_33_multiple_flags_with_vex_codes_per_product(parse_document(doc21))
        assert len(errors) == 2
        assert "(via group: CSAFGID-0001)" in errors[0].message


class TestContradictingRemediations:
    def test_none_available_with_vendor_fix(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001")
        doc21["vulnerabilities"] = [
            {
                "remediations": [
                    _remediation("none_available", "CSAFPID-0001"),
                    _remediation("vendor_fix", "CSAFPID-0001"),
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_35_contradicting_remediations(parse_document(doc21))
        assert len(errors) == 1
        assert errors[0].instance_path == "/vulnerabilities/0/remediations/1"
        assert errors[0].message == "Product CSAFPID-0001 has contradicting remediations: none_available and vendor_fix"

    def test_fix_planned_and_vendor_fix(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001")
        doc21["vulnerabilities"] = [
            {
                "remediations": [
                    _remediation("workaround", "CSAFPID-0001"),
                    _remediation("fix_planned", "CSAFPID-0001"),
                    _remediation("vendor_fix", "CSAFPID-0001"),
                ]
            }
        ]
        errors = vulnerabilities.test_6_1_35_contradicting_remediations(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/remediations/2"]

    def test_compatible_remediations(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001")
        doc21["vulnerabilities"] = [
            {
                "remediations": [
                    _remediation("workaround", "CSAFPID-0001"),
                    _remediation("mitigation", "CSAFPID-0001"),
                    _remediation("vendor_fix", "CSAFPID-0001"),
                ]
            }
        ]
        assert vulnerabilities.test_6_1_35_contradicting_remediations(parse_document(doc21)) == []

    def test_contradiction_through_group(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001")
        doc21["product_tree"]["product_groups"] = [{"group_id": "CSAFGID-0001", "product_ids": ["CSAFPID-0001"]}]
        doc21["vulnerabilities"] = [
            {
                "remediations": [
                    _remediation("no_fix_planned", "CSAFPID-0001"),
                    _remediation("optional_patch", group_ids=["CSAFGID-0001"]),
                ]
            }
        ]
        assert len(vulnerabilities.test_6_1_35_contradicting_remediations(parse_document(doc21))) == 1


class TestOptionalVulnerabilityRules:
    def test_missing_remediation(self, doc21: dict) -> None:
        doc21["product_tree"] = product_tree("CSAFPID-0001", "CSAFPID-0002")
        doc21["vulnerabilities"] = [
            {
                "product_status": {"known_affected": ["CSAFPID-0001", "CSAFPID-0002"]},
                "remediations": [_remediation("no_fix_planned", "CSAFPID-0001")],
            }
        ]
        errors = vulnerabilities.test_6_2_02_missing_remediation(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/product_status/known_affected/1"]

    def test_involvement_without_date(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"involvements": [{"party": "vendor", "status": "open"}]}]
        errors = vulnerabilities.test_6_2_07_missing_date_in_involvements(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/involvements/0"]

    def test_cve_in_ids(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [
            {"ids": [{"system_name": "Example tracker", "text": "EX-1"}, {"system_name": "NVD", "text": "CVE-2024-12345"}]}
        ]
        errors = vulnerabilities.test_6_2_17_cve_in_field_ids(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/ids/1/text"]

    def test_cve_with_trailing_newline_not_matched(self, doc21: dict) -> None:
        doc21["vulnerabilities"] = [{"ids": [{"system_name": "NVD", "text": "CVE-2024-12345\n"}]}]
        assert vulnerabilities.test_6_2_17_cve_in_field_ids(parse_document(doc21)) == []

    def test_missing_cve(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [{"cve": "CVE-2024-0001"}, {"title": "No CVE yet"}]
        errors = vulnerabilities.test_6_3_03_missing_cve(parse_document(doc20))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/1"]
