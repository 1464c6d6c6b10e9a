"""
tests/test_metrics.py -- Unit tests for CVSS / SSVC handling and the metric rules.

Coverage:
  - advisory.cvss vector parsing and base / temporal scores
  - 6.1.7 multiple scores of one kind per product (2.0 scores and 2.1 metrics)
  - 6.1.8 CVSS objects against the CVSS JSON schemas
  - 6.1.9 invalid CVSS computation, 6.1.10 inconsistent CVSS properties
  - 6.1.46 / 6.1.47 / 6.1.49 SSVC validity, target ids and timestamps
  - 6.1.48 SSVC decision points and value order
  - 6.2.3 missing metric, 6.3.1 CVSS v2 as only scoring system
"""

from __future__ import annotations

import logging

import pytest

from advisory.cvss import InvalidVector, parse_v2_vector, parse_v3_vector, roundup_v31, score_v2, score_v3
from core import validation
from core.config import get_settings
from core.loader import parse_document
from core.models import CsafVersion, TestResultStatus
from validations import metrics

V31_CRITICAL = "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H"
V2_COMPLETE = "AV:N/AC:L/Au:N/C:C/I:C/A:C"
CONTENT = "/vulnerabilities/0/metrics/0/content"


def _cvss_v3(vector: str = V31_CRITICAL, **overrides) -> dict:
    data = {"baseScore": 9.8, "baseSeverity": "CRITICAL", "vectorString": vector, "version": "3.1"}
    data.update(overrides)
    return data


def _ssvc(**overrides) -> dict:
    data = {
        "schemaVersion": "1-0-1",
        "selections": [{"key": "E", "namespace": "ssvc", "values": [{"key": "A"}], "version": "1.1.0"}],
        "target_ids": ["CVE-2024-0001"],
        "timestamp": "2024-01-20T10:00:00Z",
    }
    data.update(overrides)
    return data


def _with_metrics(data: dict, *contents: dict, products: tuple[str, ...] = ("CSAFPID-0001",), **vuln) -> dict:
    vulnerability = {"cve": "CVE-2024-0001", **vuln}
    vulnerability["metrics"] = [{"content": content, "products": list(products)} for content in contents]
    data["vulnerabilities"] = [vulnerability]
    return data


class TestCvss:
    def test_v31_base_score(self) -> None:
        scores = score_v3(parse_v3_vector(V31_CRITICAL))
        assert scores.base_score == 9.8
        assert scores.base_severity == "CRITICAL"

    def test_v3_temporal_score(self) -> None:
        scores = score_v3(parse_v3_vector(V31_CRITICAL + "/E:P/RL:O/RC:C"))
        assert scores.temporal_score == 8.8

    def test_v2_base_score(self) -> None:
        assert score_v2(parse_v2_vector(V2_COMPLETE)).base_score == 10.0

    def test_v31_roundup(self) -> None:
        assert roundup_v31(4.000001) == 4.1
        assert roundup_v31(4.0) == 4.0

    @pytest.mark.parametrize(
        "vector",
        [
            "CVSS:2.0/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H",
            "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H",
            "CVSS:3.1/AV:X/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H",
            "CVSS:3.1/AV:N/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H",
        ],
    )
    def test_invalid_v3_vectors(self, vector: str) -> None:
        with pytest.raises(InvalidVector):
            parse_v3_vector(vector)

    def test_vector_properties(self) -> None:
        implied = parse_v3_vector(V31_CRITICAL).properties()
        assert implied["attackVector"] == "NETWORK"
        assert implied["scope"] == "UNCHANGED"


class TestMultipleScores:
    def test_same_version_twice_for_product(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3()}, {"cvss_v3": _cvss_v3()})
        errors = metrics.test_6_1_07_multiple_same_scores_per_product(parse_document(doc21))
        assert [e.instance_path for e in errors] == [
            f"{CONTENT}/cvss_v3",
            "/vulnerabilities/0/metrics/1/content/cvss_v3",
        ]
        assert errors[0].message == "Multiple CVSS-v3.1 scores are given for CSAFPID-0001 by author."

    def test_different_versions_allowed(self, doc21: dict) -> None:
        v30 = _cvss_v3("CVSS:3.0/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", version="3.0")
        _with_metrics(doc21, {"cvss_v3": _cvss_v3()}, {"cvss_v3": v30})
        assert metrics.test_6_1_07_multiple_same_scores_per_product(parse_document(doc21)) == []

    def test_different_sources_allowed(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3()}, {"cvss_v3": _cvss_v3()})
        doc21["vulnerabilities"][0]["metrics"][1]["source"] = "https://nvd.nist.gov"
        assert metrics.test_6_1_07_multiple_same_scores_per_product(parse_document(doc21)) == []

    def test_csaf_20_scores(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [
            {
                "scores": [
                    {"cvss_v3": _cvss_v3(), "products": ["CSAFPID-0001"]},
                    {"cvss_v3": _cvss_v3(), "products": ["CSAFPID-0001"]},
                ]
            }
        ]
        errors = metrics.test_6_1_07_multiple_same_scores_per_product(parse_document(doc20))
        assert errors[0].instance_path == "/vulnerabilities/0/scores/0/cvss_v3"


class TestCvssConsistency:
    def test_consistent_cvss(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(attackVector="NETWORK")})
        doc = parse_document(doc21)
        assert metrics.test_6_1_09_invalid_cvss_computation(doc) == []
        assert metrics.test_6_1_10_inconsistent_cvss(doc) == []

    def test_wrong_base_score(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(baseScore=10.0, baseSeverity="HIGH")})
        errors = metrics.test_6_1_09_invalid_cvss_computation(parse_document(doc21))
        assert [e.instance_path for e in errors] == [
            f"{CONTENT}/cvss_v3/baseScore",
            f"{CONTENT}/cvss_v3/baseSeverity",
        ]

    def test_wrong_v2_base_score(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [
            {
                "scores": [
                    {
                        "cvss_v2": {"baseScore": 7.5, "vectorString": V2_COMPLETE, "version": "2.0"},
                        "products": ["CSAFPID-0001"],
                    }
                ]
            }
        ]
        errors = metrics.test_6_1_09_invalid_cvss_computation(parse_document(doc20))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/scores/0/cvss_v2/baseScore"]

    def test_property_contradicts_vector(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(attackVector="LOCAL")})
        errors = metrics.test_6_1_10_inconsistent_cvss(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v3/attackVector"]
        assert "implies NETWORK" in errors[0].message

    def test_version_contradicts_vector(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(version="3.0")})
        errors = metrics.test_6_1_10_inconsistent_cvss(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v3/version"]

    def test_unparsable_vector(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3("CVSS:3.1/AV:N")})
        doc = parse_document(doc21)
        errors = metrics.test_6_1_10_inconsistent_cvss(doc)
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v3/vectorString"]
        assert metrics.test_6_1_09_invalid_cvss_computation(doc) == []


class TestCvssSchema:
    def test_valid_objects(self, doc21: dict) -> None:
        v4 = {
            "version": "4.0",
            "vectorString": "CVSS:4.0/AV:N/AC:L/AT:N/PR:N/UI:N/VC:H/VI:H/VA:H/SC:N/SI:N/SA:N",
            "baseScore": 9.3,
            "baseSeverity": "CRITICAL",
        }
        _with_metrics(
            doc21,
            {"cvss_v3": _cvss_v3(attackVector="NETWORK")},
            {"cvss_v2": {"baseScore": 10.0, "vectorString": V2_COMPLETE, "version": "2.0"}, "cvss_v4": v4},
        )
        assert metrics.test_6_1_08_invalid_cvss(parse_document(doc21)) == []

    def test_missing_required_property(self, doc21: dict) -> None:
        v3 = _cvss_v3()
        del v3["baseSeverity"]
        _with_metrics(doc21, {"cvss_v3": v3})
        errors = metrics.test_6_1_08_invalid_cvss(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            ("'baseSeverity' is a required property", f"{CONTENT}/cvss_v3")
        ]

    def test_enum_violation_points_at_property(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(attackVector="INTERNET")})
        errors = metrics.test_6_1_08_invalid_cvss(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v3/attackVector"]
        assert errors[0].message.startswith("'INTERNET' is not one of")

    def test_v30_object_checked_against_v30_schema(self, doc21: dict) -> None:
        # a 3.1 vector under version 3.0 does not match the 3.0 vector pattern
        _with_metrics(doc21, {"cvss_v3": _cvss_v3(version="3.0")})
        errors = metrics.test_6_1_08_invalid_cvss(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v3/vectorString"]

    def test_v4_rejects_unknown_properties(self, doc21: dict) -> None:
        v4 = {
            "version": "4.0",
            "vectorString": "CVSS:4.0/AV:N/AC:L/AT:N/PR:N/UI:N/VC:H/VI:H/VA:H/SC:N/SI:N/SA:N",
            "baseScore": 9.3,
            "baseSeverity": "CRITICAL",
            "threatScore": 9.3,
        }
        _with_metrics(doc21, {"cvss_v4": v4})
        errors = metrics.test_6_1_08_invalid_cvss(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/cvss_v4"]
        assert "threatScore" in errors[0].message

    def test_csaf_20_v2_score(self, doc20: dict) -> None:
        doc20["vulnerabilities"] = [
            {
                "scores": [
                    {
                        "cvss_v2": {"baseScore": 11, "vectorString": V2_COMPLETE, "version": "2.0"},
                        "products": ["CSAFPID-0001"],
                    }
                ]
            }
        ]
        errors = metrics.test_6_1_08_invalid_cvss(parse_document(doc20))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/scores/0/cvss_v2/baseScore"]
        assert errors[0].message == "11 is greater than the maximum of 10"


class TestSsvc:
    def test_valid_ssvc(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc()})
        doc = parse_document(doc21)
        assert metrics.test_6_1_46_invalid_ssvc(doc) == []
        assert metrics.test_6_1_47_inconsistent_ssvc_id(doc) == []
        assert metrics.test_6_1_49_inconsistent_ssvc_timestamp(doc) == []

    def test_invalid_ssvc(self, doc21: dict) -> None:
        ssvc = _ssvc()
        del ssvc["timestamp"]
        _with_metrics(doc21, {"ssvc_v2": ssvc})
        errors = metrics.test_6_1_46_invalid_ssvc(parse_document(doc21))
        assert len(errors) == 1
        assert errors[0].instance_path == f"{CONTENT}/ssvc_v2"
        assert errors[0].message.startswith("Invalid SSVC object: timestamp")

    def test_unknown_target_id(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(target_ids=["CVE-2024-9999"])})
        errors = metrics.test_6_1_47_inconsistent_ssvc_id(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/ssvc_v2/target_ids/0"]

    def test_target_id_from_ids(self, doc21: dict) -> None:
        _with_metrics(
            doc21,
            {"ssvc_v2": _ssvc(target_ids=["EX-42"])},
            ids=[{"system_name": "Example tracker", "text": "EX-42"}],
        )
        assert metrics.test_6_1_47_inconsistent_ssvc_id(parse_document(doc21)) == []

    def test_document_id_with_several_vulnerabilities(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(target_ids=["EXAMPLE-2024-001"])})
        doc21["vulnerabilities"].append({"cve": "CVE-2024-0002"})
        errors = metrics.test_6_1_47_inconsistent_ssvc_id(parse_document(doc21))
        assert len(errors) == 1
        assert "multiple vulnerabilities" in errors[0].message

    def test_timestamp_after_newest_revision(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(timestamp="2024-02-01T00:00:00Z")})
        errors = metrics.test_6_1_49_inconsistent_ssvc_timestamp(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/ssvc_v2/timestamp"]

    def test_timestamp_ignored_in_drafts(self, doc21: dict) -> None:
        doc21["document"]["tracking"]["status"] = "draft"
        _with_metrics(doc21, {"ssvc_v2": _ssvc(timestamp="2024-02-01T00:00:00Z")})
        assert metrics.test_6_1_49_inconsistent_ssvc_timestamp(parse_document(doc21)) == []


class TestSsvcDecisionPoints:
    @staticmethod
    def _selection(key: str = "E", version: str = "1.1.0", values: tuple[str, ...] = ("A",)) -> dict:
        return {"namespace": "ssvc", "key": key, "version": version, "values": [{"key": v} for v in values]}

    def test_known_decision_point(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[self._selection(values=("N", "P"))])})
        assert metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21)) == []

    def test_unknown_decision_point(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[self._selection(version="9.0.0")])})
        errors = metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            ("Unknown SSVC decision point 'ssvc::E' with version '9.0.0'", f"{CONTENT}/ssvc_v2/selections/0")
        ]

    def test_unknown_value(self, doc21: dict) -> None:
        selection = self._selection("MI", "1.0.0", ("D",))
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[selection])})
        errors = metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21))
        assert [(e.message, e.instance_path) for e in errors] == [
            (
                "The SSVC decision point 'ssvc::Mission Impact' (version 1.0.0) doesn't have a value with key 'D'",
                f"{CONTENT}/ssvc_v2/selections/0/values/0",
            )
        ]

    def test_values_out_of_order(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[self._selection(values=("A", "N"))])})
        errors = metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/ssvc_v2/selections/0/values/1"]
        assert errors[0].message.endswith("are not in correct order")

    def test_unregistered_namespace_skipped(self, doc21: dict) -> None:
        selection = {"namespace": "x_example.com", "key": "Q", "version": "0.0.1", "values": [{"key": "Z"}]}
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[selection])})
        assert metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21)) == []

    def test_invalid_ssvc_reported(self, doc21: dict) -> None:
        _with_metrics(doc21, {"ssvc_v2": _ssvc(selections=[])})
        errors = metrics.test_6_1_48_ssvc_decision_points(parse_document(doc21))
        assert [e.instance_path for e in errors] == [f"{CONTENT}/ssvc_v2"]
        assert errors[0].message.startswith("Invalid SSVC object")

    def test_missing_catalog_file(self, doc21: dict, tmp_path, monkeypatch, caplog) -> None:
        monkeypatch.setenv("SSVC_CATALOG_PATH", str(tmp_path / "absent.json"))
        get_settings.cache_clear()
        try:
            with caplog.at_level(logging.WARNING, logger="csafvalidator.config"):
                get_settings()
            _with_metrics(doc21, {"ssvc_v2": _ssvc()})
            result = validation.validate_by_test(parse_document(doc21), "6.1.48", CsafVersion.X21)
        finally:
            get_settings.cache_clear()
        assert "SSVC_CATALOG_PATH" in caplog.text
        assert result.status == TestResultStatus.failure
        assert result.errors[0].message.startswith("Test 6.1.48 could not be executed")


class TestOptionalMetricRules:
    def test_missing_metric(self, doc21: dict) -> None:
        _with_metrics(
            doc21,
            {"cvss_v3": _cvss_v3()},
            product_status={"known_affected": ["CSAFPID-0001", "CSAFPID-0002"]},
        )
        errors = metrics.test_6_2_03_missing_metric(parse_document(doc21))
        assert [e.instance_path for e in errors] == ["/vulnerabilities/0/product_status/known_affected/1"]

    def test_cvss_v2_only(self, doc21: dict) -> None:
        _with_metrics(doc21, {"cvss_v2": {"baseScore": 10.0, "vectorString": V2_COMPLETE, "version": "2.0"}})
        errors = metrics.test_6_3_01_use_of_cvss_v2_as_only_scoring_system(parse_document(doc21))
        assert [e.instance_path for e in errors] == [CONTENT]

    def test_cvss_v2_alongside_v3(self, doc21: dict) -> None:
        _with_metrics(
            doc21,
            {"cvss_v2": {"baseScore": 10.0, "vectorString": V2_COMPLETE, "version": "2.0"}},
            {"cvss_v3": _cvss_v3()},
        )
        assert metrics.test_6_3_01_use_of_cvss_v2_as_only_scoring_system(parse_document(doc21)) == []
