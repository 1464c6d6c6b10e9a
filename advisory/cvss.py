"""
advisory/cvss.py -- CVSS v2 and v3.x vector parsing and score computation.

Vectors are split into their metric abbreviations, mapped onto the JSON
property names and values used by the CVSS JSON schemas, and scored with
the FIRST base and temporal equations. Environmental metrics are parsed
(so vectors carrying them stay valid) but not scored.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Vector metric maps: abbreviation -> (JSON property, {value: JSON value})
# ---------------------------------------------------------------------------

_V3_IMPACT = {"H": "HIGH", "L": "LOW", "N": "NONE"}

V3_METRICS: dict[str, tuple[str, dict[str, str]]] = {
    "AV": ("attackVector", {"N": "NETWORK", "A": "ADJACENT_NETWORK", "L": "LOCAL", "P": "PHYSICAL"}),
    "AC": ("attackComplexity", {"L": "LOW", "H": "HIGH"}),
    "PR": ("privilegesRequired", {"N": "NONE", "L": "LOW", "H": "HIGH"}),
    "UI": ("userInteraction", {"N": "NONE", "R": "REQUIRED"}),
    "S": ("scope", {"U": "UNCHANGED", "C": "CHANGED"}),
    "C": ("confidentialityImpact", _V3_IMPACT),
    "I": ("integrityImpact", _V3_IMPACT),
    "A": ("availabilityImpact", _V3_IMPACT),
    "E": (
        "exploitCodeMaturity",
        {"X": "NOT_DEFINED", "U": "UNPROVEN", "P": "PROOF_OF_CONCEPT", "F": "FUNCTIONAL", "H": "HIGH"},
    ),
    "RL": (
        "remediationLevel",
        {"X": "NOT_DEFINED", "O": "OFFICIAL_FIX", "T": "TEMPORARY_FIX", "W": "WORKAROUND", "U": "UNAVAILABLE"},
    ),
    "RC": ("reportConfidence", {"X": "NOT_DEFINED", "U": "UNKNOWN", "R": "REASONABLE", "C": "CONFIRMED"}),
}

_V3_REQUIREMENT = {"X": "NOT_DEFINED", "L": "LOW", "M": "MEDIUM", "H": "HIGH"}
_V3_MODIFIED_IMPACT = {"X": "NOT_DEFINED", **_V3_IMPACT}

V3_ENVIRONMENTAL_METRICS: dict[str, tuple[str, dict[str, str]]] = {
    "CR": ("confidentialityRequirement", _V3_REQUIREMENT),
    "IR": ("integrityRequirement", _V3_REQUIREMENT),
    "AR": ("availabilityRequirement", _V3_REQUIREMENT),
    "MAV": (
        "modifiedAttackVector",
        {"X": "NOT_DEFINED", "N": "NETWORK", "A": "ADJACENT_NETWORK", "L": "LOCAL", "P": "PHYSICAL"},
    ),
    "MAC": ("modifiedAttackComplexity", {"X": "NOT_DEFINED", "L": "LOW", "H": "HIGH"}),
    "MPR": ("modifiedPrivilegesRequired", {"X": "NOT_DEFINED", "N": "NONE", "L": "LOW", "H": "HIGH"}),
    "MUI": ("modifiedUserInteraction", {"X": "NOT_DEFINED", "N": "NONE", "R": "REQUIRED"}),
    "MS": ("modifiedScope", {"X": "NOT_DEFINED", "U": "UNCHANGED", "C": "CHANGED"}),
    "MC": ("modifiedConfidentialityImpact", _V3_MODIFIED_IMPACT),
    "MI": ("modifiedIntegrityImpact", _V3_MODIFIED_IMPACT),
    "MA": ("modifiedAvailabilityImpact", _V3_MODIFIED_IMPACT),
}

_V3_MANDATORY = ("AV", "AC", "PR", "UI", "S", "C", "I", "A")

_V2_IMPACT = {"N": "NONE", "P": "PARTIAL", "C": "COMPLETE"}

V2_METRICS: dict[str, tuple[str, dict[str, str]]] = {
    "AV": ("accessVector", {"L": "LOCAL", "A": "ADJACENT_NETWORK", "N": "NETWORK"}),
    "AC": ("accessComplexity", {"H": "HIGH", "M": "MEDIUM", "L": "LOW"}),
    "Au": ("authentication", {"M": "MULTIPLE", "S": "SINGLE", "N": "NONE"}),
    "C": ("confidentialityImpact", _V2_IMPACT),
    "I": ("integrityImpact", _V2_IMPACT),
    "A": ("availabilityImpact", _V2_IMPACT),
    "E": (
        "exploitability",
        {"U": "UNPROVEN", "POC": "PROOF_OF_CONCEPT", "F": "FUNCTIONAL", "H": "HIGH", "ND": "NOT_DEFINED"},
    ),
    "RL": (
        "remediationLevel",
        {"OF": "OFFICIAL_FIX", "TF": "TEMPORARY_FIX", "W": "WORKAROUND", "U": "UNAVAILABLE", "ND": "NOT_DEFINED"},
    ),
    "RC": (
        "reportConfidence",
        {"UC": "UNCONFIRMED", "UR": "UNCORROBORATED", "C": "CONFIRMED", "ND": "NOT_DEFINED"},
    ),
}

_V2_REQUIREMENT = {"L": "LOW", "M": "MEDIUM", "H": "HIGH", "ND": "NOT_DEFINED"}

V2_ENVIRONMENTAL_METRICS: dict[str, tuple[str, dict[str, str]]] = {
    "CDP": (
        "collateralDamagePotential",
        {"N": "NONE", "L": "LOW", "LM": "LOW_MEDIUM", "MH": "MEDIUM_HIGH", "H": "HIGH", "ND": "NOT_DEFINED"},
    ),
    "TD": ("targetDistribution", {"N": "NONE", "L": "LOW", "M": "MEDIUM", "H": "HIGH", "ND": "NOT_DEFINED"}),
    "CR": ("confidentialityRequirement", _V2_REQUIREMENT),
    "IR": ("integrityRequirement", _V2_REQUIREMENT),
    "AR": ("availabilityRequirement", _V2_REQUIREMENT),
}

_V2_MANDATORY = ("AV", "AC", "Au", "C", "I", "A")

_V3_PREFIX_RE = re.compile(r"^CVSS:(3\.[01])/")


class InvalidVector(ValueError):
    def __init__(self, vector: str, reason: str) -> None:
        self.vector = vector
        self.reason = reason
        super().__init__(f"Invalid CVSS vector string {vector}: {reason}")


@dataclass
class CvssVector:
    """A parsed vector: metric abbreviations mapped to their value codes."""

    version: str
    vector: str
    metrics: dict[str, str]

    @property
    def is_v3(self) -> bool:
        return self.version.startswith("3")

    def properties(self) -> dict[str, str]:
        """The JSON property values this vector implies."""
        tables = (V3_METRICS, V3_ENVIRONMENTAL_METRICS) if self.is_v3 else (V2_METRICS, V2_ENVIRONMENTAL_METRICS)
        implied: dict[str, str] = {}
        for table in tables:
            for key, (prop, values) in table.items():
                if key in self.metrics:
                    implied[prop] = values[self.metrics[key]]
        return implied


def _split(vector: str, body: str, tables: tuple[dict, ...], mandatory: tuple[str, ...]) -> dict[str, str]:
    metrics: dict[str, str] = {}
    for part in body.split("/"):
        key, sep, value = part.partition(":")
        if not sep:
            raise InvalidVector(vector, f"malformed component '{part}'")
        table = next((t for t in tables if key in t), None)
        if table is None:
            raise InvalidVector(vector, f"unknown metric '{key}'")
        if key in metrics:
            raise InvalidVector(vector, f"metric '{key}' given more than once")
        if value not in table[key][1]:
            raise InvalidVector(vector, f"invalid value '{value}' for metric '{key}'")
        metrics[key] = value
    missing = [key for key in mandatory if key not in metrics]
    if missing:
        raise InvalidVector(vector, f"missing metric(s) {', '.join(missing)}")
    return metrics


def parse_v3_vector(vector: str) -> CvssVector:
    match = _V3_PREFIX_RE.match(vector)
    if not match:
        raise InvalidVector(vector, "expected prefix CVSS:3.0/ or CVSS:3.1/")
    body = vector[match.end():]
    metrics = _split(vector, body, (V3_METRICS, V3_ENVIRONMENTAL_METRICS), _V3_MANDATORY)
    return CvssVector(match.group(1), vector, metrics)


def parse_v2_vector(vector: str) -> CvssVector:
    body = vector[1:-1] if vector.startswith("(") and vector.endswith(")") else vector
    metrics = _split(vector, body, (V2_METRICS, V2_ENVIRONMENTAL_METRICS), _V2_MANDATORY)
    return CvssVector("2.0", vector, metrics)


# ---------------------------------------------------------------------------
# CVSS v3.x scoring
# ---------------------------------------------------------------------------

_V3_AV = {"N": 0.85, "A": 0.62, "L": 0.55, "P": 0.2}
_V3_AC = {"L": 0.77, "H": 0.44}
_V3_PR_UNCHANGED = {"N": 0.85, "L": 0.62, "H": 0.27}
_V3_PR_CHANGED = {"N": 0.85, "L": 0.68, "H": 0.5}
_V3_UI = {"N": 0.85, "R": 0.62}
_V3_CIA = {"H": 0.56, "L": 0.22, "N": 0.0}
_V3_E = {"X": 1.0, "U": 0.91, "P": 0.94, "F": 0.97, "H": 1.0}
_V3_RL = {"X": 1.0, "O": 0.95, "T": 0.96, "W": 0.97, "U": 1.0}
_V3_RC = {"X": 1.0, "U": 0.92, "R": 0.96, "C": 1.0}


def roundup_v30(value: float) -> float:
    return math.ceil(value * 10) / 10


def roundup_v31(value: float) -> float:
    """Round up to one decimal, immune to floating point artefacts (CVSS 3.1 Appendix A)."""
    int_input = round(value * 100000)
    if int_input % 10000 == 0:
        return int_input / 100000.0
    return (math.floor(int_input / 10000) + 1) / 10.0


def v3_severity(score: float) -> str:
    if score == 0:
        return "NONE"
    if score < 4.0:
        return "LOW"
    if score < 7.0:
        return "MEDIUM"
    if score < 9.0:
        return "HIGH"
    return "CRITICAL"


@dataclass
class V3Scores:
    base_score: float
    base_severity: str
    temporal_score: float
    temporal_severity: str


def score_v3(parsed: CvssVector) -> V3Scores:
    m = parsed.metrics
    roundup = roundup_v31 if parsed.version == "3.1" else roundup_v30
    changed = m["S"] == "C"

    iss = 1 - (1 - _V3_CIA[m["C"]]) * (1 - _V3_CIA[m["I"]]) * (1 - _V3_CIA[m["A"]])
    if changed:
        impact = 7.52 * (iss - 0.029) - 3.25 * (iss - 0.02) ** 15
    else:
        impact = 6.42 * iss
    pr = (_V3_PR_CHANGED if changed else _V3_PR_UNCHANGED)[m["PR"]]
    exploitability = 8.22 * _V3_AV[m["AV"]] * _V3_AC[m["AC"]] * pr * _V3_UI[m["UI"]]

    if impact <= 0:
        base = 0.0
    elif changed:
        base = roundup(min(1.08 * (impact + exploitability), 10))
    else:
        base = roundup(min(impact + exploitability, 10))

    temporal = roundup(base * _V3_E[m.get("E", "X")] * _V3_RL[m.get("RL", "X")] * _V3_RC[m.get("RC", "X")])
    return V3Scores(base, v3_severity(base), temporal, v3_severity(temporal))


# ---------------------------------------------------------------------------
# CVSS v2 scoring
# ---------------------------------------------------------------------------

_V2_AV = {"L": 0.395, "A": 0.646, "N": 1.0}
_V2_AC = {"H": 0.35, "M": 0.61, "L": 0.71}
_V2_AU = {"M": 0.45, "S": 0.56, "N": 0.704}
_V2_CIA = {"N": 0.0, "P": 0.275, "C": 0.660}
_V2_E = {"U": 0.85, "POC": 0.9, "F": 0.95, "H": 1.0, "ND": 1.0}
_V2_RL = {"OF": 0.87, "TF": 0.90, "W": 0.95, "U": 1.0, "ND": 1.0}
_V2_RC = {"UC": 0.90, "UR": 0.95, "C": 1.0, "ND": 1.0}


def round_v2(value: float) -> float:
    return math.floor(value * 10 + 0.5 + 1e-9) / 10


@dataclass
class V2Scores:
    base_score: float
    temporal_score: float


def score_v2(parsed: CvssVector) -> V2Scores:
    m = parsed.metrics
    impact = 10.41 * (1 - (1 - _V2_CIA[m["C"]]) * (1 - _V2_CIA[m["I"]]) * (1 - _V2_CIA[m["A"]]))
    exploitability = 20 * _V2_AV[m["AV"]] * _V2_AC[m["AC"]] * _V2_AU[m["Au"]]
    f_impact = 0.0 if impact == 0 else 1.176
    base = round_v2(((0.6 * impact) + (0.4 * exploitability) - 1.5) * f_impact)
    temporal = round_v2(base * _V2_E[m.get("E", "ND")] * _V2_RL[m.get("RL", "ND")] * _V2_RC[m.get("RC", "ND")])
    return V2Scores(base, temporal)


def scores_equal(given: object, computed: float) -> bool:
    if isinstance(given, bool) or not isinstance(given, (int, float)):
        return False
    return abs(float(given) - computed) < 0.05


def optional_vector(data: Optional[dict], key: str = "vectorString") -> Optional[str]:
    value = (data or {}).get(key)
    return value if isinstance(value, str) else None
