"""
advisory/catalogs.py -- Reference data the rules check documents against.

The CVSS JSON schemas, the CWE id/name table and the SSVC decision point
table ship as JSON under advisory/data/. CWE_CATALOG_PATH and
SSVC_CATALOG_PATH point the validator at larger tables of the same shape.
Every loader is cached per path, so a catalog is parsed at most once per
process.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from core.config import get_settings

logger = logging.getLogger("csafvalidator.catalogs")

DATA_DIR = Path(__file__).parent / "data"

CVSS_SCHEMA_VERSIONS = ("2.0", "3.0", "3.1", "4.0")


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# CVSS schemas
# ---------------------------------------------------------------------------


@lru_cache
def cvss_validator(version: str) -> Validator:
    """Schema validator for one CVSS version ("2.0", "3.0", "3.1" or "4.0")."""
    if version not in CVSS_SCHEMA_VERSIONS:
        raise KeyError(f"No CVSS schema for version {version}")
    schema = _read_json(DATA_DIR / f"cvss-v{version}.json")
    cls = validator_for(schema)
    cls.check_schema(schema)
    logger.debug("Loaded CVSS %s schema (%s)", version, cls.__name__)
    return cls(schema)


# ---------------------------------------------------------------------------
# CWE
# ---------------------------------------------------------------------------


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


@dataclass(frozen=True)
class CweCatalog:
    release_dates: dict[str, date]
    entries: dict[str, str]

    def has_version(self, version: str) -> bool:
        return version in self.release_dates

    def name_of(self, cwe_id: str) -> Optional[str]:
        return self.entries.get(cwe_id)

    def latest_version(self, at: Optional[datetime] = None) -> str:
        """Newest catalog version released on or before `at`.

        Without a usable date, or when every release is newer, the newest
        version overall is returned.
        """
        ordered = sorted(self.release_dates, key=_version_key, reverse=True)
        if at is not None:
            for version in ordered:
                if self.release_dates[version] <= at.date():
                    return version
        return ordered[0]


@lru_cache
def load_cwe_catalog(path: Path) -> CweCatalog:
    data = _read_json(path)
    catalog = CweCatalog(
        release_dates={v: date.fromisoformat(d) for v, d in data["release_dates"].items()},
        entries=dict(data["entries"]),
    )
    if not catalog.release_dates:
        raise ValueError(f"CWE catalog {path} lists no versions")
    logger.debug("Loaded %d CWE entries from %s", len(catalog.entries), path)
    return catalog


def cwe_catalog() -> CweCatalog:
    return load_cwe_catalog(get_settings().cwe_catalog_path or DATA_DIR / "cwe.json")


# ---------------------------------------------------------------------------
# SSVC
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecisionPoint:
    namespace: str
    key: str
    version: str
    name: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class SsvcCatalog:
    decision_points: dict[tuple[str, str, str], DecisionPoint]

    def is_registered(self, namespace: str) -> bool:
        return any(ns == namespace for ns, _, _ in self.decision_points)

    def find(self, namespace: str, key: str, version: str) -> Optional[DecisionPoint]:
        return self.decision_points.get((namespace, key, version))


@lru_cache
def load_ssvc_catalog(path: Path) -> SsvcCatalog:
    points = {}
    for raw in _read_json(path)["decision_points"]:
        dp = DecisionPoint(
            namespace=raw["namespace"],
            key=raw["key"],
            version=raw["version"],
            name=raw["name"],
            values=tuple(raw["values"]),
        )
        points[(dp.namespace, dp.key, dp.version)] = dp
    logger.debug("Loaded %d SSVC decision points from %s", len(points), path)
    return SsvcCatalog(points)


def ssvc_catalog() -> SsvcCatalog:
    return load_ssvc_catalog(get_settings().ssvc_catalog_path or DATA_DIR / "ssvc_decision_points.json")
