"""
tests/conftest.py -- Shared fixtures for the CSAF validator tests.

This module provides:
  - minimal_csaf_21() / minimal_csaf_20(): the smallest documents that pass
    every registered test of the full preset. Tests copy one, break exactly
    one thing and bind it with parse_document().
  - doc21 / doc20: fresh copies of those documents per test
  - api_client: TestClient for API integration tests

Keys in the minimal documents are written in sorted order so the sorting
test (6.2.13) passes; tests that add top-level members append them after
"document", which keeps the order sorted.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Any

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app

# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------

RELEASE_DATE = "2024-01-24T10:00:00.000Z"


def _minimal(csaf_version: str, tlp_label: str) -> dict[str, Any]:
    return {
        "document": {
            "category": "csaf_base",
            "csaf_version": csaf_version,
            "distribution": {"tlp": {"label": tlp_label}},
            "lang": "en",
            "publisher": {
                "category": "vendor",
                "name": "Example Company",
                "namespace": "https://example.com",
            },
            "references": [
                {
                    "category": "self",
                    "summary": "Canonical URL",
                    "url": "https://example.com/.well-known/csaf/white/2024/example-2024-001.json",
                }
            ],
            "title": "Example advisory",
            "tracking": {
                "current_release_date": RELEASE_DATE,
                "id": "EXAMPLE-2024-001",
                "initial_release_date": RELEASE_DATE,
                "revision_history": [
                    {"date": RELEASE_DATE, "number": "1", "summary": "Initial version."},
                ],
                "status": "final",
                "version": "1",
            },
        }
    }


def minimal_csaf_21() -> dict[str, Any]:
    return _minimal("2.1", "CLEAR")


def minimal_csaf_20() -> dict[str, Any]:
    return _minimal("2.0", "WHITE")


def product_tree(*product_ids: str) -> dict[str, Any]:
    """A product_tree with one full_product_name per id."""
    return {
        "full_product_names": [
            {
                "name": f"Product {product_id}",
                "product_id": product_id,
                "product_identification_helper": {"cpe": f"cpe:/a:example:{product_id.lower()}:1.0"},
            }
            for product_id in product_ids
        ]
    }


def revisions(*items: tuple[str, str]) -> list[dict[str, str]]:
    """revision_history entries from (date, number) pairs."""
    return [{"date": date, "number": number, "summary": "Update."} for date, number in items]


@pytest.fixture
def doc21() -> dict[str, Any]:
    return minimal_csaf_21()


@pytest.fixture
def doc20() -> dict[str, Any]:
    return minimal_csaf_20()


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _test_lifespan(app):
    yield


@pytest.fixture(scope="module")
def api_client() -> Generator[TestClient, None, None]:
    """TestClient against the real app with the startup logging skipped.

    The limiter's in-memory counters are reset so each module starts with
    a full rate limit budget.
    """
    app.router.lifespan_context = _test_lifespan
    limiter.reset()
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
