"""
advisory/csaf2_0.py -- CSAF 2.0 binding models implementing the accessor traits.

Differences from 2.1 that the accessors hide:
  - scores[] with cvss_v2 / cvss_v3 instead of metrics[].content
  - release_date instead of disclosure_date, a single cwe instead of cwes[]
  - a single purl instead of purls[]
  - no sharing group, no product/group ids on notes and involvements
"""

from typing import Any, Optional

from pydantic import Field, PrivateAttr

from core.models import CsafVersion

from .common import (
    CsafModel,
    Cwe,
    Flag,
    Hash,
    ProductGroup,
    ProductStatus,
    Publisher,
    Reference,
    Remediation,
    Threat,
    Tracking,
    VulnerabilityId,
)

# ---------------------------------------------------------------------------
# /document
# ---------------------------------------------------------------------------


class Note(CsafModel):
    category: str
    text: str = ""
    title: Optional[str] = None

    def get_category(self) -> str:
        return self.category

    def get_group_ids(self) -> Optional[list[str]]:
        return None

    def get_product_ids(self) -> Optional[list[str]]:
        return None


class Tlp(CsafModel):
    label: Optional[str] = None
    url: Optional[str] = None

    def get_label(self) -> Optional[str]:
        return self.label


class Distribution(CsafModel):
    text: Optional[str] = None
    tlp: Optional[Tlp] = None

    def get_tlp(self) -> Optional[Tlp]:
        return self.tlp

    def get_sharing_group(self) -> None:
        return None


class Document(CsafModel):
    category: str
    csaf_version: str
    title: str = ""
    publisher: Publisher
    tracking: Tracking
    lang: Optional[str] = None
    source_lang: Optional[str] = None
    notes: Optional[list[Note]] = None
    references: Optional[list[Reference]] = None
    distribution: Optional[Distribution] = None

    def get_csaf_version(self) -> CsafVersion:
        return CsafVersion.X20

    def get_category(self) -> str:
        return self.category

    def get_lang(self) -> Optional[str]:
        return self.lang

    def get_source_lang(self) -> Optional[str]:
        return self.source_lang

    def get_publisher(self) -> Publisher:
        return self.publisher

    def get_tracking(self) -> Tracking:
        return self.tracking

    def get_notes(self) -> Optional[list[Note]]:
        return self.notes

    def get_references(self) -> Optional[list[Reference]]:
        return self.references

    def get_distribution(self) -> Optional[Distribution]:
        return self.distribution


# ---------------------------------------------------------------------------
# /product_tree
# ---------------------------------------------------------------------------


class ProductIdentificationHelper(CsafModel):
    cpe: Optional[str] = None
    hashes: Optional[list[Hash]] = None
    model_numbers: Optional[list[str]] = None
    purl: Optional[str] = None
    sbom_urls: Optional[list[str]] = None
    serial_numbers: Optional[list[str]] = None
    skus: Optional[list[str]] = None
    x_generic_uris: Optional[list[dict[str, Any]]] = None

    def get_purls(self) -> Optional[list[str]]:
        return [self.purl] if self.purl is not None else None

    def get_purl_pointer(self, index: int) -> str:
        return "purl"

    def get_cpe(self) -> Optional[str]:
        return self.cpe

    def get_hashes(self) -> Optional[list[Hash]]:
        return self.hashes

    def get_model_numbers(self) -> Optional[list[str]]:
        return self.model_numbers

    def get_serial_numbers(self) -> Optional[list[str]]:
        return self.serial_numbers

    def get_skus(self) -> Optional[list[str]]:
        return self.skus


class FullProductName(CsafModel):
    name: str
    product_id: str
    product_identification_helper: Optional[ProductIdentificationHelper] = None

    def get_product_id(self) -> str:
        return self.product_id

    def get_name(self) -> str:
        return self.name

    def get_product_identification_helper(self) -> Optional[ProductIdentificationHelper]:
        return self.product_identification_helper


class Branch(CsafModel):
    category: str
    name: str
    branches: Optional[list["Branch"]] = None
    product: Optional[FullProductName] = None

    def get_category(self) -> str:
        return self.category

    def get_name(self) -> str:
        return self.name

    def get_branches(self) -> Optional[list["Branch"]]:
        return self.branches

    def get_product(self) -> Optional[FullProductName]:
        return self.product


class Relationship(CsafModel):
    category: str
    full_product_name: FullProductName
    product_reference: str
    relates_to_product_reference: str

    def get_category(self) -> str:
        return self.category

    def get_product_reference(self) -> str:
        return self.product_reference

    def get_relates_to_product_reference(self) -> str:
        return self.relates_to_product_reference

    def get_full_product_name(self) -> FullProductName:
        return self.full_product_name


class ProductTree(CsafModel):
    branches: Optional[list[Branch]] = None
    full_product_names: list[FullProductName] = Field(default_factory=list)
    product_groups: list[ProductGroup] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)

    def get_branches(self) -> Optional[list[Branch]]:
        return self.branches

    def get_full_product_names(self) -> list[FullProductName]:
        return self.full_product_names

    def get_relationships(self) -> list[Relationship]:
        return self.relationships

    def get_product_groups(self) -> list[ProductGroup]:
        return self.product_groups


# ---------------------------------------------------------------------------
# /vulnerabilities
# ---------------------------------------------------------------------------


class Involvement(CsafModel):
    party: str
    status: str
    date: Optional[str] = None
    summary: Optional[str] = None

    def get_party(self) -> str:
        return self.party

    def get_status(self) -> str:
        return self.status

    def get_date(self) -> Optional[str]:
        return self.date

    def get_group_ids(self) -> Optional[list[str]]:
        return None

    def get_product_ids(self) -> Optional[list[str]]:
        return None


class Score(CsafModel):
    """A 2.0 score is both the metric and its content."""

    products: list[str] = Field(default_factory=list)
    cvss_v2: Optional[dict[str, Any]] = None
    cvss_v3: Optional[dict[str, Any]] = None

    def get_products(self) -> list[str]:
        return self.products

    def get_source(self) -> Optional[str]:
        return None

    def get_content(self) -> "Score":
        return self

    def get_metric_json_path(self, vulnerability_index: int, metric_index: int) -> str:
        return f"/vulnerabilities/{vulnerability_index}/scores/{metric_index}"

    def get_cvss_v2(self) -> Optional[dict[str, Any]]:
        return self.cvss_v2

    def get_cvss_v3(self) -> Optional[dict[str, Any]]:
        return self.cvss_v3

    def get_cvss_v4(self) -> None:
        return None

    def get_epss(self) -> None:
        return None

    def get_ssvc_v2(self) -> None:
        return None

    def get_content_json_path(self, vulnerability_index: int, metric_index: int) -> str:
        return f"/vulnerabilities/{vulnerability_index}/scores/{metric_index}"


class Vulnerability(CsafModel):
    cve: Optional[str] = None
    cwe: Optional[Cwe] = None
    ids: Optional[list[VulnerabilityId]] = None
    notes: Optional[list[Note]] = None
    flags: Optional[list[Flag]] = None
    involvements: Optional[list[Involvement]] = None
    remediations: list[Remediation] = Field(default_factory=list)
    threats: list[Threat] = Field(default_factory=list)
    scores: Optional[list[Score]] = None
    product_status: Optional[ProductStatus] = None
    release_date: Optional[str] = None
    discovery_date: Optional[str] = None
    title: Optional[str] = None

    def get_cve(self) -> Optional[str]:
        return self.cve

    def get_ids(self) -> Optional[list[VulnerabilityId]]:
        return self.ids

    def get_cwes(self) -> Optional[list[Cwe]]:
        return [self.cwe] if self.cwe is not None else None

    def get_notes(self) -> Optional[list[Note]]:
        return self.notes

    def get_flags(self) -> Optional[list[Flag]]:
        return self.flags

    def get_involvements(self) -> Optional[list[Involvement]]:
        return self.involvements

    def get_remediations(self) -> list[Remediation]:
        return self.remediations

    def get_threats(self) -> list[Threat]:
        return self.threats

    def get_metrics(self) -> Optional[list[Score]]:
        return self.scores

    def get_product_status(self) -> Optional[ProductStatus]:
        return self.product_status

    def get_disclosure_date(self) -> Optional[str]:
        return self.release_date

    def get_disclosure_date_key(self) -> str:
        return "release_date"

    def get_discovery_date(self) -> Optional[str]:
        return self.discovery_date

    def get_first_known_exploitation_dates(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class Csaf20(CsafModel):
    schema_: Optional[str] = Field(default=None, alias="$schema")
    document: Document
    product_tree: Optional[ProductTree] = None
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Csaf20":
        doc = cls.model_validate(data)
        doc._raw = data
        return doc

    def get_document(self) -> Document:
        return self.document

    def get_product_tree(self) -> Optional[ProductTree]:
        return self.product_tree

    def get_vulnerabilities(self) -> list[Vulnerability]:
        return self.vulnerabilities

    def get_raw(self) -> dict[str, Any]:
        return self._raw
