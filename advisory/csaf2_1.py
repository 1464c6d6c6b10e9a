"""
advisory/csaf2_1.py -- CSAF 2.1 binding models implementing the accessor traits.
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
    ProductReferences,
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


class Note(ProductReferences):
    category: str
    text: str = ""
    title: Optional[str] = None

    def get_category(self) -> str:
        return self.category


class Tlp(CsafModel):
    label: Optional[str] = None
    url: Optional[str] = None

    def get_label(self) -> Optional[str]:
        return self.label


class SharingGroup(CsafModel):
    id: str
    name: Optional[str] = None

    def get_id(self) -> str:
        return self.id

    def get_name(self) -> Optional[str]:
        return self.name


class Distribution(CsafModel):
    text: Optional[str] = None
    tlp: Optional[Tlp] = None
    sharing_group: Optional[SharingGroup] = None

    def get_tlp(self) -> Optional[Tlp]:
        return self.tlp

    def get_sharing_group(self) -> Optional[SharingGroup]:
        return self.sharing_group


class Document(CsafModel):
    category: str
    csaf_version: str
    title: str = ""
    publisher: Publisher
    tracking: Tracking
    distribution: Distribution
    lang: Optional[str] = None
    source_lang: Optional[str] = None
    notes: Optional[list[Note]] = None
    references: Optional[list[Reference]] = None
    license_expression: Optional[str] = None

    def get_csaf_version(self) -> CsafVersion:
        return CsafVersion.X21

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

    def get_distribution(self) -> Distribution:
        return self.distribution


# ---------------------------------------------------------------------------
# /product_tree
# ---------------------------------------------------------------------------


class ProductIdentificationHelper(CsafModel):
    cpe: Optional[str] = None
    hashes: Optional[list[Hash]] = None
    model_numbers: Optional[list[str]] = None
    purls: Optional[list[str]] = None
    sbom_urls: Optional[list[str]] = None
    serial_numbers: Optional[list[str]] = None
    skus: Optional[list[str]] = None
    x_generic_uris: Optional[list[dict[str, Any]]] = None

    def get_purls(self) -> Optional[list[str]]:
        return self.purls

    def get_purl_pointer(self, index: int) -> str:
        return f"purls/{index}"

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


class Involvement(ProductReferences):
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


class Content(CsafModel):
    cvss_v2: Optional[dict[str, Any]] = None
    cvss_v3: Optional[dict[str, Any]] = None
    cvss_v4: Optional[dict[str, Any]] = None
    epss: Optional[dict[str, Any]] = None
    ssvc_v2: Optional[dict[str, Any]] = None
    qualitative_severity_rating: Optional[str] = None

    def get_cvss_v2(self) -> Optional[dict[str, Any]]:
        return self.cvss_v2

    def get_cvss_v3(self) -> Optional[dict[str, Any]]:
        return self.cvss_v3

    def get_cvss_v4(self) -> Optional[dict[str, Any]]:
        return self.cvss_v4

    def get_epss(self) -> Optional[dict[str, Any]]:
        return self.epss

    def get_ssvc_v2(self) -> Optional[dict[str, Any]]:
        return self.ssvc_v2

    def get_content_json_path(self, vulnerability_index: int, metric_index: int) -> str:
        return f"/vulnerabilities/{vulnerability_index}/metrics/{metric_index}/content"


class Metric(CsafModel):
    content: Content = Field(default_factory=Content)
    products: list[str] = Field(default_factory=list)
    source: Optional[str] = None

    def get_products(self) -> list[str]:
        return self.products

    def get_source(self) -> Optional[str]:
        return self.source

    def get_content(self) -> Content:
        return self.content

    def get_metric_json_path(self, vulnerability_index: int, metric_index: int) -> str:
        return f"/vulnerabilities/{vulnerability_index}/metrics/{metric_index}"


class FirstKnownExploitationDate(CsafModel):
    date: str
    exploitation_date: str

    def get_date(self) -> str:
        return self.date

    def get_exploitation_date(self) -> str:
        return self.exploitation_date


class Vulnerability(CsafModel):
    cve: Optional[str] = None
    cwes: Optional[list[Cwe]] = None
    ids: Optional[list[VulnerabilityId]] = None
    notes: Optional[list[Note]] = None
    flags: Optional[list[Flag]] = None
    involvements: Optional[list[Involvement]] = None
    remediations: list[Remediation] = Field(default_factory=list)
    threats: list[Threat] = Field(default_factory=list)
    metrics: Optional[list[Metric]] = None
    product_status: Optional[ProductStatus] = None
    disclosure_date: Optional[str] = None
    discovery_date: Optional[str] = None
    first_known_exploitation_dates: Optional[list[FirstKnownExploitationDate]] = None
    title: Optional[str] = None

    def get_cve(self) -> Optional[str]:
        return self.cve

    def get_ids(self) -> Optional[list[VulnerabilityId]]:
        return self.ids

    def get_cwes(self) -> Optional[list[Cwe]]:
        return self.cwes

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

    def get_metrics(self) -> Optional[list[Metric]]:
        return self.metrics

    def get_product_status(self) -> Optional[ProductStatus]:
        return self.product_status

    def get_disclosure_date(self) -> Optional[str]:
        return self.disclosure_date

    def get_disclosure_date_key(self) -> str:
        return "disclosure_date"

    def get_discovery_date(self) -> Optional[str]:
        return self.discovery_date

    def get_first_known_exploitation_dates(self) -> Optional[list[FirstKnownExploitationDate]]:
        return self.first_known_exploitation_dates


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class Csaf21(CsafModel):
    schema_: Optional[str] = Field(default=None, alias="$schema")
    document: Document
    product_tree: Optional[ProductTree] = None
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Csaf21":
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
