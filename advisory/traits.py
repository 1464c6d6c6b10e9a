"""
advisory/traits.py -- Version-agnostic accessor interfaces for CSAF documents.

Every rule in validations/ is written against these Protocols only. The two
schema bindings (advisory/csaf2_0.py, advisory/csaf2_1.py) implement them.

Contract for implementers:
  - getters never raise; absence is None
  - sequences are returned in document order
  - getters do no hidden traversal beyond their own subtree
"""

from enum import Enum
from typing import Any, Optional, Protocol, Sequence

from core.models import CsafVersion

# ---------------------------------------------------------------------------
# Enumerations shared by both schema versions
# ---------------------------------------------------------------------------


class DocumentStatus(str, Enum):
    draft = "draft"
    final = "final"
    interim = "interim"


class PublisherCategory(str, Enum):
    coordinator = "coordinator"
    discoverer = "discoverer"
    multiplier = "multiplier"
    other = "other"
    translator = "translator"
    user = "user"
    vendor = "vendor"


class NoteCategory(str, Enum):
    description = "description"
    details = "details"
    faq = "faq"
    general = "general"
    legal_disclaimer = "legal_disclaimer"
    other = "other"
    summary = "summary"


class ReferenceCategory(str, Enum):
    external = "external"
    self_ = "self"


class RemediationCategory(str, Enum):
    fix_planned = "fix_planned"
    mitigation = "mitigation"
    no_fix_planned = "no_fix_planned"
    none_available = "none_available"
    optional_patch = "optional_patch"
    vendor_fix = "vendor_fix"
    workaround = "workaround"


class ThreatCategory(str, Enum):
    exploit_status = "exploit_status"
    impact = "impact"
    target_set = "target_set"


class BranchCategory(str, Enum):
    architecture = "architecture"
    host_name = "host_name"
    language = "language"
    legacy = "legacy"
    patch_level = "patch_level"
    platform = "platform"
    product_family = "product_family"
    product_name = "product_name"
    product_version = "product_version"
    product_version_range = "product_version_range"
    service_pack = "service_pack"
    specification = "specification"
    vendor = "vendor"


class TlpLabel(str, Enum):
    AMBER = "AMBER"
    AMBER_STRICT = "AMBER+STRICT"
    CLEAR = "CLEAR"
    GREEN = "GREEN"
    RED = "RED"
    WHITE = "WHITE"


class ProductStatusGroup(str, Enum):
    """Mutually exclusive groupings of the product_status lists."""

    affected = "affected"
    not_affected = "not affected"
    fixed = "fixed"
    under_investigation = "under investigation"
    unknown = "unknown"


# ---------------------------------------------------------------------------
# Shared capabilities
# ---------------------------------------------------------------------------


class WithGroupIds(Protocol):
    def get_group_ids(self) -> Optional[list[str]]: ...


class WithProductIds(Protocol):
    def get_product_ids(self) -> Optional[list[str]]: ...


class WithDate(Protocol):
    def get_date(self) -> Optional[str]: ...


# ---------------------------------------------------------------------------
# /document
# ---------------------------------------------------------------------------


class NoteTrait(WithGroupIds, WithProductIds, Protocol):
    def get_category(self) -> str: ...


class ReferenceTrait(Protocol):
    def get_category(self) -> Optional[str]: ...

    def get_url(self) -> str: ...


class PublisherTrait(Protocol):
    def get_category(self) -> str: ...


class TlpTrait(Protocol):
    def get_label(self) -> Optional[str]: ...


class SharingGroupTrait(Protocol):
    def get_id(self) -> str: ...

    def get_name(self) -> Optional[str]: ...


class DistributionTrait(Protocol):
    def get_tlp(self) -> Optional[TlpTrait]: ...

    def get_sharing_group(self) -> Optional[SharingGroupTrait]: ...


class GeneratorTrait(WithDate, Protocol):
    pass


class RevisionTrait(WithDate, Protocol):
    def get_number(self) -> str: ...

    def get_summary(self) -> str: ...


class TrackingTrait(Protocol):
    def get_id(self) -> str: ...

    def get_status(self) -> str: ...

    def get_version(self) -> str: ...

    def get_initial_release_date(self) -> str: ...

    def get_current_release_date(self) -> str: ...

    def get_revision_history(self) -> Sequence[RevisionTrait]: ...

    def get_generator(self) -> Optional[GeneratorTrait]: ...


class DocumentTrait(Protocol):
    def get_csaf_version(self) -> CsafVersion: ...

    def get_category(self) -> str: ...

    def get_lang(self) -> Optional[str]: ...

    def get_source_lang(self) -> Optional[str]: ...

    def get_publisher(self) -> PublisherTrait: ...

    def get_tracking(self) -> TrackingTrait: ...

    def get_notes(self) -> Optional[Sequence[NoteTrait]]: ...

    def get_references(self) -> Optional[Sequence[ReferenceTrait]]: ...

    def get_distribution(self) -> Optional[DistributionTrait]: ...


# ---------------------------------------------------------------------------
# /product_tree
# ---------------------------------------------------------------------------


class FileHashTrait(Protocol):
    def get_algorithm(self) -> str: ...

    def get_hash(self) -> str: ...


class HashTrait(Protocol):
    def get_file_hashes(self) -> Sequence[FileHashTrait]: ...

    def get_filename(self) -> str: ...


class ProductIdentificationHelperTrait(Protocol):
    def get_purls(self) -> Optional[list[str]]: ...

    def get_purl_pointer(self, index: int) -> str:
        """Relative JSON pointer of the index-th PURL below the helper."""
        ...

    def get_cpe(self) -> Optional[str]: ...

    def get_hashes(self) -> Optional[Sequence[HashTrait]]: ...

    def get_model_numbers(self) -> Optional[list[str]]: ...

    def get_serial_numbers(self) -> Optional[list[str]]: ...

    def get_skus(self) -> Optional[list[str]]: ...


class ProductTrait(Protocol):
    def get_product_id(self) -> str: ...

    def get_name(self) -> str: ...

    def get_product_identification_helper(self) -> Optional[ProductIdentificationHelperTrait]: ...


class BranchTrait(Protocol):
    def get_category(self) -> str: ...

    def get_name(self) -> str: ...

    def get_branches(self) -> Optional[Sequence["BranchTrait"]]: ...

    def get_product(self) -> Optional[ProductTrait]: ...


class ProductGroupTrait(Protocol):
    def get_group_id(self) -> str: ...

    def get_product_ids(self) -> list[str]: ...


class RelationshipTrait(Protocol):
    def get_category(self) -> str: ...

    def get_product_reference(self) -> str: ...

    def get_relates_to_product_reference(self) -> str: ...

    def get_full_product_name(self) -> ProductTrait: ...


class ProductTreeTrait(Protocol):
    def get_branches(self) -> Optional[Sequence[BranchTrait]]: ...

    def get_full_product_names(self) -> Sequence[ProductTrait]: ...

    def get_relationships(self) -> Sequence[RelationshipTrait]: ...

    def get_product_groups(self) -> Sequence[ProductGroupTrait]: ...


# ---------------------------------------------------------------------------
# /vulnerabilities
# ---------------------------------------------------------------------------


class ProductStatusTrait(Protocol):
    def get_first_affected(self) -> Optional[list[str]]: ...

    def get_first_fixed(self) -> Optional[list[str]]: ...

    def get_fixed(self) -> Optional[list[str]]: ...

    def get_known_affected(self) -> Optional[list[str]]: ...

    def get_known_not_affected(self) -> Optional[list[str]]: ...

    def get_last_affected(self) -> Optional[list[str]]: ...

    def get_recommended(self) -> Optional[list[str]]: ...

    def get_under_investigation(self) -> Optional[list[str]]: ...

    def get_unknown(self) -> Optional[list[str]]: ...


class FlagTrait(WithDate, WithGroupIds, WithProductIds, Protocol):
    def get_label(self) -> str: ...


class InvolvementTrait(WithDate, WithGroupIds, WithProductIds, Protocol):
    def get_party(self) -> str: ...

    def get_status(self) -> str: ...


class RemediationTrait(WithDate, WithGroupIds, WithProductIds, Protocol):
    def get_category(self) -> str: ...


class ThreatTrait(WithDate, WithGroupIds, WithProductIds, Protocol):
    def get_category(self) -> str: ...


class ContentTrait(Protocol):
    def get_cvss_v2(self) -> Optional[dict[str, Any]]: ...

    def get_cvss_v3(self) -> Optional[dict[str, Any]]: ...

    def get_cvss_v4(self) -> Optional[dict[str, Any]]: ...

    def get_epss(self) -> Optional[dict[str, Any]]: ...

    def get_ssvc_v2(self) -> Optional[dict[str, Any]]: ...

    def get_content_json_path(self, vulnerability_index: int, metric_index: int) -> str: ...


class MetricTrait(Protocol):
    def get_products(self) -> list[str]: ...

    def get_metric_json_path(self, vulnerability_index: int, metric_index: int) -> str: ...

    def get_source(self) -> Optional[str]: ...

    def get_content(self) -> ContentTrait: ...


class VulnerabilityIdTrait(Protocol):
    def get_system_name(self) -> str: ...

    def get_text(self) -> str: ...


class CweTrait(Protocol):
    def get_id(self) -> str: ...

    def get_name(self) -> str: ...

    def get_version(self) -> Optional[str]: ...


class FirstKnownExploitationDateTrait(WithDate, Protocol):
    def get_exploitation_date(self) -> str: ...


class VulnerabilityTrait(Protocol):
    def get_cve(self) -> Optional[str]: ...

    def get_ids(self) -> Optional[Sequence[VulnerabilityIdTrait]]: ...

    def get_cwes(self) -> Optional[Sequence[CweTrait]]: ...

    def get_notes(self) -> Optional[Sequence[NoteTrait]]: ...

    def get_flags(self) -> Optional[Sequence[FlagTrait]]: ...

    def get_involvements(self) -> Optional[Sequence[InvolvementTrait]]: ...

    def get_remediations(self) -> Sequence[RemediationTrait]: ...

    def get_threats(self) -> Sequence[ThreatTrait]: ...

    def get_metrics(self) -> Optional[Sequence[MetricTrait]]: ...

    def get_product_status(self) -> Optional[ProductStatusTrait]: ...

    def get_disclosure_date(self) -> Optional[str]: ...

    def get_disclosure_date_key(self) -> str:
        """Property name of the disclosure date (release_date in 2.0)."""
        ...

    def get_discovery_date(self) -> Optional[str]: ...

    def get_first_known_exploitation_dates(self) -> Optional[Sequence[FirstKnownExploitationDateTrait]]: ...


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class CsafTrait(Protocol):
    def get_document(self) -> DocumentTrait: ...

    def get_product_tree(self) -> Optional[ProductTreeTrait]: ...

    def get_vulnerabilities(self) -> Sequence[VulnerabilityTrait]: ...

    def get_raw(self) -> dict[str, Any]:
        """The JSON mapping the document was loaded from, key order preserved."""
        ...
