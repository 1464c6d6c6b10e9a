"""
advisory/common.py -- Binding models whose shape is identical in CSAF 2.0 and 2.1.

All models are lenient: unknown keys are kept, and dates,
versions and categories stay plain strings. JSON Schema validation is a
separate, earlier step; the rules in validations/ judge the values.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CsafModel(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        protected_namespaces=(),
    )


# ---------------------------------------------------------------------------
# /document
# ---------------------------------------------------------------------------


class Reference(CsafModel):
    category: Optional[str] = None
    summary: str = ""
    url: str

    def get_category(self) -> Optional[str]:
        return self.category

    def get_url(self) -> str:
        return self.url


class Publisher(CsafModel):
    category: str
    name: str = ""
    namespace: str = ""

    def get_category(self) -> str:
        return self.category


class Generator(CsafModel):
    date: Optional[str] = None
    engine: Optional[dict[str, Any]] = None

    def get_date(self) -> Optional[str]:
        return self.date


class Revision(CsafModel):
    date: str
    number: str
    summary: str = ""

    def get_date(self) -> str:
        return self.date

    def get_number(self) -> str:
        return self.number

    def get_summary(self) -> str:
        return self.summary


class Tracking(CsafModel):
    id: str
    status: str
    version: str
    initial_release_date: str
    current_release_date: str
    revision_history: list[Revision] = Field(default_factory=list)
    generator: Optional[Generator] = None
    aliases: Optional[list[str]] = None

    def get_id(self) -> str:
        return self.id

    def get_status(self) -> str:
        return self.status

    def get_version(self) -> str:
        return self.version

    def get_initial_release_date(self) -> str:
        return self.initial_release_date

    def get_current_release_date(self) -> str:
        return self.current_release_date

    def get_revision_history(self) -> list[Revision]:
        return self.revision_history

    def get_generator(self) -> Optional[Generator]:
        return self.generator


# ---------------------------------------------------------------------------
# /product_tree
# ---------------------------------------------------------------------------


class FileHash(CsafModel):
    algorithm: str
    value: str

    def get_algorithm(self) -> str:
        return self.algorithm

    def get_hash(self) -> str:
        return self.value


class Hash(CsafModel):
    file_hashes: list[FileHash] = Field(default_factory=list)
    filename: str = ""

    def get_file_hashes(self) -> list[FileHash]:
        return self.file_hashes

    def get_filename(self) -> str:
        return self.filename


class ProductGroup(CsafModel):
    group_id: str
    product_ids: list[str] = Field(default_factory=list)
    summary: Optional[str] = None

    def get_group_id(self) -> str:
        return self.group_id

    def get_product_ids(self) -> list[str]:
        return self.product_ids


# ---------------------------------------------------------------------------
# /vulnerabilities
# ---------------------------------------------------------------------------


class ProductReferences(CsafModel):
    """Mixin for the group_ids / product_ids pair carried by many elements."""

    group_ids: Optional[list[str]] = None
    product_ids: Optional[list[str]] = None

    def get_group_ids(self) -> Optional[list[str]]:
        return self.group_ids

    def get_product_ids(self) -> Optional[list[str]]:
        return self.product_ids


class ProductStatus(CsafModel):
    first_affected: Optional[list[str]] = None
    first_fixed: Optional[list[str]] = None
    fixed: Optional[list[str]] = None
    known_affected: Optional[list[str]] = None
    known_not_affected: Optional[list[str]] = None
    last_affected: Optional[list[str]] = None
    recommended: Optional[list[str]] = None
    under_investigation: Optional[list[str]] = None
    unknown: Optional[list[str]] = None

    def get_first_affected(self) -> Optional[list[str]]:
        return self.first_affected

    def get_first_fixed(self) -> Optional[list[str]]:
        return self.first_fixed

    def get_fixed(self) -> Optional[list[str]]:
        return self.fixed

    def get_known_affected(self) -> Optional[list[str]]:
        return self.known_affected

    def get_known_not_affected(self) -> Optional[list[str]]:
        return self.known_not_affected

    def get_last_affected(self) -> Optional[list[str]]:
        return self.last_affected

    def get_recommended(self) -> Optional[list[str]]:
        return self.recommended

    def get_under_investigation(self) -> Optional[list[str]]:
        return self.under_investigation

    def get_unknown(self) -> Optional[list[str]]:
        return self.unknown


class Flag(ProductReferences):
    label: str
    date: Optional[str] = None

    def get_label(self) -> str:
        return self.label

    def get_date(self) -> Optional[str]:
        return self.date


class Remediation(ProductReferences):
    category: str
    details: str = ""
    date: Optional[str] = None
    url: Optional[str] = None

    def get_category(self) -> str:
        return self.category

    def get_date(self) -> Optional[str]:
        return self.date


class Threat(ProductReferences):
    category: str
    details: str = ""
    date: Optional[str] = None

    def get_category(self) -> str:
        return self.category

    def get_date(self) -> Optional[str]:
        return self.date


class VulnerabilityId(CsafModel):
    system_name: str
    text: str

    def get_system_name(self) -> str:
        return self.system_name

    def get_text(self) -> str:
        return self.text


class Cwe(CsafModel):
    id: str
    name: str
    version: Optional[str] = None

    def get_id(self) -> str:
        return self.id

    def get_name(self) -> str:
        return self.name

    def get_version(self) -> Optional[str]:
        return self.version
