"""
validations/identification.py -- product_identification_helper checks.

Covers 6.1.13, 6.1.25, 6.1.42 - 6.1.44, 6.2.8, 6.2.9, 6.2.16 and 6.3.5.
PURLs are parsed with packageurl-python; the CSAF regex is applied on top
because the schema is stricter than the purl format about the type.
"""

import re
from collections import defaultdict
from typing import Iterator

from packageurl import PackageURL

from advisory.products import count_unescaped_stars, visit_all_products
from advisory.traits import CsafTrait, ProductIdentificationHelperTrait
from core.models import ValidationError

PURL_RE = re.compile(r"^pkg:[A-Za-z.\-+][A-Za-z0-9.\-+]*/.+")

MIN_HASH_LENGTH = 64


def _helpers(doc: CsafTrait) -> Iterator[tuple[ProductIdentificationHelperTrait, str]]:
    """Yield (helper, helper path) for each product that has an identification helper."""
    for product, path in visit_all_products(doc):
        helper = product.get_product_identification_helper()
        if helper is not None:
            yield helper, f"{path}/product_identification_helper"


# ---------------------------------------------------------------------------
# PURL
# ---------------------------------------------------------------------------


def test_6_1_13_purl(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for i, purl in enumerate(helper.get_purls() or []):
            path = f"{helper_path}/{helper.get_purl_pointer(i)}"
            try:
                PackageURL.from_string(purl)
            except ValueError as exc:
                errors.append(ValidationError(f"Invalid PURL format: {purl}, Error: {exc}", path))
                continue
            if not PURL_RE.match(purl):
                errors.append(ValidationError(f"Invalid PURL format: {purl}, Error: CSAF error", path))
    return errors


def _without_qualifiers(purl: PackageURL) -> str:
    return PackageURL(
        type=purl.type,
        namespace=purl.namespace,
        name=purl.name,
        version=purl.version,
        subpath=purl.subpath,
    ).to_string()


def test_6_1_42_purl_consistency(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        purls = helper.get_purls() or []
        if len(purls) < 2:
            continue
        base = None
        for i, raw in enumerate(purls):
            try:
                current = _without_qualifiers(PackageURL.from_string(raw))
            except ValueError:
                continue
            if base is None:
                base = current
            elif current != base:
                errors.append(
                    ValidationError(
                        "PURLs within the same product_identification_helper must only differ in qualifiers",
                        f"{helper_path}/{helper.get_purl_pointer(i)}",
                    )
                )
    return errors


# ---------------------------------------------------------------------------
# Model and serial numbers
# ---------------------------------------------------------------------------


def test_6_1_43_multiple_stars_in_model_number(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for i, number in enumerate(helper.get_model_numbers() or []):
            if count_unescaped_stars(number) > 1:
                errors.append(
                    ValidationError(
                        f"Model number '{number}' must not contain multiple unescaped asterisks (stars)",
                        f"{helper_path}/model_numbers/{i}",
                    )
                )
    return errors


def test_6_1_44_multiple_stars_in_serial_number(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for i, number in enumerate(helper.get_serial_numbers() or []):
            if count_unescaped_stars(number) > 1:
                errors.append(
                    ValidationError(
                        f"Serial number '{number}' must not contain multiple unescaped asterisks (stars)",
                        f"{helper_path}/serial_numbers/{i}",
                    )
                )
    return errors


# ---------------------------------------------------------------------------
# Hashes
# ---------------------------------------------------------------------------


def test_6_1_25_multiple_use_of_same_hash_algorithm(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for h_i, hash_ in enumerate(helper.get_hashes() or []):
            indices: dict[str, list[int]] = defaultdict(list)
            for f_i, file_hash in enumerate(hash_.get_file_hashes()):
                indices[file_hash.get_algorithm()].append(f_i)
            for algorithm, positions in indices.items():
                if len(positions) < 2:
                    continue
                errors += [
                    ValidationError(
                        f"Multiple use of the same hash algorithm '{algorithm}' in file_hashes",
                        f"{helper_path}/hashes/{h_i}/file_hashes/{f_i}/algorithm",
                    )
                    for f_i in positions
                ]
    return errors


def _only_algorithm(doc: CsafTrait, algorithm: str, message: str) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for h_i, hash_ in enumerate(helper.get_hashes() or []):
            algorithms = {fh.get_algorithm().lower() for fh in hash_.get_file_hashes()}
            if algorithms == {algorithm}:
                errors.append(ValidationError(message, f"{helper_path}/hashes/{h_i}/file_hashes"))
    return errors


def test_6_2_08_use_of_md5_as_only_hash_algo(doc: CsafTrait) -> list[ValidationError]:
    return _only_algorithm(doc, "md5", "hashes product identification helper uses MD5 as the only hash algorithm")


def test_6_2_09_use_of_sha1_as_only_hash_algo(doc: CsafTrait) -> list[ValidationError]:
    return _only_algorithm(
        doc, "sha1", "Product identification helper uses hashes with `sha1` as the only hash algorithm"
    )


def test_6_3_05_use_of_short_hash(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for helper, helper_path in _helpers(doc):
        for h_i, hash_ in enumerate(helper.get_hashes() or []):
            for f_i, file_hash in enumerate(hash_.get_file_hashes()):
                length = len(file_hash.get_hash())
                if length < MIN_HASH_LENGTH:
                    errors.append(
                        ValidationError(
                            f"Too short hash found (length: {length}), expected to be >= {MIN_HASH_LENGTH} chars",
                            f"{helper_path}/hashes/{h_i}/file_hashes/{f_i}",
                        )
                    )
    return errors


def test_6_2_16_missing_product_identification_helper(doc: CsafTrait) -> list[ValidationError]:
    return [
        ValidationError("Product is missing 'product_identification_helper' property", path)
        for product, path in visit_all_products(doc)
        if product.get_product_identification_helper() is None
    ]
