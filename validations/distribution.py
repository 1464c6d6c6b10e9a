"""
validations/distribution.py -- TLP label and sharing group consistency (6.1.38 - 6.1.41, CSAF 2.1).

The max UUID marks a sharing group that is the public; the nil UUID one
that must not be shared at all. A missing distribution or TLP is a schema
error and is not reported here.
"""

from typing import Optional

from advisory.traits import CsafTrait, DistributionTrait, DocumentStatus, SharingGroupTrait, TlpLabel
from core.models import ValidationError

MAX_UUID = "ffffffff-ffff-ffff-ffff-ffffffffffff"
NIL_UUID = "00000000-0000-0000-0000-000000000000"

SHARING_GROUP_PUBLIC = "Public"
SHARING_GROUP_PRIVATE = "No sharing allowed"

SHARING_GROUP_ID_PATH = "/document/distribution/sharing_group/id"
SHARING_GROUP_NAME_PATH = "/document/distribution/sharing_group/name"


def _sharing_group(doc: CsafTrait) -> tuple[Optional[DistributionTrait], Optional[SharingGroupTrait]]:
    distribution = doc.get_document().get_distribution()
    if distribution is None:
        return None, None
    return distribution, distribution.get_sharing_group()


def _tlp_label(distribution: DistributionTrait) -> Optional[str]:
    tlp = distribution.get_tlp()
    return tlp.get_label() if tlp is not None else None


def _group_id(group: SharingGroupTrait) -> str:
    return group.get_id().lower()


def test_6_1_38_non_public_sharing_group_max_uuid(doc: CsafTrait) -> list[ValidationError]:
    distribution, group = _sharing_group(doc)
    if group is None or _group_id(group) != MAX_UUID:
        return []
    if _tlp_label(distribution) == TlpLabel.CLEAR.value:
        return []
    return [
        ValidationError(
            "Document must be public (TLP CLEAR) when using max UUID as sharing group ID.",
            "/document/distribution/tlp/label",
        )
    ]


def test_6_1_39_public_sharing_group_with_no_max_uuid(doc: CsafTrait) -> list[ValidationError]:
    distribution, group = _sharing_group(doc)
    if group is None or _tlp_label(distribution) != TlpLabel.CLEAR.value:
        return []
    group_id = _group_id(group)
    if group_id == MAX_UUID:
        return []
    if group_id == NIL_UUID and doc.get_document().get_tracking().get_status() == DocumentStatus.draft.value:
        return []
    return [
        ValidationError(
            "Document with TLP CLEAR and sharing group must use max UUID or nil UUID plus draft status.",
            SHARING_GROUP_ID_PATH,
        )
    ]


def test_6_1_40_invalid_sharing_group_name(doc: CsafTrait) -> list[ValidationError]:
    _, group = _sharing_group(doc)
    if group is None:
        return []
    name = group.get_name()
    if name == SHARING_GROUP_PUBLIC and _group_id(group) != MAX_UUID:
        return [
            ValidationError(
                f'Sharing group name "{SHARING_GROUP_PUBLIC}" is prohibited without max UUID.',
                SHARING_GROUP_NAME_PATH,
            )
        ]
    if name == SHARING_GROUP_PRIVATE and _group_id(group) != NIL_UUID:
        return [
            ValidationError(
                f'Sharing group name "{SHARING_GROUP_PRIVATE}" is prohibited without nil UUID.',
                SHARING_GROUP_NAME_PATH,
            )
        ]
    return []


def test_6_1_41_missing_sharing_group_name(doc: CsafTrait) -> list[ValidationError]:
    _, group = _sharing_group(doc)
    if group is None:
        return []
    group_id, name = _group_id(group), group.get_name()
    if group_id == MAX_UUID and name != SHARING_GROUP_PUBLIC:
        return [
            ValidationError(
                f'Max UUID requires sharing group name to be "{SHARING_GROUP_PUBLIC}".',
                SHARING_GROUP_NAME_PATH,
            )
        ]
    if group_id == NIL_UUID and name != SHARING_GROUP_PRIVATE:
        return [
            ValidationError(
                f'Nil UUID requires sharing group name to be "{SHARING_GROUP_PRIVATE}".',
                SHARING_GROUP_NAME_PATH,
            )
        ]
    return []
