"""
advisory/languages.py -- Language tag checks for /document/lang and /document/source_lang.

Only the primary language subtag is looked up in the IANA language subtag
registry (via langcodes); regions, scripts and extensions are not judged.
"""

from typing import Optional

import langcodes

from core.models import ValidationError

DEFAULT_LANGUAGE = "i-default"


def is_default_language(tag: str) -> bool:
    return tag.lower() == DEFAULT_LANGUAGE


def primary_subtag(tag: str) -> str:
    return tag.split("-", 1)[0]


def is_valid_language(tag: str) -> bool:
    """True if the tag's primary subtag is a registered language.

    >>> is_valid_language("en-US")
    True
    >>> is_valid_language("EZ")
    False
    """
    if is_default_language(tag):
        return True
    primary = primary_subtag(tag)
    if not primary.isalpha():
        return False
    return langcodes.tag_is_valid(primary.lower())


def invalid_language_error(tag: str, instance_path: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid language tag '{tag}'",
        instance_path=instance_path,
    )


def check_language(tag: Optional[str], instance_path: str) -> Optional[ValidationError]:
    """Return an error for an invalid tag, None for a valid or absent one."""
    if tag is None or is_valid_language(tag):
        return None
    return invalid_language_error(tag, instance_path)
