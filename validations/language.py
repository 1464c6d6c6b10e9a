"""
validations/language.py -- /document/lang and /document/source_lang (6.1.12, 6.1.15, 6.1.28, 6.2.12, 6.2.15).
"""

from advisory.languages import check_language, is_default_language, is_valid_language
from advisory.traits import CsafTrait, PublisherCategory
from core.models import ValidationError

LANG_PATH = "/document/lang"
SOURCE_LANG_PATH = "/document/source_lang"


def _language_fields(doc: CsafTrait) -> list[tuple[str, str]]:
    """(tag, path) for each language field that is set."""
    document = doc.get_document()
    fields = [(document.get_lang(), LANG_PATH), (document.get_source_lang(), SOURCE_LANG_PATH)]
    return [(tag, path) for tag, path in fields if tag is not None]


def test_6_1_12_language(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for tag, path in _language_fields(doc):
        error = check_language(tag, path)
        if error is not None:
            errors.append(error)
    return errors


def test_6_1_15_translator(doc: CsafTrait) -> list[ValidationError]:
    document = doc.get_document()
    if document.get_publisher().get_category() != PublisherCategory.translator.value:
        return []

    source_lang = document.get_source_lang()
    if source_lang is None:
        return [
            ValidationError(
                "source_lang is required when the publisher category is 'translator'",
                SOURCE_LANG_PATH,
            )
        ]
    if not is_valid_language(source_lang):
        return [
            ValidationError(
                "source_lang is required when the publisher category is 'translator', "
                f"but the provided value is invalid: '{source_lang}'",
                SOURCE_LANG_PATH,
            )
        ]
    return []


def test_6_1_28_translation(doc: CsafTrait) -> list[ValidationError]:
    document = doc.get_document()
    lang, source_lang = document.get_lang(), document.get_source_lang()
    if lang is None or source_lang is None or lang.lower() != source_lang.lower():
        return []
    return [
        ValidationError(
            f"document language and source language have the same value {lang}",
            SOURCE_LANG_PATH,
        )
    ]


def test_6_2_12_missing_document_language(doc: CsafTrait) -> list[ValidationError]:
    if doc.get_document().get_lang() is not None:
        return []
    return [ValidationError("The document language is not defined", LANG_PATH)]


def test_6_2_15_use_of_default_language(doc: CsafTrait) -> list[ValidationError]:
    errors = []
    for tag, path in _language_fields(doc):
        error = check_language(tag, path)
        if error is not None:
            errors.append(error)
        elif is_default_language(tag):
            errors.append(ValidationError("The default language tag 'i-default' may not be used", path))
    return errors
