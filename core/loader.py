"""
core/loader.py -- Reads CSAF JSON into a 2.0 or 2.1 binding.

The loader only checks what the bindings need to exist at all: a JSON
object with a recognisable /document/csaf_version. Everything else is left
to the validation rules.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import pydantic

from advisory.csaf2_0 import Csaf20
from advisory.csaf2_1 import Csaf21

from .config import get_settings
from .models import CsafVersion

logger = logging.getLogger("csafvalidator.loader")

CsafDocument = Union[Csaf20, Csaf21]

_BINDINGS = {
    CsafVersion.X20: Csaf20,
    CsafVersion.X21: Csaf21,
}


class LoadError(ValueError):
    """The input could not be turned into a CSAF document binding."""


def detect_version(data: dict[str, Any]) -> CsafVersion:
    document = data.get("document")
    if not isinstance(document, dict):
        raise LoadError("Missing '/document' object")
    raw = document.get("csaf_version")
    if raw is None:
        raise LoadError("Missing '/document/csaf_version'")
    try:
        return CsafVersion(raw)
    except ValueError:
        supported = ", ".join(v.value for v in CsafVersion)
        raise LoadError(f"Unsupported CSAF version '{raw}', expected one of: {supported}") from None


def parse_document(data: Any, csaf_version: Optional[CsafVersion] = None) -> CsafDocument:
    """Bind an already decoded JSON value.

    csaf_version forces the binding instead of reading /document/csaf_version.
    """
    if not isinstance(data, dict):
        raise LoadError("CSAF document root must be a JSON object")
    version = csaf_version or detect_version(data)
    try:
        doc = _BINDINGS[version].from_dict(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = "/" + "/".join(str(part) for part in first["loc"])
        raise LoadError(
            f"Document does not match the CSAF {version.value} structure at {location}: {first['msg']}"
        ) from exc
    logger.debug("Loaded CSAF %s document %s", version.value, doc.get_document().get_tracking().get_id())
    return doc


def load_document_from_str(text: Union[str, bytes], csaf_version: Optional[CsafVersion] = None) -> CsafDocument:
    limit = get_settings().max_document_size
    if len(text) > limit:
        raise LoadError(f"Document exceeds the maximum size of {limit} bytes")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoadError(f"Invalid JSON: {exc}") from exc
    return parse_document(data, csaf_version)


def load_document(path: Union[str, Path], csaf_version: Optional[CsafVersion] = None) -> CsafDocument:
    path = Path(path)
    limit = get_settings().max_document_size
    try:
        size = path.stat().st_size
        if size > limit:
            raise LoadError(f"{path}: document exceeds the maximum size of {limit} bytes")
        text = path.read_bytes()
    except OSError as exc:
        raise LoadError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    logger.info("Loading %s (%d bytes)", path, size)
    return load_document_from_str(text, csaf_version)
