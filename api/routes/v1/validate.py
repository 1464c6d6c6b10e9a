"""
api/routes/v1/validate.py -- Validation route handlers for the CSAF validator REST API.

POST /validate is limited by VALIDATE_RATE_LIMIT per client address. Refusals
raise ApiError, which api/errors.py turns into the error envelope.

Handlers are plain def functions: validation is CPU-bound, so FastAPI runs
them in its thread pool instead of on the event loop.
"""

import logging

from fastapi import APIRouter, Request

from api.errors import ApiError
from api.limiter import limiter
from api.models import TestCatalogResponse, ValidateRequest, ValidateResponse
from core.config import get_settings
from core.loader import LoadError, parse_document
from core.models import CsafVersion, ValidationPreset
from core.validation import get_preset_test_ids, get_tests, validate_document

logger = logging.getLogger("csafvalidator.api.validate")

router = APIRouter()


@limiter.limit(get_settings().validate_rate_limit)
@router.post("/validate", response_model=ValidateResponse)
def validate(request: Request, body: ValidateRequest) -> ValidateResponse:
    """Run a preset or an explicit list of tests against one CSAF document.

    A document that cannot be bound to the CSAF 2.0 / 2.1 structure is a 400;
    a document that binds but breaks rules is a 200 with success=false.
    """
    limit = get_settings().max_document_size
    if int(request.headers.get("content-length") or 0) > limit:
        raise ApiError.document_too_large(limit)

    try:
        doc = parse_document(body.document, body.csaf_version)
    except LoadError as exc:
        raise ApiError.invalid_document(str(exc)) from exc

    result = validate_document(doc, preset=body.preset, test_ids=body.test_ids)
    logger.info(
        "Validated document %s: success=%s errors=%d",
        doc.get_document().get_tracking().get_id(),
        result.success,
        result.num_errors,
    )
    return ValidateResponse.from_result(result)


@router.get("/tests", response_model=TestCatalogResponse)
def list_tests(version: CsafVersion = CsafVersion.X21) -> TestCatalogResponse:
    """List the test ids available for a CSAF version and the ids each preset runs."""
    return TestCatalogResponse(
        version=version,
        test_ids=list(get_tests(version)),
        presets={preset.value: get_preset_test_ids(version, preset) for preset in ValidationPreset},
    )
