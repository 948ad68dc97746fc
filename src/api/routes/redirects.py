"""
Redirect authoring routes.

The authoring UI calls /validate before saving a redirect. Nothing is
written here.

Status codes:
- 200: the redirect may be saved
- 422: rule violation, loop or overlong chain
- 503: the store could not be consulted; the write must not proceed
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from src.api.deps import get_resolution_service, resolve_site_id
from src.api.schemas import RedirectIssueModel, RedirectValidateRequest, RedirectValidateResponse
from src.components.redirects import ValidateRedirectInput, run_validate
from src.core.entities import RedirectRecord
from src.core.errors import RETRYABLE_KINDS, ErrorKind
from src.services.resolution import ResolutionService

router = APIRouter()

STORE_UNAVAILABLE_KINDS = frozenset(k.value for k in RETRYABLE_KINDS | {ErrorKind.CIRCUIT_OPEN})


@router.post("/validate", response_model=RedirectValidateResponse)
async def validate_redirect(
    body: RedirectValidateRequest,
    service: ResolutionService = Depends(get_resolution_service),
) -> JSONResponse:
    """Validate a redirect (rules, loops and chain depth) before it is written."""
    site_id = resolve_site_id(body.site_id, service)

    try:
        record = RedirectRecord(
            site_id=site_id,
            from_path=body.from_path,
            to_path=body.to_path,
            status_code=body.status_code,
        )
    except PydanticValidationError as e:
        issues = [
            RedirectIssueModel(
                code="invalid_record",
                message=err["msg"],
                field=".".join(str(p) for p in err["loc"]) or None,
            )
            for err in e.errors(include_url=False, include_context=False)
        ]
        return JSONResponse(
            content=RedirectValidateResponse(
                valid=False, errors=issues, error_kind=ErrorKind.VALIDATION.value
            ).to_content(),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    result = await run_validate(
        ValidateRedirectInput(record=record),
        store=service.guarded_store,
        clock=service.clock,
        rules=service.rules.redirects,
    )

    response = RedirectValidateResponse(
        valid=result.success,
        chain=result.chain,
        errors=[
            RedirectIssueModel(code=e.code, message=e.message, field=e.field)
            for e in result.errors
        ],
        error_kind=result.error_kind,
    )

    if result.success:
        status_code = status.HTTP_200_OK
    elif result.error_kind in STORE_UNAVAILABLE_KINDS:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    return JSONResponse(content=response.to_content(), status_code=status_code)
