"""
Rule discovery HTTP routes — GET /v1/jurisdictions,
                              GET /v1/rules/registry,
                              GET /v1/rules/registry/{jurisdiction},
                              GET /v1/rules/latest/{jurisdiction},
                              GET /v1/rules/{jurisdiction}/{tax_year}

{jurisdiction} accepts south-africa | south_africa | southafrica | za (any case).
Unknown tokens → 400 VALIDATION_ERROR; unsupported year → 422 RULE_SELECTION_ERROR
(both mapped by the exception handlers in main.py).

Registration order matters: /rules/registry/* and /rules/latest/* are declared
before /rules/{jurisdiction}/{tax_year} so they are matched first.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from estate_planner.dependencies import get_rule_catalog
from estate_planner.rules.catalog import RuleCatalog, parse_jurisdiction

router = APIRouter(prefix="/v1", tags=["rules"])
logger = logging.getLogger(__name__)


@router.get("/jurisdictions")
async def list_jurisdictions(catalog: RuleCatalog = Depends(get_rule_catalog)) -> JSONResponse:
    """Jurisdictions the catalog holds rule versions for."""
    return JSONResponse(
        status_code=200,
        content=[j.value for j in catalog.supported_jurisdictions()],
    )


@router.get("/rules/registry")
async def list_registry_entries(catalog: RuleCatalog = Depends(get_rule_catalog)) -> JSONResponse:
    """Every registered rule version across all jurisdictions."""
    return JSONResponse(
        status_code=200,
        content=[entry.model_dump(mode="json") for entry in catalog.registry()],
    )


@router.get("/rules/registry/{jurisdiction}")
async def get_registry_for_jurisdiction(
    jurisdiction: str,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    """Versions, supported year window and latest version id for one jurisdiction."""
    parsed = parse_jurisdiction(jurisdiction)
    summary = catalog.registry_summary(parsed)
    if summary is None:
        raise HTTPException(
            status_code=404,
            detail=f"No rule registry found for jurisdiction '{parsed.value}'",
        )
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))


@router.get("/rules/latest/{jurisdiction}")
async def resolve_latest_rules(
    jurisdiction: str,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    parsed = parse_jurisdiction(jurisdiction)
    if parsed not in catalog.supported_jurisdictions():
        raise HTTPException(
            status_code=404,
            detail=f"No rule versions found for jurisdiction '{parsed.value}'",
        )
    versioned = catalog.latest_rules_for(parsed)
    logger.info("Latest rules resolved jurisdiction=%s version=%s", parsed.value, versioned.version.version_id)
    return JSONResponse(status_code=200, content=versioned.model_dump(mode="json"))


@router.get("/rules/{jurisdiction}/{tax_year}")
async def resolve_rules_for_year(
    jurisdiction: str,
    tax_year: int,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    """Rule version covering tax_year. UnsupportedTaxYear propagates to the 422 handler."""
    parsed = parse_jurisdiction(jurisdiction)
    versioned = catalog.rules_for(parsed, tax_year)
    logger.info(
        "Rules resolved jurisdiction=%s tax_year=%d version=%s",
        parsed.value,
        tax_year,
        versioned.version.version_id,
    )
    return JSONResponse(status_code=200, content=versioned.model_dump(mode="json"))
