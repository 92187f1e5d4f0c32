"""
Scenario HTTP routes — POST /v1/scenario/calculate,
                       POST /v1/scenario/optimize,
                       POST /v1/scenario/stress

Each route runs the validation gate first (InputValidationError → 400), then
the engine. UnsupportedTaxYear from rule selection is left to propagate to the
422 handler in main.py — it is never turned into a validation error here.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from estate_planner.dependencies import get_rule_catalog
from estate_planner.rules.catalog import RuleCatalog
from estate_planner.scenario.calculator import calculate_scenario
from estate_planner.scenario.optimizer import optimize_scenarios
from estate_planner.scenario.schemas import (
    EstateScenarioInput,
    ScenarioCalculationResponse,
    StressGridRequest,
)
from estate_planner.scenario.scoring import score_scenario
from estate_planner.scenario.stress import run_liquidity_stress_grid
from estate_planner.scenario.validator import (
    validate_candidates,
    validate_scenario,
    validate_stress_request,
)

router = APIRouter(prefix="/v1/scenario", tags=["scenario"])
logger = logging.getLogger(__name__)


@router.post("/calculate")
async def calculate(
    scenario: EstateScenarioInput,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    """Single scenario: CGT, estate duty, combined tax, liquidity, plus its score."""
    validate_scenario(scenario)

    result = calculate_scenario(scenario, catalog)
    response = ScenarioCalculationResponse(result=result, score=score_scenario(result))

    logger.info(
        "Scenario calculated tax_year=%d version=%s assets=%d band=%s",
        scenario.tax_year,
        result.rule_version_id,
        len(scenario.assets),
        response.score.liquidity_risk_band.value,
    )
    return JSONResponse(status_code=200, content=response.model_dump(mode="json"))


@router.post("/optimize")
async def optimize(
    candidates: List[EstateScenarioInput],
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    """Best-scoring candidate, or null for an empty list."""
    validate_candidates(candidates)

    best = await run_in_threadpool(optimize_scenarios, candidates, catalog)
    if best is None:
        logger.info("Optimize called with empty candidate list")
        return JSONResponse(status_code=200, content=None)

    logger.info(
        "Optimized %d candidate(s) selected_index=%d composite=%.4f",
        len(candidates),
        best.index,
        best.score.composite_score,
    )
    return JSONResponse(status_code=200, content=best.model_dump(mode="json"))


@router.post("/stress")
async def stress(
    request_body: StressGridRequest,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> JSONResponse:
    """Shock × haircut grid over the base scenario. Runs off the event loop."""
    validate_stress_request(request_body)

    results = await run_in_threadpool(
        run_liquidity_stress_grid,
        request_body.base,
        request_body.market_value_shocks,
        request_body.liquid_asset_haircuts,
        catalog,
    )

    logger.info(
        "Stress grid computed shocks=%d haircuts=%d cells=%d",
        len(request_body.market_value_shocks),
        len(request_body.liquid_asset_haircuts),
        len(results),
    )
    return JSONResponse(status_code=200, content=[r.model_dump(mode="json") for r in results])
