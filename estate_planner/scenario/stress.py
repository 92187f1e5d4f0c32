"""
Liquidity stress grid.
Pure functions. No I/O.

For every (shock, haircut) pair — shocks outer, haircuts inner, input order
preserved — derive a new scenario from the base:
    value  = value × max(1 + shock, 0)            every asset
    value *= clamp(1 − haircut, 0, 1)             liquid assets only, after the shock
and run the calculator. Cells are independent; nothing carries between them.

With shocks=[0.0] and haircuts=[0.0] the single cell reproduces
calculate_scenario(base) exactly.
"""
from __future__ import annotations

from typing import Sequence

from estate_planner.rules.catalog import RuleCatalog
from estate_planner.scenario.calculator import calculate_scenario
from estate_planner.scenario.schemas import EstateAsset, EstateScenarioInput, StressResult
from estate_planner.scenario.scoring import score_scenario


def _non_negative(factor: float) -> float:
    return factor if factor > 0.0 else 0.0


def _shock_asset(asset: EstateAsset, value_factor: float, liquid_factor: float) -> EstateAsset:
    value = _non_negative(asset.market_value_zar * value_factor)
    if asset.is_liquid:
        value *= liquid_factor
    return asset.model_copy(update={"market_value_zar": value})


def apply_shock(
    base: EstateScenarioInput,
    market_value_shock: float,
    liquid_asset_haircut: float,
) -> EstateScenarioInput:
    """Return a shocked copy of base; base itself is untouched."""
    value_factor = _non_negative(1.0 + market_value_shock)
    liquid_factor = min(_non_negative(1.0 - liquid_asset_haircut), 1.0)
    shocked_assets = [_shock_asset(a, value_factor, liquid_factor) for a in base.assets]
    return base.model_copy(update={"assets": shocked_assets})


def run_liquidity_stress_grid(
    base: EstateScenarioInput,
    market_value_shocks: Sequence[float],
    liquid_asset_haircuts: Sequence[float],
    catalog: RuleCatalog,
) -> list[StressResult]:
    """
    len(result) == len(market_value_shocks) × len(liquid_asset_haircuts).

    Raises:
        UnsupportedTaxYear: on the first cell whose rules cannot be resolved.
            Shocks never change jurisdiction or year, so in practice only an
            unsupported base fails — and the whole grid fails with it.
    """
    results: list[StressResult] = []
    for shock in market_value_shocks:
        for haircut in liquid_asset_haircuts:
            outcome = calculate_scenario(apply_shock(base, shock, haircut), catalog)
            results.append(StressResult(
                market_value_shock=shock,
                liquid_asset_haircut=haircut,
                outcome=outcome,
                score=score_scenario(outcome),
            ))
    return results
