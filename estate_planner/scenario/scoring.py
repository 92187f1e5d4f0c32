"""
Scenario scoring — reduces a ScenarioResult to comparable ratios.
Pure functions. No I/O.

composite = tax_burden_ratio × 100 + liquidity shortfall × 200
A unit of liquidity shortfall costs twice a unit of tax burden. Lower is better.
"""
from __future__ import annotations

from estate_planner.scenario.schemas import LiquidityRiskBand, ScenarioResult, ScenarioScore

TAX_BURDEN_WEIGHT        = 100.0
LIQUIDITY_PENALTY_WEIGHT = 200.0

# Inclusive lower bounds, evaluated top-down
LOW_RISK_MIN_COVER       = 1.20
MODERATE_RISK_MIN_COVER  = 1.00
HIGH_RISK_MIN_COVER      = 0.80

# Denominator floor for an empty estate or a zero requirement
_MIN_DENOMINATOR         = 1.0


def liquidity_risk_band(cover_ratio: float) -> LiquidityRiskBand:
    if cover_ratio >= LOW_RISK_MIN_COVER:
        return LiquidityRiskBand.low
    elif cover_ratio >= MODERATE_RISK_MIN_COVER:
        return LiquidityRiskBand.moderate
    elif cover_ratio >= HIGH_RISK_MIN_COVER:
        return LiquidityRiskBand.high
    else:
        return LiquidityRiskBand.critical


def score_scenario(result: ScenarioResult) -> ScenarioScore:
    gross_estate = max(result.estate_duty.gross_estate_for_estate_duty_zar, _MIN_DENOMINATOR)
    required = max(result.liquidity.immediate_cash_requirements_zar, _MIN_DENOMINATOR)

    tax_burden_ratio = result.combined_tax.total_tax_liability_zar / gross_estate
    cover_ratio = result.liquidity.total_available_liquidity_zar / required

    tax_penalty = tax_burden_ratio * TAX_BURDEN_WEIGHT
    if cover_ratio >= 1.0:
        liquidity_penalty = 0.0
    else:
        liquidity_penalty = (1.0 - cover_ratio) * LIQUIDITY_PENALTY_WEIGHT

    return ScenarioScore(
        tax_burden_ratio=tax_burden_ratio,
        liquidity_cover_ratio=cover_ratio,
        liquidity_risk_band=liquidity_risk_band(cover_ratio),
        composite_score=tax_penalty + liquidity_penalty,
    )
