"""
Scenario scoring tests — risk bands, composite score, denominator floors.
"""
from __future__ import annotations

import pytest

from estate_planner.rules.catalog import RuleCatalog
from estate_planner.scenario.calculator import calculate_scenario
from estate_planner.scenario.schemas import (
    CapitalGainsTaxBreakdown,
    CombinedTaxLiability,
    EstateDutyBreakdown,
    LiquidityGapOutput,
    LiquidityRiskBand,
    ScenarioResult,
)
from estate_planner.scenario.scoring import liquidity_risk_band, score_scenario
from estate_planner.tests.scenario_fixtures import liquid_estate, single_illiquid_estate


def _result(gross_estate: float, total_tax: float, available: float, required: float) -> ScenarioResult:
    """Minimal result carrying only the four figures the scorer reads."""
    return ScenarioResult(
        rule_version_id="TEST",
        cgt=CapitalGainsTaxBreakdown(
            gross_capital_gain_zar=0.0,
            primary_residence_exclusion_used_zar=0.0,
            annual_exclusion_used_zar=0.0,
            inclusion_rate=0.4,
            taxable_capital_gain_in_income_zar=0.0,
            tax_payable_zar=0.0,
        ),
        estate_duty=EstateDutyBreakdown(
            gross_estate_for_estate_duty_zar=gross_estate,
            executor_fee_zar=0.0,
            section_4q_spousal_deduction_zar=0.0,
            pbo_deduction_zar=0.0,
            total_allowable_deductions_zar=0.0,
            net_estate_before_abatement_zar=gross_estate,
            section_4a_abatement_used_zar=3_500_000,
            dutiable_estate_after_abatement_zar=0.0,
            tax_payable_zar=total_tax,
        ),
        combined_tax=CombinedTaxLiability(
            estate_duty_zar=total_tax,
            cgt_on_death_zar=0.0,
            final_income_tax_zar=0.0,
            ongoing_estate_income_tax_provision_zar=0.0,
            total_tax_liability_zar=total_tax,
        ),
        liquidity=LiquidityGapOutput(
            liquid_assets_in_estate_zar=available,
            external_liquidity_proceeds_zar=0.0,
            cash_reserve_zar=0.0,
            total_available_liquidity_zar=available,
            executor_fee_zar=0.0,
            immediate_cash_requirements_zar=required,
            liquidity_gap_zar=max(required - available, 0.0),
            liquidity_surplus_zar=max(available - required, 0.0),
        ),
    )


@pytest.mark.parametrize(
    "cover_ratio, expected",
    [
        (5.0,  LiquidityRiskBand.low),
        (1.20, LiquidityRiskBand.low),
        (1.19, LiquidityRiskBand.moderate),
        (1.00, LiquidityRiskBand.moderate),
        (0.99, LiquidityRiskBand.high),
        (0.80, LiquidityRiskBand.high),
        (0.79, LiquidityRiskBand.critical),
        (0.0,  LiquidityRiskBand.critical),
    ],
)
def test_liquidity_risk_band_thresholds(cover_ratio: float, expected: LiquidityRiskBand) -> None:
    assert liquidity_risk_band(cover_ratio) == expected


def test_full_cover_has_no_liquidity_penalty() -> None:
    """Tax 2M on 10M estate → 0.2 × 100 = 20."""
    score = score_scenario(_result(10_000_000, 2_000_000, available=3_000_000, required=2_000_000))
    assert score.tax_burden_ratio == pytest.approx(0.2)
    assert score.liquidity_cover_ratio == pytest.approx(1.5)
    assert score.liquidity_risk_band == LiquidityRiskBand.low
    assert score.composite_score == pytest.approx(20.0)


def test_shortfall_penalised_at_double_weight() -> None:
    """Cover 0.5 → 20 + (1 - 0.5) × 200 = 120."""
    score = score_scenario(_result(10_000_000, 2_000_000, available=1_000_000, required=2_000_000))
    assert score.liquidity_cover_ratio == pytest.approx(0.5)
    assert score.liquidity_risk_band == LiquidityRiskBand.critical
    assert score.composite_score == pytest.approx(120.0)


def test_empty_estate_does_not_divide_by_zero() -> None:
    score = score_scenario(_result(0.0, 0.0, available=0.0, required=0.0))
    assert score.tax_burden_ratio == 0.0
    assert score.liquidity_cover_ratio == 0.0
    assert score.composite_score == pytest.approx(200.0)


def test_scores_of_reference_estates(catalog: RuleCatalog) -> None:
    illiquid = score_scenario(calculate_scenario(single_illiquid_estate(), catalog))
    liquid = score_scenario(calculate_scenario(liquid_estate(), catalog))

    # 7,625,000 / 40,000,000 = 0.190625; no cash at all → full 200 penalty
    assert illiquid.tax_burden_ratio == pytest.approx(0.190625)
    assert illiquid.liquidity_risk_band == LiquidityRiskBand.critical
    assert illiquid.composite_score == pytest.approx(219.0625)

    # 1,300,000 / 10,000,000 = 0.13; 10M cash covers 1.3M
    assert liquid.liquidity_risk_band == LiquidityRiskBand.low
    assert liquid.composite_score == pytest.approx(13.0)
    assert liquid.composite_score < illiquid.composite_score
