"""
Estate Scenario Calculator
Pure Python, deterministic. Same input + same rule set → bit-identical output.

Computation sequence (CRITICAL — each stage consumes the one before it):
  1. CGT on deemed disposal at death
  2. Estate duty  (CGT payable is a deduction against the estate)
  3. Combined tax (estate duty + CGT + final income tax + ongoing provision)
  4. Liquidity    (combined tax + settlement costs vs. cash available)

The calculator has no failure path once it holds a resolved rule set. Rule
selection (and its UnsupportedTaxYear) happens in calculate_scenario(), before
any arithmetic, and is never caught here.

Every monetary value is floored at 0; rates are clamped to [0, 1]. Inputs are
assumed to have passed validator.py already — the clamps are arithmetic
guards, not validation.
"""
from __future__ import annotations

from typing import Callable, Iterable

from estate_planner.rules.catalog import RuleCatalog
from estate_planner.rules.schemas import (
    Jurisdiction,
    JurisdictionTaxRuleSet,
    VersionedJurisdictionTaxRuleSet,
)
from estate_planner.scenario.schemas import (
    CapitalGainsTaxBreakdown,
    CombinedTaxLiability,
    EstateAsset,
    EstateDutyBreakdown,
    EstateScenarioInput,
    LiquidityGapOutput,
    ResidencyStatus,
    ScenarioResult,
)


# ===========================================================================
# INTERNAL HELPERS (pure functions — no side effects, no I/O)
# ===========================================================================

def _floor(amount: float) -> float:
    """NaN floors to 0, like every other non-positive amount."""
    return amount if amount > 0.0 else 0.0


def _clamp_rate(rate: float) -> float:
    return min(rate, 1.0) if rate > 0.0 else 0.0


def _total(amounts: Iterable[float]) -> float:
    """Floored left-to-right sum. Addition order is fixed; sum() may compensate."""
    total = 0.0
    for amount in amounts:
        total += _floor(amount)
    return total


def _in_estate_duty_scope(scenario: EstateScenarioInput, asset: EstateAsset) -> bool:
    """
    Residents: every duty-included asset is in scope.
    Non-residents: only duty-included assets with South African situs.
    """
    if not asset.included_in_estate_duty:
        return False
    if scenario.residency_status == ResidencyStatus.resident:
        return True
    return asset.situs_in_south_africa


def _two_band_duty(dutiable: float, cap: float, primary_rate: float, secondary_rate: float) -> float:
    """Marginal schedule: primary_rate up to cap, secondary_rate on the excess. No further bands."""
    primary_band = min(dutiable, cap)
    secondary_band = _floor(dutiable - cap)
    return primary_band * primary_rate + secondary_band * secondary_rate


# ===========================================================================
# STAGE 1 — CGT ON DEATH
# ===========================================================================

def calculate_cgt(
    scenario: EstateScenarioInput,
    rules: JurisdictionTaxRuleSet,
) -> CapitalGainsTaxBreakdown:
    """
    Deemed disposal at death.

    The primary-residence exclusion is ONE pool shared by every qualifying
    asset, consumed in asset-list order. The remaining pool is threaded through
    the loop as a local counter; asset order therefore changes which asset's
    gain is excluded, never the total excluded.

    The annual exclusion is applied once, to the summed gain, and only for
    natural persons and special trusts.
    """
    cgt_rule = rules.cgt_on_death
    marginal_rate = _clamp_rate(scenario.marginal_income_tax_rate)

    exclusion_remaining = _floor(scenario.primary_residence_cgt_exclusion_cap_zar)
    exclusion_used = 0.0
    gross_gain = 0.0

    for asset in scenario.assets:
        if not asset.included_in_cgt_deemed_disposal:
            continue

        gain = asset.raw_capital_gain_zar
        if asset.qualifies_primary_residence_exclusion and exclusion_remaining > 0.0:
            excluded = min(gain, exclusion_remaining)
            exclusion_used += excluded
            exclusion_remaining -= excluded
            gain -= excluded

        gross_gain += gain

    if scenario.taxpayer_class.gets_annual_exclusion:
        annual_exclusion_used = min(gross_gain, cgt_rule.annual_exclusion_in_year_of_death_zar)
    else:
        annual_exclusion_used = 0.0

    inclusion_rate = cgt_rule.inclusion_rate_for(scenario.taxpayer_class)
    taxable_gain = _floor(gross_gain - annual_exclusion_used) * inclusion_rate
    tax_payable = taxable_gain * marginal_rate

    return CapitalGainsTaxBreakdown(
        gross_capital_gain_zar=gross_gain,
        primary_residence_exclusion_used_zar=exclusion_used,
        annual_exclusion_used_zar=annual_exclusion_used,
        inclusion_rate=inclusion_rate,
        taxable_capital_gain_in_income_zar=taxable_gain,
        tax_payable_zar=tax_payable,
    )


# ===========================================================================
# STAGE 2 — ESTATE DUTY
# ===========================================================================

def calculate_executor_fee(scenario: EstateScenarioInput) -> float:
    """
    Explicit override if given, else all-asset value × fee rate × (1 + VAT).

    The fee base is every asset regardless of duty scope or residency: the
    executor administers the whole estate, while duty only reaches in-scope
    assets.
    """
    if scenario.explicit_executor_fee_zar is not None:
        return scenario.explicit_executor_fee_zar

    fee_base = _total(asset.market_value_zar for asset in scenario.assets)
    fee_rate = _clamp_rate(scenario.executor_fee_rate)
    vat_rate = _clamp_rate(scenario.vat_rate)
    return fee_base * fee_rate * (1.0 + vat_rate)


def calculate_estate_duty(
    scenario: EstateScenarioInput,
    rules: JurisdictionTaxRuleSet,
    cgt_tax_payable: float,
) -> EstateDutyBreakdown:
    duty_rule = rules.estate_duty
    in_scope = [a for a in scenario.assets if _in_estate_duty_scope(scenario, a)]

    # Step 1: Gross estate for duty (in-scope assets only)
    gross_estate = _total(a.market_value_zar for a in in_scope)

    # Step 2: Executor fee
    executor_fee = calculate_executor_fee(scenario)

    # Step 3: Bequest deductions (section 4(q) spouse, PBO)
    if duty_rule.spouse_deduction_unlimited:
        spousal_deduction = _total(
            a.market_value_zar for a in in_scope if a.bequeathed_to_surviving_spouse
        )
    else:
        spousal_deduction = 0.0
    pbo_deduction = _total(a.market_value_zar for a in in_scope if a.bequeathed_to_pbo)

    # Step 4: Total allowable deductions (each cost floored individually)
    total_deductions = (
        _floor(scenario.debts_and_loans_zar)
        + _floor(scenario.funeral_costs_zar)
        + _floor(scenario.administration_costs_zar)
        + _floor(scenario.masters_office_fees_zar)
        + _floor(scenario.conveyancing_costs_zar)
        + _floor(scenario.other_settlement_costs_zar)
        + _floor(scenario.final_income_tax_due_zar)
        + _floor(scenario.ongoing_estate_income_tax_provision_zar)
        + cgt_tax_payable
        + _floor(executor_fee)
        + spousal_deduction
        + pbo_deduction
        + _floor(scenario.additional_allowable_estate_duty_deductions_zar)
    )

    # Step 5: Net estate, abatement (own + ported from a predeceased spouse)
    net_estate = _floor(gross_estate - total_deductions)
    abatement = duty_rule.section_4a_abatement_zar + _floor(scenario.ported_section_4a_abatement_zar)
    dutiable = _floor(net_estate - abatement)

    # Step 6: Two-band duty
    duty = _two_band_duty(
        dutiable,
        duty_rule.primary_rate_cap_zar,
        duty_rule.primary_rate,
        duty_rule.secondary_rate,
    )

    return EstateDutyBreakdown(
        gross_estate_for_estate_duty_zar=gross_estate,
        executor_fee_zar=executor_fee,
        section_4q_spousal_deduction_zar=spousal_deduction,
        pbo_deduction_zar=pbo_deduction,
        total_allowable_deductions_zar=total_deductions,
        net_estate_before_abatement_zar=net_estate,
        section_4a_abatement_used_zar=abatement,
        dutiable_estate_after_abatement_zar=dutiable,
        tax_payable_zar=duty,
    )


# ===========================================================================
# STAGE 3 — COMBINED TAX
# ===========================================================================

def calculate_combined_tax(
    scenario: EstateScenarioInput,
    cgt_tax_payable: float,
    estate_duty_payable: float,
) -> CombinedTaxLiability:
    final_income_tax = _floor(scenario.final_income_tax_due_zar)
    ongoing_provision = _floor(scenario.ongoing_estate_income_tax_provision_zar)
    total = estate_duty_payable + cgt_tax_payable + final_income_tax + ongoing_provision

    return CombinedTaxLiability(
        estate_duty_zar=estate_duty_payable,
        cgt_on_death_zar=cgt_tax_payable,
        final_income_tax_zar=final_income_tax,
        ongoing_estate_income_tax_provision_zar=ongoing_provision,
        total_tax_liability_zar=total,
    )


# ===========================================================================
# STAGE 4 — LIQUIDITY
# ===========================================================================

def calculate_liquidity(
    scenario: EstateScenarioInput,
    combined_tax: CombinedTaxLiability,
    executor_fee: float,
) -> LiquidityGapOutput:
    """
    Liquid assets count regardless of duty scope: liquidity is about cash
    the executor can reach, not about what is dutiable.
    """
    liquid_assets = _total(a.market_value_zar for a in scenario.assets if a.is_liquid)
    executor_fee = _floor(executor_fee)

    cash_requirements = (
        combined_tax.total_tax_liability_zar
        + _floor(scenario.debts_and_loans_zar)
        + _floor(scenario.funeral_costs_zar)
        + _floor(scenario.administration_costs_zar)
        + executor_fee
        + _floor(scenario.masters_office_fees_zar)
        + _floor(scenario.conveyancing_costs_zar)
        + _floor(scenario.other_settlement_costs_zar)
    )

    external_proceeds = _floor(scenario.external_liquidity_proceeds_zar)
    cash_reserve = _floor(scenario.cash_reserve_zar)
    available = liquid_assets + external_proceeds + cash_reserve

    return LiquidityGapOutput(
        liquid_assets_in_estate_zar=liquid_assets,
        external_liquidity_proceeds_zar=external_proceeds,
        cash_reserve_zar=cash_reserve,
        total_available_liquidity_zar=available,
        executor_fee_zar=executor_fee,
        immediate_cash_requirements_zar=cash_requirements,
        liquidity_gap_zar=_floor(cash_requirements - available),
        liquidity_surplus_zar=_floor(available - cash_requirements),
    )


# ===========================================================================
# JURISDICTION STRATEGIES
# ===========================================================================

ScenarioCalculator = Callable[[EstateScenarioInput, VersionedJurisdictionTaxRuleSet], ScenarioResult]


def calculate_south_africa(
    scenario: EstateScenarioInput,
    versioned: VersionedJurisdictionTaxRuleSet,
) -> ScenarioResult:
    rules = versioned.rules

    cgt = calculate_cgt(scenario, rules)
    estate_duty = calculate_estate_duty(scenario, rules, cgt.tax_payable_zar)
    combined_tax = calculate_combined_tax(scenario, cgt.tax_payable_zar, estate_duty.tax_payable_zar)
    liquidity = calculate_liquidity(scenario, combined_tax, estate_duty.executor_fee_zar)

    return ScenarioResult(
        rule_version_id=versioned.version.version_id,
        cgt=cgt,
        estate_duty=estate_duty,
        combined_tax=combined_tax,
        liquidity=liquidity,
    )


CALCULATORS: dict[Jurisdiction, ScenarioCalculator] = {
    Jurisdiction.south_africa: calculate_south_africa,
}


# ===========================================================================
# PUBLIC API
# ===========================================================================

def calculate(
    scenario: EstateScenarioInput,
    versioned: VersionedJurisdictionTaxRuleSet,
) -> ScenarioResult:
    """Run the calculator registered for the scenario's jurisdiction against a resolved rule set."""
    return CALCULATORS[scenario.jurisdiction](scenario, versioned)


def calculate_scenario(scenario: EstateScenarioInput, catalog: RuleCatalog) -> ScenarioResult:
    """
    Resolve rules for (jurisdiction, tax_year), then calculate.

    Raises:
        UnsupportedTaxYear: propagated unchanged from the catalog.
    """
    versioned = catalog.rules_for(scenario.jurisdiction, scenario.tax_year)
    return calculate(scenario, versioned)
