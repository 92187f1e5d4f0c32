"""
schemas.py — scenario Pydantic v2 data contracts.

Defines:
  - ResidencyStatus, LiquidityRiskBand enums
  - EstateAsset, EstateScenarioInput      (one simulation unit — engine input)
  - CapitalGainsTaxBreakdown, EstateDutyBreakdown,
    CombinedTaxLiability, LiquidityGapOutput   (the four calculator stages)
  - ScenarioResult                        (aggregate of the four breakdowns)
  - ScenarioScore, OptimizedScenario, StressResult   (derived read-only views)
  - ScenarioCalculationResponse, StressGridRequest   (HTTP bodies)

Every model is frozen. The optimizer and stress grid derive new inputs with
model_copy(update=...) instead of mutating a shared one.

Input models carry types only: range checks (rates in [0, 1], finite and
non-negative money, flag consistency) belong to validator.py, which must run
before anything here reaches the engine.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from estate_planner.rules.schemas import Jurisdiction, TaxPayerClass


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ResidencyStatus(str, Enum):
    resident = "resident"
    non_resident = "non_resident"


class LiquidityRiskBand(str, Enum):
    low = "low"              # cover >= 1.20
    moderate = "moderate"    # 1.00 <= cover < 1.20
    high = "high"            # 0.80 <= cover < 1.00
    critical = "critical"    # cover < 0.80


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class EstateAsset(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    market_value_zar: float
    base_cost_zar: float
    is_liquid: bool = False
    situs_in_south_africa: bool = True
    included_in_estate_duty: bool = True
    included_in_cgt_deemed_disposal: bool = True
    bequeathed_to_surviving_spouse: bool = False
    bequeathed_to_pbo: bool = False
    qualifies_primary_residence_exclusion: bool = False

    @property
    def raw_capital_gain_zar(self) -> float:
        gain = self.market_value_zar - self.base_cost_zar
        return gain if gain > 0.0 else 0.0


class EstateScenarioInput(BaseModel):
    """
    One modeled deceased estate.

    All monetary fields are ZAR. Rates are fractions (0.45 = 45%).
    explicit_executor_fee_zar, when set, replaces the rate-based fee
    (sum of all asset values × executor_fee_rate × (1 + vat_rate)).
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    jurisdiction: Jurisdiction = Jurisdiction.south_africa
    tax_year: int = 2026
    taxpayer_class: TaxPayerClass = TaxPayerClass.natural_person
    residency_status: ResidencyStatus = ResidencyStatus.resident
    marginal_income_tax_rate: float = 0.45

    assets: List[EstateAsset] = Field(default_factory=list)

    # --- Liabilities and settlement costs ---
    debts_and_loans_zar: float = 0.0
    funeral_costs_zar: float = 0.0
    administration_costs_zar: float = 0.0
    masters_office_fees_zar: float = 0.0
    conveyancing_costs_zar: float = 0.0
    other_settlement_costs_zar: float = 0.0

    # --- Income tax ---
    final_income_tax_due_zar: float = 0.0
    ongoing_estate_income_tax_provision_zar: float = 0.0

    # --- Estate duty / CGT adjustments ---
    additional_allowable_estate_duty_deductions_zar: float = 0.0
    ported_section_4a_abatement_zar: float = 0.0     # Unused abatement of a predeceased spouse
    primary_residence_cgt_exclusion_cap_zar: float = 2_000_000.0

    # --- Executor remuneration ---
    executor_fee_rate: float = 0.035
    vat_rate: float = 0.15
    explicit_executor_fee_zar: Optional[float] = None

    # --- Liquidity sources outside the estate's liquid assets ---
    external_liquidity_proceeds_zar: float = 0.0     # e.g. life policy paid to the estate
    cash_reserve_zar: float = 0.0


# ---------------------------------------------------------------------------
# Calculator breakdowns
# ---------------------------------------------------------------------------

class CapitalGainsTaxBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    gross_capital_gain_zar: float                    # After primary-residence exclusion
    primary_residence_exclusion_used_zar: float
    annual_exclusion_used_zar: float                 # Always 0 for company/trust
    inclusion_rate: float
    taxable_capital_gain_in_income_zar: float
    tax_payable_zar: float


class EstateDutyBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    gross_estate_for_estate_duty_zar: float          # In-scope, duty-included assets only
    executor_fee_zar: float                          # Fee base is ALL assets
    section_4q_spousal_deduction_zar: float
    pbo_deduction_zar: float
    total_allowable_deductions_zar: float
    net_estate_before_abatement_zar: float
    section_4a_abatement_used_zar: float
    dutiable_estate_after_abatement_zar: float
    tax_payable_zar: float


class CombinedTaxLiability(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    estate_duty_zar: float
    cgt_on_death_zar: float
    final_income_tax_zar: float
    ongoing_estate_income_tax_provision_zar: float
    total_tax_liability_zar: float


class LiquidityGapOutput(BaseModel):
    """Exactly one of liquidity_gap_zar / liquidity_surplus_zar is non-zero, unless both are zero."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    liquid_assets_in_estate_zar: float
    external_liquidity_proceeds_zar: float
    cash_reserve_zar: float
    total_available_liquidity_zar: float
    executor_fee_zar: float
    immediate_cash_requirements_zar: float
    liquidity_gap_zar: float
    liquidity_surplus_zar: float


class ScenarioResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    rule_version_id: str
    cgt: CapitalGainsTaxBreakdown
    estate_duty: EstateDutyBreakdown
    combined_tax: CombinedTaxLiability
    liquidity: LiquidityGapOutput


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

class ScenarioScore(BaseModel):
    """Lower composite_score is strictly better."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    tax_burden_ratio: float
    liquidity_cover_ratio: float
    liquidity_risk_band: LiquidityRiskBand
    composite_score: float


class OptimizedScenario(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int                    # Position of the winner in the submitted batch
    input: EstateScenarioInput
    result: ScenarioResult
    score: ScenarioScore


class StressResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    market_value_shock: float
    liquid_asset_haircut: float
    outcome: ScenarioResult
    score: ScenarioScore


# ---------------------------------------------------------------------------
# HTTP bodies
# ---------------------------------------------------------------------------

class ScenarioCalculationResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    result: ScenarioResult
    score: ScenarioScore


class StressGridRequest(BaseModel):
    """
    market_value_shocks: fractional change applied to every asset (-0.2 = 20% drop).
    liquid_asset_haircuts: extra fractional loss on liquid assets after the shock.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    base: EstateScenarioInput
    market_value_shocks: List[float] = Field(default_factory=lambda: [0.0])
    liquid_asset_haircuts: List[float] = Field(default_factory=lambda: [0.0])


__all__ = [
    "ResidencyStatus",
    "LiquidityRiskBand",
    "EstateAsset",
    "EstateScenarioInput",
    "CapitalGainsTaxBreakdown",
    "EstateDutyBreakdown",
    "CombinedTaxLiability",
    "LiquidityGapOutput",
    "ScenarioResult",
    "ScenarioScore",
    "OptimizedScenario",
    "StressResult",
    "ScenarioCalculationResponse",
    "StressGridRequest",
]
