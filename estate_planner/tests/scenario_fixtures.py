"""
Scenario builders for the Estate Planner test suite.

baseline_input() mirrors the reference estate used in the hand-computed cases:
resident natural person, 45% marginal rate, executor fee pinned to 0 so the
estate-duty figures can be checked without the fee arithmetic.

ZA 2018+ rules used in every expected value below:
  abatement 3,500,000 | 20% up to 30,000,000 | 25% above
  CGT annual exclusion 300,000 | inclusion 40% natural person, 80% company/trust
"""
from __future__ import annotations

from typing import Any

from estate_planner.rules.schemas import (
    Jurisdiction,
    TaxPayerClass,
    TaxRuleVersion,
    VersionedJurisdictionTaxRuleSet,
)
from estate_planner.rules.south_africa import ZA_ESTATE_BASELINE_2018
from estate_planner.scenario.schemas import EstateAsset, EstateScenarioInput, ResidencyStatus


def asset(name: str, market_value: float, base_cost: float | None = None, **flags: Any) -> EstateAsset:
    """Illiquid, SA-situs, duty- and CGT-included asset unless flags say otherwise."""
    return EstateAsset(
        name=name,
        market_value_zar=market_value,
        base_cost_zar=market_value if base_cost is None else base_cost,
        **flags,
    )


def baseline_input(*assets: EstateAsset, **overrides: Any) -> EstateScenarioInput:
    fields: dict[str, Any] = dict(
        jurisdiction=Jurisdiction.south_africa,
        tax_year=2026,
        taxpayer_class=TaxPayerClass.natural_person,
        residency_status=ResidencyStatus.resident,
        marginal_income_tax_rate=0.45,
        explicit_executor_fee_zar=0.0,
        assets=list(assets),
    )
    fields.update(overrides)
    return EstateScenarioInput(**fields)


def single_illiquid_estate() -> EstateScenarioInput:
    """40,000,000 illiquid asset, no gain. Duty 7,625,000, liquidity gap 7,625,000."""
    return baseline_input(asset("Farm", 40_000_000))


def spousal_estate() -> EstateScenarioInput:
    """20,000,000 to spouse + 5,000,000 to another heir. Duty 300,000."""
    return baseline_input(
        asset("Spouse bequest", 20_000_000, bequeathed_to_surviving_spouse=True),
        asset("Non-spouse bequest", 5_000_000),
    )


def non_resident_estate() -> EstateScenarioInput:
    """
    10,000,000 SA-situs + 50,000,000 foreign-situs, both duty-included.
    Only the SA asset is in scope: gross estate for duty = 10,000,000.

    Note: the foreign asset would be rejected by the validation gate; the
    calculator still has to scope it out on its own.
    """
    return baseline_input(
        asset("SA situs asset", 10_000_000),
        asset("Foreign situs asset", 50_000_000, situs_in_south_africa=False),
        residency_status=ResidencyStatus.non_resident,
    )


def liquid_estate() -> EstateScenarioInput:
    """Cash-rich estate: 10,000,000 liquid, duty 1,300,000, surplus 8,700,000."""
    return baseline_input(asset("Money market", 10_000_000, is_liquid=True))


def make_version(version_id: str, year_from: int, year_to: int | None) -> VersionedJurisdictionTaxRuleSet:
    """ZA baseline rules re-published under a different version/year range."""
    return ZA_ESTATE_BASELINE_2018.model_copy(update={
        "version": TaxRuleVersion(
            version_id=version_id,
            tax_year_from=year_from,
            tax_year_to=year_to,
            effective_from=f"{year_from}-03-01",
            effective_to=None if year_to is None else f"{year_to + 1}-02-28",
            source_last_verified_on="2026-02-21",
        ),
    })
