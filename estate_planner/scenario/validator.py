"""
Scenario validation gate.

Validates EstateScenarioInput AFTER Pydantic structural validation has already
passed and BEFORE anything reaches the engine. Collects all violations in a
single pass and raises InputValidationError carrying every (field, issue) pair,
so callers receive all errors in one response rather than one at a time.

Rules enforced:
  1. assets present, at least one with market_value_zar > 0
  2. rates (marginal income tax, executor fee, VAT) finite and within [0, 1]
  3. every monetary field finite and non-negative
  4. asset name not blank
  5. asset not bequeathed to both spouse and PBO
  6. spouse/PBO bequest requires included_in_estate_duty
  7. primary-residence exclusion requires included_in_cgt_deemed_disposal
     and a natural_person/special_trust taxpayer
  8. company/trust taxpayer must set primary_residence_cgt_exclusion_cap_zar = 0
  9. non-resident duty-included assets must have SA situs
 10. combined monetary inputs small enough that no engine total overflows

Tax-year support is NOT checked here — an unsupported year surfaces from the
rule catalog as the distinct RULE_SELECTION_ERROR.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from estate_planner.config import settings
from estate_planner.errors import ErrorDetail, InputValidationError
from estate_planner.scenario.schemas import (
    EstateAsset,
    EstateScenarioInput,
    ResidencyStatus,
    StressGridRequest,
)

logger = logging.getLogger(__name__)

_RATE_FIELDS = (
    "marginal_income_tax_rate",
    "executor_fee_rate",
    "vat_rate",
)

_MONEY_FIELDS = (
    "debts_and_loans_zar",
    "funeral_costs_zar",
    "administration_costs_zar",
    "masters_office_fees_zar",
    "conveyancing_costs_zar",
    "other_settlement_costs_zar",
    "final_income_tax_due_zar",
    "ongoing_estate_income_tax_provision_zar",
    "additional_allowable_estate_duty_deductions_zar",
    "ported_section_4a_abatement_zar",
    "primary_residence_cgt_exclusion_cap_zar",
    "external_liquidity_proceeds_zar",
    "cash_reserve_zar",
)

# Engine totals and weighted scores stay below this multiple of the monetary input total
_TOTAL_HEADROOM = 1024.0


def _check_money(violations: list[ErrorDetail], field: str, value: float) -> None:
    if not math.isfinite(value):
        violations.append(ErrorDetail(field=field, issue="Value must be finite"))
    elif value < 0:
        violations.append(ErrorDetail(field=field, issue="Value cannot be negative"))


def _check_rate(violations: list[ErrorDetail], field: str, value: float) -> None:
    if not math.isfinite(value):
        violations.append(ErrorDetail(field=field, issue="Rate must be finite"))
    elif not 0.0 <= value <= 1.0:
        violations.append(ErrorDetail(field=field, issue="Rate must be between 0.0 and 1.0 (inclusive)"))


def _check_asset(
    violations: list[ErrorDetail],
    index: int,
    asset: EstateAsset,
    scenario: EstateScenarioInput,
) -> None:
    prefix = f"assets[{index}]"

    if not asset.name.strip():
        violations.append(ErrorDetail(field=f"{prefix}.name", issue="Asset name cannot be empty"))

    _check_money(violations, f"{prefix}.market_value_zar", asset.market_value_zar)
    _check_money(violations, f"{prefix}.base_cost_zar", asset.base_cost_zar)

    if asset.bequeathed_to_surviving_spouse and asset.bequeathed_to_pbo:
        violations.append(ErrorDetail(
            field=f"{prefix}.bequests",
            issue="Asset cannot be bequeathed to both spouse and PBO",
        ))

    if not asset.included_in_estate_duty and (
        asset.bequeathed_to_surviving_spouse or asset.bequeathed_to_pbo
    ):
        violations.append(ErrorDetail(
            field=f"{prefix}.included_in_estate_duty",
            issue="Spouse/PBO bequest flags require included_in_estate_duty=true",
        ))

    if asset.qualifies_primary_residence_exclusion:
        if not asset.included_in_cgt_deemed_disposal:
            violations.append(ErrorDetail(
                field=f"{prefix}.included_in_cgt_deemed_disposal",
                issue="Primary residence exclusion requires included_in_cgt_deemed_disposal=true",
            ))
        if not scenario.taxpayer_class.gets_annual_exclusion:
            violations.append(ErrorDetail(
                field=f"{prefix}.qualifies_primary_residence_exclusion",
                issue="Primary residence exclusion is not available to a company or trust",
            ))

    if (
        scenario.residency_status == ResidencyStatus.non_resident
        and asset.included_in_estate_duty
        and not asset.situs_in_south_africa
    ):
        violations.append(ErrorDetail(
            field=f"{prefix}.situs_in_south_africa",
            issue="Non-resident estate duty scope requires SA situs for included assets",
        ))


def _monetary_total(scenario: EstateScenarioInput) -> float:
    """Sum of every finite, positive monetary input (asset values, base costs, costs, proceeds)."""
    amounts = [getattr(scenario, field) for field in _MONEY_FIELDS]
    for asset in scenario.assets:
        amounts.extend((asset.market_value_zar, asset.base_cost_zar))
    if scenario.explicit_executor_fee_zar is not None:
        amounts.append(scenario.explicit_executor_fee_zar)

    total = 0.0
    for amount in amounts:
        if math.isfinite(amount) and amount > 0:
            total += amount
    return total


def _is_computable(total: float, factor: float = 1.0) -> bool:
    return math.isfinite(total * factor * _TOTAL_HEADROOM)


def collect_scenario_issues(scenario: EstateScenarioInput) -> list[ErrorDetail]:
    """Return every violation for one scenario (empty list if valid)."""
    violations: list[ErrorDetail] = []

    # ---- 1. Assets ----------------------------------------------------------
    if not scenario.assets:
        violations.append(ErrorDetail(field="assets", issue="At least one asset is required"))
    elif not any(
        math.isfinite(a.market_value_zar) and a.market_value_zar > 0 for a in scenario.assets
    ):
        violations.append(ErrorDetail(
            field="assets",
            issue="At least one asset must have market_value_zar > 0",
        ))

    # ---- 2. Rates -----------------------------------------------------------
    for field in _RATE_FIELDS:
        _check_rate(violations, field, getattr(scenario, field))

    # ---- 3. Money -----------------------------------------------------------
    for field in _MONEY_FIELDS:
        _check_money(violations, field, getattr(scenario, field))
    if scenario.explicit_executor_fee_zar is not None:
        _check_money(violations, "explicit_executor_fee_zar", scenario.explicit_executor_fee_zar)

    # ---- 8. Company/trust primary-residence cap ----------------------------
    if (
        not scenario.taxpayer_class.gets_annual_exclusion
        and scenario.primary_residence_cgt_exclusion_cap_zar > 0
    ):
        violations.append(ErrorDetail(
            field="primary_residence_cgt_exclusion_cap_zar",
            issue="Set to 0 for company/trust taxpayer class",
        ))

    # ---- 4–7, 9. Per-asset rules -------------------------------------------
    for index, asset in enumerate(scenario.assets):
        _check_asset(violations, index, asset, scenario)

    # ---- 10. Totals ---------------------------------------------------------
    if not _is_computable(_monetary_total(scenario)):
        violations.append(ErrorDetail(
            field="assets",
            issue="Combined monetary values are too large to compute",
        ))

    return violations


def _prefixed(violations: list[ErrorDetail], prefix: str) -> list[ErrorDetail]:
    return [ErrorDetail(field=f"{prefix}{v.field}", issue=v.issue) for v in violations]


def _raise_if_any(violations: list[ErrorDetail], context: str) -> None:
    if violations:
        # Count only; no asset names or values
        logger.info("%s validation failed: %d violation(s)", context, len(violations))
        raise InputValidationError(violations)


def validate_scenario(scenario: EstateScenarioInput) -> None:
    """
    Raises:
        InputValidationError: one or more rules violated.
    """
    _raise_if_any(collect_scenario_issues(scenario), "Scenario")


def validate_candidates(
    candidates: Sequence[EstateScenarioInput],
    max_candidates: Optional[int] = None,
) -> None:
    """Validate a batch; every field is prefixed with candidates[i]."""
    limit = settings.optimizer_max_candidates if max_candidates is None else max_candidates
    violations: list[ErrorDetail] = []

    if len(candidates) > limit:
        violations.append(ErrorDetail(
            field="candidates",
            issue=f"At most {limit} candidates can be optimized per request (got {len(candidates)})",
        ))

    for index, candidate in enumerate(candidates):
        violations.extend(_prefixed(collect_scenario_issues(candidate), f"candidates[{index}]."))

    _raise_if_any(violations, "Candidate batch")


def validate_stress_request(request: StressGridRequest, max_cells: Optional[int] = None) -> None:
    limit = settings.stress_grid_max_cells if max_cells is None else max_cells
    violations = _prefixed(collect_scenario_issues(request.base), "base.")

    for name in ("market_value_shocks", "liquid_asset_haircuts"):
        for index, value in enumerate(getattr(request, name)):
            if not math.isfinite(value):
                violations.append(ErrorDetail(field=f"{name}[{index}]", issue="Value must be finite"))

    base_total = _monetary_total(request.base)
    if _is_computable(base_total):
        for index, shock in enumerate(request.market_value_shocks):
            if math.isfinite(shock) and not _is_computable(base_total, 1.0 + shock):
                violations.append(ErrorDetail(
                    field=f"market_value_shocks[{index}]",
                    issue="Shock makes the estate too large to compute",
                ))

    cells = len(request.market_value_shocks) * len(request.liquid_asset_haircuts)
    if cells > limit:
        violations.append(ErrorDetail(
            field="market_value_shocks",
            issue=f"Stress grid of {cells} cells exceeds the limit of {limit}",
        ))

    _raise_if_any(violations, "Stress request")
