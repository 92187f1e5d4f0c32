"""
schemas.py — versioned tax-rule data contracts (Pydantic v2).

Defines:
  - Jurisdiction, TaxPayerClass enums
  - TaxRuleVersion                  (published revision metadata)
  - EstateDutyRule / DonationsTaxRule / CapitalGainsAtDeathRule
  - JurisdictionTaxRuleSet          (the three rule groups, co-versioned)
  - VersionedJurisdictionTaxRuleSet (version + rules — what the selector returns)
  - TaxRuleRegistryEntry            (jurisdiction + version, for registry listings)

All models are frozen: a published rule version never changes in place.
Rates are fractions in [0, 1]; monetary fields are ZAR and non-negative.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Jurisdiction(str, Enum):
    south_africa = "south_africa"


class TaxPayerClass(str, Enum):
    natural_person = "natural_person"
    company = "company"
    trust = "trust"
    special_trust = "special_trust"

    @property
    def gets_annual_exclusion(self) -> bool:
        """Natural persons and special trusts share the individual CGT treatment."""
        return self in (TaxPayerClass.natural_person, TaxPayerClass.special_trust)


# ---------------------------------------------------------------------------
# TaxRuleVersion
# ---------------------------------------------------------------------------

class TaxRuleVersion(BaseModel):
    """
    Identifies a published rule revision.

    tax_year_to=None means the version is open-ended (covers every later year).
    Dates are ISO-8601 strings exactly as published; they are informational and
    play no part in selection, which is by tax year only.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    version_id: str
    tax_year_from: int
    tax_year_to: Optional[int] = None
    effective_from: str
    effective_to: Optional[str] = None
    source_last_verified_on: str

    @model_validator(mode="after")
    def validate_year_range(self) -> "TaxRuleVersion":
        """tax_year_to, when set, cannot precede tax_year_from."""
        if self.tax_year_to is not None and self.tax_year_to < self.tax_year_from:
            raise ValueError(
                f"tax_year_to ({self.tax_year_to}) cannot precede "
                f"tax_year_from ({self.tax_year_from})"
            )
        return self

    def covers(self, tax_year: int) -> bool:
        if tax_year < self.tax_year_from:
            return False
        return self.tax_year_to is None or tax_year <= self.tax_year_to


# ---------------------------------------------------------------------------
# Rule groups
# ---------------------------------------------------------------------------

class EstateDutyRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    section_4a_abatement_zar: float = Field(..., ge=0)
    primary_rate: float = Field(..., ge=0, le=1)
    primary_rate_cap_zar: float = Field(..., ge=0)    # Upper bound of the primary-rate band
    secondary_rate: float = Field(..., ge=0, le=1)
    spouse_deduction_unlimited: bool                  # Section 4(q)
    effective_from: str
    source: str
    source_url: str


class DonationsTaxRule(BaseModel):
    """Part of the rule-set contract; the scenario calculator does not consume it."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    annual_exemption_natural_person_zar: float = Field(..., ge=0)
    annual_exemption_non_natural_casual_gifts_zar: float = Field(..., ge=0)
    primary_rate: float = Field(..., ge=0, le=1)
    primary_rate_cap_cumulative_zar: float = Field(..., ge=0)
    secondary_rate: float = Field(..., ge=0, le=1)
    effective_from: str
    source: str
    source_url: str


class CapitalGainsAtDeathRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    annual_exclusion_in_year_of_death_zar: float = Field(..., ge=0)
    inclusion_rate_natural_person: float = Field(..., ge=0, le=1)
    inclusion_rate_company: float = Field(..., ge=0, le=1)
    inclusion_rate_trust: float = Field(..., ge=0, le=1)
    base_cost_step_up_to_market_value_on_death: bool
    effective_from: str
    source: str
    source_url: str

    def inclusion_rate_for(self, taxpayer_class: TaxPayerClass) -> float:
        """Special trusts are taxed at the natural-person inclusion rate."""
        if taxpayer_class.gets_annual_exclusion:
            return self.inclusion_rate_natural_person
        if taxpayer_class == TaxPayerClass.company:
            return self.inclusion_rate_company
        return self.inclusion_rate_trust


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------

class JurisdictionTaxRuleSet(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    estate_duty: EstateDutyRule
    donations_tax: DonationsTaxRule
    cgt_on_death: CapitalGainsAtDeathRule


class VersionedJurisdictionTaxRuleSet(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    jurisdiction: Jurisdiction
    version: TaxRuleVersion
    rules: JurisdictionTaxRuleSet


class TaxRuleRegistryEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    jurisdiction: Jurisdiction
    version: TaxRuleVersion


class JurisdictionRegistryResponse(BaseModel):
    """Registry summary for one jurisdiction — GET /v1/rules/registry/{jurisdiction}."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    jurisdiction: Jurisdiction
    versions: list[TaxRuleVersion]
    supported_tax_year_from: int
    supported_tax_year_to: Optional[int] = None     # None → open-ended
    latest_version_id: str


__all__ = [
    "Jurisdiction",
    "TaxPayerClass",
    "TaxRuleVersion",
    "EstateDutyRule",
    "DonationsTaxRule",
    "CapitalGainsAtDeathRule",
    "JurisdictionTaxRuleSet",
    "VersionedJurisdictionTaxRuleSet",
    "TaxRuleRegistryEntry",
    "JurisdictionRegistryResponse",
]
