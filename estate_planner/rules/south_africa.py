"""
South Africa — estate tax rule versions.

Values last source-verified against SARS pages on 2026-02-21.
Add a new version by appending to SOUTH_AFRICA_RULE_VERSIONS and closing the
previous version's tax_year_to; the catalog rejects overlapping year ranges.
"""
from __future__ import annotations

from estate_planner.rules.schemas import (
    CapitalGainsAtDeathRule,
    DonationsTaxRule,
    EstateDutyRule,
    Jurisdiction,
    JurisdictionTaxRuleSet,
    TaxRuleVersion,
    VersionedJurisdictionTaxRuleSet,
)

RATES_LAST_VERIFIED_ON = "2026-02-21"

# ===========================================================================
# ESTATE DUTY (Estate Duty Act 45 of 1955)
# ===========================================================================

ESTATE_DUTY_SECTION_4A_ABATEMENT = 3_500_000
ESTATE_DUTY_PRIMARY_RATE         = 0.20
ESTATE_DUTY_PRIMARY_RATE_CAP     = 30_000_000     # 20% band ends here, 25% above
ESTATE_DUTY_SECONDARY_RATE       = 0.25

# ===========================================================================
# DONATIONS TAX
# ===========================================================================

DONATIONS_EXEMPTION_NATURAL_PERSON      = 100_000
DONATIONS_EXEMPTION_NON_NATURAL_CASUAL  = 10_000
DONATIONS_PRIMARY_RATE                  = 0.20
DONATIONS_PRIMARY_RATE_CAP_CUMULATIVE   = 30_000_000
DONATIONS_SECONDARY_RATE                = 0.25

# ===========================================================================
# CGT ON DEATH (Income Tax Act, Eighth Schedule)
# ===========================================================================

CGT_ANNUAL_EXCLUSION_YEAR_OF_DEATH = 300_000
CGT_INCLUSION_RATE_NATURAL_PERSON  = 0.40
CGT_INCLUSION_RATE_COMPANY         = 0.80
CGT_INCLUSION_RATE_TRUST           = 0.80


ZA_ESTATE_BASELINE_2018 = VersionedJurisdictionTaxRuleSet(
    jurisdiction=Jurisdiction.south_africa,
    version=TaxRuleVersion(
        version_id="ZA-ESTATE-BASELINE-2018+",
        tax_year_from=2018,
        tax_year_to=None,
        effective_from="2018-03-01",
        effective_to=None,
        source_last_verified_on=RATES_LAST_VERIFIED_ON,
    ),
    rules=JurisdictionTaxRuleSet(
        estate_duty=EstateDutyRule(
            section_4a_abatement_zar=ESTATE_DUTY_SECTION_4A_ABATEMENT,
            primary_rate=ESTATE_DUTY_PRIMARY_RATE,
            primary_rate_cap_zar=ESTATE_DUTY_PRIMARY_RATE_CAP,
            secondary_rate=ESTATE_DUTY_SECONDARY_RATE,
            spouse_deduction_unlimited=True,
            effective_from="2018-03-01",
            source=f"SARS Estate Duty (accessed {RATES_LAST_VERIFIED_ON})",
            source_url="https://www.sars.gov.za/types-of-tax/estate-duty/",
        ),
        donations_tax=DonationsTaxRule(
            annual_exemption_natural_person_zar=DONATIONS_EXEMPTION_NATURAL_PERSON,
            annual_exemption_non_natural_casual_gifts_zar=DONATIONS_EXEMPTION_NON_NATURAL_CASUAL,
            primary_rate=DONATIONS_PRIMARY_RATE,
            primary_rate_cap_cumulative_zar=DONATIONS_PRIMARY_RATE_CAP_CUMULATIVE,
            secondary_rate=DONATIONS_SECONDARY_RATE,
            effective_from="2018-03-01",
            source=f"SARS Donations Tax (accessed {RATES_LAST_VERIFIED_ON})",
            source_url="https://www.sars.gov.za/types-of-tax/donations-tax/",
        ),
        cgt_on_death=CapitalGainsAtDeathRule(
            annual_exclusion_in_year_of_death_zar=CGT_ANNUAL_EXCLUSION_YEAR_OF_DEATH,
            inclusion_rate_natural_person=CGT_INCLUSION_RATE_NATURAL_PERSON,
            inclusion_rate_company=CGT_INCLUSION_RATE_COMPANY,
            inclusion_rate_trust=CGT_INCLUSION_RATE_TRUST,
            base_cost_step_up_to_market_value_on_death=True,
            effective_from="2016-03-01",
            source=f"SARS CGT (page updated 2025-05-21; accessed {RATES_LAST_VERIFIED_ON})",
            source_url="https://www.sars.gov.za/tax-rates/income-tax/capital-gains-tax-cgt/",
        ),
    ),
)

SOUTH_AFRICA_RULE_VERSIONS: list[VersionedJurisdictionTaxRuleSet] = [
    ZA_ESTATE_BASELINE_2018,
]
