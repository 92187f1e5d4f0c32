"""
Rule catalog & selector.

The catalog is an explicit, read-only table built once at startup and injected
wherever rules are needed (app.state.rule_catalog in the service, a fixture in
tests). Nothing here reads global state, so alternate catalogs can be swapped
in freely.

Selection: scan a jurisdiction's versions (ascending by tax_year_from) and
return the first whose [tax_year_from, tax_year_to] interval contains the
year. Construction guarantees at most one version can match.
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from estate_planner.errors import ErrorDetail, InputValidationError, UnsupportedTaxYear
from estate_planner.rules.schemas import (
    Jurisdiction,
    JurisdictionRegistryResponse,
    TaxRuleRegistryEntry,
    TaxRuleVersion,
    VersionedJurisdictionTaxRuleSet,
)
from estate_planner.rules.south_africa import SOUTH_AFRICA_RULE_VERSIONS

_JURISDICTION_ALIASES: dict[str, Jurisdiction] = {
    "south-africa": Jurisdiction.south_africa,
    "south_africa": Jurisdiction.south_africa,
    "southafrica": Jurisdiction.south_africa,
    "za": Jurisdiction.south_africa,
}


class RuleCatalog:
    """Versioned rule sets per jurisdiction."""

    def __init__(
        self,
        table: Mapping[Jurisdiction, Iterable[VersionedJurisdictionTaxRuleSet]],
    ) -> None:
        self._table: dict[Jurisdiction, tuple[VersionedJurisdictionTaxRuleSet, ...]] = {}
        for jurisdiction, versions in table.items():
            ordered = sorted(versions, key=lambda v: v.version.tax_year_from)
            if not ordered:
                raise ValueError(f"Catalog for {jurisdiction.value} has no rule versions")
            _check_no_overlap(jurisdiction, ordered)
            self._table[jurisdiction] = tuple(ordered)

    # -----------------------------------------------------------------------
    # Selection
    # -----------------------------------------------------------------------

    def rules_for(self, jurisdiction: Jurisdiction, tax_year: int) -> VersionedJurisdictionTaxRuleSet:
        """
        Raises:
            UnsupportedTaxYear: no version covers tax_year (or the jurisdiction
                has no table at all). The queried year is echoed unchanged.
        """
        for versioned in self._table.get(jurisdiction, ()):
            if versioned.version.covers(tax_year):
                return versioned
        raise UnsupportedTaxYear(jurisdiction, tax_year)

    def latest_rules_for(self, jurisdiction: Jurisdiction) -> VersionedJurisdictionTaxRuleSet:
        """
        The open-ended version if there is one, else the greatest tax_year_from.

        Raises:
            KeyError: jurisdiction is not in this catalog.
        """
        versions = self._table[jurisdiction]
        for versioned in versions:
            if versioned.version.tax_year_to is None:
                return versioned
        return versions[-1]

    def is_supported_year(self, jurisdiction: Jurisdiction, tax_year: int) -> bool:
        try:
            self.rules_for(jurisdiction, tax_year)
        except UnsupportedTaxYear:
            return False
        return True

    # -----------------------------------------------------------------------
    # Registry introspection
    # -----------------------------------------------------------------------

    def supported_jurisdictions(self) -> list[Jurisdiction]:
        return list(self._table)

    def registry_for(self, jurisdiction: Jurisdiction) -> list[TaxRuleVersion]:
        return [v.version for v in self._table.get(jurisdiction, ())]

    def registry(self) -> list[TaxRuleRegistryEntry]:
        return [
            TaxRuleRegistryEntry(jurisdiction=jurisdiction, version=v.version)
            for jurisdiction, versions in self._table.items()
            for v in versions
        ]

    def supported_year_window(self, jurisdiction: Jurisdiction) -> Optional[tuple[int, Optional[int]]]:
        """(first supported year, last supported year or None if open-ended)."""
        versions = self.registry_for(jurisdiction)
        if not versions:
            return None
        year_from = versions[0].tax_year_from
        if any(v.tax_year_to is None for v in versions):
            return year_from, None
        return year_from, max(v.tax_year_to for v in versions)

    def registry_summary(self, jurisdiction: Jurisdiction) -> Optional[JurisdictionRegistryResponse]:
        window = self.supported_year_window(jurisdiction)
        if window is None:
            return None
        return JurisdictionRegistryResponse(
            jurisdiction=jurisdiction,
            versions=self.registry_for(jurisdiction),
            supported_tax_year_from=window[0],
            supported_tax_year_to=window[1],
            latest_version_id=self.latest_rules_for(jurisdiction).version.version_id,
        )


def _check_no_overlap(
    jurisdiction: Jurisdiction,
    ordered: list[VersionedJurisdictionTaxRuleSet],
) -> None:
    for prev, nxt in zip(ordered, ordered[1:]):
        prev_to = prev.version.tax_year_to
        if prev_to is None or prev_to >= nxt.version.tax_year_from:
            raise ValueError(
                f"Rule versions {prev.version.version_id} and {nxt.version.version_id} "
                f"overlap for {jurisdiction.value}"
            )


def default_rule_catalog() -> RuleCatalog:
    return RuleCatalog({Jurisdiction.south_africa: SOUTH_AFRICA_RULE_VERSIONS})


def parse_jurisdiction(token: str) -> Jurisdiction:
    """Map a URL path token to a Jurisdiction (case-insensitive aliases)."""
    jurisdiction = _JURISDICTION_ALIASES.get(token.strip().lower())
    if jurisdiction is None:
        raise InputValidationError([
            ErrorDetail(
                field="jurisdiction",
                issue=(
                    f"Unsupported jurisdiction '{token}'. "
                    f"Use one of: {', '.join(_JURISDICTION_ALIASES)}"
                ),
            )
        ])
    return jurisdiction
