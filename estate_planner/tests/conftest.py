"""
Test configuration for the Estate Planner test suite.

Run from the repository root: pytest
"""
import pytest

from estate_planner.rules.catalog import RuleCatalog, default_rule_catalog
from estate_planner.rules.schemas import Jurisdiction, VersionedJurisdictionTaxRuleSet
from estate_planner.tests.scenario_fixtures import make_version


@pytest.fixture
def catalog() -> RuleCatalog:
    return default_rule_catalog()


@pytest.fixture
def za_rules(catalog: RuleCatalog) -> VersionedJurisdictionTaxRuleSet:
    return catalog.rules_for(Jurisdiction.south_africa, 2026)


@pytest.fixture
def bounded_catalog() -> RuleCatalog:
    """Two closed versions (2010–2015, 2016–2020), deliberately given out of order."""
    return RuleCatalog({
        Jurisdiction.south_africa: [
            make_version("ZA-TEST-2016", 2016, 2020),
            make_version("ZA-TEST-2010", 2010, 2015),
        ],
    })
