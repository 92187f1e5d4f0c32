"""
Scenario optimizer — picks the lowest composite score from a candidate batch.
Pure functions. No I/O.

Fail-fast: the first candidate whose rules cannot be resolved aborts the whole
batch with UnsupportedTaxYear; no partial result is returned.
"""
from __future__ import annotations

from typing import Optional, Sequence

from estate_planner.rules.catalog import RuleCatalog
from estate_planner.scenario.calculator import calculate_scenario
from estate_planner.scenario.schemas import EstateScenarioInput, OptimizedScenario
from estate_planner.scenario.scoring import score_scenario


def evaluate_candidates(
    candidates: Sequence[EstateScenarioInput],
    catalog: RuleCatalog,
) -> list[OptimizedScenario]:
    """Calculate and score every candidate, in submission order."""
    evaluated: list[OptimizedScenario] = []
    for index, candidate in enumerate(candidates):
        result = calculate_scenario(candidate, catalog)
        evaluated.append(OptimizedScenario(
            index=index,
            input=candidate,
            result=result,
            score=score_scenario(result),
        ))
    return evaluated


def optimize_scenarios(
    candidates: Sequence[EstateScenarioInput],
    catalog: RuleCatalog,
) -> Optional[OptimizedScenario]:
    """
    Return the candidate with the minimum composite score, or None for an empty batch.
    Ties go to the lowest index (strict < in a left-to-right scan).
    """
    best: Optional[OptimizedScenario] = None
    for entry in evaluate_candidates(candidates, catalog):
        if best is None or entry.score.composite_score < best.score.composite_score:
            best = entry
    return best
