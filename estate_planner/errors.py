"""
errors.py — error taxonomy and the standard error envelope.

Two failure kinds reach callers, and they must stay distinguishable:
  - RuleSelectionError  raised by the rule catalog when no version covers the
                        requested jurisdiction/year. The engine never recovers
                        from it; it propagates through calculator, optimizer
                        and stress grid unchanged.            → 422 RULE_SELECTION_ERROR
  - InputValidationError raised by the validation gate before any engine call,
                        carrying every (field, issue) pair.    → 400 VALIDATION_ERROR

Envelope shape (shared by every error response):
    {"error": {"code": str, "message": str, "details": [{"field": str|None, "issue": str}]}}
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel

if TYPE_CHECKING:
    from estate_planner.rules.schemas import Jurisdiction


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    field: Optional[str] = None
    issue: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: List[ErrorDetail] = []


class ErrorResponse(BaseModel):
    error: ErrorBody


# ---------------------------------------------------------------------------
# Rule selection
# ---------------------------------------------------------------------------

class RuleSelectionError(Exception):
    """Base class for failures to resolve a rule set from the catalog."""


class UnsupportedTaxYear(RuleSelectionError):
    def __init__(self, jurisdiction: "Jurisdiction", tax_year: int) -> None:
        self.jurisdiction = jurisdiction
        self.tax_year = tax_year
        super().__init__(
            f"No tax rule version found for jurisdiction {jurisdiction.value} "
            f"and tax year {tax_year}"
        )


# ---------------------------------------------------------------------------
# Validation gate
# ---------------------------------------------------------------------------

class InputValidationError(ValueError):
    """All validation issues found in one pass over an input."""

    def __init__(self, issues: List[ErrorDetail]) -> None:
        self.issues = list(issues)
        lines = [f"- {i.field}: {i.issue}" for i in self.issues]
        super().__init__("Input validation failed:\n" + "\n".join(lines))


__all__ = [
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
    "RuleSelectionError",
    "UnsupportedTaxYear",
    "InputValidationError",
]
