"""Versioned jurisdiction tax rules and the rule catalog/selector."""
