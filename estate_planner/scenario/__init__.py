"""Scenario calculator, scoring, optimizer and stress grid."""
