"""Workflow status derivation, grouping and link repair."""
