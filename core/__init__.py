"""Core (UI-agnostic) dashboard logic.

This package contains:
- synthetic dataset generation (seedable)
- filter normalization and the record predicate
- the base metrics aggregate and the view builders fed by it
- chart helpers (Altair -> Vega-Lite spec dict)
- CSV / text export and the state orchestrator
"""
