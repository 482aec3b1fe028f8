"""Core (UI-agnostic) dashboard logic.

This package contains:
- API configuration and the async HTTP client
- filter sets and filter panel field definitions
- fetch/filter/render controllers (Loading / Success / Failure)
- dashboard aggregation and the endpoint probe
- card view models and chart helpers (Altair -> Vega-Lite spec dict)
"""
