"""Core (UI-agnostic) learner dashboard logic.

This package contains:
- record normalization (upstream rows -> frozen dataclasses)
- config normalization
- metric calculators and skill ranking
- radar / bar chart geometry
- page compute functions (JSON-serializable payloads)
- chart helpers (geometry -> Altair -> Vega-Lite spec dict)

Nothing here performs network I/O; record sets are fetched elsewhere.
"""
