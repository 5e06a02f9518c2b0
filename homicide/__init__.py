"""Core (UI-agnostic) homicide dashboard logic.

This package contains:
- data loading (REST Countries + World Bank -> pandas)
- filter/sort normalization
- color scale and chart helpers (matplotlib colormap, Altair -> Vega-Lite spec dict)
- view compute functions (JSON-serializable payloads)
"""
