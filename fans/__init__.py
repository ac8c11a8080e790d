"""Core (UI-agnostic) peer benchmark logic.

This package contains:
- reference data loading (JSON -> pandas)
- spreadsheet import (column mapping, row normalization, import pipeline)
- filter normalization and record filtering
- variance, aggregation and ranking compute functions (JSON-serializable payloads)
- Altair chart builders for the Streamlit page
"""
