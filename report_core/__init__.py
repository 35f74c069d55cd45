"""Core (UI-agnostic) workshop reporting logic.

This package contains:
- value extraction and currency formatting
- table -> record transforms
- per-workshop column summaries and worksheet processing
- chart datasets (and Altair -> Vega-Lite spec dicts)
- workbook loading (XLSX -> Table) and the column selector
"""
