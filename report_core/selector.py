"""Column selector: pick which worksheet columns feed which chart group.

The selector is a flat list of rows, one per (worksheet, column) pair:
``{"worksheet", "column", "included", "group"}``. Checked rows are collected
into per-worksheet chart groups and written back as Table Settings values.
Column signatures let the caller notice when a worksheet's header row changed
after the selector was built. Storage of signatures and selections is up to
the caller (session state, a settings sheet, ...).
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Sequence

from report_core.config import WorksheetConfig
from report_core.values import is_present
from report_core.worksheet import Table


logger = logging.getLogger(__name__)

SelectorRow = Dict[str, Any]
Selections = Dict[str, Dict[str, List[str]]]


def build_selector_rows(tables: Mapping[str, Table], worksheet_configs: Sequence[WorksheetConfig]) -> List[SelectorRow]:
    rows: List[SelectorRow] = []
    for ws in worksheet_configs:
        table = tables.get(ws.worksheet_name)
        if table is None:
            continue
        # column 0 holds the workshop id
        for column in list(table.headers)[1:]:
            if is_present(column):
                rows.append({"worksheet": ws.worksheet_name, "column": str(column), "included": False, "group": ""})
    return rows


def generate_column_signature(headers: Sequence[Any]) -> str:
    return json.dumps([str(h) for h in headers if is_present(h)])


def build_column_signatures(tables: Mapping[str, Table], worksheet_configs: Sequence[WorksheetConfig]) -> Dict[str, str]:
    return {
        ws.worksheet_name: generate_column_signature(tables[ws.worksheet_name].headers)
        for ws in worksheet_configs
        if ws.worksheet_name in tables
    }


def detect_column_changes(
    stored_signatures: Mapping[str, str],
    tables: Mapping[str, Table],
    worksheet_configs: Sequence[WorksheetConfig],
) -> List[str]:
    """Worksheets whose header row no longer matches the stored signature."""
    current = build_column_signatures(tables, worksheet_configs)
    changed = [name for name, sig in current.items() if name in stored_signatures and stored_signatures[name] != sig]
    if changed:
        logger.info("Column changes detected in %s", ", ".join(changed))
    return changed


def collect_selections(rows: Sequence[SelectorRow]) -> Selections:
    selections: Selections = {}
    for row in rows:
        worksheet = row.get("worksheet")
        column = row.get("column")
        if not worksheet or not column or not row.get("included"):
            continue
        group = str(row.get("group") or "")
        selections.setdefault(worksheet, {}).setdefault(group, []).append(column)
    return selections


def capture_selections(rows: Sequence[SelectorRow]) -> Dict[str, Dict[str, Dict[str, Any]]]:
    saved: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for row in rows:
        worksheet = row.get("worksheet")
        column = row.get("column")
        if not worksheet or not column:
            continue
        saved.setdefault(worksheet, {})[column] = {"checked": bool(row.get("included")), "group": row.get("group") or ""}
    return saved


def restore_selections(rows: Sequence[SelectorRow], saved: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> List[SelectorRow]:
    """Copy of ``rows`` with checked state and groups carried over from ``saved``."""
    restored: List[SelectorRow] = []
    for row in rows:
        out = dict(row)
        selection = (saved.get(row.get("worksheet")) or {}).get(row.get("column"))
        if selection:
            if selection.get("checked"):
                out["included"] = True
            if selection.get("group"):
                out["group"] = selection["group"]
        restored.append(out)
    return restored


def apply_selections(worksheet_configs: Sequence[WorksheetConfig], selections: Mapping[str, Mapping[str, List[str]]]) -> List[WorksheetConfig]:
    """New Table Settings rows carrying the selected chart columns and groups.

    Worksheets without any selection get their chart columns and groups
    cleared. A missing chart type defaults to pie for several groups, bar
    otherwise.
    """
    updated: List[WorksheetConfig] = []
    for ws in worksheet_configs:
        groups = selections.get(ws.worksheet_name) or {}
        if not groups:
            updated.append(replace(ws, chart_columns="", chart_groups=""))
            continue
        all_columns = [column for columns in groups.values() for column in columns]
        chart_type = ws.chart_type or ("pie" if len(groups) > 1 else "bar")
        updated.append(
            replace(
                ws,
                chart_columns=json.dumps(all_columns),
                chart_groups=json.dumps({name: list(columns) for name, columns in groups.items()}),
                chart_type=chart_type,
            )
        )
    return updated
