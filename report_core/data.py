from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from report_core.config import ReportConfig, WorksheetConfig
from report_core.values import is_present
from report_core.worksheet import Table


logger = logging.getLogger(__name__)

TABLE_SETTINGS_COLUMNS = {
    "Worksheet Name": "worksheet_name",
    "Type": "type",
    "Chart Type": "chart_type",
    "Chart Columns": "chart_columns",
    "Chart Groups": "chart_groups",
    "Chart Title": "chart_title",
}
REQUIRED_SETTINGS = ("worksheet_name", "type")

WORKSHOP_COLUMNS = {"id": "ID", "label": "Display Name"}
PARTNER_COLUMNS = {"id": "ID", "label": "Full Name"}


def _cell(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 2**53:
        # Excel stores every number as a float; keep ids like 12 as 12.
        return int(value)
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return value


def _header(value: Any) -> str:
    value = _cell(value)
    if not is_present(value) and value != 0:
        return ""
    return str(value).strip()


def last_row_with_content(rows: Sequence[Sequence[Any]], column: int = 0) -> int:
    """Number of rows up to the last one with a value in ``column``."""
    for i in range(len(rows) - 1, -1, -1):
        row = rows[i]
        if column < len(row) and row[column] != "":
            return i + 1
    return 0


def sheet_to_table(frame: pd.DataFrame) -> Table:
    if frame is None or frame.empty:
        return Table()
    frame = frame.astype(object).where(pd.notna(frame), "")
    values = frame.values.tolist()
    headers = [_header(v) for v in values[0]]
    body = [[_cell(v) for v in row] for row in values[1:]]
    body = body[: last_row_with_content(body)]
    return Table(headers=tuple(headers), rows=tuple(tuple(r) for r in body))


def file_signature(path: Path) -> float:
    return path.stat().st_mtime


@lru_cache(maxsize=4)
def _load_workbook_cached(path: str, mtime: float) -> Dict[str, Table]:
    sheets = pd.read_excel(path, sheet_name=None, header=None)
    return {str(name): sheet_to_table(frame) for name, frame in sheets.items()}


def load_workbook(path: Union[str, Path]) -> Dict[str, Table]:
    path = Path(path)
    if not path.is_file():
        logger.error("Workbook %s not found", path)
        return {}
    return _load_workbook_cached(str(path.resolve()), file_signature(path))


def _column_index(headers: Sequence[Any], name: str) -> int:
    try:
        return list(headers).index(name)
    except ValueError:
        return -1


def _row_value(row: Sequence[Any], idx: int) -> Any:
    if idx == -1 or idx >= len(row):
        return ""
    return row[idx]


# ---------------- Settings sheets ----------------
def get_worksheets_list(tables: Dict[str, Table], config: Optional[ReportConfig] = None) -> List[WorksheetConfig]:
    config = config or ReportConfig()
    settings = tables.get(config.sheets.table_settings)
    if settings is None:
        logger.error("%s sheet not found", config.sheets.table_settings)
        return []

    idx = {key: _column_index(settings.headers, col) for col, key in TABLE_SETTINGS_COLUMNS.items()}
    if any(idx[key] == -1 for key in REQUIRED_SETTINGS):
        logger.error("Required columns not found in %s", config.sheets.table_settings)
        return []

    worksheets: List[WorksheetConfig] = []
    for row in settings.rows:
        name = _row_value(row, idx["worksheet_name"])
        if not is_present(name):
            continue
        values = {key: str(_row_value(row, i) or "").strip() for key, i in idx.items()}
        values["worksheet_name"] = str(name).strip()
        values["type"] = values["type"] or config.default_worksheet_type
        worksheets.append(WorksheetConfig(**values))
    return worksheets


def _value_label_list(table: Optional[Table], columns: Dict[str, str], sheet_name: str) -> List[Dict[str, Any]]:
    if table is None:
        logger.error("%s sheet not found", sheet_name)
        return []
    id_idx = _column_index(table.headers, columns["id"])
    label_idx = _column_index(table.headers, columns["label"])
    if id_idx == -1 or label_idx == -1:
        logger.error("Required columns not found in %s", sheet_name)
        return []
    return [
        {"value": _row_value(row, id_idx), "label": _row_value(row, label_idx)}
        for row in table.rows
        if is_present(_row_value(row, id_idx))
    ]


def get_workshop_list(tables: Dict[str, Table], config: Optional[ReportConfig] = None) -> List[Dict[str, Any]]:
    config = config or ReportConfig()
    name = config.sheets.workshop_planner
    return _value_label_list(tables.get(name), WORKSHOP_COLUMNS, name)


def get_partner_list(tables: Dict[str, Table], config: Optional[ReportConfig] = None) -> List[Dict[str, Any]]:
    config = config or ReportConfig()
    name = config.sheets.partner_list
    return _value_label_list(tables.get(name), PARTNER_COLUMNS, name)
