from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from report_core.charts import generate_chart_data
from report_core.config import ReportConfig, WorksheetConfig
from report_core.summary import detect_currency_columns, format_aggregate_row, summarize_filtered_columns
from report_core.transform import transform_to_records
from report_core.values import format_currency_columns, is_present


logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ReportConfig()


@dataclass(frozen=True)
class Table:
    """A worksheet block: header row plus rows, where ``rows[0]`` is the aggregate row."""

    headers: Tuple[Any, ...] = ()
    rows: Tuple[Tuple[Any, ...], ...] = ()

    @classmethod
    def from_values(cls, values: Sequence[Sequence[Any]]) -> "Table":
        if not values:
            return cls()
        return cls(headers=tuple(values[0]), rows=tuple(tuple(r) for r in values[1:]))

    @property
    def aggregate_row(self) -> Tuple[Any, ...]:
        return self.rows[0] if self.rows else ()

    @property
    def is_empty(self) -> bool:
        return not any(is_present(h) for h in self.headers) or not self.rows


def _empty_result(worksheet_name: str, worksheet_type: str) -> Dict[str, Any]:
    return {
        "worksheet": worksheet_name,
        "type": worksheet_type,
        "isWorkshopTable": False,
        "data": [],
        "columnsSummaryData": {},
    }


def filter_rows(table: Table, filter_id: Any, id_column: int = 0) -> List[List[Any]]:
    """Data rows (aggregate row excluded) whose id cell equals ``filter_id``."""
    return [list(row) for row in table.rows[1:] if id_column < len(row) and row[id_column] == filter_id]


def process_worksheet(
    table: Table,
    worksheet_name: str,
    worksheet_type: Optional[str] = None,
    filter_id: Any = None,
    currency_column_names: Optional[Iterable[str]] = None,
    *,
    config: Optional[ReportConfig] = None,
) -> Dict[str, Any]:
    config = config or _DEFAULT_CONFIG
    worksheet_type = worksheet_type or config.default_worksheet_type
    if currency_column_names is None:
        currency_column_names = config.currency_column_names

    if table is None or table.is_empty:
        logger.warning("No headers or rows found in worksheet %s", worksheet_name)
        return _empty_result(worksheet_name, worksheet_type)

    headers = list(table.headers)
    currency_cols = detect_currency_columns(headers, currency_column_names)

    if filter_id is None or filter_id == "":
        aggregate_rows = format_currency_columns([table.aggregate_row], currency_cols)
        return {
            "worksheet": f"Aggregate {worksheet_name}",
            "type": "static",
            "isWorkshopTable": False,
            "data": transform_to_records(headers, aggregate_rows, skip_first_column=False),
            "columnsSummaryData": {},
        }

    filtered = filter_rows(table, filter_id, config.entity_id_column)
    if not filtered:
        logger.info("No rows for workshop %r in worksheet %s", filter_id, worksheet_name)

    summaries = summarize_filtered_columns(headers, table.aggregate_row, filtered, currency_cols, config.precision)
    aggregate = format_aggregate_row(table.aggregate_row, config.precision)
    result_rows = format_currency_columns([aggregate, *filtered], currency_cols)

    return {
        "worksheet": worksheet_name,
        "type": worksheet_type,
        "isWorkshopTable": True,
        "data": transform_to_records(headers, result_rows, skip_first_column=True),
        "columnsSummaryData": summaries,
    }


def prepare_chart_data(
    result: Mapping[str, Any],
    worksheet_config: WorksheetConfig,
    workshop_id: Any,
    config: Optional[ReportConfig] = None,
) -> Optional[Dict[str, Any]]:
    config = config or _DEFAULT_CONFIG
    if not worksheet_config.chart_groups:
        return None
    return generate_chart_data(
        result,
        worksheet_config.chart_title,
        worksheet_config.chart_type or config.default_chart_type,
        worksheet_config.chart_groups,
        workshop_id,
        config=config,
    )


def process_worksheet_with_config(
    table: Table,
    worksheet_config: WorksheetConfig,
    workshop_id: Any = None,
    config: Optional[ReportConfig] = None,
) -> Dict[str, Any]:
    config = config or _DEFAULT_CONFIG
    result = process_worksheet(
        table,
        worksheet_config.worksheet_name,
        worksheet_config.type or config.default_worksheet_type,
        workshop_id,
        config=config,
    )
    if workshop_id and worksheet_config.chart_groups and result["data"]:
        chart_data = prepare_chart_data(result, worksheet_config, workshop_id, config)
        if chart_data:
            result["chartData"] = chart_data
    return result


def get_worksheets_data(
    tables: Mapping[str, Table],
    worksheet_configs: Sequence[WorksheetConfig],
    workshop_id: Any = None,
    config: Optional[ReportConfig] = None,
) -> List[Dict[str, Any]]:
    """Process every configured worksheet; bad or missing sheets are skipped, not fatal."""
    results: List[Dict[str, Any]] = []
    for ws in worksheet_configs:
        table = tables.get(ws.worksheet_name)
        if table is None:
            logger.error("Worksheet %s not found", ws.worksheet_name)
            continue
        if table.is_empty:
            logger.error("No headers found in worksheet %s", ws.worksheet_name)
            continue
        results.append(process_worksheet_with_config(table, ws, workshop_id, config))
    return results


def summarize_worksheets(
    tables: Mapping[str, Table],
    worksheet_configs: Sequence[WorksheetConfig],
    config: Optional[ReportConfig] = None,
) -> List[Dict[str, Any]]:
    config = config or _DEFAULT_CONFIG
    out = []
    for ws in worksheet_configs:
        table = tables.get(ws.worksheet_name)
        out.append(
            {
                "name": ws.worksheet_name,
                "type": ws.type or config.default_worksheet_type,
                # header row counts as a row, like the sheet's last row
                "rows": len(table.rows) + 1 if table is not None and table.headers else 0,
                "columns": len(table.headers) if table is not None else 0,
                "hasChartConfig": bool(ws.chart_groups),
            }
        )
    return out
