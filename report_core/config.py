from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import StrictStr, TypeAdapter, ValidationError


logger = logging.getLogger(__name__)

CHART_TYPES = ("bar", "pie", "line")
DEFAULT_CURRENCY_COLUMNS = ("Annual Revenue", "Revenue per Leadership Team")

ChartGroups = Dict[str, List[str]]
_CHART_GROUPS_ADAPTER = TypeAdapter(Dict[StrictStr, List[StrictStr]])


@dataclass(frozen=True)
class SheetNames:
    table_settings: str = "Table Settings"
    workshop_planner: str = "Workshop Planner"
    partner_list: str = "Partner List"


@dataclass(frozen=True)
class ReportConfig:
    entity_id_column: int = 0
    currency_column_names: Tuple[str, ...] = DEFAULT_CURRENCY_COLUMNS
    aggregate_label: str = "Aggregate"
    others_label: str = "Others"
    fallback_value: float = 0
    precision: int = 2
    default_chart_type: str = "bar"
    default_worksheet_type: str = "dynamic"
    workbook_path: str = ""
    sheets: SheetNames = field(default_factory=SheetNames)


@dataclass(frozen=True)
class WorksheetConfig:
    """One row of the Table Settings sheet."""

    worksheet_name: str
    type: str = "dynamic"
    chart_type: str = ""
    chart_columns: str = ""
    chart_groups: str = ""
    chart_title: str = ""


def _as_str_tuple(values: Optional[Iterable[object]], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if values is None:
        return default
    if isinstance(values, str):
        values = [v for v in values.split(",")]
    out: List[str] = []
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.append(s)
    return tuple(out)


def normalize_config(raw: dict) -> ReportConfig:
    entity_id_column = raw.get("entity_id_column", 0)
    try:
        entity_id_column = max(0, int(entity_id_column))
    except (TypeError, ValueError):
        entity_id_column = 0

    precision = raw.get("precision", 2)
    try:
        precision = max(0, min(6, int(precision)))
    except (TypeError, ValueError):
        precision = 2

    default_chart_type = str(raw.get("default_chart_type") or "bar").strip().lower()
    if default_chart_type not in CHART_TYPES:
        logger.warning("Unknown default chart type %r, using bar", default_chart_type)
        default_chart_type = "bar"

    s = raw.get("sheets") or {}
    sheets = SheetNames(
        table_settings=str(s.get("table_settings", "Table Settings")),
        workshop_planner=str(s.get("workshop_planner", "Workshop Planner")),
        partner_list=str(s.get("partner_list", "Partner List")),
    )

    return ReportConfig(
        entity_id_column=entity_id_column,
        currency_column_names=_as_str_tuple(raw.get("currency_column_names"), DEFAULT_CURRENCY_COLUMNS),
        aggregate_label=str(raw.get("aggregate_label") or "Aggregate"),
        others_label=str(raw.get("others_label") or "Others"),
        precision=precision,
        default_chart_type=default_chart_type,
        default_worksheet_type=str(raw.get("default_worksheet_type") or "dynamic"),
        workbook_path=str(raw.get("workbook_path") or ""),
        sheets=sheets,
    )


def load_config() -> ReportConfig:
    """Build the config from REPORT_* environment variables."""
    raw: dict = {"workbook_path": os.environ.get("REPORT_WORKBOOK", "workbook.xlsx")}
    currency = os.environ.get("REPORT_CURRENCY_COLUMNS")
    if currency:
        raw["currency_column_names"] = currency
    chart_type = os.environ.get("REPORT_DEFAULT_CHART_TYPE")
    if chart_type:
        raw["default_chart_type"] = chart_type
    return normalize_config(raw)


def parse_chart_groups(raw: Union[str, bytes, dict, None]) -> Optional[ChartGroups]:
    """Parse a chart-group mapping (group name -> ordered column names).

    Accepts the JSON string stored in Table Settings or an already decoded
    mapping. Anything that is not exactly that shape is rejected with None.
    """
    if raw is None or raw == "" or raw == b"":
        return None
    try:
        if isinstance(raw, (str, bytes)):
            groups = _CHART_GROUPS_ADAPTER.validate_json(raw)
        else:
            groups = _CHART_GROUPS_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        logger.warning("Invalid chart groups configuration: %s", exc.errors(include_url=False))
        return None
    return {name: list(columns) for name, columns in groups.items()}
