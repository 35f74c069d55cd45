from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

import pandas as pd

from report_core.values import format_currency, is_affirmative, is_numeric, is_present, parse_float, to_fixed


logger = logging.getLogger(__name__)


def detect_currency_columns(headers: Sequence[Any], currency_column_names: Iterable[str]) -> Set[int]:
    names = set(currency_column_names or [])
    return {i for i, h in enumerate(headers or []) if isinstance(h, str) and h in names}


def _column_cells(rows: Sequence[Sequence[Any]], column_index: int) -> pd.Series:
    return pd.Series([row[column_index] if column_index < len(row) else None for row in rows], dtype=object)


def calculate_column_count(column_index: int, filtered_rows: Sequence[Sequence[Any]], precision: int = 2) -> str:
    """Count of rows answering the column, as "<count> (<pct>%)"."""
    if not filtered_rows:
        raise ValueError("filtered_rows must not be empty")
    cells = _column_cells(filtered_rows, column_index)
    count = int(cells.map(is_affirmative).sum())
    percent = count / len(cells) * 100
    return f"{count} ({to_fixed(percent, precision)}%)"


def calculate_column_average(column_index: int, filtered_rows: Sequence[Sequence[Any]], precision: int = 2) -> str:
    """Mean over *all* filtered rows; blank cells add nothing to the sum."""
    if not filtered_rows:
        raise ValueError("filtered_rows must not be empty")
    cells = _column_cells(filtered_rows, column_index)
    present = cells[cells.map(is_present)]
    values = pd.to_numeric(present.map(parse_float), errors="coerce")
    if values.isna().any():
        logger.warning("Column %s has %d non-numeric values, counted as 0", column_index, int(values.isna().sum()))
    total = float(values.fillna(0).sum())
    return to_fixed(total / len(cells), precision)


def format_aggregate_row(aggregate_row: Sequence[Any], precision: int = 2) -> List[Any]:
    """Copy of the aggregate row with numeric cells rendered to fixed decimals."""
    return [to_fixed(float(v), precision) if is_present(v) and is_numeric(v) else v for v in aggregate_row]


def summarize_filtered_columns(
    headers: Sequence[Any],
    aggregate_row: Sequence[Any],
    filtered_rows: Sequence[Sequence[Any]],
    currency_indices: Optional[Iterable[int]] = None,
    precision: int = 2,
) -> Dict[str, str]:
    """Summarize one workshop's rows column by column.

    The aggregate row decides the statistic: a numeric aggregate cell gets the
    workshop average, anything else gets a count with percentage. Columns whose
    aggregate cell is blank are left out, and so is everything when there are
    no filtered rows.
    """
    result: Dict[str, str] = {}
    filtered_rows = list(filtered_rows or [])
    if not filtered_rows:
        return result

    currency = set(currency_indices or [])
    for index, aggregate_value in enumerate(aggregate_row):
        if not is_present(aggregate_value):
            continue
        if index >= len(headers) or not is_present(headers[index]):
            continue
        name = str(headers[index])
        if is_numeric(aggregate_value):
            summary = calculate_column_average(index, filtered_rows, precision)
            if index in currency:
                summary = format_currency(summary)
        else:
            summary = calculate_column_count(index, filtered_rows, precision)
        result[name] = summary
    return result
