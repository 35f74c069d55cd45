from __future__ import annotations

from typing import Any, Dict, List, Sequence


def transform_to_records(
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    skip_first_column: bool = False,
) -> List[Dict[str, Any]]:
    """Turn a 2D block into one ``{header: cell}`` record per row.

    Row order is kept (row 0 is usually the aggregate row). Columns with a
    blank header are dropped, and short rows just yield partial records.
    """
    if not headers or not rows:
        return []

    start = 1 if skip_first_column else 0
    columns = [(i, str(headers[i])) for i in range(start, len(headers)) if _has_header(headers[i])]

    records: List[Dict[str, Any]] = []
    for row in rows:
        record: Dict[str, Any] = {}
        for i, name in columns:
            if i < len(row):
                record[name] = row[i]
        records.append(record)
    return records


def _has_header(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip() != ""
