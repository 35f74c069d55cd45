from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import altair as alt
import pandas as pd

from report_core.config import ChartGroups, ReportConfig, parse_chart_groups
from report_core.values import extract_custom_format_value, extract_numeric_value, js_round, plain_number, to_fixed

alt.data_transformers.disable_max_rows()

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ReportConfig()


def get_remainder_value(extracted: Mapping[str, float]) -> Dict[str, float]:
    """Remainder of an "X (Y%)" share: the count and percentage of everything else."""
    x, y = extracted["x"], extracted["y"]
    remainder = x * 100 / y - x
    return {"x": js_round(remainder), "y": float(to_fixed(100 - y, 2))}


def _remainder_point(value: Any) -> Optional[Dict[str, float]]:
    extracted = extract_custom_format_value(value)
    if extracted is None or not extracted["y"]:
        return None
    return get_remainder_value(extracted)


def _dataset(label: Any) -> Dict[str, Any]:
    return {"label": label, "data": [], "customLabels": []}


def generate_chart_data(
    worksheet_result: Optional[Mapping[str, Any]],
    title: Optional[str],
    chart_type: Optional[str],
    group_config: Union[str, ChartGroups, None],
    entity_id: Any = None,
    aggregate_only: bool = False,
    config: Optional[ReportConfig] = None,
) -> Optional[Dict[str, Any]]:
    """Build chart datasets for every configured column group.

    Each group yields an "Aggregate" series and, unless ``aggregate_only``, a
    series for the workshop built from its column summaries. A single-column
    pie group also gets an "Others" slice when its value reads "X (Y%)".
    """
    config = config or _DEFAULT_CONFIG
    if not worksheet_result or not group_config:
        logger.error("Missing required data for chart generation")
        return None

    groups = parse_chart_groups(group_config)
    if groups is None:
        return None

    records = worksheet_result.get("data") or []
    aggregate = records[0] if records else None
    summaries = worksheet_result.get("columnsSummaryData")
    if aggregate is None or summaries is None:
        logger.error("Missing aggregate or workshop data for %s", worksheet_result.get("worksheet"))
        return None

    chart_type = chart_type or config.default_chart_type
    chart: Dict[str, Any] = {"type": chart_type, "title": title or "", "data": []}

    for group_name, columns in groups.items():
        if not columns:
            continue
        labels = list(columns)
        datasets = [_dataset(config.aggregate_label)]
        if not aggregate_only:
            datasets.append(_dataset(entity_id))

        for column in columns:
            if column in aggregate:
                raw = aggregate[column]
                datasets[0]["data"].append(extract_numeric_value(raw))
                datasets[0]["customLabels"].append(raw)
                if not aggregate_only and column in summaries:
                    datasets[1]["data"].append(extract_numeric_value(summaries[column]))
                    datasets[1]["customLabels"].append(summaries[column])
            else:
                for ds in datasets:
                    ds["data"].append(config.fallback_value)
                    ds["customLabels"].append(config.fallback_value)
                logger.warning('Column "%s" of group "%s" not found in dataset', column, group_name)

        if len(columns) == 1 and chart_type == "pie":
            remainders = [_remainder_point(aggregate.get(columns[0]))]
            if not aggregate_only:
                remainders.append(_remainder_point(summaries.get(columns[0])))
            if all(r is not None for r in remainders):
                labels.append(config.others_label)
                for ds, r in zip(datasets, remainders):
                    ds["data"].append(r["x"])
                    ds["customLabels"].append(f"{r['x']} ({plain_number(r['y'])}%)")

        chart["data"].append({"labels": labels, "datasets": datasets})

    return chart


def generate_pie_chart_data(worksheet_result, columns: Sequence[str], entity_id, title: str = "", aggregate_only: bool = False):
    return generate_chart_data(worksheet_result, title, "pie", {"group1": list(columns)}, entity_id, aggregate_only)


def generate_bar_chart_data(worksheet_result, columns: Sequence[str], entity_id, title: str = "", aggregate_only: bool = False):
    return generate_chart_data(worksheet_result, title, "bar", {"group1": list(columns)}, entity_id, aggregate_only)


def validate_columns_for_chart_type(chart_type: str, worksheet_result, columns: Sequence[str]) -> bool:
    if not worksheet_result or not columns:
        return False
    if chart_type == "pie" and len(columns) == 1:
        records = worksheet_result.get("data") or []
        value = records[0].get(columns[0]) if records else None
        return extract_custom_format_value(value) is not None
    return True


# ---------------- Altair rendering ----------------
def group_frame(group: Mapping[str, Any]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for ds in group.get("datasets", []):
        for label, value, custom in zip(group.get("labels", []), ds.get("data", []), ds.get("customLabels", [])):
            rows.append({"label": str(label), "series": str(ds.get("label")), "value": value, "display": str(custom)})
    return pd.DataFrame(rows, columns=["label", "series", "value", "display"])


def group_chart(group: Mapping[str, Any], chart_type: str = "bar", title: str = ""):
    df = group_frame(group)
    order = [str(label) for label in group.get("labels", [])]
    tooltip = [alt.Tooltip("series:N", title="Series"), alt.Tooltip("label:N", title="Column"), alt.Tooltip("display:N", title="Value")]

    if chart_type == "pie":
        chart = (
            alt.Chart(df)
            .mark_arc()
            .encode(
                theta=alt.Theta("value:Q", stack=True),
                color=alt.Color("label:N", title=None, sort=order),
                tooltip=tooltip,
            )
        )
        if df["series"].nunique() > 1:
            chart = chart.facet(column=alt.Column("series:N", title=None))
    elif chart_type == "line":
        chart = (
            alt.Chart(df)
            .mark_line(point={"filled": True})
            .encode(
                x=alt.X("label:N", title=None, sort=order),
                y=alt.Y("value:Q", title=None, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
                color=alt.Color("series:N", title=None),
                tooltip=tooltip,
            )
        )
    else:
        chart = (
            alt.Chart(df)
            .mark_bar()
            .encode(
                x=alt.X("label:N", title=None, sort=order),
                xOffset="series:N",
                y=alt.Y("value:Q", title=None, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
                color=alt.Color("series:N", title=None),
                tooltip=tooltip,
            )
        )
    return chart.properties(title=title or "")


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def chart_specs(chart_data: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """One Vega-Lite spec per group of a chart payload."""
    if not chart_data:
        return []
    chart_type = chart_data.get("type", "bar")
    title = chart_data.get("title", "")
    return [to_vega_spec(group_chart(group, chart_type, title)) for group in chart_data.get("data", [])]
