import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from dataclasses import asdict, replace
from typing import Dict, List, Optional

from report_core.charts import group_chart
from report_core.config import load_config
from report_core.data import get_workshop_list, get_worksheets_list, load_workbook
from report_core.selector import (
    apply_selections,
    build_column_signatures,
    build_selector_rows,
    capture_selections,
    collect_selections,
    detect_column_changes,
    restore_selections,
)
from report_core.worksheet import get_worksheets_data

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str):
    inject_base_styles()
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Workshop Results Dashboard", layout="wide")
inject_base_styles()
st.title("Workshop Results Dashboard")
st.caption("Per-workshop results against the aggregate, one card per worksheet.")

base_config = load_config()
with st.sidebar:
    st.markdown("### Workbook")
    workbook_path = st.text_input("Workbook path (.xlsx)", base_config.workbook_path)
config = replace(base_config, workbook_path=workbook_path)

tables = load_workbook(config.workbook_path)
if not tables:
    st.error(f"Workbook not found or empty: {config.workbook_path}")
    st.stop()

worksheets = get_worksheets_list(tables, config)
if not worksheets:
    st.error(f"No worksheets configured. Check the '{config.sheets.table_settings}' sheet.")
    st.stop()

workshops = get_workshop_list(tables, config)
with st.sidebar:
    st.markdown("### Navigate")
    page = st.radio("Navigate", ["Results", "Column Selector"], index=0)
    st.markdown("---")
    workshop_labels: Dict[str, object] = {f"{w['label']} ({w['value']})": w["value"] for w in workshops}
    choice = st.selectbox("Workshop", ["Aggregate only"] + list(workshop_labels))
    workshop_id: Optional[object] = workshop_labels.get(choice)


def render_results_page():
    render_page_header("Results", f"Home / Results / {choice}")
    results = get_worksheets_data(tables, worksheets, workshop_id, config)
    if not results:
        st.info("No worksheet data found.")
        return
    for result in results:
        with card(result["worksheet"]):
            records: List[dict] = result["data"]
            if not records:
                st.info("No rows for this worksheet.")
                continue
            st.dataframe(pd.DataFrame(records), use_container_width=True, hide_index=True)
            summary = result.get("columnsSummaryData") or {}
            if summary:
                st.markdown("**Workshop summary**")
                st.dataframe(
                    pd.DataFrame([{"column": k, "value": v} for k, v in summary.items()]),
                    use_container_width=True,
                    hide_index=True,
                )
            chart_data = result.get("chartData")
            if chart_data and chart_data["data"]:
                groups = chart_data["data"]
                cols = st.columns(min(len(groups), 2))
                for i, group in enumerate(groups):
                    with cols[i % len(cols)]:
                        st.altair_chart(group_chart(group, chart_data["type"], chart_data["title"]), use_container_width=True)


def render_column_selector_page():
    render_page_header("Column Selector", "Home / Column Selector")
    stored = st.session_state.get("column_signatures")
    if stored:
        changed = detect_column_changes(stored, tables, worksheets)
        if changed:
            st.warning("Columns changed since the selector was built: " + ", ".join(changed))
            if st.button("Regenerate selector"):
                st.session_state.pop("selector_rows", None)

    if "selector_rows" not in st.session_state:
        rows = build_selector_rows(tables, worksheets)
        saved = st.session_state.get("saved_selections")
        st.session_state["selector_rows"] = restore_selections(rows, saved) if saved else rows
        st.session_state["column_signatures"] = build_column_signatures(tables, worksheets)

    with card("Select columns and assign chart groups"):
        edited = st.data_editor(
            pd.DataFrame(st.session_state["selector_rows"]),
            use_container_width=True,
            hide_index=True,
            disabled=["worksheet", "column"],
            column_config={
                "included": st.column_config.CheckboxColumn("Include"),
                "group": st.column_config.TextColumn("Chart group"),
            },
            key="selector_editor",
        )
    rows = edited.to_dict(orient="records")

    if st.button("Apply selections"):
        st.session_state["selector_rows"] = rows
        st.session_state["saved_selections"] = capture_selections(rows)
        st.session_state["column_signatures"] = build_column_signatures(tables, worksheets)
        updated = apply_selections(worksheets, collect_selections(rows))
        with card("Table Settings values"):
            st.dataframe(pd.DataFrame([asdict(ws) for ws in updated]), use_container_width=True, hide_index=True)
            st.caption(f"Copy these values into the '{config.sheets.table_settings}' sheet.")


if page == "Results":
    render_results_page()
else:
    render_column_selector_page()
