from __future__ import annotations

import pandas as pd

from report_core.config import ReportConfig, SheetNames
from report_core.data import (
    get_partner_list,
    get_workshop_list,
    get_worksheets_list,
    last_row_with_content,
    load_workbook,
    sheet_to_table,
)


def test_load_workbook_reads_every_sheet(workbook_path):
    tables = load_workbook(workbook_path)
    assert set(tables) == {"Table Settings", "Workshop Planner", "Partner List", "Demographics", "Integrator"}
    demo = tables["Demographics"]
    assert demo.headers == ("ID", "Annual Revenue", "Team Size")
    assert demo.rows[0] == ("Aggregate", 1500, 6)
    assert len(demo.rows) == 4


def test_load_workbook_missing_file(tmp_path, caplog):
    assert load_workbook(tmp_path / "nope.xlsx") == {}
    assert "not found" in caplog.text


def test_worksheets_list(workbook_path):
    worksheets = get_worksheets_list(load_workbook(workbook_path))
    assert [ws.worksheet_name for ws in worksheets] == ["Demographics", "Integrator", "Missing Sheet"]
    demo = worksheets[0]
    assert demo.type == "dynamic"
    assert demo.chart_type == "bar"
    assert demo.chart_groups == '{"Money": ["Annual Revenue", "Team Size"]}'
    assert demo.chart_title == "Company"
    assert worksheets[2].chart_groups == ""


def test_workshop_and_partner_lists(workbook_path):
    tables = load_workbook(workbook_path)
    assert get_workshop_list(tables) == [
        {"value": "W1", "label": "Spring Workshop"},
        {"value": "W2", "label": "Fall Workshop"},
    ]
    assert get_partner_list(tables) == [{"value": "P1", "label": "Ada Lovelace"}]


def test_renamed_sheets_come_from_config(workbook_path):
    tables = load_workbook(workbook_path)
    config = ReportConfig(sheets=SheetNames(workshop_planner="Planner"))
    assert get_workshop_list(tables, config) == []


def test_settings_without_required_columns(caplog):
    tables = {"Table Settings": sheet_to_table(pd.DataFrame([["Name"], ["Demo"]]))}
    assert get_worksheets_list(tables) == []
    assert "Required columns" in caplog.text


def test_sheet_to_table_trims_trailing_rows_and_floats():
    frame = pd.DataFrame(
        [
            ["ID", "Score", None],
            [12.0, 3.5, "x"],
            [None, 4.0, None],
            [None, None, None],
        ]
    )
    table = sheet_to_table(frame)
    assert table.headers == ("ID", "Score", "")
    assert table.rows == ((12, 3.5, "x"),)


def test_last_row_with_content():
    assert last_row_with_content([["a"], [""], ["b"], [""]]) == 3
    assert last_row_with_content([[""], []]) == 0
