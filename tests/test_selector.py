from __future__ import annotations

import json

from report_core.config import WorksheetConfig
from report_core.selector import (
    apply_selections,
    build_column_signatures,
    build_selector_rows,
    capture_selections,
    collect_selections,
    detect_column_changes,
    generate_column_signature,
    restore_selections,
)
from report_core.worksheet import Table


def _tables():
    return {
        "Demo": Table.from_values([["ID", "Revenue", "", "Size"], ["", 1, 2, 3]]),
        "Flags": Table.from_values([["ID", "Has"], ["", "1 (10%)"]]),
    }


CONFIGS = [WorksheetConfig("Demo"), WorksheetConfig("Flags"), WorksheetConfig("Nowhere")]


def test_selector_rows_skip_the_id_column():
    rows = build_selector_rows(_tables(), CONFIGS)
    assert [(r["worksheet"], r["column"]) for r in rows] == [("Demo", "Revenue"), ("Demo", "Size"), ("Flags", "Has")]
    assert all(r["included"] is False and r["group"] == "" for r in rows)


def test_collect_selections_groups_checked_rows():
    rows = [
        {"worksheet": "Demo", "column": "Revenue", "included": True, "group": "Money"},
        {"worksheet": "Demo", "column": "Size", "included": True, "group": "Money"},
        {"worksheet": "Flags", "column": "Has", "included": False, "group": "Flags"},
    ]
    assert collect_selections(rows) == {"Demo": {"Money": ["Revenue", "Size"]}}


def test_capture_and_restore_selections():
    rows = build_selector_rows(_tables(), CONFIGS)
    rows[0] = {**rows[0], "included": True, "group": "Money"}
    saved = capture_selections(rows)
    assert saved["Demo"]["Revenue"] == {"checked": True, "group": "Money"}

    fresh = build_selector_rows(_tables(), CONFIGS)
    restored = restore_selections(fresh, saved)
    assert restored[0]["included"] is True
    assert restored[0]["group"] == "Money"
    assert restored[1]["included"] is False
    assert fresh[0]["included"] is False


def test_column_signatures_detect_header_changes():
    tables = _tables()
    stored = build_column_signatures(tables, CONFIGS)
    assert stored["Demo"] == generate_column_signature(["ID", "Revenue", "Size"])
    assert "Nowhere" not in stored

    tables["Demo"] = Table.from_values([["ID", "Revenue", "Budget"], ["", 1, 2]])
    assert detect_column_changes(stored, tables, CONFIGS) == ["Demo"]
    assert detect_column_changes(stored, _tables(), CONFIGS) == []


def test_apply_selections_writes_chart_settings():
    configs = [
        WorksheetConfig("Demo", chart_columns="[]", chart_groups='{"old": ["X"]}'),
        WorksheetConfig("Flags", chart_type="line"),
        WorksheetConfig("Nowhere", chart_type="bar", chart_columns='["Z"]', chart_groups='{"g": ["Z"]}'),
    ]
    selections = {
        "Demo": {"Money": ["Revenue"], "Team": ["Size"]},
        "Flags": {"Has": ["Has"]},
    }
    demo, flags, nowhere = apply_selections(configs, selections)

    assert demo.chart_type == "pie"
    assert json.loads(demo.chart_groups) == {"Money": ["Revenue"], "Team": ["Size"]}
    assert json.loads(demo.chart_columns) == ["Revenue", "Size"]
    assert flags.chart_type == "line"
    assert nowhere.chart_columns == ""
    assert nowhere.chart_groups == ""
    assert configs[0].chart_groups == '{"old": ["X"]}'


def test_single_group_defaults_to_bar():
    (ws,) = apply_selections([WorksheetConfig("Demo")], {"Demo": {"g": ["Revenue"]}})
    assert ws.chart_type == "bar"
