from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from report_core.worksheet import Table


@pytest.fixture
def plan_table() -> Table:
    return Table.from_values(
        [
            ["ID", "Revenue", "HasPlan"],
            ["", "1000", "5 (50%)"],
            ["W1", "800", "Yes"],
            ["W1", "1200", "No"],
            ["W2", "500", "Yes"],
        ]
    )


@pytest.fixture
def revenue_table() -> Table:
    return Table.from_values(
        [
            ["ID", "Annual Revenue", "Team Size", "Has Integrator", ""],
            ["", 1500.5, 6, "3 (60%)", "note"],
            ["W1", 1000, 4, "Yes", "x"],
            ["W1", 2000, "", "", "y"],
            ["W2", 1500, 9, "Yes", "z"],
        ]
    )


def write_workbook(path: Path, sheets: dict) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, values in sheets.items():
            pd.DataFrame(values).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture
def workbook_path(tmp_path: Path) -> Path:
    return write_workbook(
        tmp_path / "report.xlsx",
        {
            "Table Settings": [
                ["Worksheet Name", "Type", "Chart Type", "Chart Columns", "Chart Groups", "Chart Title"],
                ["Demographics", "dynamic", "bar", "", '{"Money": ["Annual Revenue", "Team Size"]}', "Company"],
                ["Integrator", "dynamic", "pie", "", '{"Has": ["Has Integrator"]}', "Integrator"],
                ["Missing Sheet", "dynamic", "", "", "", ""],
            ],
            "Workshop Planner": [
                ["ID", "Display Name"],
                ["W1", "Spring Workshop"],
                ["W2", "Fall Workshop"],
                ["", "Unscheduled"],
            ],
            "Partner List": [
                ["ID", "Full Name"],
                ["P1", "Ada Lovelace"],
            ],
            "Demographics": [
                ["ID", "Annual Revenue", "Team Size"],
                ["Aggregate", 1500, 6],
                ["W1", 1000, 4],
                ["W1", 2000, 8],
                ["W2", 1500, 6],
            ],
            "Integrator": [
                ["ID", "Has Integrator"],
                ["Aggregate", "3 (60%)"],
                ["W1", "Yes"],
                ["W1", "No"],
                ["W2", "Yes"],
            ],
        },
    )
