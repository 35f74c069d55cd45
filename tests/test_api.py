from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_config
from report_core.config import ReportConfig


@pytest.fixture
def client(workbook_path):
    app.dependency_overrides[get_config] = lambda: ReportConfig(workbook_path=str(workbook_path))
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_get_workshops(client):
    body = client.get("/", params={"action": "getWorkshops"}).json()
    assert body == {
        "data": [
            {"value": "W1", "label": "Spring Workshop"},
            {"value": "W2", "label": "Fall Workshop"},
        ]
    }


def test_get_partners(client):
    body = client.get("/", params={"action": "getPartners"}).json()
    assert body == {"data": [{"value": "P1", "label": "Ada Lovelace"}]}


def test_results_need_a_workshop_id(client):
    response = client.get("/", params={"action": "getWorkshopResults"})
    assert response.status_code == 200
    assert response.json() == {"error": "Missing workshop_id parameter"}


@pytest.mark.parametrize("params", [{}, {"action": "deleteEverything"}])
def test_unknown_action(client, params):
    assert client.get("/", params=params).json() == {"error": "Action does not exist or action parameter missing"}


def test_workshop_results(client):
    body = client.get("/", params={"action": "getWorkshopResults", "workshop_id": "W1"}).json()
    demo, integrator = body["data"]

    assert demo["worksheet"] == "Demographics"
    assert demo["isWorkshopTable"] is True
    assert demo["data"][0] == {"Annual Revenue": "$1,500.00", "Team Size": "6.00"}
    assert demo["data"][1:] == [
        {"Annual Revenue": "$1,000.00", "Team Size": 4},
        {"Annual Revenue": "$2,000.00", "Team Size": 8},
    ]
    assert demo["columnsSummaryData"]["Annual Revenue"] == "$1,500.00"
    assert demo["columnsSummaryData"]["Team Size"] == "6.00"
    assert demo["chartData"]["title"] == "Company"
    money = demo["chartData"]["data"][0]
    assert money["labels"] == ["Annual Revenue", "Team Size"]
    assert [ds["label"] for ds in money["datasets"]] == ["Aggregate", "W1"]
    assert money["datasets"][0]["data"] == [1500.0, 6.0]

    assert integrator["columnsSummaryData"]["Has Integrator"] == "1 (50.00%)"
    pie = integrator["chartData"]["data"][0]
    assert pie["labels"] == ["Has Integrator", "Others"]
    assert pie["datasets"][0]["customLabels"] == ["3 (60%)", "2 (40%)"]
    assert pie["datasets"][1]["customLabels"] == ["1 (50.00%)", "1 (50%)"]


def test_missing_workbook_gives_empty_lists():
    app.dependency_overrides[get_config] = lambda: ReportConfig(workbook_path="/nonexistent/report.xlsx")
    try:
        body = TestClient(app).get("/", params={"action": "getWorkshops"}).json()
    finally:
        app.dependency_overrides.clear()
    assert body == {"data": []}


def test_meta_worksheets(client):
    body = client.get("/meta/worksheets").json()
    assert body["worksheets"] == [
        {"name": "Demographics", "type": "dynamic", "rows": 5, "columns": 3, "hasChartConfig": True},
        {"name": "Integrator", "type": "dynamic", "rows": 5, "columns": 2, "hasChartConfig": True},
        {"name": "Missing Sheet", "type": "dynamic", "rows": 0, "columns": 0, "hasChartConfig": False},
    ]
