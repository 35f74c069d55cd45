from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class OptionModel(BaseModel):
    value: Union[str, int, float]
    label: Any = None


class DatasetModel(BaseModel):
    label: Any = None
    data: List[float] = Field(default_factory=list)
    customLabels: List[Any] = Field(default_factory=list)


class GroupDataModel(BaseModel):
    labels: List[str] = Field(default_factory=list)
    datasets: List[DatasetModel] = Field(default_factory=list)


class ChartDataModel(BaseModel):
    type: str = "bar"
    title: str = ""
    data: List[GroupDataModel] = Field(default_factory=list)


class WorksheetResultModel(BaseModel):
    worksheet: str
    type: str
    isWorkshopTable: bool = False
    data: List[Dict[str, Any]] = Field(default_factory=list)
    columnsSummaryData: Dict[str, str] = Field(default_factory=dict)
    chartData: Optional[ChartDataModel] = None


class ActionResponse(BaseModel):
    data: Optional[Union[List[WorksheetResultModel], List[OptionModel]]] = None
    error: Optional[str] = None


class WorksheetSummaryModel(BaseModel):
    name: str
    type: str
    rows: int
    columns: int
    hasChartConfig: bool


class WorksheetSummaryResponse(BaseModel):
    worksheets: List[WorksheetSummaryModel]
