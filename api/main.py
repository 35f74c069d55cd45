from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import ActionResponse, WorksheetSummaryResponse
from report_core.config import ReportConfig, load_config
from report_core.data import get_partner_list, get_workshop_list, get_worksheets_list, load_workbook
from report_core.worksheet import get_worksheets_data, summarize_worksheets


app = FastAPI(title="Workshop Report API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

ACTION_TYPES = {
    "GET_WORKSHOPS": "getWorkshops",
    "GET_WORKSHOP_RESULTS": "getWorkshopResults",
    "GET_PARTNERS": "getPartners",
}


@lru_cache(maxsize=1)
def get_config() -> ReportConfig:
    return load_config()


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def handle_action(action: Optional[str], workshop_id: Optional[str], config: ReportConfig) -> Any:
    tables = load_workbook(config.workbook_path)

    if action == ACTION_TYPES["GET_WORKSHOPS"]:
        return get_workshop_list(tables, config)

    if action == ACTION_TYPES["GET_WORKSHOP_RESULTS"]:
        if not workshop_id:
            raise ValueError("Missing workshop_id parameter")
        worksheets = get_worksheets_list(tables, config)
        return get_worksheets_data(tables, worksheets, workshop_id, config)

    if action == ACTION_TYPES["GET_PARTNERS"]:
        return get_partner_list(tables, config)

    raise ValueError("Action does not exist or action parameter missing")


@app.get("/", response_model=ActionResponse)
def do_get(
    action: Optional[str] = Query(default=None),
    workshop_id: Optional[str] = Query(default=None),
    config: ReportConfig = Depends(get_config),
):
    response: Dict[str, Any]
    try:
        response = {"data": handle_action(action, workshop_id, config)}
    except Exception as exc:
        logger.exception("Error processing request (action=%s)", action)
        response = {"error": str(exc)}
    return _json(response)


@app.get("/meta/worksheets", response_model=WorksheetSummaryResponse)
def meta_worksheets(config: ReportConfig = Depends(get_config)):
    try:
        tables = load_workbook(config.workbook_path)
        worksheets = get_worksheets_list(tables, config)
        return _json({"worksheets": summarize_worksheets(tables, worksheets, config)})
    except Exception as exc:
        logger.exception("meta_worksheets failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})
