"""
FastAPI Backend — Org Chart API v1.

Stateless: every request carries the three loaded tables and is
rebuilt from scratch. No in-memory state between requests.

Endpoints:
  GET  /health       — liveness
  POST /org-chart    — snapshot (+ optional comparison) + summary + diagnostics
  POST /org-changes  — monthly org-change timeline + summary, optional
                       year-over-year and month drill-down, department breakdown
"""
from __future__ import annotations

import locale
import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from org_chart.constants import ALL_DEPARTMENTS
from org_chart.domain_types import coerce_date
from org_chart.engine import OrgChartEngine
from org_chart.hashing import canonical_hash, chart_to_dict
from org_chart.records import (
    RecordDecodeError,
    decode_assignments,
    decode_departments,
    decode_positions,
)
from org_chart.timeline import DEFAULT_BREAKDOWN_LIMIT

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
LOG_LEVEL = os.environ.get("ORG_CHART_LOG_LEVEL", "INFO").upper()
COLLATION_LOCALE = os.environ.get("ORG_CHART_LOCALE", "")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

if COLLATION_LOCALE:
    try:
        locale.setlocale(locale.LC_COLLATE, COLLATION_LOCALE)
    except locale.Error:
        logger.warning(
            "Collation locale %r unavailable, keeping process default",
            COLLATION_LOCALE,
        )

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Org Chart API",
    version="1.0.0",
    description="Point-in-time organizational chart reconstruction and comparison",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TablesRequest(BaseModel):
    departments: List[Dict[str, Any]] = Field(default_factory=list)
    positions: List[Dict[str, Any]] = Field(default_factory=list)
    assignments: List[Dict[str, Any]] = Field(default_factory=list)
    department_id: str = ALL_DEPARTMENTS


class OrgChartRequest(TablesRequest):
    reference_date: str
    compare_date: Optional[str] = None


class OrgChangesRequest(TablesRequest):
    start_date: str
    end_date: str
    compare_previous_year: bool = False
    drill_down_month: Optional[str] = None
    breakdown_limit: int = DEFAULT_BREAKDOWN_LIMIT


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _load_engine(req: TablesRequest) -> OrgChartEngine:
    """Decode raw rows. Malformed rows -> 422."""
    try:
        return OrgChartEngine(
            departments=decode_departments(req.departments),
            positions=decode_positions(req.positions),
            assignments=decode_assignments(req.assignments),
        )
    except RecordDecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _require_date(value: str, name: str) -> None:
    if coerce_date(value) is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name}: {value!r} (expected YYYY-MM-DD)",
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/org-chart")
def org_chart(req: OrgChartRequest) -> dict:
    _require_date(req.reference_date, "reference_date")
    if req.compare_date:
        _require_date(req.compare_date, "compare_date")

    engine = _load_engine(req)
    chart = engine.chart(
        req.reference_date,
        compare_date=req.compare_date or None,
        department_id=req.department_id,
    )
    logger.info(
        "org-chart %s compare=%s dept=%s -> %d positions",
        chart.reference_date, chart.compare_date, chart.department_id,
        chart.summary.total_positions,
    )
    return {
        **chart_to_dict(chart),
        "chart_hash": canonical_hash(chart),
        "diagnostics": engine.diagnostics(
            req.reference_date, department_id=req.department_id,
        ),
    }


@app.post("/org-changes")
def org_changes(req: OrgChangesRequest) -> dict:
    _require_date(req.start_date, "start_date")
    _require_date(req.end_date, "end_date")
    if req.drill_down_month:
        _require_date(req.drill_down_month, "drill_down_month")

    engine = _load_engine(req)
    scope = req.department_id
    months, summary = engine.timeline(req.start_date, req.end_date, department_id=scope)

    yoy = None
    if req.compare_previous_year:
        yoy = engine.year_over_year(req.start_date, req.end_date, department_id=scope)
    details = None
    if req.drill_down_month:
        details = engine.month_details(req.drill_down_month, department_id=scope)
    breakdown = engine.department_breakdown(
        req.end_date, department_id=scope, limit=req.breakdown_limit,
    )
    logger.info(
        "org-changes %s..%s dept=%s -> %d months",
        req.start_date, req.end_date, scope, len(months),
    )
    return {
        "months": [m.to_dict() for m in months],
        "summary": summary.to_dict() if summary else None,
        "year_over_year": yoy.to_dict() if yoy else None,
        "month_details": details.to_dict() if details else None,
        "department_breakdown": [d.to_dict() for d in breakdown],
    }
