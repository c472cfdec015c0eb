from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from api.schemas import AuditRequest, EngineConfigModel, ProfileRequest, RecordsRequest
from api.session import Session, require_session
from core.config import EngineConfig, normalize_config
from core.geometry import bar_geometry, radar_geometry
from core.metrics import audit_summary, total_xp, xp_by_path, xp_display
from core.profile import build_context, compute_profile
from core.records import normalize_transactions
from core.skills import tech_skill_amounts, top_skills


app = FastAPI(title="Learner Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _config_from_model(model: EngineConfigModel) -> EngineConfig:
    return normalize_config(model.model_dump())


def _skill_rows(body: RecordsRequest) -> list:
    if body.skills is not None:
        return normalize_transactions(body.skills, require_timestamp=False)
    return normalize_transactions(body.transactions)


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


def _failed(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/config")
def meta_config():
    try:
        return _json(asdict(EngineConfig()))
    except Exception as exc:
        return _failed("meta_config", exc)


@app.post("/profile")
def profile(body: ProfileRequest, session: Session = Depends(require_session)):
    try:
        config = _config_from_model(body.config)
        ctx = build_context(
            body.transactions,
            body.progress,
            skills=body.skills,
            audit=body.audit,
            user=body.user,
            config=config,
        )
        return _json(compute_profile(config, ctx, include_charts=body.include_charts))
    except Exception as exc:
        return _failed("profile", exc)


@app.post("/metrics/xp")
def metrics_xp(body: RecordsRequest):
    try:
        config = _config_from_model(body.config)
        total = total_xp(normalize_transactions(body.transactions), config)
        display = xp_display(total, config.xp_thresholds)
        return _json({"total": total, "value": display.value, "unit": display.unit, "text": display.text})
    except Exception as exc:
        return _failed("metrics_xp", exc)


@app.post("/metrics/audit")
def metrics_audit(body: AuditRequest):
    try:
        summary = audit_summary(body.total_up, body.total_down, body.audit_ratio)
        return _json(
            {
                "total_up": summary.total_up,
                "total_down": summary.total_down,
                "ratio": summary.ratio,
                "ratio_text": summary.ratio_text,
                "available": summary.available,
                "upstream_ratio": summary.upstream_ratio,
            }
        )
    except Exception as exc:
        return _failed("metrics_audit", exc)


@app.post("/metrics/xp-by-path")
def metrics_xp_by_path(body: RecordsRequest):
    try:
        config = _config_from_model(body.config)
        grouped = xp_by_path(
            normalize_transactions(body.transactions),
            config.path_segment_index,
            category=config.xp_category,
        )
        return _json({"groups": [{"key": k, "amount": v} for k, v in grouped.items()]})
    except Exception as exc:
        return _failed("metrics_xp_by_path", exc)


@app.post("/skills/radar")
def skills_radar(body: RecordsRequest):
    try:
        config = _config_from_model(body.config)
        skills = top_skills(_skill_rows(body), config)
        geometry = radar_geometry(skills, layout=config.radar)
        return _json({"has_data": bool(skills), "skills": [asdict(s) for s in skills], "geometry": asdict(geometry)})
    except Exception as exc:
        return _failed("skills_radar", exc)


@app.post("/skills/bars")
def skills_bars(body: RecordsRequest):
    try:
        config = _config_from_model(body.config)
        geometry = bar_geometry(tech_skill_amounts(_skill_rows(body), config), layout=config.bars)
        return _json({"geometry": asdict(geometry)})
    except Exception as exc:
        return _failed("skills_bars", exc)
