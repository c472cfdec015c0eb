from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from core.charts import bar_chart, radar_chart, to_vega_spec
from core.config import EngineConfig
from core.data import prepare_context
from core.geometry import bar_geometry, radar_geometry
from core.metrics import (
    audit_bars,
    audit_summary,
    pending_projects,
    recent_projects,
    total_xp,
    xp_by_path,
    xp_display,
    xp_progress,
)
from core.skills import tech_skill_amounts, top_skills


USER_FIELDS = ("id", "login", "firstName", "lastName", "email", "campus")


def _user_info(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: (user.get(key) if user.get(key) is not None else "N/A") for key in USER_FIELDS}


def compute_profile(config: EngineConfig, ctx: Dict[str, Any], *, include_charts: bool = True) -> Dict[str, Any]:
    transactions = ctx.get("transactions", []) or []
    skill_transactions = ctx.get("skill_transactions")
    if skill_transactions is None:
        skill_transactions = transactions
    progress = ctx.get("progress", []) or []
    audit_raw: Dict[str, Any] = ctx.get("audit", {}) or {}
    user: Dict[str, Any] = ctx.get("user", {}) or {}

    xp_total = total_xp(transactions, config)
    display = xp_display(xp_total, config.xp_thresholds)

    audit = audit_summary(
        audit_raw.get("totalUp", audit_raw.get("total_up")),
        audit_raw.get("totalDown", audit_raw.get("total_down")),
        audit_raw.get("auditRatio", audit_raw.get("audit_ratio")),
    )

    skills = top_skills(skill_transactions, config)
    radar = radar_geometry(skills, layout=config.radar)
    bars = bar_geometry(tech_skill_amounts(skill_transactions, config), layout=config.bars)

    charts: Dict[str, Any] = {}
    if include_charts:
        if not radar.empty:
            charts["skills_radar"] = to_vega_spec(radar_chart(radar))
        if bars.bars:
            charts["tech_skills"] = to_vega_spec(bar_chart(bars))

    return {
        "config": asdict(config),
        "user": _user_info(user),
        "xp": {
            "total": xp_total,
            "display": {"value": display.value, "unit": display.unit, "text": display.text},
            "progress": xp_progress(xp_total, config.xp_goal),
        },
        "audit": {
            "total_up": audit.total_up,
            "total_down": audit.total_down,
            "ratio": audit.ratio,
            "ratio_text": audit.ratio_text,
            "available": audit.available,
            "upstream_ratio": audit.upstream_ratio,
            "bars": audit_bars(audit, config.xp_thresholds),
        },
        "xp_by_path": xp_by_path(transactions, config.path_segment_index, category=config.xp_category),
        "skills": {
            "has_data": bool(skills),
            "top": [asdict(s) for s in skills],
        },
        "radar": asdict(radar),
        "bars": asdict(bars),
        "recent_projects": recent_projects(transactions, config),
        "pending_projects": pending_projects(progress, config),
        "dropped": ctx.get("dropped", {}),
        "charts": charts,
    }


def build_context(
    transactions: Any,
    progress: Any = None,
    *,
    skills: Any = None,
    audit: Optional[Dict[str, Any]] = None,
    user: Optional[Dict[str, Any]] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """Shortcut for callers holding raw record rows rather than a saved export."""
    data_ctx = {
        "transactions": transactions or [],
        "skills": skills,
        "progress": progress or [],
        "audit": audit or {},
        "user": user or {},
    }
    return prepare_context(config or EngineConfig(), data_ctx)
