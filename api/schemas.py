from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from core.config import TECH_SKILLS_DEFAULT


class XpThresholdsModel(BaseModel):
    mb_threshold: int = 1_000_000
    mb_divisor: int = 1_000_000
    kb_divisor: int = 1000


class RadarLayoutModel(BaseModel):
    size: float = 320.0
    radius_ratio: float = 0.3
    label_offset: float = 30.0


class BarLayoutModel(BaseModel):
    bar_width: float = 40.0
    gap: float = 20.0
    max_bar_height: float = 200.0
    top_margin: float = 20.0
    total_height: float = 300.0
    tech_skills: List[Tuple[str, str]] = Field(default_factory=lambda: list(TECH_SKILLS_DEFAULT))


class EngineConfigModel(BaseModel):
    xp_category: str = "xp"
    skill_marker: str = "skill"
    skill_prefix: str = "skill_"
    root_path: str = "/bahrain/bh-module"
    filter_xp_by_root: bool = True
    top_n: int = 6
    dedup_policy: str = "first"
    path_segment_index: int = 2
    xp_goal: int = 100_000
    recent_limit: int = 4
    pending_limit: int = 5
    recent_excluded_segments: List[str] = Field(default_factory=lambda: ["checkpoint", "piscine"])
    xp_thresholds: XpThresholdsModel = Field(default_factory=XpThresholdsModel)
    radar: RadarLayoutModel = Field(default_factory=RadarLayoutModel)
    bars: BarLayoutModel = Field(default_factory=BarLayoutModel)


class RecordsRequest(BaseModel):
    """Already-fetched record rows; each row is passed to the normalizer untouched."""

    transactions: List[Any] = Field(default_factory=list)
    skills: Optional[List[Any]] = None
    progress: List[Any] = Field(default_factory=list)
    config: EngineConfigModel = Field(default_factory=EngineConfigModel)


class ProfileRequest(RecordsRequest):
    user: Dict[str, Any] = Field(default_factory=dict)
    audit: Dict[str, Any] = Field(default_factory=dict)
    include_charts: bool = True


class AuditRequest(BaseModel):
    total_up: Optional[float] = Field(default=None, alias="totalUp")
    total_down: Optional[float] = Field(default=None, alias="totalDown")
    audit_ratio: Optional[float] = Field(default=None, alias="auditRatio")

    model_config = {"populate_by_name": True}

