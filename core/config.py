from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


DEDUP_POLICIES = ("first", "max")

TECH_SKILLS_DEFAULT: Tuple[Tuple[str, str], ...] = (
    ("GO", "skill_go"),
    ("JAVASCRIPT", "skill_js"),
    ("HTML", "skill_html"),
    ("CSS", "skill_css"),
    ("UNIX", "skill_unix"),
    ("DOCKER", "skill_docker"),
    ("SQL", "skill_sql"),
)


@dataclass(frozen=True)
class XpThresholds:
    mb_threshold: int = 1_000_000
    mb_divisor: int = 1_000_000
    kb_divisor: int = 1000


@dataclass(frozen=True)
class RadarLayout:
    size: float = 320.0
    radius_ratio: float = 0.3
    label_offset: float = 30.0
    ring_scales: Tuple[float, ...] = (0.2, 0.4, 0.6, 0.8, 1.0)

    @property
    def radius(self) -> float:
        return self.size * self.radius_ratio

    @property
    def center(self) -> Tuple[float, float]:
        return self.size / 2, self.size / 2


@dataclass(frozen=True)
class BarLayout:
    bar_width: float = 40.0
    gap: float = 20.0
    max_bar_height: float = 200.0
    top_margin: float = 20.0
    total_height: float = 300.0
    tech_skills: Tuple[Tuple[str, str], ...] = TECH_SKILLS_DEFAULT


@dataclass(frozen=True)
class EngineConfig:
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
    recent_excluded_segments: Tuple[str, ...] = ("checkpoint", "piscine")
    xp_thresholds: XpThresholds = field(default_factory=XpThresholds)
    radar: RadarLayout = field(default_factory=RadarLayout)
    bars: BarLayout = field(default_factory=BarLayout)


def _as_int(value: object, default: int, *, lo: int, hi: int) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    return max(lo, min(hi, out))


def _as_float(value: object, default: float, *, lo: float, hi: float) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    if out != out:  # NaN
        out = default
    return max(lo, min(hi, out))


def _as_str(value: object, default: str) -> str:
    if value is None:
        return default
    s = str(value).strip()
    return s or default


def _as_str_tuple(values: Optional[object], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if values is None or isinstance(values, (str, bytes)):
        return default
    try:
        return tuple(str(v) for v in values if v is not None)  # type: ignore[union-attr]
    except TypeError:
        return default


def _tech_skills(raw: Optional[object]) -> Tuple[Tuple[str, str], ...]:
    if not raw:
        return TECH_SKILLS_DEFAULT
    if isinstance(raw, dict):
        items = list(raw.items())
    else:
        try:
            items = [tuple(pair) for pair in raw]  # type: ignore[union-attr]
        except TypeError:
            return TECH_SKILLS_DEFAULT
    out = tuple((str(k[0]), str(k[1])) for k in items if len(k) == 2)
    return out or TECH_SKILLS_DEFAULT


def normalize_config(raw: Optional[Dict[str, object]] = None) -> EngineConfig:
    raw = raw or {}
    defaults = EngineConfig()

    dedup_policy = _as_str(raw.get("dedup_policy"), defaults.dedup_policy).lower()
    if dedup_policy not in DEDUP_POLICIES:
        dedup_policy = defaults.dedup_policy

    t = raw.get("xp_thresholds") or {}
    xp_thresholds = XpThresholds(
        mb_threshold=_as_int(t.get("mb_threshold", 1_000_000), 1_000_000, lo=1, hi=10**12),
        mb_divisor=_as_int(t.get("mb_divisor", 1_000_000), 1_000_000, lo=1, hi=10**12),
        kb_divisor=_as_int(t.get("kb_divisor", 1000), 1000, lo=1, hi=10**12),
    )

    r = raw.get("radar") or {}
    radar = RadarLayout(
        size=_as_float(r.get("size", 320.0), 320.0, lo=1.0, hi=10_000.0),
        radius_ratio=_as_float(r.get("radius_ratio", 0.3), 0.3, lo=0.0, hi=0.5),
        label_offset=_as_float(r.get("label_offset", 30.0), 30.0, lo=0.0, hi=1000.0),
    )

    b = raw.get("bars") or {}
    bars = BarLayout(
        bar_width=_as_float(b.get("bar_width", 40.0), 40.0, lo=1.0, hi=1000.0),
        gap=_as_float(b.get("gap", 20.0), 20.0, lo=0.0, hi=1000.0),
        max_bar_height=_as_float(b.get("max_bar_height", 200.0), 200.0, lo=0.0, hi=10_000.0),
        top_margin=_as_float(b.get("top_margin", 20.0), 20.0, lo=0.0, hi=1000.0),
        total_height=_as_float(b.get("total_height", 300.0), 300.0, lo=1.0, hi=10_000.0),
        tech_skills=_tech_skills(b.get("tech_skills")),
    )

    return EngineConfig(
        xp_category=_as_str(raw.get("xp_category"), defaults.xp_category),
        skill_marker=_as_str(raw.get("skill_marker"), defaults.skill_marker),
        skill_prefix=_as_str(raw.get("skill_prefix"), defaults.skill_prefix),
        root_path=_as_str(raw.get("root_path"), defaults.root_path).rstrip("/") or defaults.root_path,
        filter_xp_by_root=bool(raw.get("filter_xp_by_root", True)),
        top_n=_as_int(raw.get("top_n", 6), 6, lo=1, hi=50),
        dedup_policy=dedup_policy,
        path_segment_index=_as_int(raw.get("path_segment_index", 2), 2, lo=0, hi=50),
        xp_goal=_as_int(raw.get("xp_goal", 100_000), 100_000, lo=0, hi=10**12),
        recent_limit=_as_int(raw.get("recent_limit", 4), 4, lo=0, hi=200),
        pending_limit=_as_int(raw.get("pending_limit", 5), 5, lo=0, hi=200),
        recent_excluded_segments=_as_str_tuple(raw.get("recent_excluded_segments"), defaults.recent_excluded_segments),
        xp_thresholds=xp_thresholds,
        radar=radar,
        bars=bars,
    )
