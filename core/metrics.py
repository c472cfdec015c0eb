from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from core.config import EngineConfig, XpThresholds
from core.data import format_fixed, round_half_up
from core.records import PROGRESS_COLUMNS, ProgressRecord, TransactionRecord, records_frame


NOT_AVAILABLE = "N/A"
UNKNOWN_PATH_KEY = "unknown"


@dataclass(frozen=True)
class UnitValue:
    value: Union[int, str]
    unit: str

    @property
    def text(self) -> str:
        return f"{self.value} {self.unit}"


@dataclass(frozen=True)
class AuditSummary:
    total_up: int
    total_down: int
    ratio: Union[float, str]
    upstream_ratio: Optional[float] = None

    @property
    def available(self) -> bool:
        return self.ratio != NOT_AVAILABLE

    @property
    def ratio_text(self) -> str:
        if not self.available:
            return NOT_AVAILABLE
        return format_fixed(self.ratio, 1)


def _under_root(path: str, root: str) -> bool:
    return bool(root) and path.startswith(root)


def total_xp(records: Iterable[TransactionRecord], config: Optional[EngineConfig] = None) -> int:
    """Sum of xp amounts, optionally restricted to the configured root path.

    Repeated records are summed as-is; callers pre-filter to distinct events.
    """
    config = config or EngineConfig()
    df = records_frame(records)
    if df.empty:
        return 0
    mask = df["category"] == config.xp_category
    if config.filter_xp_by_root:
        mask &= df["path"].apply(lambda p: _under_root(p, config.root_path))
    return int(df.loc[mask, "amount"].sum())


def xp_display(magnitude: int, thresholds: Optional[XpThresholds] = None) -> UnitValue:
    thresholds = thresholds or XpThresholds()
    if magnitude >= thresholds.mb_threshold:
        return UnitValue(value=format_fixed(magnitude / thresholds.mb_divisor, 2), unit="MB")
    return UnitValue(value=int(round_half_up(magnitude / thresholds.kb_divisor) or 0), unit="kB")


def xp_progress(total: int, goal: int) -> Dict[str, Any]:
    ratio = min(total / goal, 1.0) if goal > 0 else 0.0
    ratio = max(ratio, 0.0)
    return {"goal": goal, "ratio": ratio, "percent": int(round_half_up(ratio * 100) or 0)}


def audit_summary(total_up: Any, total_down: Any, upstream_ratio: Any = None) -> AuditSummary:
    up = _non_negative_int(total_up)
    down = _non_negative_int(total_down)
    ratio: Union[float, str] = up / down if down > 0 else NOT_AVAILABLE
    upstream: Optional[float] = None
    if upstream_ratio is not None and not isinstance(upstream_ratio, bool):
        try:
            upstream = float(upstream_ratio)
        except (TypeError, ValueError):
            upstream = None
        if upstream is not None and pd.isna(upstream):
            upstream = None
    return AuditSummary(total_up=up, total_down=down, ratio=ratio, upstream_ratio=upstream)


def _non_negative_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        out = float(value)
    except (TypeError, ValueError):
        return 0
    if pd.isna(out) or out in (float("inf"), float("-inf")) or out < 0:
        return 0
    return int(out)


def audit_bars(summary: AuditSummary, thresholds: Optional[XpThresholds] = None) -> Dict[str, Any]:
    """Done/received amounts in MB and each as a share of the larger one."""
    thresholds = thresholds or XpThresholds()
    denom = max(summary.total_up, summary.total_down, 1)
    return {
        "done": {
            "amount": summary.total_up,
            "display": format_fixed(summary.total_up / thresholds.mb_divisor, 2),
            "unit": "MB",
            "share": summary.total_up / denom,
        },
        "received": {
            "amount": summary.total_down,
            "display": format_fixed(summary.total_down / thresholds.mb_divisor, 2),
            "unit": "MB",
            "share": summary.total_down / denom,
        },
    }


def path_key(path: Any, segment_index: int = 2) -> str:
    if not isinstance(path, str):
        return UNKNOWN_PATH_KEY
    parts = path.split("/")
    if segment_index >= len(parts):
        return UNKNOWN_PATH_KEY
    key = parts[segment_index].strip()
    return key or UNKNOWN_PATH_KEY


def xp_by_path(
    records: Iterable[TransactionRecord],
    segment_index: int = 2,
    *,
    category: Optional[str] = None,
) -> Dict[str, int]:
    """Summed amount per path segment, keyed in order of first occurrence."""
    df = records_frame(records)
    if df.empty:
        return {}
    if category is not None:
        df = df[df["category"] == category]
        if df.empty:
            return {}
    keys = df["path"].apply(lambda p: path_key(p, segment_index))
    grouped = df.groupby(keys, sort=False)["amount"].sum()
    return {str(k): int(v) for k, v in grouped.items()}


def _sorted_newest_first(df: pd.DataFrame) -> pd.DataFrame:
    df = df.assign(occurred_at=pd.to_datetime(df["occurred_at"], utc=True))
    return df.sort_values("occurred_at", ascending=False, kind="stable", na_position="last")


def _iso(value: Any) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    return pd.Timestamp(value).isoformat()


def recent_projects(records: Iterable[TransactionRecord], config: Optional[EngineConfig] = None) -> List[Dict[str, Any]]:
    config = config or EngineConfig()
    df = records_frame(records)
    if df.empty or config.recent_limit <= 0:
        return []
    root = config.root_path
    excluded = tuple(f"{root}/{seg}" for seg in config.recent_excluded_segments)
    mask = (df["category"] == config.xp_category) & df["path"].apply(
        lambda p: _under_root(p, root) and not p.startswith(excluded)
    )
    recent = _sorted_newest_first(df[mask]).head(config.recent_limit)
    return [
        {
            "name": row.subject_name,
            "amount": int(row.amount),
            "display": f"+{format_fixed(row.amount / config.xp_thresholds.kb_divisor, 1)}kB",
            "occurred_at": _iso(row.occurred_at),
        }
        for row in recent.itertuples(index=False)
    ]


def pending_projects(records: Iterable[ProgressRecord], config: Optional[EngineConfig] = None) -> List[Dict[str, Any]]:
    config = config or EngineConfig()
    df = records_frame(records, columns=PROGRESS_COLUMNS)
    if df.empty or config.pending_limit <= 0:
        return []
    mask = df["grade"].isna() & df["path"].apply(lambda p: _under_root(p, config.root_path))
    pending = _sorted_newest_first(df[mask]).head(config.pending_limit)
    return [
        {"name": row.subject_name, "path": row.path, "occurred_at": _iso(row.occurred_at)}
        for row in pending.itertuples(index=False)
    ]
