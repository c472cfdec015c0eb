from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.config import EngineConfig, normalize_config
from core.records import (
    extract_progress,
    extract_transactions,
    normalize_progress,
    normalize_transactions,
)


DATA_DIR = Path(__file__).resolve().parents[1]
FILE_GLOB = "profile*.json"

# Sections of a saved export; each holds an upstream GraphQL response (or its rows).
EXPORT_SECTIONS = ("user", "audit", "transactions", "skills", "progress")


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    return sorted((data_dir or DATA_DIR).glob(FILE_GLOB))


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_fixed(value: object, ndigits: int = 0) -> str:
    """Fixed-point text with half-up rounding (``2.005`` -> ``"2.01"``)."""
    if value is None or pd.isna(value):
        return "N/A"
    q = Decimal(10) ** -ndigits
    return str(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def _first_user(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict) and "data" in raw and isinstance(raw["data"], dict):
        raw = raw["data"]
    if isinstance(raw, dict) and "user" in raw:
        raw = raw["user"]
    if isinstance(raw, list):
        raw = raw[0] if raw else {}
    return dict(raw) if isinstance(raw, dict) else {}


def parse_export(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Split a saved export into raw user/audit dicts and raw record rows."""
    transactions = extract_transactions(doc.get("transactions"))
    skills = extract_transactions(doc.get("skills")) if doc.get("skills") is not None else None
    return {
        "user": _first_user(doc.get("user")),
        "audit": _first_user(doc.get("audit")),
        "transactions": transactions,
        "skills": skills,
        "progress": extract_progress(doc.get("progress")),
    }


@lru_cache(maxsize=4)
def _load_export_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, Any]:
    path = Path(files_sig[-1][0])
    with path.open("r", encoding="utf-8") as fh:
        doc = json.load(fh)
    if not isinstance(doc, dict):
        raise ValueError(f"{path.name}: expected a JSON object with sections {', '.join(EXPORT_SECTIONS)}")
    out = parse_export(doc)
    out["files"] = [Path(name).name for name, _ in files_sig]
    return out


def load_dashboard_data(path: Optional[Path] = None) -> Dict[str, Any]:
    files = [Path(path)] if path is not None else get_source_files()
    if not files:
        return {"files": [], "user": {}, "audit": {}, "transactions": [], "skills": None, "progress": []}
    return _load_export_cached(file_signature(files))


def prepare_context(config: Dict[str, Any] | EngineConfig, data_ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize the raw record sets of a loaded export for one render pass."""
    if not isinstance(config, EngineConfig):
        config = normalize_config(config)
    transactions = normalize_transactions(data_ctx.get("transactions"))
    raw_skills = data_ctx.get("skills")
    # Skill queries only select type and amount, so they carry no timestamp.
    skill_transactions = (
        normalize_transactions(raw_skills, require_timestamp=False) if raw_skills is not None else transactions
    )
    progress = normalize_progress(data_ctx.get("progress"))
    return {
        "config": config,
        "user": data_ctx.get("user") or {},
        "audit": data_ctx.get("audit") or {},
        "transactions": transactions,
        "skill_transactions": skill_transactions,
        "progress": progress,
        "dropped": {
            "transactions": len(data_ctx.get("transactions") or []) - len(transactions),
            "progress": len(data_ctx.get("progress") or []) - len(progress),
        },
    }
