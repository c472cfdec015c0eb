"""Record normalization.

Upstream records arrive as loosely shaped dicts (GraphQL rows or already flattened
exports). Everything downstream works on the frozen dataclasses below; a record that
cannot be coerced into one is dropped here and never reaches the calculators.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

UNKNOWN_SUBJECT = "Unknown"

TRANSACTION_COLUMNS = ["category", "amount", "occurred_at", "path", "subject_name"]
PROGRESS_COLUMNS = ["grade", "occurred_at", "path", "subject_name", "subject_type"]


@dataclass(frozen=True)
class TransactionRecord:
    category: str
    amount: int
    occurred_at: Optional[pd.Timestamp]
    path: str
    subject_name: str = UNKNOWN_SUBJECT


@dataclass(frozen=True)
class ProgressRecord:
    grade: Optional[float]
    occurred_at: Optional[pd.Timestamp]
    path: str
    subject_name: str = UNKNOWN_SUBJECT
    subject_type: Optional[str] = None


class MalformedRecord(ValueError):
    """Raised internally when a raw record cannot be coerced."""


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _nested(raw: Mapping[str, Any], parent: str, key: str) -> Any:
    obj = raw.get(parent)
    if isinstance(obj, Mapping):
        return obj.get(key)
    return None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_amount(value: Any) -> int:
    if _is_missing(value):
        return 0
    if isinstance(value, bool):
        raise MalformedRecord(f"boolean amount {value!r}")
    if isinstance(value, (int, np.integer)):
        if value < 0:
            raise MalformedRecord(f"negative amount {value!r}")
        return int(value)
    num = pd.to_numeric(value, errors="coerce") if isinstance(value, str) else value
    try:
        num = float(num)
    except (TypeError, ValueError):
        raise MalformedRecord(f"non-numeric amount {value!r}")
    if math.isnan(num) or math.isinf(num):
        raise MalformedRecord(f"non-finite amount {value!r}")
    if num < 0:
        raise MalformedRecord(f"negative amount {value!r}")
    return int(Decimal(str(num)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def coerce_grade(value: Any) -> Optional[float]:
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        raise MalformedRecord(f"boolean grade {value!r}")
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise MalformedRecord(f"non-numeric grade {value!r}")
    if math.isnan(out) or math.isinf(out):
        raise MalformedRecord(f"non-finite grade {value!r}")
    return out


def coerce_timestamp(value: Any, *, required: bool = True) -> Optional[pd.Timestamp]:
    if _is_missing(value):
        if required:
            raise MalformedRecord("missing timestamp")
        return None
    if isinstance(value, bool):
        raise MalformedRecord(f"boolean timestamp {value!r}")
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError):
        raise MalformedRecord(f"unparseable timestamp {value!r}")
    if isinstance(ts, pd.Timestamp) and not pd.isna(ts):
        return ts
    raise MalformedRecord(f"unparseable timestamp {value!r}")


def coerce_path(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecord(f"unparseable path {value!r}")
    return value.strip()


def coerce_label(value: Any, default: Optional[str] = UNKNOWN_SUBJECT) -> Optional[str]:
    if _is_missing(value):
        return default
    s = str(value).strip()
    return s or default


def transaction_from_raw(raw: Any, *, require_timestamp: bool = True) -> TransactionRecord:
    if isinstance(raw, TransactionRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"record is not a mapping: {type(raw).__name__}")
    category = coerce_label(_first(raw, "category", "type"), default=None)
    if category is None:
        raise MalformedRecord("missing category")
    return TransactionRecord(
        category=category,
        amount=coerce_amount(raw.get("amount")),
        occurred_at=coerce_timestamp(_first(raw, "occurred_at", "occurredAt", "createdAt"), required=require_timestamp),
        path=coerce_path(raw.get("path")),
        subject_name=coerce_label(_first(raw, "subject_name", "subjectName") or _nested(raw, "object", "name")),
    )


def progress_from_raw(raw: Any, *, require_timestamp: bool = True) -> ProgressRecord:
    if isinstance(raw, ProgressRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"record is not a mapping: {type(raw).__name__}")
    return ProgressRecord(
        grade=coerce_grade(raw.get("grade")),
        occurred_at=coerce_timestamp(
            _first(raw, "occurred_at", "occurredAt", "updatedAt", "createdAt"), required=require_timestamp
        ),
        path=coerce_path(raw.get("path")),
        subject_name=coerce_label(_first(raw, "subject_name", "subjectName") or _nested(raw, "object", "name")),
        subject_type=coerce_label(_first(raw, "subject_type", "subjectType") or _nested(raw, "object", "type"), default=None),
    )


def normalize_transactions(raw: Optional[Iterable[Any]], *, require_timestamp: bool = True) -> List[TransactionRecord]:
    out: List[TransactionRecord] = []
    for idx, item in enumerate(raw or []):
        try:
            out.append(transaction_from_raw(item, require_timestamp=require_timestamp))
        except MalformedRecord as exc:
            logger.debug("dropping transaction #%d: %s", idx, exc)
    return out


def normalize_progress(raw: Optional[Iterable[Any]], *, require_timestamp: bool = True) -> List[ProgressRecord]:
    out: List[ProgressRecord] = []
    for idx, item in enumerate(raw or []):
        try:
            out.append(progress_from_raw(item, require_timestamp=require_timestamp))
        except MalformedRecord as exc:
            logger.debug("dropping progress #%d: %s", idx, exc)
    return out


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
        return payload["data"]
    return payload


def _rows(payload: Any, top_key: str, user_key: str) -> List[Any]:
    payload = _unwrap(payload)
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    rows = payload.get(top_key)
    if isinstance(rows, list):
        return rows
    user = payload.get("user")
    if isinstance(user, list):
        user = user[0] if user else None
    if isinstance(user, Mapping) and isinstance(user.get(user_key), list):
        return user[user_key]
    return []


def extract_transactions(payload: Any) -> List[Any]:
    """Pull the raw transaction rows out of an upstream response envelope."""
    return _rows(payload, "transaction", "transactions")


def extract_progress(payload: Any) -> List[Any]:
    """Pull the raw progress rows out of an upstream response envelope."""
    return _rows(payload, "progress", "progresses")


def records_frame(records: Iterable[Any], columns: Optional[List[str]] = None) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = [asdict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=columns or TRANSACTION_COLUMNS)
    return pd.DataFrame(rows)
