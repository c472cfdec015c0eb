from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from core.config import DEDUP_POLICIES, EngineConfig
from core.records import TransactionRecord, records_frame


@dataclass(frozen=True)
class SkillSummary:
    category: str
    amount: int
    label: str = ""


def skill_label(category: str, prefix: str = "skill_") -> str:
    if prefix and category.startswith(prefix):
        return category[len(prefix):]
    return category


def is_skill_category(category: str, marker: str = "skill") -> bool:
    return marker.lower() in category.lower()


def skill_frame(records: Iterable[TransactionRecord], marker: str = "skill") -> pd.DataFrame:
    df = records_frame(records)
    if df.empty:
        return df
    mask = df["category"].astype(str).map(lambda c: is_skill_category(c, marker))
    return df[mask]


def dedupe_skills(
    records: Iterable[TransactionRecord],
    *,
    policy: str = "first",
    marker: str = "skill",
    prefix: str = "skill_",
) -> List[SkillSummary]:
    """One summary per skill category, in order of first appearance.

    ``first`` keeps the first record seen for a category (upstream sorts by amount
    descending, so this is normally the largest). ``max`` keeps the largest amount.
    """
    if policy not in DEDUP_POLICIES:
        raise ValueError(f"unknown dedup policy {policy!r}")
    df = skill_frame(records, marker)
    if df.empty:
        return []
    if policy == "first":
        kept = df.drop_duplicates(subset=["category"], keep="first")[["category", "amount"]]
    else:
        kept = df.groupby("category", sort=False)["amount"].max().reset_index()
    return [
        SkillSummary(category=str(row.category), amount=int(row.amount), label=skill_label(str(row.category), prefix))
        for row in kept.itertuples(index=False)
    ]


def top_skills(
    records: Iterable[TransactionRecord],
    config: Optional[EngineConfig] = None,
) -> List[SkillSummary]:
    config = config or EngineConfig()
    deduped = dedupe_skills(
        records,
        policy=config.dedup_policy,
        marker=config.skill_marker,
        prefix=config.skill_prefix,
    )
    return deduped[: config.top_n]


def tech_skill_amounts(
    records: Iterable[TransactionRecord],
    config: Optional[EngineConfig] = None,
) -> List[SkillSummary]:
    """Amounts for the fixed tech skill list, in configured order; absent skills are 0.

    Repeated categories are resolved with ``config.dedup_policy``, the same rule the
    radar uses.
    """
    config = config or EngineConfig()
    if config.dedup_policy not in DEDUP_POLICIES:
        raise ValueError(f"unknown dedup policy {config.dedup_policy!r}")
    amounts = {}
    for rec in records:
        if config.dedup_policy == "max" and rec.category in amounts:
            amounts[rec.category] = max(amounts[rec.category], rec.amount)
        else:
            amounts.setdefault(rec.category, rec.amount)
    return [
        SkillSummary(category=category, amount=int(amounts.get(category, 0)), label=label)
        for label, category in config.bars.tech_skills
    ]
