import random

import pandas as pd

from core.config import EngineConfig, normalize_config
from core.metrics import (
    AuditSummary,
    audit_bars,
    audit_summary,
    path_key,
    pending_projects,
    recent_projects,
    total_xp,
    xp_by_path,
    xp_display,
    xp_progress,
)
from core.records import normalize_progress, normalize_transactions


def test_total_xp_is_order_independent(make_txn):
    records = [make_txn("xp", amount) for amount in (1200, 35000, 7, 990, 123456)]
    shuffled = list(records)
    random.Random(7).shuffle(shuffled)

    assert total_xp(records) == 160653
    assert total_xp(shuffled) == total_xp(records)
    assert total_xp(list(reversed(records))) == total_xp(records)


def test_total_xp_respects_root_filter(make_txn):
    records = [
        make_txn("xp", 1000, path="/bahrain/bh-module/a"),
        make_txn("xp", 500, path="/bahrain/bh-piscine/b"),
        make_txn("skill_go", 40, path="/bahrain/bh-module/a"),
    ]

    assert total_xp(records, EngineConfig()) == 1000
    assert total_xp(records, normalize_config({"filter_xp_by_root": False})) == 1500


def test_total_xp_sums_duplicates(make_txn):
    txn = make_txn("xp", 1000)

    assert total_xp([txn, txn]) == 2000
    assert total_xp([]) == 0


def test_xp_display_unit_boundary():
    assert xp_display(999_999).unit == "kB"
    assert xp_display(999_999).value == 1000
    assert xp_display(1_000_000).unit == "MB"
    assert xp_display(1_000_000).value == "1.00"


def test_xp_display_rounding():
    assert xp_display(2500).value == 3
    assert xp_display(2499).value == 2
    assert xp_display(0).value == 0
    assert xp_display(1_234_567).value == "1.23"
    assert xp_display(1_235_000).text == "1.24 MB"


def test_audit_ratio_zero_down_is_sentinel():
    summary = audit_summary(50, 0)

    assert summary.ratio == "N/A"
    assert summary.ratio_text == "N/A"
    assert summary.available is False


def test_audit_ratio_one_decimal():
    summary = audit_summary(60, 30)

    assert summary.ratio == 2.0
    assert summary.ratio_text == "2.0"
    assert audit_summary(1_000_000, 1_500_000).ratio_text == "0.7"


def test_audit_inputs_are_coerced():
    summary = audit_summary(None, "x", upstream_ratio="1.3")

    assert summary == AuditSummary(total_up=0, total_down=0, ratio="N/A", upstream_ratio=1.3)
    assert audit_summary(-5, 10).total_up == 0


def test_audit_bars_guard_zero():
    empty = audit_bars(audit_summary(0, 0))
    assert empty["done"]["share"] == 0
    assert empty["received"]["share"] == 0

    bars = audit_bars(audit_summary(2_000_000, 1_000_000))
    assert bars["done"]["display"] == "2.00"
    assert bars["done"]["share"] == 1.0
    assert bars["received"]["share"] == 0.5


def test_path_key_segment_two():
    assert path_key("/bahrain/bh-module/checkpoint/foo") == "bh-module"
    assert path_key("x") == "unknown"
    assert path_key("/bahrain") == "unknown"
    assert path_key("/bahrain//foo") == "unknown"
    assert path_key(None) == "unknown"
    assert path_key("/a/b/c", segment_index=3) == "c"


def test_xp_by_path_keeps_first_occurrence_order(make_txn):
    records = [
        make_txn("xp", 10, path="/bahrain/bh-piscine/go"),
        make_txn("xp", 5, path="x"),
        make_txn("xp", 20, path="/bahrain/bh-module/checkpoint/foo"),
        make_txn("xp", 1, path="/bahrain/bh-piscine/js"),
        make_txn("skill_go", 99, path="/bahrain/bh-module/foo"),
    ]

    assert list(xp_by_path(records).items()) == [("bh-piscine", 11), ("unknown", 5), ("bh-module", 119)]
    assert xp_by_path(records, category="xp") == {"bh-piscine": 11, "unknown": 5, "bh-module": 20}
    assert xp_by_path([]) == {}


def test_xp_progress():
    assert xp_progress(50_000, 100_000) == {"goal": 100_000, "ratio": 0.5, "percent": 50}
    assert xp_progress(250_000, 100_000)["ratio"] == 1.0
    assert xp_progress(10, 0)["ratio"] == 0.0


def test_recent_projects_excludes_checkpoints_and_other_roots(raw_transactions):
    records = normalize_transactions(raw_transactions)

    recent = recent_projects(records)

    assert recent == [
        {
            "name": "go-reloaded",
            "amount": 25000,
            "display": "+25.0kB",
            "occurred_at": pd.Timestamp("2024-03-01T10:00:00Z").isoformat(),
        }
    ]


def test_recent_projects_newest_first_and_limited(make_txn):
    records = [
        make_txn("xp", 1000 * i, occurred_at=pd.Timestamp(f"2024-01-0{i}", tz="UTC"), subject_name=f"p{i}")
        for i in range(1, 7)
    ]

    recent = recent_projects(records)

    assert [r["name"] for r in recent] == ["p6", "p5", "p4", "p3"]


def test_pending_projects(raw_progress):
    pending = pending_projects(normalize_progress(raw_progress))

    assert [p["name"] for p in pending] == ["Unknown", "forum"]
    assert pending_projects([]) == []
