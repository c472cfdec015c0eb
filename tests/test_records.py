import pandas as pd

from core.records import (
    ProgressRecord,
    TransactionRecord,
    extract_progress,
    extract_transactions,
    normalize_progress,
    normalize_transactions,
    records_frame,
)


def test_graphql_rows_are_flattened(raw_transactions):
    records = normalize_transactions(raw_transactions)

    assert len(records) == 6
    first = records[0]
    assert first == TransactionRecord(
        category="xp",
        amount=25000,
        occurred_at=pd.Timestamp("2024-03-01T10:00:00Z"),
        path="/bahrain/bh-module/go-reloaded",
        subject_name="go-reloaded",
    )
    assert records[3].subject_name == "Unknown"


def test_defaults_fill_missing_fields():
    records = normalize_transactions([{"type": "xp", "createdAt": "2024-01-01"}])

    assert len(records) == 1
    assert records[0].amount == 0
    assert records[0].path == ""
    assert records[0].subject_name == "Unknown"


def test_malformed_records_are_dropped_not_raised():
    raw = [
        None,
        "xp",
        {"type": "xp", "amount": 10},  # no timestamp
        {"type": "xp", "amount": 10, "createdAt": "not a date"},
        {"type": "xp", "amount": -5, "createdAt": "2024-01-01"},
        {"type": "xp", "amount": "abc", "createdAt": "2024-01-01"},
        {"type": "xp", "amount": 10, "createdAt": "2024-01-01", "path": 123},
        {"amount": 10, "createdAt": "2024-01-01"},
        {"type": "xp", "amount": 10, "createdAt": "2024-01-01", "path": "/ok/path/here"},
    ]

    records = normalize_transactions(raw)

    assert [r.path for r in records] == ["/ok/path/here"]


def test_numeric_amounts_are_coerced():
    records = normalize_transactions(
        [
            {"type": "xp", "amount": "1500", "createdAt": "2024-01-01"},
            {"type": "xp", "amount": 12.5, "createdAt": "2024-01-01"},
        ]
    )

    assert [r.amount for r in records] == [1500, 13]


def test_large_integer_amounts_keep_precision():
    big = 2**53 + 1
    records = normalize_transactions([{"type": "xp", "amount": big, "createdAt": "2024-01-01"}])

    assert records[0].amount == big
    assert normalize_transactions([{"type": "xp", "amount": -3, "createdAt": "2024-01-01"}]) == []


def test_timestamp_optional_for_skill_rows():
    rows = [{"type": "skill_go", "amount": 40}]

    assert normalize_transactions(rows) == []
    records = normalize_transactions(rows, require_timestamp=False)
    assert records == [TransactionRecord(category="skill_go", amount=40, occurred_at=None, path="")]


def test_progress_defaults_and_nested_object(raw_progress):
    records = normalize_progress(raw_progress + [{"grade": "A", "updatedAt": "2024-01-01", "path": "/x"}])

    assert len(records) == 3
    assert records[0] == ProgressRecord(
        grade=None,
        occurred_at=pd.Timestamp("2024-03-05T10:00:00Z"),
        path="/bahrain/bh-module/forum",
        subject_name="forum",
        subject_type="project",
    )
    assert records[1].grade == 1.2
    assert records[2].subject_name == "Unknown"
    assert records[2].subject_type is None


def test_extract_rows_from_response_envelopes():
    rows = [{"type": "skill_go", "amount": 1}]

    assert extract_transactions({"data": {"user": [{"transactions": rows}]}}) == rows
    assert extract_transactions({"transaction": rows}) == rows
    assert extract_transactions(rows) == rows
    assert extract_transactions({"user": []}) == []
    assert extract_transactions(None) == []
    assert extract_progress({"data": {"progress": rows}}) == rows
    assert extract_progress({"user": {"progresses": rows}}) == rows


def test_records_frame_keeps_columns_when_empty():
    df = records_frame([])

    assert df.empty
    assert list(df.columns) == ["category", "amount", "occurred_at", "path", "subject_name"]
