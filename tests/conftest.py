import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import EngineConfig  # noqa: E402
from core.records import TransactionRecord  # noqa: E402


@pytest.fixture()
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture()
def make_txn():
    def _make(category="xp", amount=0, path="/bahrain/bh-module/project", occurred_at=None, subject_name="Unknown"):
        return TransactionRecord(
            category=category,
            amount=amount,
            occurred_at=occurred_at,
            path=path,
            subject_name=subject_name,
        )

    return _make


@pytest.fixture()
def raw_transactions():
    return [
        {
            "type": "xp",
            "amount": 25000,
            "createdAt": "2024-03-01T10:00:00Z",
            "path": "/bahrain/bh-module/go-reloaded",
            "object": {"name": "go-reloaded"},
        },
        {
            "type": "xp",
            "amount": 9000,
            "createdAt": "2024-02-01T10:00:00Z",
            "path": "/bahrain/bh-module/checkpoint/checkpoint-01",
            "object": {"name": "checkpoint-01"},
        },
        {
            "type": "xp",
            "amount": 70000,
            "createdAt": "2024-01-01T10:00:00Z",
            "path": "/bahrain/bh-piscine/go",
            "object": {"name": "piscine-go"},
        },
        {
            "type": "skill_go",
            "amount": 55,
            "createdAt": "2024-03-02T10:00:00Z",
            "path": "/bahrain/bh-module/go-reloaded",
        },
        {
            "type": "skill_js",
            "amount": 30,
            "createdAt": "2024-03-03T10:00:00Z",
            "path": "/bahrain/bh-module/make-your-game",
        },
        {
            "type": "skill_go",
            "amount": 20,
            "createdAt": "2024-02-02T10:00:00Z",
            "path": "/bahrain/bh-module/ascii-art",
        },
        None,
        {"type": "xp", "amount": "lots", "createdAt": "2024-01-05T10:00:00Z", "path": "/bahrain/bh-module/x"},
    ]


@pytest.fixture()
def raw_progress():
    return [
        {
            "grade": None,
            "updatedAt": "2024-03-05T10:00:00Z",
            "path": "/bahrain/bh-module/forum",
            "object": {"name": "forum", "type": "project"},
        },
        {
            "grade": 1.2,
            "updatedAt": "2024-03-04T10:00:00Z",
            "path": "/bahrain/bh-module/ascii-art",
            "object": {"name": "ascii-art", "type": "project"},
        },
        {
            "grade": None,
            "updatedAt": "2024-03-06T10:00:00Z",
            "path": "/bahrain/bh-module/groupie-tracker",
        },
    ]
