from datetime import datetime, timezone

import pytest

from db import ActivityEntry, ActivityRecorder, InMemoryKeyValueStore, SqliteKeyValueStore
from tests.fakes import FailingKeyValueStore


def entry(time: str, query: str = "q") -> ActivityEntry:
    return ActivityEntry.create(endpoint="/api/chat", mode="quick", model="Llama 3.3 70B", query=query, time=time)


@pytest.mark.asyncio
async def test_newest_first_and_capped():
    recorder = ActivityRecorder(InMemoryKeyValueStore(), max_entries=3)

    for i in range(5):
        assert await recorder.record(entry(f"2026-01-0{i + 1}T00:00:00.000Z", query=f"q{i}"))

    logs = await recorder.entries()
    assert [e["query"] for e in logs] == ["q4", "q3", "q2"]


@pytest.mark.asyncio
async def test_default_cap_is_200():
    recorder = ActivityRecorder(InMemoryKeyValueStore())

    for i in range(205):
        await recorder.record(entry("2026-01-01T00:00:00.000Z", query=str(i)))

    logs = await recorder.entries()
    assert len(logs) == 200
    assert logs[0]["query"] == "204"


def test_query_preview_is_truncated():
    assert len(entry("2026-01-01T00:00:00.000Z", query="x" * 1000).query) == 300


@pytest.mark.asyncio
async def test_stats_today_and_since():
    recorder = ActivityRecorder(InMemoryKeyValueStore())
    await recorder.record(entry("2026-03-01T10:00:00.000Z", "old"))
    await recorder.record(entry("2026-03-02T09:00:00.000Z", "morning"))
    await recorder.record(entry("2026-03-02T15:00:00.000Z", "afternoon"))

    stats = await recorder.stats(
        since="2026-03-02T09:00:00.000Z", now=datetime(2026, 3, 2, 18, tzinfo=timezone.utc)
    )

    assert stats["total"] == 3
    assert stats["today"] == 2
    assert [e["query"] for e in stats["logs"]] == ["afternoon"]


@pytest.mark.asyncio
async def test_empty_log_stats():
    stats = await ActivityRecorder(InMemoryKeyValueStore()).stats()
    assert stats == {"total": 0, "today": 0, "logs": []}


@pytest.mark.asyncio
async def test_store_failures_never_raise():
    recorder = ActivityRecorder(FailingKeyValueStore())

    assert await recorder.record(entry("2026-01-01T00:00:00.000Z")) is False
    assert await recorder.stats() == {"total": 0, "today": 0, "logs": []}


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_instances(tmp_path):
    path = str(tmp_path / "activity.db")
    await ActivityRecorder(SqliteKeyValueStore(path)).record(entry("2026-01-01T00:00:00.000Z", "persisted"))

    logs = await ActivityRecorder(SqliteKeyValueStore(path)).entries()

    assert [e["query"] for e in logs] == ["persisted"]


def test_max_entries_must_be_positive():
    with pytest.raises(ValueError):
        ActivityRecorder(InMemoryKeyValueStore(), max_entries=0)
