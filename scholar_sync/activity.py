"""Activity log sinks.

One entry is appended for every completed analysis. Two sinks are provided:
an in-memory list for single sessions and tests, and a small `aiosqlite`
table for a log that survives restarts. Both list entries newest first.
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional

import aiosqlite

from .interfaces import ActivitySink
from .models import AggregateResult, ActivityLogEntry, User

SCHEMA = """
CREATE TABLE IF NOT EXISTS activity_log (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT UNIQUE NOT NULL,
    user_id TEXT NOT NULL,
    username TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    paper_title TEXT NOT NULL,
    action_type TEXT NOT NULL
);
"""


class MemoryActivityLog:
    def __init__(self) -> None:
        self._entries: List[ActivityLogEntry] = []

    async def append(self, entry: ActivityLogEntry) -> None:
        self._entries.insert(0, entry)

    async def list(self) -> List[ActivityLogEntry]:
        return list(self._entries)

    async def clear(self) -> None:
        self._entries.clear()


class SQLiteActivityLog:
    """Activity log stored in a SQLite file. The table is created on first use."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._ready = False

    async def init_db(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        self._ready = True

    async def _ensure(self) -> None:
        if not self._ready:
            await self.init_db()

    async def append(self, entry: ActivityLogEntry) -> None:
        await self._ensure()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO activity_log (id, user_id, username, timestamp, paper_title, action_type) VALUES (?, ?, ?, ?, ?, ?)",
                (entry.id, entry.user_id, entry.username, entry.timestamp, entry.paper_title, entry.action_type),
            )
            await db.commit()

    async def list(self) -> List[ActivityLogEntry]:
        await self._ensure()
        async with aiosqlite.connect(self.db_path) as db:
            cur = await db.execute(
                "SELECT id, user_id, username, timestamp, paper_title, action_type FROM activity_log ORDER BY seq DESC"
            )
            rows = await cur.fetchall()
        return [
            ActivityLogEntry(
                id=r[0], user_id=r[1], username=r[2], timestamp=r[3], paper_title=r[4], action_type=r[5]
            )
            for r in rows
        ]

    async def clear(self) -> None:
        await self._ensure()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM activity_log")
            await db.commit()


def _now_ms() -> int:
    return int(time.time() * 1000)


class ActivityRecorder:
    """Completion listener that appends one entry per finished analysis."""

    def __init__(self, sink: ActivitySink, user: User, clock: Optional[Callable[[], int]] = None) -> None:
        self.sink = sink
        self.user = user
        self.clock = clock or _now_ms

    async def __call__(self, title: str, result: AggregateResult) -> None:
        entry = ActivityLogEntry(
            user_id=self.user.id,
            username=self.user.username,
            timestamp=self.clock(),
            paper_title=title,
        )
        await self.sink.append(entry)


def open_activity_log(db_path: Optional[str | Path] = None) -> ActivitySink:
    """SQLite-backed log when a path is given, in-memory otherwise."""
    if db_path:
        return SQLiteActivityLog(db_path)
    return MemoryActivityLog()
