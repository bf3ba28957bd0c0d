import argparse
from pathlib import Path

import pytest

from scholar_sync.__main__ import main, run
from scholar_sync.activity import SQLiteActivityLog
from scholar_sync.config import Settings
from scholar_sync.models import ActivityLogEntry


def make_args(**overrides):
    values = dict(
        path=None,
        url=None,
        id=None,
        user="cli",
        db=None,
        logs=False,
        clear_logs=False,
        json=False,
        dry_run=False,
        verbose=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.mark.asyncio
async def test_dry_run_does_not_load_anything():
    code = await run(make_args(id="1706.03762", dry_run=True), Settings())
    assert code == 0


@pytest.mark.asyncio
async def test_missing_file_exits_with_error(tmp_path: Path):
    code = await run(make_args(path=str(tmp_path / "missing.pdf")), Settings())
    assert code == 1


@pytest.mark.asyncio
async def test_logs_list_and_clear(tmp_path: Path):
    db = tmp_path / "activity.db"
    log = SQLiteActivityLog(db)
    await log.append(ActivityLogEntry(user_id="u_cli", username="cli", timestamp=1_700_000_000_000, paper_title="P"))
    settings = Settings(db_path=str(db))

    assert await run(make_args(logs=True), settings) == 0
    assert len(await log.list()) == 1

    assert await run(make_args(clear_logs=True), settings) == 0
    assert await log.list() == []


@pytest.mark.parametrize("flag", ["--logs", "--clear-logs"])
def test_activity_log_flags_require_a_database(monkeypatch, flag):
    monkeypatch.delenv("SCHOLAR_SYNC_DB", raising=False)
    monkeypatch.setattr("sys.argv", ["scholar-sync", flag])
    with pytest.raises(SystemExit) as info:
        main()
    assert info.value.code == 2
