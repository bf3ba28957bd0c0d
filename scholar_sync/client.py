from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

from .activity import ActivityRecorder, open_activity_log
from .config import Settings
from .downloader import arxiv_pdf_url, fetch_document, read_document
from .models import ActivityLogEntry, Run, User
from .pipeline import build_pipeline


class ScholarSyncClient:
    """Lightweight synchronous client wrapping common operations.

    Examples:
        client = ScholarSyncClient(user=User(id="u_1", username="alice"), db_path="activity.db")
        run = client.analyze_file("paper.pdf")
        print(run.stage, run.result.title if run.result else run.error)
    """

    def __init__(self, user: Optional[User] = None, db_path: Optional[str] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings.from_env(db_path=db_path)
        self.activity = open_activity_log(self.settings.db_path)
        listeners = [ActivityRecorder(self.activity, user)] if user else []
        self.pipeline = build_pipeline(self.settings, listeners=listeners)

    def analyze_bytes(self, document: bytes) -> Run:
        return asyncio.run(self.pipeline.submit(document))

    def analyze_file(self, path: str | Path) -> Run:
        return self.analyze_bytes(asyncio.run(read_document(path)))

    def analyze_url(self, url: str) -> Run:
        return self.analyze_bytes(asyncio.run(fetch_document(url)))

    def analyze_arxiv(self, arxiv_id: str) -> Run:
        return self.analyze_url(arxiv_pdf_url(arxiv_id))

    def reset(self) -> Run:
        return self.pipeline.reset()

    def activity_log(self) -> List[ActivityLogEntry]:
        return asyncio.run(self.activity.list())

    def clear_activity_log(self) -> None:
        asyncio.run(self.activity.clear())
