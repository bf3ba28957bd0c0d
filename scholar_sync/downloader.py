"""Document acquisition for scholar-sync.

Loads the PDF bytes handed to the pipeline, either from a local file or from
a URL. Remote fetches retry with backoff; this happens before a Run starts,
so it does not affect the pipeline's no-retry policy.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import aiofiles
import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import DownloadError

ARXIV_PDF_URL = "https://arxiv.org/pdf/{arxiv_id}.pdf"


def arxiv_pdf_url(arxiv_id: str) -> str:
    return ARXIV_PDF_URL.format(arxiv_id=arxiv_id.strip())


async def read_document(path: str | Path) -> bytes:
    """Read a local document into memory."""
    path = Path(path)
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except FileNotFoundError as exc:
        raise DownloadError(f"no such file: {path}") from exc
    except OSError as exc:
        raise DownloadError(f"could not read {path}: {exc}") from exc


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def _get(client: httpx.AsyncClient, url: str) -> bytes:
    resp = await client.get(url, follow_redirects=True)
    resp.raise_for_status()
    chunks = []
    async for chunk in resp.aiter_bytes():
        chunks.append(chunk)
    return b"".join(chunks)


async def fetch_document(url: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """Download a document from `url` and return its bytes.

    - Transport errors are retried with exponential backoff (tenacity).
    - HTTP error statuses are not retried.
    """
    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=60.0)
        close_client = True

    try:
        return await _get(client, url)
    except httpx.HTTPError as exc:
        raise DownloadError(f"failed to download {url}: {exc}") from exc
    finally:
        if close_client:
            await client.aclose()
