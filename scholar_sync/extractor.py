"""PDF text extraction.

Pages are read with PyMuPDF in document order, lightly cleaned and joined
with a blank line so later stages see natural section breaks. Parsing is
blocking, so the async entry point runs it in a worker thread.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import List

import fitz  # PyMuPDF

from .errors import ExtractionError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"
INVALID_DOCUMENT = "Failed to extract text from PDF. Please ensure it is a valid PDF file."
EMPTY_TEXT = "Extracted text is empty. The PDF might be an image scan."


def clean_text(text: str) -> str:
    """Basic cleaning: normalize whitespace and remove weird control chars."""
    if text is None:
        return ""
    text = text.replace("\xa0", " ")
    text = re.sub(r"\r\n|\r", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_text_sync(document: bytes) -> str:
    """Extract plain text from PDF bytes (synchronous)."""
    if not document:
        raise ExtractionError(INVALID_DOCUMENT)
    try:
        doc = fitz.open(stream=document, filetype="pdf")
    except Exception as exc:
        raise ExtractionError(INVALID_DOCUMENT) from exc

    try:
        if doc.needs_pass:
            raise ExtractionError("The PDF is password protected and cannot be read.")
        parts: List[str] = []
        for page in doc:
            parts.append(clean_text(page.get_text("text")))
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionError(INVALID_DOCUMENT) from exc
    finally:
        doc.close()

    text = PAGE_SEPARATOR.join(p for p in parts if p)
    if not text.strip():
        raise ExtractionError(EMPTY_TEXT)
    logger.debug("extracted %d chars from %d pages", len(text), len(parts))
    return text


class PdfTextExtractor:
    """Async text extractor backed by PyMuPDF."""

    async def extract(self, document: bytes) -> str:
        return await asyncio.to_thread(extract_text_sync, document)
