import fitz
import pytest

from scholar_sync.errors import ExtractionError
from scholar_sync.extractor import EMPTY_TEXT, PdfTextExtractor, clean_text, extract_text_sync


def make_pdf(pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def test_clean_text_basic():
    s = "This  is a\r\n\r\n\r\n\r\ntest\xa0string."
    out = clean_text(s)
    assert "\r" not in out
    assert "\xa0" not in out
    assert "test string" in out
    assert "\n\n\n" not in out


def test_pages_joined_in_order_with_blank_line():
    data = make_pdf(["Title: Page One", "Second page body"])
    text = extract_text_sync(data)
    assert text.index("Page One") < text.index("Second page body")
    assert "\n\n" in text


def test_invalid_bytes_raise_extraction_error():
    with pytest.raises(ExtractionError) as info:
        extract_text_sync(b"not a pdf at all")
    assert "valid PDF" in str(info.value)


def test_empty_bytes_raise_extraction_error():
    with pytest.raises(ExtractionError):
        extract_text_sync(b"")


def test_image_only_document_has_no_text():
    data = make_pdf([None, None])
    with pytest.raises(ExtractionError) as info:
        extract_text_sync(data)
    assert str(info.value) == EMPTY_TEXT


@pytest.mark.asyncio
async def test_async_extractor_runs_in_thread():
    data = make_pdf(["Async extraction works"])
    text = await PdfTextExtractor().extract(data)
    assert "Async extraction works" in text
