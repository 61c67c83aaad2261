# careerforge/pdf_extractor.py
# Server-side PDF text extraction with classified failures.

import io
import logging

from pypdf import PdfReader

from .errors import (
    EmptyDocumentError,
    ExtractionError,
    NoExtractableTextError,
    UnreadableDocumentError,
)

logger = logging.getLogger(__name__)

MAX_PAGES_DEFAULT = 50


def _read_pages(reader: PdfReader, max_pages: int) -> str:
    if reader.is_encrypted and not reader.decrypt(""):
        raise UnreadableDocumentError()
    texts = []
    for i, page in enumerate(reader.pages):
        if i >= max_pages:
            break
        texts.append(page.extract_text() or "")
    return "\n".join(texts)


def extract_text_from_pdf(data: bytes, max_pages: int = MAX_PAGES_DEFAULT) -> str:
    """
    Extract text from a PDF held in memory.

    Raises EmptyDocumentError for an empty upload, NoExtractableTextError when
    the document parses but carries no text (usually scanned images), and
    UnreadableDocumentError for anything the parser chokes on. Only the first
    `max_pages` pages are read.
    """
    if not data:
        raise EmptyDocumentError()

    try:
        with io.BytesIO(data) as stream:
            reader = PdfReader(stream)
            text = _read_pages(reader, max_pages).strip()
    except ExtractionError:
        raise
    except Exception:
        logger.exception("Error extracting text from PDF")
        raise UnreadableDocumentError()

    if not text:
        raise NoExtractableTextError()
    return text
