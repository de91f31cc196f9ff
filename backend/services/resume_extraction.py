# backend/services/resume_extraction.py
"""
Resume Text Extraction

Turns an uploaded resume into plain text for the parse_resume prompt.

Supported inputs:
- PDF: the text layer is read page by page with PyMuPDF
- Plain text: the bytes are decoded as UTF-8

Word documents are not supported; callers offer the manual paste fallback
instead.
"""

import logging
from typing import List

import fitz

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = "Please upload a PDF file or paste your resume text below"

_WORD_EXTENSIONS = (".doc", ".docx")


class UnsupportedFormat(ValueError):
    """The file is neither a PDF nor a plain-text file."""


class ExtractionFailed(RuntimeError):
    """The PDF reader could not read the document."""


def _is_pdf(filename: str, content_type: str) -> bool:
    if content_type == "application/pdf":
        return True
    return not content_type and filename.endswith(".pdf")


def _is_text(filename: str, content_type: str) -> bool:
    if "text" in content_type:
        return True
    return not content_type and not filename.endswith(_WORD_EXTENSIONS)


def extract_pdf_text(data: bytes) -> str:
    """
    Walk every page in order and join its words with single spaces.

    PyMuPDF splits text on whitespace, so runs of spaces inside a text
    fragment collapse to one and fragment boundaries are not kept. Only the
    spacing changes; every word survives in reading order. Pages are joined
    with newlines and the result is trimmed.
    """
    try:
        pages: List[str] = []
        with fitz.open(stream=data, filetype="pdf") as doc:
            for page in doc:
                # (x0, y0, x1, y1, word, block_no, line_no, word_no)
                words = page.get_text("words")
                pages.append(" ".join(word[4] for word in words))
    except Exception as e:
        logger.exception("Error extracting text from PDF")
        raise ExtractionFailed("Failed to extract text from PDF") from e

    return "\n".join(pages).strip()


def extract_text(data: bytes, filename: str = "", content_type: str = "") -> str:
    """
    Extract plain text from an uploaded resume.

    Args:
        data: Raw file bytes
        filename: Original file name, used when no content type was sent
        content_type: MIME type reported by the client

    Returns:
        The resume text. Plain-text files are returned as decoded, untrimmed.

    Raises:
        UnsupportedFormat: DOC/DOCX or any other non-PDF, non-text file
        ExtractionFailed: The PDF reader raised
    """
    name = (filename or "").lower()
    ctype = (content_type or "").lower()

    if _is_pdf(name, ctype):
        text = extract_pdf_text(data)
        logger.info(f"Extracted {len(text)} characters from PDF '{filename}'")
        return text

    if _is_text(name, ctype):
        text = data.decode("utf-8", errors="replace")
        logger.info(f"Decoded {len(text)} characters from text resume '{filename}'")
        return text

    logger.warning(f"Unsupported resume format: name='{filename}', type='{content_type}'")
    raise UnsupportedFormat(UNSUPPORTED_MESSAGE)
