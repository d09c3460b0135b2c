"""Plain-text extraction for uploaded résumé files (.pdf, .docx, .txt)."""

from __future__ import annotations

import io
import logging
from pathlib import PurePath

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from portfolio_forge.config import Settings, get_settings
from portfolio_forge.errors import ValidationError

logger = logging.getLogger(__name__)

__all__ = ["SUPPORTED_EXTENSIONS", "extract_resume_text"]

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt")


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    lines = [paragraph.text for paragraph in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def extract_resume_text(filename: str, data: bytes, settings: Settings | None = None) -> str:
    """Return the plain text of an uploaded résumé.

    Args:
        filename: Original file name; its extension selects the extractor.
        data: Raw file bytes.
        settings: Supplies the upload size cap.

    Raises:
        ValidationError: Unsupported type, oversized, unreadable or empty file.
    """
    settings = settings or get_settings()
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        supported = ", ".join(SUPPORTED_EXTENSIONS)
        msg = f"Unsupported resume type {suffix or '(none)'!r}. Use one of: {supported}"
        raise ValidationError(msg)
    if len(data) > settings.max_resume_bytes:
        raise ValidationError(f"Resume exceeds the {settings.max_resume_bytes} byte limit")

    try:
        if suffix == ".pdf":
            text = _pdf_text(data)
        elif suffix == ".docx":
            text = _docx_text(data)
        else:
            text = data.decode("utf-8", errors="replace")
    except (PdfReadError, ValueError, KeyError, OSError) as e:
        logger.warning("Could not read resume %s: %s", filename, e)
        raise ValidationError(f"Could not read {filename}: {e}") from e

    text = text.strip()
    if not text:
        raise ValidationError(f"No text could be extracted from {filename}")
    return text
