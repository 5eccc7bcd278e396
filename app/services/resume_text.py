import io
import logging
import re

import pdfplumber
from docx import Document

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"


class ResumeTextError(Exception):
    """Raised when a resume file cannot be turned into text."""


def _normalize(text: str) -> str:
    text = text.replace("\r", "\n")
    text = re.sub(r"[ \t]{2,}", " ", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def extract_text_from_pdf(content: bytes) -> str:
    pages: list[str] = []
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    return "\n".join(pages)


def extract_text_from_docx(content: bytes) -> str:
    doc = Document(io.BytesIO(content))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def extract_text(content: bytes, filename: str, content_type: str | None) -> str:
    """Text from a PDF, DOCX or TXT upload. Raises ResumeTextError on unsupported or unreadable files."""
    name = (filename or "").lower()
    try:
        if content_type == PDF_MIME or name.endswith(".pdf"):
            text = extract_text_from_pdf(content)
        elif content_type == DOCX_MIME or name.endswith(".docx"):
            text = extract_text_from_docx(content)
        elif content_type == TXT_MIME or name.endswith(".txt"):
            text = content.decode("utf-8", errors="ignore")
        else:
            raise ResumeTextError("Unsupported file type. Please upload PDF, DOCX, or TXT")
    except ResumeTextError:
        raise
    except Exception as e:
        logger.warning("Text extraction failed for %s: %s", filename, e)
        raise ResumeTextError("Could not read the uploaded file") from e
    return _normalize(text)
