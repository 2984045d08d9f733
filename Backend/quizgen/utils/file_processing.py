import io
import logging
from enum import Enum
from typing import Callable, Optional

import fitz  # PyMuPDF
import docx
from docx.table import Table

from quizgen.errors import ExtractionFailure, UnsupportedType
from quizgen.schemas import Document

logger = logging.getLogger(__name__)


class DocumentKind(str, Enum):
    pdf = "pdf"
    docx = "docx"
    txt = "txt"


# Kinds are checked in declaration order: PDF, DOCX, TXT
MIME_TYPES = {
    DocumentKind.pdf: "application/pdf",
    DocumentKind.docx: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    DocumentKind.txt: "text/plain",
}

SUFFIXES = {
    DocumentKind.pdf: ".pdf",
    DocumentKind.docx: ".docx",
    DocumentKind.txt: ".txt",
}


def detect_kind(filename: Optional[str], content_type: Optional[str]) -> Optional[DocumentKind]:
    """Resolve the document kind; a kind matches on its MIME type or its filename suffix."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    name = (filename or "").strip().lower()
    for kind in DocumentKind:
        if mime == MIME_TYPES[kind] or name.endswith(SUFFIXES[kind]):
            return kind
    return None


def process_pdf(file_bytes: bytes) -> str:
    """Extract the text layer page by page, one line per page."""
    try:
        doc = fitz.open(stream=file_bytes, filetype="pdf")
    except Exception as e:
        logger.warning(f"Could not open PDF: {str(e)}")
        raise ExtractionFailure(
            "Could not read the PDF. The file may be corrupt or not a real PDF."
        ) from e

    with doc:
        if doc.needs_pass:
            raise ExtractionFailure(
                "The PDF is password protected. Remove the password and upload it again."
            )
        try:
            pages = []
            for page_number in range(doc.page_count):
                words = doc.load_page(page_number).get_text("words")
                pages.append(" ".join(word[4] for word in words))
        except Exception as e:
            logger.warning(f"PDF text extraction failed: {str(e)}")
            raise ExtractionFailure(
                "Failed to read text from the PDF. The file may be damaged."
            ) from e

    logger.debug(f"Read {len(pages)} PDF pages")
    return "\n".join(pages).strip()


def _table_lines(table) -> list[str]:
    lines = []
    seen = []
    for row in table.rows:
        for cell in row.cells:
            # merged cells repeat across the grid
            if any(cell._tc is tc for tc in seen):
                continue
            seen.append(cell._tc)
            if cell.text.strip():
                lines.append(cell.text)
    return lines


def process_docx(file_bytes: bytes) -> str:
    """Raw text of a Word document, paragraphs and tables in document order."""
    try:
        document = docx.Document(io.BytesIO(file_bytes))
        lines = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                lines.extend(_table_lines(block))
            else:
                lines.append(block.text)
    except Exception as e:
        logger.warning(f"DOCX extraction failed: {str(e)}")
        raise ExtractionFailure(
            "Could not read the Word document. Make sure it is a valid .docx file."
        ) from e
    return "\n".join(lines).strip()


def process_txt(file_bytes: bytes) -> str:
    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning(f"Text decoding failed: {str(e)}")
        raise ExtractionFailure(
            "Failed to read the text file. Save it as UTF-8 and try again."
        ) from e
    return text.strip()


READERS: dict[DocumentKind, Callable[[bytes], str]] = {
    DocumentKind.pdf: process_pdf,
    DocumentKind.docx: process_docx,
    DocumentKind.txt: process_txt,
}


def extract_text(document: Document) -> str:
    """Return the trimmed plain text of a PDF, DOCX or TXT document."""
    kind = detect_kind(document.filename, document.content_type)
    if kind is None:
        raise UnsupportedType(
            f"Unsupported file type: {document.content_type or document.filename or 'unknown'}. "
            "Upload a PDF, DOCX or TXT file."
        )
    logger.debug(f"Extracting {document.filename!r} as {kind.value}")
    return READERS[kind](document.content)
