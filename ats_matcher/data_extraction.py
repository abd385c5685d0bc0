"""
Data Extraction Module.

Turns uploaded or on-disk resumes into plain text. PDF files are read with
pdfplumber; everything else is treated as UTF-8 text.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO

import pdfplumber

from ats_matcher.errors import TextExtractionError

logger = logging.getLogger("ats_matcher.data_extraction")

PDF_SUFFIX = ".pdf"


def _extract_pdf_text(source: str | Path | BinaryIO) -> str:
    text_content = []

    with pdfplumber.open(source) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_content.append(page_text)

    return "\n\n".join(text_content)


def extract_text_from_pdf(pdf_path: str | Path) -> str:
    """
    Extract text content from a PDF file.

    Args:
        pdf_path: Path to the PDF file.

    Returns:
        Extracted text content as a single string.

    Raises:
        TextExtractionError: If the file is missing, not a PDF, or unreadable.
    """
    pdf_path = Path(pdf_path)

    if not pdf_path.exists():
        raise TextExtractionError(f"PDF file not found: {pdf_path}")

    if pdf_path.suffix.lower() != PDF_SUFFIX:
        raise TextExtractionError(f"File is not a PDF: {pdf_path}")

    try:
        return _extract_pdf_text(pdf_path)
    except Exception as e:
        logger.error("Failed to read PDF path=%s error=%s", pdf_path, e, exc_info=True)
        raise TextExtractionError(f"Failed to read PDF {pdf_path.name}: {e}") from e


def extract_text_from_upload(filename: str, content: bytes) -> str:
    """
    Extract text from an uploaded file's bytes.

    Args:
        filename: Original file name (used to detect PDFs).
        content: Raw file content.

    Returns:
        Extracted text.

    Raises:
        TextExtractionError: If the file cannot be read as PDF or UTF-8 text.
    """
    name = filename or "upload"

    if Path(name).suffix.lower() == PDF_SUFFIX:
        try:
            text = _extract_pdf_text(io.BytesIO(content))
        except Exception as e:
            logger.error("Failed to read uploaded PDF name=%s error=%s", name, e, exc_info=True)
            raise TextExtractionError(f"Failed to read {name}") from e
    else:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            logger.warning("Uploaded file is not UTF-8 text name=%s", name)
            raise TextExtractionError(
                f"Failed to read {name}. Please upload a text or PDF file."
            ) from e

    logger.info("Text extracted name=%s chars=%s", name, len(text))
    return text


def extract_text_from_file(path: str | Path) -> str:
    """
    Read a resume or job description file from disk.

    Args:
        path: Path to a .pdf or text file.

    Returns:
        File text.

    Raises:
        TextExtractionError: If the file is missing or unreadable.
    """
    path = Path(path)

    if not path.exists():
        raise TextExtractionError(f"File not found: {path}")

    if path.suffix.lower() == PDF_SUFFIX:
        return extract_text_from_pdf(path)

    try:
        return extract_text_from_upload(path.name, path.read_bytes())
    except OSError as e:
        raise TextExtractionError(f"Failed to read {path}: {e}") from e
