from __future__ import annotations

import logging
from io import BytesIO

from pypdf import PdfReader

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class ResumeTextError(ValueError):
    """No usable resume text could be obtained."""


class UploadValidationError(ValueError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def validate_pdf_upload(filename: str, content: bytes, max_bytes: int) -> None:
    name = (filename or "").strip()
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if ext != "pdf":
        raise UploadValidationError("Only PDF files are supported.")
    if not content:
        raise UploadValidationError("No file provided.")
    if len(content) > max_bytes:
        raise UploadValidationError(
            f"File too large. Maximum allowed size is {max_bytes // (1024 * 1024)} MB.",
            status_code=413,
        )
    if not content.startswith(PDF_MAGIC):
        raise UploadValidationError("Invalid PDF file.")


def extract_text_from_pdf(content: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(content))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
    except Exception as exc:
        logger.warning("pdf_text_extraction_failed size=%s: %s", len(content), exc)
        raise ResumeTextError(f"Failed to extract text from PDF: {exc}") from exc

    if not text_parts:
        raise ResumeTextError("PDF parsing returned no text content.")
    text = "\n".join(text_parts)
    logger.info("pdf_text_extracted pages=%s text_len=%s", len(text_parts), len(text))
    return text
