"""
File Upload Utility - store resume files and extract their text.

Supported formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx

Max file size: settings.max_upload_size_mb (10MB by default)
Stored as <upload_dir>/<epoch millis>-<sanitised name>, served from /uploads.
"""

import io
import logging
import os
import re
import time

from docx import Document
from fastapi import HTTPException, UploadFile
from PyPDF2 import PdfReader

from staffing_crm.core.config import get_settings

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_CONTENT_TYPE = "application/msword"

ALLOWED_CONTENT_TYPES = {PDF_CONTENT_TYPE, DOCX_CONTENT_TYPE, DOC_CONTENT_TYPE}
EXTENSION_CONTENT_TYPES = {
    ".pdf": PDF_CONTENT_TYPE,
    ".docx": DOCX_CONTENT_TYPE,
    ".doc": DOC_CONTENT_TYPE,
}
UPLOAD_URL_PREFIX = "/uploads"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[1].lower()


def sanitize_filename(filename: str) -> str:
    """Replace anything but letters, digits, dots and dashes with '_'."""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename)


def normalize_text(text: str) -> str:
    """Collapse all whitespace runs into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def resolve_content_type(file: UploadFile) -> str:
    """
    Content type of an upload, or "" when it is not PDF/Word.
    Falls back to the extension when the client sent a generic type.
    """
    if file.content_type in ALLOWED_CONTENT_TYPES:
        return file.content_type
    return EXTENSION_CONTENT_TYPES.get(get_file_extension(file.filename or ""), "")


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    reader = PdfReader(io.BytesIO(content))
    text_parts = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)
    return "\n".join(text_parts)


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    doc = Document(io.BytesIO(content))
    text_parts = []

    # Extract paragraphs
    for para in doc.paragraphs:
        if para.text.strip():
            text_parts.append(para.text)

    # Extract tables
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(" | ".join(row_text))

    return "\n".join(text_parts)


def extract_text(content: bytes, content_type: str) -> str:
    """
    Normalised text of a PDF or Word file.
    Unreadable files yield "" (the upload itself still succeeds).
    """
    try:
        if content_type == PDF_CONTENT_TYPE:
            text = extract_from_pdf(content)
        elif content_type in (DOCX_CONTENT_TYPE, DOC_CONTENT_TYPE):
            text = extract_from_docx(content)
        else:
            text = ""
    except Exception:
        logger.exception("Text extraction failed for %s upload", content_type)
        return ""
    return normalize_text(text)


def save_upload(file: UploadFile) -> dict:
    """
    Validate, store and extract an uploaded resume.

    Returns:
        dict with filename, url, original_name, size, content_type, extracted_text

    Raises:
        HTTPException(400) on missing file, wrong type or oversize
    """
    settings = get_settings()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024

    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    content_type = resolve_content_type(file)
    if not content_type:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PDF and Word documents are allowed.",
        )

    content = file.file.read()
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {settings.max_upload_size_mb}MB.",
        )

    os.makedirs(settings.upload_dir, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{sanitize_filename(file.filename)}"
    with open(os.path.join(settings.upload_dir, filename), "wb") as out:
        out.write(content)

    logger.info("Stored upload %s (%d bytes)", filename, len(content))

    return {
        "filename": filename,
        "url": f"{UPLOAD_URL_PREFIX}/{filename}",
        "original_name": file.filename,
        "size": len(content),
        "content_type": content_type,
        "extracted_text": extract_text(content, content_type),
    }
