import fitz  # PyMuPDF
from typing import Dict
from ..core.exception import InputError


def _clean(text: str) -> str:
    return text.replace("\t", " ").strip()


def _open(pdf_bytes: bytes):
    try:
        return fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise InputError(f"Unreadable PDF: {e}") from e


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Page texts of an uploaded PDF joined by blank lines. Empty pages are skipped."""
    doc = _open(pdf_bytes)
    try:
        texts = [_clean(page.get_text("text")) for page in doc]
    finally:
        doc.close()
    return "\n\n".join(t for t in texts if t)


def get_pdf_metadata(pdf_bytes: bytes) -> Dict:
    doc = _open(pdf_bytes)
    try:
        meta = doc.metadata or {}
        return {
            "title": meta.get("title") or None,
            "page_count": doc.page_count,
        }
    finally:
        doc.close()
