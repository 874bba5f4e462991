from __future__ import annotations

import codecs
import io
from pathlib import Path

from pypdf import PdfReader

try:
    import docx  # type: ignore
except Exception:  # pragma: no cover
    docx = None


def extract_text_from_bytes(filename: str, data: bytes) -> tuple[str, str]:
    ext = Path(filename).suffix.lower()

    if ext == ".pdf":
        return extract_pdf_text(data), "pdf"

    if ext == ".docx":
        if docx is None:
            raise ValueError("python-docx is required for .docx support")
        return _extract_docx(data), "docx"

    return decode_text(data), "text"


def decode_text(data: bytes) -> str:
    if data[:2] in (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE):
        return data.decode("utf-16", errors="replace").strip()
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("latin-1")
    return text.strip()


def extract_pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages: list[str] = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")
    return "\n\n".join(pages).strip()


def _extract_docx(data: bytes) -> str:
    assert docx is not None
    document = docx.Document(io.BytesIO(data))
    lines = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    return "\n".join(lines).strip()
