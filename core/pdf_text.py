# core/pdf_text.py
import re
from typing import List
import fitz
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

_NEWLINES = re.compile(r"\n+")


def extract_pdf_text(file_bytes: bytes) -> str:
    """
    Whole-document text with newlines collapsed to single spaces.
    If parsing fails, returns "".
    """
    try:
        parts: List[str] = []
        with timed(logger, "pdf.open"):
            with fitz.open(stream=file_bytes, filetype="pdf") as doc:
                with timed(logger, "pdf.parse", pages=doc.page_count):
                    for i in range(doc.page_count):
                        parts.append(doc.load_page(i).get_text("text") or "")
        return _NEWLINES.sub(" ", "\n".join(parts)).strip()
    except Exception:
        # do not log payloads
        logger.error("pdf.parse.error", exc_info=True)
        return ""


def chunk_words(text: str, chunk_size: int = 500, overlap: int = 50) -> List[str]:
    """
    Sliding word windows of `chunk_size` words, consecutive windows sharing
    `overlap` words. The last window ends at the final word.
    """
    if overlap >= chunk_size:
        raise ValueError("overlap must be smaller than chunk_size")
    words = text.split()
    chunks: List[str] = []
    for start in range(0, len(words), chunk_size - overlap):
        chunks.append(" ".join(words[start : start + chunk_size]))
        if start + chunk_size >= len(words):
            break
    return chunks
