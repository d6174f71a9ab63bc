# core/pdf_text.py
from typing import List
import fitz
from core.entities import ContentUnit, ExtractionResult
from util.errors import ExtractionError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def extract_full_text(file_bytes: bytes) -> ExtractionResult:
    """
    Return the whole PDF text (pages joined by newlines) and its page count.
    Raises ExtractionError when PyMuPDF cannot open or parse the bytes.
    """
    if not file_bytes:
        raise ExtractionError("PDF text extraction failed: empty file")
    try:
        with timed(logger, "pdf.open", bytes=len(file_bytes)):
            with fitz.open(stream=file_bytes, filetype="pdf") as doc:
                pages = doc.page_count
                with timed(logger, "pdf.parse", pages=pages):
                    texts = [
                        doc.load_page(i).get_text("text") or "" for i in range(pages)
                    ]
    except Exception as e:
        # do not log payloads
        logger.error("pdf.parse.error", exc_info=True)
        raise ExtractionError(f"PDF text extraction failed: {e}") from e
    text = "\n".join(texts)
    logger.info("pdf.text pages=%d chars=%d", pages, len(text))
    return ExtractionResult(text=text, total_pages=pages)


def paginate_text(text: str, words_per_page: int = 500) -> List[ContentUnit]:
    """
    Slice extracted text into simulated pages of `words_per_page` words.
    Page numbers start at 1; a trailing partial page is kept.
    """
    words = text.split()
    per_page = max(1, words_per_page)
    out: List[ContentUnit] = []
    for start in range(0, len(words), per_page):
        number = start // per_page + 1
        out.append(
            ContentUnit(
                number=number,
                label=f"Page {number}",
                text=" ".join(words[start : start + per_page]),
            )
        )
    logger.info("pdf.paginate pages=%d words=%d", len(out), len(words))
    return out
