# service/text_extraction_service.py
import asyncio
from typing import List
from config.settings import settings
from core.entities import ContentUnit, ExtractionResult
from core.epub_text import extract_chapters
from core.komga_client import KomgaClient
from core.pdf_text import extract_full_text, paginate_text
import logging

logger = logging.getLogger(__name__)


class TextExtractionService:
    """
    Downloads a book file and turns it into text or content units.
    Parsing runs in a worker thread; failures raise (ExtractionError / AppError).
    """

    def __init__(
        self, komga: KomgaClient, words_per_page: int = settings.WORDS_PER_PAGE
    ) -> None:
        self._komga = komga
        self._words_per_page = words_per_page

    async def extract_all_text(self, book_id: str) -> ExtractionResult:
        data = await self._komga.get_book_file(book_id)
        result = await asyncio.to_thread(extract_full_text, data)
        logger.info(
            "extract.pdf book=%s pages=%d chars=%d",
            book_id,
            result.total_pages,
            len(result.text),
        )
        return result

    async def extract_pages(self, book_id: str) -> List[ContentUnit]:
        result = await self.extract_all_text(book_id)
        return paginate_text(result.text, self._words_per_page)

    async def extract_chapters(self, book_id: str) -> List[ContentUnit]:
        data = await self._komga.get_book_file(book_id)
        chapters = await asyncio.to_thread(extract_chapters, data)
        logger.info("extract.epub book=%s chapters=%d", book_id, len(chapters))
        return chapters
