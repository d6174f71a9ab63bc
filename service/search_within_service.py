# service/search_within_service.py
from typing import List, Union
from config.settings import settings
from core.entities import CacheEntry
from core.komga_client import KomgaClient
from model.api import SearchGuidance, SearchResult, SearchWithinResponse
from model.book import Book
from service.cache_orchestrator import CacheOrchestrator
from service.quality_router import QualityRouter
from service.text_extraction_service import TextExtractionService
from util import functions
from util.constants import UNKNOWN_BOOK_NAME
from util.enums import ContentPath
import logging

logger = logging.getLogger(__name__)

SearchOutcome = Union[SearchWithinResponse, SearchGuidance]


class SearchWithinService:
    """
    Full-text search inside one book. EPUBs and well-extracted PDFs query the
    cached index; image-like PDFs get guidance towards page reading instead.
    """

    def __init__(
        self,
        komga: KomgaClient,
        extractor: TextExtractionService,
        chapters: CacheOrchestrator,
        pages: CacheOrchestrator,
        router: QualityRouter,
        context_chars: int = settings.SEARCH_CONTEXT_CHARS,
    ) -> None:
        self._komga = komga
        self._extractor = extractor
        self._chapters = chapters
        self._pages = pages
        self._router = router
        self._context_chars = context_chars

    async def search_within(self, book_id: str, search_term: str) -> SearchOutcome:
        book = await self._komga.get_book(book_id)
        if book.is_epub:
            entry = await self._chapters.get_or_create(
                book.id,
                lambda: self._extractor.extract_chapters(book.id),
                book.name or UNKNOWN_BOOK_NAME,
            )
            return self._search_entry(entry, search_term)

        path = await self._router.choose_path(book_id)
        logger.info("search.route book=%s path=%s", book_id, path.value)
        if path is not ContentPath.TEXT:
            return self._guidance(book, search_term)

        try:
            entry = await self._pages.get_or_create(
                book.id,
                lambda: self._extractor.extract_pages(book.id),
                book.name or UNKNOWN_BOOK_NAME,
            )
        except Exception:
            logger.error("search.pdf_text.error book=%s", book_id, exc_info=True)
            return self._guidance(book, search_term)
        return self._search_entry(entry, search_term)

    def _search_entry(self, entry: CacheEntry, search_term: str) -> SearchWithinResponse:
        results: List[SearchResult] = []
        for unit_id in entry.index.search(search_term):
            unit = entry.unit(unit_id)
            if unit is None:
                continue
            context = functions.context_window(
                unit.text, search_term, self._context_chars
            )
            if context is None:
                continue
            results.append(
                SearchResult(
                    chapterNumber=unit.number,
                    chapterTitle=unit.label,
                    context=context,
                    highlights=[search_term],
                )
            )
        logger.info(
            "search.done book=%s hits=%d", entry.document_id, len(results)
        )
        return SearchWithinResponse(
            searchTerm=search_term, totalResults=len(results), results=results
        )

    @staticmethod
    def _guidance(book: Book, search_term: str) -> SearchGuidance:
        return SearchGuidance(
            bookTitle=book.name or UNKNOWN_BOOK_NAME,
            searchTerm=search_term,
            message=(
                f'To search for "{search_term}" in this PDF book, '
                "use read_book_pages to examine specific sections"
            ),
        )
