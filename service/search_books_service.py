# service/search_books_service.py
from typing import Any, Dict, List, Optional
from config.settings import settings
from core.komga_client import KomgaClient
from model.api import BookSearchResult
from model.book import Book
import logging

logger = logging.getLogger(__name__)

MAX_RESULTS = 10


class SearchBooksService:
    """Full-text book discovery, restricted to the configured library."""

    def __init__(
        self, komga: KomgaClient, default_library: str = settings.KOMGA_LIBRARY
    ) -> None:
        self._komga = komga
        self._default_library = default_library

    async def search_books(
        self, query: str, library_filter: Optional[str] = None
    ) -> List[BookSearchResult]:
        try:
            body = await self._build_search_query(query, library_filter)
            books = await self._komga.search_books(body)
        except Exception as e:
            logger.error("books.search.error err=%s", e)
            return []
        logger.info("books.search found=%d", len(books))
        return [self._format(b) for b in books[:MAX_RESULTS]]

    async def _build_search_query(
        self, query: str, library_filter: Optional[str]
    ) -> Dict[str, Any]:
        wanted = (library_filter or self._default_library).lower()
        libraries = await self._komga.get_libraries()
        return {
            "fullTextSearch": query,
            "libraryId": [lib.id for lib in libraries if wanted in lib.name.lower()],
        }

    @staticmethod
    def _format(book: Book) -> BookSearchResult:
        meta, media = book.metadata, book.media
        fmt = book.url.rsplit(".", 1)[-1] if book.url and "." in book.url else None
        return BookSearchResult(
            id=book.id,
            title=book.name,
            series=book.seriesTitle or "",
            authors=meta.author_names() if meta else [],
            year=meta.releaseDate if meta else None,
            pages=media.pagesCount if media else None,
            mediaType=media.mediaType if media else None,
            mediaProfile=media.mediaProfile if media else None,
            format=fmt,
            size=book.size,
            sizeBytes=book.sizeBytes,
        )
