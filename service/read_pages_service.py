# service/read_pages_service.py
import asyncio
from typing import List
from config.settings import settings
from core.image_compression import JPEG_MIME, compress_to_base64
from core.komga_client import KomgaClient
from model.api import BookPageContent, EpubChapterContent, PdfImagePage, PdfTextContent
from model.book import Book
from service.cache_orchestrator import CacheOrchestrator
from service.quality_router import QualityRouter
from service.text_extraction_service import TextExtractionService
from util import functions
from util.constants import UNKNOWN_BOOK_NAME
from util.enums import ContentPath, ErrorMessage
from util.errors import AppError
import logging

logger = logging.getLogger(__name__)


class ReadPagesService:
    """
    Serves a page range as text or images.

    - EPUB: chapters from the chapter cache (always text).
    - PDF graded good/fair: simulated pages from the page cache.
    - PDF graded poor/image-only, or not gradable: recompressed page scans.
    """

    def __init__(
        self,
        komga: KomgaClient,
        extractor: TextExtractionService,
        chapters: CacheOrchestrator,
        pages: CacheOrchestrator,
        router: QualityRouter,
        max_pages: int = settings.MAX_PAGES_PER_READ,
        max_chapter_chars: int = settings.MAX_CHAPTER_CHARS,
    ) -> None:
        self._komga = komga
        self._extractor = extractor
        self._chapters = chapters
        self._pages = pages
        self._router = router
        self._max_pages = max_pages
        self._max_chapter_chars = max_chapter_chars

    async def read_pages(
        self, book_id: str, start_page: int, end_page: int
    ) -> List[BookPageContent]:
        if end_page < start_page:
            raise AppError.of(ErrorMessage.INVALID_PAGE_RANGE)
        book = await self._komga.get_book(book_id)
        if book.is_epub:
            return await self._read_epub_chapters(book, start_page, end_page)

        path = await self._router.choose_path(book_id)
        logger.info("read.route book=%s path=%s", book_id, path.value)
        if path is ContentPath.TEXT:
            return await self._read_pdf_text(book, start_page, end_page)
        return await self._read_pdf_images(book_id, start_page, end_page)

    def _span(self, start_page: int, end_page: int) -> range:
        count = min(end_page - start_page + 1, self._max_pages)
        return range(start_page, start_page + count)

    async def _read_pdf_text(
        self, book: Book, start_page: int, end_page: int
    ) -> List[BookPageContent]:
        try:
            entry = await self._pages.get_or_create(
                book.id,
                lambda: self._extractor.extract_pages(book.id),
                book.name or UNKNOWN_BOOK_NAME,
            )
        except Exception:
            # Stay on the text contract; an empty answer beats a mixed one
            logger.error("read.pdf_text.error book=%s", book.id, exc_info=True)
            return []

        units = [u for u in entry.units if start_page <= u.number <= end_page]
        if not units:
            return []
        return [
            PdfTextContent(
                content="\n\n".join(u.text for u in units),
                pageCount=len(units),
            )
        ]

    async def _read_pdf_images(
        self, book_id: str, start_page: int, end_page: int
    ) -> List[BookPageContent]:
        pages: List[BookPageContent] = []
        for page_number in self._span(start_page, end_page):
            try:
                raw = await self._komga.get_book_page(book_id, page_number)
                data = await asyncio.to_thread(
                    compress_to_base64,
                    raw,
                    settings.IMAGE_MAX_WIDTH,
                    settings.IMAGE_JPEG_QUALITY,
                )
            except Exception:
                logger.warning(
                    "read.page_image.skip book=%s page=%d", book_id, page_number, exc_info=True
                )
                continue
            pages.append(
                PdfImagePage(pageNumber=page_number, data=data, mimeType=JPEG_MIME)
            )
        logger.info("read.images book=%s pages=%d", book_id, len(pages))
        return pages

    async def _read_epub_chapters(
        self, book: Book, start_page: int, end_page: int
    ) -> List[BookPageContent]:
        entry = await self._chapters.get_or_create(
            book.id,
            lambda: self._extractor.extract_chapters(book.id),
            book.name or UNKNOWN_BOOK_NAME,
        )
        out: List[BookPageContent] = []
        for number in self._span(start_page, end_page):
            chapter = entry.unit(number)
            if chapter is None:
                continue
            out.append(
                EpubChapterContent(
                    chapterNumber=number,
                    title=chapter.label,
                    content=functions.clip_chars(chapter.text, self._max_chapter_chars),
                )
            )
        return out
