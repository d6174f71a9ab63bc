# controller/controller_dependencies.py
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from fastapi import Request
from config.settings import settings
from core.komga_client import KomgaClient
from core.search_index import SearchIndexFactory, make_index_factory
from repository.memory_cache_repository import MemoryCacheRepository
from repository.namespaces import CHAPTERS, PAGES
from repository.persistent_cache_repository import PersistentCacheRepository
from service.book_overview_service import BookOverviewService
from service.cache_orchestrator import CacheOrchestrator
from service.quality_router import QualityDetector, QualityRouter
from service.read_pages_service import ReadPagesService
from service.search_books_service import SearchBooksService
from service.search_within_service import SearchWithinService
from service.text_extraction_service import TextExtractionService
from model.api import CacheStats
import logging

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """
    Process-owned state: both caches, the quality verdicts and the services
    built on them. Created in the app lifespan, torn down by aclose().
    """

    komga: KomgaClient
    chapters: CacheOrchestrator
    pages: CacheOrchestrator
    router: QualityRouter
    search_books: SearchBooksService
    overview: BookOverviewService
    read_pages: ReadPagesService
    search_within: SearchWithinService

    async def cleanup_expired(self) -> int:
        removed = 0
        for orchestrator in (self.chapters, self.pages):
            removed += await orchestrator.disk.cleanup_expired()
        return removed

    def stats(self) -> CacheStats:
        return CacheStats(
            chapters=self.chapters.stats(),
            pages=self.pages.stats(),
            qualityVerdicts=len(self.router),
        )

    async def aclose(self) -> None:
        for orchestrator in (self.chapters, self.pages):
            await orchestrator.aclose()
        self.router.clear()


def build_app_services(
    komga: Optional[KomgaClient] = None,
    cache_dir: Optional[str | Path] = None,
    index_factory: Optional[SearchIndexFactory] = None,
) -> AppServices:
    komga = komga or KomgaClient()
    root = Path(cache_dir or settings.CACHE_DIR).expanduser()
    factory = index_factory or make_index_factory()

    chapters = CacheOrchestrator(
        CHAPTERS,
        MemoryCacheRepository(),
        PersistentCacheRepository(root / CHAPTERS, unit_key=CHAPTERS),
        factory,
    )
    pages = CacheOrchestrator(
        PAGES,
        MemoryCacheRepository(),
        PersistentCacheRepository(root / PAGES, unit_key=PAGES),
        factory,
    )
    extractor = TextExtractionService(komga)
    router = QualityRouter(QualityDetector(extractor))
    logger.info("services.built cache_dir=%s", root)
    return AppServices(
        komga=komga,
        chapters=chapters,
        pages=pages,
        router=router,
        search_books=SearchBooksService(komga),
        overview=BookOverviewService(komga),
        read_pages=ReadPagesService(komga, extractor, chapters, pages, router),
        search_within=SearchWithinService(komga, extractor, chapters, pages, router),
    )


def get_app_services(request: Request) -> AppServices:
    return request.app.state.services


def get_search_books_service(request: Request) -> SearchBooksService:
    return get_app_services(request).search_books


def get_book_overview_service(request: Request) -> BookOverviewService:
    return get_app_services(request).overview


def get_read_pages_service(request: Request) -> ReadPagesService:
    return get_app_services(request).read_pages


def get_search_within_service(request: Request) -> SearchWithinService:
    return get_app_services(request).search_within
