# controller/book_controller.py
from typing import List, Optional, Union
from fastapi import APIRouter, Depends, Query
from model.api import (
    BookOverview,
    BookPageContent,
    BookSearchResult,
    CacheStats,
    SearchGuidance,
    SearchWithinResponse,
)
from service.book_overview_service import BookOverviewService
from service.read_pages_service import ReadPagesService
from service.search_books_service import SearchBooksService
from service.search_within_service import SearchWithinService
from util.constants import InternalURIs
from controller.controller_dependencies import (
    AppServices,
    get_app_services,
    get_book_overview_service,
    get_read_pages_service,
    get_search_books_service,
    get_search_within_service,
)

book_router = APIRouter()


@book_router.get(InternalURIs.SEARCH_BOOKS, response_model=List[BookSearchResult])
async def search_books(
    query: str = Query(..., min_length=1),
    library_filter: Optional[str] = Query(default=None),
    service: SearchBooksService = Depends(get_search_books_service),
) -> List[BookSearchResult]:
    return await service.search_books(query, library_filter)


@book_router.get(InternalURIs.BOOK_OVERVIEW, response_model=BookOverview)
async def book_overview(
    book_id: str,
    service: BookOverviewService = Depends(get_book_overview_service),
) -> BookOverview:
    return await service.get_overview(book_id)


@book_router.get(InternalURIs.READ_PAGES, response_model=List[BookPageContent])
async def read_pages(
    book_id: str,
    start_page: int = Query(..., ge=1),
    end_page: int = Query(..., ge=1),
    service: ReadPagesService = Depends(get_read_pages_service),
):
    return await service.read_pages(book_id, start_page, end_page)


@book_router.get(
    InternalURIs.SEARCH_WITHIN,
    response_model=Union[SearchWithinResponse, SearchGuidance],
)
async def search_within(
    book_id: str,
    search_term: str = Query(..., min_length=1),
    service: SearchWithinService = Depends(get_search_within_service),
):
    return await service.search_within(book_id, search_term)


@book_router.get(InternalURIs.CACHE_STATS, response_model=CacheStats)
async def cache_stats(
    services: AppServices = Depends(get_app_services),
) -> CacheStats:
    return services.stats()
