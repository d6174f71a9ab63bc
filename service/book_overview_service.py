# service/book_overview_service.py
import asyncio
from fastapi import status
from core.komga_client import KomgaClient
from model.api import BookOverview
from util.errors import AppError
import logging

logger = logging.getLogger(__name__)


class BookOverviewService:
    def __init__(self, komga: KomgaClient) -> None:
        self._komga = komga

    async def get_overview(self, book_id: str) -> BookOverview:
        try:
            book, pages = await asyncio.gather(
                self._komga.get_book(book_id), self._komga.get_book_pages(book_id)
            )
        except AppError:
            raise
        except Exception as e:
            logger.error("overview.error book=%s err=%s", book_id, e)
            raise AppError(
                f"Could not retrieve book overview: {e}", status.HTTP_502_BAD_GATEWAY
            )
        return BookOverview(book=book, pages=pages)
