# core/komga_client.py
from typing import Any, Dict, List, Optional
import httpx
from fastapi import status
from config.settings import settings
from model.book import Book, BookPage, Library
from util.constants import ExternalURIs
from util.enums import ErrorMessage
from util.errors import AppError
import logging

logger = logging.getLogger(__name__)


class KomgaClient:
    """
    Thin transport over the Komga REST API (HTTP basic auth).
    No business logic; upstream failures surface as AppError.
    """

    def __init__(
        self,
        base_url: str = settings.KOMGA_URL,
        username: str = settings.KOMGA_USERNAME,
        password: str = settings.KOMGA_PASSWORD,
        timeout: float = settings.KOMGA_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not username or not password:
            raise ValueError("KOMGA_USERNAME and KOMGA_PASSWORD must be configured")
        self._base_url = base_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password)
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=self._auth,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        accept: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Accept": accept} if accept else None
        try:
            async with self._client() as client:
                res = await client.request(method, path, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error("komga.request_error path=%s err=%s", path, e)
            raise AppError.of(ErrorMessage.UPSTREAM_ERROR)

        if res.status_code == status.HTTP_404_NOT_FOUND:
            logger.warning("komga.not_found path=%s", path)
            raise AppError.of(ErrorMessage.BOOK_NOT_FOUND)
        if res.is_error:
            logger.error("komga.bad_status path=%s status=%d", path, res.status_code)
            raise AppError.of(ErrorMessage.UPSTREAM_ERROR)
        return res

    async def get_libraries(self) -> List[Library]:
        res = await self._request("GET", ExternalURIs.LIBRARIES)
        return [Library.model_validate(x) for x in res.json()]

    async def search_books(self, search_body: Dict[str, Any]) -> List[Book]:
        res = await self._request("POST", ExternalURIs.BOOKS_LIST, json=search_body)
        return [Book.model_validate(x) for x in res.json().get("content") or []]

    async def get_book(self, book_id: str) -> Book:
        res = await self._request("GET", ExternalURIs.BOOK.format(book_id=book_id))
        return Book.model_validate(res.json())

    async def get_book_pages(self, book_id: str) -> List[BookPage]:
        res = await self._request(
            "GET", ExternalURIs.BOOK_PAGES.format(book_id=book_id)
        )
        return [BookPage.model_validate(x) for x in res.json()]

    async def get_book_file(self, book_id: str) -> bytes:
        res = await self._request(
            "GET", ExternalURIs.BOOK_FILE.format(book_id=book_id), accept="*/*"
        )
        logger.info("komga.file book=%s bytes=%d", book_id, len(res.content))
        return res.content

    async def get_book_page(self, book_id: str, page_number: int) -> bytes:
        res = await self._request(
            "GET",
            ExternalURIs.BOOK_PAGE.format(book_id=book_id, page_number=page_number),
            accept="image/*",
        )
        return res.content
