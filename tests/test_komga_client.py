import asyncio

import httpx
import pytest

from core.komga_client import KomgaClient
from util.errors import AppError


def _client(handler) -> KomgaClient:
    return KomgaClient(
        base_url="http://komga.test/",
        username="reader",
        password="secret",
        transport=httpx.MockTransport(handler),
    )


def test_requires_credentials() -> None:
    with pytest.raises(ValueError):
        KomgaClient(username="", password="")


def test_get_book_sends_basic_auth_and_parses() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization", "")
        seen["path"] = request.url.path
        return httpx.Response(
            200,
            json={
                "id": "b1",
                "name": "Book",
                "seriesTitle": "S",
                "media": {"mediaType": "application/epub+zip", "pagesCount": 3},
                "unknownField": True,
            },
        )

    book = asyncio.run(_client(handler).get_book("b1"))

    assert seen["path"] == "/api/v1/books/b1"
    assert seen["auth"].startswith("Basic ")
    assert book.is_epub
    assert book.media.pagesCount == 3


def test_binary_endpoints_return_bytes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/file"):
            assert request.headers["accept"] == "*/*"
            return httpx.Response(200, content=b"PK\x03\x04")
        assert request.headers["accept"] == "image/*"
        return httpx.Response(200, content=b"\x89PNG")

    client = _client(handler)
    assert asyncio.run(client.get_book_file("b1")) == b"PK\x03\x04"
    assert asyncio.run(client.get_book_page("b1", 4)) == b"\x89PNG"


def test_search_books_posts_body_and_reads_content() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/v1/books/list"
        return httpx.Response(200, json={"content": [{"id": "b1", "name": "One"}]})

    books = asyncio.run(_client(handler).search_books({"fullTextSearch": "x"}))
    assert [b.id for b in books] == ["b1"]


def test_not_found_maps_to_404() -> None:
    client = _client(lambda request: httpx.Response(404))
    with pytest.raises(AppError) as exc:
        asyncio.run(client.get_book("missing"))
    assert exc.value.status_code == 404


def test_server_error_and_transport_error_map_to_502() -> None:
    with pytest.raises(AppError) as exc:
        asyncio.run(_client(lambda request: httpx.Response(500)).get_libraries())
    assert exc.value.status_code == 502

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AppError) as exc:
        asyncio.run(_client(unreachable).get_book_pages("b1"))
    assert exc.value.status_code == 502
