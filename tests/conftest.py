"""Shared fixtures: an in-memory Komga double and builders for book files."""
from __future__ import annotations

import io
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

# Settings are read at import time; keep tests away from a developer .env
os.environ.setdefault("APP_ENV", "prod")
os.environ.setdefault("KOMGA_USERNAME", "reader")
os.environ.setdefault("KOMGA_PASSWORD", "secret")
os.environ.setdefault("CACHE_DIR", tempfile.mkdtemp(prefix="ebook-cache-"))

import fitz  # noqa: E402
import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from controller.controller_dependencies import AppServices, build_app_services  # noqa: E402
from core.entities import ContentUnit  # noqa: E402
from model.book import Book, BookPage, Library  # noqa: E402
from util.constants import EPUB_MEDIA_TYPE  # noqa: E402
from util.enums import ErrorMessage  # noqa: E402
from util.errors import AppError  # noqa: E402

PDF_MEDIA_TYPE = "application/pdf"

SENTENCE = "The quick brown fox jumps over the lazy dog near the river bank"


def make_units(count: int, prefix: str = "Chapter") -> List[ContentUnit]:
    return [
        ContentUnit(number=n, label=f"{prefix} {n}", text=f"text of unit {n} about topic{n}")
        for n in range(1, count + 1)
    ]


def make_epub(chapters: Dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip")
        zf.writestr("META-INF/container.xml", "<container/>")
        for name, markup in chapters.items():
            zf.writestr(name, markup)
    return buf.getvalue()


def make_pdf(pages: List[List[str]]) -> bytes:
    """One PDF page per entry; each entry is a list of short text lines."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((36, 48 + i * 14), line, fontsize=9)
    data = doc.tobytes()
    doc.close()
    return data


def text_pdf(page_count: int = 2, lines_per_page: int = 40) -> bytes:
    return make_pdf([[SENTENCE] * lines_per_page for _ in range(page_count)])


def make_png(width: int = 2000, height: int = 1000) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 180, 160)).save(buf, format="PNG")
    return buf.getvalue()


class FakeKomga:
    """Duck-typed stand-in for KomgaClient backed by dictionaries."""

    def __init__(self) -> None:
        self.books: Dict[str, Book] = {}
        self.files: Dict[str, bytes] = {}
        self.page_images: Dict[tuple, bytes] = {}
        self.libraries: List[Library] = []
        self.search_results: List[Book] = []
        self.last_search_body: Optional[dict] = None
        self.file_calls = 0

    def add_book(
        self, book_id: str, name: str, media_type: str, data: bytes = b""
    ) -> Book:
        book = Book.model_validate(
            {"id": book_id, "name": name, "media": {"mediaType": media_type}}
        )
        self.books[book_id] = book
        self.files[book_id] = data
        return book

    def _book(self, book_id: str) -> Book:
        if book_id not in self.books:
            raise AppError.of(ErrorMessage.BOOK_NOT_FOUND)
        return self.books[book_id]

    async def get_book(self, book_id: str) -> Book:
        return self._book(book_id)

    async def get_book_pages(self, book_id: str) -> List[BookPage]:
        self._book(book_id)
        return [BookPage(number=1, fileName="p1.jpg", mediaType="image/jpeg")]

    async def get_book_file(self, book_id: str) -> bytes:
        self._book(book_id)
        self.file_calls += 1
        return self.files[book_id]

    async def get_book_page(self, book_id: str, page_number: int) -> bytes:
        key = (book_id, page_number)
        if key not in self.page_images:
            raise AppError.of(ErrorMessage.UPSTREAM_ERROR)
        return self.page_images[key]

    async def get_libraries(self) -> List[Library]:
        return self.libraries

    async def search_books(self, search_body: dict) -> List[Book]:
        self.last_search_body = search_body
        return self.search_results


@pytest.fixture
def komga() -> FakeKomga:
    return FakeKomga()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def services(komga: FakeKomga, cache_dir: Path) -> AppServices:
    return build_app_services(komga=komga, cache_dir=cache_dir)


@pytest.fixture
def epub_book(komga: FakeKomga) -> Book:
    data = make_epub(
        {
            "OEBPS/ch01.xhtml": "<html><body><h1>Opening</h1><p>Whales &amp; ships sail on.</p></body></html>",
            "OEBPS/ch02.xhtml": "<html><body><p>The captain hunted the white whale for years.</p></body></html>",
            "OEBPS/nav.xhtml": "<nav>contents</nav>",
        }
    )
    return komga.add_book("epub-1", "Moby Dick", EPUB_MEDIA_TYPE, data)
