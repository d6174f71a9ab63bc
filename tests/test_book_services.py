import asyncio
import base64
import io
import time

import pytest
from PIL import Image

from conftest import PDF_MEDIA_TYPE, make_epub, make_pdf, make_png, text_pdf
from model.api import (
    EpubChapterContent,
    PdfImagePage,
    PdfTextContent,
    SearchGuidance,
    SearchWithinResponse,
)
from service.read_pages_service import ReadPagesService
from util.constants import EPUB_MEDIA_TYPE
from util.enums import QualityTier
from util.errors import AppError, ExtractionError


def test_epub_read_returns_chapters_in_range(services, epub_book) -> None:
    out = asyncio.run(services.read_pages.read_pages("epub-1", 1, 5))

    assert [c.chapterNumber for c in out] == [1, 2]
    assert all(isinstance(c, EpubChapterContent) for c in out)
    assert out[0].title == "Chapter 1"
    assert out[0].content == "Opening Whales & ships sail on."
    assert services.stats().chapters.entries == 1


def test_epub_chapters_are_truncated(services, epub_book, komga) -> None:
    reader = ReadPagesService(
        komga,
        services.read_pages._extractor,
        services.chapters,
        services.pages,
        services.router,
        max_chapter_chars=7,
    )
    out = asyncio.run(reader.read_pages("epub-1", 1, 1))
    assert out[0].content == "Opening"


def test_epub_search_returns_context_windows(services, epub_book) -> None:
    res = asyncio.run(services.search_within.search_within("epub-1", "WHITE whale"))

    assert isinstance(res, SearchWithinResponse)
    assert res.totalResults == 1
    hit = res.results[0]
    assert hit.chapterNumber == 2
    assert "white whale" in hit.context
    assert hit.highlights == ["WHITE whale"]


def test_epub_is_extracted_once_for_read_and_search(services, epub_book, komga) -> None:
    async def runner():
        await services.read_pages.read_pages("epub-1", 1, 1)
        await services.search_within.search_within("epub-1", "whale")

    asyncio.run(runner())
    assert komga.file_calls == 1


def test_unreadable_epub_surfaces_extraction_error(services, komga) -> None:
    komga.add_book("epub-bad", "Broken", EPUB_MEDIA_TYPE, b"not a zip")
    with pytest.raises(ExtractionError):
        asyncio.run(services.read_pages.read_pages("epub-bad", 1, 1))


def test_text_pdf_reads_simulated_pages(services, komga) -> None:
    komga.add_book("pdf-1", "Notes", PDF_MEDIA_TYPE, text_pdf(page_count=2))

    out = asyncio.run(services.read_pages.read_pages("pdf-1", 1, 1))

    assert services.router.cached("pdf-1").tier is QualityTier.GOOD_TEXT
    assert len(out) == 1
    assert isinstance(out[0], PdfTextContent)
    assert out[0].pageCount == 1
    assert out[0].content.startswith("The quick brown fox")
    assert len(out[0].content.split()) == 500


def test_text_pdf_read_ignores_range_beyond_last_page(services, komga) -> None:
    komga.add_book("pdf-1", "Notes", PDF_MEDIA_TYPE, text_pdf(page_count=2))

    async def runner():
        await services.read_pages.read_pages("pdf-1", 1, 1)
        started = time.monotonic()
        out = await services.read_pages.read_pages("pdf-1", 2, 20_000_000)
        return out, time.monotonic() - started

    out, elapsed = asyncio.run(runner())

    assert elapsed < 1.0
    assert len(out) == 1
    assert out[0].pageCount == 2  # 1040 words: pages 2 and 3
    assert out[0].content.startswith("the lazy dog")


def test_text_pdf_search_reuses_verdict_and_cache(services, komga) -> None:
    komga.add_book("pdf-1", "Notes", PDF_MEDIA_TYPE, text_pdf(page_count=2))

    async def runner():
        await services.read_pages.read_pages("pdf-1", 1, 2)
        calls = komga.file_calls
        res = await services.search_within.search_within("pdf-1", "lazy dog")
        return calls, res

    calls, res = asyncio.run(runner())

    assert calls == 2  # one download to grade, one to paginate
    assert komga.file_calls == calls
    assert isinstance(res, SearchWithinResponse)
    assert res.totalResults >= 1
    assert res.results[0].chapterTitle.startswith("Page ")
    assert "lazy dog" in res.results[0].context


def test_image_pdf_reads_capped_compressed_pages(services, komga) -> None:
    komga.add_book("scan-1", "Scan", PDF_MEDIA_TYPE, make_pdf([[], [], []]))
    png = make_png(1800, 200)
    for n in range(1, 21):
        komga.page_images[("scan-1", n)] = png

    out = asyncio.run(services.read_pages.read_pages("scan-1", 1, 20))

    assert len(out) == 15
    assert all(isinstance(p, PdfImagePage) for p in out)
    assert out[0].mimeType == "image/jpeg"
    with Image.open(io.BytesIO(base64.b64decode(out[0].data))) as img:
        assert img.format == "JPEG"
        assert img.size == (1568, 174)


def test_image_pdf_skips_pages_that_fail(services, komga) -> None:
    komga.add_book("scan-1", "Scan", PDF_MEDIA_TYPE, make_pdf([[], [], []]))
    komga.page_images[("scan-1", 1)] = make_png(100, 100)
    komga.page_images[("scan-1", 3)] = make_png(100, 100)

    out = asyncio.run(services.read_pages.read_pages("scan-1", 1, 3))
    assert [p.pageNumber for p in out] == [1, 3]


def test_image_pdf_search_returns_guidance(services, komga) -> None:
    komga.add_book("scan-1", "Scan", PDF_MEDIA_TYPE, make_pdf([[]]))

    res = asyncio.run(services.search_within.search_within("scan-1", "whale"))

    assert isinstance(res, SearchGuidance)
    assert res.bookTitle == "Scan"
    assert res.searchTerm == "whale"
    assert "read_book_pages" in res.message


def test_unparseable_pdf_falls_back_to_images(services, komga) -> None:
    komga.add_book("junk-1", "Junk", PDF_MEDIA_TYPE, b"%PDF-garbage")
    komga.page_images[("junk-1", 1)] = make_png(50, 50)

    out = asyncio.run(services.read_pages.read_pages("junk-1", 1, 1))

    assert [p.pageNumber for p in out] == [1]
    verdict = services.router.cached("junk-1")
    assert verdict.tier is QualityTier.IMAGE_ONLY
    assert verdict.confidence == 0.0


def test_inverted_range_is_rejected(services, epub_book) -> None:
    with pytest.raises(AppError) as exc:
        asyncio.run(services.read_pages.read_pages("epub-1", 3, 1))
    assert exc.value.status_code == 400


def test_overview_combines_book_and_pages(services, epub_book) -> None:
    overview = asyncio.run(services.overview.get_overview("epub-1"))
    assert overview.book.name == "Moby Dick"
    assert overview.pages[0].number == 1


def test_overview_of_unknown_book_is_not_found(services) -> None:
    with pytest.raises(AppError) as exc:
        asyncio.run(services.overview.get_overview("missing"))
    assert exc.value.status_code == 404


def test_search_books_filters_libraries_and_formats(services, komga) -> None:
    from model.book import Book, Library

    komga.libraries = [Library(id="L1", name="Philosophy"), Library(id="L2", name="Comics")]
    komga.search_results = [
        Book.model_validate(
            {
                "id": f"b{i}",
                "name": f"Title {i}",
                "url": f"/books/title{i}.epub",
                "metadata": {"authors": [{"name": "Latour", "role": "writer"}], "releaseDate": "1991"},
                "media": {"mediaType": EPUB_MEDIA_TYPE, "pagesCount": 10},
            }
        )
        for i in range(12)
    ]

    results = asyncio.run(services.search_books.search_books("modern", "philo"))

    assert komga.last_search_body == {"fullTextSearch": "modern", "libraryId": ["L1"]}
    assert len(results) == 10
    assert results[0].authors == ["Latour"]
    assert results[0].format == "epub"
    assert results[0].year == "1991"


def test_search_books_swallows_upstream_errors(services, komga) -> None:
    async def boom():
        raise AppError("down", 502)

    komga.get_libraries = boom
    assert asyncio.run(services.search_books.search_books("anything")) == []
