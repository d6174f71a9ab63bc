# model/api.py
from datetime import datetime
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field
from model.book import Book, BookPage


class BookSearchResult(BaseModel):
    id: str
    title: str
    series: str
    authors: list[str]
    year: str | None = None
    pages: int | None = None
    mediaType: str | None = None
    mediaProfile: str | None = None
    format: str | None = None
    size: str | int | None = None
    sizeBytes: int | None = None


class BookOverview(BaseModel):
    book: Book
    pages: list[BookPage]


class PdfImagePage(BaseModel):
    type: Literal["pdf-image"] = "pdf-image"
    pageNumber: int
    data: str  # base64
    mimeType: str
    searchable: Literal[False] = False


class PdfTextContent(BaseModel):
    type: Literal["pdf-text"] = "pdf-text"
    content: str
    searchable: Literal[True] = True
    pageCount: int | None = None


class EpubChapterContent(BaseModel):
    type: Literal["epub"] = "epub"
    chapterNumber: int
    title: str
    content: str
    searchable: Literal[True] = True


BookPageContent = Annotated[
    Union[PdfImagePage, PdfTextContent, EpubChapterContent],
    Field(discriminator="type"),
]


class SearchResult(BaseModel):
    chapterNumber: int
    chapterTitle: str
    context: str
    highlights: list[str]
    score: float = 1.0


class SearchWithinResponse(BaseModel):
    searchTerm: str
    totalResults: int
    results: list[SearchResult]


class SearchGuidance(BaseModel):
    bookTitle: str
    searchTerm: str
    message: str


class MemoryTierStats(BaseModel):
    entries: int
    oldestAccess: datetime | None = None


class CacheStats(BaseModel):
    chapters: MemoryTierStats
    pages: MemoryTierStats
    qualityVerdicts: int
