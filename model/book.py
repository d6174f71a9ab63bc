# model/book.py
from typing import Any
from pydantic import BaseModel, ConfigDict, Field
from util.constants import EPUB_MEDIA_TYPE


class BookMedia(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mediaType: str | None = None
    mediaProfile: str | None = None
    pagesCount: int | None = None


class BookMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    # Komga sends [{name, role}], older servers plain strings
    authors: list[Any] = Field(default_factory=list)
    releaseDate: str | None = None

    def author_names(self) -> list[str]:
        out: list[str] = []
        for a in self.authors:
            name = a.get("name") if isinstance(a, dict) else a
            if name:
                out.append(str(name))
        return out


class Book(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    seriesTitle: str = ""
    url: str | None = None
    size: str | int | None = None
    sizeBytes: int | None = None
    metadata: BookMetadata | None = None
    media: BookMedia | None = None

    @property
    def is_epub(self) -> bool:
        return bool(self.media and self.media.mediaType == EPUB_MEDIA_TYPE)


class Library(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str


class BookPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    fileName: str = ""
    mediaType: str = ""
    size: int | str | None = None
    width: int | None = None
    height: int | None = None
