# model/cache.py
from datetime import datetime
from pydantic import BaseModel, Field, TypeAdapter


class CacheMetadata(BaseModel):
    """Small per-book record; enough to decide expiry without the bulk blobs."""

    bookId: str
    processedAt: datetime
    fileSize: int
    chapterCount: int
    contentLength: int
    bookName: str


class StoredUnit(BaseModel):
    number: int = Field(ge=1)
    title: str
    content: str
    filename: str | None = None


class StoredIndexEntry(BaseModel):
    id: int
    content: str


StoredUnits = TypeAdapter(list[StoredUnit])
StoredIndex = TypeAdapter(dict[str, list[StoredIndexEntry]])
