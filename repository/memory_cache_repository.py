# repository/memory_cache_repository.py
from typing import Dict, Optional
from core.entities import CacheEntry
from model.api import MemoryTierStats


class MemoryCacheRepository:
    """
    In-process map of book id -> prepared CacheEntry.

    Entries live until clear() (process teardown); there is no eviction, a
    session touches few books and every hit must stay a hit.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, book_id: str) -> bool:
        return book_id in self._entries

    def get(self, book_id: str) -> Optional[CacheEntry]:
        entry = self._entries.get(book_id)
        if entry is not None:
            entry.touch()
        return entry

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.document_id] = entry

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> MemoryTierStats:
        oldest = min((e.last_accessed for e in self._entries.values()), default=None)
        return MemoryTierStats(entries=len(self._entries), oldestAccess=oldest)
