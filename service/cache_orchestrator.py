# service/cache_orchestrator.py
import asyncio
from typing import Awaitable, Callable, Iterable, Sequence, Set
from core.entities import CacheEntry, ContentUnit, PersistentRecord, SearchIndex
from core.search_index import SearchIndexFactory
from model.api import MemoryTierStats
from repository.memory_cache_repository import MemoryCacheRepository
from repository.persistent_cache_repository import PersistentCacheRepository
from util.constants import UNKNOWN_BOOK_NAME
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

UnitsProducer = Callable[[], Awaitable[Sequence[ContentUnit]]]


class CacheOrchestrator:
    """
    Hybrid memory + disk get-or-create for one kind of content unit.

    Flow:
    - memory hit  -> touch, return (no disk, no producer)
    - disk hit    -> rebuild the index from units, keep in memory, return
    - cold        -> await producer (errors propagate), index, keep in memory,
                     return, then persist in the background (errors logged)
    Concurrent cold calls for the same id each run the producer; the last
    one to finish owns the memory slot.
    """

    def __init__(
        self,
        name: str,
        memory: MemoryCacheRepository,
        disk: PersistentCacheRepository,
        index_factory: SearchIndexFactory,
    ) -> None:
        self._name = name
        self._memory = memory
        self._disk = disk
        self._index_factory = index_factory
        self._pending: Set[asyncio.Task] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def disk(self) -> PersistentCacheRepository:
        return self._disk

    def build_index(self, units: Iterable[ContentUnit]) -> SearchIndex:
        index = self._index_factory()
        for unit in units:
            index.add(unit.number, unit.text)
        return index

    async def get_or_create(
        self,
        book_id: str,
        producer: UnitsProducer,
        display_name: str = UNKNOWN_BOOK_NAME,
    ) -> CacheEntry:
        cached = self._memory.get(book_id)
        if cached is not None:
            return cached

        record = await self._disk.get_from_disk(book_id)
        if record is not None:
            logger.info("cache.%s.disk_load book=%s", self._name, book_id)
            entry = CacheEntry(
                document_id=book_id,
                units=record.units,
                index=self.build_index(record.units),
            )
            self._memory.put(entry)
            return entry

        logger.info("cache.%s.miss book=%s", self._name, book_id)
        with timed(logger, f"cache.{self._name}.produce", book=book_id):
            units = tuple(await producer())
        entry = CacheEntry(
            document_id=book_id, units=units, index=self.build_index(units)
        )
        self._memory.put(entry)
        logger.info("cache.%s.stored book=%s units=%d", self._name, book_id, len(units))

        self._schedule_persist(
            PersistentRecord.from_units(book_id, units, display_name or UNKNOWN_BOOK_NAME)
        )
        return entry

    def _schedule_persist(self, record: PersistentRecord) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, record: PersistentRecord) -> None:
        try:
            await self._disk.save_to_disk(record)
        except Exception:
            logger.error(
                "cache.%s.persist.error book=%s",
                self._name,
                record.document_id,
                exc_info=True,
            )

    async def flush(self) -> None:
        """Wait for background disk writes started so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def clear(self) -> None:
        self._memory.clear()

    def stats(self) -> MemoryTierStats:
        return self._memory.stats()

    async def aclose(self) -> None:
        await self.flush()
        self.clear()
