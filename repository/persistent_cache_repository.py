# repository/persistent_cache_repository.py
import asyncio
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple
from core.entities import ContentUnit, PersistentRecord, RecordMetadata, utcnow
from model.cache import CacheMetadata, StoredIndex, StoredIndexEntry, StoredUnit, StoredUnits
from repository.namespaces import CHAPTERS, INDEX_SUFFIX, META_SUFFIX
import logging

logger = logging.getLogger(__name__)

# Fixed wall-clock retention, measured from processedAt.
EXPIRY = timedelta(hours=24)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def is_expired(processed_at: datetime, now: Optional[datetime] = None) -> bool:
    if processed_at.tzinfo is None:
        processed_at = processed_at.replace(tzinfo=timezone.utc)
    return (now or utcnow()) - processed_at > EXPIRY


class PersistentCacheRepository:
    """
    On-disk cache of processed books, one directory per unit kind.

    Flow:
    - Three JSON blobs per book: `<id>_meta.json`, `<id>_<kind>.json`, `<id>_index.json`.
    - Reads treat expired (>24h) or unparseable records as absent and delete them.
    - Writes are not atomic as a group; a partial triple is healed by the next read.
    - cleanup_expired() scans metadata only and never raises.
    """

    def __init__(self, cache_dir: str | Path, unit_key: str = CHAPTERS) -> None:
        self._dir = Path(cache_dir).expanduser()
        self._unit_key = unit_key

    @property
    def directory(self) -> Path:
        return self._dir

    @staticmethod
    def _stem(book_id: str) -> str:
        return _UNSAFE.sub("_", book_id)

    def meta_path(self, book_id: str) -> Path:
        return self._dir / f"{self._stem(book_id)}{META_SUFFIX}"

    def units_path(self, book_id: str) -> Path:
        return self._dir / f"{self._stem(book_id)}_{self._unit_key}.json"

    def index_path(self, book_id: str) -> Path:
        return self._dir / f"{self._stem(book_id)}{INDEX_SUFFIX}"

    def _paths(self, book_id: str) -> Tuple[Path, Path, Path]:
        return self.meta_path(book_id), self.units_path(book_id), self.index_path(book_id)

    async def ensure_cache_directory(self) -> None:
        await asyncio.to_thread(self._dir.mkdir, parents=True, exist_ok=True)

    # ---------------- Read ----------------

    async def get_from_disk(self, book_id: str) -> Optional[PersistentRecord]:
        meta_path, units_path, index_path = self._paths(book_id)
        if not await asyncio.to_thread(meta_path.exists):
            return None

        try:
            meta = CacheMetadata.model_validate_json(
                await asyncio.to_thread(meta_path.read_bytes)
            )
            if is_expired(meta.processedAt):
                logger.info("cache.disk.expired book=%s kind=%s", book_id, self._unit_key)
                await self.remove(book_id)
                return None

            units_raw, index_raw = await asyncio.gather(
                asyncio.to_thread(units_path.read_bytes),
                asyncio.to_thread(index_path.read_bytes),
            )
            units = StoredUnits.validate_json(units_raw)
            index = StoredIndex.validate_json(index_raw)
            if self._unit_key not in index:
                raise ValueError(f"index blob has no '{self._unit_key}' entries")
        except Exception:
            logger.warning(
                "cache.disk.corrupt book=%s kind=%s", book_id, self._unit_key, exc_info=True
            )
            await self.remove(book_id)
            return None

        logger.info(
            "cache.disk.hit book=%s kind=%s units=%d", book_id, self._unit_key, len(units)
        )
        return PersistentRecord(
            document_id=meta.bookId,
            units=tuple(
                ContentUnit(
                    number=u.number, label=u.title, text=u.content, filename=u.filename
                )
                for u in units
            ),
            index_rebuild_data=tuple((e.id, e.content) for e in index[self._unit_key]),
            processed_at=meta.processedAt,
            file_size=meta.fileSize,
            metadata=RecordMetadata(
                display_name=meta.bookName,
                unit_count=meta.chapterCount,
                content_length=meta.contentLength,
            ),
        )

    # ---------------- Write ----------------

    async def save_to_disk(self, record: PersistentRecord) -> None:
        """
        Write all three blobs. On failure the partial triple is removed and
        the error re-raised; callers wanting best-effort semantics catch it.
        """
        book_id = record.document_id
        meta_path, units_path, index_path = self._paths(book_id)
        try:
            await self.ensure_cache_directory()
            meta = CacheMetadata(
                bookId=book_id,
                processedAt=record.processed_at,
                fileSize=record.file_size,
                chapterCount=record.metadata.unit_count,
                contentLength=record.metadata.content_length,
                bookName=record.metadata.display_name,
            )
            units = [
                StoredUnit(
                    number=u.number, title=u.label, content=u.text, filename=u.filename
                )
                for u in record.units
            ]
            index = {
                self._unit_key: [
                    StoredIndexEntry(id=uid, content=text)
                    for uid, text in record.index_rebuild_data
                ]
            }
            # Let every write settle before cleanup so none lands after remove()
            results = await asyncio.gather(
                asyncio.to_thread(
                    meta_path.write_bytes,
                    meta.model_dump_json(indent=2).encode("utf-8"),
                ),
                asyncio.to_thread(
                    units_path.write_bytes,
                    StoredUnits.dump_json(units, indent=2, exclude_none=True),
                ),
                asyncio.to_thread(
                    index_path.write_bytes, StoredIndex.dump_json(index, indent=2)
                ),
                return_exceptions=True,
            )
            for outcome in results:
                if isinstance(outcome, BaseException):
                    raise outcome
        except Exception:
            logger.error("cache.disk.save.error book=%s kind=%s", book_id, self._unit_key)
            await self.remove(book_id)
            raise
        logger.info(
            "cache.disk.saved book=%s kind=%s units=%d",
            book_id,
            self._unit_key,
            record.metadata.unit_count,
        )

    # ---------------- Housekeeping ----------------

    async def remove(self, book_id: str) -> None:
        """Best-effort delete of the triple; missing or locked files are left."""
        for path in self._paths(book_id):
            try:
                await asyncio.to_thread(path.unlink, missing_ok=True)
            except OSError:
                logger.debug("cache.disk.remove.skip file=%s", path.name, exc_info=True)

    async def cleanup_expired(self) -> int:
        """Remove expired or unreadable records; return how many were removed."""
        try:
            await self.ensure_cache_directory()
            meta_files: List[Path] = await asyncio.to_thread(
                lambda: sorted(self._dir.glob(f"*{META_SUFFIX}"))
            )
        except Exception:
            logger.error("cache.cleanup.error dir=%s", self._dir, exc_info=True)
            return 0

        removed = 0
        for meta_path in meta_files:
            stem = meta_path.name[: -len(META_SUFFIX)]
            try:
                meta = CacheMetadata.model_validate_json(
                    await asyncio.to_thread(meta_path.read_bytes)
                )
                expired = is_expired(meta.processedAt)
            except Exception:
                logger.warning("cache.cleanup.corrupt file=%s", meta_path.name)
                expired = True
            if expired:
                await self.remove(stem)
                removed += 1

        if removed:
            logger.info("cache.cleanup removed=%d kind=%s", removed, self._unit_key)
        return removed
