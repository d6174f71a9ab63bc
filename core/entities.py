# core/entities.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, Tuple
from util.enums import QualityTier


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchIndex(Protocol):
    """
    Full-text capability the caches rely on. Implementations are free to rank
    however they like; callers only assume every returned id matched.
    """

    def add(self, unit_id: int, text: str) -> None: ...

    def search(self, query: str) -> List[int]: ...


@dataclass(frozen=True)
class QualityAssessment:
    tier: QualityTier
    confidence: float  # 0..1
    text_density: float  # chars per page
    word_quality: float  # average word length
    detected_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ContentUnit:
    """
    A chapter (EPUB) or a simulated fixed-size page (PDF text).
    Numbers are 1-based and contiguous within a document.
    """

    number: int
    label: str
    text: str
    searchable: bool = True
    filename: Optional[str] = None


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    total_pages: int


@dataclass
class CacheEntry:
    document_id: str
    units: Tuple[ContentUnit, ...]
    index: SearchIndex
    last_accessed: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.last_accessed = utcnow()

    def unit(self, number: int) -> Optional[ContentUnit]:
        # Units are contiguous from 1, so position usually equals number - 1
        if 1 <= number <= len(self.units) and self.units[number - 1].number == number:
            return self.units[number - 1]
        return next((u for u in self.units if u.number == number), None)


@dataclass(frozen=True)
class RecordMetadata:
    display_name: str
    unit_count: int
    content_length: int


@dataclass(frozen=True)
class PersistentRecord:
    """
    Disk-tier record. `index_rebuild_data` holds (unit id, text) pairs and is
    redundant with `units`; indexes are always rebuilt from `units`.
    """

    document_id: str
    units: Tuple[ContentUnit, ...]
    index_rebuild_data: Tuple[Tuple[int, str], ...]
    processed_at: datetime
    file_size: int
    metadata: RecordMetadata

    @classmethod
    def from_units(
        cls,
        document_id: str,
        units: Sequence[ContentUnit],
        display_name: str,
        processed_at: Optional[datetime] = None,
    ) -> "PersistentRecord":
        content_length = sum(len(u.text) for u in units)
        return cls(
            document_id=document_id,
            units=tuple(units),
            index_rebuild_data=tuple((u.number, u.text) for u in units),
            processed_at=processed_at or utcnow(),
            file_size=content_length,
            metadata=RecordMetadata(
                display_name=display_name,
                unit_count=len(units),
                content_length=content_length,
            ),
        )
