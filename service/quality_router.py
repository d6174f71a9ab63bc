# service/quality_router.py
from typing import Dict, Optional
from core.entities import QualityAssessment
from core.quality import classify_text_quality, fallback_assessment
from service.text_extraction_service import TextExtractionService
from util.enums import ContentPath
import logging

logger = logging.getLogger(__name__)


class QualityDetector:
    """Extract a PDF's text and grade it. Never raises."""

    def __init__(self, extractor: TextExtractionService) -> None:
        self._extractor = extractor

    async def detect(self, book_id: str) -> QualityAssessment:
        try:
            result = await self._extractor.extract_all_text(book_id)
        except Exception:
            logger.warning("quality.detect.fallback book=%s", book_id, exc_info=True)
            return fallback_assessment()
        return classify_text_quality(result.text, result.total_pages)


class QualityRouter:
    """
    Chooses the text or the image path for a PDF.

    The first verdict for a book is kept for the life of this router (fallback
    verdicts included); the book is never re-graded even if its file changes.
    """

    def __init__(self, detector: QualityDetector) -> None:
        self._detector = detector
        self._verdicts: Dict[str, QualityAssessment] = {}

    def __len__(self) -> int:
        return len(self._verdicts)

    def cached(self, book_id: str) -> Optional[QualityAssessment]:
        return self._verdicts.get(book_id)

    async def assess(self, book_id: str) -> QualityAssessment:
        verdict = self._verdicts.get(book_id)
        if verdict is None:
            verdict = await self._detector.detect(book_id)
            self._verdicts[book_id] = verdict
            logger.info(
                "quality.verdict book=%s tier=%s conf=%.2f density=%.1f",
                book_id,
                verdict.tier.value,
                verdict.confidence,
                verdict.text_density,
            )
        return verdict

    async def choose_path(self, book_id: str) -> ContentPath:
        try:
            verdict = await self.assess(book_id)
        except Exception:
            logger.error("quality.route.error book=%s using=image", book_id, exc_info=True)
            return ContentPath.IMAGE
        return ContentPath.TEXT if verdict.tier.text_capable else ContentPath.IMAGE

    def clear(self) -> None:
        self._verdicts.clear()
