# core/quality.py
import re
from core.entities import QualityAssessment, utcnow
from util.enums import QualityTier

_ALPHA = re.compile(r"[A-Za-z]")

FALLBACK_TIER = QualityTier.IMAGE_ONLY


def fallback_assessment() -> QualityAssessment:
    """Verdict used whenever the text behind a document cannot be obtained."""
    return QualityAssessment(
        tier=FALLBACK_TIER, confidence=0.0, text_density=0.0, word_quality=0.0
    )


def _classify(
    density: float, word_count: int, avg_word_length: float, noise_ratio: float
) -> QualityTier:
    if (
        density >= 300
        and word_count >= 80
        and 3 <= avg_word_length <= 15
        and noise_ratio <= 0.25
    ):
        return QualityTier.GOOD_TEXT
    if (
        density >= 120
        and word_count >= 30
        and 2 <= avg_word_length <= 20
        and noise_ratio <= 0.35
    ):
        return QualityTier.FAIR_TEXT
    if density > 30:
        return QualityTier.POOR_TEXT
    return QualityTier.IMAGE_ONLY


def _confidence(density: float, word_count: int, avg_word_length: float) -> float:
    confidence = 0.0

    if density >= 400:
        confidence += 0.4
    elif density >= 150:
        confidence += 0.2
    elif density >= 50:
        confidence += 0.1

    if word_count >= 100:
        confidence += 0.3
    elif word_count >= 50:
        confidence += 0.2
    elif word_count >= 10:
        confidence += 0.1

    if 3 <= avg_word_length <= 12:
        confidence += 0.3
    elif 2 <= avg_word_length <= 15:
        confidence += 0.2

    return min(confidence, 1.0)


def classify_text_quality(text: str, page_count: int) -> QualityAssessment:
    """
    Grade extracted text into a QualityTier.

    - density: characters per page (page_count floored at 1)
    - words: whitespace tokens, average length as the word-quality signal
    - noise: share of characters that are not ASCII letters (0 for empty text)
    Tiers are checked best-first; the first matching predicate wins.
    """
    length = len(text)
    density = length / max(page_count, 1)

    words = text.split()
    word_count = len(words)
    avg_word_length = (
        sum(len(w) for w in words) / word_count if word_count else 0.0
    )

    alpha = len(_ALPHA.findall(text))
    noise_ratio = (length - alpha) / length if length else 0.0

    return QualityAssessment(
        tier=_classify(density, word_count, avg_word_length, noise_ratio),
        confidence=_confidence(density, word_count, avg_word_length),
        text_density=density,
        word_quality=avg_word_length,
        detected_at=utcnow(),
    )
