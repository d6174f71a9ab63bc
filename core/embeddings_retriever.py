# core/embeddings_retriever.py
from functools import lru_cache
from typing import List, Optional
import numpy as np
from sentence_transformers import SentenceTransformer
from config.settings import settings
from core.search_index import tokenize
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _load_model() -> SentenceTransformer:
    """
    Lazy-load the sentence embedding model.

    Model is kept CPU-friendly; adjust in settings if you want a larger model.
    """
    name = settings.EMBEDDING_MODEL_NAME
    with timed(logger, "embed.model.load", model=name):
        model = SentenceTransformer(name, device="cpu")
    return model


def _encode(texts: List[str], batch_size: int = 64) -> np.ndarray:
    model = _load_model()
    vecs = model.encode(
        texts,
        batch_size=batch_size,
        convert_to_numpy=True,
        normalize_embeddings=True,
    )
    return np.asarray(vecs, dtype=np.float32)


class EmbeddingSearchIndex:
    """
    Semantic index over content units (cosine similarity on L2-normalized
    sentence embeddings).

    Units whose text literally contains a query token always match; others
    match when their similarity reaches settings.EMBEDDING_MIN_SIMILARITY.
    Embeddings are computed lazily on the first search after an `add`.
    """

    def __init__(self, min_similarity: Optional[float] = None) -> None:
        self._min_sim = (
            settings.EMBEDDING_MIN_SIMILARITY
            if min_similarity is None
            else min_similarity
        )
        self._ids: List[int] = []
        self._texts: List[str] = []
        self._embeddings: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, unit_id: int, text: str) -> None:
        if unit_id in self._ids:
            self._texts[self._ids.index(unit_id)] = text
        else:
            self._ids.append(unit_id)
            self._texts.append(text)
        self._embeddings = None

    def _matrix(self) -> np.ndarray:
        if self._embeddings is None:
            with timed(logger, "embed.encode", n=len(self._texts)):
                self._embeddings = _encode(self._texts)
        return self._embeddings

    def search(self, query: str) -> List[int]:
        if not self._ids or not query.strip():
            return []
        emb = self._matrix()
        with timed(logger, "embed.query", n=len(self._ids)):
            q = _encode([query])[0]
            sims = (emb @ q).astype(float)
        terms = set(tokenize(query))
        hits = [
            i
            for i, text in enumerate(self._texts)
            if sims[i] >= self._min_sim or terms & set(tokenize(text))
        ]
        hits.sort(key=lambda i: sims[i], reverse=True)
        logger.info("embed.hits n=%d", len(hits))
        return [self._ids[i] for i in hits]
