# core/search_index.py
import re
from typing import Callable, Dict, List, Optional
from rank_bm25 import BM25Okapi
from config.settings import settings
from core.entities import SearchIndex
from util.enums import SearchBackend
import logging

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\w+")

SearchIndexFactory = Callable[[], SearchIndex]


def tokenize(text: str) -> List[str]:
    return _TOKEN.findall(text.lower())


class Bm25SearchIndex:
    """
    BM25 full-text index over content units.

    - Query terms match forward: "hum" matches "human" and "humour".
    - Only units holding at least one matching term are returned, best first.
    - The BM25 model is rebuilt lazily after any `add`.
    """

    def __init__(self) -> None:
        self._positions: Dict[int, int] = {}
        self._ids: List[int] = []
        self._corpus: List[List[str]] = []
        self._vocab: List[set] = []
        self._bm25: Optional[BM25Okapi] = None

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, unit_id: int, text: str) -> None:
        tokens = tokenize(text)
        pos = self._positions.get(unit_id)
        if pos is None:
            self._positions[unit_id] = len(self._ids)
            self._ids.append(unit_id)
            self._corpus.append(tokens)
            self._vocab.append(set(tokens))
        else:
            self._corpus[pos] = tokens
            self._vocab[pos] = set(tokens)
        self._bm25 = None

    def _expand(self, terms: List[str]) -> set:
        vocab = set().union(*self._vocab) if self._vocab else set()
        return {word for word in vocab for t in terms if word.startswith(t)}

    def search(self, query: str) -> List[int]:
        terms = tokenize(query)
        if not terms or not any(self._corpus):
            return []
        expanded = self._expand(terms)
        if not expanded:
            return []
        hits = [i for i, words in enumerate(self._vocab) if words & expanded]
        if not hits:
            return []
        if self._bm25 is None:
            self._bm25 = BM25Okapi(self._corpus)
        scores = self._bm25.get_scores(sorted(expanded))
        hits.sort(key=lambda i: (-float(scores[i]), self._ids[i]))
        return [self._ids[i] for i in hits]


def make_index_factory(backend: str = settings.SEARCH_BACKEND) -> SearchIndexFactory:
    """Return a zero-arg constructor for the configured engine."""
    if backend == SearchBackend.EMBEDDING:
        from core.embeddings_retriever import EmbeddingSearchIndex

        return EmbeddingSearchIndex
    if backend != SearchBackend.BM25:
        logger.warning("search.backend.unknown backend=%s using=bm25", backend)
    return Bm25SearchIndex
