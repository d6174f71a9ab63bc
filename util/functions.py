# util/functions.py
from typing import Optional


def context_window(text: str, term: str, radius: int = 100) -> Optional[str]:
    """
    - Find the first case-insensitive occurrence of `term` in `text`.
    - Return the surrounding slice (`radius` chars each side), stripped.
    - None when the term does not occur.
    """
    if not term:
        return None
    idx = text.lower().find(term.lower())
    if idx == -1:
        return None
    start = max(0, idx - radius)
    end = min(len(text), idx + len(term) + radius)
    return text[start:end].strip()


def clip_chars(text: str, max_chars: int) -> str:
    return text if len(text) <= max_chars else text[:max_chars]
