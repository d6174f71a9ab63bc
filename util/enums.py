# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class QualityTier(str, Enum):
    GOOD_TEXT = "good-text"
    FAIR_TEXT = "fair-text"
    POOR_TEXT = "poor-text"
    IMAGE_ONLY = "image-only"

    @property
    def text_capable(self) -> bool:
        return self in (QualityTier.GOOD_TEXT, QualityTier.FAIR_TEXT)


class ContentPath(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class SearchBackend(str, Enum):
    BM25 = "bm25"
    EMBEDDING = "embedding"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    BOOK_NOT_FOUND = ErrorInfo("Book not found", status.HTTP_404_NOT_FOUND)
    UPSTREAM_ERROR = ErrorInfo(
        "Upstream library request failed", status.HTTP_502_BAD_GATEWAY
    )
    INVALID_PAGE_RANGE = ErrorInfo(
        "end_page must be greater than or equal to start_page",
        status.HTTP_400_BAD_REQUEST,
    )
    EXTRACTION_FAILED = ErrorInfo(
        "Could not extract book content", status.HTTP_502_BAD_GATEWAY
    )
