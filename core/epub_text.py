# core/epub_text.py
import io
import re
import zipfile
from typing import List
from bs4 import BeautifulSoup
from core.entities import ContentUnit
from util.errors import ExtractionError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

_SPACE = re.compile(r"\s+")
_SKIPPED_SUFFIXES = ("nav.xhtml", "toc.xhtml")
_DROPPED_TAGS = ["script", "style", "noscript"]


def is_chapter_file(name: str) -> bool:
    return (
        name.endswith((".xhtml", ".html"))
        and not name.endswith(_SKIPPED_SUFFIXES)
        and "META-INF/" not in name
    )


def html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(_DROPPED_TAGS):
        tag.extract()
    return _SPACE.sub(" ", soup.get_text(separator=" ", strip=True)).strip()


def extract_chapters(file_bytes: bytes) -> List[ContentUnit]:
    """
    Turn an EPUB archive into chapters, one per XHTML document in name order.

    A chapter that fails to decode is skipped; an unreadable archive raises
    ExtractionError.
    """
    if not file_bytes:
        raise ExtractionError("Invalid EPUB buffer: empty file")
    try:
        archive = zipfile.ZipFile(io.BytesIO(file_bytes))
    except zipfile.BadZipFile as e:
        raise ExtractionError(f"Invalid EPUB archive: {e}") from e

    chapters: List[ContentUnit] = []
    with archive, timed(logger, "epub.extract"):
        names = sorted(n for n in archive.namelist() if is_chapter_file(n))
        logger.info("epub.entries total=%d chapters=%d", len(archive.namelist()), len(names))
        for name in names:
            try:
                markup = archive.read(name).decode("utf-8")
            except (KeyError, UnicodeDecodeError, zipfile.BadZipFile, OSError):
                logger.warning("epub.chapter.skip file=%s", name, exc_info=True)
                continue
            number = len(chapters) + 1
            chapters.append(
                ContentUnit(
                    number=number,
                    label=f"Chapter {number}",
                    text=html_to_text(markup),
                    filename=name,
                )
            )
    return chapters
