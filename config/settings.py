# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")

    # Komga library
    KOMGA_URL: str = Field(
        default="http://localhost:25600", validation_alias="KOMGA_URL"
    )
    KOMGA_USERNAME: str = Field(default="", validation_alias="KOMGA_USERNAME")
    KOMGA_PASSWORD: str = Field(default="", validation_alias="KOMGA_PASSWORD")
    KOMGA_LIBRARY: str = Field(default="", validation_alias="KOMGA_LIBRARY")
    KOMGA_TIMEOUT_SECONDS: float = Field(
        default=60.0, validation_alias="KOMGA_TIMEOUT_SECONDS"
    )

    # Cache
    CACHE_DIR: str = Field(
        default=os.path.join(os.path.expanduser("~"), ".ebook-retrieval-cache"),
        validation_alias="CACHE_DIR",
    )

    # Search engine
    SEARCH_BACKEND: str = Field(default="bm25", validation_alias="SEARCH_BACKEND")
    EMBEDDING_MODEL_NAME: str = "sentence-transformers/all-MiniLM-L6-v2"
    EMBEDDING_MIN_SIMILARITY: float = Field(
        default=0.35, validation_alias="EMBEDDING_MIN_SIMILARITY"
    )

    # Reading limits
    WORDS_PER_PAGE: int = 500
    MAX_PAGES_PER_READ: int = 15
    MAX_CHAPTER_CHARS: int = 10_000
    SEARCH_CONTEXT_CHARS: int = 100

    # Page images
    IMAGE_MAX_WIDTH: int = Field(default=1568, validation_alias="IMAGE_MAX_WIDTH")
    IMAGE_JPEG_QUALITY: int = Field(default=80, validation_alias="IMAGE_JPEG_QUALITY")

    # Logging knobs
    LOGGER_NAME: str = "ebook-retrieval"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")



try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
