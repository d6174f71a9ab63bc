# repository/namespaces.py
from typing import Final

# Unit kinds; each kind gets its own cache subdirectory and units blob name.
CHAPTERS: Final[str] = "chapters"
PAGES: Final[str] = "pages"

META_SUFFIX: Final[str] = "_meta.json"
INDEX_SUFFIX: Final[str] = "_index.json"
