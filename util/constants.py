class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    SEARCH_BOOKS = V1 + "/books/search"
    BOOK_OVERVIEW = V1 + "/books/{book_id}"
    READ_PAGES = V1 + "/books/{book_id}/pages"
    SEARCH_WITHIN = V1 + "/books/{book_id}/search"
    CACHE_STATS = V1 + "/cache/stats"


class ExternalURIs:
    LIBRARIES = "/api/v1/libraries"
    BOOKS_LIST = "/api/v1/books/list"
    BOOK = "/api/v1/books/{book_id}"
    BOOK_PAGES = "/api/v1/books/{book_id}/pages"
    BOOK_FILE = "/api/v1/books/{book_id}/file"
    BOOK_PAGE = "/api/v1/books/{book_id}/pages/{page_number}"


EPUB_MEDIA_TYPE = "application/epub+zip"
UNKNOWN_BOOK_NAME = "Unknown Book"
