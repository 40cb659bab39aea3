"""
Library Scanner Module
Lists and sorts the book files under the books directory.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Iterable, List, Mapping

from opds_shelf.cover.mime import DEFAULT_MIME_TYPE, MIME_TYPES, split_extension
from opds_shelf.library.formatting import cleanup_title
from opds_shelf.library.models import BookInfo

logger = logging.getLogger(__name__)

BOOK_EXTENSIONS = frozenset({
    '.epub', '.pdf', '.fb2', '.fb2.zip', '.mobi', '.azw', '.azw3', '.azw4',
    '.txt', '.rtf', '.html', '.htm', '.djvu', '.cbz', '.cbr', '.cb7',
})

SORT_MODES = ('name-asc', 'name-desc', 'date-asc', 'date-desc')
DEFAULT_SORT_MODE = 'date-desc'


def make_book_info(filename: str, stat: os.stat_result,
                   mime_types: Mapping[str, str] = MIME_TYPES) -> BookInfo:
    """Build the listing entry for one file from its relative name and stat result."""
    name = filename.rsplit('/', 1)[-1]
    return BookInfo(
        filename=filename,
        title=cleanup_title(name),
        mime_type=mime_types.get(split_extension(name)) or DEFAULT_MIME_TYPE,
        last_updated=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        size=stat.st_size,
    )


def get_books_list(books_dir: str, mime_types: Mapping[str, str] = MIME_TYPES) -> List[BookInfo]:
    """
    Walk the books directory recursively and collect supported book files.

    Hidden files and directories (leading '.') are skipped. Entries that
    cannot be stat'ed are logged and skipped rather than failing the listing.

    Args:
        books_dir: Library root
        mime_types: Extension to MIME table

    Returns:
        list: BookInfo entries in walk order (unsorted)
    """
    books = []
    if not os.path.isdir(books_dir):
        logger.warning(f'Books directory does not exist: {books_dir}')
        return books

    def on_error(err: OSError) -> None:
        logger.warning(f'Error accessing path {err.filename!r}: {err}')

    for root, dirs, files in os.walk(books_dir, onerror=on_error):
        dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
        for name in sorted(files):
            if name.startswith('.'):
                continue
            ext = split_extension(name)
            if ext not in BOOK_EXTENSIONS:
                continue

            path = os.path.join(root, name)
            try:
                stat = os.stat(path)
            except OSError as e:
                logger.warning(f'Error getting info for {name}: {e}')
                continue

            rel_path = os.path.relpath(path, books_dir)
            books.append(make_book_info(rel_path.replace(os.sep, '/'), stat, mime_types))

    return books


def sort_books(books: Iterable[BookInfo], mode: str = DEFAULT_SORT_MODE) -> List[BookInfo]:
    """
    Return the books sorted by the given mode.

    Modes: 'name-asc', 'name-desc' (case-insensitive title), 'date-asc',
    'date-desc'. Anything else falls back to 'date-desc' (newest first).
    """
    if mode == 'name-asc':
        return sorted(books, key=lambda b: b.title.lower())
    if mode == 'name-desc':
        return sorted(books, key=lambda b: b.title.lower(), reverse=True)
    if mode == 'date-asc':
        return sorted(books, key=lambda b: b.last_updated)
    return sorted(books, key=lambda b: b.last_updated, reverse=True)
