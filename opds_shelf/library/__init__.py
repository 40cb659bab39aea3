"""
Library Module
Provides book listing, sorting, display formatting and file management.
"""

from .formatting import format_size, format_date, cleanup_title, simple_mime
from .models import BookInfo, EpubMetadata
from .metadata import get_epub_metadata
from .scanner import get_books_list, make_book_info, sort_books, BOOK_EXTENSIONS, SORT_MODES, DEFAULT_SORT_MODE
from .manager import (
    resolve_book_path,
    sanitize_filename,
    save_upload,
    delete_book,
    rename_book
)

__all__ = [
    # Formatting
    'format_size',
    'format_date',
    'cleanup_title',
    'simple_mime',
    # Models
    'BookInfo',
    'EpubMetadata',
    # Metadata
    'get_epub_metadata',
    # Scanner
    'get_books_list',
    'make_book_info',
    'sort_books',
    'BOOK_EXTENSIONS',
    'SORT_MODES',
    'DEFAULT_SORT_MODE',
    # Manager
    'resolve_book_path',
    'sanitize_filename',
    'save_upload',
    'delete_book',
    'rename_book',
]
