"""
Formatting Module
Display helpers for sizes, dates, titles and MIME types.
"""

from datetime import datetime
from types import MappingProxyType

import regex as re

from opds_shelf.cover.mime import split_extension

SIMPLE_MIME_LABELS = MappingProxyType({
    'application/epub+zip': 'EPUB',
    'application/pdf': 'PDF',
    'application/x-fictionbook+xml': 'FB2',
    'application/x-zip-compressed-fb2': 'FB2',
    'application/zip': 'ZIP',
    'application/x-zip-compressed': 'ZIP',
    'application/x-cbz': 'CBZ',
    'application/vnd.comicbook+zip': 'CBZ',
    'application/x-cbr': 'CBR',
    'application/vnd.comicbook-rar': 'CBR',
    'application/x-mobi': 'MOBI',
    'application/x-mobipocket-ebook': 'MOBI',
    'application/vnd.amazon.ebook': 'AZW',
    'image/vnd.djvu': 'DJVU',
    'text/plain': 'TXT',
    'text/rtf': 'RTF',
    'application/rtf': 'RTF',
    'text/html': 'HTML',
})

_SIZE_UNITS = 'KMGTPE'


def format_size(size: int) -> str:
    """
    Convert a byte count to a readable 1024-based string.

    Examples: 512 -> '512 B', 1536 -> '1.5 KB', 3 * 1024**2 -> '3.0 MB'
    """
    unit = 1024
    if size < unit:
        return f'{size} B'
    div, exp = unit, 0
    n = size // unit
    while n >= unit and exp < len(_SIZE_UNITS) - 1:
        div *= unit
        exp += 1
        n //= unit
    return f'{size / div:.1f} {_SIZE_UNITS[exp]}B'


def format_date(value: datetime) -> str:
    """Format a timestamp as e.g. 'Jan 02, 2006 15:04'."""
    return value.strftime('%b %d, %Y %H:%M')


def cleanup_title(filename: str) -> str:
    """
    Derive a readable title from a file name.

    Drops the extension (including '.fb2.zip'), turns '-' and '_' into
    spaces and trims the result.
    """
    ext = split_extension(filename)
    title = filename[:-len(ext)] if ext else filename
    title = re.sub(r'[-_]', ' ', title)
    return title.strip()


def simple_mime(mime_type: str) -> str:
    """
    Map a MIME type to a short format label.

    Unknown types containing 'azw' or 'djvu' are labelled accordingly;
    other unknown types longer than 12 characters are truncated.
    """
    label = SIMPLE_MIME_LABELS.get(mime_type)
    if label:
        return label

    lower = mime_type.lower()
    if 'azw' in lower:
        return 'AZW'
    if 'djvu' in lower:
        return 'DJVU'
    if len(mime_type) > 12:
        return mime_type[:10] + '...'
    return mime_type
