"""
MIME Lookup Module
Immutable extension to MIME type table shared by the extractors and the
library scanner.
"""

import posixpath
from types import MappingProxyType
from typing import Mapping

DEFAULT_MIME_TYPE = 'application/octet-stream'

MIME_TYPES: Mapping[str, str] = MappingProxyType({
    # Images
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.webp': 'image/webp',
    '.gif': 'image/gif',
    '.bmp': 'image/bmp',
    '.svg': 'image/svg+xml',
    # Books
    '.epub': 'application/epub+zip',
    '.pdf': 'application/pdf',
    '.fb2': 'application/x-fictionbook+xml',
    '.fb2.zip': 'application/x-zip-compressed-fb2',
    '.mobi': 'application/x-mobipocket-ebook',
    '.azw': 'application/vnd.amazon.ebook',
    '.azw3': 'application/vnd.amazon.ebook',
    '.azw4': 'application/vnd.amazon.ebook',
    '.txt': 'text/plain',
    '.rtf': 'application/rtf',
    '.html': 'text/html',
    '.htm': 'text/html',
    '.djvu': 'image/vnd.djvu',
    '.cbz': 'application/vnd.comicbook+zip',
    '.cbr': 'application/vnd.comicbook-rar',
    '.cb7': 'application/x-cb7',
})


def split_extension(name: str) -> str:
    """
    Return the lower-cased extension of a file or member name.

    The compound suffix '.fb2.zip' is reported as a single extension.

    Args:
        name: File name or archive member path (either separator)

    Returns:
        str: Extension including the leading dot, or '' if there is none
    """
    base = posixpath.basename(name.replace('\\', '/')).lower()
    if base.endswith('.fb2.zip'):
        return '.fb2.zip'
    return posixpath.splitext(base)[1]


def guess_mime_type(name: str, table: Mapping[str, str] = MIME_TYPES,
                    default: str = DEFAULT_MIME_TYPE) -> str:
    """Look up the MIME type for a name by extension, falling back to default."""
    return table.get(split_extension(name)) or default
