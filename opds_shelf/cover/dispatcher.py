"""
Format Dispatcher Module
Single entry point for cover extraction: routes a book path to the
extractor for its format.
"""

import logging
from types import MappingProxyType
from typing import Callable, Mapping

from opds_shelf.core.exceptions import FormatError, NotSupportedError
from opds_shelf.cover.cbz import get_cbz_cover
from opds_shelf.cover.epub import get_epub_cover
from opds_shelf.cover.fb2 import get_fb2_cover, get_fb2_zip_cover
from opds_shelf.cover.mime import split_extension
from opds_shelf.cover.models import DEFAULT_SETTINGS, BookFormat, CoverResult, CoverSettings

logger = logging.getLogger(__name__)

Extractor = Callable[[str, CoverSettings], CoverResult]

FORMAT_BY_EXTENSION: Mapping[str, BookFormat] = MappingProxyType({
    '.epub': BookFormat.EPUB,
    '.cbz': BookFormat.CBZ,
    '.fb2': BookFormat.FB2,
    '.fb2.zip': BookFormat.FB2_ZIP,
})

EXTRACTORS: Mapping[BookFormat, Extractor] = MappingProxyType({
    BookFormat.EPUB: get_epub_cover,
    BookFormat.CBZ: get_cbz_cover,
    BookFormat.FB2: get_fb2_cover,
    BookFormat.FB2_ZIP: get_fb2_zip_cover,
})


def detect_format(file_path: str) -> BookFormat:
    """
    Map a file path to its cover-capable format.

    Raises:
        NotSupportedError: If the extension is not .epub, .cbz, .fb2 or .fb2.zip
    """
    ext = split_extension(file_path)
    try:
        return FORMAT_BY_EXTENSION[ext]
    except KeyError:
        raise NotSupportedError(f'Unsupported file type {ext or "(none)"!r}', file_path) from None


def supports_cover(file_path: str) -> bool:
    """Check whether a cover can be looked for in this file, by extension only."""
    return split_extension(file_path) in FORMAT_BY_EXTENSION


def extract_cover(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> CoverResult:
    """
    Extract the embedded cover image from a book file.

    The path must already be sanitized and point at an existing file; no
    traversal checks are made here. Extraction is stateless, read-only and
    deterministic, so repeated calls on an unchanged file give identical
    results.

    Args:
        file_path: Path to an .epub, .cbz, .fb2 or .fb2.zip file
        settings: MIME table and size ceiling passed to the extractor

    Returns:
        CoverResult: Non-empty image bytes and a non-empty MIME type

    Raises:
        NotSupportedError: Unknown extension (nothing is opened)
        CoverIOError: File or archive could not be opened/read
        FormatError: Structurally invalid content
        CoverNotFoundError: Well-formed container without a resolvable cover
    """
    book_format = detect_format(file_path)
    logger.debug(f'Extracting {book_format.value} cover from {file_path}')

    result = EXTRACTORS[book_format](file_path, settings)
    if not result.data:
        raise FormatError('Cover entry is empty', file_path)
    return result
