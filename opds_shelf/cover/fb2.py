"""
FB2 Cover Module
Decodes the cover image embedded in a FictionBook document.

FB2 files are plain XML and are read whole into memory (bounded by
CoverSettings.max_entry_bytes); there is no streaming parser.
"""

import base64
import binascii
import logging
import os
from typing import List, Optional

from opds_shelf.core.exceptions import CoverIOError, CoverNotFoundError, FormatError
from opds_shelf.cover.archive import ArchiveAccessor
from opds_shelf.cover.markup import local_attr, parse_xml
from opds_shelf.cover.mime import DEFAULT_MIME_TYPE
from opds_shelf.cover.models import DEFAULT_SETTINGS, CoverResult, CoverSettings, Fb2Binary

logger = logging.getLogger(__name__)

DEFAULT_COVER_ID = 'cover.jpg'


def get_fb2_cover(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> CoverResult:
    """
    Extract the cover image from a .fb2 file.

    Args:
        file_path: Path to the .fb2 file
        settings: MIME table and size ceiling

    Returns:
        CoverResult: Decoded cover bytes and declared content-type

    Raises:
        CoverIOError: If the file cannot be read
        FormatError: If the XML or the base64 payload is invalid
        CoverNotFoundError: If no binary qualifies as the cover
    """
    try:
        size = os.path.getsize(file_path)
        if settings.max_entry_bytes is not None and size > settings.max_entry_bytes:
            raise FormatError(f'File is {size} bytes, limit is {settings.max_entry_bytes}', file_path)
        with open(file_path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise CoverIOError(f'Cannot read file: {e}', file_path) from e

    return parse_fb2_cover(data, file_path)


def get_fb2_zip_cover(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> CoverResult:
    """
    Extract the cover image from a zipped FB2 (.fb2.zip).

    The first member (archive order) whose name ends with '.fb2' is parsed.

    Raises:
        CoverIOError: If the archive cannot be opened
        FormatError: If the archive holds no .fb2 member, or as get_fb2_cover
        CoverNotFoundError: As get_fb2_cover
    """
    with ArchiveAccessor(file_path, settings.max_entry_bytes) as archive:
        inner = next((name for name in archive.names() if name.lower().endswith('.fb2')), None)
        if inner is None:
            raise FormatError('No .fb2 document inside archive', file_path)
        data = archive.read(inner)

    return parse_fb2_cover(data, f'{file_path}:{inner}')


def parse_fb2_cover(data: bytes, source: Optional[str] = None) -> CoverResult:
    """
    Resolve and decode the cover binary of an in-memory FB2 document.

    Resolution order:
    a. coverpage image href, leading '#' stripped
    b. empty href -> default candidate 'cover.jpg'
    c. first binary whose id equals the candidate, or for the default
       candidate only, whose id contains 'cover'
    d. first binary whose content-type starts with 'image/'
    e. otherwise CoverNotFoundError

    Args:
        data: Raw FB2 XML
        source: Location used in error messages

    Returns:
        CoverResult: Decoded bytes and the binary's declared content-type
    """
    soup = parse_xml(data, source)
    root = soup.find('FictionBook', recursive=False)
    if root is None:
        raise FormatError('Not a FictionBook document', source)

    href = _coverpage_href(root)
    binaries = _binaries(root)

    binary = _match_binary(href, binaries)
    if binary is None:
        raise CoverNotFoundError('No cover binary found', source)

    payload = binary.content.strip().replace('\r', '').replace('\n', '')
    try:
        image = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f'Invalid base64 in binary {binary.id!r}: {e}', source) from e
    if not image:
        raise FormatError(f'Empty binary {binary.id!r}', source)

    return CoverResult(image, binary.content_type or DEFAULT_MIME_TYPE)


def _coverpage_href(root) -> str:
    description = root.find('description', recursive=False)
    title_info = description.find('title-info') if description is not None else None
    coverpage = title_info.find('coverpage') if title_info is not None else None
    image = coverpage.find('image') if coverpage is not None else None
    if image is None:
        return ''
    return local_attr(image, 'href')


def _binaries(root) -> List[Fb2Binary]:
    # Only direct children of <FictionBook>
    return [
        Fb2Binary(
            id=node.get('id', ''),
            content_type=node.get('content-type', ''),
            content=node.get_text(),
        )
        for node in root.find_all('binary', recursive=False)
    ]


def _match_binary(href: str, binaries: List[Fb2Binary]) -> Optional[Fb2Binary]:
    candidate = href[1:] if href.startswith('#') else href
    if not candidate:
        candidate = DEFAULT_COVER_ID

    for binary in binaries:
        if binary.id == candidate or (candidate == DEFAULT_COVER_ID and 'cover' in binary.id):
            logger.debug(f'Cover binary matched by id: {binary.id}')
            return binary

    for binary in binaries:
        if binary.content_type.startswith('image/'):
            logger.debug(f'Cover binary matched by content-type: {binary.id}')
            return binary

    return None
