"""
EPUB Cover Module
Locates the cover image of an EPUB through its container and OPF package.
"""

import logging
import posixpath
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from opds_shelf.core.exceptions import CoverNotFoundError, EntryNotFoundError, FormatError
from opds_shelf.cover.archive import ArchiveAccessor
from opds_shelf.cover.markup import parse_xml
from opds_shelf.cover.mime import guess_mime_type
from opds_shelf.cover.models import DEFAULT_SETTINGS, CoverResult, CoverSettings, ManifestItem

logger = logging.getLogger(__name__)

CONTAINER_PATH = 'META-INF/container.xml'


def get_epub_cover(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> CoverResult:
    """
    Extract the cover image from an EPUB file.

    Searches for the cover in two ways, first match wins:
    1. <meta name="cover" content="ID"/> pointing at a manifest item
    2. A manifest item whose properties contain "cover-image" (EPUB 3)

    Args:
        file_path: Path to the .epub file
        settings: MIME table and size ceiling

    Returns:
        CoverResult: Cover bytes and MIME type

    Raises:
        CoverIOError: If the archive cannot be opened
        FormatError: If container.xml, the OPF or the cover entry is missing or invalid
        CoverNotFoundError: If the OPF declares no cover
    """
    with ArchiveAccessor(file_path, settings.max_entry_bytes) as archive:
        opf_path, opf = read_package(archive)
        metas, items = _parse_opf(opf)
        item = _resolve_cover_item(metas, items)
        if item is None:
            raise CoverNotFoundError('Cover not declared in OPF', file_path)

        cover_path = resolve_href(opf_path, item.href)
        try:
            data = archive.read(cover_path)
        except EntryNotFoundError as e:
            raise FormatError('Could not find cover image', cover_path) from e

    mime_type = item.media_type or guess_mime_type(item.href, settings.mime_types)
    return CoverResult(data, mime_type)


def _find_opf_path(archive: ArchiveAccessor) -> str:
    try:
        container_data = archive.read(CONTAINER_PATH)
    except EntryNotFoundError as e:
        raise FormatError('Not an EPUB: container.xml missing', archive.path) from e

    container = parse_xml(container_data, CONTAINER_PATH)
    rootfile = container.find('rootfile')
    full_path = rootfile.get('full-path') if rootfile is not None else None
    if not full_path:
        raise FormatError('No rootfile found in container.xml', archive.path)
    return str(full_path)


def read_package(archive: ArchiveAccessor) -> Tuple[str, BeautifulSoup]:
    """
    Locate and parse the OPF package document of an open EPUB.

    Returns:
        tuple: (OPF path inside the archive, parsed document)

    Raises:
        FormatError: If container.xml or the OPF is missing or invalid
    """
    opf_path = _find_opf_path(archive)
    try:
        opf_data = archive.read(opf_path)
    except EntryNotFoundError as e:
        raise FormatError('OPF package document missing', opf_path) from e
    return opf_path, parse_xml(opf_data, opf_path)


def _parse_opf(opf: BeautifulSoup) -> Tuple[List[Tuple[str, str]], List[ManifestItem]]:
    """
    Read metadata/meta and manifest/item entries from an OPF document.

    Returns:
        tuple: ([(name, content), ...], [ManifestItem, ...]) in document order
    """
    metas = []
    metadata = opf.find('metadata')
    if metadata is not None:
        for meta in metadata.find_all('meta'):
            metas.append((meta.get('name', ''), meta.get('content', '')))

    items = []
    manifest = opf.find('manifest')
    if manifest is not None:
        for node in manifest.find_all('item'):
            items.append(ManifestItem(
                id=node.get('id', ''),
                href=node.get('href', ''),
                media_type=node.get('media-type', ''),
                properties=node.get('properties', ''),
            ))

    return metas, items


def _resolve_cover_item(metas: List[Tuple[str, str]], items: List[ManifestItem]) -> Optional[ManifestItem]:
    # Method A: ID referenced by meta name="cover"
    cover_id = next((content for name, content in metas if name == 'cover'), '')
    if cover_id:
        item = next((item for item in items if item.id == cover_id), None)
        if item is not None and item.href:
            logger.debug(f'Cover resolved via meta name="cover": {item.href}')
            return item

    # Method B: item with properties="cover-image"
    item = next((item for item in items if item.has_property('cover-image')), None)
    if item is not None and item.href:
        logger.debug(f'Cover resolved via cover-image property: {item.href}')
        return item

    return None


def resolve_href(opf_path: str, href: str) -> str:
    """
    Join a manifest href onto the OPF document's directory.

    Plain path semantics: '..' and '.' segments are collapsed, a leading '/'
    does not escape the OPF directory, and percent-escapes are kept as-is.
    """
    joined = posixpath.join(posixpath.dirname(opf_path), href.lstrip('/'))
    return posixpath.normpath(joined)
