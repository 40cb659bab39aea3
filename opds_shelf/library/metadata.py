"""
Book Metadata Module
Reads Dublin Core metadata from EPUB package documents.
"""

import logging
from typing import Optional

from opds_shelf.cover.archive import ArchiveAccessor
from opds_shelf.cover.epub import read_package
from opds_shelf.cover.models import DEFAULT_SETTINGS, CoverSettings
from opds_shelf.library.models import EpubMetadata

logger = logging.getLogger(__name__)

DC_FIELDS = ('title', 'creator', 'identifier', 'language', 'publisher', 'subject', 'description', 'date')
# Fields that may repeat and are shown joined
_MULTI_VALUED = frozenset({'creator', 'subject'})


def get_epub_metadata(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> EpubMetadata:
    """
    Extract title, authors and the other dc: fields of an EPUB.

    The OPF is located through META-INF/container.xml exactly as for cover
    extraction. Elements are matched by local name inside <metadata>, so
    both 'dc:title' and an unprefixed 'title' are read.

    Args:
        file_path: Path to the .epub file
        settings: Size ceiling for archive members

    Returns:
        EpubMetadata: Field values, None where absent or blank

    Raises:
        CoverIOError: If the archive cannot be opened
        FormatError: If container.xml or the OPF is missing or invalid
    """
    with ArchiveAccessor(file_path, settings.max_entry_bytes) as archive:
        opf_path, opf = read_package(archive)

    metadata = opf.find('metadata')
    if metadata is None:
        logger.debug(f'No <metadata> in {opf_path}')
        return EpubMetadata()

    values = {}
    for name in DC_FIELDS:
        values[name] = _field_text(metadata, name)
    return EpubMetadata(**values)


def _field_text(metadata, name: str) -> Optional[str]:
    if name in _MULTI_VALUED:
        texts = [node.get_text(strip=True) for node in metadata.find_all(name)]
        joined = ', '.join(text for text in texts if text)
        return joined or None

    node = metadata.find(name)
    if node is None:
        return None
    return node.get_text(strip=True) or None
