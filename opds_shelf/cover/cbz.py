"""
CBZ Cover Module
Picks the cover page of a zipped comic book.
"""

import logging

from opds_shelf.core.exceptions import NoImagesFoundError
from opds_shelf.cover.archive import ArchiveAccessor
from opds_shelf.cover.mime import guess_mime_type, split_extension
from opds_shelf.cover.models import DEFAULT_SETTINGS, CoverResult, CoverSettings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({'.jpg', '.jpeg', '.png', '.webp'})


def get_cbz_cover(file_path: str, settings: CoverSettings = DEFAULT_SETTINGS) -> CoverResult:
    """
    Extract the cover image from a CBZ archive.

    Heuristic: comic pages are usually numbered (000.jpg, 001.jpg, ...), so
    the image whose name sorts first is taken as the cover. Archives with
    arbitrary page names may yield an interior page instead.

    Args:
        file_path: Path to the .cbz file
        settings: MIME table and size ceiling

    Returns:
        CoverResult: Cover bytes and MIME type

    Raises:
        CoverIOError: If the archive cannot be opened
        NoImagesFoundError: If the archive holds no jpg/jpeg/png/webp entries
    """
    with ArchiveAccessor(file_path, settings.max_entry_bytes) as archive:
        images = [name for name in archive.names() if split_extension(name) in IMAGE_EXTENSIONS]
        if not images:
            raise NoImagesFoundError('No images found in archive', file_path)

        # Code point order equals byte order of the UTF-8 names
        cover_name = sorted(images)[0]
        logger.debug(f'Using {cover_name} as cover ({len(images)} images)')
        data = archive.read(cover_name)

    return CoverResult(data, guess_mime_type(cover_name, settings.mime_types))
