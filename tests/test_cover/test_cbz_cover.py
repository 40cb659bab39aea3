"""
Tests for opds_shelf/cover/cbz.py

Tests get_cbz_cover(): image filtering and lexicographic selection.
"""

import pytest

from conftest import JPEG_BYTES, PNG_BYTES
from opds_shelf.core.exceptions import CoverIOError, CoverNotFoundError, NoImagesFoundError
from opds_shelf.cover.cbz import get_cbz_cover


@pytest.mark.unit
class TestCbzCover:
    """Test cover page selection in comic archives."""

    def test_lexicographically_first_image(self, make_zip):
        """Entries b.png, a.jpg, c.webp give a.jpg."""
        path = make_zip('comic.cbz', [
            ('b.png', PNG_BYTES),
            ('a.jpg', JPEG_BYTES),
            ('c.webp', b'RIFF-webp'),
        ])

        result = get_cbz_cover(str(path))

        assert result.data == JPEG_BYTES
        assert result.mime_type == 'image/jpeg'

    def test_non_images_are_ignored(self, make_zip):
        """ComicInfo.xml and other files never become the cover."""
        path = make_zip('comic.cbz', [
            ('ComicInfo.xml', b'<ComicInfo/>'),
            ('001.png', PNG_BYTES),
            ('000.txt', b'notes'),
        ])

        result = get_cbz_cover(str(path))

        assert result.data == PNG_BYTES
        assert result.mime_type == 'image/png'

    def test_extension_match_is_case_insensitive(self, make_zip):
        """PAGE.JPEG counts as an image."""
        path = make_zip('comic.cbz', [('PAGE.JPEG', JPEG_BYTES)])

        assert get_cbz_cover(str(path)).data == JPEG_BYTES

    def test_sort_is_by_full_path(self, make_zip):
        """Names are compared as whole paths, uppercase before lowercase."""
        path = make_zip('comic.cbz', [
            ('pages/001.jpg', b'second'),
            ('Pages/999.jpg', b'first'),
        ])

        assert get_cbz_cover(str(path)).data == b'first'

    def test_directories_are_skipped(self, make_zip):
        """Directory entries named like images are not candidates."""
        path = make_zip('comic.cbz', [
            ('a.jpg/', b''),
            ('b.jpg', JPEG_BYTES),
        ])

        assert get_cbz_cover(str(path)).data == JPEG_BYTES

    def test_webp_mime(self, make_zip):
        """webp covers report image/webp."""
        path = make_zip('comic.cbz', [('0.webp', b'RIFF-webp')])

        assert get_cbz_cover(str(path)).mime_type == 'image/webp'

    def test_no_images(self, make_zip):
        """An archive without images raises NoImagesFoundError, a CoverNotFoundError."""
        path = make_zip('comic.cbz', [('readme.txt', b'hello')])

        with pytest.raises(NoImagesFoundError):
            get_cbz_cover(str(path))
        with pytest.raises(CoverNotFoundError):
            get_cbz_cover(str(path))

    def test_gif_is_not_a_page(self, make_zip):
        """Only jpg, jpeg, png and webp are considered."""
        path = make_zip('comic.cbz', [('cover.gif', b'GIF89a')])

        with pytest.raises(NoImagesFoundError):
            get_cbz_cover(str(path))

    def test_corrupt_archive(self, temp_dir):
        """A truncated archive is a CoverIOError."""
        path = temp_dir / 'bad.cbz'
        path.write_bytes(b'PK\x03\x04 truncated')

        with pytest.raises(CoverIOError):
            get_cbz_cover(str(path))
