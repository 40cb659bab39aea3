"""
Tests for opds_shelf/library/metadata.py
"""

import pytest

from opds_shelf.core.exceptions import CoverIOError, FormatError
from opds_shelf.library.metadata import get_epub_metadata
from opds_shelf.library.models import EpubMetadata

FULL_METAS = """
    <dc:creator>Ann Author</dc:creator>
    <dc:creator>  </dc:creator>
    <dc:creator>Bob Writer</dc:creator>
    <dc:language>en</dc:language>
    <dc:publisher>Small Press</dc:publisher>
    <dc:subject>Fiction</dc:subject>
    <dc:subject>Sea stories</dc:subject>
    <dc:description>A &lt;short&gt; tale.</dc:description>
    <dc:date>2021-03-04</dc:date>
"""


@pytest.mark.unit
class TestGetEpubMetadata:
    """Test Dublin Core extraction from the OPF."""

    def test_all_fields(self, make_epub):
        metadata = get_epub_metadata(str(make_epub(metas=FULL_METAS)))

        assert metadata.title == 'Test Book'
        assert metadata.identifier == 'urn:uuid:1234'
        assert metadata.creator == 'Ann Author, Bob Writer'
        assert metadata.subject == 'Fiction, Sea stories'
        assert metadata.language == 'en'
        assert metadata.publisher == 'Small Press'
        assert metadata.description == 'A <short> tale.'
        assert metadata.date == '2021-03-04'

    def test_absent_fields_are_none(self, make_epub):
        metadata = get_epub_metadata(str(make_epub()))

        assert metadata.creator is None
        assert metadata.publisher is None
        assert metadata.present() == {'title': 'Test Book', 'identifier': 'urn:uuid:1234'}

    def test_present_keeps_field_order(self):
        metadata = EpubMetadata(date='2020', title='T', creator='C')

        assert list(metadata.present()) == ['title', 'creator', 'date']

    def test_opf_in_root_directory(self, make_epub):
        path = make_epub(metas='<dc:creator>Solo</dc:creator>', opf_path='content.opf')

        assert get_epub_metadata(str(path)).creator == 'Solo'

    def test_no_metadata_element(self, make_epub):
        opf = '<?xml version="1.0"?><package xmlns="http://www.idpf.org/2007/opf"><manifest/></package>'

        assert get_epub_metadata(str(make_epub(opf=opf))) == EpubMetadata()

    def test_missing_container(self, make_epub):
        with pytest.raises(FormatError):
            get_epub_metadata(str(make_epub(container=None)))

    def test_malformed_opf(self, make_epub):
        with pytest.raises(FormatError):
            get_epub_metadata(str(make_epub(opf='<package><metadata></package>')))

    def test_not_a_zip(self, temp_dir):
        path = temp_dir / 'plain.epub'
        path.write_bytes(b'plain text')

        with pytest.raises(CoverIOError):
            get_epub_metadata(str(path))
