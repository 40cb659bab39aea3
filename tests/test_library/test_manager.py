"""
Tests for opds_shelf/library/manager.py

Tests path resolution, uploads, renames and deletes.
"""

import io
import os

import pytest

from opds_shelf.core.exceptions import ValidationError
from opds_shelf.library.manager import (
    delete_book,
    rename_book,
    resolve_book_path,
    sanitize_filename,
    save_upload,
)


# ============================================================================
# Tests for resolve_book_path()
# ============================================================================

@pytest.mark.unit
class TestResolveBookPath:
    """Test the traversal guard."""

    def test_nested_path(self, books_dir):
        path = resolve_book_path(str(books_dir), 'sci-fi/dune.epub')
        assert path == os.path.join(os.path.realpath(books_dir), 'sci-fi', 'dune.epub')

    @pytest.mark.parametrize('name', [
        '../outside.epub',
        'a/../../outside.epub',
        '/etc/passwd',
        '..\\outside.epub',
        '',
        '   ',
        '.',
        'a\x00b.epub',
    ])
    def test_rejected(self, books_dir, name):
        with pytest.raises(ValidationError):
            resolve_book_path(str(books_dir), name)

    def test_symlink_escape(self, books_dir, temp_dir):
        outside = temp_dir / 'outside'
        outside.mkdir()
        (outside / 'x.epub').write_bytes(b'x')
        os.symlink(outside, books_dir / 'link')

        with pytest.raises(ValidationError):
            resolve_book_path(str(books_dir), 'link/x.epub')


@pytest.mark.unit
class TestSanitizeFilename:

    @pytest.mark.parametrize('name,expected', [
        ('book.epub', 'book.epub'),
        ('../../book.epub', 'book.epub'),
        ('C:\\Users\\me\\book.epub', 'book.epub'),
        ('what?.epub', 'what_.epub'),
        ('a<b>.pdf', 'a_b_.pdf'),
    ])
    def test_sanitized(self, name, expected):
        assert sanitize_filename(name) == expected

    @pytest.mark.parametrize('name', ['', '..', 'dir/', '.hidden.epub'])
    def test_rejected(self, name):
        with pytest.raises(ValidationError):
            sanitize_filename(name)


# ============================================================================
# Tests for save_upload()
# ============================================================================

@pytest.mark.unit
class TestSaveUpload:
    """Test storing uploaded books."""

    def test_stores_file(self, books_dir):
        dest = save_upload(str(books_dir), 'new.epub', io.BytesIO(b'content'))

        assert open(dest, 'rb').read() == b'content'
        assert os.path.basename(dest) == 'new.epub'

    def test_strips_directories(self, books_dir):
        dest = save_upload(str(books_dir), '../../evil.epub', io.BytesIO(b'x'))

        assert os.path.dirname(dest) == os.path.realpath(books_dir)

    def test_refuses_overwrite(self, books_dir):
        (books_dir / 'book.epub').write_bytes(b'original')

        with pytest.raises(FileExistsError):
            save_upload(str(books_dir), 'book.epub', io.BytesIO(b'replacement'))
        assert (books_dir / 'book.epub').read_bytes() == b'original'

    def test_too_large_leaves_nothing(self, books_dir):
        with pytest.raises(ValidationError):
            save_upload(str(books_dir), 'big.epub', io.BytesIO(b'x' * 100), max_bytes=10)

        assert os.listdir(books_dir) == []


# ============================================================================
# Tests for delete_book() / rename_book()
# ============================================================================

@pytest.mark.unit
class TestDeleteAndRename:
    """Test in-place file management."""

    def test_delete(self, books_dir):
        (books_dir / 'gone.epub').write_bytes(b'x')

        delete_book(str(books_dir), 'gone.epub')

        assert not (books_dir / 'gone.epub').exists()

    def test_delete_missing(self, books_dir):
        with pytest.raises(FileNotFoundError):
            delete_book(str(books_dir), 'nope.epub')

    def test_delete_outside(self, books_dir):
        with pytest.raises(ValidationError):
            delete_book(str(books_dir), '../books_sibling.epub')

    def test_rename_keeps_extension(self, books_dir):
        (books_dir / 'old.EPUB').write_bytes(b'x')

        new_path = rename_book(str(books_dir), 'old.EPUB', 'New Title')

        assert os.path.basename(new_path) == 'New Title.EPUB'
        assert not (books_dir / 'old.EPUB').exists()

    def test_rename_with_explicit_extension(self, books_dir):
        (books_dir / 'old.epub').write_bytes(b'x')

        new_path = rename_book(str(books_dir), 'old.epub', 'other.pdf')

        assert os.path.basename(new_path) == 'other.pdf'

    def test_rename_stays_in_directory(self, books_dir):
        (books_dir / 'sub').mkdir()
        (books_dir / 'sub' / 'a.epub').write_bytes(b'x')

        new_path = rename_book(str(books_dir), 'sub/a.epub', '../b')

        assert new_path == os.path.join(os.path.realpath(books_dir), 'sub', 'b.epub')

    def test_rename_onto_existing(self, books_dir):
        (books_dir / 'a.epub').write_bytes(b'a')
        (books_dir / 'b.epub').write_bytes(b'b')

        with pytest.raises(FileExistsError):
            rename_book(str(books_dir), 'a.epub', 'b.epub')
        assert (books_dir / 'a.epub').read_bytes() == b'a'

    def test_rename_missing(self, books_dir):
        with pytest.raises(FileNotFoundError):
            rename_book(str(books_dir), 'nope.epub', 'x')
