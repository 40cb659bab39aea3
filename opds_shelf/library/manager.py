"""
File Manager Module
Upload, rename and delete operations on the books directory.

Every user-supplied name goes through resolve_book_path so that no
operation can reach outside the library root.
"""

import logging
import os
import tempfile
from typing import BinaryIO, Optional

import regex as re

from opds_shelf.core.exceptions import ValidationError
from opds_shelf.cover.mime import split_extension

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
# Control characters and characters Windows refuses in file names
_FORBIDDEN_CHARS = re.compile(r'[<>:"|?*\x00-\x1F]')


def resolve_book_path(books_dir: str, filename: str) -> str:
    """
    Resolve a relative book name to an absolute path inside books_dir.

    Args:
        books_dir: Library root
        filename: Relative name as it appears in URLs ('dir/book.epub')

    Returns:
        str: Absolute path (not checked for existence)

    Raises:
        ValidationError: If the name is empty, absolute, or escapes books_dir
    """
    if not filename or not filename.strip():
        raise ValidationError('Missing filename')
    if '\x00' in filename:
        raise ValidationError('Invalid filename')

    normalized = filename.replace('\\', '/')
    if normalized.startswith('/') or os.path.isabs(filename):
        raise ValidationError(f'Absolute paths are not allowed: {filename}')

    root = os.path.realpath(books_dir)
    path = os.path.realpath(os.path.join(root, *normalized.split('/')))
    if path == root or not path.startswith(root + os.sep):
        logger.warning(f'Path traversal guard triggered for {filename!r}')
        raise ValidationError(f'Path outside books directory: {filename}')
    return path


def sanitize_filename(name: str) -> str:
    """
    Reduce an uploaded file name to a safe base name.

    Directory components are dropped and forbidden characters replaced
    with '_'.

    Raises:
        ValidationError: If nothing usable remains
    """
    base = name.replace('\\', '/').rsplit('/', 1)[-1]
    base = _FORBIDDEN_CHARS.sub('_', base).strip()
    if base in ('', '.', '..') or base.startswith('.'):
        raise ValidationError(f'Invalid filename: {name!r}')
    return base


def save_upload(books_dir: str, filename: str, stream: BinaryIO,
                max_bytes: Optional[int] = None) -> str:
    """
    Store an uploaded book in the top level of books_dir.

    The content is written to a temporary file first and moved into place
    only once complete, so a failed or oversized upload leaves nothing
    behind.

    Args:
        books_dir: Library root
        filename: Client-supplied file name
        stream: Readable binary stream with the file content
        max_bytes: Reject uploads larger than this

    Returns:
        str: Absolute path of the stored file

    Raises:
        ValidationError: Unsafe name or upload too large
        FileExistsError: A file with this name already exists
    """
    name = sanitize_filename(filename)
    dest = resolve_book_path(books_dir, name)
    if os.path.exists(dest):
        raise FileExistsError(f'Destination file already exists: {name}')

    os.makedirs(books_dir, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(dest), prefix='.upload-', suffix='.tmp')
    try:
        written = 0
        with os.fdopen(tmp_fd, 'wb') as out:
            while chunk := stream.read(_CHUNK_SIZE):
                written += len(chunk)
                if max_bytes is not None and written > max_bytes:
                    raise ValidationError(f'Upload exceeds {max_bytes} bytes')
                out.write(chunk)
        if os.path.exists(dest):
            raise FileExistsError(f'Destination file already exists: {name}')
        os.replace(tmp_path, dest)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.info(f'Stored upload {name} ({written} bytes) at {dest}')
    return dest


def delete_book(books_dir: str, filename: str) -> None:
    """
    Delete a book file.

    Raises:
        ValidationError: Unsafe name
        FileNotFoundError: No such file
    """
    path = resolve_book_path(books_dir, filename)
    if not os.path.isfile(path):
        raise FileNotFoundError(f'File not found: {filename}')
    os.remove(path)
    logger.info(f'Deleted {path}')


def rename_book(books_dir: str, old_filename: str, new_filename: str) -> str:
    """
    Rename a book within its current directory.

    If the new name has no extension, the old one is kept ('My Book' on
    'a.epub' gives 'My Book.epub').

    Returns:
        str: Absolute path of the renamed file

    Raises:
        ValidationError: Unsafe names
        FileNotFoundError: Source does not exist
        FileExistsError: Destination already exists
    """
    old_path = resolve_book_path(books_dir, old_filename)
    new_name = sanitize_filename(new_filename)
    if not split_extension(new_name):
        old_ext = split_extension(old_path)
        new_name += old_path[len(old_path) - len(old_ext):]

    new_path = os.path.join(os.path.dirname(old_path), new_name)
    new_path = resolve_book_path(books_dir, os.path.relpath(new_path, os.path.realpath(books_dir)))

    if not os.path.isfile(old_path):
        raise FileNotFoundError(f'Original file not found: {old_filename}')
    if os.path.exists(new_path):
        raise FileExistsError(f'Destination file already exists: {new_name}')

    logger.info(f'Renaming {old_path} to {new_path}')
    os.rename(old_path, new_path)
    return new_path
