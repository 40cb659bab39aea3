"""
Archive Accessor Module
Opens zip-formatted book containers and reads members by exact name.
"""

import logging
import zipfile
import zlib
from typing import List, Optional

from opds_shelf.core.exceptions import CoverIOError, EntryNotFoundError, FormatError

logger = logging.getLogger(__name__)


class ArchiveAccessor:
    """
    Read-only view over one zip archive for the duration of one extraction.

    Use as a context manager; the underlying handle is closed on every exit
    path, including exceptions raised inside the block.
    """

    def __init__(self, path: str, max_entry_bytes: Optional[int] = None):
        """
        Args:
            path: Path to the zip-formatted file
            max_entry_bytes: Refuse members whose declared size exceeds this
        """
        self.path = path
        self.max_entry_bytes = max_entry_bytes
        self._zip: Optional[zipfile.ZipFile] = None

    def __enter__(self) -> 'ArchiveAccessor':
        try:
            self._zip = zipfile.ZipFile(self.path, 'r')
        except (OSError, zipfile.BadZipFile) as e:
            raise CoverIOError(f'Cannot open archive: {e}', self.path) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the archive handle (idempotent)."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    @property
    def archive(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise CoverIOError('Archive is not open', self.path)
        return self._zip

    def names(self) -> List[str]:
        """
        List non-directory member names in archive order.

        Returns:
            list: Member names as stored in the central directory
        """
        return [info.filename for info in self.archive.infolist() if not info.is_dir()]

    def read(self, name: str) -> bytes:
        """
        Read and decompress a member by exact name.

        Args:
            name: Member name, compared byte-for-byte with stored names

        Returns:
            bytes: Decompressed member content

        Raises:
            EntryNotFoundError: If no member has exactly this name
            FormatError: If the member exceeds the size ceiling or is corrupt
            CoverIOError: If the archive cannot be read
        """
        try:
            info = self.archive.getinfo(name)
        except KeyError:
            raise EntryNotFoundError('Entry not found in archive', name) from None
        if info.is_dir():
            raise EntryNotFoundError('Entry is a directory', name)

        if self.max_entry_bytes is not None and info.file_size > self.max_entry_bytes:
            raise FormatError(
                f'Entry is {info.file_size} bytes, limit is {self.max_entry_bytes}', name
            )

        logger.debug(f'Reading {name} ({info.file_size} bytes) from {self.path}')
        try:
            return self.archive.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, NotImplementedError, EOFError) as e:
            raise FormatError(f'Corrupt archive entry: {e}', name) from e
        except OSError as e:
            raise CoverIOError(f'Cannot read archive entry: {e}', name) from e
