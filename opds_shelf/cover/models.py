"""
Cover Models Module
Defines data structures for cover extraction.
"""

import enum
from dataclasses import dataclass, field
from typing import Mapping, Optional

from opds_shelf.cover.mime import MIME_TYPES

# 64 MiB
DEFAULT_MAX_ENTRY_BYTES = 64 * 1024 * 1024


class BookFormat(enum.Enum):
    """
    Closed set of cover-capable book formats.
    """
    EPUB = 'epub'
    CBZ = 'cbz'
    FB2 = 'fb2'
    FB2_ZIP = 'fb2.zip'


@dataclass(frozen=True)
class CoverResult:
    """
    Represents an extracted cover image.
    """
    data: bytes
    mime_type: str

    def __len__(self) -> int:
        """Return the size of the image payload in bytes."""
        return len(self.data)

    def __iter__(self):
        """Allow `data, mime_type = result` unpacking."""
        yield self.data
        yield self.mime_type


@dataclass(frozen=True)
class CoverSettings:
    """
    Inputs shared by every extractor for one call.

    mime_types is read-only; max_entry_bytes bounds the declared size of any
    archive member and the size of an in-memory FB2 read (None disables it).
    """
    mime_types: Mapping[str, str] = field(default_factory=lambda: MIME_TYPES)
    max_entry_bytes: Optional[int] = DEFAULT_MAX_ENTRY_BYTES


DEFAULT_SETTINGS = CoverSettings()


@dataclass(frozen=True)
class ManifestItem:
    """
    Represents an OPF manifest <item>.
    """
    id: str
    href: str
    media_type: str = ''
    properties: str = ''

    def has_property(self, token: str) -> bool:
        """Check whether the space-separated properties attribute holds a token."""
        return token in self.properties.split()


@dataclass(frozen=True)
class Fb2Binary:
    """
    Represents an FB2 <binary> resource (base64 payload, not yet decoded).
    """
    id: str
    content_type: str
    content: str
