"""
Library Models Module
Defines data structures for the book listing.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Optional

from opds_shelf.cover import supports_cover
from opds_shelf.library.formatting import simple_mime


@dataclass
class BookInfo:
    """
    Represents one book file under the books directory.
    """
    filename: str  # Relative path with forward slashes, used in URLs
    title: str
    mime_type: str
    last_updated: datetime  # UTC
    size: int

    @property
    def simple_mime(self) -> str:
        """Short format label for display (EPUB, PDF, ...)."""
        return simple_mime(self.mime_type)

    @property
    def has_cover(self) -> bool:
        """Whether cover extraction is attempted for this file."""
        return supports_cover(self.filename)


@dataclass(frozen=True)
class EpubMetadata:
    """
    Dublin Core fields from an EPUB package document.
    """
    title: Optional[str] = None
    creator: Optional[str] = None
    identifier: Optional[str] = None
    language: Optional[str] = None
    publisher: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None

    def present(self) -> Dict[str, str]:
        """Return the fields that have a value, in declaration order."""
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value:
                values[f.name] = value
        return values
