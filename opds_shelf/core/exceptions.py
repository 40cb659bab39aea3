"""
Core Exceptions Module
Defines custom exceptions for the opds-shelf application.

Cover extraction fails with exactly one of four kinds, all deriving from
CoverError: NotSupportedError, CoverIOError, FormatError and
CoverNotFoundError. Every kind is terminal for a given file.
"""

from typing import Optional


class CoverError(Exception):
    """
    Base class for every cover extraction failure.

    Carries the path being processed so callers can log the cause
    without re-deriving it.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        """
        Initialize the CoverError.

        Args:
            message: Description of the failure
            path: File or archive member path involved, if any
        """
        super().__init__(message)
        self.message = message
        self.path = path

    @property
    def kind(self) -> str:
        """Short name of the failure kind, for diagnostics."""
        return type(self).__name__

    def __str__(self) -> str:
        if self.path:
            return f'{self.message} ({self.path})'
        return self.message


class NotSupportedError(CoverError):
    """
    Exception raised when the file extension is not a cover-capable format.
    """
    pass


class CoverIOError(CoverError):
    """
    Exception raised when a book file or archive cannot be opened or read.
    """
    pass


class FormatError(CoverError):
    """
    Exception raised when content is present but structurally invalid
    (bad XML, bad base64, reference to a missing member).
    """
    pass


class EntryNotFoundError(FormatError):
    """
    Exception raised when an exact-name archive member does not exist.
    """
    pass


class CoverNotFoundError(CoverError):
    """
    Exception raised when a well-formed container has no resolvable cover.
    """
    pass


class NoImagesFoundError(CoverNotFoundError):
    """
    Exception raised when a comic archive holds no image entries.
    """
    pass


class ValidationError(Exception):
    """
    Exception raised when a user-supplied filename or upload is rejected.
    """
    pass


class ConfigError(Exception):
    """
    Exception raised when an environment setting cannot be parsed.
    """
    pass
