"""
Core Module
Provides the exception taxonomy shared by the cover, library and web layers.
"""

from .exceptions import (
    CoverError,
    NotSupportedError,
    CoverIOError,
    FormatError,
    EntryNotFoundError,
    CoverNotFoundError,
    NoImagesFoundError,
    ValidationError,
    ConfigError,
)

__all__ = [
    # Cover extraction
    'CoverError',
    'NotSupportedError',
    'CoverIOError',
    'FormatError',
    'EntryNotFoundError',
    'CoverNotFoundError',
    'NoImagesFoundError',
    # Library / configuration
    'ValidationError',
    'ConfigError',
]
