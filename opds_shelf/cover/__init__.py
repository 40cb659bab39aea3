"""
Cover Module
Extracts embedded cover images from EPUB, CBZ and FB2 books.
"""

from .dispatcher import extract_cover, detect_format, supports_cover
from .mime import MIME_TYPES, DEFAULT_MIME_TYPE, guess_mime_type, split_extension
from .models import BookFormat, CoverResult, CoverSettings, DEFAULT_SETTINGS

__all__ = [
    # Dispatcher
    'extract_cover',
    'detect_format',
    'supports_cover',
    # MIME lookup
    'MIME_TYPES',
    'DEFAULT_MIME_TYPE',
    'guess_mime_type',
    'split_extension',
    # Models
    'BookFormat',
    'CoverResult',
    'CoverSettings',
    'DEFAULT_SETTINGS',
]
