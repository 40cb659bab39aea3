"""
opds-shelf
A small personal e-book server: OPDS catalog, admin page and cover extraction.
"""

__version__ = "0.4.0"
