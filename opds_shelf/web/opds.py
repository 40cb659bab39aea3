"""
OPDS Feed Module
Renders the Atom acquisition feed for the book list.
"""

import hashlib
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import quote

from opds_shelf.library.models import BookInfo
from opds_shelf.web.templating import templates

OPDS_MEDIA_TYPE = 'application/atom+xml;charset=utf-8;profile=opds-catalog;kind=acquisition'
FEED_LINK_TYPE = 'application/atom+xml;profile=opds-catalog;kind=acquisition'


def book_id(book: BookInfo) -> str:
    """Stable entry id derived from the relative filename."""
    return 'urn:md5:' + hashlib.md5(book.filename.encode('utf-8')).hexdigest()


def book_url(base_url: str, prefix: str, filename: str) -> str:
    """Absolute URL of a book resource, path segments percent-quoted."""
    return f'{base_url}/{prefix}/{quote(filename)}'


def render_feed(books: Iterable[BookInfo], base_url: str, title: str,
                now: Optional[datetime] = None) -> str:
    """
    Render the full OPDS acquisition feed from opds.xml.

    Cover-capable formats get image and thumbnail links pointing at the
    cover route; the acquisition link points at the raw file.

    Args:
        books: Books in display order
        base_url: Scheme and authority used for absolute links, no trailing '/'
        title: Catalog title
        now: Feed <updated> time (defaults to the current UTC time)

    Returns:
        str: XML document
    """
    return templates.get_template('opds.xml').render(
        books=list(books),
        base_url=base_url,
        title=title,
        now=now or datetime.now(tz=timezone.utc),
        feed_link_type=FEED_LINK_TYPE,
        book_id=book_id,
        book_url=book_url,
    )
