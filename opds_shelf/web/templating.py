"""
Templating Module
Jinja2 environment shared by the HTML pages and the OPDS feed.
"""

from datetime import timezone
from pathlib import Path
from typing import Dict, List
from urllib.parse import quote

from starlette.templating import Jinja2Templates

from opds_shelf.library.formatting import format_date, format_size
from opds_shelf.library.models import BookInfo
from opds_shelf.library.scanner import SORT_MODES

TEMPLATES_DIR = Path(__file__).parent / 'templates'

SORT_LABELS = {
    'name-asc': 'Name A-Z',
    'name-desc': 'Name Z-A',
    'date-asc': 'Oldest',
    'date-desc': 'Newest',
}

ATOM_DATE = '%Y-%m-%dT%H:%M:%SZ'


def atom_date(value) -> str:
    """Format an aware datetime as an Atom/RFC 3339 UTC timestamp."""
    return value.astimezone(timezone.utc).strftime(ATOM_DATE)


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters['filesize'] = format_size
templates.env.filters['shortdate'] = format_date
templates.env.filters['atomdate'] = atom_date
templates.env.filters['urlpath'] = quote


def admin_context(books: List[BookInfo], sort_mode: str) -> Dict:
    """Template variables for admin.html."""
    return {
        'title': 'Library admin',
        'books': books,
        'sort_mode': sort_mode,
        'sort_links': [(mode, SORT_LABELS[mode]) for mode in SORT_MODES],
    }


def simple_context(books: List[BookInfo]) -> Dict:
    """Template variables for simple.html."""
    return {'title': 'Simple Book List', 'books': books}
