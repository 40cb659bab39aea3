"""
Web Module
Starlette application: OPDS feed, admin pages, login, cover and download routes.
"""

from .app import create_app, get_base_url
from .auth import AdminAuthMiddleware
from .opds import render_feed, OPDS_MEDIA_TYPE
from .templating import templates

__all__ = [
    'create_app',
    'get_base_url',
    'AdminAuthMiddleware',
    'render_feed',
    'OPDS_MEDIA_TYPE',
    'templates',
]
