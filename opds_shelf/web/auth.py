"""
Admin Authentication Module
HTTP Basic and session-cookie checks, and the middleware guarding the app
when ADMIN_USERNAME and ADMIN_PASSWORD are configured.
"""

import base64
import binascii
import hashlib
import hmac
import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from opds_shelf.conf import Config

logger = logging.getLogger(__name__)

AUTH_COOKIE = 'auth_session'
AUTH_COOKIE_MAX_AGE = 1296000  # 15 days
AUTH_REALM = 'opds-shelf'
LOGIN_PATH = '/user/login'
PUBLIC_PREFIX = '/user/'


def _matches(value: str, expected: Optional[str]) -> bool:
    if expected is None:
        return False
    return hmac.compare_digest(value.encode('utf-8'), expected.encode('utf-8'))


def check_credentials(config: Config, username: str, password: str) -> bool:
    """Compare a username/password pair with the configured admin account."""
    if not config.auth_enabled:
        return False
    # Both comparisons always run
    user_ok = _matches(username, config.admin_username)
    password_ok = _matches(password, config.admin_password)
    return user_ok and password_ok


def check_basic_auth(config: Config, header: Optional[str]) -> bool:
    """
    Validate an 'Authorization: Basic ...' header.

    Malformed headers (wrong scheme, bad base64, no ':') are simply
    rejected.
    """
    if not header:
        return False
    scheme, _, encoded = header.partition(' ')
    if scheme.lower() != 'basic' or not encoded.strip():
        return False
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        return False
    username, sep, password = decoded.partition(':')
    if not sep:
        return False
    return check_credentials(config, username, password)


def session_token(config: Config) -> str:
    """
    Cookie value for an authenticated session.

    HMAC-SHA256 of the username keyed by the password, so the cookie cannot
    be forged and stops working when the password changes.
    """
    key = (config.admin_password or '').encode('utf-8')
    message = (config.admin_username or '').encode('utf-8')
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def check_session(config: Config, cookie: Optional[str]) -> bool:
    if not cookie or not config.auth_enabled:
        return False
    return hmac.compare_digest(cookie.encode('utf-8'), session_token(config).encode('utf-8'))


def is_authenticated(config: Config, request: Request) -> bool:
    """True when auth is disabled or the request carries valid credentials."""
    if not config.auth_enabled:
        return True
    return (
        check_session(config, request.cookies.get(AUTH_COOKIE))
        or check_basic_auth(config, request.headers.get('authorization'))
    )


def deny(request: Request) -> Response:
    """Send browsers to the login form; ask other clients for Basic credentials."""
    if 'text/html' in request.headers.get('accept', ''):
        return RedirectResponse(LOGIN_PATH, status_code=303)
    return PlainTextResponse(
        'Unauthorized',
        status_code=401,
        headers={'WWW-Authenticate': f'Basic realm="{AUTH_REALM}"'},
    )


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """
    Require admin credentials on every route outside /user/.

    A no-op when the configuration has no admin account.
    """

    def __init__(self, app, config: Config):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path.startswith(PUBLIC_PREFIX) or is_authenticated(self.config, request):
            return await call_next(request)

        logger.info(f'Unauthenticated {request.method} {request.url.path}')
        return deny(request)
