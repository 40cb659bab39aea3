"""
Configuration Module
Reads server settings from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from opds_shelf.core.exceptions import ConfigError
from opds_shelf.cover.models import DEFAULT_MAX_ENTRY_BYTES, CoverSettings

DEFAULT_PORT = 3000
DEFAULT_HOST = '0.0.0.0'
DEFAULT_BOOKS_DIR = './books'
DEFAULT_LOG_LEVEL = 'INFO'
DEFAULT_CATALOG_TITLE = 'OPDS Library'
DEFAULT_MAX_UPLOAD_BYTES = 32 * 1024 * 1024  # 32 MiB

_TRUE = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class Config:
    """
    Server configuration.
    """
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    books_dir: str = DEFAULT_BOOKS_DIR
    reverse_proxy: bool = False
    reverse_proxy_host: str = '0.0.0.0'
    reverse_proxy_port: str = '80'
    log_level: str = DEFAULT_LOG_LEVEL
    catalog_title: str = DEFAULT_CATALOG_TITLE
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    cover_settings: CoverSettings = field(default_factory=CoverSettings)
    admin_username: Optional[str] = None
    admin_password: Optional[str] = field(default=None, repr=False)

    @property
    def auth_enabled(self) -> bool:
        """Admin authentication is on only when both credentials are set."""
        return bool(self.admin_username and self.admin_password)

    def summary(self) -> dict:
        """Return the settings worth logging at startup."""
        return {
            'host': self.host,
            'port': self.port,
            'books_dir': self.books_dir,
            'reverse_proxy': self.reverse_proxy,
            'log_level': self.log_level,
            'auth': self.auth_enabled,
        }


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f'{name} must be an integer, got {raw!r}') from None
    if value <= 0:
        raise ConfigError(f'{name} must be positive, got {value}')
    return value


def _get_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build a Config from environment variables.

    Args:
        environ: Mapping to read instead of os.environ (tests)

    Returns:
        Config: Parsed settings

    Raises:
        ConfigError: If a numeric setting is not a positive integer
    """
    env = os.environ if environ is None else environ

    max_cover_bytes = _get_int(env, 'OPDS_MAX_COVER_SOURCE_BYTES', DEFAULT_MAX_ENTRY_BYTES)

    return Config(
        port=_get_int(env, 'PORT', DEFAULT_PORT),
        host=env.get('HOST', DEFAULT_HOST),
        books_dir=env.get('BOOKS_DIR', DEFAULT_BOOKS_DIR),
        reverse_proxy=_get_bool(env, 'REVERSE_PROXY'),
        reverse_proxy_host=env.get('REVERSE_PROXY_HOST', '0.0.0.0'),
        reverse_proxy_port=env.get('REVERSE_PROXY_PORT', '80'),
        log_level=env.get('OPDS_LOG_LEVEL', DEFAULT_LOG_LEVEL).upper(),
        catalog_title=env.get('OPDS_CATALOG_TITLE', DEFAULT_CATALOG_TITLE),
        max_upload_bytes=_get_int(env, 'OPDS_MAX_UPLOAD_BYTES', DEFAULT_MAX_UPLOAD_BYTES),
        cover_settings=CoverSettings(max_entry_bytes=max_cover_bytes),
        admin_username=env.get('ADMIN_USERNAME') or None,
        admin_password=env.get('ADMIN_PASSWORD') or None,
    )
