from __future__ import annotations

import logging
import ssl
from datetime import timedelta
from pathlib import Path

import aiohttp
import certifi
from aiohttp_client_cache import CachedSession, SQLiteBackend

from shared.constants import (
    HTTP_CACHE_DIR,
    HTTP_CACHE_ENABLED,
    HTTP_CACHE_EXPIRE_HOURS,
)

logger = logging.getLogger(__name__)

# Имя файла SQLite-кэша HTTP-ответов
HTTP_CACHE_FILE = 'http_cache.sqlite'


def resolve_cache_dir(raw_dir: str | Path = HTTP_CACHE_DIR) -> Path:
    """Absolute cache directory; relative paths are taken from the current directory."""
    path = Path(raw_dir).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def make_http_session(
    cache_dir: Path | None = None,
    *,
    use_cache: bool = HTTP_CACHE_ENABLED,
    expire_hours: int = HTTP_CACHE_EXPIRE_HOURS,
) -> aiohttp.ClientSession:
    """Create an aiohttp session with certifi roots and an optional SQLite response cache."""
    # SSL-контекст с сертификатами из certifi
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    if use_cache and cache_dir is not None:
        cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = cache_dir / HTTP_CACHE_FILE
        expire_td = timedelta(hours=max(0, int(expire_hours)))
        backend = SQLiteBackend(str(cache_path), expire_after=expire_td)
        logger.info('HTTP response cache at %s', cache_path)
        return CachedSession(cache=backend, connector=connector)
    return aiohttp.ClientSession(connector=connector)
