"""Runtime settings of the elevation service and their TOML profile."""

from __future__ import annotations

import logging
from pathlib import Path

import tomlkit
from pydantic import BaseModel, field_validator

from shared.constants import (
    DEFAULT_RESOLUTION,
    HTTP_BACKOFF_FACTOR,
    HTTP_CACHE_DIR,
    HTTP_CACHE_ENABLED,
    HTTP_CACHE_EXPIRE_HOURS,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    SKADI_BASE_URL,
    TILE_FETCH_CONCURRENCY,
    TILE_STORE_DIR,
    Resolution,
)

logger = logging.getLogger(__name__)

# Section of the TOML profile holding the settings
SETTINGS_SECTION = 'elevation'


class ElevationSettings(BaseModel):
    """Settings of the tile source, tile stores and cache."""

    model_config = {
        'extra': 'ignore',
    }

    # Resolution family of the tiles served by the source
    resolution: Resolution = DEFAULT_RESOLUTION

    # Remote source: base URL of the skadi layout
    base_url: str = SKADI_BASE_URL
    # Local directory with .hgt / .hgt.gz tiles; replaces the remote source
    data_dir: str | None = None
    # Directory where downloaded tiles are kept decompressed; empty disables it
    store_dir: str = TILE_STORE_DIR

    # Network
    timeout_s: float = HTTP_TIMEOUT_DEFAULT
    retries: int = HTTP_RETRIES_DEFAULT
    backoff: float = HTTP_BACKOFF_FACTOR

    # HTTP response cache (aiohttp_client_cache)
    http_cache_enabled: bool = HTTP_CACHE_ENABLED
    http_cache_dir: str = HTTP_CACHE_DIR
    http_cache_expire_hours: int = HTTP_CACHE_EXPIRE_HOURS

    # In-memory cache
    max_concurrent_fetches: int = TILE_FETCH_CONCURRENCY

    @field_validator('resolution', mode='before')
    @classmethod
    def validate_resolution(cls, v: Resolution | str) -> Resolution:
        if isinstance(v, Resolution):
            return v
        try:
            return Resolution(str(v).strip().lower())
        except ValueError:
            choices = ', '.join(r.value for r in Resolution)
            msg = f'Unknown resolution {v!r}, expected one of: {choices}'
            raise ValueError(msg) from None

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(('http://', 'https://')):
            msg = f'base_url must be an http(s) URL: {v!r}'
            raise ValueError(msg)
        return v.rstrip('/')

    @field_validator('timeout_s', 'backoff')
    @classmethod
    def validate_positive(cls, v: float) -> float:
        v = float(v)
        if v <= 0:
            msg = 'Value must be positive'
            raise ValueError(msg)
        return v

    @field_validator('retries', 'max_concurrent_fetches')
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        v = int(v)
        if v < 1:
            msg = 'Value must be at least 1'
            raise ValueError(msg)
        return v

    @property
    def store_path(self) -> Path | None:
        return Path(self.store_dir).expanduser() if self.store_dir else None

    @property
    def data_path(self) -> Path | None:
        return Path(self.data_dir).expanduser() if self.data_dir else None


def load_settings(path: str | Path | None = None) -> ElevationSettings:
    """Load settings from a TOML file.

    Keys may live at the top level or under an ``[elevation]`` table. Without
    a path the defaults are returned.
    """
    if path is None:
        return ElevationSettings()
    p = Path(path)
    text = p.read_text(encoding='utf-8')
    data = tomlkit.parse(text).unwrap()
    section = data.get(SETTINGS_SECTION)
    if isinstance(section, dict):
        data = section
    settings = ElevationSettings.model_validate(data)
    logger.info('Settings loaded from %s', p)
    return settings


def save_settings(settings: ElevationSettings, path: str | Path) -> Path:
    """Write settings to a TOML file under an ``[elevation]`` table."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode='json', exclude_none=True)
    doc = tomlkit.document()
    doc[SETTINGS_SECTION] = data
    p.write_text(tomlkit.dumps(doc), encoding='utf-8')
    return p
