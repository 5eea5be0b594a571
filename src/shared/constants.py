from __future__ import annotations

from enum import Enum

# --- Источник тайлов SRTM (публичный бакет AWS "skadi")
SKADI_BASE_URL = 'https://elevation-tiles-prod.s3.amazonaws.com/skadi'
# Расширения файлов тайла: распакованный и сжатый вариант
HGT_SUFFIX = '.hgt'
HGT_GZ_SUFFIX = '.hgt.gz'
# Магические байты gzip
GZIP_MAGIC = b'\x1f\x8b'

# --- Геометрия тайлов
# Сторона сетки SRTM1 (1 угловая секунда, 3600 интервалов + перекрытие)
SRTM1_SIDE = 3601
# Сторона сетки SRTM3 (3 угловые секунды, 1200 интервалов + перекрытие)
SRTM3_SIDE = 1201
# Байт на один отсчёт (big-endian int16)
BYTES_PER_SAMPLE = 2
# Отсчёт «нет данных»
VOID_SAMPLE = -32768

# --- Допустимые диапазоны координат (градусы)
LAT_MIN = -90.0
LAT_MAX = 90.0
LON_MIN = -180.0
LON_MAX = 180.0
# Последние полосы, в которые прижимаются полюс и антимеридиан
LAT_BAND_MAX = 89
LON_BAND_MAX = 179


class Resolution(str, Enum):
    """Resolution family of an SRTM tile."""

    SRTM1 = 'srtm1'
    SRTM3 = 'srtm3'

    @property
    def side(self) -> int:
        return SRTM1_SIDE if self is Resolution.SRTM1 else SRTM3_SIDE

    @property
    def sample_count(self) -> int:
        return self.side * self.side

    @property
    def byte_length(self) -> int:
        return self.sample_count * BYTES_PER_SAMPLE

    @classmethod
    def from_byte_length(cls, length: int) -> Resolution | None:
        """Resolution whose raw tile is exactly `length` bytes, if any."""
        for res in cls:
            if res.byte_length == length:
                return res
        return None


# Разрешение по умолчанию (публичный бакет отдаёт SRTM1)
DEFAULT_RESOLUTION = Resolution.SRTM1

# --- Кэш тайлов в памяти
# Максимум одновременных загрузок разных тайлов
TILE_FETCH_CONCURRENCY = 4

# --- Каталог распакованных тайлов на диске (пустая строка отключает)
TILE_STORE_DIR = ''

# --- Опции HTTP-кэша ответов
HTTP_CACHE_ENABLED = False
# Каталог кэша (относительные пути считаются от текущего каталога)
HTTP_CACHE_DIR = '.cache/hgt'
# Время жизни (TTL) в часах
HTTP_CACHE_EXPIRE_HOURS = 24 * 30

# --- Параметры сетевых запросов по умолчанию
HTTP_TIMEOUT_DEFAULT = 60.0
HTTP_RETRIES_DEFAULT = 4
HTTP_BACKOFF_FACTOR = 1.6
HTTP_5XX_MIN = 500
HTTP_5XX_MAX = 600

# --- Логирование
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
