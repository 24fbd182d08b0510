"""
Process-wide configuration for the caption image service.

Rendering constants are fixed; operational settings (storage, fetch limits,
font location) come from environment variables and are read once.
"""
import io
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from memegen.shared.logging_utils import info as log_info, warning as log_warning
from memegen.specs.common.errors import ConfigurationError

MAX_WIDTH = 1200
MAX_HEIGHT = 1200
FONT_SCALING = 0.06  # font size, as a factor of image width
HEIGHT_FACTOR = 0.14  # caption baseline, as a factor of image height
DPI = 72  # points == pixels at this resolution

DEFAULT_FONT_PATH = "impact.ttf"
DEFAULT_CACHE_DIR = "cache"
DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_MAX_SOURCE_BYTES = 20 * 1024 * 1024


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number", details={"value": raw})
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive", details={"value": raw})
    return value


@dataclass(frozen=True)
class ServiceSettings:
    font_path: str
    cache_dir: str
    store_backend: str
    blob_connection_string: Optional[str]
    blob_container: str
    fetch_timeout: float
    max_source_bytes: int

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        backend = (os.getenv("MEMEGEN_STORE_BACKEND") or "file").lower()
        if backend not in ("file", "blob"):
            raise ConfigurationError(
                "MEMEGEN_STORE_BACKEND must be 'file' or 'blob'", details={"value": backend}
            )
        return cls(
            font_path=os.getenv("MEMEGEN_FONT_PATH", DEFAULT_FONT_PATH),
            cache_dir=os.getenv("MEMEGEN_CACHE_DIR", DEFAULT_CACHE_DIR),
            store_backend=backend,
            blob_connection_string=os.getenv("MEMEGEN_BLOB_CONNECTION_STRING"),
            blob_container=os.getenv("MEMEGEN_BLOB_CONTAINER", "captions"),
            fetch_timeout=_env_float("MEMEGEN_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
            max_source_bytes=int(_env_float("MEMEGEN_MAX_SOURCE_BYTES", DEFAULT_MAX_SOURCE_BYTES)),
        )


@lru_cache(maxsize=1)
def get_settings() -> ServiceSettings:
    return ServiceSettings.from_env()


@lru_cache(maxsize=64)
def _truetype(font_bytes: bytes, size: float) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(io.BytesIO(font_bytes), size=size)


@dataclass(frozen=True)
class RenderContext:
    """Immutable font + constants shared by every render in the process."""

    font_bytes: Optional[bytes] = None
    max_width: int = MAX_WIDTH
    max_height: int = MAX_HEIGHT
    font_scaling: float = FONT_SCALING
    height_factor: float = HEIGHT_FACTOR
    dpi: int = DPI

    def font_size_for(self, surface_width: int) -> float:
        # Pillow sizes are in pixels; at 72 DPI a point is a pixel.
        return max(1.0, surface_width * self.font_scaling * self.dpi / 72)

    def font(self, size: float) -> ImageFont.FreeTypeFont:
        if self.font_bytes is None:
            return ImageFont.load_default(size=size)
        return _truetype(self.font_bytes, size)

    @classmethod
    def load(cls, font_path: str) -> "RenderContext":
        path = Path(font_path)
        if not path.is_file():
            log_warning(None, "config:font_missing", fontPath=font_path)
            return cls()
        font_bytes = path.read_bytes()
        try:
            ImageFont.truetype(io.BytesIO(font_bytes), size=12)
        except OSError as exc:
            raise ConfigurationError("Font file could not be parsed", details={"fontPath": font_path, "error": str(exc)})
        log_info(None, "config:font_loaded", fontPath=font_path, bytes=len(font_bytes))
        return cls(font_bytes=font_bytes)


@lru_cache(maxsize=1)
def get_render_context() -> RenderContext:
    return RenderContext.load(get_settings().font_path)
