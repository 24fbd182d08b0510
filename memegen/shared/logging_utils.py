"""
Structured logging for the caption service.

Every record carries ``custom_dimensions`` so Application Insights can slice
by fingerprint; records without a fingerprint are request-level events.
"""
import logging
from typing import Any, Dict, Optional


SERVICE_NAME = "memegen"

_LOGGER = logging.getLogger(SERVICE_NAME)


def _dimensions(fingerprint: Optional[str], dimensions: Dict[str, Any]) -> Dict[str, Any]:
    dims: Dict[str, Any] = {"service": SERVICE_NAME}
    if fingerprint:
        dims["fingerprint"] = fingerprint
    dims.update(dimensions)
    return dims


def log(level: int, fingerprint: Optional[str], message: str, exc_info: bool = False, **dimensions: Any) -> None:
    dims = _dimensions(fingerprint, dimensions)
    try:
        _LOGGER.log(level, message, exc_info=exc_info, extra={"custom_dimensions": dims})
    except Exception:
        # Fallback if extra/custom_dimensions not supported in the environment
        _LOGGER.log(level, f"{message} | {dims}", exc_info=exc_info)


def info(fingerprint: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, fingerprint, message, **dimensions)


def warning(fingerprint: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, fingerprint, message, **dimensions)


def error(fingerprint: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, fingerprint, message, **dimensions)


def exception(fingerprint: Optional[str], message: str, **dimensions: Any) -> None:
    """Log at ERROR with the active traceback attached."""
    log(logging.ERROR, fingerprint, message, exc_info=True, **dimensions)
