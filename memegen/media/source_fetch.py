"""
Outbound fetch of caption source images.
"""
from typing import Optional

import requests

from memegen.shared.config import get_settings
from memegen.shared.logging_utils import error as log_error, warning as log_warning
from memegen.specs.common.errors import FetchError

_CHUNK_SIZE = 64 * 1024


def fetch_source(url: str, *, timeout: Optional[float] = None, max_bytes: Optional[int] = None) -> bytes:
    """Download ``url`` and return the body.

    Any transport failure or a body longer than ``max_bytes`` raises
    FetchError. The HTTP status is not checked: an error page is handed to
    the decoder like any other body. There is no retry.
    """
    settings = get_settings()
    timeout = timeout if timeout is not None else settings.fetch_timeout
    max_bytes = max_bytes if max_bytes is not None else settings.max_source_bytes

    try:
        with requests.get(url, timeout=timeout, stream=True) as response:
            if response.status_code >= 400:
                log_warning(None, "fetch:error_status", url=url, status=response.status_code)
            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > max_bytes:
                log_error(None, "fetch:too_large", url=url, contentLength=int(declared))
                raise FetchError(details={"url": url, "reason": "content too large"})
            buf = bytearray()
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                buf.extend(chunk)
                if len(buf) > max_bytes:
                    log_error(None, "fetch:too_large", url=url, received=len(buf))
                    raise FetchError(details={"url": url, "reason": "content too large"})
            return bytes(buf)
    except requests.RequestException as exc:
        log_error(None, "fetch:failed", url=url, error=str(exc))
        raise FetchError(details={"url": url, "error": str(exc)}) from exc
