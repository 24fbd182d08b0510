import hashlib
import re

from memegen.specs.models.caption import CaptionRequest

FINGERPRINT_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def _field(value: str) -> bytes:
    # Length-prefixing keeps the encoding injective whatever the captions contain.
    raw = value.encode("utf-8")
    return str(len(raw)).encode("ascii") + b":" + raw


def fingerprint(req: CaptionRequest) -> str:
    """Return the hex cache key for a request.

    Fields are hashed in the fixed order source, top, bottom, white.
    """
    h = hashlib.sha256()
    for value in (req.source_url, req.top, req.bottom, "1" if req.white else ""):
        h.update(_field(value))
    return h.hexdigest()


def is_fingerprint(key: str) -> bool:
    return bool(FINGERPRINT_PATTERN.match(key))
