from __future__ import annotations

from typing import Dict, Type

from pydantic import BaseModel

from .caption import CaptionColor, CaptionRequest


# Registry mapping output schema filenames to models for generation
SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    "caption.request.schema.json": CaptionRequest,
}

__all__ = [
    "SCHEMA_MODELS",
    "CaptionColor",
    "CaptionRequest",
]
