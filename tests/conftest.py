from __future__ import annotations

from io import BytesIO
from pathlib import Path
import sys
from typing import Callable, Dict, List

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from memegen.shared.artifact_store import FileArtifactStore
from memegen.shared.config import RenderContext
from memegen.specs.common.errors import FetchError


def make_image_bytes(width: int, height: int, fmt: str = "JPEG", color=(255, 255, 255)) -> bytes:
    mode = "P" if fmt == "GIF" else "RGB"
    img = Image.new("RGB", (width, height), color).convert(mode)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeFetcher:
    """Serves canned bytes per URL and counts calls; unknown URLs fail like a dead host."""

    def __init__(self, sources: Dict[str, bytes]) -> None:
        self.sources = sources
        self.calls: List[str] = []

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.sources:
            raise FetchError(details={"url": url})
        return self.sources[url]


@pytest.fixture(scope="session")
def context() -> RenderContext:
    return RenderContext()


@pytest.fixture()
def store(tmp_path: Path) -> FileArtifactStore:
    return FileArtifactStore(tmp_path / "cache")


@pytest.fixture()
def image_bytes() -> Callable[..., bytes]:
    return make_image_bytes


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher(
        {
            "http://img.test/mordor.jpg": make_image_bytes(800, 600, "JPEG"),
            "http://img.test/huge.png": make_image_bytes(2000, 2000, "PNG"),
            "http://img.test/not-an-image": b"<html>nope</html>",
        }
    )
