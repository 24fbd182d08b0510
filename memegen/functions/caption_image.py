"""
Request orchestration: replay cached captions or render, persist and return them.
"""
from dataclasses import dataclass
from functools import lru_cache
from time import perf_counter
from typing import Callable, Optional

from memegen.media.compositor import generate
from memegen.media.source_fetch import fetch_source
from memegen.shared.artifact_store import ArtifactStore, get_artifact_store
from memegen.shared.config import RenderContext, get_render_context
from memegen.shared.fingerprint import fingerprint
from memegen.shared.inflight import InFlightRequests
from memegen.shared.logging_utils import info as log_info, error as log_error
from memegen.specs.common.errors import StoreWriteFailure
from memegen.specs.models.caption import CaptionRequest


@dataclass(frozen=True)
class CaptionResult:
    key: str
    body: bytes
    cached: bool


class CaptionImageService:
    def __init__(
        self,
        store: ArtifactStore,
        context: RenderContext,
        fetch: Callable[[str], bytes] = fetch_source,
        inflight: Optional[InFlightRequests] = None,
    ) -> None:
        self.store = store
        self.context = context
        self.fetch = fetch
        self.inflight = inflight or InFlightRequests()

    def get_image(self, req: CaptionRequest) -> CaptionResult:
        """Return the captioned image for ``req``, from cache when possible.

        Pipeline errors propagate unchanged and nothing is cached for them.
        """
        key = fingerprint(req)
        cached = self.store.exists_and_read(key)
        if cached is not None:
            log_info(key, "caption:cache_hit", bytes=len(cached))
            return CaptionResult(key=key, body=cached, cached=True)
        return self.inflight.run(key, lambda: self._render_and_store(req, key))

    def _render_and_store(self, req: CaptionRequest, key: str) -> CaptionResult:
        # A render for this key may have finished between the read above and
        # becoming leader.
        cached = self.store.exists_and_read(key)
        if cached is not None:
            log_info(key, "caption:cache_hit", bytes=len(cached), late=True)
            return CaptionResult(key=key, body=cached, cached=True)

        start = perf_counter()
        body = generate(req, self.context, fetch=self.fetch, key=key)
        duration_ms = int((perf_counter() - start) * 1000)
        log_info(key, "caption:rendered", bytes=len(body), durationMs=duration_ms)

        try:
            self.store.write(key, body)
        except StoreWriteFailure as exc:
            log_error(key, "store:write_failed", code=exc.code, error=str(exc), details=exc.details)
        return CaptionResult(key=key, body=body, cached=False)


@lru_cache(maxsize=1)
def get_caption_service() -> CaptionImageService:
    return CaptionImageService(store=get_artifact_store(), context=get_render_context())
