"""
Collapses concurrent identical work into a single computation.
"""
import threading
from concurrent.futures import Future
from typing import Callable, Dict, TypeVar

T = TypeVar("T")


class InFlightRequests:
    """Per-key deduplication of in-progress work.

    The first caller for a key runs ``operation``; callers arriving while it
    runs block and receive the same result, or the same exception.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}

    def run(self, key: str, operation: Callable[[], T]) -> T:
        with self._lock:
            future = self._pending.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._pending[key] = future
        if not leader:
            return future.result()

        try:
            result = operation()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._pending.pop(key, None)

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)
