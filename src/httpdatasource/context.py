"""
context.py
----------
Cancellation and deadline handling for a single read. Blocking network calls
run on a worker thread so the caller can give up on them as soon as the
context is cancelled or its deadline passes.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Optional

from .exceptions import Cancelled, DeadlineExceeded

POLL_INTERVAL = 0.05


class ExecutionContext:
    def __init__(self, timeout: Optional[float] = None) -> None:
        self._cancelled = threading.Event()
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def raise_if_done(self) -> None:
        if self.cancelled:
            raise Cancelled("context canceled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise DeadlineExceeded("context deadline exceeded")

    def run(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run fn on a worker thread, returning early if the context ends."""
        self.raise_if_done()
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="httpdatasource")
        future = pool.submit(fn, *args, **kwargs)
        try:
            while True:
                wait = POLL_INTERVAL
                remaining = self.remaining()
                if remaining is not None:
                    wait = min(wait, remaining)
                try:
                    return future.result(timeout=wait)
                except FutureTimeout:
                    if future.done():
                        raise
                    self.raise_if_done()
        finally:
            pool.shutdown(wait=False)
