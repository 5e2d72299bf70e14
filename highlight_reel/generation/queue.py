"""Serialized access to the generation backend with rate-limit backoff.

Providers enforce a per-credential rate limit, so every call made during a
run goes through one :class:`GenerationQueue`: a single worker thread that
executes requests strictly one at a time in submission order. When a call is
rejected with a "retry in <N>s" hint the worker sleeps (blocking the whole
queue) and retries the same request with an escalating penalty.
"""

from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

from highlight_reel.errors import GenerationFailure, RateLimitRetriesExhausted

if TYPE_CHECKING:
    from highlight_reel.generation.backends import GenerationBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")

# e.g. "Please retry in 58.384186637s"
_RATE_LIMIT_RE = re.compile(r"retry in (\d+(?:\.\d+)?)s", re.IGNORECASE)

# Extra wait added per retry of the same request
RETRY_PENALTY_MS = 60_000


def parse_rate_limit_wait_ms(message: str) -> int | None:
    """Return the suggested wait in milliseconds, or None if not a rate limit.

    The hint is rounded up to whole seconds.

    Example:
        parse_rate_limit_wait_ms("quota exceeded, retry in 12.5s") -> 13000
    """
    match = _RATE_LIMIT_RE.search(message)
    if match is None:
        return None
    return math.ceil(float(match.group(1))) * 1000


class GenerationQueue:
    """FIFO, one-in-flight executor for generation requests.

    Args:
        sleep: Function used to wait, in seconds (injectable for tests).
        max_retries: Cap on rate-limit retries per request. ``None`` retries
            until the provider accepts the call.
    """

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int | None = None,
    ) -> None:
        if max_retries is not None and max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")
        self._sleep = sleep
        self._max_retries = max_retries
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="generation-queue")

    def submit(self, request_fn: Callable[[], T]) -> T:
        """Queue *request_fn* behind all earlier requests and wait for its result.

        Raises:
            GenerationFailure: The request failed with a non rate-limit error,
                or exhausted the configured retry cap.
        """
        future = self._executor.submit(self._execute_with_retry, request_fn)
        return future.result()

    def _execute_with_retry(self, request_fn: Callable[[], T]) -> T:
        retry_count = 0
        while True:
            try:
                return request_fn()
            except Exception as exc:
                message = str(exc) or repr(exc)
                wait_ms = parse_rate_limit_wait_ms(message)
                if wait_ms is None:
                    if isinstance(exc, GenerationFailure):
                        raise
                    raise GenerationFailure(message) from exc

                if self._max_retries is not None and retry_count >= self._max_retries:
                    raise RateLimitRetriesExhausted(retry_count + 1, message) from exc

                total_wait_ms = wait_ms + retry_count * RETRY_PENALTY_MS
                logger.warning(
                    "Rate limit hit. Waiting %.1fs (retry #%d)...",
                    total_wait_ms / 1000,
                    retry_count + 1,
                )
                self._sleep(total_wait_ms / 1000)
                retry_count += 1

    def close(self) -> None:
        """Finish queued requests and stop the worker thread."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> GenerationQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class GenerationClient:
    """A generation backend whose calls are routed through a queue."""

    def __init__(self, backend: GenerationBackend, queue: GenerationQueue) -> None:
        self.backend = backend
        self.queue = queue

    def generate(self, prompt: str) -> str:
        return self.queue.submit(lambda: self.backend.generate_content(prompt))
