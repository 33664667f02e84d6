"""Exponential backoff around an origin fetcher."""

import time
from typing import Callable, Optional

from ..config.defaults import RetryParams
from ..errors import OriginRetryableError
from ..events.models import ObservationPair
from .base import OriginFetcher


class RetryingOriginFetcher(OriginFetcher):
    """
    Retries retryable origin failures with capped exponential backoff.

    Only ``OriginRetryableError`` is retried. Permanent errors and malformed
    data propagate on the first attempt.
    """

    def __init__(
        self,
        inner: OriginFetcher,
        params: Optional[RetryParams] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        super().__init__(f"{inner.name}+retry")
        self.inner = inner
        self.params = params or RetryParams()
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (0-based)."""
        return min(self.params.base_delay_seconds * (2 ** attempt), self.params.max_delay_seconds)

    def fetch(self, indicator_id: str) -> ObservationPair:
        attempt = 0
        self._fetch_count += 1

        while True:
            try:
                return self.inner.fetch(indicator_id)

            except OriginRetryableError as e:
                if attempt >= self.params.max_retries:
                    self._error_count += 1
                    self.logger.warning(
                        "Origin retries exhausted",
                        origin=self.inner.name,
                        indicator_id=indicator_id,
                        attempts=attempt + 1,
                        error=str(e)
                    )
                    raise

                delay = self.delay_for(attempt)
                attempt += 1
                self.logger.info(
                    "Retrying origin fetch",
                    origin=self.inner.name,
                    indicator_id=indicator_id,
                    attempt=attempt,
                    delay_seconds=delay,
                    status_code=e.status_code
                )
                self._sleep(delay)
