"""
Rate Limiter — Fixed-interval request throttle.

The Auth0 Management API enforces strict per-client rate limits, and the
partner service is protected the same way. Every outbound request goes
through RateLimiter.wait(), which spaces calls at least 1/requests_per_second
seconds apart.
"""

import time


class RateLimiter:
    """Blocks until the next request slot is available.

    Attributes:
        requests_per_second: Maximum request rate. 0 or less disables throttling.
    """

    def __init__(self, requests_per_second: float, clock=time.monotonic, sleep=time.sleep):
        self.requests_per_second = requests_per_second
        self._clock = clock
        self._sleep = sleep
        self._last_call = None

    @property
    def min_interval(self) -> float:
        if self.requests_per_second <= 0:
            return 0.0
        return 1.0 / self.requests_per_second

    def wait(self) -> float:
        """Wait for the next slot and claim it.

        Returns:
            The number of seconds slept (0.0 if no wait was needed).
        """
        slept = 0.0
        now = self._clock()
        if self._last_call is not None and self.min_interval > 0:
            remaining = self._last_call + self.min_interval - now
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
                now = self._clock()
        self._last_call = now
        return slept
