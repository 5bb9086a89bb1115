# ============================================================================
# KuCoin REST Client v1.0.0
# Backoff State - Server-Signalled Throttling
# ============================================================================
#
# Purpose: Tracks "backoff until" after HTTP 429 / code 429000 and computes
#          retry delays for idempotent reads
#
# MANDATE:
#   - Thread-safe with mutex lock
#   - Advisory only: never blocks unrelated calls while holding the lock
#   - One instance per client unless a caller shares it explicitly
#
# Error Codes:
#   - KC-RATE-001: Rate limit signalled by server
#
# ============================================================================

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class BackoffState:
    """
    Thread-Safe shared backoff marker.

    Records the monotonic time until which the server asked us to back off.
    Readers only inspect the value; the executor decides whether to wait.

    Example Usage:
        state = BackoffState()
        state.signal(retry_after=2.0)
        remaining = state.remaining()   # ~2.0
    """

    DEFAULT_BACKOFF_SECONDS = 1.0

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._until = 0.0
        self._signals = 0
        self._lock = threading.Lock()

    def signal(
        self,
        retry_after: Optional[float] = None,
        correlation_id: Optional[str] = None
    ) -> float:
        """
        Record a throttling signal; the later deadline wins.

        Returns:
            The backoff duration applied, in seconds
        """
        delay = retry_after if retry_after is not None and retry_after > 0 else self.DEFAULT_BACKOFF_SECONDS
        with self._lock:
            self._until = max(self._until, self._clock() + delay)
            self._signals += 1
            signals = self._signals

        logger.warning(
            f"[KC-RATE-001] Backoff recorded | "
            f"delay={delay:.2f}s | signals={signals} | "
            f"correlation_id={correlation_id}"
        )
        return delay

    def remaining(self) -> float:
        """Seconds left in the current backoff window (0.0 if none)."""
        with self._lock:
            return max(0.0, self._until - self._clock())

    @property
    def signal_count(self) -> int:
        with self._lock:
            return self._signals

    def reset(self) -> None:
        with self._lock:
            self._until = 0.0
            self._signals = 0


# ============================================================================
# Retry Delay Schedule
# ============================================================================

class ExponentialBackoff:
    """
    Capped exponential retry schedule: base_delay * multiplier**n.

    One instance per logical call; not shared between threads.
    """

    def __init__(
        self,
        base_delay: float = 0.5,
        multiplier: float = 2.0,
        max_delay: float = 8.0
    ):
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.max_delay = max_delay
        self._attempt = 0

    def get_delay(self) -> float:
        """Delay before the next retry, in seconds; advances the schedule."""
        delay = min(self.max_delay, self.base_delay * self.multiplier ** self._attempt)
        self._attempt += 1
        return delay

    def reset(self) -> None:
        self._attempt = 0
