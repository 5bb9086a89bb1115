# ============================================================================
# KuCoin REST Client v1.0.0
# Transport Executor
# ============================================================================
#
# Purpose: Issues prepared requests over HTTPS and applies the retry policy
#
# Retry Policy:
#   - GET: retried on connection errors, timeouts and throttling, with
#     exponential backoff, up to max_retries total attempts
#   - BackoffState is consulted before every attempt; a server wait longer
#     than backoff_max fails fast with RateLimited
#   - POST / DELETE: NEVER retried (could duplicate a financial side effect);
#     callers retry themselves with an idempotency token (clientOid)
#
# Error Codes:
#   - KC-TRN-001: Connection failure
#   - KC-TRN-002: Timeout / deadline expired
#   - KC-RATE-001: Throttled (HTTP 429 or code 429000)
#
# ============================================================================

import json
import logging
import math
import time
from dataclasses import dataclass, field
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Dict, Optional

import requests
from requests.exceptions import Timeout, ConnectionError as RequestsConnectionError

from kucoin_rest.errors import RateLimited, RequestTimeoutError, TransportError
from kucoin_rest.rate_limiter import BackoffState, ExponentialBackoff
from kucoin_rest.request_builder import PreparedRequest

logger = logging.getLogger(__name__)


@dataclass
class RawResponse:
    """Undecoded HTTP response."""

    status_code: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    attempts: int = 1


class TransportExecutor:
    """
    HTTP executor with bounded retry for idempotent reads.

    Example Usage:
        executor = TransportExecutor(timeout=10.0)
        raw = executor.execute(builder.build("GET", "/api/v1/accounts"))
    """

    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
        backoff_state: Optional[BackoffState] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.backoff_state = backoff_state or BackoffState(clock=clock)
        self._sleep = sleep
        self._clock = clock

    # ========================================================================
    # Public API
    # ========================================================================

    def execute(
        self,
        request: PreparedRequest,
        deadline: Optional[float] = None,
        correlation_id: Optional[str] = None
    ) -> RawResponse:
        """
        Send the request, retrying only when it is idempotent.

        Args:
            request: Prepared (and signed, if private) request
            deadline: Absolute time.monotonic() value after which the call aborts
            correlation_id: Audit trail identifier

        Returns:
            RawResponse for the decoder (any non-throttling HTTP status)

        Raises:
            TransportError: Network failure (after retries for GET)
            RequestTimeoutError: Timeout or expired deadline
            RateLimited: Server throttling (after retries for GET)
        """
        attempts = self.max_retries if request.is_idempotent else 1
        backoff = ExponentialBackoff(
            base_delay=self.backoff_base,
            max_delay=self.backoff_max,
        )

        for attempt in range(1, attempts + 1):
            self._respect_backoff(request, deadline, correlation_id)
            try:
                raw = self._send_once(request, deadline)
                raw.attempts = attempt
                throttled = self._throttle_error(raw)
                if throttled is None:
                    return raw
                self.backoff_state.signal(throttled.retry_after, correlation_id)
                raise throttled

            except (TransportError, RateLimited) as e:
                if attempt >= attempts or not e.retryable or self._expired(deadline):
                    logger.error(
                        f"[{e.error_code}] Request failed | "
                        f"method={request.method} | uri={request.request_uri} | "
                        f"attempts={attempt}/{attempts} | error={e.message} | "
                        f"correlation_id={correlation_id}"
                    )
                    raise

                delay = backoff.get_delay()
                if isinstance(e, RateLimited):
                    delay = max(delay, e.retry_after or 0.0, self.backoff_state.remaining())
                    if delay > self.backoff_max:
                        logger.error(
                            f"[{e.error_code}] Server backoff exceeds retry cap | "
                            f"method={request.method} | uri={request.request_uri} | "
                            f"backoff={delay:.2f}s | cap={self.backoff_max:.2f}s | "
                            f"correlation_id={correlation_id}"
                        )
                        raise

                logger.warning(
                    f"[{e.error_code}] Retrying idempotent request | "
                    f"method={request.method} | uri={request.request_uri} | "
                    f"attempt={attempt}/{attempts} | backoff={delay:.2f}s | "
                    f"correlation_id={correlation_id}"
                )
                self._sleep_within(delay, deadline, e)

        # range() always returns or raises above
        raise TransportError(f"No attempts made for {request.request_uri}")

    def close(self) -> None:
        self.session.close()

    # ========================================================================
    # Internal Methods
    # ========================================================================

    def _send_once(self, request: PreparedRequest, deadline: Optional[float]) -> RawResponse:
        timeout = self._effective_timeout(deadline)
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body.encode("utf-8") if request.body is not None else None,
                timeout=timeout,
            )
        except Timeout as e:
            raise RequestTimeoutError(
                f"{request.method} {request.request_uri} timed out after {timeout:.2f}s"
            ) from e
        except RequestsConnectionError as e:
            raise TransportError(
                f"{request.method} {request.request_uri} connection failed: {e}"
            ) from e
        except requests.RequestException as e:
            error = TransportError(f"{request.method} {request.request_uri} failed: {e}")
            error.retryable = False
            raise error from e

        return RawResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    def _throttle_error(self, raw: RawResponse) -> Optional[RateLimited]:
        """Return RateLimited if the response signals throttling."""
        code = None
        message = "Too many requests"
        if raw.status_code == 429 or b"429000" in raw.content:
            try:
                body = json.loads(raw.content)
            except ValueError:
                body = None
            if isinstance(body, dict):
                code = str(body.get("code", "")) or None
                message = body.get("msg") or body.get("message") or message

        if raw.status_code != 429 and code != RateLimited.RATE_LIMIT_CODE:
            return None

        return RateLimited(
            message=message,
            retry_after=parse_retry_after(raw.headers),
            code=code or RateLimited.RATE_LIMIT_CODE,
            http_status=raw.status_code,
            payload=raw.content,
        )

    def _respect_backoff(
        self,
        request: PreparedRequest,
        deadline: Optional[float],
        correlation_id: Optional[str]
    ) -> None:
        remaining = self.backoff_state.remaining()
        if remaining <= 0:
            return

        logger.warning(
            f"[KC-RATE-001] Backoff window active | "
            f"remaining={remaining:.2f}s | method={request.method} | "
            f"waiting={request.is_idempotent} | correlation_id={correlation_id}"
        )
        if not request.is_idempotent:
            return

        throttled = RateLimited(message="Backoff window active", retry_after=remaining)
        if remaining > self.backoff_max:
            raise throttled
        self._sleep_within(remaining, deadline, throttled)

    def _sleep_within(self, delay: float, deadline: Optional[float], cause: Exception) -> None:
        if deadline is not None and self._clock() + delay >= deadline:
            raise RequestTimeoutError(
                f"Deadline would expire during {delay:.2f}s backoff"
            ) from cause
        self._sleep(delay)

    def _effective_timeout(self, deadline: Optional[float]) -> float:
        if deadline is None:
            return self.timeout
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise RequestTimeoutError("Deadline expired before request was sent")
        return min(self.timeout, remaining)

    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() >= deadline


def parse_retry_after(headers: Dict[str, str], now: Optional[float] = None) -> Optional[float]:
    """
    Parse a Retry-After header (seconds or HTTP date) into seconds.

    Returns None when the header is absent, unparseable or not finite.
    now is the wall-clock time.time() used for HTTP dates.
    """
    value = None
    for key, header_value in headers.items():
        if key.lower() == "retry-after":
            value = header_value
            break
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        return max(0.0, seconds) if math.isfinite(seconds) else None

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        # "-0000" dates parse naive but are still UTC
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    if now is None:
        now = time.time()
    return max(0.0, retry_at.timestamp() - now)
