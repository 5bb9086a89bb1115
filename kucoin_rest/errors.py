# ============================================================================
# KuCoin REST Client v1.0.0
# Error Taxonomy
# ============================================================================
#
# Purpose: Typed exceptions raised by the signed request/response pipeline
#
# Every error carries an audit code so callers and log readers can tell
# categories apart without parsing messages.
#
# Error Codes:
#   - KC-CFG-001: Missing or invalid configuration / credentials
#   - KC-TRN-001: Network-level transport failure
#   - KC-TRN-002: Request timed out or deadline expired
#   - KC-RATE-001: Server signalled throttling
#   - KC-API-001: Exchange rejected the request
#   - KC-DEC-001: Response payload could not be decoded
#
# ============================================================================

from typing import Optional


class KuCoinError(Exception):
    """Base exception for all client errors."""

    error_code = "KC-ERR-000"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"[{self.error_code}] {message}")


class ConfigurationError(KuCoinError, ValueError):
    """Raised when credentials or client settings are missing or invalid."""

    error_code = "KC-CFG-001"


class TransportError(KuCoinError):
    """Raised when the HTTP call could not be completed."""

    error_code = "KC-TRN-001"
    retryable = True


class RequestTimeoutError(TransportError, TimeoutError):
    """
    Raised when a request times out or its deadline has already passed.

    Also a builtin TimeoutError so callers can catch either.
    """

    error_code = "KC-TRN-002"


class ApiError(KuCoinError):
    """
    Exchange-level rejection carrying the exchange code and message verbatim.

    The category helpers are derived from the code; the code itself is
    always preserved on the instance.
    """

    error_code = "KC-API-001"

    # KuCoin error code families
    AUTH_CODES = frozenset({
        "400001", "400002", "400003", "400004", "400005",
        "400006", "400007", "411100",
    })
    INVALID_PARAMETER_CODES = frozenset({"400100", "400760"})
    INSUFFICIENT_BALANCE_CODES = frozenset({"200004", "300000", "230003"})
    NOT_FOUND_CODES = frozenset({"404000", "400500"})

    def __init__(
        self,
        code: str,
        message: str,
        http_status: Optional[int] = None,
        payload: Optional[bytes] = None
    ):
        self.code = str(code)
        self.api_message = message
        self.http_status = http_status
        self.payload = payload
        super().__init__(f"code={self.code} message={message}")

    def is_auth_error(self) -> bool:
        return self.code in self.AUTH_CODES or self.http_status == 401

    def is_invalid_parameter(self) -> bool:
        return self.code in self.INVALID_PARAMETER_CODES

    def is_insufficient_balance(self) -> bool:
        return self.code in self.INSUFFICIENT_BALANCE_CODES

    def is_not_found(self) -> bool:
        return self.code in self.NOT_FOUND_CODES or self.http_status == 404

    def is_server_error(self) -> bool:
        if self.http_status is not None and self.http_status >= 500:
            return True
        return self.code.startswith("5")


class RateLimited(ApiError):
    """
    Raised on HTTP 429 or the exchange's rate-limit code.

    retry_after is the server-provided hint in seconds, or None.
    """

    error_code = "KC-RATE-001"
    retryable = True

    RATE_LIMIT_CODE = "429000"

    def __init__(
        self,
        message: str = "Too many requests",
        retry_after: Optional[float] = None,
        code: str = RATE_LIMIT_CODE,
        http_status: Optional[int] = 429,
        payload: Optional[bytes] = None
    ):
        self.retry_after = retry_after
        super().__init__(code, message, http_status=http_status, payload=payload)


class DecodeError(KuCoinError):
    """Raised on malformed JSON or a payload that does not match the target shape."""

    error_code = "KC-DEC-001"

    def __init__(self, message: str, payload=None):
        self.payload = payload
        super().__init__(f"{message} | payload={_preview(payload)}")


def _preview(payload, limit: int = 512) -> str:
    if payload is None:
        return "None"
    if isinstance(payload, (bytes, bytearray)):
        text = bytes(payload).decode("utf-8", errors="replace")
    else:
        text = str(payload)
    if len(text) > limit:
        return text[:limit] + "..."
    return text
