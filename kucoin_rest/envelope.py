# ============================================================================
# KuCoin REST Client v1.0.0
# Envelope Decoder
# ============================================================================
#
# Purpose: Parses the {code, data, msg} response envelope and unmarshals
#          data into caller-supplied shapes
#
# Envelope Wire Shape:
#   {"code": "200000", "data": <any>}            success
#   {"code": "400100", "msg": "Invalid ..."}     failure
#
# MANDATE:
#   - JSON numbers with fractions are parsed as Decimal, never float
#   - A non-success code ALWAYS surfaces as ApiError with the exact code
#   - Malformed payloads surface as DecodeError carrying the payload
#
# ============================================================================

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError

from kucoin_rest.errors import ApiError, DecodeError, RateLimited
from kucoin_rest.transport import parse_retry_after

logger = logging.getLogger(__name__)


SUCCESS_CODE = "200000"


@lru_cache(maxsize=256)
def _adapter(shape) -> TypeAdapter:
    return TypeAdapter(shape)


def validate_shape(shape, data: Any, payload: Optional[bytes] = None):
    """
    Validate raw JSON data against a pydantic-compatible shape.

    Raises:
        DecodeError: If the data does not match the shape (KC-DEC-001)
    """
    try:
        return _adapter(shape).validate_python(data)
    except ValidationError as e:
        logger.error(
            f"[KC-DEC-001] Schema mismatch | "
            f"shape={getattr(shape, '__name__', shape)} | errors={e.error_count()}"
        )
        raise DecodeError(
            f"Payload does not match {getattr(shape, '__name__', shape)}: {e}",
            payload=payload if payload is not None else data,
        ) from e


@dataclass
class ApiResponse:
    """
    Decoded response envelope.

    data is the raw JSON value of the envelope's "data" member; decode it
    with read_data() or read_pagination_data().
    """

    code: str
    message: str
    data: Any
    http_status: int = 200
    raw: bytes = b""

    def is_success(self) -> bool:
        return self.code == SUCCESS_CODE

    def read_data(self, shape):
        """
        Unmarshal data into shape (pydantic model, List[model], dict, ...).

        Raises:
            DecodeError: If data is missing or does not match shape
        """
        return validate_shape(shape, self.data, self.raw)

    def read_pagination_data(self, item_shape):
        """
        Decode paginated data; returns (page, items decoded as item_shape).
        """
        from kucoin_rest.pagination import PaginationPage

        page = PaginationPage.from_data(self.data, payload=self.raw)
        return page, page.read_items(item_shape)


def _parse_json(content: bytes) -> Any:
    return json.loads(content, parse_float=Decimal, parse_constant=Decimal)


def decode_envelope(
    content: bytes,
    http_status: int = 200,
    headers: Optional[Dict[str, str]] = None,
    correlation_id: Optional[str] = None
) -> ApiResponse:
    """
    Parse the envelope and check its code against the success sentinel.

    Args:
        content: Raw response body
        http_status: HTTP status of the response
        headers: Response headers (used for Retry-After)
        correlation_id: Audit trail identifier

    Returns:
        ApiResponse with code == "200000"

    Raises:
        RateLimited: code 429000 or HTTP 429
        ApiError: Any other non-success code, or a non-2xx status without envelope
        DecodeError: Malformed JSON or missing envelope fields on a 2xx response
    """
    http_ok = 200 <= http_status < 300

    try:
        body = _parse_json(content)
    except ValueError as e:
        if not http_ok:
            raise _http_error(content, http_status, headers) from e
        logger.error(
            f"[KC-DEC-001] Malformed JSON | status={http_status} | "
            f"correlation_id={correlation_id}"
        )
        raise DecodeError(f"Malformed JSON response: {e}", payload=content) from e

    if not isinstance(body, dict) or "code" not in body:
        if not http_ok:
            raise _http_error(content, http_status, headers)
        logger.error(
            f"[KC-DEC-001] Response is not an envelope | status={http_status} | "
            f"correlation_id={correlation_id}"
        )
        raise DecodeError("Response is not a {code, data} envelope", payload=content)

    code = str(body.get("code"))
    message = body.get("msg") or body.get("message") or ""
    if not isinstance(message, str):
        message = str(message)

    if code == RateLimited.RATE_LIMIT_CODE or http_status == 429:
        logger.warning(
            f"[KC-RATE-001] Throttled by exchange | code={code} | "
            f"correlation_id={correlation_id}"
        )
        raise RateLimited(
            message=message or "Too many requests",
            retry_after=parse_retry_after(headers or {}),
            code=code,
            http_status=http_status,
            payload=content,
        )

    if code != SUCCESS_CODE:
        logger.warning(
            f"[KC-API-001] Exchange rejected request | "
            f"code={code} | msg={message} | status={http_status} | "
            f"correlation_id={correlation_id}"
        )
        raise ApiError(code, message, http_status=http_status, payload=content)

    return ApiResponse(
        code=code,
        message=message,
        data=body.get("data"),
        http_status=http_status,
        raw=content,
    )


def _http_error(content: bytes, http_status: int, headers: Optional[Dict[str, str]]) -> ApiError:
    text = content.decode("utf-8", errors="replace").strip()
    if http_status == 429:
        return RateLimited(
            message=text or "Too many requests",
            retry_after=parse_retry_after(headers or {}),
            code=str(http_status),
            http_status=http_status,
            payload=content,
        )
    logger.warning(f"[KC-API-001] HTTP error without envelope | status={http_status}")
    return ApiError(str(http_status), text[:256], http_status=http_status, payload=content)
