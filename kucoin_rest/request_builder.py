# ============================================================================
# KuCoin REST Client v1.0.0
# Request Builder
# ============================================================================
#
# Purpose: Turns (method, path, params) into a canonical, signable request
#
# Canonical Forms:
#   - GET/DELETE: keys sorted, urlencoded, appended as "?query" (omitted if empty)
#   - POST: compact JSON object with sorted keys ("{}" if empty)
#
# The canonical form is part of the signed string, so it must never depend
# on dict insertion order.
#
# ============================================================================

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from kucoin_rest.decimal_gateway import format_decimal
from kucoin_rest.signer import KuCoinSigner, current_timestamp_ms

logger = logging.getLogger(__name__)


USER_AGENT = "kucoin-rest-python/1.0.0"

QUERY_METHODS = frozenset({"GET", "DELETE"})


# ============================================================================
# Parameter Builders
# ============================================================================

class _Params:
    """String parameter set whose encoding ignores insertion order."""

    def __init__(self, values: Optional[Mapping[str, object]] = None):
        self._values: Dict[str, str] = {}
        for key, value in (values or {}).items():
            self.set(key, value)

    def set(self, key: str, value) -> "_Params":
        """
        Set a parameter; None and "" are skipped, ints are stringified.

        Decimals are rendered in plain notation; floats are refused so that
        amounts never pass through binary floating point.

        Returns self so calls can be chained.
        """
        if value is None or value == "":
            return self
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, float):
            raise TypeError(f"Parameter {key!r} must be a str, int or Decimal, not float")
        elif isinstance(value, Decimal):
            value = format_decimal(value)
        self._values[key] = str(value)
        return self

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __eq__(self, other) -> bool:
        if not isinstance(other, _Params):
            return NotImplemented
        return type(self) is type(other) and self._values == other._values

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


class QueryParams(_Params):
    """Parameters carried in the query string (GET/DELETE)."""

    def encode(self) -> str:
        return urlencode(sorted(self._values.items()))


class BodyParams(_Params):
    """Parameters carried in a JSON body (POST)."""

    def encode(self) -> str:
        return json.dumps(self._values, sort_keys=True, separators=(",", ":"))


ParamsLike = Union[QueryParams, BodyParams, Mapping[str, object], None]


def params_for(method: str, params: ParamsLike) -> Union[QueryParams, BodyParams]:
    """Coerce a mapping into the parameter builder matching the HTTP method."""
    wanted = QueryParams if method.upper() in QUERY_METHODS else BodyParams
    if isinstance(params, wanted):
        return params
    if isinstance(params, _Params):
        return wanted(params.to_dict())
    return wanted(params)


# ============================================================================
# Request Descriptor / Prepared Request
# ============================================================================

@dataclass
class RequestDescriptor:
    """One logical call; created fresh per request."""

    method: str
    path: str
    params: Union[QueryParams, BodyParams]
    timestamp: int
    private: bool = True

    @property
    def query_string(self) -> str:
        if isinstance(self.params, QueryParams):
            return self.params.encode()
        return ""

    @property
    def body(self) -> str:
        if isinstance(self.params, BodyParams):
            return self.params.encode()
        return ""

    @property
    def request_uri(self) -> str:
        query = self.query_string
        return f"{self.path}?{query}" if query else self.path


@dataclass
class PreparedRequest:
    """Transport-ready request."""

    method: str
    url: str
    request_uri: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    @property
    def is_idempotent(self) -> bool:
        return self.method == "GET"


# ============================================================================
# Request Builder
# ============================================================================

class RequestBuilder:
    """
    Assembles descriptors and signs them for private endpoints.

    Example Usage:
        builder = RequestBuilder("https://api.kucoin.com", signer)
        request = builder.build("GET", "/api/v1/accounts", {"currency": "BTC"})
    """

    def __init__(self, base_url: str, signer: Optional[KuCoinSigner] = None):
        self.base_url = base_url.rstrip("/")
        self.signer = signer

    def describe(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        private: bool = True,
        timestamp: Optional[int] = None
    ) -> RequestDescriptor:
        method = method.upper()
        if not path.startswith("/"):
            path = "/" + path
        return RequestDescriptor(
            method=method,
            path=path,
            params=params_for(method, params),
            timestamp=timestamp if timestamp is not None else current_timestamp_ms(),
            private=private,
        )

    def prepare(self, descriptor: RequestDescriptor) -> PreparedRequest:
        request_uri = descriptor.request_uri
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

        body = None
        if isinstance(descriptor.params, BodyParams):
            body = descriptor.body
            headers["Content-Type"] = "application/json"

        if descriptor.private:
            signer = self.signer or KuCoinSigner(None)
            headers.update(
                signer.sign_request(
                    descriptor.method,
                    request_uri,
                    body or "",
                    timestamp=descriptor.timestamp,
                )
            )

        logger.debug(
            f"[KC-REQ] Request built | "
            f"method={descriptor.method} | uri={request_uri} | "
            f"private={descriptor.private}"
        )

        return PreparedRequest(
            method=descriptor.method,
            url=f"{self.base_url}{request_uri}",
            request_uri=request_uri,
            headers=headers,
            body=body,
        )

    def build(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        private: bool = True,
        timestamp: Optional[int] = None
    ) -> PreparedRequest:
        return self.prepare(self.describe(method, path, params, private, timestamp))
