"""
Unit Tests for the Request Builder

Tests canonical serialization:
- GET/DELETE sorted query strings, no "?" when empty
- POST compact sorted JSON bodies, "{}" when empty
- Public requests are never signed
"""

import json
from decimal import Decimal

import pytest

from kucoin_rest.errors import ConfigurationError
from kucoin_rest.request_builder import (
    BodyParams,
    QueryParams,
    RequestBuilder,
    params_for,
)
from kucoin_rest.signer import KuCoinSigner, HEADER_SIGN


BASE = "https://api.kucoin.test"


@pytest.fixture
def builder(credentials) -> RequestBuilder:
    return RequestBuilder(BASE + "/", KuCoinSigner(credentials))


# =============================================================================
# Parameter builders
# =============================================================================

class TestParams:

    def test_query_is_sorted(self) -> None:
        params = QueryParams({"type": "trade", "currency": "BTC"})
        assert params.encode() == "currency=BTC&type=trade"

    def test_query_is_urlencoded(self) -> None:
        params = QueryParams({"remark": "a b&c"})
        assert params.encode() == "remark=a+b%26c"

    def test_empty_values_are_skipped(self) -> None:
        params = QueryParams().set("currency", "").set("type", None).set("x", "1")
        assert params.to_dict() == {"x": "1"}

    def test_ints_and_bools_are_stringified(self) -> None:
        params = BodyParams().set("pageSize", 10).set("isInner", True)
        assert params.to_dict() == {"pageSize": "10", "isInner": "true"}

    def test_decimal_rendered_without_exponent(self) -> None:
        params = BodyParams().set("amount", Decimal("0.00000001"))
        assert params["amount"] == "0.00000001"

    def test_float_is_refused(self) -> None:
        with pytest.raises(TypeError):
            BodyParams().set("amount", 0.1)

    def test_body_is_compact_sorted_json(self) -> None:
        params = BodyParams({"b": "2", "a": "1"})
        assert params.encode() == '{"a":"1","b":"2"}'

    def test_empty_body_is_empty_object(self) -> None:
        assert BodyParams().encode() == "{}"
        assert BodyParams(None).encode() == "{}"

    def test_params_for_matches_method(self) -> None:
        assert isinstance(params_for("GET", {"a": "1"}), QueryParams)
        assert isinstance(params_for("delete", None), QueryParams)
        assert isinstance(params_for("POST", QueryParams({"a": "1"})), BodyParams)

    def test_insertion_order_does_not_matter(self) -> None:
        a = QueryParams({"x": "1", "y": "2"})
        b = QueryParams({"y": "2", "x": "1"})
        assert a == b
        assert a.encode() == b.encode()


# =============================================================================
# Builder
# =============================================================================

class TestRequestBuilder:

    def test_get_with_params(self, builder: RequestBuilder) -> None:
        request = builder.build("GET", "/api/v1/accounts", {"currency": "BTC"}, timestamp=1)
        assert request.url == BASE + "/api/v1/accounts?currency=BTC"
        assert request.request_uri == "/api/v1/accounts?currency=BTC"
        assert request.body is None
        assert request.is_idempotent

    def test_get_without_params_has_no_question_mark(self, builder: RequestBuilder) -> None:
        request = builder.build("GET", "/api/v1/accounts", {}, timestamp=1)
        assert request.url == BASE + "/api/v1/accounts"

    def test_empty_and_none_params_sign_identically(self, builder: RequestBuilder) -> None:
        a = builder.build("GET", "/api/v1/accounts", {}, timestamp=1)
        b = builder.build("GET", "/api/v1/accounts", None, timestamp=1)
        assert a.headers[HEADER_SIGN] == b.headers[HEADER_SIGN]

    def test_post_body(self, builder: RequestBuilder) -> None:
        request = builder.build(
            "POST", "/api/v1/accounts", {"type": "main", "currency": "BTC"}, timestamp=1
        )
        assert json.loads(request.body) == {"type": "main", "currency": "BTC"}
        assert request.body == '{"currency":"BTC","type":"main"}'
        assert request.headers["Content-Type"] == "application/json"
        assert request.url == BASE + "/api/v1/accounts"
        assert not request.is_idempotent

    def test_post_empty_body(self, builder: RequestBuilder) -> None:
        request = builder.build("POST", "/api/v1/x", None, timestamp=1)
        assert request.body == "{}"

    def test_delete_uses_query_string(self, builder: RequestBuilder) -> None:
        request = builder.build("DELETE", "/api/v1/withdrawals/w1", {"a": "1"}, timestamp=1)
        assert request.request_uri == "/api/v1/withdrawals/w1?a=1"
        assert request.body is None
        assert not request.is_idempotent

    def test_path_gets_leading_slash(self, builder: RequestBuilder) -> None:
        request = builder.build("GET", "api/v1/accounts", None, timestamp=1)
        assert request.request_uri == "/api/v1/accounts"

    def test_private_request_is_signed(self, builder: RequestBuilder) -> None:
        request = builder.build("GET", "/api/v1/accounts", None, timestamp=1)
        for header in ("KC-API-KEY", "KC-API-SIGN", "KC-API-TIMESTAMP",
                       "KC-API-PASSPHRASE", "KC-API-KEY-VERSION"):
            assert header in request.headers
        assert request.headers["KC-API-TIMESTAMP"] == "1"

    def test_public_request_is_not_signed(self) -> None:
        builder = RequestBuilder(BASE, signer=None)
        request = builder.build("GET", "/api/v1/timestamp", None, private=False)
        assert not any(h.startswith("KC-API-") for h in request.headers)

    def test_private_request_without_signer_fails(self) -> None:
        builder = RequestBuilder(BASE, signer=None)
        with pytest.raises(ConfigurationError):
            builder.build("GET", "/api/v1/accounts", None, private=True)

    def test_descriptor_gets_fresh_timestamp(self, builder: RequestBuilder, monkeypatch) -> None:
        monkeypatch.setattr("kucoin_rest.signer.time.time", lambda: 42.5)
        descriptor = builder.describe("GET", "/api/v1/accounts")
        assert descriptor.timestamp == 42500
