# ============================================================================
# KuCoin REST Client v1.0.0
# Property-Based Tests - Signed Request Pipeline
# ============================================================================
#
# Test Framework: Hypothesis (Property-Based Testing)
# Minimum Iterations: 100 per property
#
# Properties Covered:
#   1. Signature Determinism
#   2. Signature Sensitivity to Method, URI, Body and Parameter Values
#   3. Canonical Parameter Encoding
#   4. Total Page Derivation
#   5. Page Past Total Is Empty
#   6. Decimal Strings Survive Decoding Verbatim
#   7. Non-Success Codes Surface Exactly
#   8. Backoff Deadline Monotonicity
#
# ============================================================================

import json
from decimal import Decimal
from typing import List

from hypothesis import given, settings, assume, strategies as st

from kucoin_rest.decimal_gateway import format_decimal
from kucoin_rest.envelope import decode_envelope
from kucoin_rest.errors import ApiError, RateLimited
from kucoin_rest.models import AccountModel
from kucoin_rest.pagination import PaginationPage, total_pages
from kucoin_rest.rate_limiter import BackoffState
from kucoin_rest.request_builder import BodyParams, QueryParams, RequestBuilder
from kucoin_rest.signer import Credentials, KuCoinSigner


SIGNER = KuCoinSigner(Credentials("prop-key", "prop-secret", "prop-pass", "2"))
BUILDER = RequestBuilder("https://api.kucoin.test", SIGNER)
FIXED_TIMESTAMP = 1_700_000_000_000

timestamps = st.integers(min_value=1_500_000_000_000, max_value=2_500_000_000_000)
methods = st.sampled_from(["GET", "POST", "DELETE"])
uris = st.from_regex(r"/api/v[1-3]/[a-z\-]{1,20}(\?[a-z]{1,8}=[A-Za-z0-9]{1,8})?", fullmatch=True)
bodies = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=200)
keys = st.text(alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=1, max_size=12)
values = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=20)
messages = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=80)


# ============================================================================
# Property 1: Signature Determinism
# ============================================================================

@settings(max_examples=100)
@given(timestamps, methods, uris, bodies)
def test_signature_is_deterministic(timestamp, method, uri, body):
    """
    Signing the same (timestamp, method, uri, body) twice yields identical
    headers.
    """
    first = SIGNER.sign_request(method, uri, body, timestamp=timestamp)
    second = SIGNER.sign_request(method, uri, body, timestamp=timestamp)

    assert first == second
    assert first["KC-API-TIMESTAMP"] == str(timestamp)


# ============================================================================
# Property 2: Signature Sensitivity
# ============================================================================

@settings(max_examples=100)
@given(timestamps, uris, bodies, bodies)
def test_signature_changes_with_body(timestamp, uri, body_a, body_b):
    assume(body_a != body_b)
    a = SIGNER.sign_request("POST", uri, body_a, timestamp=timestamp)
    b = SIGNER.sign_request("POST", uri, body_b, timestamp=timestamp)
    assert a["KC-API-SIGN"] != b["KC-API-SIGN"]


@settings(max_examples=100)
@given(timestamps, uris)
def test_signature_changes_with_method(timestamp, uri):
    get = SIGNER.sign_request("GET", uri, timestamp=timestamp)
    delete = SIGNER.sign_request("DELETE", uri, timestamp=timestamp)
    assert get["KC-API-SIGN"] != delete["KC-API-SIGN"]


@settings(max_examples=100)
@given(timestamps, methods, uris)
def test_signature_changes_with_timestamp(timestamp, method, uri):
    a = SIGNER.sign_request(method, uri, timestamp=timestamp)
    b = SIGNER.sign_request(method, uri, timestamp=timestamp + 1)
    assert a["KC-API-SIGN"] != b["KC-API-SIGN"]


@settings(max_examples=100)
@given(
    st.sampled_from(["GET", "POST"]),
    st.dictionaries(keys, values, min_size=1, max_size=8),
    values,
    st.data(),
)
def test_changing_one_parameter_changes_built_signature(method, params, new_value, data):
    """
    Built requests with identical timestamps sign identically, and any single
    changed parameter value yields a different KC-API-SIGN.
    """
    key = data.draw(st.sampled_from(sorted(params)))
    assume(params[key] != new_value)
    changed = dict(params, **{key: new_value})

    first = BUILDER.build(method, "/api/v1/orders", params, timestamp=FIXED_TIMESTAMP)
    again = BUILDER.build(method, "/api/v1/orders", dict(params), timestamp=FIXED_TIMESTAMP)
    other = BUILDER.build(method, "/api/v1/orders", changed, timestamp=FIXED_TIMESTAMP)

    assert first.headers["KC-API-SIGN"] == again.headers["KC-API-SIGN"]
    assert first.headers["KC-API-SIGN"] != other.headers["KC-API-SIGN"]


# ============================================================================
# Property 3: Canonical Parameter Encoding
# ============================================================================

@settings(max_examples=100)
@given(st.dictionaries(keys, values, max_size=8))
def test_query_encoding_ignores_insertion_order(params):
    forward = QueryParams(params)
    backward = QueryParams(dict(reversed(list(params.items()))))
    assert forward.encode() == backward.encode()


@settings(max_examples=100)
@given(st.dictionaries(keys, values, max_size=8))
def test_body_encoding_is_compact_sorted_json(params):
    encoded = BodyParams(params).encode()

    assert encoded == json.dumps(params, sort_keys=True, separators=(",", ":"))
    assert json.loads(encoded) == params


# ============================================================================
# Property 4: Total Page Derivation
# ============================================================================

@settings(max_examples=100)
@given(
    st.integers(min_value=0, max_value=100_000),
    st.integers(min_value=1, max_value=500),
    st.integers(min_value=0, max_value=1_000),
)
def test_total_page_is_ceiling(total_num, page_size, server_total_page):
    """
    total_page == ceil(total_num / page_size) whatever the server reported.
    """
    page = PaginationPage.from_data({
        "currentPage": 1,
        "pageSize": page_size,
        "totalNum": total_num,
        "totalPage": server_total_page,
        "items": [],
    })

    expected = -(-total_num // page_size)
    assert page.total_page == expected == total_pages(total_num, page_size)
    assert (page.total_page - 1) * page_size < total_num or total_num == 0
    assert page.total_page * page_size >= total_num


# ============================================================================
# Property 5: Page Past Total Is Empty
# ============================================================================

@settings(max_examples=100)
@given(
    st.integers(min_value=0, max_value=1_000),
    st.integers(min_value=1, max_value=100),
    st.integers(min_value=1, max_value=50),
)
def test_page_past_total_has_no_items(total_num, page_size, overshoot):
    current = total_pages(total_num, page_size) + overshoot
    page = PaginationPage.from_data({
        "currentPage": current,
        "pageSize": page_size,
        "totalNum": total_num,
        "totalPage": total_pages(total_num, page_size),
        "items": [{"stale": True}],
    })

    assert page.items == []
    assert not page.has_next()


# ============================================================================
# Property 6: Decimal Strings Survive Decoding Verbatim
# ============================================================================

@settings(max_examples=100)
@given(st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000000"),
    places=8,
    allow_nan=False,
    allow_infinity=False,
))
def test_decimal_balance_kept_verbatim(value):
    text = format_decimal(value)
    body = json.dumps({
        "code": "200000",
        "data": [{
            "id": "1", "currency": "BTC", "type": "trade",
            "balance": text, "available": text, "holds": "0",
        }],
    }).encode("utf-8")

    account = decode_envelope(body).read_data(List[AccountModel])[0]

    assert account.balance == text
    assert account.balance_decimal() == Decimal(text)


# ============================================================================
# Property 7: Non-Success Codes Surface Exactly
# ============================================================================

@settings(max_examples=100)
@given(st.integers(min_value=100_000, max_value=999_999), messages)
def test_non_success_code_raises_api_error(code, message):
    assume(code not in (200000, 429000))
    body = json.dumps({"code": str(code), "msg": message}).encode("utf-8")

    try:
        decode_envelope(body)
    except RateLimited:
        raise AssertionError("only 429000 is a throttling code")
    except ApiError as e:
        assert e.code == str(code)
        assert e.api_message == message
    else:
        raise AssertionError("non-success code decoded as success")


# ============================================================================
# Property 8: Backoff Deadline Monotonicity
# ============================================================================

@settings(max_examples=100)
@given(st.lists(st.floats(min_value=0.01, max_value=60.0), min_size=1, max_size=10))
def test_later_backoff_deadline_wins(delays):
    now = [500.0]
    state = BackoffState(clock=lambda: now[0])

    for delay in delays:
        state.signal(retry_after=delay)

    assert abs(state.remaining() - max(delays)) < 1e-9
    assert state.signal_count == len(delays)
