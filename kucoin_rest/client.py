# ============================================================================
# KuCoin REST Client v1.0.0
# API Service - Signed Request/Response Pipeline
# ============================================================================
#
# Purpose: Single entry point every endpoint wrapper funnels through
#
# Pipeline:
#   RequestBuilder (+ KuCoinSigner) -> TransportExecutor -> decode_envelope
#   -> PaginationPage (paginated calls only)
#
# Concurrency:
#   - Safe to share across threads: credentials are immutable and every call
#     builds its own descriptor
#   - The only shared mutable state is the per-client BackoffState
#
# ============================================================================

import logging
import time
import uuid
from typing import Callable, Iterator, Optional

import requests

from kucoin_rest.config import ClientConfig
from kucoin_rest.endpoints import AccountEndpoints, FillEndpoints, WithdrawalEndpoints
from kucoin_rest.envelope import ApiResponse, decode_envelope
from kucoin_rest.pagination import PaginationPage, PaginationParam, iterate_pages
from kucoin_rest.rate_limiter import BackoffState
from kucoin_rest.request_builder import ParamsLike, QueryParams, RequestBuilder, params_for
from kucoin_rest.signer import KuCoinSigner
from kucoin_rest.transport import TransportExecutor

logger = logging.getLogger(__name__)


class ApiService(AccountEndpoints, FillEndpoints, WithdrawalEndpoints):
    """
    KuCoin REST API Service.

    Example Usage:
        with ApiService(ClientConfig.from_environment()) as service:
            rsp = service.call("GET", "/api/v1/accounts", {"currency": "BTC"})
            accounts = rsp.read_data(List[AccountModel])
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        backoff_state: Optional[BackoffState] = None,
        sleep: Callable[[float], None] = time.sleep,
        correlation_id: Optional[str] = None
    ):
        """
        Initialize the service.

        Args:
            config: Client configuration (public-only production config if None)
            session: requests.Session to reuse (a new one is created if None)
            backoff_state: Throttling state to share between clients on
                purpose; each client gets its own by default
            sleep: Sleep function used for retry backoff
            correlation_id: Default audit trail identifier

        Raises:
            ConfigurationError: If config is invalid
        """
        self.config = config or ClientConfig()
        self.config.validate()
        self.correlation_id = correlation_id or str(uuid.uuid4())

        self.signer = KuCoinSigner(self.config.credentials, correlation_id=self.correlation_id)
        self.builder = RequestBuilder(self.config.base_url, self.signer)
        self.executor = TransportExecutor(
            session=session,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
            backoff_base=self.config.backoff_base_seconds,
            backoff_max=self.config.backoff_max_seconds,
            backoff_state=backoff_state,
            sleep=sleep,
        )

        logger.info(
            f"[KC-CLI] Service initialized | "
            f"base_url={self.config.base_url} | "
            f"authenticated={self.is_authenticated()} | "
            f"correlation_id={self.correlation_id}"
        )

    @classmethod
    def from_environment(cls, **kwargs) -> "ApiService":
        """Build from KUCOIN_* variables; validated once by __init__."""
        return cls(ClientConfig.from_environment(validate=False), **kwargs)

    # ========================================================================
    # Core Calls
    # ========================================================================

    def call(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        private: bool = True,
        deadline: Optional[float] = None,
        correlation_id: Optional[str] = None
    ) -> ApiResponse:
        """
        Execute one signed call and decode its envelope.

        Args:
            method: HTTP method
            path: API path, e.g. "/api/v1/accounts"
            params: Query (GET/DELETE) or body (POST) parameters
            private: Sign the request with the configured credentials
            deadline: Absolute time.monotonic() value after which the call aborts
            correlation_id: Audit trail identifier for this call

        Returns:
            ApiResponse whose code is the success sentinel

        Raises:
            ConfigurationError, TransportError, RequestTimeoutError,
            RateLimited, ApiError, DecodeError
        """
        correlation_id = correlation_id or self.correlation_id
        request = self.builder.build(method, path, params, private=private)
        raw = self.executor.execute(request, deadline=deadline, correlation_id=correlation_id)

        response = decode_envelope(
            raw.content,
            http_status=raw.status_code,
            headers=raw.headers,
            correlation_id=correlation_id,
        )

        logger.debug(
            f"[KC-CLI] {request.method} {request.request_uri} | "
            f"status={raw.status_code} | code={response.code} | "
            f"attempts={raw.attempts} | correlation_id={correlation_id}"
        )
        return response

    def call_paginated(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        pagination: Optional[PaginationParam] = None,
        private: bool = True,
        deadline: Optional[float] = None,
        correlation_id: Optional[str] = None
    ) -> PaginationPage:
        """
        Execute a paginated call and decode its page.

        A page number past total_page yields an empty item list.
        """
        pagination = pagination or PaginationParam()
        query = pagination.read_param(QueryParams(params_for("GET", params).to_dict()))

        response = self.call(
            method,
            path,
            query,
            private=private,
            deadline=deadline,
            correlation_id=correlation_id,
        )
        return PaginationPage.from_data(response.data, payload=response.raw)

    def iterate_pages(
        self,
        method: str,
        path: str,
        params: ParamsLike = None,
        pagination: Optional[PaginationParam] = None,
        private: bool = True,
        correlation_id: Optional[str] = None
    ) -> Iterator[PaginationPage]:
        """
        Lazily iterate every page of a paginated call.

        The parameter set is snapshotted once, so filters stay fixed across
        pages of one logical iteration.
        """
        snapshot = params_for("GET", params).to_dict()

        def fetch(page: PaginationParam) -> PaginationPage:
            return self.call_paginated(
                method,
                path,
                dict(snapshot),
                page,
                private=private,
                correlation_id=correlation_id,
            )

        return iterate_pages(fetch, pagination)

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def is_authenticated(self) -> bool:
        credentials = self.config.credentials
        return credentials is not None and not credentials.missing_fields()

    def close(self) -> None:
        """Close HTTP session."""
        self.executor.close()
        logger.debug(f"[KC-CLI] Service closed | correlation_id={self.correlation_id}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
