# ============================================================================
# KuCoin REST Client v1.0.0
# Signed Request/Response Pipeline for the KuCoin REST API
# ============================================================================
#
# Components:
#   - KuCoinSigner: HMAC-SHA256 request signing (key versions 1 and 2+)
#   - RequestBuilder: Canonical query/body serialization
#   - TransportExecutor: requests-based HTTP with GET-only retry
#   - decode_envelope: {code, data, msg} envelope -> ApiResponse / ApiError
#   - PaginationPage: Paginated data and lazy page iteration
#   - ApiService: Facade plus account / fill / withdrawal wrappers
#
# ============================================================================

from kucoin_rest.errors import (
    KuCoinError,
    ConfigurationError,
    TransportError,
    RequestTimeoutError,
    RateLimited,
    ApiError,
    DecodeError,
)
from kucoin_rest.signer import Credentials, KuCoinSigner
from kucoin_rest.config import ClientConfig, PRODUCTION_BASE_URL, SANDBOX_BASE_URL
from kucoin_rest.request_builder import (
    QueryParams,
    BodyParams,
    RequestBuilder,
    RequestDescriptor,
    PreparedRequest,
)
from kucoin_rest.rate_limiter import BackoffState, ExponentialBackoff
from kucoin_rest.transport import TransportExecutor, RawResponse
from kucoin_rest.envelope import ApiResponse, decode_envelope, SUCCESS_CODE
from kucoin_rest.decimal_gateway import DecimalString, to_decimal, format_decimal
from kucoin_rest.pagination import PaginationParam, PaginationPage
from kucoin_rest.client import ApiService
from kucoin_rest.models import (
    AccountModel,
    CreateAccountResultModel,
    AccountHistoryModel,
    AccountHoldModel,
    InnerTransferResultModel,
    FillModel,
    WithdrawalModel,
    WithdrawalQuotasModel,
    ApplyWithdrawalResultModel,
    CancelWithdrawalResultModel,
)

__all__ = [
    # Errors
    'KuCoinError',
    'ConfigurationError',
    'TransportError',
    'RequestTimeoutError',
    'RateLimited',
    'ApiError',
    'DecodeError',
    # Signing / Config
    'Credentials',
    'KuCoinSigner',
    'ClientConfig',
    'PRODUCTION_BASE_URL',
    'SANDBOX_BASE_URL',
    # Request pipeline
    'QueryParams',
    'BodyParams',
    'RequestBuilder',
    'RequestDescriptor',
    'PreparedRequest',
    'BackoffState',
    'ExponentialBackoff',
    'TransportExecutor',
    'RawResponse',
    'ApiResponse',
    'decode_envelope',
    'SUCCESS_CODE',
    'DecimalString',
    'to_decimal',
    'format_decimal',
    'PaginationParam',
    'PaginationPage',
    'ApiService',
    # Models
    'AccountModel',
    'CreateAccountResultModel',
    'AccountHistoryModel',
    'AccountHoldModel',
    'InnerTransferResultModel',
    'FillModel',
    'WithdrawalModel',
    'WithdrawalQuotasModel',
    'ApplyWithdrawalResultModel',
    'CancelWithdrawalResultModel',
]

# Version tracking
__version__ = '1.0.0'
