"""
============================================================================
KuCoin REST Client v1.0.0
Result Models - Pydantic Shapes for Decoded Envelope Data
============================================================================

Input Constraints: Monetary fields are DecimalString (exact, never float)
Side Effects: None (pure validation)

MANDATE:
- Balances, amounts and fees are kept as the exchange's decimal strings
- JSON numbers in monetary fields are rejected as a schema mismatch
- Field names follow Python style; wire names are carried as aliases

Usage:
    rsp = service.accounts(currency="BTC")
    accounts = rsp.read_data(List[AccountModel])

============================================================================
"""

from decimal import Decimal
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from kucoin_rest.decimal_gateway import DecimalString, to_decimal


class KuCoinModel(BaseModel):
    """
    Base model for exchange payloads.

    Unknown fields are ignored so new exchange fields do not break decoding.
    Dump with model_dump(by_alias=True) to get the wire form back.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ============================================================================
# Accounts
# ============================================================================

class AccountModel(KuCoinModel):
    """An account (main / trade / margin) for one currency."""

    id: str
    currency: str
    type: str
    balance: DecimalString
    available: DecimalString
    holds: DecimalString

    def balance_decimal(self) -> Decimal:
        return to_decimal(self.balance)


class CreateAccountResultModel(KuCoinModel):
    id: str


class AccountHistoryModel(KuCoinModel):
    """A ledger entry; either increases or decreases the account balance."""

    currency: str
    amount: DecimalString
    fee: DecimalString = ""
    balance: DecimalString = ""
    biz_type: str = Field(default="", alias="bizType")
    direction: str = ""
    created_at: int = Field(default=0, alias="createdAt")
    context: Any = None


class AccountHoldModel(KuCoinModel):
    """A hold placed for an active order or a pending withdrawal."""

    currency: str
    hold_amount: DecimalString = Field(alias="holdAmount")
    biz_type: str = Field(default="", alias="bizType")
    order_id: str = Field(default="", alias="orderId")
    created_at: int = Field(default=0, alias="createdAt")
    updated_at: int = Field(default=0, alias="updatedAt")


class InnerTransferResultModel(KuCoinModel):
    order_id: str = Field(alias="orderId")


# ============================================================================
# Fills
# ============================================================================

class FillModel(KuCoinModel):
    """A trade fill."""

    symbol: str
    trade_id: str = Field(alias="tradeId")
    order_id: str = Field(alias="orderId")
    counter_order_id: str = Field(default="", alias="counterOrderId")
    side: str
    liquidity: str = ""
    force_taker: bool = Field(default=False, alias="forceTaker")
    price: DecimalString
    size: DecimalString
    funds: DecimalString = ""
    fee: DecimalString = ""
    fee_rate: DecimalString = Field(default="", alias="feeRate")
    fee_currency: str = Field(default="", alias="feeCurrency")
    stop: str = ""
    type: str
    trade_type: str = Field(default="", alias="tradeType")
    created_at: int = Field(default=0, alias="createdAt")


# ============================================================================
# Withdrawals
# ============================================================================

class WithdrawalModel(KuCoinModel):
    """A withdrawal record."""

    id: str
    address: str
    memo: str = ""
    currency: str
    chain: str = ""
    amount: DecimalString
    fee: DecimalString
    wallet_tx_id: str = Field(default="", alias="walletTxId")
    is_inner: bool = Field(default=False, alias="isInner")
    status: str
    remark: str = ""
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")


class WithdrawalQuotasModel(KuCoinModel):
    """Withdrawal limits for one currency."""

    currency: str
    available_amount: DecimalString = Field(alias="availableAmount")
    remain_amount: DecimalString = Field(alias="remainAmount")
    withdraw_min_size: DecimalString = Field(alias="withdrawMinSize")
    limit_btc_amount: DecimalString = Field(alias="limitBTCAmount")
    inner_withdraw_min_fee: DecimalString = Field(alias="innerWithdrawMinFee")
    used_btc_amount: DecimalString = Field(default="", alias="usedBTCAmount")
    is_withdraw_enabled: bool = Field(default=True, alias="isWithdrawEnabled")
    withdraw_min_fee: DecimalString = Field(alias="withdrawMinFee")
    precision: int
    chain: str = ""


class ApplyWithdrawalResultModel(KuCoinModel):
    withdrawal_id: str = Field(alias="withdrawalId")


class CancelWithdrawalResultModel(KuCoinModel):
    cancelled_withdraw_ids: List[str] = Field(default_factory=list, alias="cancelledWithdrawIds")
