# ============================================================================
# KuCoin REST Client v1.0.0
# Endpoint Wrappers - Accounts, Fills, Withdrawals
# ============================================================================
#
# Thin parameter marshaling over ApiService.call / call_paginated. Each
# wrapper returns the undecoded ApiResponse or PaginationPage; decode it with
# the matching shape from kucoin_rest.models.
#
# ============================================================================

from typing import Mapping, Optional

from kucoin_rest.request_builder import BodyParams, QueryParams


class AccountEndpoints:
    """Accounts, ledgers, holds and inner transfers."""

    def accounts(self, currency: str = "", account_type: str = ""):
        """List accounts; decode with List[AccountModel]."""
        params = QueryParams().set("currency", currency).set("type", account_type)
        return self.call("GET", "/api/v1/accounts", params)

    def account(self, account_id: str):
        """One account; decode with AccountModel."""
        return self.call("GET", f"/api/v1/accounts/{account_id}")

    def create_account(self, account_type: str, currency: str):
        """Create a main/trade account; decode with CreateAccountResultModel."""
        params = BodyParams({"type": account_type, "currency": currency})
        return self.call("POST", "/api/v1/accounts", params)

    def account_ledgers(
        self,
        account_id: str,
        start_at: int = 0,
        end_at: int = 0,
        pagination=None
    ):
        """
        Account activity, latest first; items decode with AccountHistoryModel.
        """
        params = QueryParams()
        if start_at > 0:
            params.set("startAt", start_at)
        if end_at > 0:
            params.set("endAt", end_at)
        return self.call_paginated(
            "GET", f"/api/v1/accounts/{account_id}/ledgers", params, pagination
        )

    def account_holds(self, account_id: str, pagination=None):
        """Holds for active orders / pending withdrawals; items decode with AccountHoldModel."""
        return self.call_paginated(
            "GET", f"/api/v1/accounts/{account_id}/holds", None, pagination
        )

    def inner_transfer(
        self,
        client_oid: str,
        pay_account_id: str,
        rec_account_id: str,
        amount
    ):
        """
        Move funds between the user's own accounts.

        client_oid is the idempotency token: the call is never retried
        automatically, so retry with the same client_oid if needed.
        """
        params = BodyParams({
            "clientOid": client_oid,
            "payAccountId": pay_account_id,
            "recAccountId": rec_account_id,
            "amount": amount,
        })
        return self.call("POST", "/api/v1/accounts/inner-transfer", params)


class FillEndpoints:
    """Trade fills."""

    def fills(self, params: Optional[Mapping[str, object]] = None, pagination=None):
        """
        Fills filtered by orderId/symbol/side/type/startAt/endAt; items
        decode with FillModel.
        """
        return self.call_paginated("GET", "/api/v1/fills", QueryParams(params), pagination)


class WithdrawalEndpoints:
    """Withdrawal lifecycle: list, quotas, apply, cancel."""

    def withdrawals(
        self,
        currency: str = "",
        status: str = "",
        start_at: int = 0,
        end_at: int = 0,
        pagination=None
    ):
        """Withdrawal history; items decode with WithdrawalModel."""
        params = QueryParams().set("currency", currency).set("status", status)
        if start_at > 0:
            params.set("startAt", start_at)
        if end_at > 0:
            params.set("endAt", end_at)
        return self.call_paginated("GET", "/api/v1/withdrawals", params, pagination)

    def withdrawal_quotas(self, currency: str, chain: str = ""):
        """Withdrawal limits; decode with WithdrawalQuotasModel."""
        params = QueryParams().set("currency", currency).set("chain", chain)
        return self.call("GET", "/api/v1/withdrawals/quotas", params)

    def apply_withdrawal(
        self,
        currency: str,
        address: str,
        amount,
        options: Optional[Mapping[str, object]] = None
    ):
        """
        Request a withdrawal; decode with ApplyWithdrawalResultModel.

        options carries memo, isInner, remark, chain. Never retried.
        """
        params = BodyParams(options)
        params.set("currency", currency).set("address", address).set("amount", amount)
        return self.call("POST", "/api/v1/withdrawals", params)

    def cancel_withdrawal(self, withdrawal_id: str):
        """Cancel a pending withdrawal; decode with CancelWithdrawalResultModel."""
        return self.call("DELETE", f"/api/v1/withdrawals/{withdrawal_id}")
