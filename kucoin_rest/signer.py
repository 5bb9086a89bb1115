# ============================================================================
# KuCoin REST Client v1.0.0
# Credential Signer
# ============================================================================
#
# Purpose: Signs private KuCoin API requests using HMAC-SHA256
#
# MANDATE:
#   - Credentials NEVER appear in logs or reprs
#   - KC-CFG-001 raised if signing is requested with incomplete credentials
#
# KuCoin API Signature Format:
#   payload   = timestamp + METHOD + request_uri + body
#   signature = base64(HMAC-SHA256(api_secret, payload))
#
# Passphrase Header:
#   - Key version 1: plaintext passphrase
#   - Key version 2+: base64(HMAC-SHA256(api_secret, passphrase))
#
# ============================================================================

import base64
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from kucoin_rest.errors import ConfigurationError

logger = logging.getLogger(__name__)


LEGACY_KEY_VERSION = "1"
SUPPORTED_KEY_VERSIONS = frozenset({"1", "2", "3"})

HEADER_API_KEY = "KC-API-KEY"
HEADER_SIGN = "KC-API-SIGN"
HEADER_TIMESTAMP = "KC-API-TIMESTAMP"
HEADER_PASSPHRASE = "KC-API-PASSPHRASE"
HEADER_KEY_VERSION = "KC-API-KEY-VERSION"


@dataclass(frozen=True)
class Credentials:
    """
    API credentials for one client instance.

    Immutable; secrets are excluded from repr so they never leak into logs
    or tracebacks.
    """

    api_key: str
    api_secret: str = field(repr=False)
    api_passphrase: str = field(repr=False)
    api_key_version: str = "2"

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.api_key:
            missing.append("api_key")
        if not self.api_secret:
            missing.append("api_secret")
        if not self.api_passphrase:
            missing.append("api_passphrase")
        if not self.api_key_version:
            missing.append("api_key_version")
        return missing

    @property
    def signs_passphrase(self) -> bool:
        return self.api_key_version != LEGACY_KEY_VERSION

    def redacted_key(self) -> str:
        """First and last four characters of the API key, for log lines."""
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "[REDACTED]"


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


class KuCoinSigner:
    """
    HMAC-SHA256 Request Signer.

    Produces the five KC-API-* headers for a private request. Pure apart
    from reading the wall clock when no timestamp is supplied.

    Example Usage:
        signer = KuCoinSigner(credentials)
        headers = signer.sign_request("GET", "/api/v1/accounts?currency=BTC")
    """

    def __init__(self, credentials: Optional[Credentials], correlation_id: Optional[str] = None):
        self.credentials = credentials
        self.correlation_id = correlation_id

    def _require_credentials(self) -> Credentials:
        """
        Ensure the credentials are complete before signing (KC-CFG-001).
        """
        if self.credentials is None:
            logger.error(
                f"[KC-CFG-001] Signing requested without credentials | "
                f"correlation_id={self.correlation_id}"
            )
            raise ConfigurationError(
                "Private endpoint requested but no API credentials are configured"
            )

        missing = self.credentials.missing_fields()
        if missing:
            logger.error(
                f"[KC-CFG-001] Incomplete credentials | "
                f"missing={missing} | correlation_id={self.correlation_id}"
            )
            raise ConfigurationError(
                f"Private endpoint requested but credentials are incomplete: "
                f"{', '.join(missing)}"
            )

        if self.credentials.api_key_version not in SUPPORTED_KEY_VERSIONS:
            raise ConfigurationError(
                f"Unsupported api_key_version: {self.credentials.api_key_version!r}"
            )
        return self.credentials

    @staticmethod
    def _hmac_b64(secret: str, message: str) -> str:
        digest = hmac.new(
            secret.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256
        ).digest()
        return base64.b64encode(digest).decode("ascii")

    @staticmethod
    def signable_string(timestamp: int, method: str, request_uri: str, body: str = "") -> str:
        """Canonical string: timestamp + METHOD + request_uri + body."""
        return f"{timestamp}{method.upper()}{request_uri}{body}"

    def sign(self, payload: str) -> str:
        """Return base64(HMAC-SHA256(secret, payload))."""
        credentials = self._require_credentials()
        return self._hmac_b64(credentials.api_secret, payload)

    def passphrase_header(self) -> str:
        credentials = self._require_credentials()
        if credentials.signs_passphrase:
            return self._hmac_b64(credentials.api_secret, credentials.api_passphrase)
        return credentials.api_passphrase

    def sign_request(
        self,
        method: str,
        request_uri: str,
        body: str = "",
        timestamp: Optional[int] = None
    ) -> Dict[str, str]:
        """
        Generate KuCoin authentication headers.

        Args:
            method: HTTP method (GET, POST, DELETE)
            request_uri: Path including "?query" for GET/DELETE
            body: Request body as sent on the wire ("" when none)
            timestamp: Unix timestamp in milliseconds (auto-generated if None)

        Returns:
            Dict with the KC-API-* headers

        Raises:
            ConfigurationError: If credentials are missing or incomplete
        """
        credentials = self._require_credentials()

        if timestamp is None:
            timestamp = current_timestamp_ms()

        payload = self.signable_string(timestamp, method, request_uri, body)
        signature = self._hmac_b64(credentials.api_secret, payload)

        logger.debug(
            f"[KC-SIG] Request signed | "
            f"method={method.upper()} | uri={request_uri} | "
            f"timestamp={timestamp} | api_key={credentials.redacted_key()} | "
            f"signature=[REDACTED] | key_version={credentials.api_key_version} | "
            f"correlation_id={self.correlation_id}"
        )

        return {
            HEADER_API_KEY: credentials.api_key,
            HEADER_SIGN: signature,
            HEADER_TIMESTAMP: str(timestamp),
            HEADER_PASSPHRASE: self.passphrase_header(),
            HEADER_KEY_VERSION: credentials.api_key_version,
        }
