"""
============================================================================
KuCoin REST Client v1.0.0
Client Configuration
============================================================================

This module provides configuration management for the REST client:
- Environment variable parsing with type safety (python-dotenv aware)
- Default values for optional configuration
- Validation with fail-closed behavior (KC-CFG-001)

ENVIRONMENT VARIABLES:
    - KUCOIN_API_BASE_URI: Override the REST host
    - KUCOIN_SANDBOX: "true" selects the sandbox host (default: false)
    - KUCOIN_API_KEY / KUCOIN_API_SECRET / KUCOIN_API_PASSPHRASE: Credentials
    - KUCOIN_API_KEY_VERSION: "1" (plaintext passphrase) or "2" (signed)
    - KUCOIN_TIMEOUT_SECONDS: Per-request timeout (default: 30)
    - KUCOIN_MAX_RETRIES: Attempts for idempotent reads (default: 3)

ERROR CODES:
    - KC-CFG-001: Configuration missing or invalid

============================================================================
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv

from kucoin_rest.errors import ConfigurationError
from kucoin_rest.signer import Credentials, SUPPORTED_KEY_VERSIONS

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

PRODUCTION_BASE_URL = "https://api.kucoin.com"
SANDBOX_BASE_URL = "https://openapi-sandbox.kucoin.com"

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_SECONDS = 0.5
DEFAULT_BACKOFF_MAX_SECONDS = 8.0
DEFAULT_KEY_VERSION = "2"

_TRUTHY = {"1", "true", "yes", "on"}


# =============================================================================
# ClientConfig
# =============================================================================

@dataclass
class ClientConfig:
    """
    REST client configuration.

    ============================================================================
    CONFIGURATION PARAMETERS:
    ============================================================================
    - base_url: REST host (production by default)
    - credentials: API credentials; None for public-only usage
    - timeout_seconds: Per-request timeout (default: 30)
    - max_retries: Total attempts for idempotent reads (default: 3)
    - backoff_base_seconds / backoff_max_seconds: Retry backoff curve
    ============================================================================
    """

    base_url: str = PRODUCTION_BASE_URL
    credentials: Optional[Credentials] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS
    backoff_max_seconds: float = DEFAULT_BACKOFF_MAX_SECONDS

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    def validate(self) -> None:
        """
        Validate configuration completeness.

        Raises:
            ConfigurationError: If any setting is out of range (KC-CFG-001)
        """
        errors: List[str] = []

        if not self.base_url:
            errors.append("base_url must not be empty")

        if self.timeout_seconds <= 0:
            errors.append(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

        if self.max_retries < 1:
            errors.append(f"max_retries must be >= 1, got: {self.max_retries}")

        if self.backoff_base_seconds < 0 or self.backoff_max_seconds < 0:
            errors.append("backoff delays must be non-negative")

        if (
            self.credentials is not None
            and self.credentials.api_key_version not in SUPPORTED_KEY_VERSIONS
        ):
            errors.append(
                f"api_key_version must be one of {sorted(SUPPORTED_KEY_VERSIONS)}, "
                f"got: {self.credentials.api_key_version!r}"
            )

        if errors:
            error_msg = "Client configuration validation failed: " + "; ".join(errors)
            logger.error(f"[KC-CFG-001] {error_msg}")
            raise ConfigurationError(error_msg)

        logger.info(
            f"[KC-CONFIG] Configuration validated | "
            f"base_url={self.base_url} | "
            f"authenticated={self.credentials is not None} | "
            f"timeout_seconds={self.timeout_seconds} | "
            f"max_retries={self.max_retries}"
        )

    @classmethod
    def from_environment(cls, validate: bool = True) -> "ClientConfig":
        """
        Load configuration from environment variables (and a local .env).

        Credentials are attached only when at least one credential variable
        is set; partially set credentials fail later, at signing time.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        load_dotenv()

        sandbox = os.getenv("KUCOIN_SANDBOX", "false").strip().lower() in _TRUTHY
        base_url = os.getenv("KUCOIN_API_BASE_URI", "").strip()
        if not base_url:
            base_url = SANDBOX_BASE_URL if sandbox else PRODUCTION_BASE_URL

        api_key = os.getenv("KUCOIN_API_KEY", "")
        api_secret = os.getenv("KUCOIN_API_SECRET", "")
        api_passphrase = os.getenv("KUCOIN_API_PASSPHRASE", "")
        key_version = os.getenv("KUCOIN_API_KEY_VERSION", DEFAULT_KEY_VERSION).strip()

        credentials = None
        if api_key or api_secret or api_passphrase:
            credentials = Credentials(
                api_key=api_key,
                api_secret=api_secret,
                api_passphrase=api_passphrase,
                api_key_version=key_version or DEFAULT_KEY_VERSION,
            )

        config = cls(
            base_url=base_url,
            credentials=credentials,
            timeout_seconds=_parse_number(
                "KUCOIN_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float
            ),
            max_retries=_parse_number("KUCOIN_MAX_RETRIES", DEFAULT_MAX_RETRIES, int),
        )

        logger.info(
            f"[KC-CONFIG] Configuration loaded from environment | "
            f"base_url={config.base_url} | sandbox={sandbox} | "
            f"api_key=[REDACTED] | key_version={key_version}"
        )

        if validate:
            config.validate()
        return config


def _parse_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        logger.error(f"[KC-CFG-001] Invalid numeric value | variable={name}")
        raise ConfigurationError(f"{name} must be a number, got: {raw!r}") from e
