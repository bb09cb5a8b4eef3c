"""PayFast merchant configuration.

Credentials and callback locations are read from the environment. The
sandbox flag switches both the hosted payment page and the server-to-server
validation endpoint between PayFast's sandbox and live hosts.
"""

import os
from dataclasses import dataclass

from protean.exceptions import ConfigurationError

SANDBOX_HOST = "https://sandbox.payfast.co.za"
LIVE_HOST = "https://www.payfast.co.za"

DEFAULT_VERIFY_TIMEOUT = 10.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PayFastSettings:
    """Merchant identity and endpoints used to build and verify payments."""

    merchant_id: str
    merchant_key: str
    passphrase: str = ""
    callback_base_url: str = "http://localhost:8000"
    sandbox_mode: bool = True
    verify_timeout: float = DEFAULT_VERIFY_TIMEOUT

    @property
    def host(self) -> str:
        return SANDBOX_HOST if self.sandbox_mode else LIVE_HOST

    @property
    def process_url(self) -> str:
        """Hosted payment page the browser is redirected to."""
        return f"{self.host}/eng/process"

    @property
    def validate_url(self) -> str:
        """Endpoint that corroborates an ITN notification."""
        return f"{self.host}/eng/query/validate"

    def callback_url(self, path: str) -> str:
        return f"{self.callback_base_url.rstrip('/')}{path}"


def load_settings() -> PayFastSettings:
    """Build settings from ``PAYFAST_*`` environment variables.

    Raises ConfigurationError when the merchant credentials are missing.
    """
    merchant_id = os.environ.get("PAYFAST_MERCHANT_ID")
    merchant_key = os.environ.get("PAYFAST_MERCHANT_KEY")
    if not merchant_id or not merchant_key:
        raise ConfigurationError(
            "Missing required PayFast credentials: PAYFAST_MERCHANT_ID and PAYFAST_MERCHANT_KEY must be set"
        )

    sandbox_default = "false" if os.environ.get("PROTEAN_ENV") == "production" else "true"
    sandbox_mode = os.environ.get("PAYFAST_SANDBOX", sandbox_default).strip().lower() in _TRUTHY

    return PayFastSettings(
        merchant_id=merchant_id,
        merchant_key=merchant_key,
        passphrase=os.environ.get("PAYFAST_PASSPHRASE", ""),
        callback_base_url=os.environ.get("PAYFAST_CALLBACK_BASE_URL", "http://localhost:8000"),
        sandbox_mode=sandbox_mode,
        verify_timeout=float(os.environ.get("PAYFAST_VERIFY_TIMEOUT", DEFAULT_VERIFY_TIMEOUT)),
    )
