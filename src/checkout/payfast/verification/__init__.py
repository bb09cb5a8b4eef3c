"""Verification gateway factory.

Provides get_verifier() / set_verifier() to swap implementations:
- PayFastVerificationClient for real ITN validation (default)
- FakeVerificationGateway for development and testing
"""

from checkout.config import load_settings
from checkout.payfast.verification.http_adapter import PayFastVerificationClient
from checkout.payfast.verification.port import VerificationGateway

_current_verifier: VerificationGateway | None = None


def get_verifier() -> VerificationGateway:
    """Return the current verifier, building the HTTP client from settings on first use."""
    global _current_verifier
    if _current_verifier is None:
        settings = load_settings()
        _current_verifier = PayFastVerificationClient(settings.validate_url, timeout=settings.verify_timeout)
    return _current_verifier


def set_verifier(verifier: VerificationGateway) -> None:
    """Override the active verifier (useful for tests)."""
    global _current_verifier
    _current_verifier = verifier


def reset_verifier() -> None:
    global _current_verifier
    _current_verifier = None
