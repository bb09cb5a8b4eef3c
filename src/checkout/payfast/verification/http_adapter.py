"""PayFast server-to-server ITN validation over HTTP."""

from collections.abc import Mapping

import requests
import structlog

from checkout.config import DEFAULT_VERIFY_TIMEOUT
from checkout.payfast.verification.port import VerificationGateway

logger = structlog.get_logger(__name__)

CONFIRMATION_BODY = "VALID"


class PayFastVerificationClient(VerificationGateway):
    """Re-posts the received fields to PayFast's validate endpoint."""

    def __init__(self, validate_url: str, timeout: float = DEFAULT_VERIFY_TIMEOUT, session=None) -> None:
        self.validate_url = validate_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def confirm(self, fields: Mapping[str, str]) -> bool:
        try:
            response = self.session.post(
                self.validate_url,
                data=list(fields.items()),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning(
                "PayFast validation request failed",
                url=self.validate_url,
                error=str(exc),
            )
            return False

        if not response.ok:
            logger.warning(
                "PayFast validation returned an error status",
                url=self.validate_url,
                status_code=response.status_code,
            )
            return False

        confirmed = response.text.strip() == CONFIRMATION_BODY
        if not confirmed:
            logger.warning("PayFast did not confirm notification", body=response.text.strip()[:100])
        return confirmed
