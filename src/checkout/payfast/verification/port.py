"""Verification gateway port (abstract interface).

Signature matching alone only proves the sender knows the passphrase. The
gateway asks the processor itself to corroborate a notification.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping


class VerificationGateway(ABC):
    @abstractmethod
    def confirm(self, fields: Mapping[str, str]) -> bool:
        """Return True only when the processor vouches for ``fields``.

        Implementations must fail closed: errors and timeouts are False.
        """
        ...
