"""Configurable fake verification gateway for development and testing."""

from collections.abc import Mapping

from checkout.payfast.verification.port import VerificationGateway


class FakeVerificationGateway(VerificationGateway):
    def __init__(self, should_confirm: bool = True) -> None:
        self.should_confirm = should_confirm
        self.calls: list[dict] = []

    def configure(self, should_confirm: bool) -> None:
        self.should_confirm = should_confirm

    def confirm(self, fields: Mapping[str, str]) -> bool:
        self.calls.append(dict(fields))
        return self.should_confirm
