import pytest
from protean.integrations.pytest import DomainFixture

MERCHANT_ID = "10000100"
MERCHANT_KEY = "46f0cd694581a"
PASSPHRASE = "jt7NOE43FZPn"


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        # Stock counters and carts must not leak between tests
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def settings():
    from checkout.config import PayFastSettings

    return PayFastSettings(
        merchant_id=MERCHANT_ID,
        merchant_key=MERCHANT_KEY,
        passphrase=PASSPHRASE,
        callback_base_url="https://shop.example.com",
        sandbox_mode=True,
    )


@pytest.fixture()
def verifier():
    from checkout.payfast.verification.fake_adapter import FakeVerificationGateway

    return FakeVerificationGateway()


@pytest.fixture()
def mailer():
    from checkout.notifications.recording import RecordingMailer

    return RecordingMailer()


@pytest.fixture()
def machine(settings, verifier, mailer):
    from checkout.ledger import DomainLedgerStore
    from checkout.settlement import SettlementMachine, reset_machine, set_machine

    machine = SettlementMachine(
        store=DomainLedgerStore(),
        settings=settings,
        verifier=verifier,
        mailer=mailer,
    )
    set_machine(machine)
    yield machine
    reset_machine()


@pytest.fixture()
def catalogue():
    """Seed the three storefront products and return them by id."""
    from checkout.catalogue.product import Product
    from checkout.catalogue.seed import SEED_PRODUCTS, seed_catalogue
    from protean import current_domain

    seed_catalogue()
    repo = current_domain.repository_for(Product)
    return {entry["product_id"]: repo.get(entry["product_id"]) for entry in SEED_PRODUCTS}


@pytest.fixture()
def itn(settings):
    """Factory for a signed PayFast notification body."""
    from checkout.payfast.signature import sign

    def _build(reference, amount, status="COMPLETE", pf_payment_id="1089250", passphrase=None, **extra):
        fields = {
            "m_payment_id": reference,
            "pf_payment_id": pf_payment_id,
            "payment_status": status,
            "item_name": "CryoChill Product Order",
            "amount_gross": amount,
            "amount_fee": "-1.61",
            "name_first": "Thandi",
            "name_last": "Mokoena",
            "email_address": "thandi@example.com",
            "merchant_id": settings.merchant_id,
            **extra,
        }
        fields["signature"] = sign(fields, settings.passphrase if passphrase is None else passphrase)
        return fields

    return _build


@pytest.fixture()
def pending_order(machine, catalogue):
    """Initiate checkout for two CryoChill bowls (R69.98) and return the redirect."""
    from checkout.cart.cart import CartLine
    from checkout.catalogue.seed import MAIN_PRODUCT_ID

    return machine.initiate(
        (CartLine(product_id=MAIN_PRODUCT_ID, quantity=2, variant="Ocean Blue"),),
        email="thandi@example.com",
        customer_info={"full_name": "Thandi Mokoena", "address": "12 Long Street, Cape Town"},
        expected_total="69.98",
        session_id="sess-001",
    )
