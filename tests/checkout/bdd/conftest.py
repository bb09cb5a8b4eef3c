"""Shared BDD fixtures and step definitions for checkout settlement."""

import pytest
from checkout.cart.cart import CartLine, ShoppingCart
from checkout.cart.management import AddToCart, UpdateCartQuantity
from checkout.catalogue.product import Product
from checkout.order.order import Order
from checkout.settlement import SettlementError
from protean import current_domain
from pytest_bdd import given, parsers, then, when

SESSION_ID = "sess-bdd-001"
CUSTOMER = {"full_name": "Thandi Mokoena", "address": "12 Long Street, Cape Town"}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def context():
    """Mutable scratchpad shared by the steps of one scenario."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the storefront catalogue is seeded")
def _seeded(catalogue, machine):
    return catalogue


@given(parsers.cfparse('the product "{product_id}" has {stock:d} units in stock'))
def _product_stock(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@given("PayFast will not confirm notifications")
def _processor_declines(verifier):
    verifier.configure(should_confirm=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('checkout is initiated for {qty:d} of "{product_id}"'))
def _initiate(machine, context, qty, product_id):
    context["redirect"] = machine.initiate(
        (CartLine(product_id=product_id, quantity=qty),),
        email="thandi@example.com",
        customer_info=CUSTOMER,
    )


@when("the cart is checked out")
def _checkout_cart(machine, context):
    cart = current_domain.repository_for(ShoppingCart).for_session(SESSION_ID)
    context["redirect"] = machine.initiate(
        cart.snapshot(),
        email="thandi@example.com",
        customer_info=CUSTOMER,
        session_id=SESSION_ID,
    )


def _deliver(machine, context, fields):
    context["fields"] = fields
    try:
        context["outcome"] = machine.handle_notification(fields)
    except SettlementError as exc:
        context["error"] = exc


@when(parsers.cfparse('PayFast notifies "{status}" for "{amount}"'))
def _notify(machine, context, itn, status, amount):
    _deliver(machine, context, itn(context["redirect"].reference, amount, status=status))


@when("the same notification is delivered again")
def _redeliver(machine, context):
    _deliver(machine, context, context["fields"])


@when(parsers.cfparse('a notification for "{amount}" is tampered to claim "{claimed}"'))
def _tampered(machine, context, itn, amount, claimed):
    fields = itn(context["redirect"].reference, amount)
    fields["amount_gross"] = claimed
    _deliver(machine, context, fields)


@when(parsers.cfparse('{qty:d} of "{product_id}" in "{color}" is added to the cart'))
def _add_to_cart(qty, product_id, color):
    current_domain.process(
        AddToCart(session_id=SESSION_ID, product_id=product_id, color=color, quantity=qty),
        asynchronous=False,
    )


@when(parsers.cfparse("the first cart line quantity is set to {qty:d}"))
def _set_quantity(qty):
    cart = current_domain.repository_for(ShoppingCart).for_session(SESSION_ID)
    current_domain.process(
        UpdateCartQuantity(session_id=SESSION_ID, item_id=str(cart.items[0].id), new_quantity=qty),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order total is "{total}"'))
def _order_total(context, total):
    order = current_domain.repository_for(Order).get(context["redirect"].order_id)
    assert order.total == total


@then(parsers.cfparse('the order status is "{status}"'))
def _order_status(context, status):
    order = current_domain.repository_for(Order).get(context["redirect"].order_id)
    assert order.status == status


@then(parsers.cfparse('the product "{product_id}" has {stock:d} units in stock'))
def _stock_is(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse('the notification is rejected with "{error_name}"'))
def _rejected(context, error_name):
    assert type(context.get("error")).__name__ == error_name


def _cart(session_id=SESSION_ID):
    return current_domain.repository_for(ShoppingCart).for_session(session_id)


@then(parsers.cfparse("the cart has {count:d} line"))
def _cart_has_n_lines_singular(count):
    assert len(_cart().items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def _cart_has_n_lines(count):
    assert len(_cart().items) == count


@then(parsers.cfparse("the first cart line has quantity {qty:d}"))
def _first_line_quantity(qty):
    cart = current_domain.repository_for(ShoppingCart).for_session(SESSION_ID)
    assert cart.items[0].quantity == qty
