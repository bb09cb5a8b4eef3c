"""Cart management — commands and handler.

Carts are created lazily on the first AddToCart for a session.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from checkout.cart.cart import ShoppingCart
from checkout.catalogue.product import Product
from checkout.domain import checkout


@checkout.command(part_of="ShoppingCart")
class AddToCart:
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    color = String(max_length=100)
    quantity = Integer(default=1, min_value=1)


@checkout.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    session_id = String(required=True, max_length=255)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True)


@checkout.command(part_of="ShoppingCart")
class RemoveFromCart:
    session_id = String(required=True, max_length=255)
    item_id = Identifier(required=True)


@checkout.command(part_of="ShoppingCart")
class ClearCart:
    session_id = String(required=True, max_length=255)


def _cart_for(session_id) -> ShoppingCart:
    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    if cart is None:
        raise ObjectNotFoundError(f"No cart for session `{session_id}`")
    return cart


@checkout.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        # Raises ObjectNotFoundError for unknown products
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id) or ShoppingCart.create(session_id=command.session_id)
        item_id = cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity or 1,
            color=command.color,
        )
        repo.add(cart)
        return item_id

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = _cart_for(command.session_id)
        cart.update_item_quantity(item_id=command.item_id, new_quantity=command.new_quantity)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _cart_for(command.session_id)
        cart.remove_item(item_id=command.item_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is None:
            return
        cart.clear()
        repo.add(cart)
