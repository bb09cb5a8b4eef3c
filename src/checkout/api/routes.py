"""FastAPI routes for the storefront: catalogue, cart and PayFast checkout."""

from urllib.parse import parse_qsl

import structlog
from fastapi import APIRouter, Cookie, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from starlette.concurrency import run_in_threadpool

from checkout.api.schemas import (
    AddToCartRequest,
    CartItemIdResponse,
    CartItemResponse,
    CreatePaymentRequest,
    CreatePaymentResponse,
    OrderStatusResponse,
    ProductResponse,
    StatusResponse,
    UpdateCartItemRequest,
)
from checkout.cart.cart import ShoppingCart
from checkout.cart.management import AddToCart, RemoveFromCart, UpdateCartQuantity
from checkout.catalogue.product import Product
from checkout.domain import checkout
from checkout.order.order import Order
from checkout.settlement import (
    AmountMismatch,
    InvalidSignature,
    OrderNotFound,
    UnverifiedNotification,
    get_machine,
)
from checkout.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


def session_id_from(x_session_id: str | None, session_cookie: str | None) -> str:
    session_id = x_session_id or session_cookie
    if not session_id:
        raise HTTPException(status_code=400, detail="Missing session")
    return session_id


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        original_price=product.original_price,
        stock=product.stock,
        colors=product.color_list,
    )


def _order_response(order: Order) -> OrderStatusResponse:
    return OrderStatusResponse(
        id=str(order.id),
        reference=order.external_reference,
        status=order.status,
        processor_status=order.processor_status,
        total=order.total,
        email=order.email,
        created_at=order.created_at.isoformat() if order.created_at else None,
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/api/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    products = current_domain.repository_for(Product)._dao.query.filter(is_active=True).all().items
    return [_product_response(p) for p in products]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found") from None
    return _product_response(product)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("", response_model=list[CartItemResponse])
async def get_cart(
    x_session_id: str | None = Header(default=None),
    session_id: str | None = Cookie(default=None),
) -> list[CartItemResponse]:
    sid = session_id_from(x_session_id, session_id)
    cart = current_domain.repository_for(ShoppingCart).for_session(sid)
    if cart is None:
        return []

    product_repo = current_domain.repository_for(Product)
    enriched = []
    for item in cart.items:
        try:
            product = _product_response(product_repo.get(item.product_id))
        except ObjectNotFoundError:
            product = None
        enriched.append(
            CartItemResponse(
                id=str(item.id),
                product_id=str(item.product_id),
                color=item.color,
                quantity=item.quantity,
                product=product,
            )
        )
    return enriched


@cart_router.post("", response_model=CartItemIdResponse)
async def add_to_cart(
    body: AddToCartRequest,
    x_session_id: str | None = Header(default=None),
    session_id: str | None = Cookie(default=None),
) -> CartItemIdResponse:
    command = AddToCart(
        session_id=session_id_from(x_session_id, session_id),
        product_id=body.product_id,
        color=body.color,
        quantity=body.quantity,
    )
    try:
        item_id = current_domain.process(command, asynchronous=False)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found") from None
    return CartItemIdResponse(item_id=item_id)


@cart_router.put("/{item_id}", response_model=StatusResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    x_session_id: str | None = Header(default=None),
    session_id: str | None = Cookie(default=None),
) -> StatusResponse:
    command = UpdateCartQuantity(
        session_id=session_id_from(x_session_id, session_id),
        item_id=item_id,
        new_quantity=body.quantity,
    )
    try:
        current_domain.process(command, asynchronous=False)
    except (ObjectNotFoundError, ValidationError):
        raise HTTPException(status_code=404, detail="Cart item not found") from None
    return StatusResponse(status="removed" if body.quantity <= 0 else "updated")


@cart_router.delete("/{item_id}", response_model=StatusResponse)
async def remove_cart_item(
    item_id: str,
    x_session_id: str | None = Header(default=None),
    session_id: str | None = Cookie(default=None),
) -> StatusResponse:
    command = RemoveFromCart(session_id=session_id_from(x_session_id, session_id), item_id=item_id)
    try:
        current_domain.process(command, asynchronous=False)
    except (ObjectNotFoundError, ValidationError):
        raise HTTPException(status_code=404, detail="Cart item not found") from None
    return StatusResponse(status="removed")


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/api", tags=["payments"])


@payment_router.post("/create-payment", response_model=CreatePaymentResponse)
async def create_payment(
    body: CreatePaymentRequest,
    x_session_id: str | None = Header(default=None),
    session_id: str | None = Cookie(default=None),
) -> CreatePaymentResponse:
    """Create a pending order from the session's cart and return the signed PayFast form."""
    sid = session_id_from(x_session_id, session_id)
    cart = current_domain.repository_for(ShoppingCart).for_session(sid)
    snapshot = cart.snapshot() if cart else ()

    try:
        redirect = get_machine().initiate(
            snapshot,
            email=body.email,
            customer_info=body.customer_info.model_dump(exclude_none=True),
            expected_total=body.amount,
            session_id=sid,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.messages) from None
    except AmountMismatch:
        raise HTTPException(status_code=400, detail="Amount mismatch - please refresh your cart") from None

    return CreatePaymentResponse(
        payment_url=redirect.url,
        payment_data=redirect.fields,
        order_id=redirect.order_id,
        reference=redirect.reference,
    )


def _settle(fields: dict[str, str]):
    # Runs on a worker thread: the processor round trip blocks
    with checkout.domain_context():
        return get_machine().handle_notification(fields)


@payment_router.post("/payfast-webhook", response_class=PlainTextResponse)
async def payfast_webhook(request: Request) -> PlainTextResponse:
    """Receive a PayFast ITN. Anything but a 200 ``OK`` makes PayFast retry."""
    try:
        raw = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("PayFast notification body is not valid UTF-8", security=True)
        raise HTTPException(status_code=400, detail="Malformed notification") from None
    fields = dict(parse_qsl(raw, keep_blank_values=True))
    add_context(reference=fields.get("m_payment_id"))
    logger.info("PayFast notification received", payment_status=fields.get("payment_status"))
    try:
        await run_in_threadpool(_settle, fields)
    except InvalidSignature:
        raise HTTPException(status_code=400, detail="Invalid signature") from None
    except UnverifiedNotification:
        raise HTTPException(status_code=400, detail="Invalid IPN") from None
    except AmountMismatch:
        raise HTTPException(status_code=400, detail="Amount mismatch") from None
    except ValidationError:
        raise HTTPException(status_code=400, detail="Malformed notification") from None
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found") from None
    finally:
        clear_context()
    return PlainTextResponse("OK")


@payment_router.get("/order-status/{reference}", response_model=OrderStatusResponse)
async def order_status(reference: str) -> OrderStatusResponse:
    try:
        order = get_machine().order_status(reference)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found") from None
    return _order_response(order)


@payment_router.get("/orders/{order_id}", response_model=OrderStatusResponse)
async def get_order(order_id: str) -> OrderStatusResponse:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found") from None
    return _order_response(order)


# ---------------------------------------------------------------------------
# Browser return / cancel callbacks
# ---------------------------------------------------------------------------
# The redirect outcome is not trusted: the page polls /api/order-status.
redirect_router = APIRouter(prefix="/payment", tags=["payments"])


@redirect_router.get("/success")
async def payment_success(order_id: str = "") -> RedirectResponse:
    return RedirectResponse(url=f"/?payment=success&order_id={order_id}", status_code=302)


@redirect_router.get("/cancel")
async def payment_cancel(order_id: str = "") -> RedirectResponse:
    return RedirectResponse(url=f"/?payment=cancelled&order_id={order_id}", status_code=302)
