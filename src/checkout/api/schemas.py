"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands and aggregates.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: str
    original_price: str | None = None
    stock: int
    colors: list[str] = []


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    color: str | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    color: str | None = None
    quantity: int
    product: ProductResponse | None = None


class CartItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------
class CustomerInfo(BaseModel):
    full_name: str
    address: str
    city: str | None = None
    postal_code: str | None = None
    phone: str | None = None


class CreatePaymentRequest(BaseModel):
    amount: str
    email: str
    customer_info: CustomerInfo

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "amount": "69.98",
                    "email": "buyer@example.com",
                    "customer_info": {"full_name": "Thandi Mokoena", "address": "12 Long Street, Cape Town"},
                }
            ]
        }
    }


class CreatePaymentResponse(BaseModel):
    payment_url: str
    payment_data: dict[str, str]
    order_id: str
    reference: str


class OrderStatusResponse(BaseModel):
    id: str
    reference: str
    status: str
    processor_status: str | None = None
    total: str
    email: str
    created_at: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
