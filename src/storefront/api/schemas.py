"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from the
Protean aggregates behind them.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartLineRequest(BaseModel):
    product_id: str
    quantity: int

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartLineRequest(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_line(cls, line):
        return cls(
            id=str(line.id),
            product_id=str(line.product_id),
            quantity=line.quantity,
            created_at=line.created_at,
            updated_at=line.updated_at,
        )


class RemovedResponse(BaseModel):
    success: bool


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: str
    shipping_method: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": "123 Local St, Springfield",
                    "shipping_method": "Standard",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderLineResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    price_at_purchase: float


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    total_amount: float
    status: str
    shipping_address: str
    shipping_method: str
    shipment_id: str | None = None
    lines: list[OrderLineResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order):
        return cls(
            id=str(order.id),
            customer_id=str(order.customer_id),
            total_amount=order.total_amount,
            status=order.status,
            shipping_address=order.shipping_address,
            shipping_method=order.shipping_method,
            shipment_id=str(order.shipment_id) if order.shipment_id else None,
            lines=[
                OrderLineResponse(
                    id=str(line.id),
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                    price_at_purchase=line.price_at_purchase,
                )
                for line in order.lines
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    limit: int


# ---------------------------------------------------------------------------
# Shipping
# ---------------------------------------------------------------------------
class ShippingEstimateRequest(BaseModel):
    destination_address: str
    total_weight: float = Field(..., allow_inf_nan=False)


class ShippingQuoteResponse(BaseModel):
    method: str
    cost: float
    estimated_days: int


class CreateShipmentRequest(BaseModel):
    courier: str
    cost: float


class UpdateShipmentRequest(BaseModel):
    tracking_number: str | None = None
    status: str | None = None


class ShipmentResponse(BaseModel):
    id: str
    order_id: str
    courier: str
    tracking_number: str | None = None
    cost: float
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_shipment(cls, shipment):
        return cls(
            id=str(shipment.id),
            order_id=str(shipment.order_id),
            courier=shipment.courier,
            tracking_number=shipment.tracking_number,
            cost=shipment.cost,
            status=shipment.status,
            created_at=shipment.created_at,
            updated_at=shipment.updated_at,
        )
