"""FastAPI routes for the storefront: cart, orders and shipping."""

from fastapi import APIRouter, Request

from storefront.api.errors import error_response
from storefront.api.schemas import (
    AddCartLineRequest,
    CartLineResponse,
    CreateShipmentRequest,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    RemovedResponse,
    ShipmentResponse,
    ShippingEstimateRequest,
    ShippingQuoteResponse,
    UpdateCartLineRequest,
    UpdateOrderStatusRequest,
    UpdateShipmentRequest,
)
from storefront.ordering.management import DEFAULT_PAGE_SIZE


def _services(request: Request):
    return request.app.state.services


def _order_page(page_result):
    page = page_result.value
    return OrderListResponse(
        orders=[OrderResponse.from_order(order) for order in page.orders],
        total=page.total,
        page=page.page,
        limit=page.limit,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/customers/{customer_id}/cart", tags=["cart"])


@cart_router.get("", response_model=list[CartLineResponse])
async def list_cart(customer_id: str, request: Request):
    return [CartLineResponse.from_line(line) for line in _services(request).carts.list(customer_id)]


@cart_router.post("/lines", status_code=201, response_model=CartLineResponse)
async def add_cart_line(customer_id: str, body: AddCartLineRequest, request: Request):
    result = _services(request).carts.add(customer_id, body.product_id, body.quantity)
    if not result.is_ok:
        return error_response(result)
    return CartLineResponse.from_line(result.value)


@cart_router.patch("/lines/{line_id}", response_model=CartLineResponse)
async def update_cart_line(customer_id: str, line_id: str, body: UpdateCartLineRequest, request: Request):
    result = _services(request).carts.update(customer_id, line_id, body.quantity)
    if not result.is_ok:
        return error_response(result)
    return CartLineResponse.from_line(result.value)


@cart_router.delete("/lines/{line_id}", response_model=RemovedResponse)
async def remove_cart_line(customer_id: str, line_id: str, request: Request):
    return RemovedResponse(success=_services(request).carts.remove(customer_id, line_id))


# ---------------------------------------------------------------------------
# Customer Order Router
# ---------------------------------------------------------------------------
customer_order_router = APIRouter(prefix="/customers/{customer_id}/orders", tags=["orders"])


@customer_order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(customer_id: str, body: PlaceOrderRequest, request: Request):
    result = _services(request).placement.place_order(customer_id, body.shipping_address, body.shipping_method)
    if not result.is_ok:
        return error_response(result)
    return OrderResponse.from_order(result.value)


@customer_order_router.get("", response_model=OrderListResponse)
async def list_customer_orders(
    customer_id: str,
    request: Request,
    status: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    result = _services(request).orders.list_orders(customer_id=customer_id, status=status, page=page, limit=limit)
    if not result.is_ok:
        return error_response(result)
    return _order_page(result)


@customer_order_router.get("/{order_id}", response_model=OrderResponse)
async def get_customer_order(customer_id: str, order_id: str, request: Request):
    result = _services(request).orders.get_order(order_id, customer_id=customer_id)
    if not result.is_ok:
        return error_response(result)
    return OrderResponse.from_order(result.value)


# ---------------------------------------------------------------------------
# Order Admin Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    request: Request,
    status: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    result = _services(request).orders.list_orders(status=status, page=page, limit=limit)
    if not result.is_ok:
        return error_response(result)
    return _order_page(result)


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest, request: Request):
    result = _services(request).orders.update_status(order_id, body.status)
    if not result.is_ok:
        return error_response(result)
    return OrderResponse.from_order(result.value)


@order_router.post("/{order_id}/shipment", status_code=201, response_model=ShipmentResponse)
async def create_shipment(order_id: str, body: CreateShipmentRequest, request: Request):
    result = _services(request).shipments.create(order_id, body.courier, body.cost)
    if not result.is_ok:
        return error_response(result)
    return ShipmentResponse.from_shipment(result.value)


@order_router.get("/{order_id}/shipment", response_model=ShipmentResponse)
async def get_order_shipment(order_id: str, request: Request):
    result = _services(request).shipments.for_order(order_id)
    if not result.is_ok:
        return error_response(result)
    return ShipmentResponse.from_shipment(result.value)


# ---------------------------------------------------------------------------
# Shipping Router
# ---------------------------------------------------------------------------
shipping_router = APIRouter(tags=["shipping"])


@shipping_router.post("/shipping/estimate", response_model=list[ShippingQuoteResponse])
async def estimate_shipping(body: ShippingEstimateRequest, request: Request):
    result = _services(request).estimator.estimate(body.destination_address, body.total_weight)
    if not result.is_ok:
        return error_response(result)
    return [
        ShippingQuoteResponse(method=quote.method, cost=quote.cost, estimated_days=quote.estimated_days)
        for quote in result.value
    ]


@shipping_router.patch("/shipments/{shipment_id}", response_model=ShipmentResponse)
async def update_shipment(shipment_id: str, body: UpdateShipmentRequest, request: Request):
    result = _services(request).shipments.update(
        shipment_id,
        tracking_number=body.tracking_number,
        status=body.status,
    )
    if not result.is_ok:
        return error_response(result)
    return ShipmentResponse.from_shipment(result.value)
