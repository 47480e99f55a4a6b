"""Order history and admin status changes."""

from dataclasses import dataclass

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.ordering.order import Order, OrderStatus
from storefront.result import Ok, Result, conflict, invalid_input, not_found

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class OrderPage:
    orders: list
    total: int
    page: int
    limit: int


class OrderManager:
    def __init__(self, domain):
        self.domain = domain

    @property
    def orders(self):
        return self.domain.repository_for(Order)

    def _load(self, order_id) -> Order | None:
        try:
            return self.orders.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def list_orders(self, customer_id=None, status=None, page=1, limit=DEFAULT_PAGE_SIZE) -> Result[OrderPage]:
        """Orders newest first. Customers pass their id; admins leave it out to see everything."""
        if page < 1:
            return invalid_input("Page must be at least 1", page=page)
        if limit < 1 or limit > MAX_PAGE_SIZE:
            return invalid_input(f"Limit must be between 1 and {MAX_PAGE_SIZE}", limit=limit)

        filters = {}
        if customer_id is not None:
            filters["customer_id"] = str(customer_id)
        if status is not None:
            try:
                filters["status"] = OrderStatus(status).value
            except ValueError:
                return invalid_input(f"Unknown order status: {status}", status=status)

        query = self.orders._dao.query
        if filters:
            query = query.filter(**filters)
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()

        return Ok(OrderPage(orders=results.items, total=results.total, page=page, limit=limit))

    def get_order(self, order_id, customer_id=None) -> Result[Order]:
        """Fetch an order. With ``customer_id`` given, other customers' orders look missing."""
        order = self._load(order_id)
        if order is None or (customer_id is not None and str(order.customer_id) != str(customer_id)):
            return not_found("Order not found", order_id=str(order_id))
        return Ok(order)

    def update_status(self, order_id, status) -> Result[Order]:
        try:
            target = OrderStatus(status)
        except ValueError:
            return invalid_input(f"Unknown order status: {status}", status=status)

        with UnitOfWork():
            order = self._load(order_id)
            if order is None:
                return not_found("Order not found", order_id=str(order_id))

            try:
                order.change_status(target)
            except ValidationError as exc:
                logger.info(
                    "Order status change refused",
                    order_id=str(order_id),
                    current=order.status,
                    requested=target.value,
                )
                return conflict(
                    f"Cannot move order from {order.status} to {target.value}",
                    order_id=str(order_id),
                    current=order.status,
                    requested=target.value,
                    errors=exc.messages,
                )
            self.orders.add(order)

        logger.info("Order status changed", order_id=str(order_id), status=target.value)
        return Ok(order)
