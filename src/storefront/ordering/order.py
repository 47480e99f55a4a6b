"""Order aggregate (CQRS) — the durable result of a checkout.

An order is created only by order placement, together with its lines, the
stock decrements and the cart clear, in one unit of work. After that only
``status`` and the shipment linkage ever change.

State Machine:
    PENDING → PAID → SHIPPED → COMPLETED
    CANCELLED (from PENDING, PAID)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.money import as_amount, line_total, round2
from storefront.ordering.events import OrderPlaced, OrderStatusChanged, ShipmentLinked


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """One purchased product with the unit price captured at checkout.

    ``price_at_purchase`` is a snapshot: later catalogue price changes never
    reach it.
    """

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price_at_purchase = Float(required=True, min_value=0.0)
    created_at = DateTime()

    @property
    def subtotal(self):
        return line_total(self.price_at_purchase, self.quantity)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    total_amount = Float(required=True, min_value=0.0)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    shipping_address = Text(required=True)
    shipping_method = String(required=True, max_length=100)
    shipment_id = Identifier()
    lines = HasMany(OrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines_data, shipping_address, shipping_method):
        """Build a pending order from priced lines.

        Args:
            customer_id: The customer placing the order.
            lines_data: List of dicts with product_id, quantity, price_at_purchase.
            shipping_address: Free-form delivery address.
            shipping_method: Chosen shipping method name.
        """
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        total = round2(sum(line_total(line["price_at_purchase"], line["quantity"]) for line in lines_data))

        order = cls(
            customer_id=customer_id,
            total_amount=as_amount(total),
            status=OrderStatus.PENDING.value,
            shipping_address=shipping_address,
            shipping_method=shipping_method,
            created_at=now,
            updated_at=now,
        )
        for data in lines_data:
            order.add_lines(
                OrderLine(
                    product_id=data["product_id"],
                    quantity=data["quantity"],
                    price_at_purchase=as_amount(data["price_at_purchase"]),
                    created_at=now,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                lines=json.dumps(
                    [
                        {
                            "product_id": str(line.product_id),
                            "quantity": line.quantity,
                            "price_at_purchase": line.price_at_purchase,
                        }
                        for line in order.lines
                    ]
                ),
                line_count=len(order.lines),
                total_amount=order.total_amount,
                shipping_address=shipping_address,
                shipping_method=shipping_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def change_status(self, target_status: OrderStatus):
        """Move the order along its state machine. Cancelling does not restock."""
        current = OrderStatus(self.status)
        if not self.can_transition_to(target_status):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target_status.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Shipment linkage
    # -------------------------------------------------------------------
    def link_shipment(self, shipment_id):
        if self.shipment_id:
            raise ValidationError({"shipment_id": ["Order already has a shipment"]})

        now = datetime.now(UTC)
        self.shipment_id = shipment_id
        self.updated_at = now

        self.raise_(
            ShipmentLinked(
                order_id=str(self.id),
                shipment_id=str(shipment_id),
                linked_at=now,
            )
        )
