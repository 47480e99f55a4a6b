"""Shipment aggregate (CQRS) — the shipping record attached to an order.

Created after order placement, one per order, and updated independently by
courier status callbacks. Statuses move freely between the four values: a
courier may report a return after a delivery, or re-send an earlier status.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront
from storefront.shipping.events import ShipmentCreated, ShipmentUpdated


class ShipmentStatus(Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RETURNED = "returned"


@storefront.aggregate
class Shipment:
    order_id = Identifier(required=True)
    courier = String(required=True, max_length=100)
    tracking_number = String(max_length=255)
    cost = Float(required=True, min_value=0.0)
    status = String(
        choices=ShipmentStatus,
        default=ShipmentStatus.PENDING.value,
    )
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_id, courier, cost):
        if cost is None or cost <= 0:
            raise ValidationError({"cost": ["Shipping cost must be positive"]})

        now = datetime.now(UTC)
        shipment = cls(
            order_id=order_id,
            courier=courier,
            cost=cost,
            status=ShipmentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                order_id=str(order_id),
                courier=courier,
                cost=cost,
                created_at=now,
            )
        )
        return shipment

    def record_update(self, tracking_number=None, status: ShipmentStatus | None = None):
        """Apply a courier callback. An empty tracking number clears it."""
        previous_status = self.status
        now = datetime.now(UTC)

        if tracking_number is not None:
            self.tracking_number = tracking_number or None
        if status is not None:
            self.status = status.value
        self.updated_at = now

        self.raise_(
            ShipmentUpdated(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                tracking_number=self.tracking_number,
                previous_status=previous_status,
                new_status=self.status,
                updated_at=now,
            )
        )
