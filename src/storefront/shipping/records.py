"""Shipment manager: create and update the shipping record of an order."""

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.ordering.order import Order
from storefront.result import Ok, Result, conflict, invalid_input, not_found
from storefront.shipping.estimator import ShippingQuote
from storefront.shipping.shipment import Shipment, ShipmentStatus

logger = structlog.get_logger(__name__)


class ShipmentManager:
    def __init__(self, domain):
        self.domain = domain

    @property
    def shipments(self):
        return self.domain.repository_for(Shipment)

    @property
    def orders(self):
        return self.domain.repository_for(Order)

    def _load(self, repository, identifier):
        try:
            return repository.get(str(identifier))
        except ObjectNotFoundError:
            return None

    def create(self, order_id, courier, cost) -> Result[Shipment]:
        """Attach a pending shipping record to an order and link the order to it."""
        if not (courier or "").strip():
            return invalid_input("Courier is required", field="courier")
        if cost is None or cost <= 0:
            return invalid_input("Shipping cost must be positive", field="cost", cost=cost)

        with UnitOfWork():
            order = self._load(self.orders, order_id)
            if order is None:
                return not_found("Order not found", order_id=str(order_id))
            if order.shipment_id:
                logger.info("Shipment already exists", order_id=str(order_id), shipment_id=str(order.shipment_id))
                return conflict(
                    "Order already has a shipment",
                    order_id=str(order_id),
                    shipment_id=str(order.shipment_id),
                )

            shipment = Shipment.create(order_id=str(order.id), courier=courier.strip(), cost=cost)
            order.link_shipment(shipment.id)

            self.shipments.add(shipment)
            self.orders.add(order)

        logger.info("Shipment created", order_id=str(order_id), shipment_id=str(shipment.id), courier=shipment.courier)
        return Ok(shipment)

    def create_from_quote(self, order_id, courier, quote: ShippingQuote) -> Result[Shipment]:
        return self.create(order_id, courier, quote.cost)

    def update(self, shipment_id, tracking_number=None, status=None) -> Result[Shipment]:
        """Courier callback: set the tracking number and/or status."""
        target = None
        if status is not None:
            try:
                target = ShipmentStatus(status)
            except ValueError:
                return invalid_input(f"Unknown shipment status: {status}", status=status)

        with UnitOfWork():
            shipment = self._load(self.shipments, shipment_id)
            if shipment is None:
                return not_found("Shipment not found", shipment_id=str(shipment_id))

            try:
                shipment.record_update(tracking_number=tracking_number, status=target)
            except ValidationError as exc:
                return invalid_input("Invalid shipment update", shipment_id=str(shipment_id), errors=exc.messages)
            self.shipments.add(shipment)

        logger.info("Shipment updated", shipment_id=str(shipment_id), status=shipment.status)
        return Ok(shipment)

    def for_order(self, order_id) -> Result[Shipment]:
        found = self.shipments._dao.query.filter(order_id=str(order_id)).all().items
        if not found:
            return not_found("Shipment not found", order_id=str(order_id))
        return Ok(found[0])
