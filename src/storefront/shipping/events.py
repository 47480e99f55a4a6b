"""Domain events for the Shipment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Shipment")
class ShipmentCreated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    courier = String(required=True)
    cost = Float(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Shipment")
class ShipmentUpdated:
    """A courier callback changed the tracking number or status."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_at = DateTime(required=True)
