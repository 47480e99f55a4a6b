"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer's cart was converted into a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of line dicts
    line_count = Integer(required=True)
    total_amount = Float(required=True)
    shipping_address = Text(required=True)
    shipping_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ShipmentLinked:
    """A shipping record was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    linked_at = DateTime(required=True)
