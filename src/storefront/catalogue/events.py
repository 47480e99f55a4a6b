"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductListed:
    """A product was added to the catalogue with its opening stock."""

    __version__ = 1

    product_id: Identifier(required=True)
    code: String(required=True)
    name: String(required=True)
    stock: Integer(required=True)
    listed_at: DateTime(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Units left the stock ledger because an order claimed them."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    decremented_at: DateTime(required=True)
