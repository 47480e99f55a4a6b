"""Product aggregate — price and stock for one sellable item.

Catalogue administration (create/update/delete, categories, search) is an
external concern. The storefront core only reads price and stock and, during
order placement, decrements stock through the stock ledger.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.catalogue.events import ProductListed, StockDecremented
from storefront.domain import storefront


@storefront.aggregate
class Product:
    name: String(required=True, max_length=255)
    code: String(required=True, max_length=50)
    description: Text()
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    category_id: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def stock_must_not_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @classmethod
    def create(cls, name, code, price, stock=0, category_id=None, description=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            code=code,
            description=description,
            price=price,
            stock=stock,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                code=code,
                name=name,
                stock=stock,
                listed_at=now,
            )
        )
        return product

    def decrement_stock(self, quantity):
        """Remove ``quantity`` units from stock. Never drives stock below zero."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.stock:
            raise ValidationError(
                {"stock": [f"Insufficient stock for {self.name}: {self.stock} available, {quantity} requested"]}
            )

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous - quantity
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                decremented_at=now,
            )
        )
