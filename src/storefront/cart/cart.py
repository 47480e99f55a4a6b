"""Shopping Cart aggregate (CQRS) — one per customer, stored under the customer's id.

The cart is created lazily on the customer's first add and lives as long as
the customer does. Placing an order clears its lines; the cart itself stays
for the next purchase. Stock is not this aggregate's concern: the cart
manager consults the stock ledger before every mutation.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import CartCleared, CartLineAdded, CartLineQuantityUpdated, CartLineRemoved
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    created_at = DateTime()
    updated_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.lines or []]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(id=str(customer_id), customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def line(self, line_id):
        return next((line for line in self.lines or [] if str(line.id) == str(line_id)), None)

    def line_for_product(self, product_id):
        return next((line for line in self.lines or [] if str(line.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product_id, quantity):
        """Add ``quantity`` of a product, merging into its existing line if there is one."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        line = self.line_for_product(product_id)

        if line:
            line.quantity += quantity
            line.updated_at = now
        else:
            line = CartLine(product_id=product_id, quantity=quantity, created_at=now, updated_at=now)
            self.add_lines(line)

        self.updated_at = now

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                line_id=str(line.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line.quantity,
            )
        )
        return line

    def update_line_quantity(self, line_id, new_quantity):
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        line = self.line(line_id)
        if line is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})

        previous_quantity = line.quantity
        now = datetime.now(UTC)
        line.quantity = new_quantity
        line.updated_at = now
        self.updated_at = now

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=str(line_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return line

    def remove_line(self, line_id):
        line = self.line(line_id)
        if line is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineRemoved(
                cart_id=str(self.id),
                line_id=str(line_id),
                product_id=str(line.product_id),
            )
        )

    def clear(self, order_id):
        """Drop every line after the order ``order_id`` was placed from this cart."""
        if not self.lines:
            raise ValidationError({"cart": ["Cannot clear an empty cart"]})

        line_count = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                order_id=str(order_id),
                line_count=line_count,
            )
        )
