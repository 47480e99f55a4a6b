"""Cart manager — add, update, remove and list a customer's cart lines.

Stock checks here are soft: the ledger's current figure is read and compared
before the write, without any reservation. Two customers may both fit the
last units into their carts; order placement settles who gets them.

Each customer has exactly one cart, stored under the customer's id. Writes to
a cart are serialized per customer within this process; across processes the
aggregate version check at commit rejects a stale write, and the change is
replayed from a fresh read.
"""

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError

from storefront.cart.cart import CartLine, ShoppingCart
from storefront.identity.customer import CustomerDirectory
from storefront.inventory.ledger import StockLedger
from storefront.result import Err, Ok, Result, conflict, insufficient_stock, invalid_input, not_found
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


class CartManager:
    def __init__(
        self,
        domain,
        ledger: StockLedger,
        customers: CustomerDirectory,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.domain = domain
        self.ledger = ledger
        self.customers = customers
        self.max_attempts = max_attempts
        self._locks = KeyedLocks()

    @property
    def carts(self):
        return self.domain.repository_for(ShoppingCart)

    def cart_for(self, customer_id) -> ShoppingCart | None:
        try:
            return self.carts.get(str(customer_id))
        except ObjectNotFoundError:
            return None

    def _write(self, customer_id, operation, change, create=False):
        """Apply ``change(cart)`` in its own unit of work, replaying it on version conflicts.

        ``change`` receives the customer's cart (a new, unsaved one when
        ``create`` is set and none exists yet, otherwise possibly None) and
        returns the operation's outcome.
        """
        attempt = 0
        while attempt < self.max_attempts:
            attempt += 1
            created = False
            try:
                with self._locks.hold([customer_id]):
                    with UnitOfWork():
                        cart = self.cart_for(customer_id)
                        if cart is None and create:
                            cart = ShoppingCart.create(customer_id=str(customer_id))
                            created = True
                        return change(cart)
            except ExpectedVersionError:
                pass
            except TransactionError as exc:
                # Only a lost race to insert this customer's cart is replayed.
                if not (created and _duplicate_insert(exc)):
                    raise

            logger.warning(
                "Cart write hit a concurrent update, retrying",
                customer_id=str(customer_id),
                operation=operation,
                attempt=attempt,
            )

        logger.warning("Cart write gave up", customer_id=str(customer_id), operation=operation, attempts=attempt)
        return conflict("Cart was changed concurrently, please retry", attempts=attempt)

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def add(self, customer_id, product_id, quantity: int) -> Result[CartLine]:
        """Add ``quantity`` of a product to the customer's cart, merging with an existing line."""
        if quantity is None or quantity < 1:
            return invalid_input("Quantity must be at least 1", quantity=quantity)

        if self.customers.get_active(customer_id) is None:
            return not_found("Customer not found", customer_id=str(customer_id))

        product = self.ledger.product(product_id)
        if product is None:
            return not_found("Product not found", product_id=str(product_id))

        check = self.ledger.check(product, quantity)
        if not check.ok:
            logger.info("Cart add refused", customer_id=str(customer_id), **_stock_fields(check))
            return insufficient_stock(
                f"Insufficient stock for {product.name}. Available: {check.available}, requested: {quantity}",
                **_stock_fields(check),
            )

        def add_line(cart):
            existing = cart.line_for_product(product_id)
            if existing is not None:
                merged = self.ledger.check(product, existing.quantity + quantity)
                if not merged.ok:
                    logger.info("Cart merge refused", customer_id=str(customer_id), **_stock_fields(merged))
                    return insufficient_stock(
                        f"Insufficient stock for {product.name}. Available: {merged.available}, "
                        f"total requested: {merged.requested} (already in cart: {existing.quantity})",
                        in_cart=existing.quantity,
                        **_stock_fields(merged),
                    )

            line = cart.add_line(product_id=str(product_id), quantity=quantity)
            self.carts.add(cart)
            return Ok(line)

        return self._write(customer_id, "add", add_line, create=True)

    def update(self, customer_id, line_id, quantity: int) -> Result[CartLine]:
        """Replace a line's quantity. Lines of other customers look exactly like missing ones."""
        if quantity is None or quantity < 1:
            return invalid_input("Quantity must be at least 1", quantity=quantity)

        def update_line(cart):
            line = cart.line(line_id) if cart else None
            if line is None:
                return not_found("Cart line not found", line_id=str(line_id))

            product = self.ledger.product(line.product_id)
            if product is None:
                return not_found("Product not found", product_id=str(line.product_id))

            check = self.ledger.check(product, quantity)
            if not check.ok:
                logger.info("Cart update refused", customer_id=str(customer_id), **_stock_fields(check))
                return insufficient_stock(
                    f"Insufficient stock for {product.name}. Available: {check.available}, requested: {quantity}",
                    **_stock_fields(check),
                )

            line = cart.update_line_quantity(line_id, quantity)
            self.carts.add(cart)
            return Ok(line)

        return self._write(customer_id, "update", update_line)

    def remove(self, customer_id, line_id) -> bool:
        """Remove a line if the customer owns it. Returns whether anything was removed."""

        def remove_line(cart):
            if cart is None or cart.line(line_id) is None:
                return False

            try:
                cart.remove_line(line_id)
            except ValidationError:
                return False
            self.carts.add(cart)
            return True

        outcome = self._write(customer_id, "remove", remove_line)
        return not isinstance(outcome, Err) and outcome

    def list(self, customer_id) -> list[CartLine]:
        """All of the customer's lines, as stored. Stock is re-validated only at checkout."""
        cart = self.cart_for(customer_id)
        if cart is None:
            return []
        return list(cart.lines)


def _stock_fields(check):
    return {
        "product_id": check.product_id,
        "requested": check.requested,
        "available": check.available,
    }


def _duplicate_insert(exc: TransactionError) -> bool:
    return (exc.extra_info or {}).get("original_exception") == "IntegrityError"
