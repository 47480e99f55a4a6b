"""Order placement — turns a customer's cart into a pending order.

Flow (one unit of work per attempt):
    1. Lock the cart's products through the stock ledger.
    2. Re-read the cart, then every product's current price and stock.
    3. Refuse with EmptyCart / InsufficientStock before anything is written.
    4. Create the order and its lines with price snapshots.
    5. Compare-and-decrement stock for every line.
    6. Clear the cart.

Steps 4-6 commit together or not at all. A version conflict at commit means
another process moved a product or the cart underneath us; the attempt is
rolled back and retried from a fresh read.
"""

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError

from storefront.cart.manager import CartManager
from storefront.identity.customer import CustomerDirectory
from storefront.inventory.ledger import StockCheck, StockLedger
from storefront.ordering.order import Order
from storefront.result import Ok, Result, conflict, empty_cart, insufficient_stock, invalid_input, not_found

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


class StockReservationRefused(Exception):
    """Raised inside the unit of work to roll back a partially reserved order."""

    def __init__(self, check: StockCheck):
        super().__init__(f"Stock reservation refused for {check.product_id}")
        self.check = check


class OrderPlacementEngine:
    def __init__(
        self,
        domain,
        ledger: StockLedger,
        customers: CustomerDirectory,
        carts: CartManager,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.domain = domain
        self.ledger = ledger
        self.customers = customers
        self.carts = carts
        self.max_attempts = max_attempts

    @property
    def orders(self):
        return self.domain.repository_for(Order)

    def place_order(self, customer_id, shipping_address, shipping_method) -> Result[Order]:
        """Convert the customer's cart into an order, or change nothing at all."""
        if not (shipping_address or "").strip():
            return invalid_input("Shipping address is required", field="shipping_address")
        if not (shipping_method or "").strip():
            return invalid_input("Shipping method is required", field="shipping_method")

        if self.customers.get_active(customer_id) is None:
            return not_found("Customer not found", customer_id=str(customer_id))

        product_ids = {str(line.product_id) for line in self.carts.list(customer_id)}
        if not product_ids:
            logger.info("Order placement refused, cart is empty", customer_id=str(customer_id))
            return empty_cart()

        attempt = 0
        while attempt < self.max_attempts:
            attempt += 1
            try:
                outcome = self._attempt(customer_id, product_ids, shipping_address.strip(), shipping_method.strip())
            except ExpectedVersionError:
                logger.warning(
                    "Order placement hit a concurrent update, retrying",
                    customer_id=str(customer_id),
                    attempt=attempt,
                )
                continue
            except StockReservationRefused as exc:
                return _insufficient(exc.check)
            except Exception:
                logger.exception("Order placement failed", customer_id=str(customer_id))
                raise

            if isinstance(outcome, set):
                # The cart gained products since we locked; lock those too and start over.
                product_ids = outcome
                continue
            return outcome

        logger.warning("Order placement gave up", customer_id=str(customer_id), attempts=attempt)
        return conflict(
            "Order placement conflicted with concurrent updates, please retry",
            attempts=attempt,
        )

    def _attempt(self, customer_id, product_ids, shipping_address, shipping_method):
        with self.ledger.hold(product_ids):
            with UnitOfWork():
                cart = self.carts.cart_for(customer_id)
                lines = list(cart.lines) if cart else []
                if not lines:
                    logger.info("Order placement refused, cart is empty", customer_id=str(customer_id))
                    return empty_cart()

                needed = {str(line.product_id) for line in lines}
                if not needed <= product_ids:
                    return product_ids | needed

                priced = []
                for line in lines:
                    product = self.ledger.product(line.product_id)
                    if product is None:
                        return not_found("Product not found", product_id=str(line.product_id))

                    check = self.ledger.check(product, line.quantity)
                    if not check.ok:
                        return _insufficient(check)

                    priced.append(
                        {
                            "product_id": str(product.id),
                            "quantity": line.quantity,
                            "price_at_purchase": product.price,
                        }
                    )

                order = Order.place(
                    customer_id=str(customer_id),
                    lines_data=priced,
                    shipping_address=shipping_address,
                    shipping_method=shipping_method,
                )

                for line in order.lines:
                    if not self.ledger.try_reserve(line.product_id, line.quantity):
                        product = self.ledger.product(line.product_id)
                        raise StockReservationRefused(
                            StockCheck(
                                product_id=str(line.product_id),
                                product_name=product.name if product else str(line.product_id),
                                requested=line.quantity,
                                available=product.stock if product else 0,
                            )
                        )

                cart.clear(order.id)
                self.orders.add(order)
                self.carts.carts.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(customer_id),
            total_amount=order.total_amount,
            line_count=len(order.lines),
        )
        return Ok(order)


def _insufficient(check: StockCheck):
    logger.info(
        "Order placement refused, insufficient stock",
        product_id=check.product_id,
        requested=check.requested,
        available=check.available,
    )
    return insufficient_stock(
        f"Insufficient stock for {check.product_name}. Available: {check.available}, required: {check.requested}",
        product_id=check.product_id,
        product_name=check.product_name,
        requested=check.requested,
        available=check.available,
    )
