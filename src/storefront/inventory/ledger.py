"""Stock ledger — the single gate every stock check goes through.

Two tiers of checking:

    check()        Soft. Reads current stock and compares. Used by the cart to
                   give immediate feedback; two carts can both pass against the
                   same units. That race is accepted and settled at checkout.
    try_reserve()  Hard. Compare-and-decrement inside the caller's unit of
                   work. Order placement calls it while holding the product
                   locks from hold(), so the read and the decrement cannot
                   interleave with another checkout in this process. Across
                   processes the aggregate version check at commit rejects a
                   stale decrement and the caller retries from a fresh read.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockCheck:
    product_id: str
    product_name: str
    requested: int
    available: int

    @property
    def ok(self) -> bool:
        return self.requested <= self.available


class StockLedger:
    def __init__(self, domain):
        self.domain = domain
        self._locks = KeyedLocks()

    @property
    def products(self):
        return self.domain.repository_for(Product)

    def product(self, product_id) -> Product | None:
        """The product with its current price and stock, or None."""
        try:
            return self.products.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def available(self, product_id) -> int:
        product = self.product(product_id)
        return product.stock if product else 0

    def check(self, product: Product, requested: int) -> StockCheck:
        """Soft check of ``requested`` units against the product's current stock."""
        return StockCheck(
            product_id=str(product.id),
            product_name=product.name,
            requested=requested,
            available=product.stock,
        )

    def try_reserve(self, product_id, quantity: int) -> bool:
        """Atomically take ``quantity`` units if that many are available.

        Must run inside a UnitOfWork; the decrement only lands when that unit
        commits. Returns False, leaving stock untouched, when the product is
        gone or short.
        """
        product = self.product(product_id)
        if product is None or product.stock < quantity:
            logger.info(
                "Stock reservation refused",
                product_id=str(product_id),
                requested=quantity,
                available=product.stock if product else None,
            )
            return False

        product.decrement_stock(quantity)
        self.products.add(product)
        return True

    def hold(self, product_ids):
        """Serialize access to the given products' stock within this process.

        Locks are taken in sorted id order so two checkouts sharing products
        cannot deadlock.
        """
        return self._locks.hold(product_ids)
