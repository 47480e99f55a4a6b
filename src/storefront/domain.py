"""Storefront bounded context — Cart, Checkout, Orders and Shipping.

Every aggregate that order placement touches in one unit of work (products,
carts, orders) lives in this single domain so the cart-to-order conversion
can commit or roll back as a whole.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
