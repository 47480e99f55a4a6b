"""Wiring for the storefront services.

Every service takes the domain explicitly; ``build_services`` constructs one
shared set so that all of them go through the same stock ledger and its
product locks.
"""

from dataclasses import dataclass

from storefront.cart.manager import CartManager
from storefront.identity.customer import CustomerDirectory
from storefront.inventory.ledger import StockLedger
from storefront.ordering.management import OrderManager
from storefront.ordering.placement import OrderPlacementEngine
from storefront.shipping.estimator import ShippingEstimator
from storefront.shipping.records import ShipmentManager


@dataclass
class StorefrontServices:
    ledger: StockLedger
    customers: CustomerDirectory
    carts: CartManager
    estimator: ShippingEstimator
    placement: OrderPlacementEngine
    orders: OrderManager
    shipments: ShipmentManager


def build_services(domain) -> StorefrontServices:
    ledger = StockLedger(domain)
    customers = CustomerDirectory(domain)
    carts = CartManager(domain, ledger, customers)
    return StorefrontServices(
        ledger=ledger,
        customers=customers,
        carts=carts,
        estimator=ShippingEstimator(),
        placement=OrderPlacementEngine(domain, ledger, customers, carts),
        orders=OrderManager(domain),
        shipments=ShipmentManager(domain),
    )
