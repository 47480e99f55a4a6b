"""Storefront database management CLI.

Usage:
    storefront-manage setup-db   # Create all tables
    storefront-manage drop-db    # Drop all tables
    storefront-manage seed       # Load demo customers and products
"""

import argparse
import sys

DEMO_CUSTOMERS = [
    ("ada@example.com", "Ada", "Lovelace"),
    ("grace@example.com", "Grace", "Hopper"),
]

DEMO_PRODUCTS = [
    # name, code, price, stock
    ("Laptop Pro 14", "LAP-014", 999.99, 10),
    ("Wireless Mouse", "MOU-001", 29.99, 50),
    ("USB-C Hub", "HUB-007", 49.5, 25),
    ("Mechanical Keyboard", "KEY-101", 129.0, 5),
]


def _init_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _init_domain()
    print(f"Creating {domain.name} database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _init_domain()
    print(f"Dropping {domain.name} database schema...")
    drop_db(domain)
    print("Done.")


def seed_database():
    from storefront.catalogue.product import Product
    from storefront.identity.customer import CustomerDirectory

    domain = _init_domain()
    with domain.domain_context():
        customers = CustomerDirectory(domain)
        for email, first_name, last_name in DEMO_CUSTOMERS:
            customer = customers.register(email=email, first_name=first_name, last_name=last_name)
            print(f"  customer {customer.email}: {customer.id}")

        products = domain.repository_for(Product)
        for name, code, price, stock in DEMO_PRODUCTS:
            product = Product.create(name=name, code=code, price=price, stock=stock)
            products.add(product)
            print(f"  product {code} ({stock} in stock): {product.id}")

    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Insert demo customers and products")

    args = parser.parse_args(argv)

    commands = {
        "setup-db": setup_database,
        "drop-db": drop_database,
        "seed": seed_database,
    }
    commands[args.command]()
    return 0


if __name__ == "__main__":
    sys.exit(main())
