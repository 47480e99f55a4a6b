"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.catalogue.product import Product
from storefront.ordering.order import Order


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Products created by the scenario, by name."""
    return {}


@pytest.fixture()
def outcome():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a registered customer", target_fixture="shopper")
def _(customer):
    return customer


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(make_product, products, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the cart holds {quantity:d} of "{name}"'))
def _(services, shopper, products, quantity, name):
    assert services.carts.add(shopper.id, products[name].id, quantity).is_ok


@given(parsers.cfparse('{quantity:d} of "{name}" are sold elsewhere'))
def _(products, quantity, name):
    from storefront.domain import storefront

    repo = storefront.repository_for(Product)
    product = repo.get(products[name].id)
    product.decrement_stock(quantity)
    repo.add(product)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(services, products, name, stock):
    assert services.ledger.available(products[name].id) == stock


@then("no orders exist")
def _():
    from storefront.domain import storefront

    assert storefront.repository_for(Order)._dao.query.all().items == []
