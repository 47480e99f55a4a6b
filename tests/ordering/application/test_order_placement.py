"""Application tests for order placement: atomic cart-to-order conversion."""

import pytest

from storefront.cart.cart import ShoppingCart
from storefront.ordering.order import Order, OrderStatus
from storefront.result import ErrorKind


def _orders():
    from storefront.domain import storefront

    return storefront.repository_for(Order)._dao.query.all().items


def _place(services, customer, address="123 Local St", method="Standard"):
    return services.placement.place_order(customer.id, address, method)


class TestSuccessfulPlacement:
    def test_two_products(self, services, customer, make_product):
        laptop = make_product(name="Laptop", price=999.99, stock=10)
        mouse = make_product(name="Mouse", price=29.99, stock=5)
        services.carts.add(customer.id, laptop.id, 2)
        services.carts.add(customer.id, mouse.id, 1)

        result = _place(services, customer)

        assert result.is_ok
        order = result.value
        assert order.id is not None
        assert order.created_at is not None
        assert order.status == OrderStatus.PENDING.value
        assert order.total_amount == 2029.97
        assert order.shipping_address == "123 Local St"
        assert order.shipping_method == "Standard"

        snapshots = {str(line.product_id): (line.quantity, line.price_at_purchase) for line in order.lines}
        assert snapshots == {str(laptop.id): (2, 999.99), str(mouse.id): (1, 29.99)}

        assert services.ledger.available(laptop.id) == 8
        assert services.ledger.available(mouse.id) == 4
        assert services.carts.list(customer.id) == []

    def test_order_is_persisted(self, services, customer, make_product):
        product = make_product(price=5.0, stock=3)
        services.carts.add(customer.id, product.id, 3)

        order = _place(services, customer).value

        stored = services.orders.get_order(order.id).value
        assert stored.total_amount == 15.0
        assert len(stored.lines) == 1
        assert services.ledger.available(product.id) == 0

    def test_price_snapshot_survives_price_change(self, services, customer, make_product):
        from storefront.catalogue.product import Product
        from storefront.domain import storefront

        product = make_product(price=10.0, stock=3)
        services.carts.add(customer.id, product.id, 1)
        order = _place(services, customer).value

        repo = storefront.repository_for(Product)
        product = repo.get(product.id)
        product.price = 99.0
        repo.add(product)

        stored = services.orders.get_order(order.id).value
        assert stored.lines[0].price_at_purchase == 10.0

    def test_cart_can_be_refilled_after_placement(self, services, customer, make_product):
        product = make_product(stock=10)
        services.carts.add(customer.id, product.id, 1)
        _place(services, customer)

        assert services.carts.add(customer.id, product.id, 2).is_ok
        assert [line.quantity for line in services.carts.list(customer.id)] == [2]


class TestFailedPlacement:
    def test_empty_cart(self, services, customer):
        result = _place(services, customer)

        assert result.kind == ErrorKind.EMPTY_CART
        assert _orders() == []

    def test_empty_cart_after_removals(self, services, customer, make_product):
        line = services.carts.add(customer.id, make_product().id, 1).value
        services.carts.remove(customer.id, line.id)

        assert _place(services, customer).kind == ErrorKind.EMPTY_CART

    def test_insufficient_stock_changes_nothing(self, services, customer, make_product):
        from storefront.catalogue.product import Product
        from storefront.domain import storefront

        plenty = make_product(name="Plenty", stock=10)
        scarce = make_product(name="Scarce", stock=5)
        services.carts.add(customer.id, plenty.id, 2)
        services.carts.add(customer.id, scarce.id, 5)

        # Someone else bought most of the scarce stock after it went into the cart
        repo = storefront.repository_for(Product)
        product = repo.get(scarce.id)
        product.decrement_stock(3)
        repo.add(product)

        result = _place(services, customer)

        assert result.kind == ErrorKind.INSUFFICIENT_STOCK
        assert "Scarce" in result.message
        assert result.details["requested"] == 5
        assert result.details["available"] == 2

        assert services.ledger.available(plenty.id) == 10
        assert services.ledger.available(scarce.id) == 2
        assert sorted(line.quantity for line in services.carts.list(customer.id)) == [2, 5]
        assert _orders() == []

    def test_unknown_customer(self, services):
        result = services.placement.place_order("no-such-customer", "123 Local St", "Standard")
        assert result.kind == ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("address, method", [("", "Standard"), ("   ", "Standard"), ("123 Local St", "")])
    def test_blank_shipping_details(self, services, customer, make_product, address, method):
        services.carts.add(customer.id, make_product().id, 1)

        result = _place(services, customer, address=address, method=method)

        assert result.kind == ErrorKind.INVALID_INPUT
        assert len(services.carts.list(customer.id)) == 1

    def test_failed_reservation_rolls_back_everything(self, services, customer, make_product, monkeypatch):
        first = make_product(name="First", stock=5)
        second = make_product(name="Second", stock=5)
        services.carts.add(customer.id, first.id, 1)
        services.carts.add(customer.id, second.id, 1)

        real_try_reserve = services.ledger.try_reserve

        def refuse_second(product_id, quantity):
            if str(product_id) == str(second.id):
                return False
            return real_try_reserve(product_id, quantity)

        monkeypatch.setattr(services.ledger, "try_reserve", refuse_second)

        result = _place(services, customer)

        assert result.kind == ErrorKind.INSUFFICIENT_STOCK
        assert services.ledger.available(first.id) == 5
        assert services.ledger.available(second.id) == 5
        assert len(services.carts.list(customer.id)) == 2
        assert _orders() == []


class TestVersionConflicts:
    def test_retries_after_version_conflict(self, services, customer, make_product, monkeypatch):
        from protean.exceptions import ExpectedVersionError

        product = make_product(stock=5)
        services.carts.add(customer.id, product.id, 1)

        engine = services.placement
        real_attempt = engine._attempt
        calls = []

        def conflict_once(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                raise ExpectedVersionError("stale product version")
            return real_attempt(*args, **kwargs)

        monkeypatch.setattr(engine, "_attempt", conflict_once)

        result = engine.place_order(customer.id, "123 Local St", "Standard")

        assert result.is_ok
        assert len(calls) == 2
        assert services.ledger.available(product.id) == 4

    def test_gives_up_after_max_attempts(self, services, customer, make_product, monkeypatch):
        from protean.exceptions import ExpectedVersionError

        services.carts.add(customer.id, make_product().id, 1)

        def always_conflict(*args, **kwargs):
            raise ExpectedVersionError("stale product version")

        monkeypatch.setattr(services.placement, "_attempt", always_conflict)

        result = services.placement.place_order(customer.id, "123 Local St", "Standard")

        assert result.kind == ErrorKind.CONFLICT
        assert result.details["attempts"] == 3
        assert len(services.carts.list(customer.id)) == 1

    def test_storage_failures_propagate(self, services, customer, make_product, monkeypatch):
        services.carts.add(customer.id, make_product().id, 1)

        def broken(*args, **kwargs):
            raise ConnectionError("database unavailable")

        monkeypatch.setattr(services.placement, "_attempt", broken)

        with pytest.raises(ConnectionError):
            services.placement.place_order(customer.id, "123 Local St", "Standard")


def test_cart_aggregate_survives_placement(services, customer, make_product):
    from storefront.domain import storefront

    services.carts.add(customer.id, make_product().id, 1)
    _place(services, customer)

    carts = storefront.repository_for(ShoppingCart)._dao.query.filter(customer_id=str(customer.id)).all().items
    assert len(carts) == 1
    assert len(carts[0].lines) == 0
