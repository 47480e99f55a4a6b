"""BDD tests for order placement."""

from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_placement.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer places an order to "{address}" by "{method}"'))
def _(services, shopper, outcome, address, method):
    outcome["result"] = services.placement.place_order(shopper.id, address, method)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is placed with total {total:f}"))
def _(outcome, total):
    result = outcome["result"]
    assert result.is_ok
    assert result.value.total_amount == total
    assert result.value.status == "pending"


@then(parsers.cfparse('the placement fails with "{kind}"'))
def _(outcome, kind):
    result = outcome["result"]
    assert not result.is_ok
    assert result.kind.value == kind


@then("the cart is empty")
def _(services, shopper):
    assert services.carts.list(shopper.id) == []


@then(parsers.cfparse('the cart still holds {quantity:d} of "{name}"'))
def _(services, shopper, products, quantity, name):
    lines = services.carts.list(shopper.id)
    assert [(str(line.product_id), line.quantity) for line in lines] == [(str(products[name].id), quantity)]
