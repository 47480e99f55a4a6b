import pytest
from protean.exceptions import ValidationError

from storefront.identity.customer import Customer


def test_register_and_lookup(services):
    customer = services.customers.register(email="ada@example.com", first_name="Ada", last_name="Lovelace")

    found = services.customers.get_active(customer.id)

    assert found is not None
    assert found.email == "ada@example.com"


def test_inactive_customer_is_hidden(services, customer):
    from storefront.domain import storefront

    customer.deactivate()
    storefront.repository_for(Customer).add(customer)

    assert services.customers.get_active(customer.id) is None


def test_unknown_customer(services):
    assert services.customers.get_active("no-such-customer") is None


def test_deactivate_twice_rejected():
    customer = Customer.register(email="ada@example.com", first_name="Ada", last_name="Lovelace")
    customer.deactivate()
    with pytest.raises(ValidationError):
        customer.deactivate()
