import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported and initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(storefront_bed):
    """Cleanup infrastructure after every test."""
    yield

    from storefront.domain import storefront
    from storefront.utils.db import reset_data

    reset_data(storefront)


# ---------------------------------------------------------------------------
# Shared data builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def services(storefront_bed):
    from storefront.domain import storefront
    from storefront.services import build_services

    return build_services(storefront)


@pytest.fixture()
def customer(services):
    return services.customers.register(email="ada@example.com", first_name="Ada", last_name="Lovelace")


@pytest.fixture()
def make_product(storefront_bed):
    from storefront.catalogue.product import Product
    from storefront.domain import storefront

    def _make(name="Widget", code=None, price=10.0, stock=10):
        product = Product.create(name=name, code=code or name.upper()[:10], price=price, stock=stock)
        storefront.repository_for(Product).add(product)
        return product

    return _make
