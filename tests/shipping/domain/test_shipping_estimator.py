"""Tests for the shipping estimator."""

import pytest

from storefront.result import ErrorKind
from storefront.shipping.estimator import ShippingEstimator, classify_zone, weight_multiplier


@pytest.fixture()
def estimator():
    return ShippingEstimator()


class TestZones:
    @pytest.mark.parametrize(
        "address, zone",
        [
            ("123 Local St", "local"),
            ("Same City delivery", "local"),
            ("Regional depot", "regional"),
            ("same state, 2nd floor", "regional"),
            ("Toronto, Canada", "international"),
            ("Berlin, Europe", "international"),
            ("42 Main St, Springfield", "national"),
            # local wins over international when both appear
            ("local pickup, Canada", "local"),
        ],
    )
    def test_classify(self, address, zone):
        assert classify_zone(address).name == zone

    @pytest.mark.parametrize(
        "weight, multiplier",
        [("1", "1.0"), ("1.01", "1.2"), ("5", "1.2"), ("10", "1.5"), ("20", "2.0"), ("20.5", "2.5")],
    )
    def test_weight_bands(self, weight, multiplier):
        from decimal import Decimal

        assert weight_multiplier(Decimal(weight)) == Decimal(multiplier)


class TestEstimate:
    def test_local_light_parcel(self, estimator):
        quotes = estimator.estimate("123 Local St", 2.5).unwrap()

        assert [q.method for q in quotes] == ["Standard", "Express", "Overnight"]
        assert [q.cost for q in quotes] == [7.19, 15.59, 29.99]
        assert all(q.estimated_days >= 1 for q in quotes)

    def test_sorted_by_cost(self, estimator):
        quotes = estimator.estimate("42 Main St", 8).unwrap()
        costs = [q.cost for q in quotes]
        assert costs == sorted(costs)

    def test_national_transit_days(self, estimator):
        quotes = {q.method: q for q in estimator.estimate("42 Main St", 1).unwrap()}
        assert quotes["Standard"].estimated_days == 5
        assert quotes["Express"].estimated_days == 2
        assert quotes["Overnight"].estimated_days == 1

    def test_weight_filters_methods(self, estimator):
        quotes = estimator.estimate("42 Main St", 25).unwrap()
        assert [q.method for q in quotes] == ["Standard", "Express"]

    def test_freight_when_nothing_fits(self, estimator):
        quotes = estimator.estimate("42 Main St", 60.0).unwrap()

        assert len(quotes) == 1
        assert quotes[0].method == "Freight"
        assert quotes[0].cost == 250.0
        assert quotes[0].estimated_days == 7

    def test_freight_local(self, estimator):
        quotes = estimator.estimate("123 Local St", 60.0).unwrap()
        assert quotes[0].method == "Freight"
        assert quotes[0].cost > 100

    def test_deterministic(self, estimator):
        first = estimator.estimate("Paris, Europe", 12.3).unwrap()
        second = estimator.estimate("Paris, Europe", 12.3).unwrap()
        assert [(q.method, q.cost, q.estimated_days) for q in first] == [
            (q.method, q.cost, q.estimated_days) for q in second
        ]

    @pytest.mark.parametrize("address", ["", "   "])
    def test_blank_address(self, estimator, address):
        result = estimator.estimate(address, 5.0)
        assert not result.is_ok
        assert result.kind == ErrorKind.INVALID_INPUT

    @pytest.mark.parametrize("weight", [0, -1.5])
    def test_non_positive_weight(self, estimator, weight):
        result = estimator.estimate("123 Local St", weight)
        assert not result.is_ok
        assert result.kind == ErrorKind.INVALID_INPUT

    @pytest.mark.parametrize("weight", [float("nan"), float("inf")])
    def test_non_finite_weight(self, estimator, weight):
        result = estimator.estimate("123 Local St", weight)
        assert not result.is_ok
        assert result.kind == ErrorKind.INVALID_INPUT
