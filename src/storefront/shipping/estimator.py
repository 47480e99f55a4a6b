"""Shipping estimator — candidate shipping quotes for a destination and weight.

Pure and stateless: no repository access, no clock, no randomness. The same
inputs always produce the same quotes, so it is safe to call from any number
of threads.

    cost = round2(base_rate × zone multiplier × weight multiplier)
    days = max(1, ceil(zone days × method speed))

Methods whose weight cap is below the shipment weight are dropped. If none
survive, a single Freight quote is offered instead.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal

from protean.fields import Float, Integer, String

from storefront.domain import storefront
from storefront.money import as_amount, round2
from storefront.result import Ok, Result, invalid_input


@storefront.value_object
class ShippingQuote:
    method = String(required=True, max_length=50)
    cost = Float(required=True, min_value=0.0)
    estimated_days = Integer(required=True, min_value=1)


@dataclass(frozen=True)
class Zone:
    name: str
    multiplier: Decimal
    days: int
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class Method:
    name: str
    base_rate: Decimal
    max_weight: Decimal
    speed: Decimal


# Checked in this order; the first zone with a matching keyword wins.
ZONES = (
    Zone("local", Decimal("1.0"), 1, ("local", "same city")),
    Zone("regional", Decimal("1.5"), 3, ("regional", "same state")),
    Zone("international", Decimal("3.5"), 10, ("international", "canada", "mexico", "europe", "asia")),
)
NATIONAL = Zone("national", Decimal("2.0"), 5)

# (upper bound inclusive, multiplier)
WEIGHT_BANDS = (
    (Decimal("1"), Decimal("1.0")),
    (Decimal("5"), Decimal("1.2")),
    (Decimal("10"), Decimal("1.5")),
    (Decimal("20"), Decimal("2.0")),
)
HEAVY_MULTIPLIER = Decimal("2.5")

METHODS = (
    Method("Standard", Decimal("5.99"), Decimal("50"), Decimal("1.0")),
    Method("Express", Decimal("12.99"), Decimal("30"), Decimal("0.4")),
    Method("Overnight", Decimal("24.99"), Decimal("20"), Decimal("0.2")),
)

FREIGHT_METHOD = "Freight"
FREIGHT_BASE_RATE = Decimal("50.0")
FREIGHT_EXTRA_DAYS = 2


def classify_zone(address: str) -> Zone:
    text = address.lower()
    for zone in ZONES:
        if any(keyword in text for keyword in zone.keywords):
            return zone
    return NATIONAL


def weight_multiplier(weight: Decimal) -> Decimal:
    for upper, multiplier in WEIGHT_BANDS:
        if weight <= upper:
            return multiplier
    return HEAVY_MULTIPLIER


def transit_days(zone: Zone, speed: Decimal) -> int:
    days = (Decimal(zone.days) * speed).to_integral_value(rounding=ROUND_CEILING)
    return max(1, int(days))


class ShippingEstimator:
    def estimate(self, destination_address, total_weight) -> Result[list[ShippingQuote]]:
        if destination_address is None or not str(destination_address).strip():
            return invalid_input("Destination address is required", field="destination_address")
        if total_weight is None or not math.isfinite(total_weight) or total_weight <= 0:
            return invalid_input(
                "Total weight must be a positive number", field="total_weight", total_weight=total_weight
            )

        weight = Decimal(str(total_weight))
        zone = classify_zone(str(destination_address))
        factor = zone.multiplier * weight_multiplier(weight)

        quotes = [
            ShippingQuote(
                method=method.name,
                cost=as_amount(round2(method.base_rate * factor)),
                estimated_days=transit_days(zone, method.speed),
            )
            for method in METHODS
            if weight <= method.max_weight
        ]

        if not quotes:
            quotes = [
                ShippingQuote(
                    method=FREIGHT_METHOD,
                    cost=as_amount(round2(FREIGHT_BASE_RATE * factor)),
                    estimated_days=zone.days + FREIGHT_EXTRA_DAYS,
                )
            ]

        return Ok(sorted(quotes, key=lambda quote: quote.cost))
