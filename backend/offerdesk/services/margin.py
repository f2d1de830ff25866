from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from offerdesk.services.offer_errors import InvalidPrice


PERCENT_QUANT = Decimal("0.01")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MarginVerdict:
    discount_percentage: Decimal
    within_margin: bool
    max_discount_percent: Decimal


def _as_decimal(value: Decimal | int | str) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def check_product_price(product_price: Decimal) -> Decimal:
    price = _as_decimal(product_price)
    if price <= 0:
        raise InvalidPrice("Product price must be greater than 0")
    return price


def check_offered_price(product_price: Decimal, offered_price: Decimal) -> Decimal:
    price = check_product_price(product_price)
    offered = _as_decimal(offered_price)
    if offered <= 0:
        raise InvalidPrice("Offered price must be greater than 0")
    if offered != offered.quantize(CENT):
        raise InvalidPrice("Offered price cannot have more than two decimal places")
    if offered > price:
        raise InvalidPrice("Offered price cannot exceed the product price")
    return offered


def discount_percentage(product_price: Decimal, offered_price: Decimal) -> Decimal:
    price = check_product_price(product_price)
    offered = _as_decimal(offered_price)
    return HUNDRED * (price - offered) / price


def quantize_percentage(value: Decimal) -> Decimal:
    return Decimal(value).quantize(PERCENT_QUANT, rounding=ROUND_HALF_UP)


def evaluate(
    product_price: Decimal,
    offered_price: Decimal,
    max_discount_percent: Decimal,
) -> MarginVerdict:
    """Compute the requested discount and compare it with the allowed margin.

    The boundary is inclusive: a discount equal to ``max_discount_percent`` is
    within margin. The comparison uses the exact percentage, rounding is only
    for display.
    """
    offered = check_offered_price(product_price, offered_price)
    margin = _as_decimal(max_discount_percent)
    pct = discount_percentage(product_price, offered)
    return MarginVerdict(discount_percentage=pct, within_margin=pct <= margin, max_discount_percent=margin)
