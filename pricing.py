"""
Order pricing engine

Pure computation over an already-resolved cart. The same function serves
the checkout preview and the authoritative order creation, so the two can
never disagree.

Discount rules:
- every promo is computed against the base subtotal, never against a
  running discounted balance (20% and 10% on $100 is $30, not $28)
- each discount is capped at the subtotal on its own
- the summed discount is then clamped to [0, subtotal]
- shipping is the flat rate, or zero for an empty cart
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Sequence

from errors import ContractViolation
from models import DiscountLine, OrderTotals, PromoCode, PromoKind, ResolvedLine
from money import round_half_up

logger = logging.getLogger(__name__)


def _violation(message: str) -> ContractViolation:
    logger.error("pricing contract violation: %s", message)
    return ContractViolation(message)


def _as_decimal(value) -> Decimal:
    return Decimal(str(value))


def compute_subtotal(lines: Iterable[ResolvedLine]) -> int:
    subtotal = 0
    for line in lines:
        if line.item.unit_price_cents < 0:
            raise _violation(f"negative unit price for {line.item.product_id}")
        if line.quantity < 0:
            raise _violation(f"negative quantity for {line.item.product_id}")
        subtotal += line.line_total_cents
    return subtotal


def compute_shipping(subtotal_cents: int, flat_rate_cents: int) -> int:
    if flat_rate_cents < 0:
        raise _violation("negative shipping rate")
    return flat_rate_cents if subtotal_cents > 0 else 0


def compute_discount(subtotal_cents: int, promo: PromoCode) -> int:
    """
    Discount for one promo, computed against the base subtotal.

    Each amount is capped at the subtotal while still a Decimal, so rounding
    never sees a value wider than the subtotal.
    """
    value = _as_decimal(promo.value)
    if not value.is_finite():
        raise _violation(f"non-finite value for promo {promo.code}")
    if value < 0:
        raise _violation(f"negative value for promo {promo.code}")

    subtotal = Decimal(subtotal_cents)
    if promo.kind == PromoKind.PERCENTAGE:
        return round_half_up(min(subtotal * value / 100, subtotal))
    if promo.kind == PromoKind.FIXED:
        return round_half_up(min(value, subtotal))
    raise _violation(f"unknown promo kind {promo.kind!r} for {promo.code}")


def compute_totals(
    lines: Sequence[ResolvedLine],
    shipping_flat_rate_cents: int,
    promos: Sequence[PromoCode],
) -> OrderTotals:
    subtotal = compute_subtotal(lines)
    shipping = compute_shipping(subtotal, shipping_flat_rate_cents)

    discounts: List[DiscountLine] = [
        DiscountLine(
            code=promo.code,
            amount_cents=compute_discount(subtotal, promo),
            kind=promo.kind,
            value=promo.value,
        )
        for promo in promos
    ]

    total_discount = sum(d.amount_cents for d in discounts)
    total_discount = max(0, min(total_discount, subtotal))

    return OrderTotals(
        subtotal_cents=subtotal,
        discount_cents=total_discount,
        shipping_cents=shipping,
        discounts=tuple(discounts),
    )
