"""
Pricing domain values

Immutable snapshots handed to the pricing engine. These are built from
store documents once per checkout attempt and never mutated afterwards.
Amounts are integer cents.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Tuple, Union

UNLIMITED = "unlimited"

Stock = Union[int, Literal["unlimited"]]


class PromoKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class CatalogItem:
    product_id: str
    name: str
    unit_price_cents: int
    stock: Stock = UNLIMITED
    is_purchasable: bool = True

    @property
    def has_unlimited_stock(self) -> bool:
        return self.stock == UNLIMITED


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ResolvedLine:
    item: CatalogItem
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return self.item.unit_price_cents * self.quantity


@dataclass(frozen=True)
class PromoCode:
    code: str
    kind: PromoKind
    value: Union[int, float]
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class CartSnapshot:
    """Everything the customer submitted for one pricing attempt."""

    lines: Tuple[CartLine, ...]
    promo_codes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DiscountLine:
    code: str
    amount_cents: int
    kind: PromoKind
    value: Union[int, float]


@dataclass(frozen=True)
class OrderTotals:
    """
    Totals for one priced cart.

    ``total_cents`` is derived here and never passed in, so
    ``total == subtotal - discount + shipping`` holds for every instance.
    """

    subtotal_cents: int
    discount_cents: int
    shipping_cents: int
    discounts: Tuple[DiscountLine, ...] = ()
    total_cents: int = field(init=False)

    def __post_init__(self) -> None:
        if self.subtotal_cents < 0:
            raise ValueError("subtotal_cents must be non-negative")
        if self.shipping_cents < 0:
            raise ValueError("shipping_cents must be non-negative")
        if not 0 <= self.discount_cents <= self.subtotal_cents:
            raise ValueError("discount_cents must be within [0, subtotal_cents]")
        summed = sum(line.amount_cents for line in self.discounts)
        if self.discount_cents != min(summed, self.subtotal_cents):
            raise ValueError("discount_cents must equal the clamped sum of discount lines")
        object.__setattr__(
            self,
            "total_cents",
            self.subtotal_cents - self.discount_cents + self.shipping_cents,
        )
