"""Checkout refusals and contract violations."""
from typing import Iterable, Tuple


class CheckoutRefused(Exception):
    """The order attempt was refused. The customer can correct it and retry."""

    code = "checkout_refused"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def context(self) -> dict:
        return {}


class ProductUnavailable(CheckoutRefused):
    code = "product_unavailable"

    def __init__(self, product_ids: Iterable[str]) -> None:
        self.product_ids: Tuple[str, ...] = tuple(product_ids)
        super().__init__(
            "One or more products are unavailable: " + ", ".join(self.product_ids)
        )

    def context(self) -> dict:
        return {"product_ids": list(self.product_ids)}


class OutOfStock(CheckoutRefused):
    code = "out_of_stock"

    def __init__(self, product_id: str, name: str, available: int) -> None:
        self.product_id = product_id
        self.name = name
        self.available = max(available, 0)
        if self.available == 0:
            message = f"{name} is currently out of stock."
        else:
            unit = "unit" if self.available == 1 else "units"
            message = f"Only {self.available} {unit} of {name} are available."
        super().__init__(message)

    def context(self) -> dict:
        return {"product_id": self.product_id, "available": self.available}


class InvalidPromoCode(CheckoutRefused):
    code = "invalid_promo_code"

    def __init__(self, codes: Iterable[str]) -> None:
        self.codes: Tuple[str, ...] = tuple(codes)
        label = "Promo code" if len(self.codes) == 1 else "Promo codes"
        super().__init__(f"{label} invalid or inactive: " + ", ".join(self.codes))

    def context(self) -> dict:
        return {"codes": list(self.codes)}


class DuplicatePromoCode(CheckoutRefused):
    code = "duplicate_promo_code"

    def __init__(self, code: str) -> None:
        self.promo_code = code
        super().__init__(f"Promo code {code} was submitted more than once.")

    def context(self) -> dict:
        return {"promo_code": self.promo_code}


class ContractViolation(Exception):
    """Input reaching the pricing engine broke its contract. This is a caller bug."""
