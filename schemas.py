"""
API Schemas

Request and response models for the storefront API. Prices arrive and leave
as decimal dollars; everything stored or priced is integer cents.
"""
import re
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from models import DiscountLine, OrderTotals, ResolvedLine
from money import format_cents
from promos import normalize_code

SKU_PATTERN = r"^[a-zA-Z0-9\-]+$"
PROMO_CODE_RE = re.compile(r"^[A-Z0-9_\-]{1,20}$")
UNSAFE_CHARS_RE = re.compile(r"[<>'\"]")

ProductStatus = Literal["active", "coming_soon", "inactive"]
DiscountType = Literal["percentage", "fixed"]


def _promo_code(value: str) -> str:
    code = normalize_code(value)
    if not PROMO_CODE_RE.match(code):
        raise ValueError("Invalid promo code format")
    return code


# ----- Products -----

class ProductIn(BaseModel):
    sku: str = Field(..., min_length=1, max_length=50, pattern=SKU_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", description="Product description")
    price: Decimal = Field(..., gt=0, description="Price in USD")
    image: str = Field("", description="Image URL")
    category: str = Field("", description="Category label")
    stock: Optional[int] = Field(0, ge=0, description="Units on hand; null means unlimited")
    status: ProductStatus = Field("active", description="Only active products can be ordered")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    image: Optional[str] = None
    category: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None


class ProductOut(BaseModel):
    sku: str
    name: str
    description: str = ""
    price: str
    price_cents: int
    image: str = ""
    category: str = ""
    stock: Optional[int] = None
    status: ProductStatus = "active"


# ----- Promo codes -----

class PromoIn(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Percent, or cents for fixed"
    )
    description: str = ""
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _code(cls, v: str) -> str:
        return _promo_code(v)


class PromoUpdate(BaseModel):
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PromoOut(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: float
    description: str = ""
    is_active: bool = True


# ----- Checkout / Orders -----

class CartItem(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=50, pattern=SKU_PATTERN)
    quantity: int = Field(..., ge=1, le=100)


class Customer(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: str = Field(..., min_length=5, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip: str = Field(..., min_length=3, max_length=20, pattern=r"^[\d\-\s]+$")

    @field_validator("name", "address", "city", "state", "zip", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("name", "address", "city")
    @classmethod
    def _safe_text(cls, v: str) -> str:
        if UNSAFE_CHARS_RE.search(v):
            raise ValueError("Invalid characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if ".." in v:
            raise ValueError("Invalid email format")
        return v.lower()


class PreviewRequest(BaseModel):
    items: List[CartItem] = Field(..., min_length=1, max_length=50)
    promo_codes: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("promo_codes")
    @classmethod
    def _codes(cls, v: List[str]) -> List[str]:
        return [_promo_code(code) for code in v]


class OrderRequest(PreviewRequest):
    customer: Customer


class DiscountOut(BaseModel):
    code: str
    discount_type: DiscountType
    value: float
    amount_cents: int
    amount: str


class TotalsOut(BaseModel):
    subtotal_cents: int
    discount_cents: int
    shipping_cents: int
    total_cents: int
    subtotal: str
    discount: str
    shipping: str
    total: str


class OrderLineOut(BaseModel):
    id: str
    name: str
    quantity: int
    price: str
    line_total: str


class PreviewResponse(BaseModel):
    items: List[OrderLineOut]
    discounts: List[DiscountOut]
    totals: TotalsOut


class OrderResponse(PreviewResponse):
    order_number: str
    status: str
    venmo_url: str
    promo_codes: List[str]
    customer: Customer


class StatusUpdate(BaseModel):
    status: Literal["pending_payment", "paid", "fulfilled", "cancelled"]


# ----- Conversions -----

def totals_out(totals: OrderTotals) -> TotalsOut:
    return TotalsOut(
        subtotal_cents=totals.subtotal_cents,
        discount_cents=totals.discount_cents,
        shipping_cents=totals.shipping_cents,
        total_cents=totals.total_cents,
        subtotal=format_cents(totals.subtotal_cents),
        discount=format_cents(totals.discount_cents),
        shipping=format_cents(totals.shipping_cents),
        total=format_cents(totals.total_cents),
    )


def discount_out(line: DiscountLine) -> DiscountOut:
    return DiscountOut(
        code=line.code,
        discount_type=line.kind.value,
        value=line.value,
        amount_cents=line.amount_cents,
        amount=format_cents(line.amount_cents),
    )


def line_out(line: ResolvedLine) -> OrderLineOut:
    return OrderLineOut(
        id=line.item.product_id,
        name=line.item.name,
        quantity=line.quantity,
        price=format_cents(line.item.unit_price_cents),
        line_total=format_cents(line.line_total_cents),
    )


def product_out(doc: dict) -> ProductOut:
    return ProductOut(
        sku=doc["sku"],
        name=doc.get("name", ""),
        description=doc.get("description") or "",
        price=format_cents(doc["price_cents"]),
        price_cents=doc["price_cents"],
        image=doc.get("image") or "",
        category=doc.get("category") or "",
        stock=doc.get("stock"),
        status=doc.get("status", "active"),
    )


def promo_out(doc: dict) -> PromoOut:
    return PromoOut(
        code=doc["code"],
        discount_type=doc["discount_type"],
        discount_value=doc["discount_value"],
        description=doc.get("description") or "",
        is_active=doc.get("is_active", True),
    )


def order_out(doc: dict) -> dict:
    totals = doc["totals"]
    return {
        "order_number": doc["order_number"],
        "status": doc["status"],
        "promo_codes": doc.get("promo_codes", []),
        "venmo_note": doc.get("venmo_note"),
        "totals": {
            **totals,
            "subtotal": format_cents(totals["subtotal_cents"]),
            "discount": format_cents(totals["discount_cents"]),
            "shipping": format_cents(totals["shipping_cents"]),
            "total": format_cents(totals["total_cents"]),
        },
        "items": [
            {
                "sku": item["sku"],
                "name": item["name"],
                "quantity": item["quantity"],
                "price": format_cents(item["price_cents"]),
                "line_total": format_cents(item["line_total_cents"]),
            }
            for item in doc.get("items", [])
        ],
        "customer": doc.get("customer"),
        "created_at": doc.get("created_at"),
    }
