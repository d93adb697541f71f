"""
Checkout flow

One pricing attempt runs in a fixed order: duplicate promo codes, then the
catalog snapshot, then the promo snapshot, then the engine. Any refusal
stops the attempt before pricing.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote, urlencode

from catalog import Catalog, aggregate_lines, resolve_cart
from models import CartSnapshot, OrderTotals, PromoCode, ResolvedLine
from money import format_cents
from pricing import compute_totals
from promos import PromoStore, ensure_unique, resolve_promos


@dataclass(frozen=True)
class PricedCart:
    lines: List[ResolvedLine]
    promos: List[PromoCode]
    totals: OrderTotals


def price_cart(
    snapshot: CartSnapshot,
    catalog: Catalog,
    promo_store: PromoStore,
    shipping_flat_rate_cents: int,
) -> PricedCart:
    codes = ensure_unique(snapshot.promo_codes)
    lines = resolve_cart(aggregate_lines(snapshot.lines), catalog)
    promos = resolve_promos(codes, promo_store)
    totals = compute_totals(lines, shipping_flat_rate_cents, promos)
    return PricedCart(lines=lines, promos=promos, totals=totals)


def generate_order_number(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now.strftime('%Y%m%d')}-{secrets.token_hex(4).upper()}"


def build_venmo_url(username: str, total_cents: int, note: str) -> str:
    query = urlencode({"txn": "pay", "amount": format_cents(total_cents), "note": note})
    return f"https://venmo.com/{quote(username, safe='')}?{query}"
