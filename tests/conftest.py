"""Shared pytest fixtures: in-memory stores and an API client wired to them."""

import copy
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from models import CatalogItem, PromoCode
from stores import (
    get_order_store,
    get_product_store,
    get_promo_store,
    product_to_item,
    promo_from_doc,
)

ADMIN_TOKEN = "test-admin-token"


class MemoryProductStore:
    def __init__(self, docs: Optional[List[dict]] = None) -> None:
        self.docs: Dict[str, dict] = {d["sku"]: dict(d) for d in docs or []}
        self.resolve_calls: List[List[str]] = []

    def resolve_items(self, product_ids: List[str]) -> Dict[str, CatalogItem]:
        self.resolve_calls.append(list(product_ids))
        return {
            pid: product_to_item(self.docs[pid]) for pid in product_ids if pid in self.docs
        }

    def list(self, listed_only: bool = False) -> List[dict]:
        docs = sorted(self.docs.values(), key=lambda d: d["name"])
        if listed_only:
            docs = [d for d in docs if d.get("status", "active") in ("active", "coming_soon")]
        return copy.deepcopy(docs)

    def get(self, sku: str) -> Optional[dict]:
        return copy.deepcopy(self.docs.get(sku))

    def create(self, data: dict) -> dict:
        self.docs[data["sku"]] = dict(data)
        return self.get(data["sku"])

    def update(self, sku: str, fields: dict) -> Optional[dict]:
        if sku not in self.docs:
            return None
        self.docs[sku].update(fields)
        return self.get(sku)

    def delete(self, sku: str) -> bool:
        return self.docs.pop(sku, None) is not None


class MemoryPromoStore:
    def __init__(self, docs: Optional[List[dict]] = None) -> None:
        self.docs: Dict[str, dict] = {d["code"]: dict(d) for d in docs or []}
        self.resolve_calls: List[List[str]] = []

    def resolve_codes(self, codes: List[str]) -> Dict[str, PromoCode]:
        self.resolve_calls.append(list(codes))
        return {c: promo_from_doc(self.docs[c]) for c in codes if c in self.docs}

    def list(self) -> List[dict]:
        return [copy.deepcopy(self.docs[c]) for c in sorted(self.docs)]

    def get(self, code: str) -> Optional[dict]:
        return copy.deepcopy(self.docs.get(code))

    def create(self, data: dict) -> dict:
        self.docs[data["code"]] = dict(data)
        return self.get(data["code"])

    def update(self, code: str, fields: dict) -> Optional[dict]:
        if code not in self.docs:
            return None
        self.docs[code].update(fields)
        return self.get(code)

    def delete(self, code: str) -> bool:
        return self.docs.pop(code, None) is not None


class MemoryOrderStore:
    def __init__(self) -> None:
        self.docs: Dict[str, dict] = {}

    def create(self, data: dict) -> dict:
        self.docs[data["order_number"]] = copy.deepcopy(data)
        return self.get(data["order_number"])

    def list(self) -> List[dict]:
        return [copy.deepcopy(d) for d in reversed(list(self.docs.values()))]

    def get(self, order_number: str) -> Optional[dict]:
        return copy.deepcopy(self.docs.get(order_number))

    def set_status(self, order_number: str, status: str) -> Optional[dict]:
        if order_number not in self.docs:
            return None
        self.docs[order_number]["status"] = status
        return self.get(order_number)


def product_doc(sku: str, name: str, price_cents: int, stock=None, status: str = "active") -> dict:
    return {
        "sku": sku,
        "name": name,
        "description": "",
        "price_cents": price_cents,
        "image": "",
        "category": "",
        "stock": stock,
        "status": status,
    }


def promo_doc(code: str, discount_type: str, discount_value, is_active: bool = True) -> dict:
    return {
        "code": code,
        "discount_type": discount_type,
        "discount_value": discount_value,
        "description": "",
        "is_active": is_active,
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="",
        database_name="",
        port=8000,
        shipping_flat_rate_cents=1000,
        venmo_username="shop-owner",
        order_number_prefix="TEST",
        admin_access_token=ADMIN_TOKEN,
        cors_origins=["*"],
        log_level="INFO",
    )


@pytest.fixture
def product_store() -> MemoryProductStore:
    return MemoryProductStore([
        product_doc("WIDGET", "Widget", 5000, stock=3),
        product_doc("GADGET", "Gadget", 2500),
        product_doc("SOLDOUT", "Sold Out Thing", 1200, stock=0),
        product_doc("RETIRED", "Retired Thing", 900, status="inactive"),
        product_doc("SOON", "Upcoming Thing", 4000, status="coming_soon"),
    ])


@pytest.fixture
def promo_store() -> MemoryPromoStore:
    return MemoryPromoStore([
        promo_doc("SAVE20", "percentage", 20),
        promo_doc("FIFTEEN", "fixed", 1500),
        promo_doc("OLD", "percentage", 50, is_active=False),
    ])


@pytest.fixture
def order_store() -> MemoryOrderStore:
    return MemoryOrderStore()


@pytest.fixture
def client(settings, product_store, promo_store, order_store):
    from main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_product_store] = lambda: product_store
    app.dependency_overrides[get_promo_store] = lambda: promo_store
    app.dependency_overrides[get_order_store] = lambda: order_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Token": ADMIN_TOKEN}
