"""
Mongo-backed stores

Products, promo codes and orders. The product and promo stores also act as
the catalog and promo collaborators of the checkout flow: documents are
turned into strict pricing values here and nowhere else.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pymongo import ReturnDocument

import database
from errors import ContractViolation
from models import UNLIMITED, CatalogItem, PromoCode, PromoKind

logger = logging.getLogger(__name__)

PRODUCTS = "product"
PROMOS = "promocode"
ORDERS = "order"

LISTED_STATUSES = ("active", "coming_soon")


# ----- Document conversion -----

def strip_id(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return doc
    d = dict(doc)
    d.pop("_id", None)
    return d


def product_to_item(doc: Dict[str, Any]) -> CatalogItem:
    try:
        sku = doc["sku"]
        price_cents = doc["price_cents"]
    except KeyError as exc:
        raise ContractViolation(f"product document missing field {exc}")
    if not isinstance(price_cents, int) or isinstance(price_cents, bool):
        raise ContractViolation(f"product {sku} has non-integer price_cents")

    stock = doc.get("stock")
    if stock is not None:
        try:
            stock = int(stock)
        except (TypeError, ValueError):
            raise ContractViolation(f"product {sku} has malformed stock {stock!r}")
    return CatalogItem(
        product_id=sku,
        name=doc.get("name") or sku,
        unit_price_cents=price_cents,
        stock=UNLIMITED if stock is None else stock,
        is_purchasable=doc.get("status", "active") == "active",
    )


def promo_from_doc(doc: Dict[str, Any]) -> PromoCode:
    try:
        code = doc["code"]
        kind = PromoKind(doc["discount_type"])
        value = doc["discount_value"]
    except (KeyError, ValueError) as exc:
        raise ContractViolation(f"malformed promo document: {exc}")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ContractViolation(f"promo {code} has malformed discount_value {value!r}")
    return PromoCode(
        code=code.upper(),
        kind=kind,
        value=value,
        is_active=bool(doc.get("is_active", True)),
        description=doc.get("description") or "",
    )


# ----- Stores -----

class MongoProductStore:
    def resolve_items(self, product_ids: List[str]) -> Dict[str, CatalogItem]:
        docs = database.get_documents(PRODUCTS, {"sku": {"$in": product_ids}})
        return {doc["sku"]: product_to_item(doc) for doc in docs}

    def list(self, listed_only: bool = False) -> List[dict]:
        query = {"status": {"$in": list(LISTED_STATUSES)}} if listed_only else {}
        docs = database.get_documents(PRODUCTS, query, sort=[("name", 1)])
        return [strip_id(d) for d in docs]

    def get(self, sku: str) -> Optional[dict]:
        return strip_id(database.get_db()[PRODUCTS].find_one({"sku": sku}))

    def create(self, data: dict) -> dict:
        database.create_document(PRODUCTS, data)
        return self.get(data["sku"])

    def update(self, sku: str, fields: dict) -> Optional[dict]:
        fields = dict(fields, updated_at=datetime.now(timezone.utc))
        doc = database.get_db()[PRODUCTS].find_one_and_update(
            {"sku": sku}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return strip_id(doc)

    def delete(self, sku: str) -> bool:
        return database.get_db()[PRODUCTS].delete_one({"sku": sku}).deleted_count > 0


class MongoPromoStore:
    def resolve_codes(self, codes: List[str]) -> Dict[str, PromoCode]:
        docs = database.get_documents(PROMOS, {"code": {"$in": codes}})
        promos = (promo_from_doc(doc) for doc in docs)
        return {p.code: p for p in promos}

    def list(self) -> List[dict]:
        return [strip_id(d) for d in database.get_documents(PROMOS, sort=[("code", 1)])]

    def get(self, code: str) -> Optional[dict]:
        return strip_id(database.get_db()[PROMOS].find_one({"code": code}))

    def create(self, data: dict) -> dict:
        database.create_document(PROMOS, data)
        return self.get(data["code"])

    def update(self, code: str, fields: dict) -> Optional[dict]:
        fields = dict(fields, updated_at=datetime.now(timezone.utc))
        doc = database.get_db()[PROMOS].find_one_and_update(
            {"code": code}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return strip_id(doc)

    def delete(self, code: str) -> bool:
        return database.get_db()[PROMOS].delete_one({"code": code}).deleted_count > 0


class MongoOrderStore:
    def create(self, data: dict) -> dict:
        database.create_document(ORDERS, data)
        return self.get(data["order_number"])

    def list(self) -> List[dict]:
        return [strip_id(d) for d in database.get_documents(ORDERS, sort=[("created_at", -1)])]

    def get(self, order_number: str) -> Optional[dict]:
        return strip_id(database.get_db()[ORDERS].find_one({"order_number": order_number}))

    def set_status(self, order_number: str, status: str) -> Optional[dict]:
        doc = database.get_db()[ORDERS].find_one_and_update(
            {"order_number": order_number},
            {"$set": {"status": status, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return strip_id(doc)


# ----- Dependencies -----

def _ensure_database() -> None:
    if database.db is None:
        raise HTTPException(status_code=503, detail="Database not available")


def get_product_store() -> MongoProductStore:
    _ensure_database()
    return MongoProductStore()


def get_promo_store() -> MongoPromoStore:
    _ensure_database()
    return MongoPromoStore()


def get_order_store() -> MongoOrderStore:
    _ensure_database()
    return MongoOrderStore()
