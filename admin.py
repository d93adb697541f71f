"""
Admin back-office routes

Every route requires the X-Admin-Token header to match ADMIN_ACCESS_TOKEN.
An empty configured token rejects all requests.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response

from config import Settings, get_settings
from money import dollars_to_cents
from order_status import InvalidStatusTransition, OrderStatus, check_transition
from promos import normalize_code
from schemas import (
    ProductIn,
    ProductOut,
    ProductUpdate,
    PromoIn,
    PromoOut,
    PromoUpdate,
    StatusUpdate,
    order_out,
    product_out,
    promo_out,
)
from stores import (
    MongoOrderStore,
    MongoProductStore,
    MongoPromoStore,
    get_order_store,
    get_product_store,
    get_promo_store,
)

logger = logging.getLogger(__name__)


def require_admin(
    x_admin_token: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
) -> None:
    expected = config.admin_access_token
    if not expected or not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), expected.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


# ----- Products -----

@router.get("/products")
def admin_list_products(products: MongoProductStore = Depends(get_product_store)):
    return {"products": [product_out(doc) for doc in products.list()]}


@router.post("/products", response_model=ProductOut, status_code=201)
def admin_create_product(
    product: ProductIn, products: MongoProductStore = Depends(get_product_store)
):
    if products.get(product.sku):
        raise HTTPException(status_code=409, detail="Product with this SKU already exists")

    data = product.model_dump(exclude={"price"})
    data["price_cents"] = dollars_to_cents(product.price)
    doc = products.create(data)
    logger.info("Created product %s", product.sku)
    return product_out(doc)


@router.put("/products/{sku}", response_model=ProductOut)
def admin_update_product(
    sku: str,
    update: ProductUpdate,
    products: MongoProductStore = Depends(get_product_store),
):
    # stock may be set to null (unlimited); other nulls mean "leave as is"
    fields = {
        k: v for k, v in update.model_dump(exclude_unset=True).items()
        if v is not None or k == "stock"
    }
    if "price" in fields:
        fields["price_cents"] = dollars_to_cents(fields.pop("price"))

    doc = products.update(sku, fields)
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Updated product %s: %s", sku, sorted(fields))
    return product_out(doc)


@router.delete("/products/{sku}", status_code=204)
def admin_delete_product(sku: str, products: MongoProductStore = Depends(get_product_store)):
    if not products.delete(sku):
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Deleted product %s", sku)
    return Response(status_code=204)


# ----- Promo codes -----

@router.get("/promos")
def admin_list_promos(promos: MongoPromoStore = Depends(get_promo_store)):
    return {"promos": [promo_out(doc) for doc in promos.list()]}


@router.post("/promos", response_model=PromoOut, status_code=201)
def admin_create_promo(promo: PromoIn, promos: MongoPromoStore = Depends(get_promo_store)):
    if promos.get(promo.code):
        raise HTTPException(status_code=409, detail="Promo code already exists")
    doc = promos.create(promo.model_dump())
    logger.info("Created promo %s", promo.code)
    return promo_out(doc)


@router.put("/promos/{code}", response_model=PromoOut)
def admin_update_promo(
    code: str,
    update: PromoUpdate,
    promos: MongoPromoStore = Depends(get_promo_store),
):
    code = normalize_code(code)
    fields = {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}
    doc = promos.update(code, fields)
    if not doc:
        raise HTTPException(status_code=404, detail="Promo code not found")
    logger.info("Updated promo %s: %s", code, sorted(fields))
    return promo_out(doc)


@router.delete("/promos/{code}", status_code=204)
def admin_delete_promo(code: str, promos: MongoPromoStore = Depends(get_promo_store)):
    code = normalize_code(code)
    if not promos.delete(code):
        raise HTTPException(status_code=404, detail="Promo code not found")
    logger.info("Deleted promo %s", code)
    return Response(status_code=204)


# ----- Orders -----

@router.get("/orders")
def admin_list_orders(orders: MongoOrderStore = Depends(get_order_store)):
    return {"orders": [order_out(doc) for doc in orders.list()]}


@router.patch("/orders/{order_number}/status")
def admin_update_order_status(
    order_number: str,
    update: StatusUpdate,
    orders: MongoOrderStore = Depends(get_order_store),
):
    doc = orders.get(order_number)
    if not doc:
        raise HTTPException(status_code=404, detail="Order not found")

    current = OrderStatus(doc["status"])
    requested = OrderStatus(update.status)
    try:
        changed = check_transition(current, requested)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    if changed:
        doc = orders.set_status(order_number, requested.value)
        if not doc:
            raise HTTPException(status_code=404, detail="Order not found")
        logger.info("Order %s: %s -> %s", order_number, current.value, requested.value)
    return {"order_number": doc["order_number"], "status": doc["status"]}
