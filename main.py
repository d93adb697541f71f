import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
from admin import router as admin_router
from checkout import PricedCart, build_venmo_url, generate_order_number, price_cart
from config import Settings, get_settings
from errors import CheckoutRefused, ContractViolation
from models import CartLine, CartSnapshot
from money import format_cents
from order_status import OrderStatus
from promos import normalize_code
from schemas import (
    OrderRequest,
    OrderResponse,
    PreviewRequest,
    PreviewResponse,
    ProductOut,
    PromoOut,
    discount_out,
    line_out,
    product_out,
    promo_out,
    totals_out,
)
from stores import (
    LISTED_STATUSES,
    MongoOrderStore,
    MongoProductStore,
    MongoPromoStore,
    get_order_store,
    get_product_store,
    get_promo_store,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("storefront")

app = FastAPI(title="Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["Content-Type", "X-Admin-Token"],
)

app.include_router(admin_router)


# ----- Errors -----

@app.exception_handler(CheckoutRefused)
async def checkout_refused_handler(request: Request, exc: CheckoutRefused):
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "code": exc.code, **exc.context()},
    )


@app.exception_handler(ContractViolation)
async def contract_violation_handler(request: Request, exc: ContractViolation):
    logger.error("Contract violation on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Unexpected server error."})


# ----- Health -----

@app.get("/")
def read_root():
    return {"message": "Storefront API running"}


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": "✅ Set" if settings.database_name else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    if database.db is None:
        return response
    response["database"] = "✅ Available"
    response["connection_status"] = "Connected"
    try:
        response["collections"] = database.db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        response["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
    return response


# ----- Products -----

@app.get("/api/products")
def list_products(
    products: MongoProductStore = Depends(get_product_store),
    config: Settings = Depends(get_settings),
):
    return {
        "products": [product_out(doc) for doc in products.list(listed_only=True)],
        "meta": {"shipping_flat_rate": format_cents(config.shipping_flat_rate_cents)},
    }


@app.get("/api/products/{sku}", response_model=ProductOut)
def get_product(sku: str, products: MongoProductStore = Depends(get_product_store)):
    doc = products.get(sku)
    if not doc or doc.get("status", "active") not in LISTED_STATUSES:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_out(doc)


# ----- Promo codes -----

@app.get("/api/promos/{code}", response_model=PromoOut)
def get_promo(code: str, promos: MongoPromoStore = Depends(get_promo_store)):
    code = normalize_code(code)
    if not code:
        raise HTTPException(status_code=400, detail="Promo code is required")
    doc = promos.get(code)
    if not doc or not doc.get("is_active", True):
        raise HTTPException(status_code=404, detail="Promo code not found")
    return promo_out(doc)


# ----- Checkout / Orders -----

def _snapshot(req: PreviewRequest) -> CartSnapshot:
    return CartSnapshot(
        lines=tuple(CartLine(product_id=i.product_id, quantity=i.quantity) for i in req.items),
        promo_codes=tuple(req.promo_codes),
    )


def _priced_fields(priced: PricedCart) -> dict:
    return {
        "items": [line_out(line) for line in priced.lines],
        "discounts": [discount_out(d) for d in priced.totals.discounts],
        "totals": totals_out(priced.totals),
    }


@app.post("/api/orders/preview", response_model=PreviewResponse)
def preview_order(
    req: PreviewRequest,
    products: MongoProductStore = Depends(get_product_store),
    promos: MongoPromoStore = Depends(get_promo_store),
    config: Settings = Depends(get_settings),
):
    priced = price_cart(_snapshot(req), products, promos, config.shipping_flat_rate_cents)
    return PreviewResponse(**_priced_fields(priced))


@app.post("/api/orders", response_model=OrderResponse, status_code=201)
def create_order(
    req: OrderRequest,
    products: MongoProductStore = Depends(get_product_store),
    promos: MongoPromoStore = Depends(get_promo_store),
    orders: MongoOrderStore = Depends(get_order_store),
    config: Settings = Depends(get_settings),
):
    logger.info("Order attempt: %d items, %d promo codes", len(req.items), len(req.promo_codes))

    priced = price_cart(_snapshot(req), products, promos, config.shipping_flat_rate_cents)
    totals = priced.totals

    order_number = generate_order_number(config.order_number_prefix)
    venmo_url = build_venmo_url(config.venmo_username, totals.total_cents, order_number)
    promo_codes = [p.code for p in priced.promos]

    orders.create({
        "order_number": order_number,
        "status": OrderStatus.PENDING_PAYMENT.value,
        "promo_codes": promo_codes,
        "venmo_note": order_number,
        "venmo_url": venmo_url,
        "items": [
            {
                "sku": line.item.product_id,
                "name": line.item.name,
                "price_cents": line.item.unit_price_cents,
                "quantity": line.quantity,
                "line_total_cents": line.line_total_cents,
            }
            for line in priced.lines
        ],
        "discounts": [
            {
                "code": d.code,
                "discount_type": d.kind.value,
                "value": d.value,
                "amount_cents": d.amount_cents,
            }
            for d in totals.discounts
        ],
        "totals": {
            "subtotal_cents": totals.subtotal_cents,
            "discount_cents": totals.discount_cents,
            "shipping_cents": totals.shipping_cents,
            "total_cents": totals.total_cents,
        },
        "customer": req.customer.model_dump(),
    })

    logger.info(
        "Created %s (%d items, total $%s)",
        order_number, len(priced.lines), format_cents(totals.total_cents),
    )

    return OrderResponse(
        order_number=order_number,
        status=OrderStatus.PENDING_PAYMENT.value,
        venmo_url=venmo_url,
        promo_codes=promo_codes,
        customer=req.customer,
        **_priced_fields(priced),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
