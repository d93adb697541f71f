"""Cart aggregation and validation against a catalog snapshot."""
import logging
from typing import Dict, Iterable, List, Mapping, Protocol

from errors import OutOfStock, ProductUnavailable
from models import CartLine, CatalogItem, ResolvedLine

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    def resolve_items(self, product_ids: List[str]) -> Mapping[str, CatalogItem]:
        """Return the items that exist. Ids missing from the result were not found."""
        ...


def aggregate_lines(lines: Iterable[CartLine]) -> Dict[str, int]:
    # dicts keep first-seen order, so resolved lines follow the cart
    quantities: Dict[str, int] = {}
    for line in lines:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
    return quantities


def resolve_cart(quantities: Mapping[str, int], catalog: Catalog) -> List[ResolvedLine]:
    product_ids = list(quantities)
    items = catalog.resolve_items(product_ids)

    unavailable = [
        pid for pid in product_ids
        if pid not in items or not items[pid].is_purchasable
    ]
    if unavailable:
        logger.info("refusing cart, unavailable products: %s", unavailable)
        raise ProductUnavailable(unavailable)

    resolved: List[ResolvedLine] = []
    for pid in product_ids:
        item = items[pid]
        quantity = quantities[pid]
        if not item.has_unlimited_stock:
            if item.stock <= 0 or quantity > item.stock:
                logger.info(
                    "refusing cart, %s requested=%d stock=%d", pid, quantity, item.stock
                )
                raise OutOfStock(pid, item.name, item.stock)
        resolved.append(ResolvedLine(item=item, quantity=quantity))
    return resolved
