# flowershop/domain/pricing.py
"""
Pricing & validation of an order draft against a catalog snapshot.

Nothing here touches storage. The catalog is read once, in a single
batched call, and every line is checked before anything is reported so
the caller gets the complete list of problems.
"""
from collections import OrderedDict
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Dict, Iterable, List, Protocol

from flowershop.domain.errors import InsufficientStock, OrderError, OrderRejected, ProductUnavailable
from flowershop.domain.schemas import OrderItemIn

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CatalogProduct:
    id: int
    name: str
    price: Decimal
    stock: int
    active: bool = True
    summary: str | None = None


class Catalog(Protocol):
    async def get_products_by_ids(self, ids: List[int]) -> List[CatalogProduct]:
        ...


@dataclass(frozen=True)
class ItemDraft:
    product_id: int
    product_name: str
    product_summary: str | None
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class PricedOrder:
    items: List[ItemDraft]
    total_amount: Decimal


def money(value) -> Decimal:
    """Round to cents, half-to-even."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_EVEN)


def price_items(lines: Iterable[OrderItemIn], products: Iterable[CatalogProduct]) -> PricedOrder:
    """
    Snapshot current catalog prices onto the requested lines.

    Raises OrderRejected carrying one ProductUnavailable or InsufficientStock
    per offending product. Repeated lines for the same product are checked
    against stock with their combined quantity.
    """
    lines = list(lines)
    by_id: Dict[int, CatalogProduct] = {p.id: p for p in products}

    requested: "OrderedDict[int, int]" = OrderedDict()
    for line in lines:
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

    errors: List[OrderError] = []
    for product_id, quantity in requested.items():
        product = by_id.get(product_id)
        if product is None or not product.active:
            errors.append(ProductUnavailable(product_id))
        elif quantity > product.stock:
            errors.append(InsufficientStock(product_id, quantity, product.stock))

    if errors:
        raise OrderRejected(errors)

    items = []
    for line in lines:
        product = by_id[line.product_id]
        unit_price = money(product.price)
        items.append(
            ItemDraft(
                product_id=product.id,
                product_name=product.name,
                product_summary=product.summary,
                unit_price=unit_price,
                quantity=line.quantity,
                subtotal=money(unit_price * line.quantity),
            )
        )

    total = money(sum((i.subtotal for i in items), Decimal("0.00")))
    return PricedOrder(items=items, total_amount=total)
