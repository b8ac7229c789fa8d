from collections.abc import Iterable
from dataclasses import dataclass

from app.services.reports.normalizer import UNKNOWN_PRODUCT
from app.services.reports.profit import InvoiceProfit
from app.services.reports.records import ProductRecord, RecordId

DEFAULT_TOP_PRODUCTS = 5


@dataclass
class ProductSales:
    id: RecordId
    name: str
    sold_quantity: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0


def rank_top_products(
    catalog: Iterable[ProductRecord],
    invoice_profits: Iterable[InvoiceProfit],
    limit: int = DEFAULT_TOP_PRODUCTS,
) -> list[ProductSales]:
    """Best sellers by post-discount revenue, restricted to catalog products."""
    sales: dict[RecordId, ProductSales] = {}
    for product in catalog:
        if product.id is None:
            continue
        sales[product.id] = ProductSales(id=product.id, name=product.name or UNKNOWN_PRODUCT)

    for invoice in invoice_profits:
        for item in invoice.items:
            entry = sales.get(item.product_id) if item.product_id is not None else None
            if entry is None:
                continue
            entry.sold_quantity += item.quantity
            entry.revenue += item.revenue
            entry.profit += item.profit

    ranked = [entry for entry in sales.values() if entry.sold_quantity > 0]
    ranked.sort(key=lambda entry: (-entry.revenue, -entry.sold_quantity, entry.name))
    return ranked[:limit]
