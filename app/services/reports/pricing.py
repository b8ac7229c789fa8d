"""Post-discount unit price for one line item.

A line either carries a persisted ``total`` (``Precomputed``) or its price is
rebuilt from the list price, the item discount and the invoice-wide discount
rate (``Derived``). ``price_source`` picks the variant, ``resolve_price``
evaluates it.
"""

from dataclasses import dataclass

from app.services.reports.records import InvoiceRecord, LineItem

MAX_INVOICE_DISCOUNT_RATE = 0.99


def clamp_rate(rate: float) -> float:
    if rate != rate:  # NaN
        return 0.0
    return min(max(rate, 0.0), MAX_INVOICE_DISCOUNT_RATE)


def invoice_discount_rate(invoice: InvoiceRecord) -> float:
    """Share of the invoice removed by invoice-level discounts, in [0, 0.99]."""
    if invoice.discount_percentage > 0:
        return clamp_rate(invoice.discount_percentage / 100)
    if invoice.invoice_discount > 0 and invoice.subtotal > 0:
        return clamp_rate(invoice.invoice_discount / invoice.subtotal)
    if invoice.discount > 0 and invoice.total + invoice.discount > 0:
        return clamp_rate(invoice.discount / (invoice.total + invoice.discount))
    return 0.0


@dataclass(frozen=True)
class Precomputed:
    line_total: float
    quantity: float


@dataclass(frozen=True)
class Derived:
    selling_price: float
    item_discount_pct: float
    invoice_discount_rate: float


PriceSource = Precomputed | Derived


@dataclass(frozen=True)
class ResolvedPrice:
    final_unit_price: float
    total_discount: float
    source: PriceSource


def price_source(item: LineItem, invoice: InvoiceRecord) -> PriceSource:
    if item.total is not None and item.quantity > 0:
        return Precomputed(line_total=item.total, quantity=item.quantity)
    return Derived(
        selling_price=item.selling_price,
        item_discount_pct=item.discount_pct,
        invoice_discount_rate=invoice_discount_rate(invoice),
    )


def unit_price(source: PriceSource) -> float:
    if isinstance(source, Precomputed):
        return max(source.line_total / source.quantity, 0.0)
    after_item_discount = source.selling_price * (1 - source.item_discount_pct / 100)
    return max(after_item_discount * (1 - clamp_rate(source.invoice_discount_rate)), 0.0)


def resolve_price(item: LineItem, invoice: InvoiceRecord) -> ResolvedPrice:
    source = price_source(item, invoice)
    final_unit_price = unit_price(source)
    return ResolvedPrice(
        final_unit_price=final_unit_price,
        total_discount=(item.selling_price - final_unit_price) * item.quantity,
        source=source,
    )
