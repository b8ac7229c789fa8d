"""Discount-aware profit attribution.

Discounts are split between cost and profit in proportion to the item's
margin: a 40% margin item gives up 40% of its discount as profit. Item
profit never drops below zero.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from app.core.logging import LoggerLike
from app.services.reports.normalizer import normalize_line_items
from app.services.reports.pricing import ResolvedPrice, clamp_rate, resolve_price
from app.services.reports.records import InvoiceRecord, LineItem, RecordId

logger = logging.getLogger(__name__)


class ProfitBasis(str, Enum):
    PRECOMPUTED = "precomputed"
    DERIVED = "derived"
    UNKNOWN_COST = "unknown_cost"


@dataclass(frozen=True)
class ItemProfit:
    product_id: RecordId | None
    product_name: str
    quantity: float
    revenue: float
    profit: float
    basis: ProfitBasis
    price: ResolvedPrice


@dataclass(frozen=True)
class InvoiceProfit:
    invoice_id: RecordId | None
    profit: float
    items: tuple[ItemProfit, ...]


def profit_margin(selling_price: float, purchase_price: float) -> float:
    if selling_price <= 0:
        return 0.0
    return min(max((selling_price - purchase_price) / selling_price, 0.0), 1.0)


def derived_profit(item: LineItem, price: ResolvedPrice) -> float:
    if item.purchase_price is None:
        return 0.0
    original_profit = (item.selling_price - item.purchase_price) * item.quantity
    discount_on_profit = price.total_discount * profit_margin(item.selling_price, item.purchase_price)
    return max(0.0, original_profit - discount_on_profit)


def item_revenue(item: LineItem, price: ResolvedPrice) -> float:
    if item.total is not None:
        return item.total
    return price.final_unit_price * item.quantity


def calculate_item_profit(
    item: LineItem,
    invoice: InvoiceRecord,
    log: LoggerLike | None = None,
) -> ItemProfit:
    log = log or logger
    price = resolve_price(item, invoice)
    if item.profit is not None:
        profit, basis = item.profit, ProfitBasis.PRECOMPUTED
    elif item.purchase_price is not None:
        profit, basis = derived_profit(item, price), ProfitBasis.DERIVED
    else:
        log.warning(
            "no purchase price for product %r, profit counted as zero",
            item.product_name,
            extra={"invoice_id": invoice.id},
        )
        profit, basis = 0.0, ProfitBasis.UNKNOWN_COST
    return ItemProfit(
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        revenue=item_revenue(item, price),
        profit=profit,
        basis=basis,
        price=price,
    )


def undistributed_discount_rate(invoice: InvoiceRecord) -> float:
    """Rate for an invoice discount that never reached the line items.

    Zero unless the invoice has an invoice-level discount and no item-level
    discount total.
    """
    if invoice.invoice_discount == 0 or invoice.items_discount != 0 or invoice.subtotal <= 0:
        return 0.0
    return clamp_rate(invoice.invoice_discount / invoice.subtotal)


def invoice_profit(
    invoice: InvoiceRecord,
    items: tuple[LineItem, ...] | None = None,
    log: LoggerLike | None = None,
) -> InvoiceProfit:
    """Total profit of one invoice, never raising.

    The undistributed invoice discount only scales persisted item profits;
    derived profits are left unscaled because the price resolver already
    applied the invoice rate to them.
    """
    log = log or logger
    try:
        if items is None:
            items = normalize_line_items(invoice, log)
        item_profits = tuple(calculate_item_profit(item, invoice, log) for item in items)
        derived = sum(entry.profit for entry in item_profits if entry.basis is not ProfitBasis.PRECOMPUTED)
        persisted = sum(entry.profit for entry in item_profits if entry.basis is ProfitBasis.PRECOMPUTED)
        # persisted profits were stored before the invoice discount was applied
        rate = undistributed_discount_rate(invoice)
        if rate and persisted:
            log.debug(
                "scaling persisted profit %.2f by invoice discount rate %.3f",
                persisted,
                rate,
                extra={"invoice_id": invoice.id},
            )
            persisted *= 1 - rate
        total = derived + persisted
    except (ArithmeticError, TypeError, ValueError, RecursionError):
        log.exception("profit calculation failed, counted as zero", extra={"invoice_id": invoice.id})
        return InvoiceProfit(invoice_id=invoice.id, profit=0.0, items=())

    if not math.isfinite(total):
        log.warning("profit evaluated to %s, counted as zero", total, extra={"invoice_id": invoice.id})
        total = 0.0
    return InvoiceProfit(invoice_id=invoice.id, profit=total, items=item_profits)
