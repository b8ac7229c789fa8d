"""Turns an invoice's stored product data into canonical line items.

Three encodings coexist in the invoice table. Each is a variant with a
``matches``/``decode`` pair; ``ENCODINGS`` lists them in priority order and
the first variant that matches decides the result, even when decoding it
yields nothing.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from app.core.logging import LoggerLike
from app.services.reports.records import InvoiceRecord, LineItem, normalize_id, to_float, to_optional_float

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown product"

_ID_KEYS = ("productId", "product_id", "id")
_NAME_KEYS = ("productName", "product_name", "name")
_PRICE_KEYS = ("sellingPrice", "selling_price", "price")
_PURCHASE_KEYS = ("purchasePrice", "purchase_price")
_DISCOUNT_KEYS = ("discount", "discountPercentage", "discount_pct")


def _first(entry: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None and value != "":
            return value
    return None


def _clamp_pct(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def line_item_from_mapping(entry: Mapping[str, Any]) -> LineItem:
    quantity = to_float(entry.get("quantity"), default=1.0)
    name = _first(entry, _NAME_KEYS)
    return LineItem(
        product_id=normalize_id(_first(entry, _ID_KEYS)),
        product_name=str(name) if name is not None else UNKNOWN_PRODUCT,
        selling_price=to_float(_first(entry, _PRICE_KEYS)),
        purchase_price=to_optional_float(_first(entry, _PURCHASE_KEYS)),
        quantity=max(quantity, 0.0),
        discount_pct=_clamp_pct(to_float(_first(entry, _DISCOUNT_KEYS))),
        total=to_optional_float(entry.get("total")),
        profit=to_optional_float(entry.get("profit")),
    )


def _from_entries(entries: list[Any], invoice: InvoiceRecord, log: LoggerLike) -> tuple[LineItem, ...]:
    items: list[LineItem] = []
    skipped = 0
    for entry in entries:
        if isinstance(entry, Mapping):
            items.append(line_item_from_mapping(entry))
        else:
            skipped += 1
    if skipped:
        log.warning("skipped %d non-object product entries", skipped, extra={"invoice_id": invoice.id})
    return tuple(items)


class LineItemEncoding(Protocol):
    name: str

    def matches(self, invoice: InvoiceRecord) -> bool: ...

    def decode(self, invoice: InvoiceRecord, log: LoggerLike) -> tuple[LineItem, ...]: ...


class JsonTextEncoding:
    name = "json"

    def matches(self, invoice: InvoiceRecord) -> bool:
        return bool(invoice.products_data and invoice.products_data.strip())

    def decode(self, invoice: InvoiceRecord, log: LoggerLike) -> tuple[LineItem, ...]:
        try:
            payload = json.loads(invoice.products_data or "")
        except (ValueError, RecursionError) as exc:
            log.warning("unparseable products data: %s", exc, extra={"invoice_id": invoice.id})
            return ()
        if not isinstance(payload, list):
            log.warning("products data is not an array", extra={"invoice_id": invoice.id})
            return ()
        return _from_entries(payload, invoice, log)


class MaterializedListEncoding:
    name = "list"

    def matches(self, invoice: InvoiceRecord) -> bool:
        return invoice.products is not None

    def decode(self, invoice: InvoiceRecord, log: LoggerLike) -> tuple[LineItem, ...]:
        return _from_entries(list(invoice.products or []), invoice, log)


class ParallelColumnsEncoding:
    """Comma-joined ``product_*`` columns zipped by position."""

    name = "columns"

    def matches(self, invoice: InvoiceRecord) -> bool:
        return all(
            value and value.strip()
            for value in (
                invoice.product_ids,
                invoice.product_names,
                invoice.product_quantities,
                invoice.product_prices,
            )
        )

    @staticmethod
    def _split(raw: str | None) -> list[str] | None:
        if raw is None or not raw.strip():
            return None
        return [part.strip() for part in raw.split(",")]

    def _split_names(self, raw: str, expected: int) -> list[str]:
        names = self._split(raw) or []
        if len(names) != expected and "|" in raw:
            piped = [part.strip() for part in raw.split("|")]
            if len(piped) == expected:
                return piped
        return names

    def decode(self, invoice: InvoiceRecord, log: LoggerLike) -> tuple[LineItem, ...]:
        ids = self._split(invoice.product_ids) or []
        names = self._split_names(invoice.product_names or "", len(ids))
        quantities = self._split(invoice.product_quantities) or []
        prices = self._split(invoice.product_prices) or []
        discounts = self._split(invoice.product_discounts)
        purchase_prices = self._split(invoice.product_purchase_prices)
        totals = self._split(invoice.product_totals)
        profits = self._split(invoice.product_profits)

        columns = {"names": names, "quantities": quantities, "prices": prices}
        optional = {"discounts": discounts, "purchase_prices": purchase_prices, "totals": totals, "profits": profits}
        columns.update({key: value for key, value in optional.items() if value is not None})
        mismatched = sorted(key for key, value in columns.items() if len(value) != len(ids))
        if mismatched:
            log.warning(
                "product columns disagree in length (ids=%d, mismatched=%s)",
                len(ids),
                ",".join(mismatched),
                extra={"invoice_id": invoice.id},
            )
            return ()

        items = []
        for index, raw_id in enumerate(ids):
            items.append(
                LineItem(
                    product_id=normalize_id(raw_id),
                    product_name=names[index] or UNKNOWN_PRODUCT,
                    selling_price=to_float(prices[index]),
                    purchase_price=to_float(purchase_prices[index]) if purchase_prices is not None else 0.0,
                    quantity=max(to_float(quantities[index], default=1.0), 0.0),
                    discount_pct=_clamp_pct(to_float(discounts[index])) if discounts is not None else 0.0,
                    total=to_optional_float(totals[index]) if totals is not None else None,
                    profit=to_optional_float(profits[index]) if profits is not None else None,
                )
            )
        return tuple(items)


ENCODINGS: tuple[LineItemEncoding, ...] = (
    JsonTextEncoding(),
    MaterializedListEncoding(),
    ParallelColumnsEncoding(),
)


def detect_encoding(invoice: InvoiceRecord) -> LineItemEncoding | None:
    for encoding in ENCODINGS:
        if encoding.matches(invoice):
            return encoding
    return None


def normalize_line_items(
    invoice: InvoiceRecord,
    log: LoggerLike | None = None,
) -> tuple[LineItem, ...]:
    log = log or logger
    encoding = detect_encoding(invoice)
    if encoding is None:
        log.warning("no product data found, profit counted as zero", extra={"invoice_id": invoice.id})
        return ()
    return encoding.decode(invoice, log)
