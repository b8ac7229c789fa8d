import math
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, field_validator

from app.core.config import settings

RecordId = int | str


def to_float(value: Any, default: float = 0.0) -> float:
    """Lenient numeric read: blanks, junk and non-finite values give ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


def to_optional_float(value: Any) -> float | None:
    number = to_float(value, default=math.nan)
    return None if math.isnan(number) else number


def normalize_id(value: Any) -> RecordId | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return int(text)
    return text


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def to_local_datetime(value: Any) -> datetime | None:
    """Parse a stored date into a naive datetime in the report timezone.

    Unparseable values return ``None`` so the record is treated as undated.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(_zone(settings.report_timezone)).replace(tzinfo=None)
    return parsed


class _Record(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def _lenient_id(cls, value: Any) -> RecordId | None:
        return normalize_id(value)

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def _lenient_date(cls, value: Any) -> datetime | None:
        return to_local_datetime(value)


class InvoiceRecord(_Record):
    id: RecordId | None = None
    invoice_number: str | None = None
    date: datetime | None = None
    subtotal: float = 0.0
    items_discount: float = 0.0
    invoice_discount: float = 0.0
    discount_percentage: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    payment_status: str | None = None
    payment_method: str | None = None
    customer_id: RecordId | None = None
    customer_name: str | None = None
    is_deleted: bool = False

    products_data: str | None = None
    products: list[Any] | None = None
    product_ids: str | None = None
    product_names: str | None = None
    product_quantities: str | None = None
    product_prices: str | None = None
    product_purchase_prices: str | None = None
    product_discounts: str | None = None
    product_totals: str | None = None
    product_profits: str | None = None

    @field_validator(
        "subtotal",
        "items_discount",
        "invoice_discount",
        "discount_percentage",
        "discount",
        "total",
        mode="before",
    )
    @classmethod
    def _lenient_amount(cls, value: Any) -> float:
        return to_float(value)

    @field_validator("customer_id", mode="before")
    @classmethod
    def _lenient_customer(cls, value: Any) -> RecordId | None:
        return normalize_id(value)

    @field_validator("is_deleted", mode="before")
    @classmethod
    def _lenient_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("products", mode="before")
    @classmethod
    def _lenient_products(cls, value: Any) -> list[Any] | None:
        if isinstance(value, (list, tuple)):
            return list(value)
        return None


class ProductRecord(_Record):
    id: RecordId | None = None
    name: str | None = None
    barcode: str | None = None
    selling_price: float | None = None
    purchase_price: float | None = None

    @field_validator("selling_price", "purchase_price", mode="before")
    @classmethod
    def _lenient_price(cls, value: Any) -> float | None:
        return to_optional_float(value)


class DamagedItemRecord(_Record):
    id: RecordId | None = None
    product_id: RecordId | None = None
    product_name: str | None = None
    date: datetime | None = None
    value_loss: float = 0.0
    quantity: float = 0.0
    description: str | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def _lenient_product_id(cls, value: Any) -> RecordId | None:
        return normalize_id(value)

    @field_validator("value_loss", "quantity", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> float:
        return to_float(value)


class ExpenseRecord(_Record):
    id: RecordId | None = None
    date: datetime | None = None
    amount: float = 0.0
    category: str | None = None
    details: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> float:
        return to_float(value)


@dataclass(frozen=True)
class LineItem:
    """Canonical, encoding-independent invoice line."""

    product_id: RecordId | None
    product_name: str
    selling_price: float
    purchase_price: float | None
    quantity: float
    discount_pct: float = 0.0
    total: float | None = None
    profit: float | None = None
