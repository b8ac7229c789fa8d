import json
from datetime import datetime
from typing import Any

from app.core.security import create_access_token
from app.services.reports.records import DamagedItemRecord, ExpenseRecord, InvoiceRecord, ProductRecord


class FakeStorage:
    """In-memory report storage; ``fail`` makes every read raise."""

    def __init__(self, invoices=(), products=(), damaged_items=(), expenses=(), fail: Exception | None = None):
        self.invoices = list(invoices)
        self.products = list(products)
        self.damaged_items = list(damaged_items)
        self.expenses = list(expenses)
        self.fail = fail
        self.calls: list[str] = []

    async def _read(self, name: str, rows: list) -> list:
        self.calls.append(name)
        if self.fail is not None:
            raise self.fail
        return list(rows)

    async def get_all_invoices(self) -> list[InvoiceRecord]:
        return await self._read("invoices", self.invoices)

    async def get_all_products(self) -> list[ProductRecord]:
        return await self._read("products", self.products)

    async def get_all_damaged_items(self) -> list[DamagedItemRecord]:
        return await self._read("damaged_items", self.damaged_items)

    async def get_all_expenses(self) -> list[ExpenseRecord]:
        return await self._read("expenses", self.expenses)


class StorageWithoutExpenses:
    def __init__(self, invoices=(), products=()):
        self.invoices = list(invoices)
        self.products = list(products)

    async def get_all_invoices(self):
        return self.invoices

    async def get_all_products(self):
        return self.products

    async def get_all_damaged_items(self):
        return []


def line(product_id: int, name: str, price: float, quantity: float, **extra: Any) -> dict[str, Any]:
    entry = {"productId": product_id, "productName": name, "sellingPrice": price, "quantity": quantity}
    entry.update(extra)
    return entry


def make_invoice(
    invoice_id: int,
    when: datetime | str | None,
    lines: list[dict[str, Any]] | None = None,
    *,
    total: float | None = None,
    **fields: Any,
) -> InvoiceRecord:
    lines = lines or []
    if total is None:
        total = sum(entry.get("sellingPrice", 0) * entry.get("quantity", 0) for entry in lines)
    data = {
        "id": invoice_id,
        "invoice_number": f"INV-{invoice_id:04d}",
        "date": when,
        "subtotal": total,
        "total": total,
        "payment_method": "cash",
        "payment_status": "paid",
        "customer_name": "Walk-in",
        "products_data": json.dumps(lines) if lines else None,
    }
    data.update(fields)
    return InvoiceRecord(**data)


def auth_headers(role: str = "admin", subject: str = "1") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, role)}"}
