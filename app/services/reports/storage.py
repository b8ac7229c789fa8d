import logging
from collections.abc import Callable
from typing import Protocol, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import SessionLocal
from app.models.inventory import DamagedItem, Expense, Product
from app.models.invoice import Invoice
from app.services.reports.errors import ReportStorageError
from app.services.reports.records import DamagedItemRecord, ExpenseRecord, InvoiceRecord, ProductRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportStorage(Protocol):
    """Read side the report engine depends on.

    ``get_all_expenses`` is optional; storages without it report no expenses.
    """

    async def get_all_invoices(self) -> list[InvoiceRecord]: ...

    async def get_all_products(self) -> list[ProductRecord]: ...

    async def get_all_damaged_items(self) -> list[DamagedItemRecord]: ...


class SqlAlchemyReportStorage:
    """Loads report records through short-lived sessions in the threadpool.

    Each read opens its own session so the four reads can run concurrently.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def _read(self, name: str, query: Callable[[Session], list[T]]) -> list[T]:
        def _run() -> list[T]:
            with self._session_factory() as db:
                return query(db)

        try:
            return await run_in_threadpool(_run)
        except SQLAlchemyError as exc:
            logger.error("failed to load %s: %s", name, exc)
            raise ReportStorageError(f"Failed to load {name}") from exc

    async def get_all_invoices(self) -> list[InvoiceRecord]:
        return await self._read(
            "invoices",
            lambda db: [InvoiceRecord.model_validate(row) for row in db.scalars(select(Invoice).order_by(Invoice.date))],
        )

    async def get_all_products(self) -> list[ProductRecord]:
        return await self._read(
            "products",
            lambda db: [ProductRecord.model_validate(row) for row in db.scalars(select(Product).order_by(Product.id))],
        )

    async def get_all_damaged_items(self) -> list[DamagedItemRecord]:
        def query(db: Session) -> list[DamagedItemRecord]:
            rows = db.execute(
                select(DamagedItem, Product.name)
                .outerjoin(Product, Product.id == DamagedItem.product_id)
                .order_by(DamagedItem.date)
            ).all()
            return [
                DamagedItemRecord.model_validate(item).model_copy(update={"product_name": product_name})
                for item, product_name in rows
            ]

        return await self._read("damaged items", query)

    async def get_all_expenses(self) -> list[ExpenseRecord]:
        return await self._read(
            "expenses",
            lambda db: [ExpenseRecord.model_validate(row) for row in db.scalars(select(Expense).order_by(Expense.date))],
        )
