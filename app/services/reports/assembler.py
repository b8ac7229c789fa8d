import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from app.core.config import settings
from app.core.logging import LoggerLike, ReportLogAdapter
from app.schemas.reports import ChartPointOut, DetailedReportOut, ReportOut, ReportSummaryOut, TopProductOut
from app.services.reports.buckets import aggregate_buckets
from app.services.reports.errors import ReportStorageError
from app.services.reports.periods import ReportType, ReportWindow, parse_report_type, previous_window, resolve_window
from app.services.reports.profit import InvoiceProfit, invoice_profit
from app.services.reports.ranking import DEFAULT_TOP_PRODUCTS, rank_top_products
from app.services.reports.records import DamagedItemRecord, ExpenseRecord, InvoiceRecord, ProductRecord
from app.services.reports.storage import ReportStorage

default_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportRequest:
    report_type: ReportType = ReportType.DAILY
    date: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    include_detailed_reports: bool = True
    include_top_products: bool = True
    include_damaged_items: bool = True
    include_expenses: bool = True
    include_previous_period: bool = True


@dataclass(frozen=True)
class ReportInputs:
    invoices: list[InvoiceRecord]
    products: list[ProductRecord]
    damaged_items: list[DamagedItemRecord]
    expenses: list[ExpenseRecord]


async def _empty() -> list:
    return []


async def fetch_inputs(storage: ReportStorage, request: ReportRequest) -> ReportInputs:
    """Issue the independent storage reads together and wait for all of them."""
    get_expenses = getattr(storage, "get_all_expenses", None)
    try:
        invoices, products, damaged_items, expenses = await asyncio.gather(
            storage.get_all_invoices(),
            storage.get_all_products(),
            storage.get_all_damaged_items() if request.include_damaged_items else _empty(),
            get_expenses() if request.include_expenses and get_expenses is not None else _empty(),
        )
    except ReportStorageError:
        raise
    except Exception as exc:
        raise ReportStorageError("Failed to load report data") from exc
    return ReportInputs(
        invoices=list(invoices or []),
        products=list(products or []),
        damaged_items=list(damaged_items or []),
        expenses=list(expenses or []),
    )


def filter_invoices(invoices: list[InvoiceRecord], window: ReportWindow) -> list[InvoiceRecord]:
    return [invoice for invoice in invoices if not invoice.is_deleted and window.contains(invoice.date)]


def _day(value: datetime | None) -> str:
    return value.date().isoformat() if value is not None else ""


async def compute_invoice_profits(
    invoices: list[InvoiceRecord],
    log: LoggerLike,
    yield_every: int | None = None,
) -> list[InvoiceProfit]:
    """Profit per invoice, computed once and shared by every report section.

    Yields to the event loop every ``yield_every`` invoices so a cancelled
    request stops between invoices.
    """
    yield_every = yield_every or settings.report_yield_every
    results = []
    for position, invoice in enumerate(invoices, start=1):
        results.append(invoice_profit(invoice, log=log))
        if position % yield_every == 0:
            await asyncio.sleep(0)
    return results


def _sale_rows(invoices: list[InvoiceRecord], profits: list[InvoiceProfit]) -> list[tuple[datetime, DetailedReportOut]]:
    rows = []
    for invoice, result in zip(invoices, profits):
        rows.append(
            (
                invoice.date,
                DetailedReportOut(
                    id=invoice.id,
                    date=_day(invoice.date),
                    type="sale",
                    amount=invoice.total,
                    profit=result.profit,
                    details=f"Invoice #{invoice.invoice_number or invoice.id}, Payment: {invoice.payment_method or 'unknown'}",
                    customer_name=invoice.customer_name or "Unknown customer",
                    payment_status=invoice.payment_status,
                ),
            )
        )
    return rows


def _damage_rows(items: list[DamagedItemRecord]) -> list[tuple[datetime, DetailedReportOut]]:
    return [
        (
            item.date,
            DetailedReportOut(
                id=item.id,
                date=_day(item.date),
                type="damage",
                amount=item.value_loss,
                details=item.description or "No description",
                product_name=item.product_name or "Unknown product",
                quantity=item.quantity,
            ),
        )
        for item in items
    ]


def _expense_rows(expenses: list[ExpenseRecord]) -> list[tuple[datetime, DetailedReportOut]]:
    return [
        (
            expense.date,
            DetailedReportOut(
                id=expense.id,
                date=_day(expense.date),
                type="expense",
                amount=expense.amount,
                details=expense.details or "No description",
                expense_type=expense.category or "Other expenses",
            ),
        )
        for expense in expenses
    ]


def build_detailed_reports(
    invoices: list[InvoiceRecord],
    profits: list[InvoiceProfit],
    damaged_items: list[DamagedItemRecord],
    expenses: list[ExpenseRecord],
) -> list[DetailedReportOut]:
    rows = _sale_rows(invoices, profits) + _damage_rows(damaged_items) + _expense_rows(expenses)
    # newest first; every row here passed the window filter so it has a date
    rows.sort(key=lambda row: row[0], reverse=True)
    return [row for _, row in rows]


def _previous_totals(
    report_type: ReportType,
    window: ReportWindow,
    inputs: ReportInputs,
    log: LoggerLike,
) -> tuple[float, float, float, int]:
    previous = previous_window(report_type, window)
    if previous is None:
        return 0.0, 0.0, 0.0, 0
    invoices = filter_invoices(inputs.invoices, previous)
    damages = sum(item.value_loss for item in inputs.damaged_items if previous.contains(item.date))
    profit = sum(invoice_profit(invoice, log=log).profit for invoice in invoices)
    return sum(invoice.total for invoice in invoices), profit, damages, len(invoices)


async def generate_report(
    storage: ReportStorage,
    request: ReportRequest,
    *,
    logger: LoggerLike | None = None,
    top_products_limit: int = DEFAULT_TOP_PRODUCTS,
) -> ReportOut:
    report_type = parse_report_type(request.report_type)
    log = ReportLogAdapter(logger or default_logger, {"report_type": report_type.value})
    window = resolve_window(report_type, request.date, request.start_date, request.end_date)

    inputs = await fetch_inputs(storage, request)
    log.info(
        "loaded %d invoices, %d products, %d damaged items, %d expenses",
        len(inputs.invoices),
        len(inputs.products),
        len(inputs.damaged_items),
        len(inputs.expenses),
    )

    invoices = filter_invoices(inputs.invoices, window)
    damaged_items = [item for item in inputs.damaged_items if window.contains(item.date)]
    expenses = [expense for expense in inputs.expenses if window.contains(expense.date)]
    log.info(
        "window %s .. %s: %d invoices, %d damaged items, %d expenses",
        window.start,
        window.end,
        len(invoices),
        len(damaged_items),
        len(expenses),
    )

    profits = await compute_invoice_profits(invoices, log)

    summary = ReportSummaryOut(
        total_sales=sum(invoice.total for invoice in invoices),
        total_profit=sum(result.profit for result in profits),
        total_damages=sum(item.value_loss for item in damaged_items),
        sales_count=len(invoices),
    )
    if request.include_previous_period:
        previous = _previous_totals(report_type, window, inputs, log)
        summary = summary.model_copy(
            update={
                "previous_total_sales": previous[0],
                "previous_total_profit": previous[1],
                "previous_total_damages": previous[2],
                "previous_sales_count": previous[3],
            }
        )

    buckets = aggregate_buckets(
        report_type,
        window,
        ((invoice.date, invoice.total, result.profit) for invoice, result in zip(invoices, profits)),
    )
    chart_data = [ChartPointOut(name=bucket.label, revenue=bucket.revenue, profit=bucket.profit) for bucket in buckets]

    top_products = []
    if request.include_top_products:
        top_products = [
            TopProductOut(
                id=entry.id,
                name=entry.name,
                sold_quantity=entry.sold_quantity,
                revenue=entry.revenue,
                profit=entry.profit,
            )
            for entry in rank_top_products(inputs.products, profits, limit=top_products_limit)
        ]

    detailed_reports = []
    if request.include_detailed_reports:
        detailed_reports = build_detailed_reports(invoices, profits, damaged_items, expenses)

    log.info("report ready: sales=%.2f profit=%.2f count=%d", summary.total_sales, summary.total_profit, summary.sales_count)
    return ReportOut(
        summary=summary,
        chart_data=chart_data,
        top_products=top_products,
        detailed_reports=detailed_reports,
    )
