from app.services.reports.profit import invoice_profit
from app.services.reports.ranking import rank_top_products
from app.services.reports.records import ProductRecord
from tests.utils import line, make_invoice


def _catalog(count: int) -> list[ProductRecord]:
    return [ProductRecord(id=index, name=f"Product {index}") for index in range(1, count + 1)]


def test_top_products_are_limited_and_sorted_by_revenue():
    lines = [line(index, f"Product {index}", 10.0 * index, 1, purchasePrice=1) for index in range(1, 8)]
    profits = [invoice_profit(make_invoice(1, "2024-03-15T10:00:00", lines))]

    ranked = rank_top_products(_catalog(7), profits, limit=5)

    assert [entry.id for entry in ranked] == [7, 6, 5, 4, 3]
    assert ranked[0].revenue == 70.0
    assert ranked[0].profit == 69.0


def test_products_without_sales_are_dropped():
    profits = [invoice_profit(make_invoice(1, "2024-03-15T10:00:00", [line(2, "Product 2", 5, 3)]))]

    ranked = rank_top_products(_catalog(4), profits)

    assert [(entry.id, entry.sold_quantity) for entry in ranked] == [(2, 3.0)]


def test_sales_of_products_missing_from_catalog_are_ignored():
    profits = [invoice_profit(make_invoice(1, "2024-03-15T10:00:00", [line(42, "Gone", 500, 1), line(1, "Product 1", 5, 1)]))]

    ranked = rank_top_products(_catalog(2), profits)

    assert [entry.id for entry in ranked] == [1]


def test_revenue_ties_break_on_quantity_then_name():
    catalog = [ProductRecord(id=1, name="Beta"), ProductRecord(id=2, name="Alpha"), ProductRecord(id=3, name="Gamma")]
    lines = [line(1, "Beta", 10, 2), line(2, "Alpha", 10, 2), line(3, "Gamma", 5, 4)]
    profits = [invoice_profit(make_invoice(1, "2024-03-15T10:00:00", lines))]

    ranked = rank_top_products(catalog, profits)

    assert [entry.name for entry in ranked] == ["Gamma", "Alpha", "Beta"]


def test_quantities_accumulate_across_invoices():
    profits = [
        invoice_profit(make_invoice(1, "2024-03-15T10:00:00", [line(1, "Product 1", 5, 2)])),
        invoice_profit(make_invoice(2, "2024-03-15T11:00:00", [line(1, "Product 1", 5, 3)])),
    ]

    (entry,) = rank_top_products(_catalog(1), profits)

    assert entry.sold_quantity == 5.0
    assert entry.revenue == 25.0
