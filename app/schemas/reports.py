from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportSummaryOut(_CamelModel):
    total_sales: float = 0.0
    total_profit: float = 0.0
    total_damages: float = 0.0
    sales_count: int = 0
    previous_total_sales: float = 0.0
    previous_total_profit: float = 0.0
    previous_total_damages: float = 0.0
    previous_sales_count: int = 0


class ChartPointOut(_CamelModel):
    name: str
    revenue: float
    profit: float


class TopProductOut(_CamelModel):
    id: int | str
    name: str
    sold_quantity: float
    revenue: float
    profit: float


class DetailedReportOut(_CamelModel):
    id: int | str | None
    date: str
    type: Literal["sale", "damage", "expense"]
    amount: float
    details: str
    profit: float | None = None
    customer_name: str | None = None
    payment_status: str | None = None
    product_name: str | None = None
    quantity: float | None = None
    expense_type: str | None = None


class ReportOut(_CamelModel):
    summary: ReportSummaryOut
    chart_data: list[ChartPointOut]
    top_products: list[TopProductOut]
    detailed_reports: list[DetailedReportOut]
