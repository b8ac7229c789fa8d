from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class Invoice(Base):
    """Persisted sales invoice.

    Line items live in one of three legacy encodings: ``products_data`` (JSON
    text), ``products`` (a JSON column holding the list as-is), or the
    ``product_*`` comma-joined columns written by the newer invoice editor.
    """

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    invoice_number: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    customer_id: Mapped[int | None] = mapped_column(nullable=True, index=True)
    customer_name: Mapped[str | None] = mapped_column(String(160), nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False)
    items_discount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    invoice_discount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    total: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    products_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    products: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    product_ids: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_names: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_quantities: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_prices: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_purchase_prices: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_discounts: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_totals: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_profits: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
