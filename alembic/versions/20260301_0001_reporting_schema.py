"""reporting schema

Revision ID: 20260301_0001
Revises:
Create Date: 2026-03-01 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20260301_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("barcode", sa.String(length=64), nullable=True),
        sa.Column("selling_price", sa.Float(), nullable=False),
        sa.Column("purchase_price", sa.Float(), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index(op.f("ix_products_name"), "products", ["name"], unique=False)
    op.create_index(op.f("ix_products_barcode"), "products", ["barcode"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(length=64), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(length=160), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False),
        sa.Column("items_discount", sa.Float(), nullable=False),
        sa.Column("invoice_discount", sa.Float(), nullable=False),
        sa.Column("discount_percentage", sa.Float(), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(length=32), nullable=False),
        sa.Column("payment_status", sa.String(length=32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("products_data", sa.Text(), nullable=True),
        sa.Column("products", sa.JSON(), nullable=True),
        sa.Column("product_ids", sa.Text(), nullable=True),
        sa.Column("product_names", sa.Text(), nullable=True),
        sa.Column("product_quantities", sa.Text(), nullable=True),
        sa.Column("product_prices", sa.Text(), nullable=True),
        sa.Column("product_purchase_prices", sa.Text(), nullable=True),
        sa.Column("product_discounts", sa.Text(), nullable=True),
        sa.Column("product_totals", sa.Text(), nullable=True),
        sa.Column("product_profits", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoices_id"), "invoices", ["id"], unique=False)
    op.create_index(op.f("ix_invoices_invoice_number"), "invoices", ["invoice_number"], unique=True)
    op.create_index(op.f("ix_invoices_customer_id"), "invoices", ["customer_id"], unique=False)
    op.create_index(op.f("ix_invoices_date"), "invoices", ["date"], unique=False)

    op.create_table(
        "damaged_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("value_loss", sa.Float(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_damaged_items_id"), "damaged_items", ["id"], unique=False)
    op.create_index(op.f("ix_damaged_items_product_id"), "damaged_items", ["product_id"], unique=False)
    op.create_index(op.f("ix_damaged_items_date"), "damaged_items", ["date"], unique=False)

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("details", sa.String(length=255), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expenses_id"), "expenses", ["id"], unique=False)
    op.create_index(op.f("ix_expenses_date"), "expenses", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_expenses_date"), table_name="expenses")
    op.drop_index(op.f("ix_expenses_id"), table_name="expenses")
    op.drop_table("expenses")

    op.drop_index(op.f("ix_damaged_items_date"), table_name="damaged_items")
    op.drop_index(op.f("ix_damaged_items_product_id"), table_name="damaged_items")
    op.drop_index(op.f("ix_damaged_items_id"), table_name="damaged_items")
    op.drop_table("damaged_items")

    op.drop_index(op.f("ix_invoices_date"), table_name="invoices")
    op.drop_index(op.f("ix_invoices_customer_id"), table_name="invoices")
    op.drop_index(op.f("ix_invoices_invoice_number"), table_name="invoices")
    op.drop_index(op.f("ix_invoices_id"), table_name="invoices")
    op.drop_table("invoices")

    op.drop_index(op.f("ix_products_barcode"), table_name="products")
    op.drop_index(op.f("ix_products_name"), table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")
