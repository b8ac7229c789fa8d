from app.models.inventory import DamagedItem, Expense, Product
from app.models.invoice import Invoice

__all__ = [
    "DamagedItem",
    "Expense",
    "Invoice",
    "Product",
]
