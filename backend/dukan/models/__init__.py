from .shop import Base, Shop
from .user import User, StaffDetail
from .license import License
from .product import Product
from .customer import Customer
from .sale import Sale, SaleItem
from .invoice_counter import InvoiceCounter
from .expense import Expense
from .purchase import Purchase, PurchaseItem
from .daily_closing import DailyClosing

__all__ = [
    "Base",
    "Shop",
    "User",
    "StaffDetail",
    "License",
    "Product",
    "Customer",
    "Sale",
    "SaleItem",
    "InvoiceCounter",
    "Expense",
    "Purchase",
    "PurchaseItem",
    "DailyClosing",
]
