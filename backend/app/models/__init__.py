from .base import Base
from .product import Product, StockTransaction
from .customer import Customer
from .billing import Bill, BillItem, Invoice, InvoiceItem
from .setting import Setting
