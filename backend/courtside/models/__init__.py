from .auth import User, SessionToken
from .catalog import ProductCategory, MenuCategory, Product, Menu
from .venue import Table, Court
from .ledger import Transaction, TransactionItem, ProductSellRecord, ProductRentRecord, DocumentSequence
from .bookings import Booking
from .orders import OrderRequest, OrderRequestItem
from .inventory import Inventory, InventoryAdjustment
from .notifications import Notification

__all__ = [
    'User', 'SessionToken',
    'ProductCategory', 'MenuCategory', 'Product', 'Menu',
    'Table', 'Court',
    'Transaction', 'TransactionItem', 'ProductSellRecord', 'ProductRentRecord', 'DocumentSequence',
    'Booking',
    'OrderRequest', 'OrderRequestItem',
    'Inventory', 'InventoryAdjustment',
    'Notification',
]
