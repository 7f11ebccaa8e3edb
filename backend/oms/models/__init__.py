from .tenancy import Merchant
from .auth import User, UserSession
from .inventory import Product, InventoryRecord
from .customers import Customer
from .orders import Order, OrderItem, OrderStatusHistory, OrderPayment

__all__ = [
    'Merchant',
    'User', 'UserSession',
    'Product', 'InventoryRecord',
    'Customer',
    'Order', 'OrderItem', 'OrderStatusHistory', 'OrderPayment',
]
