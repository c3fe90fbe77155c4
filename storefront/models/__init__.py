from storefront.models.database import Base, get_db
from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.order import ORDER_STATUSES, Order, OrderItem

__all__ = ["Base", "get_db", "User", "Product", "Order", "OrderItem", "ORDER_STATUSES"]
