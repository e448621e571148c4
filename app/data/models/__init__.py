#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.user import UserModel
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel, OrderLineModel
from app.data.models.notification import NotificationModel, UserNotificationModel

__all__ = [
    "UserModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderLineModel",
    "NotificationModel",
    "UserNotificationModel",
]
