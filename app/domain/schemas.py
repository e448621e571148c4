# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Wspolna baza: camelCase na wire, snake_case w Pythonie."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    PAYPAL = "paypal"
    UPI = "upi"


class NotificationType(str, Enum):
    ORDER = "order"
    DELIVERY = "delivery"
    DELIVERED = "delivered"
    PROMOTION = "promotion"
    ANNOUNCEMENT = "announcement"
    ALERT = "alert"


# =====================================================
# Cart
# =====================================================
class AddToCartIn(ApiModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)


class UpdateQuantityIn(ApiModel):
    # <= 0 oznacza usuniecie pozycji
    quantity: int


class ProductOut(ApiModel):
    id: int
    name: str
    price: Decimal
    # None = katalog nie sledzi stanu magazynu
    stock: Optional[int] = None
    description: Optional[str] = None
    image: Optional[str] = None


class CartEntryOut(ApiModel):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    product: Optional[ProductOut] = None


class CartOut(ApiModel):
    items: List[CartEntryOut]
    total_items: int
    total_price: Decimal


class CartResponse(ApiModel):
    success: bool = True
    cart: CartOut


class SuccessOut(ApiModel):
    success: bool = True


# =====================================================
# Orders
# =====================================================
class OrderCreate(ApiModel):
    """Schema dla tworzenia zamowienia z koszyka usera."""

    delivery_address: str = Field(..., min_length=1)
    payment_method: PaymentMethod
    notes: Optional[str] = None
    # total widziany przez klienta, opcjonalna weryfikacja
    total: Optional[Decimal] = None


class OrderStatusIn(ApiModel):
    status: OrderStatus


class OrderUpdateIn(ApiModel):
    status: Optional[OrderStatus] = None
    order_action: Optional[str] = Field(None, max_length=64)
    discount: Optional[Decimal] = Field(None, ge=0)


class OrderLineOut(ApiModel):
    product_id: int
    quantity: int
    price_at_order: Decimal


class OrderOut(ApiModel):
    id: int
    user_id: int
    lines: List[OrderLineOut]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal
    status: OrderStatus
    order_date: datetime
    delivery_address: str
    notes: str
    payment_method: PaymentMethod
    order_action: str


class OrderResponse(ApiModel):
    success: bool = True
    order: OrderOut


class OrderListResponse(ApiModel):
    success: bool = True
    orders: List[OrderOut]


class OrderStatsOut(ApiModel):
    total_sales: Decimal
    todays_sales: Decimal
    pending_orders: int


class OrderStatsResponse(ApiModel):
    success: bool = True
    stats: OrderStatsOut


# =====================================================
# Notifications
# =====================================================
class NotificationCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=500)
    type: NotificationType = NotificationType.ANNOUNCEMENT


class NotificationOut(ApiModel):
    id: int
    title: str
    message: str
    type: NotificationType
    created_by: Optional[int] = None
    created_at: datetime


class NotificationResponse(ApiModel):
    success: bool = True
    notification: NotificationOut


class UserNotificationOut(NotificationOut):
    is_read: bool
    read_at: Optional[datetime] = None


class ReadStateOut(ApiModel):
    notification_id: int
    user_id: int
    is_read: bool
    read_at: Optional[datetime] = None


class MarkAllReadOut(ApiModel):
    success: bool = True
    updated_count: int


# =====================================================
# Users
# =====================================================
class UserCreate(ApiModel):
    """Schema dla rejestracji uzytkownika (id z zewnetrznego IdP)."""

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=100)


class UserRead(ApiModel):
    id: int
    name: str
    role: str
