# app/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService
from app.services.product_client import ProductClient
from app.tasks.push import EventDispatcher


def get_product_client() -> ProductClient:
    return ProductClient()


def get_lock_service() -> LockService:
    return LockService()


def get_event_dispatcher() -> EventDispatcher:
    return EventDispatcher()


def get_cart_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
) -> CartService:
    return CartService(db=db, product_client=product_client)


def get_order_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    events: EventDispatcher = Depends(get_event_dispatcher),
    product_client: ProductClient = Depends(get_product_client),
) -> OrderService:
    return OrderService(db=db, lock_service=lock_service, events=events, product_client=product_client)


def get_notification_service(
    db: Session = Depends(get_db),
    events: EventDispatcher = Depends(get_event_dispatcher),
) -> NotificationService:
    return NotificationService(db=db, events=events)
