# app/client/mirror.py
import threading
from decimal import Decimal
from typing import Callable, List, Optional

from app.client import schemas
from app.client.api import StorefrontApi
from app.client.errors import ApiError, DecodeError, Unauthorized
from app.client.session import Session
from app.domain.schemas import CartOut, OrderOut, OrderStatsOut, UserNotificationOut
from app.services.realtime import NOTIFICATION_NEW, ORDER_NEW, ORDER_STATUS
from app.utils.logging import get_logger

logger = get_logger(__name__)


def empty_cart() -> CartOut:
    return CartOut(items=[], total_items=0, total_price=Decimal("0.00"))


class ClientMirror:
    """
    Lokalna kopia koszyka / zamowien / powiadomien.

    Zasady:
    - kazda udana odpowiedz to pelny stan serwera, lokalny widok podmieniany w calosci
    - brak optymistycznych patchy, wiec przy bledzie nie ma czego cofac:
      widok zostaje w ostatnim stanie z serwera + krotki komunikat, bez retry
    - 401 czysci dotkniety widok + notice; koszyk i powiadomienia wylogowuja sesje
    - mutacje serializowane lockiem (request - await - replace)
    """

    def __init__(
        self,
        api: StorefrontApi,
        session: Session,
        user_id: int | None = None,
        admin: bool = False,
        notify: Callable[[str], None] | None = None,
    ):
        self.api = api
        self.session = session
        self.user_id = user_id
        self.admin = admin
        self.notify = notify or (lambda message: logger.warning(message))
        self._lock = threading.RLock()

        self.cart: CartOut = empty_cart()
        self.orders: List[OrderOut] = []
        self.admin_orders: List[OrderOut] = []
        self.stats: Optional[OrderStatsOut] = None
        self.notifications: List[UserNotificationOut] = []

    # =====================================================
    # helpers
    # =====================================================
    def _call(self, request, failure: str, on_unauthorized=None):
        """Zwraca payload albo None; bledy zamieniane na notice."""
        try:
            return request()
        except Unauthorized:
            if on_unauthorized:
                on_unauthorized()
            return None
        except DecodeError as e:
            logger.error(f"{failure}: {e}")
            self.notify(failure)
            return None
        except ApiError as e:
            logger.warning(f"{failure}: {e}")
            self.notify(e.message if e.status and e.status < 500 else failure)
            return None

    def _decoded(self, request, decoder, failure: str, on_unauthorized=None):
        def call():
            return decoder(request())
        return self._call(call, failure, on_unauthorized)

    def _cart_session_lost(self):
        # sesja stracona = koszyk nieznany, nie trzymamy starych danych
        self.cart = empty_cart()
        self.orders = []
        self.session.logout()

    def _orders_session_lost(self):
        self.cart = empty_cart()
        self.orders = []
        self.admin_orders = []
        self.stats = None
        self.notify("Session expired, please log in again")

    def _notifications_session_lost(self):
        self.notifications = []
        self.session.logout()
        self.notify("Session expired, please log in again")

    # =====================================================
    # cart
    # =====================================================
    @property
    def cart_total(self) -> Decimal:
        return self.cart.total_price

    @property
    def cart_item_count(self) -> int:
        return self.cart.total_items

    def _replace_cart(self, request, failure: str) -> Optional[CartOut]:
        with self._lock:
            resp = self._decoded(
                request,
                lambda payload: schemas.decode(schemas.CartResponse, payload),
                failure,
                self._cart_session_lost,
            )
            if resp is None:
                return None
            self.cart = resp.cart
            return self.cart

    def refresh_cart(self) -> Optional[CartOut]:
        return self._replace_cart(self.api.get_cart, "Failed to load cart")

    def add_to_cart(self, product_id: int, quantity: int = 1) -> Optional[CartOut]:
        return self._replace_cart(lambda: self.api.add_to_cart(product_id, quantity), "Failed to add item to cart")

    def update_quantity(self, entry_id: int, quantity: int) -> Optional[CartOut]:
        return self._replace_cart(lambda: self.api.update_quantity(entry_id, quantity), "Failed to update cart item")

    def remove_from_cart(self, entry_id: int) -> Optional[CartOut]:
        return self._replace_cart(lambda: self.api.remove_from_cart(entry_id), "Failed to remove item from cart")

    def clear_cart(self) -> bool:
        with self._lock:
            resp = self._decoded(
                self.api.clear_cart,
                lambda payload: schemas.decode(schemas.SuccessOut, payload),
                "Failed to clear cart",
                self._cart_session_lost,
            )
            if resp is None:
                return False
            self.cart = empty_cart()
            return True

    # =====================================================
    # orders
    # =====================================================
    def refresh_orders(self) -> List[OrderOut]:
        with self._lock:
            resp = self._decoded(
                self.api.list_orders,
                lambda payload: schemas.decode(schemas.OrderListResponse, payload),
                "Failed to load orders",
                self._orders_session_lost,
            )
            if resp is not None:
                self.orders = resp.orders
            return self.orders

    def create_order(
        self,
        delivery_address: str,
        payment_method: str,
        notes: str | None = None,
        total: Decimal | None = None,
    ) -> Optional[OrderOut]:
        payload = {"deliveryAddress": delivery_address, "paymentMethod": payment_method}
        if notes is not None:
            payload["notes"] = notes
        if total is not None:
            payload["total"] = str(total)

        with self._lock:
            resp = self._decoded(
                lambda: self.api.create_order(payload),
                lambda body: schemas.decode(schemas.OrderResponse, body),
                "Failed to create order",
                lambda: self.notify("Please log in to place an order"),
            )
            if resp is None:
                return None

            order = resp.order
            self.orders = [order] + [o for o in self.orders if o.id != order.id]
            # serwer czysci koszyk w tej samej transakcji co zapis zamowienia
            self.cart = empty_cart()
            return order

    def refresh_admin_orders(self) -> List[OrderOut]:
        with self._lock:
            resp = self._decoded(
                self.api.list_all_orders,
                lambda payload: schemas.decode(schemas.OrderListResponse, payload),
                "Error fetching admin orders",
                self._orders_session_lost,
            )
            if resp is not None:
                self.admin_orders = resp.orders
            return self.admin_orders

    def refresh_stats(self) -> Optional[OrderStatsOut]:
        with self._lock:
            resp = self._decoded(
                self.api.order_stats,
                lambda payload: schemas.decode(schemas.OrderStatsResponse, payload),
                "Failed to load order stats",
                self._orders_session_lost,
            )
            if resp is not None:
                self.stats = resp.stats
            return self.stats

    def _replace_order(self, request, failure: str) -> Optional[OrderOut]:
        with self._lock:
            resp = self._decoded(
                request,
                lambda payload: schemas.decode(schemas.OrderResponse, payload),
                failure,
                self._orders_session_lost,
            )
            if resp is None:
                return None

            order = resp.order
            self.admin_orders = [order if o.id == order.id else o for o in self.admin_orders]
            self.orders = [order if o.id == order.id else o for o in self.orders]

        self.refresh_stats()
        return order

    def update_order_status(self, order_id: int, status: str) -> Optional[OrderOut]:
        return self._replace_order(lambda: self.api.update_order_status(order_id, status), "Failed to update order status")

    def update_order(self, order_id: int, **updates) -> Optional[OrderOut]:
        body = {}
        if "status" in updates:
            body["status"] = updates["status"]
        if "order_action" in updates:
            body["orderAction"] = updates["order_action"]
        if "discount" in updates:
            body["discount"] = str(updates["discount"])
        return self._replace_order(lambda: self.api.update_order(order_id, body), "Failed to update order")

    # =====================================================
    # notifications
    # =====================================================
    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    def refresh_notifications(self) -> List[UserNotificationOut]:
        if self.user_id is None:
            return self.notifications

        with self._lock:
            items = self._decoded(
                lambda: self.api.list_notifications(self.user_id),
                schemas.decode_notifications,
                "Failed to load notifications",
                self._notifications_session_lost,
            )
            if items is not None:
                self.notifications = items
            return self.notifications

    def mark_read(self, notification_id: int) -> bool:
        if self.user_id is None:
            return False

        with self._lock:
            state = self._decoded(
                lambda: self.api.mark_read(self.user_id, notification_id),
                lambda payload: schemas.decode(schemas.ReadStateOut, payload),
                "Failed to mark notification as read",
                self._notifications_session_lost,
            )
            if state is None:
                return False

        # odpowiedz to tylko read-state jednego rekordu, widok odtwarzany w calosci
        self.refresh_notifications()
        return True

    def mark_all_read(self) -> bool:
        if self.user_id is None:
            return False

        with self._lock:
            resp = self._decoded(
                lambda: self.api.mark_all_read(self.user_id),
                lambda payload: schemas.decode(schemas.MarkAllReadOut, payload),
                "Failed to mark all notifications as read",
                self._notifications_session_lost,
            )
            if resp is None:
                return False

        self.refresh_notifications()
        return True

    # =====================================================
    # push (optymalizacja, nie zrodlo prawdy)
    # =====================================================
    def apply_push(self, event: str, data: dict) -> None:
        if event == NOTIFICATION_NEW:
            try:
                notification = schemas.decode(schemas.NotificationOut, data)
            except DecodeError as e:
                logger.warning(f"Ignoring malformed push: {e}")
                return

            with self._lock:
                if any(n.id == notification.id for n in self.notifications):
                    return
                record = UserNotificationOut(**notification.model_dump(), is_read=False, read_at=None)
                self.notifications = [record] + self.notifications

        elif event in (ORDER_NEW, ORDER_STATUS):
            if self.admin:
                self.refresh_admin_orders()
                self.refresh_stats()
            else:
                self.refresh_orders()

        else:
            logger.info(f"Unhandled push event {event}")
