# app/services/order_service.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, NamedTuple

from redis.exceptions import RedisError
from requests import RequestException
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, OrderLineModel
from app.domain.errors import ConcurrencyConflict, Forbidden, InvalidState, NotFound, PersistenceFailure
from app.domain.schemas import OrderOut, OrderStatus, PaymentMethod
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.services.lock_service import LockService
from app.services.product_client import ProductClient
from app.services.realtime import ORDER_NEW, ORDER_STATUS
from app.tasks.push import EventDispatcher
from app.utils.settings import TAX_RATE, FREE_SHIPPING_THRESHOLD, SHIPPING_FEE
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderAmounts(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def compute_amounts(lines) -> OrderAmounts:
    """Liczone raz, przy tworzeniu zamowienia. lines: (price, quantity)."""
    subtotal = to_money(sum((price * quantity for price, quantity in lines), Decimal("0")))
    tax = to_money(subtotal * TAX_RATE)
    shipping = Decimal("0.00") if subtotal > FREE_SHIPPING_THRESHOLD else to_money(SHIPPING_FEE)
    return OrderAmounts(subtotal, tax, shipping, subtotal + tax + shipping)


def discounted_total(order: OrderModel, discount: Decimal) -> Decimal:
    # discount <= subtotal sprawdzany wczesniej, wynik nie schodzi ponizej tax + shipping
    return to_money(order.subtotal) + to_money(order.tax) + to_money(order.shipping) - to_money(discount)


def local_day_bounds(now: datetime | None = None):
    """Granice biezacego dnia w czasie lokalnym serwera, zwracane w UTC."""
    now = (now or datetime.now()).astimezone()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "lines": [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price_at_order": line.price_at_order,
            }
            for line in order.lines
        ],
        "subtotal": order.subtotal,
        "tax": order.tax,
        "shipping": order.shipping,
        "discount": order.discount,
        "total": order.total,
        "status": order.status,
        "order_date": order.order_date,
        "delivery_address": order.delivery_address,
        "notes": order.notes,
        "payment_method": order.payment_method,
        "order_action": order.order_action,
    }


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Jedyny zapisujacy status. Przejscia statusow nie sa walidowane -
    admin moze ustawic dowolny znany status.
    """

    def __init__(self, db: Session, lock_service: LockService, events: EventDispatcher, product_client: ProductClient):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.lock_service = lock_service
        self.product_client = product_client
        self.events = events

    def create_order(
        self,
        user_id: int,
        delivery_address: str,
        payment_method: PaymentMethod,
        notes: str | None = None,
        expected_total: Decimal | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Tworzenie zamowienia z koszyka usera.

        1. Blokada checkoutu per user (Redis)
        2. Snapshot koszyka, pusty = InvalidState
        3. Kazda pozycja musi istniec w katalogu i miec stan magazynowy
        4. Oblicza kwoty raz
        5. Zapis zamowienia + czyszczenie koszyka w jednej transakcji
        6. Event order:new (best effort)
        """
        try:
            token = self.lock_service.acquire_checkout_lock(user_id)
        except RedisError as e:
            logger.error(f"Checkout lock for user {user_id} unavailable: {e}")
            raise PersistenceFailure("Checkout is temporarily unavailable, please try again") from e

        if not token:
            raise ConcurrencyConflict("Checkout already in progress")

        try:
            order = self._create_from_cart(user_id, delivery_address, payment_method, notes, expected_total)
        finally:
            self._release_lock(user_id, token)

        logger.info(f"Order {order.id} created for user {user_id}, total {order.total}")

        result = order_to_dict(order)
        self._emit(ORDER_NEW, result)
        return result

    def _release_lock(self, user_id: int, token: str) -> None:
        # lock i tak wygasa po TTL, blad zwolnienia nie cofa zamowienia
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except RedisError as e:
            logger.warning(f"Checkout lock for user {user_id} not released, expires by TTL: {e}")

    def _check_stock(self, items) -> None:
        for item in items:
            try:
                product = self.product_client.fetch_product(item.product_id)
            except RequestException as e:
                logger.error(f"Product service unavailable during checkout: {e}")
                raise PersistenceFailure("Product catalog unavailable, please try again") from e

            if product is None:
                raise InvalidState(f"Product not found: {item.product_id}")

            if product.stock is not None and product.stock < item.quantity:
                raise InvalidState(f"Insufficient stock for product: {product.name}. Available: {product.stock}")

    def _create_from_cart(self, user_id, delivery_address, payment_method, notes, expected_total) -> OrderModel:
        cart = self.cart_repo.get_cart_by_user(user_id)
        items = self.cart_repo.get_cart_items(cart.id) if cart else []

        if not items:
            raise InvalidState("Cannot create an order from an empty cart")

        self._check_stock(items)

        amounts = compute_amounts((i.price, i.quantity) for i in items)

        if expected_total is not None and abs(to_money(expected_total) - amounts.total) > CENT:
            logger.info(f"Total mismatch for user {user_id}: calculated {amounts.total}, received {expected_total}")
            raise InvalidState("Order total mismatch. Please refresh and try again.")

        version = cart.version

        order = OrderModel(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            subtotal=amounts.subtotal,
            tax=amounts.tax,
            shipping=amounts.shipping,
            discount=Decimal("0.00"),
            total=amounts.total,
            order_date=datetime.now(timezone.utc),
            delivery_address=delivery_address,
            notes=notes or "",
            payment_method=PaymentMethod(payment_method).value,
            order_action="none",
            lines=[
                OrderLineModel(
                    product_id=i.product_id,
                    quantity=i.quantity,
                    price_at_order=i.price,
                )
                for i in items
            ],
        )
        self.repo.add_order(order)

        # zamowienie utworzone <=> koszyk wyczyszczony, jeden commit
        self.cart_repo.delete_all_items(cart.id)
        rowcount = self.cart_repo.update_cart_version(
            cart_id=cart.id,
            old_version=version,
            new_data={"version": version + 1, "updated_at": datetime.now(timezone.utc)},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflict("Cart was modified during checkout")

        self.repo.commit()
        return self.repo.refresh(order)

    def get_order(self, order_id: int, user_id: int, is_admin: bool = False) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("Order not found")

        if order.user_id != user_id and not is_admin:
            raise Forbidden("Unauthorized access to order")

        return order_to_dict(order)

    def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders(user_id=user_id)]

    def list_all(self) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders()]

    def update_status(self, order_id: int, status: OrderStatus) -> Dict[str, Any]:
        return self.update_order(order_id, status=status)

    def update_order(
        self,
        order_id: int,
        status: OrderStatus | None = None,
        discount: Decimal | None = None,
        order_action: str | None = None,
    ) -> Dict[str, Any]:
        """Partial update - zmieniaja sie tylko podane pola."""
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("Order not found")

        previous_status = order.status
        values: Dict[str, Any] = {}

        if status is not None:
            values["status"] = OrderStatus(status).value
        if order_action is not None:
            values["order_action"] = order_action
        if discount is not None:
            if to_money(discount) > to_money(order.subtotal):
                raise InvalidState("Discount must be between 0 and subtotal amount")
            # total przeliczany tylko przy zmianie rabatu, z niezmiennych kwot zamowienia
            values["discount"] = to_money(discount)
            values["total"] = discounted_total(order, discount)

        if values:
            self.repo.update_order(order_id, values)
            self.repo.commit()
            self.repo.refresh(order)
            logger.info(f"Order {order_id} updated: {values}")

        result = order_to_dict(order)

        if status is not None and result["status"] != previous_status:
            self._emit(ORDER_STATUS, {"id": order_id, "status": result["status"]})

        return result

    def stats(self) -> Dict[str, Any]:
        day_start, day_end = local_day_bounds()
        total_sales, todays_sales, pending = self.repo.sales_summary(day_start, day_end)

        return {
            "total_sales": to_money(total_sales),
            "todays_sales": to_money(todays_sales),
            "pending_orders": int(pending),
        }

    def _emit(self, event: str, data: Dict[str, Any]) -> None:
        if event == ORDER_NEW:
            data = OrderOut.model_validate(data).model_dump(mode="json", by_alias=True)
        self.events.emit(event, data)
