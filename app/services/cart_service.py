from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any
from requests import RequestException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import ConcurrencyConflict, InvalidState, NotFound, PersistenceFailure
from app.repos.cart_repo import CartRepo
from app.services.product_client import ProductClient
from app.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt

    Kazda komenda zwraca CALY koszyk, nie delte.
    """

    def __init__(self, db: Session, product_client: ProductClient):
        self.repo = CartRepo(db)
        self.product_client = product_client

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        items = self.repo.get_cart_items(cart.id) if cart else []

        #total z price snapshotow, nie z aktualnego katalogu
        total_price = sum((i.price * i.quantity for i in items), Decimal("0.00"))
        total_items = sum(i.quantity for i in items)

        return {
            "items": [
                {
                    "id": i.id,
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "price": i.price,
                    "product": self._live_product(i.product_id),
                }
                for i in items
            ],
            "total_items": total_items,
            "total_price": total_price,
        }

    def _live_product(self, product_id: int):
        # dane produktu tylko do wyswietlenia, brak katalogu nie blokuje koszyka
        try:
            return self.product_client.fetch_product(product_id, retry=False)
        except (RequestException, PersistenceFailure) as e:
            logger.warning(f"Product {product_id} unavailable for cart display: {e}")
            return None

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidState("Quantity must be at least 1")

        logger.info(f"Pobieranie danych produktu {product_id} z product-service")
        product = self.product_client.fetch_product(product_id)
        if product is None:
            raise NotFound("Product not found")

        cart = self.repo.get_or_create_cart(user_id)
        version = cart.version

        try:
            # istniejaca pozycja: quantity + n, price snapshot zostaje z pierwszego dodania
            rowcount = self.repo.increment_item(cart.id, product_id, quantity)

            if rowcount == 0:
                logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id} po cenie {product.price}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                        price=product.price,
                    )
                )
            else:
                logger.info(f"Produkt {product_id} juz jest w koszyku {cart.id}, +{quantity}")

            self._bump_version(cart, version)
            self.repo.commit()

        except IntegrityError as e:
            # ta sama pozycja wstawiona rownolegle (u_cart_product)
            self.repo.rollback()
            logger.error(f"Blad podczas dodawania produktu: {e}")
            raise ConcurrencyConflict("Cart was modified by another request") from e

        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, entry_id: int, quantity: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        item = self.repo.get_cart_item(cart.id, entry_id) if cart else None

        if not item:
            raise NotFound("Item not found in cart")

        version = cart.version

        if quantity <= 0:
            logger.info(f"Quantity {quantity} dla pozycji {entry_id} - usuwam z koszyka {cart.id}")
            rowcount = self.repo.delete_cart_item(cart.id, entry_id)
        else:
            rowcount = self.repo.set_item_quantity(cart.id, entry_id, quantity)

        if rowcount == 0:
            #pozycja zniknela miedzy odczytem a update
            self.repo.rollback()
            raise NotFound("Item not found in cart")

        self._bump_version(cart, version)
        self.repo.commit()

        logger.info(f"Pozycja {entry_id} w koszyku {cart.id}: quantity={max(quantity, 0)}")

        return self.get_cart(user_id)

    def remove_product(self, user_id: int, entry_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            return self.get_cart(user_id)

        version = cart.version

        logger.info(f"Usuwanie pozycji {entry_id} z koszyka {cart.id}")

        #idempotentne - brak pozycji to nie blad
        if self.repo.delete_cart_item(cart.id, entry_id):
            self._bump_version(cart, version)
            self.repo.commit()
        else:
            self.repo.rollback()

        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> None:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            return

        version = cart.version
        removed = self.repo.delete_all_items(cart.id)
        self._bump_version(cart, version)
        self.repo.commit()

        logger.info(f"Koszyk {cart.id} wyczyszczony, usunieto {removed} pozycji")

    def _bump_version(self, cart: CartModel, version: int) -> None:
        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 1 and version 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=version,
            new_data={
                "version": version + 1,
                "updated_at": datetime.now(timezone.utc),
            },
        )

        if rowcount == 0: #jesli tj 0 rows affected
            self.repo.rollback()
            raise ConcurrencyConflict(
                "Cart was modified by another request"
            )
