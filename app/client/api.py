# app/client/api.py
from typing import Any

import requests
from requests import RequestException

from app.client.errors import ApiError, Unauthorized
from app.client.session import Session
from app.utils.settings import CLIENT_API_URL, CLIENT_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class StorefrontApi:
    """
    Cienki wrapper na requests. Bez retry - o ponowieniu decyduje user.
    Token dokladany z jawnej sesji przy kazdym requescie.
    """

    def __init__(self, session: Session, base_url: str | None = None, timeout: float | None = None):
        self.session = session
        self.base_url = (base_url or CLIENT_API_URL).rstrip("/")
        self.timeout = timeout or CLIENT_TIMEOUT_SECONDS
        self.http = requests.Session()

    def request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.info(f"{method} {url}")

        try:
            resp = self.http.request(
                method,
                url,
                json=json,
                headers=self.session.authorization_header(),
                timeout=self.timeout,
            )
        except RequestException as e:
            raise ApiError(None, f"Request failed: {e}") from e

        if resp.status_code == 401:
            raise Unauthorized(self._message(resp))
        if not resp.ok:
            raise ApiError(resp.status_code, self._message(resp))

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, "Response is not JSON") from e

    @staticmethod
    def _message(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.reason or "Request failed"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("detail") or resp.reason)
        return resp.reason or "Request failed"

    # cart
    def get_cart(self):
        return self.request("GET", "/cart")

    def add_to_cart(self, product_id: int, quantity: int = 1):
        return self.request("POST", "/cart/add", {"productId": product_id, "quantity": quantity})

    def update_quantity(self, entry_id: int, quantity: int):
        return self.request("PUT", f"/cart/update/{entry_id}", {"quantity": quantity})

    def remove_from_cart(self, entry_id: int):
        return self.request("DELETE", f"/cart/remove/{entry_id}")

    def clear_cart(self):
        return self.request("DELETE", "/cart/clear")

    # orders
    def create_order(self, payload: dict):
        return self.request("POST", "/orders/create", payload)

    def list_orders(self):
        return self.request("GET", "/orders")

    def list_all_orders(self):
        return self.request("GET", "/orders/admin/all")

    def update_order_status(self, order_id: int, status: str):
        return self.request("PATCH", f"/orders/admin/{order_id}/status", {"status": status})

    def update_order(self, order_id: int, updates: dict):
        return self.request("PATCH", f"/orders/admin/{order_id}", updates)

    def order_stats(self):
        return self.request("GET", "/orders/stats/summary")

    # notifications
    def list_notifications(self, user_id: int):
        return self.request("GET", f"/notifications/{user_id}")

    def mark_read(self, user_id: int, notification_id: int):
        return self.request("POST", f"/notifications/{user_id}/read/{notification_id}")

    def mark_all_read(self, user_id: int):
        return self.request("POST", f"/notifications/{user_id}/read-all")
