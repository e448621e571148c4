"""
HTTP-level tests: auth guards, wire format (camelCase, Decimal as string)
and the error body shape.
"""
from decimal import Decimal

import pytest
from jose import jwt


def add(client, headers, product_id=1, quantity=2):
    return client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)


def place_order(client, headers, **extra):
    body = {"deliveryAddress": "1 Main St", "paymentMethod": "card", **extra}
    return client.post("/orders/create", json=body, headers=headers)


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestAuth:

    @pytest.mark.parametrize("method,path", [
        ("get", "/cart"),
        ("delete", "/cart/clear"),
        ("get", "/orders"),
        ("get", "/notifications/1"),
    ])
    def test_missing_token(self, client, method, path):
        assert getattr(client, method)(path).status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/cart", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Token is not valid"}

    def test_token_signed_with_other_secret(self, client):
        token = jwt.encode({"id": 1}, "wrong-secret", algorithm="HS256")
        resp = client.get("/cart", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401

    def test_nested_user_payload_accepted(self, client):
        token = jwt.encode({"user": {"id": 1, "role": "user"}}, "test-secret", algorithm="HS256")
        resp = client.get("/cart", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200

    @pytest.mark.parametrize("method,path", [
        ("get", "/orders/admin/all"),
        ("get", "/orders/stats/summary"),
        ("patch", "/orders/admin/1"),
    ])
    def test_admin_routes_forbidden_for_users(self, client, user_headers, method, path):
        kwargs = {"json": {}} if method == "patch" else {}

        resp = getattr(client, method)(path, headers=user_headers, **kwargs)

        assert resp.status_code == 403


class TestCartApi:

    def test_empty_cart(self, client, user_headers):
        resp = client.get("/cart", headers=user_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["cart"]["items"] == []
        assert body["cart"]["totalItems"] == 0

    def test_add_returns_whole_cart_in_camel_case(self, client, user_headers):
        resp = add(client, user_headers)

        assert resp.status_code == 200
        cart = resp.json()["cart"]
        [item] = cart["items"]
        assert item["productId"] == 1
        assert item["quantity"] == 2
        assert Decimal(item["price"]) == Decimal("5.00")
        assert item["product"]["name"] == "Margherita Pizza"
        assert cart["totalItems"] == 2
        assert Decimal(cart["totalPrice"]) == Decimal("10.00")

    def test_unknown_product_error_body(self, client, user_headers):
        resp = add(client, user_headers, product_id=404)

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Product not found"}

    def test_zero_quantity_is_validation_error(self, client, user_headers):
        assert add(client, user_headers, quantity=0).status_code == 422

    def test_update_and_remove(self, client, user_headers):
        entry_id = add(client, user_headers).json()["cart"]["items"][0]["id"]

        resp = client.put(f"/cart/update/{entry_id}", json={"quantity": 7}, headers=user_headers)
        assert resp.json()["cart"]["items"][0]["quantity"] == 7

        resp = client.delete(f"/cart/remove/{entry_id}", headers=user_headers)
        assert resp.json()["cart"]["items"] == []

    def test_update_unknown_entry(self, client, user_headers):
        resp = client.put("/cart/update/999", json={"quantity": 1}, headers=user_headers)

        assert resp.status_code == 404
        assert resp.json()["success"] is False

    def test_clear(self, client, user_headers):
        add(client, user_headers)

        resp = client.delete("/cart/clear", headers=user_headers)

        assert resp.json() == {"success": True}
        assert client.get("/cart", headers=user_headers).json()["cart"]["items"] == []


class TestOrdersApi:

    def test_empty_cart_checkout(self, client, user_headers):
        resp = place_order(client, user_headers)

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_checkout_creates_order_and_empties_cart(self, client, user_headers):
        add(client, user_headers)

        resp = place_order(client, user_headers, notes="no onions")

        assert resp.status_code == 201
        order = resp.json()["order"]
        assert order["userId"] == 1
        assert order["status"] == "pending"
        assert order["paymentMethod"] == "card"
        assert order["orderAction"] == "none"
        assert Decimal(order["total"]) == Decimal("16.79")
        assert order["lines"][0]["productId"] == 1
        assert client.get("/cart", headers=user_headers).json()["cart"]["items"] == []

    def test_checkout_total_mismatch(self, client, user_headers):
        add(client, user_headers)

        resp = place_order(client, user_headers, total="12.00")

        assert resp.status_code == 400
        assert "mismatch" in resp.json()["message"]

    def test_unknown_payment_method(self, client, user_headers):
        add(client, user_headers)

        resp = client.post(
            "/orders/create",
            json={"deliveryAddress": "1 Main St", "paymentMethod": "barter"},
            headers=user_headers,
        )

        assert resp.status_code == 422

    def test_insufficient_stock(self, client, user_headers, product_client):
        add(client, user_headers, product_id=2, quantity=3)
        product_client.products[2]["stock"] = 1

        resp = place_order(client, user_headers)

        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "message": "Insufficient stock for product: Caesar Salad. Available: 1",
        }

    def test_lock_store_down_keeps_error_body(self, client, user_headers, lock_service):
        add(client, user_headers)
        lock_service.redis_down = True

        resp = place_order(client, user_headers)

        assert resp.status_code == 500
        assert resp.json()["success"] is False

    def test_checkout_in_progress(self, client, user_headers, lock_service):
        add(client, user_headers)
        lock_service.held[1] = "other"

        assert place_order(client, user_headers).status_code == 409

    def test_list_own_orders(self, client, user_headers, other_user_headers):
        add(client, user_headers)
        place_order(client, user_headers)

        assert len(client.get("/orders", headers=user_headers).json()["orders"]) == 1
        assert client.get("/orders", headers=other_user_headers).json()["orders"] == []

    def test_get_order_by_id(self, client, user_headers, other_user_headers, admin_headers):
        add(client, user_headers)
        order_id = place_order(client, user_headers).json()["order"]["id"]

        assert client.get(f"/orders/{order_id}", headers=user_headers).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=other_user_headers).status_code == 403
        assert client.get(f"/orders/{order_id}", headers=admin_headers).status_code == 200
        assert client.get("/orders/999", headers=user_headers).status_code == 404

    @pytest.mark.parametrize("method", ["patch", "put"])
    @pytest.mark.parametrize("path", ["/orders/admin/{id}/status", "/orders/{id}/status"])
    def test_admin_updates_status(self, client, make_order, admin_headers, method, path):
        order = make_order(10)

        resp = getattr(client, method)(path.format(id=order.id), json={"status": "out-for-delivery"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["order"]["status"] == "out-for-delivery"

    def test_user_cannot_update_status(self, client, make_order, user_headers):
        order = make_order(10)

        resp = client.patch(f"/orders/admin/{order.id}/status", json={"status": "delivered"}, headers=user_headers)

        assert resp.status_code == 403

    def test_invalid_status(self, client, make_order, admin_headers):
        order = make_order(10)

        resp = client.patch(f"/orders/admin/{order.id}/status", json={"status": "lost"}, headers=admin_headers)

        assert resp.status_code == 422

    def test_status_of_missing_order(self, client, admin_headers):
        resp = client.patch("/orders/admin/999/status", json={"status": "ready"}, headers=admin_headers)

        assert resp.status_code == 404

    def test_partial_update_with_discount(self, client, make_order, admin_headers):
        order = make_order(30)

        resp = client.patch(
            f"/orders/admin/{order.id}",
            json={"discount": "5.50", "orderAction": "refund-partial"},
            headers=admin_headers,
        )

        body = resp.json()["order"]
        assert Decimal(body["discount"]) == Decimal("5.50")
        assert Decimal(body["total"]) == Decimal("24.50")
        assert body["orderAction"] == "refund-partial"
        assert body["status"] == "pending"

    def test_discount_above_subtotal_rejected(self, client, make_order, admin_headers):
        order = make_order(30)

        resp = client.patch(f"/orders/admin/{order.id}", json={"discount": "30.01"}, headers=admin_headers)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Discount must be between 0 and subtotal amount"

    def test_negative_discount_rejected(self, client, make_order, admin_headers):
        order = make_order(30)

        resp = client.patch(f"/orders/admin/{order.id}", json={"discount": "-1"}, headers=admin_headers)

        assert resp.status_code == 422

    def test_admin_list_and_stats(self, client, make_order, admin_headers):
        make_order(10, user_id=1)
        make_order(20, user_id=2, status="cancelled")

        orders = client.get("/orders/admin/all", headers=admin_headers).json()["orders"]
        stats = client.get("/orders/stats/summary", headers=admin_headers).json()["stats"]

        assert len(orders) == 2
        assert set(stats) == {"totalSales", "todaysSales", "pendingOrders"}
        assert Decimal(stats["totalSales"]) == Decimal("10.00")
        assert Decimal(stats["todaysSales"]) == Decimal("10.00")
        assert stats["pendingOrders"] == 1


class TestNotificationsApi:

    def send(self, client, headers, **body):
        payload = {"title": "Hello", "message": "Store opens at 9", **body}
        return client.post("/notifications/admin/send", json=payload, headers=headers)

    def test_only_admin_can_send(self, client, user_headers):
        assert self.send(client, user_headers).status_code == 403

    def test_send_validates_length(self, client, admin_headers):
        assert self.send(client, admin_headers, title="x" * 101).status_code == 422

    def test_send_and_list(self, client, admin_headers, user_headers, events):
        resp = self.send(client, admin_headers, type="promotion")

        assert resp.status_code == 201
        created = resp.json()["notification"]
        assert created["createdBy"] == 99

        [item] = client.get("/notifications/1", headers=user_headers).json()
        assert item["id"] == created["id"]
        assert item["type"] == "promotion"
        assert item["isRead"] is False
        assert item["readAt"] is None
        assert len(events.named("notification:new")) == 1

    def test_mark_read(self, client, admin_headers, user_headers):
        notification_id = self.send(client, admin_headers).json()["notification"]["id"]

        resp = client.post(f"/notifications/1/read/{notification_id}", headers=user_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["notificationId"] == notification_id
        assert body["isRead"] is True
        assert body["readAt"] is not None

    def test_mark_read_unknown(self, client, user_headers):
        assert client.post("/notifications/1/read/999", headers=user_headers).status_code == 404

    def test_mark_all_read(self, client, admin_headers, user_headers):
        self.send(client, admin_headers)
        self.send(client, admin_headers, title="Second")

        resp = client.post("/notifications/1/read-all", headers=user_headers)

        assert resp.json() == {"success": True, "updatedCount": 2}
        assert all(n["isRead"] for n in client.get("/notifications/1", headers=user_headers).json())

    def test_other_users_notifications_forbidden(self, client, user_headers):
        assert client.get("/notifications/2", headers=user_headers).status_code == 403
        assert client.post("/notifications/2/read-all", headers=user_headers).status_code == 403

    def test_admin_can_read_any_user(self, client, admin_headers):
        assert client.get("/notifications/2", headers=admin_headers).status_code == 200


class TestUsersApi:

    def test_register_and_get(self, client, user_headers):
        resp = client.post("/users", json={"id": 1, "name": "Ann"}, headers=user_headers)

        assert resp.status_code == 200
        assert resp.json() == {"id": 1, "name": "Ann", "role": "user"}
        assert client.get("/users/1", headers=user_headers).json()["name"] == "Ann"

    def test_register_is_idempotent(self, client, user_headers):
        client.post("/users", json={"id": 1, "name": "Ann"}, headers=user_headers)

        resp = client.post("/users", json={"id": 1, "name": "Someone else"}, headers=user_headers)

        assert resp.json()["name"] == "Ann"

    def test_role_taken_from_token(self, client, headers_for):
        resp = client.post("/users", json={"id": 7, "name": "Boss"}, headers=headers_for(7, role="admin"))

        assert resp.json()["role"] == "admin"

    def test_registering_someone_else_never_grants_admin(self, client, headers_for):
        resp = client.post("/users", json={"id": 8, "name": "Eve"}, headers=headers_for(7, role="admin"))

        assert resp.json()["role"] == "user"

    def test_unknown_user(self, client, user_headers):
        resp = client.get("/users/42", headers=user_headers)

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "User not found"}
