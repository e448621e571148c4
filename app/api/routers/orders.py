# app/api/routers/orders.py
from fastapi import APIRouter, Depends

from app.api.auth import TokenUser, get_current_user, require_admin
from app.api.deps import get_order_service
from app.domain.schemas import (
    OrderCreate,
    OrderStatusIn,
    OrderUpdateIn,
    OrderResponse,
    OrderListResponse,
    OrderStatsResponse,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/create", response_model=OrderResponse, status_code=201)
def create_order(
    payload: OrderCreate,
    user: TokenUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z koszyka usera i czysci koszyk.
    Event order:new wysylany asynchronicznie.
    """
    order = svc.create_order(
        user_id=user.id,
        delivery_address=payload.delivery_address,
        payment_method=payload.payment_method,
        notes=payload.notes,
        expected_total=payload.total,
    )
    return {"success": True, "order": order}


@router.get("", response_model=OrderListResponse)
def list_orders(
    user: TokenUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "orders": svc.list_for_user(user.id)}


# /admin/* i /stats/* przed /{order_id}
@router.get("/admin/all", response_model=OrderListResponse)
def list_all_orders(
    _: TokenUser = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "orders": svc.list_all()}


@router.get("/stats/summary", response_model=OrderStatsResponse)
def order_stats(
    _: TokenUser = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "stats": svc.stats()}


@router.api_route("/admin/{order_id}/status", methods=["PATCH", "PUT"], response_model=OrderResponse)
@router.api_route("/{order_id}/status", methods=["PATCH", "PUT"], response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    _: TokenUser = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "order": svc.update_status(order_id, payload.status)}


@router.patch("/admin/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: int,
    payload: OrderUpdateIn,
    _: TokenUser = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    """Partial update: status, orderAction, discount (przelicza total)."""
    order = svc.update_order(
        order_id,
        status=payload.status,
        discount=payload.discount,
        order_action=payload.order_action,
    )
    return {"success": True, "order": order}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    user: TokenUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "order": svc.get_order(order_id, user.id, is_admin=user.is_admin)}
