#app/api/routers/carts.py
from fastapi import APIRouter, Depends

from app.api.auth import TokenUser, get_current_user
from app.api.deps import get_cart_service
from app.domain.schemas import (
    AddToCartIn,
    UpdateQuantityIn,
    CartResponse,
    SuccessOut,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
def get_cart(
    user: TokenUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "cart": svc.get_cart(user.id)}


@router.post("/add", response_model=CartResponse)
def add_item(
    payload: AddToCartIn,
    user: TokenUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.add_product(
        user_id=user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return {"success": True, "cart": cart}


@router.put("/update/{entry_id}", response_model=CartResponse)
def update_item(
    entry_id: int,
    payload: UpdateQuantityIn,
    user: TokenUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "cart": svc.update_quantity(user.id, entry_id, payload.quantity)}


@router.delete("/remove/{entry_id}", response_model=CartResponse)
def remove_item(
    entry_id: int,
    user: TokenUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "cart": svc.remove_product(user.id, entry_id)}


@router.delete("/clear", response_model=SuccessOut)
def clear_cart(
    user: TokenUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    svc.clear_cart(user.id)
    return {"success": True}
