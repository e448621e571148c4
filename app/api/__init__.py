# app/api/__init__.py
from fastapi import APIRouter
from app.api.routers import health, users, carts, orders, notifications

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(carts.router)
api_router.include_router(orders.router)
api_router.include_router(notifications.router)
