# app/client/schemas.py
"""Dekodowanie odpowiedzi serwera do typow, bez domyslnych wartosci dla kwot."""
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.client.errors import DecodeError
from app.domain.schemas import (
    CartResponse,
    OrderResponse,
    OrderListResponse,
    OrderStatsResponse,
    NotificationOut,
    UserNotificationOut,
    ReadStateOut,
    MarkAllReadOut,
    SuccessOut,
)

T = TypeVar("T", bound=BaseModel)


class NotificationList(BaseModel):
    items: List[UserNotificationOut]


def decode(model: Type[T], payload) -> T:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise DecodeError(f"Malformed {model.__name__} response: {e.error_count()} error(s)") from e


def decode_notifications(payload) -> List[UserNotificationOut]:
    return decode(NotificationList, {"items": payload}).items


__all__ = [
    "decode",
    "decode_notifications",
    "CartResponse",
    "OrderResponse",
    "OrderListResponse",
    "OrderStatsResponse",
    "NotificationOut",
    "UserNotificationOut",
    "ReadStateOut",
    "MarkAllReadOut",
    "SuccessOut",
]
