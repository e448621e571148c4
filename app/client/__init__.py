# app/client/__init__.py
from app.client.api import StorefrontApi
from app.client.errors import ApiError, DecodeError, Unauthorized
from app.client.mirror import ClientMirror
from app.client.session import Session

__all__ = ["StorefrontApi", "ApiError", "DecodeError", "Unauthorized", "ClientMirror", "Session"]
