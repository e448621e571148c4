# app/api/auth.py
"""
Weryfikacja tokenow JWT wydanych przez zewnetrzny IdP.
Serwis tylko sprawdza token, nie wydaje go.
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel

from app.domain.errors import Forbidden, Unauthorized
from app.utils.settings import AUTH_SECRET, JWT_ALGORITHM

security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """User z payloadu tokena."""
    id: int
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, AUTH_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except JWTError:
        raise Unauthorized("Token is not valid")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenUser:
    if not credentials:
        raise Unauthorized("No token, authorization denied")

    payload = decode_token(credentials.credentials)

    # wspiera oba ksztalty: {"user": {...}} i plaski payload
    claims = payload.get("user") or payload
    user_id = claims.get("id") or claims.get("sub")

    try:
        return TokenUser(id=int(user_id), role=claims.get("role", "user"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload: missing user id")


def require_admin(user: TokenUser = Depends(get_current_user)) -> TokenUser:
    if not user.is_admin:
        raise Forbidden("Admin access required")
    return user


def require_self_or_admin(user_id: int, user: TokenUser = Depends(get_current_user)) -> TokenUser:
    if user.id != user_id and not user.is_admin:
        raise Forbidden("Access to another user's notifications denied")
    return user
