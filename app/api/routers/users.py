from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.auth import TokenUser, get_current_user
from app.data.database import get_db
from app.services.user_service import UserService
from app.domain.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("", response_model=UserRead)
def register_user(payload: UserCreate, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    service = UserService(db)
    #rola z tokena, nie z body
    return service.register_user(payload, role=user.role if user.id == payload.id else "user")

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, _: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    service = UserService(db)
    return service.get_user(user_id)
