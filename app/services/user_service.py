from sqlalchemy.orm import Session
from app.repos.user_repo import UserRepo
from app.domain.errors import NotFound
from app.domain.schemas import UserCreate, UserRead
from app.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Lokalna rejestracja userow wydanych przez zewnetrzny IdP."""

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register_user(self, payload: UserCreate, role: str = "user") -> UserRead:
        #idempotentne - ponowna rejestracja zwraca istniejacego usera
        user = self.repo.get_or_create_user(payload.id, payload.name.strip(), role)
        logger.info(f"User {user.id} registered with role {user.role}")
        return UserRead.model_validate(user)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return UserRead.model_validate(user)
