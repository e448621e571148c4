# app/repos/user_repo.py
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.id == user_id)
        ).scalar_one_or_none()

    def get_or_create_user(self, user_id: int, name: str, role: str) -> UserModel:
        user = self.get_user(user_id)
        if user:
            return user

        try:
            user = UserModel(id=user_id, name=name, role=role)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            #ten sam id zarejestrowany rownolegle
            self.db.rollback()
            return self.get_user(user_id)
