# app/repos/order_repo.py
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select, update, func, case, and_
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita - commit razem z czyszczeniem koszyka
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders(self, user_id: int | None = None) -> List[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.order_date.desc(), OrderModel.id.desc())
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())

    def update_order(self, order_id: int, values: Dict[str, Any]) -> int:
        result = self.db.execute(
            update(OrderModel).where(OrderModel.id == order_id).values(**values)
        )
        return result.rowcount

    def sales_summary(self, day_start: datetime, day_end: datetime):
        """Jeden SELECT dla wszystkich trzech metryk."""
        not_cancelled = OrderModel.status != "cancelled"
        today = and_(
            not_cancelled,
            OrderModel.order_date >= day_start,
            OrderModel.order_date < day_end,
        )

        stmt = select(
            func.coalesce(func.sum(case((not_cancelled, OrderModel.total), else_=0)), 0),
            func.coalesce(func.sum(case((today, OrderModel.total), else_=0)), 0),
            func.count(case((OrderModel.status == "pending", 1))),
        )
        return self.db.execute(stmt).one()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
