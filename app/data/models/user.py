from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime
from app.data.database import Base

class UserModel(Base):
    """Lokalna kopia usera z IdP; id nadaje IdP, nie baza."""
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    # user | admin
    role = Column(String(20), nullable=False, default="user")
    registered_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
