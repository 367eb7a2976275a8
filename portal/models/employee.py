import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from portal.database.connection import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    employee_code = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=True)

    points = Column(Integer, nullable=False, default=0)
    bulk_buy_allowed = Column(Boolean, nullable=False, default=False)
    role = Column(String, nullable=False, default="user")  # user | admin | procurement

    login_attempts = Column(Integer, default=0)
    is_locked = Column(Boolean, default=False)

    # bumped on every points write; checkout commits are guarded by it
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
