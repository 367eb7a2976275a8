import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from portal.database.connection import Base


class DomainWhitelist(Base):
    __tablename__ = "domain_whitelist"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    domain = Column(String, unique=True, index=True, nullable=False)  # "company.com"
    is_active = Column(Boolean, default=True)
    auto_create_user = Column(Boolean, default=True)
    default_points = Column(Integer, default=0)
    can_login_without_employee_id = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
