import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from portal.database.connection import Base


class Branding(Base):
    __tablename__ = "branding"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_name = Column(String, default="TechCorp")
    logo_url = Column(String, nullable=True)
    primary_color = Column(String, default="#1e40af")
    accent_color = Column(String, default="#f97316")
    banner_url = Column(String, nullable=True)
    banner_text = Column(String, nullable=True)

    inr_per_point = Column(Numeric(10, 2), nullable=False, default=1)
    max_selections_per_user = Column(Integer, nullable=False, default=1)  # -1 = unlimited

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
