import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text

from portal.database.connection import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class BulkBuyAccess(Base):
    __tablename__ = "bulk_buy_access"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True)
    department = Column(String, nullable=True)
    designation = Column(String, nullable=True)
    is_procurement = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BulkBuyCartItem(Base):
    __tablename__ = "bulk_buy_cart_items"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    product_id = Column(String, ForeignKey("products.id"), nullable=False)
    selected_color = Column(String, nullable=True)
    selected_size = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    campaign_id = Column(String, ForeignKey("campaigns.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class BulkBuyRequest(Base):
    __tablename__ = "bulk_buy_requests"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    # display id, e.g. BBR-2026-0042
    request_id = Column(String, index=True, nullable=False)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending_approval", index=True)
    delivery_method = Column(String, default="office")
    delivery_address = Column(Text, nullable=True)

    # frozen at submission, never re-read from products
    items = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)

    requester_note = Column(Text, nullable=True)
    procurement_note = Column(Text, nullable=True)
    approved_by_employee_id = Column(String, nullable=True)
    approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
