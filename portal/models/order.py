import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String

from portal.database.connection import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    product_id = Column(String, ForeignKey("products.id"), nullable=False)
    selected_color = Column(String, nullable=True)
    selected_size = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    campaign_id = Column(String, ForeignKey("campaigns.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    # display id, e.g. ORD-2026-007; not unique, `id` is the real key
    order_id = Column(String, index=True, nullable=False)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    product_id = Column(String, ForeignKey("products.id"), nullable=False)
    selected_color = Column(String, nullable=True)
    selected_size = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    status = Column(String, default="confirmed", index=True)
    order_date = Column(DateTime, default=datetime.utcnow, index=True)
    campaign_id = Column(String, ForeignKey("campaigns.id"), nullable=True, index=True)
    # used_points, unit_price, delivery_method, delivery_address,
    # copay_inr, payment_id, gateway_order_id
    order_metadata = Column("metadata", JSON, nullable=True)
    # gateway merchant transaction id for co-pay orders
    payment_reference = Column(String, nullable=True, index=True)


class PaymentIntent(Base):
    """A co-pay gateway transaction and the employee who started it."""

    __tablename__ = "payment_intents"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    merchant_transaction_id = Column(String, unique=True, index=True, nullable=False)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    copay_inr = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
