import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Numeric, String, Text

from portal.database.connection import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    name = Column(String, nullable=False)
    sku = Column(String, unique=True, index=True, nullable=False)

    base_price = Column(Numeric(10, 2), nullable=False)
    # normalized slabs: [{"min_qty": 1, "max_qty": 9, "price": "100"}, ...]
    price_slabs = Column(JSON, default=list)

    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    bulk_buy = Column(Boolean, nullable=False, default=False)

    images = Column(JSON, default=list)
    colors = Column(JSON, default=list)
    sizes = Column(JSON, nullable=True)  # {"unit": "EU", "values": ["40", "41"]}
    category_ids = Column(JSON, default=list)
    specifications = Column(Text, default="")
    brand = Column(String, default="")
    gst = Column(String, default="0")

    # bumped on every stock write; checkout commits are guarded by it
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
