from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from portal.enums.statuses import OrderStatus


class OrderResponse(BaseModel):
    id: str
    order_id: str
    employee_id: str
    product_id: str
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    quantity: int
    status: str
    order_date: datetime
    campaign_id: Optional[str] = None
    order_metadata: Optional[Dict[str, Any]] = None
    payment_reference: Optional[str] = None

    class Config:
        from_attributes = True


class OrderAmendment(BaseModel):
    status: Optional[OrderStatus] = None
    metadata: Optional[Dict[str, Any]] = None
