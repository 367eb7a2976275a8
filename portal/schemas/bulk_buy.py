from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from portal.enums.statuses import BulkBuyStatus
from portal.schemas.checkout import DeliveryDetails


class BulkBuyCartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None


class BulkBuyCartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)


class BulkBuyCartItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None

    class Config:
        from_attributes = True


class BulkBuyCheckoutRequest(DeliveryDetails):
    requester_note: Optional[str] = None


class BulkBuyDirectRequest(DeliveryDetails):
    product_id: str
    quantity: int = Field(ge=1)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None
    requester_note: Optional[str] = None


class BulkBuyLineSnapshot(BaseModel):
    product_id: str
    name: str
    sku: str
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class BulkBuyRequestResponse(BaseModel):
    id: str
    request_id: str
    employee_id: str
    status: str
    delivery_method: str
    delivery_address: Optional[str] = None
    items: List[BulkBuyLineSnapshot]
    total_amount: Decimal
    requester_note: Optional[str] = None
    procurement_note: Optional[str] = None
    approved_by_employee_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BulkBuyStatusUpdate(BaseModel):
    status: BulkBuyStatus
    procurement_note: Optional[str] = None


class BulkBuyAccessEntry(BaseModel):
    email: EmailStr
    is_active: bool = True
    department: Optional[str] = None
    designation: Optional[str] = None
    is_procurement: bool = False


class BulkBuyAccessUpsert(BaseModel):
    entries: List[BulkBuyAccessEntry]


class BulkBuyAccessResponse(BaseModel):
    id: str
    email: str
    is_active: bool
    department: Optional[str] = None
    designation: Optional[str] = None
    is_procurement: bool

    class Config:
        from_attributes = True


class BulkBuyEligibility(BaseModel):
    allowed: bool
