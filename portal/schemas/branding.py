from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class BrandingResponse(BaseModel):
    company_name: str
    logo_url: Optional[str] = None
    primary_color: str
    accent_color: str
    banner_url: Optional[str] = None
    banner_text: Optional[str] = None
    inr_per_point: Decimal
    max_selections_per_user: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BrandingUpdate(BaseModel):
    company_name: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    banner_url: Optional[str] = None
    banner_text: Optional[str] = None
    inr_per_point: Optional[Decimal] = None
    max_selections_per_user: Optional[int] = None
