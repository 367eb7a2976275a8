from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class CampaignBase(BaseModel):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_products_per_user: Optional[int] = Field(default=None, ge=0)


class CampaignCreate(CampaignBase):
    product_ids: List[str] = []


class CampaignUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_products_per_user: Optional[int] = Field(default=None, ge=0)


class CampaignResponse(CampaignBase):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True


class CampaignProductLink(BaseModel):
    product_ids: List[str]


class WhitelistEntryCreate(BaseModel):
    email: EmailStr
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class WhitelistEntryResponse(BaseModel):
    id: str
    campaign_id: str
    email: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class RemainingLimitResponse(BaseModel):
    campaign_id: str
    max_products_per_user: Optional[int]
    used: int
    remaining: Optional[int]
