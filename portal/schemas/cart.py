from typing import Optional

from pydantic import BaseModel, Field

from portal.schemas.campaign import CampaignResponse
from portal.schemas.product import ProductResponse


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    campaign_id: Optional[str] = None

    class Config:
        from_attributes = True


class CartLineResponse(CartItemResponse):
    product: Optional[ProductResponse] = None
    campaign: Optional[CampaignResponse] = None
