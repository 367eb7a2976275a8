from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class PriceSlab(BaseModel):
    """One validated quantity range; `max_qty=None` is open-ended."""

    min_qty: int = Field(gt=0)
    max_qty: Optional[int] = None
    price: str

    class Config:
        frozen = True
        extra = "forbid"


class SizeOptions(BaseModel):
    unit: str = ""
    values: List[str] = []


class ProductBase(BaseModel):
    name: str
    sku: str
    base_price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    is_active: bool = True
    bulk_buy: bool = False
    images: List[str] = []
    colors: List[str] = []
    sizes: Optional[SizeOptions] = None
    category_ids: List[str] = []
    specifications: str = ""
    brand: str = ""
    gst: str = "0"


class ProductCreate(ProductBase):
    # raw admin JSON, normalized by the service before it is stored
    price_slabs: Any = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    base_price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    bulk_buy: Optional[bool] = None
    images: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    sizes: Optional[SizeOptions] = None
    category_ids: Optional[List[str]] = None
    specifications: Optional[str] = None
    brand: Optional[str] = None
    gst: Optional[str] = None
    price_slabs: Any = None


class ProductResponse(ProductBase):
    id: str
    price_slabs: List[PriceSlab] = []
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryBase(BaseModel):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryResponse(CategoryBase):
    id: str

    class Config:
        from_attributes = True


class PricePreviewResponse(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    points_per_unit: int
    total_points: int
    computed_at: datetime
