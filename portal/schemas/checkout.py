from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, model_validator

from portal.enums.statuses import DeliveryMethod
from portal.schemas.order import OrderResponse


class DeliveryDetails(BaseModel):
    delivery_method: DeliveryMethod = DeliveryMethod.office
    delivery_address: Optional[str] = None

    @model_validator(mode="after")
    def _address_for_delivery(self):
        if self.delivery_method == DeliveryMethod.delivery:
            if not (self.delivery_address or "").strip():
                raise ValueError("Delivery address is required for delivery")
        return self


class CheckoutRequest(DeliveryDetails):
    pass


class CheckoutResponse(BaseModel):
    orders: List[OrderResponse]
    used_points: int
    remaining_points: int
    copay_inr: int = 0


class CopayInitiateResponse(BaseModel):
    merchant_transaction_id: str
    redirect_url: str
    copay_inr: int
    deficit_points: int
    total_points_required: int


class VerifyCopayRequest(DeliveryDetails):
    merchant_transaction_id: str


class CheckoutLinePreview(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal
    points_per_unit: int
    used_points: int


class CheckoutPreviewResponse(BaseModel):
    lines: List[CheckoutLinePreview]
    total_points_required: int
    available_points: int
    deficit_points: int
    copay_inr: int
