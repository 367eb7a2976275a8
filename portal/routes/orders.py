import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.database.connection import get_db
from portal.dependencies.auth import require_auth
from portal.dependencies.gateway import get_payment_gateway
from portal.models.employee import Employee
from portal.schemas.checkout import (
    CheckoutPreviewResponse,
    CheckoutRequest,
    CheckoutResponse,
    CopayInitiateResponse,
    DeliveryDetails,
    VerifyCopayRequest,
)
from portal.schemas.order import OrderResponse
from portal.services.branding_service import get_checkout_config
from portal.services.checkout_service import (
    checkout_with_points,
    initiate_copay,
    preview_cart,
    verify_copay,
)
from portal.services.order_service import list_employee_orders
from portal.services.payment_gateway import SUCCESS_CODE, PhonePeGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders & Checkout"])


# ---------- MY ORDERS ----------

@router.get("/", response_model=List[OrderResponse])
def my_orders(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return list_employee_orders(db, employee.id)


# ---------- PREVIEW ----------

@router.get("/checkout/preview", response_model=CheckoutPreviewResponse)
def preview_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return preview_cart(db, employee, get_checkout_config(db))


# ---------- POINTS CHECKOUT ----------

@router.post("/checkout", response_model=CheckoutResponse)
def checkout_route(
    data: CheckoutRequest,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    plan, orders = checkout_with_points(db, employee, data, get_checkout_config(db))
    return CheckoutResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        used_points=plan.total_points_required,
        remaining_points=employee.points,
    )


# ---------- CO-PAY ----------

@router.post("/copay/initiate", response_model=CopayInitiateResponse)
def copay_initiate_route(
    data: DeliveryDetails,
    request: Request,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PhonePeGateway = Depends(get_payment_gateway),
):
    return initiate_copay(
        db,
        employee,
        data,
        get_checkout_config(db),
        gateway,
        callback_base=str(request.base_url),
    )


@router.post("/copay/callback", include_in_schema=False)
async def copay_callback_route(
    request: Request,
    merchant_transaction_id: Optional[str] = None,
    delivery_method: Optional[str] = None,
    delivery_address: Optional[str] = None,
):
    """
    Browser redirect target after the gateway pay page. Commits nothing;
    the storefront calls /orders/copay/verify with the forwarded ids.
    """
    cart_url = f"{(settings.PHONEPE_REDIRECT_URL_BASE or 'http://localhost:5173').rstrip('/')}/cart"

    body = await request.body()
    if request.headers.get("content-type", "").startswith("application/json") and body:
        code = (await request.json()).get("code")
    else:
        code = (parse_qs(body.decode("utf-8")).get("code") or [None])[0]

    if code != SUCCESS_CODE:
        logger.info("Co-pay callback without success (txn=%s, code=%s)", merchant_transaction_id, code)
        return RedirectResponse(f"{cart_url}?payment=failure", status_code=303)

    if merchant_transaction_id and delivery_method:
        params = {"merchant_transaction_id": merchant_transaction_id, "delivery_method": delivery_method}
        if delivery_address:
            params["delivery_address"] = delivery_address
        return RedirectResponse(f"{cart_url}?{urlencode(params)}", status_code=303)

    return RedirectResponse(f"{cart_url}?payment=success", status_code=303)


@router.post("/copay/verify", response_model=CheckoutResponse)
def copay_verify_route(
    data: VerifyCopayRequest,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PhonePeGateway = Depends(get_payment_gateway),
):
    plan, orders = verify_copay(
        db,
        employee,
        data.merchant_transaction_id,
        data,
        get_checkout_config(db),
        gateway,
    )
    return CheckoutResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        used_points=plan.available_points,
        remaining_points=employee.points,
        copay_inr=plan.copay_inr,
    )
