from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_auth
from portal.models.employee import Employee
from portal.schemas.bulk_buy import (
    BulkBuyCartItemCreate,
    BulkBuyCartItemResponse,
    BulkBuyCartItemUpdate,
    BulkBuyCheckoutRequest,
    BulkBuyDirectRequest,
    BulkBuyEligibility,
    BulkBuyRequestResponse,
)
from portal.schemas.product import ProductResponse
from portal.services import bulk_buy_service
from portal.services.notification_service import SUBMITTED_MESSAGE
from portal.services.product_service import list_bulk_buy_products

router = APIRouter(prefix="/bulk-buy", tags=["Bulk Buy"])


@router.get("/eligibility", response_model=BulkBuyEligibility)
def eligibility_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return BulkBuyEligibility(allowed=bulk_buy_service.has_bulk_buy_access(db, employee))


@router.get("/products", response_model=List[ProductResponse])
def products_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    bulk_buy_service.require_bulk_buy_access(db, employee)
    return list_bulk_buy_products(db)


# ---------- CART ----------

@router.get("/cart", response_model=List[BulkBuyCartItemResponse])
def cart_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    bulk_buy_service.require_bulk_buy_access(db, employee)
    return bulk_buy_service.list_bulk_cart(db, employee.id)


@router.post("/cart", response_model=BulkBuyCartItemResponse)
def add_cart_route(
    data: BulkBuyCartItemCreate,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return bulk_buy_service.add_to_bulk_cart(db, employee, data)


@router.put("/cart/{item_id}", response_model=BulkBuyCartItemResponse)
def update_cart_route(
    item_id: str,
    data: BulkBuyCartItemUpdate,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return bulk_buy_service.update_bulk_cart_item(db, employee, item_id, data.quantity)


@router.delete("/cart/{item_id}")
def remove_cart_route(
    item_id: str,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    bulk_buy_service.remove_bulk_cart_item(db, employee, item_id)
    return {"message": "Item removed"}


# ---------- SUBMIT ----------

@router.post("/checkout")
def checkout_route(
    data: BulkBuyCheckoutRequest,
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    request = bulk_buy_service.checkout_bulk_cart(db, employee, data, background_tasks)
    return {"request": BulkBuyRequestResponse.model_validate(request), "message": SUBMITTED_MESSAGE}


@router.post("/requests/direct")
def direct_request_route(
    data: BulkBuyDirectRequest,
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    request = bulk_buy_service.submit_direct_request(db, employee, data, background_tasks)
    return {"request": BulkBuyRequestResponse.model_validate(request), "message": SUBMITTED_MESSAGE}


@router.get("/requests/my", response_model=List[BulkBuyRequestResponse])
def my_requests_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return bulk_buy_service.list_my_requests(db, employee)
