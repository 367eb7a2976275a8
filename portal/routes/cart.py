from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_auth
from portal.models.employee import Employee
from portal.schemas.cart import CartItemCreate, CartItemResponse, CartItemUpdate, CartLineResponse
from portal.services.cart_service import (
    add_to_cart,
    clear_cart,
    list_cart_lines,
    remove_from_cart,
    update_cart_quantity,
)

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("/", response_model=List[CartLineResponse])
def list_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return list_cart_lines(db, employee.id)


@router.post("/", response_model=CartItemResponse)
def add_route(
    data: CartItemCreate,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return add_to_cart(db, employee, data)


@router.put("/{item_id}", response_model=CartItemResponse)
def update_route(
    item_id: str,
    data: CartItemUpdate,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return update_cart_quantity(db, employee, item_id, data.quantity)


@router.delete("/{item_id}")
def remove_route(
    item_id: str,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    remove_from_cart(db, employee, item_id)
    return {"message": "Item removed"}


@router.delete("/")
def clear_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return {"removed": clear_cart(db, employee)}
