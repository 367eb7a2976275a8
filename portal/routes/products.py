from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_admin
from portal.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from portal.services.product_service import (
    create_product,
    delete_product,
    get_product_or_404,
    list_products,
    update_product,
)

router = APIRouter(prefix="/products", tags=["Products"])


# CREATE
@router.post("/", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def create(data: ProductCreate, db: Session = Depends(get_db)):
    return create_product(db, data)


# LIST (storefront)
@router.get("/", response_model=List[ProductResponse])
def list_active(db: Session = Depends(get_db)):
    return list_products(db, active_only=True)


# LIST (admin, includes inactive)
@router.get("/all", response_model=List[ProductResponse], dependencies=[Depends(require_admin)])
def list_all(db: Session = Depends(get_db)):
    return list_products(db)


# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: str, db: Session = Depends(get_db)):
    return get_product_or_404(db, product_id)


# UPDATE
@router.put("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def update(product_id: str, data: ProductUpdate, db: Session = Depends(get_db)):
    return update_product(db, product_id, data)


# DELETE
@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete(product_id: str, db: Session = Depends(get_db)):
    if not delete_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return {"message": "Product deleted"}
