from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_admin
from portal.schemas.product import CategoryCreate, CategoryResponse, CategoryUpdate, ProductResponse
from portal.services.category_service import (
    create_category,
    delete_category,
    get_category,
    list_categories,
    update_category,
)
from portal.services.product_service import list_products_by_category

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[CategoryResponse])
def list_route(db: Session = Depends(get_db)):
    return list_categories(db, active_only=True)


@router.post("/", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def create_route(data: CategoryCreate, db: Session = Depends(get_db)):
    return create_category(db, data)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_route(category_id: str, db: Session = Depends(get_db)):
    return get_category(db, category_id)


@router.get("/{category_id}/products", response_model=List[ProductResponse])
def products_route(category_id: str, db: Session = Depends(get_db)):
    get_category(db, category_id)
    return list_products_by_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def update_route(category_id: str, data: CategoryUpdate, db: Session = Depends(get_db)):
    return update_category(db, category_id, data)


@router.delete("/{category_id}", dependencies=[Depends(require_admin)])
def delete_route(category_id: str, db: Session = Depends(get_db)):
    delete_category(db, category_id)
    return {"message": "Category deleted"}
