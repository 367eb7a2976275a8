from typing import List

from sqlalchemy.orm import Session

from portal.core.errors import ConflictError, NotFoundError
from portal.models.product import Category
from portal.schemas.product import CategoryCreate, CategoryUpdate


def list_categories(db: Session, active_only: bool = False) -> List[Category]:
    query = db.query(Category)
    if active_only:
        query = query.filter(Category.is_active.is_(True))
    return query.order_by(Category.sort_order.asc(), Category.name.asc()).all()


def get_category(db: Session, category_id: str) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found", category_id=category_id)
    return category


def create_category(db: Session, data: CategoryCreate) -> Category:
    if db.query(Category).filter(Category.name == data.name).first():
        raise ConflictError("Category already exists", name=data.name)
    category = Category(**data.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: str, data: CategoryUpdate) -> Category:
    category = get_category(db, category_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: str) -> None:
    category = get_category(db, category_id)
    db.delete(category)
    db.commit()
