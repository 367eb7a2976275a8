from typing import List, Optional

from sqlalchemy.orm import Session

from portal.core.errors import ConflictError, NotFoundError
from portal.models.product import Product
from portal.schemas.product import ProductCreate, ProductUpdate
from portal.services.pricing_service.price_slabs import normalize_price_slabs, slabs_to_json


def _sku_taken(db: Session, sku: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Product).filter(Product.sku == sku)
    if exclude_id:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(db: Session, data: ProductCreate) -> Product:
    if _sku_taken(db, data.sku):
        raise ConflictError("SKU already exists", sku=data.sku)

    values = data.model_dump(exclude={"price_slabs"})
    values["price_slabs"] = slabs_to_json(normalize_price_slabs(data.price_slabs))

    product = Product(**values)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def get_product_or_404(db: Session, product_id: str) -> Product:
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found", product_id=product_id)
    return product


# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(db: Session, active_only: bool = False) -> List[Product]:
    query = db.query(Product)
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Product.created_at.desc()).all()


def list_bulk_buy_products(db: Session) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.is_active.is_(True), Product.bulk_buy.is_(True))
        .order_by(Product.name.asc())
        .all()
    )


def list_products_by_category(db: Session, category_id: str) -> List[Product]:
    # category ids live in a JSON column, so filter in Python
    return [p for p in list_products(db, active_only=True) if category_id in (p.category_ids or [])]


# --------------------------
# UPDATE PRODUCT
# --------------------------
def update_product(db: Session, product_id: str, data: ProductUpdate) -> Product:
    product = get_product_or_404(db, product_id)
    updates = data.model_dump(exclude_unset=True)

    if "sku" in updates and updates["sku"] and _sku_taken(db, updates["sku"], product.id):
        raise ConflictError("SKU already exists", sku=updates["sku"])

    if "price_slabs" in updates:
        updates["price_slabs"] = slabs_to_json(normalize_price_slabs(updates["price_slabs"]))

    if "stock" in updates:
        product.version = (product.version or 0) + 1

    for key, value in updates.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)
    return product


# --------------------------
# DELETE PRODUCT
# --------------------------
def delete_product(db: Session, product_id: str) -> bool:
    product = get_product(db, product_id)
    if not product:
        return False

    db.delete(product)
    db.commit()
    return True
