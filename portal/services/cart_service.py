from typing import List, Optional

from sqlalchemy.orm import Session

from portal.core.errors import InsufficientResourceError, NotFoundError, ValidationError
from portal.models.campaign import Campaign
from portal.models.employee import Employee
from portal.models.order import CartItem
from portal.models.product import Product
from portal.schemas.campaign import CampaignResponse
from portal.schemas.cart import CartItemCreate, CartItemResponse, CartLineResponse
from portal.schemas.product import ProductResponse
from portal.services import campaign_service
from portal.services.product_service import get_product_or_404


def list_cart(db: Session, employee_id: str) -> List[CartItem]:
    return (
        db.query(CartItem)
        .filter(CartItem.employee_id == employee_id)
        .order_by(CartItem.created_at.asc())
        .all()
    )


def list_cart_lines(db: Session, employee_id: str) -> List[CartLineResponse]:
    lines = []
    for item in list_cart(db, employee_id):
        product = db.query(Product).filter(Product.id == item.product_id).first()
        campaign = None
        if item.campaign_id:
            campaign = db.query(Campaign).filter(Campaign.id == item.campaign_id).first()
        lines.append(
            CartLineResponse(
                **CartItemResponse.model_validate(item).model_dump(),
                product=ProductResponse.model_validate(product) if product else None,
                campaign=CampaignResponse.model_validate(campaign) if campaign else None,
            )
        )
    return lines


def _get_own_item(db: Session, employee_id: str, item_id: str) -> CartItem:
    item = (
        db.query(CartItem)
        .filter(CartItem.id == item_id, CartItem.employee_id == employee_id)
        .first()
    )
    if not item:
        raise NotFoundError("Cart item not found", item_id=item_id)
    return item


def _find_mergeable(
    db: Session,
    employee_id: str,
    product_id: str,
    color: Optional[str],
    size: Optional[str],
    campaign_id: Optional[str],
) -> Optional[CartItem]:
    for item in list_cart(db, employee_id):
        if (
            item.product_id == product_id
            and (item.selected_color or None) == (color or None)
            and (item.selected_size or None) == (size or None)
            and (item.campaign_id or None) == (campaign_id or None)
        ):
            return item
    return None


def check_stock(product: Product, quantity: int) -> None:
    if (product.stock or 0) < quantity:
        raise InsufficientResourceError(
            "Insufficient stock",
            product_id=product.id,
            available=product.stock or 0,
            requested=quantity,
        )


# ---------- ADD ----------

def add_to_cart(db: Session, employee: Employee, data: CartItemCreate) -> CartItem:
    product = get_product_or_404(db, data.product_id)
    if not product.is_active:
        raise ValidationError(f"Product {product.name} is unavailable", product_id=product.id)

    check_stock(product, data.quantity)

    if data.campaign_id:
        campaign = campaign_service.get_campaign(db, data.campaign_id)
        if not campaign_service.is_product_in_campaign(db, campaign.id, product.id):
            raise ValidationError("Product is not part of this campaign", product_id=product.id)
        campaign_service.require_campaign_access(db, campaign, employee)
        campaign_service.enforce_campaign_limit(db, campaign.id, employee.id, data.quantity)

    existing = _find_mergeable(
        db, employee.id, product.id, data.selected_color, data.selected_size, data.campaign_id
    )
    if existing:
        new_quantity = (existing.quantity or 1) + data.quantity
        check_stock(product, new_quantity)
        existing.quantity = new_quantity
        db.commit()
        db.refresh(existing)
        return existing

    item = CartItem(
        employee_id=employee.id,
        product_id=product.id,
        selected_color=data.selected_color or None,
        selected_size=data.selected_size or None,
        quantity=data.quantity,
        campaign_id=data.campaign_id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


# ---------- UPDATE ----------

def update_cart_quantity(db: Session, employee: Employee, item_id: str, quantity: int) -> CartItem:
    if quantity < 1:
        raise ValidationError("Invalid quantity", quantity=quantity)

    item = _get_own_item(db, employee.id, item_id)
    product = get_product_or_404(db, item.product_id)
    check_stock(product, quantity)

    if item.campaign_id:
        campaign_service.enforce_campaign_limit(
            db, item.campaign_id, employee.id, quantity, exclude_item_id=item.id
        )

    item.quantity = quantity
    db.commit()
    db.refresh(item)
    return item


# ---------- REMOVE ----------

def remove_from_cart(db: Session, employee: Employee, item_id: str) -> None:
    item = _get_own_item(db, employee.id, item_id)
    db.delete(item)
    db.commit()


def clear_cart(db: Session, employee: Employee) -> int:
    removed = db.query(CartItem).filter(CartItem.employee_id == employee.id).delete()
    db.commit()
    return removed
