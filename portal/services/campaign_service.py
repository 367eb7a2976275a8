from datetime import datetime
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from portal.core.errors import AccessDeniedError, LimitExceededError, NotFoundError, ValidationError
from portal.models.bulk_buy import BulkBuyCartItem
from portal.models.campaign import Campaign, CampaignProduct, CampaignWhitelist
from portal.models.employee import Employee
from portal.models.order import CartItem, Order
from portal.models.product import Product
from portal.schemas.campaign import (
    CampaignCreate,
    CampaignUpdate,
    RemainingLimitResponse,
    WhitelistEntryCreate,
)


# ===================== LIMIT EVALUATION =====================


def campaign_usage(
    campaign_id: str,
    orders: Iterable[Any],
    in_progress_items: Iterable[Any],
    exclude_item_id: Optional[str] = None,
) -> int:
    """
    Units already claimed against a campaign by one employee.

    Only rows explicitly tagged with the campaign count. Orders placed
    before campaign tagging existed carry no campaign_id and are ignored.
    """
    used = sum((o.quantity or 1) for o in orders if o.campaign_id == campaign_id)
    used += sum(
        (item.quantity or 1)
        for item in in_progress_items
        if item.campaign_id == campaign_id and item.id != exclude_item_id
    )
    return used


def evaluate_campaign_limit(
    campaign: Any,
    orders: Iterable[Any],
    in_progress_items: Iterable[Any],
    requested_quantity: int,
    exclude_item_id: Optional[str] = None,
) -> None:
    """Raise LimitExceededError when the request would push usage past the cap."""
    cap = campaign.max_products_per_user
    if cap is None or not campaign.is_active:
        return

    used = campaign_usage(campaign.id, orders, in_progress_items, exclude_item_id)
    if used + requested_quantity > cap:
        raise LimitExceededError(
            f'Campaign limit reached. You can only select {cap} products for "{campaign.name}".',
            campaign_id=campaign.id,
            limit=cap,
            used=used,
            requested=requested_quantity,
        )


def load_usage_rows(db: Session, employee_id: str):
    """Orders plus both carts of an employee, the inputs of the evaluator."""
    orders = db.query(Order).filter(Order.employee_id == employee_id).all()
    cart = db.query(CartItem).filter(CartItem.employee_id == employee_id).all()
    bulk_cart = db.query(BulkBuyCartItem).filter(BulkBuyCartItem.employee_id == employee_id).all()
    return orders, cart + bulk_cart


def enforce_campaign_limit(
    db: Session,
    campaign_id: str,
    employee_id: str,
    requested_quantity: int,
    exclude_item_id: Optional[str] = None,
) -> Campaign:
    campaign = get_campaign(db, campaign_id)
    orders, in_progress = load_usage_rows(db, employee_id)
    evaluate_campaign_limit(campaign, orders, in_progress, requested_quantity, exclude_item_id)
    return campaign


# ===================== ACCESS =====================


def _within(now: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start and now < start:
        return False
    if end and now > end:
        return False
    return True


def check_campaign_access(db: Session, campaign_id: str, email: str) -> bool:
    entries = db.query(CampaignWhitelist).filter(CampaignWhitelist.campaign_id == campaign_id).all()
    if not entries:
        return True

    now = datetime.utcnow()
    email = (email or "").strip().lower()
    return any(
        e.email.lower() == email and _within(now, e.start_date, e.end_date)
        for e in entries
    )


def require_campaign_access(db: Session, campaign: Campaign, employee: Employee) -> None:
    if not campaign.is_active or not _within(datetime.utcnow(), campaign.start_date, campaign.end_date):
        raise ValidationError("Campaign is not active", campaign_id=campaign.id)
    if not check_campaign_access(db, campaign.id, employee.email):
        raise AccessDeniedError("You do not have access to this campaign", campaign_id=campaign.id)


# ---------- CRUD ----------


def get_campaign(db: Session, campaign_id: str) -> Campaign:
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not campaign:
        raise NotFoundError("Campaign not found", campaign_id=campaign_id)
    return campaign


def list_campaigns(db: Session) -> List[Campaign]:
    return db.query(Campaign).order_by(Campaign.created_at.desc()).all()


def create_campaign(db: Session, data: CampaignCreate) -> Campaign:
    campaign = Campaign(**data.model_dump(exclude={"product_ids"}))
    db.add(campaign)
    db.flush()

    for product_id in data.product_ids:
        _link(db, campaign.id, product_id)

    db.commit()
    db.refresh(campaign)
    return campaign


def update_campaign(db: Session, campaign_id: str, data: CampaignUpdate) -> Campaign:
    campaign = get_campaign(db, campaign_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(campaign, key, value)
    db.commit()
    db.refresh(campaign)
    return campaign


def delete_campaign(db: Session, campaign_id: str) -> None:
    campaign = get_campaign(db, campaign_id)
    db.delete(campaign)
    db.commit()


# ---------- PRODUCTS ----------


def _link(db: Session, campaign_id: str, product_id: str) -> None:
    if not db.query(Product).filter(Product.id == product_id).first():
        raise NotFoundError("Product not found", product_id=product_id)
    exists = (
        db.query(CampaignProduct)
        .filter(CampaignProduct.campaign_id == campaign_id, CampaignProduct.product_id == product_id)
        .first()
    )
    if not exists:
        db.add(CampaignProduct(campaign_id=campaign_id, product_id=product_id))


def add_products(db: Session, campaign_id: str, product_ids: List[str]) -> List[Product]:
    get_campaign(db, campaign_id)
    for product_id in product_ids:
        _link(db, campaign_id, product_id)
    db.commit()
    return get_campaign_products(db, campaign_id)


def remove_product(db: Session, campaign_id: str, product_id: str) -> None:
    link = (
        db.query(CampaignProduct)
        .filter(CampaignProduct.campaign_id == campaign_id, CampaignProduct.product_id == product_id)
        .first()
    )
    if not link:
        raise NotFoundError("Product is not part of this campaign", product_id=product_id)
    db.delete(link)
    db.commit()


def get_campaign_products(db: Session, campaign_id: str) -> List[Product]:
    return (
        db.query(Product)
        .join(CampaignProduct, CampaignProduct.product_id == Product.id)
        .filter(CampaignProduct.campaign_id == campaign_id)
        .all()
    )


def is_product_in_campaign(db: Session, campaign_id: str, product_id: str) -> bool:
    return (
        db.query(CampaignProduct)
        .filter(CampaignProduct.campaign_id == campaign_id, CampaignProduct.product_id == product_id)
        .first()
        is not None
    )


# ---------- WHITELIST ----------


def add_whitelist_entry(db: Session, campaign_id: str, data: WhitelistEntryCreate) -> CampaignWhitelist:
    get_campaign(db, campaign_id)
    entry = CampaignWhitelist(
        campaign_id=campaign_id,
        email=data.email.strip().lower(),
        start_date=data.start_date,
        end_date=data.end_date,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_whitelist(db: Session, campaign_id: str) -> List[CampaignWhitelist]:
    return db.query(CampaignWhitelist).filter(CampaignWhitelist.campaign_id == campaign_id).all()


def remove_whitelist_entry(db: Session, campaign_id: str, entry_id: str) -> None:
    entry = (
        db.query(CampaignWhitelist)
        .filter(CampaignWhitelist.campaign_id == campaign_id, CampaignWhitelist.id == entry_id)
        .first()
    )
    if not entry:
        raise NotFoundError("Whitelist entry not found", entry_id=entry_id)
    db.delete(entry)
    db.commit()


# ---------- EMPLOYEE VIEWS ----------


def list_available_campaigns(db: Session, employee: Employee) -> List[Campaign]:
    """Active campaigns the employee may enter and has not used up."""
    now = datetime.utcnow()
    orders, in_progress = load_usage_rows(db, employee.id)

    available = []
    for campaign in db.query(Campaign).filter(Campaign.is_active.is_(True)).all():
        if not _within(now, campaign.start_date, campaign.end_date):
            continue
        if not check_campaign_access(db, campaign.id, employee.email):
            continue
        cap = campaign.max_products_per_user
        if cap is not None and campaign_usage(campaign.id, orders, in_progress) >= cap:
            continue
        available.append(campaign)
    return available


def get_remaining_limit(db: Session, campaign_id: str, employee: Employee) -> RemainingLimitResponse:
    campaign = get_campaign(db, campaign_id)
    orders, in_progress = load_usage_rows(db, employee.id)
    used = campaign_usage(campaign.id, orders, in_progress)

    cap = campaign.max_products_per_user
    return RemainingLimitResponse(
        campaign_id=campaign.id,
        max_products_per_user=cap,
        used=used,
        remaining=None if cap is None else max(cap - used, 0),
    )
