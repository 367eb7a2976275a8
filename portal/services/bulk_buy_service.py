import logging
from datetime import datetime
from types import SimpleNamespace
from typing import List, Optional

from fastapi import BackgroundTasks
from sqlalchemy import and_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.errors import (
    AccessDeniedError,
    CommitFailedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from portal.enums.statuses import BulkBuyStatus, CheckoutPath
from portal.models.bulk_buy import BulkBuyAccess, BulkBuyCartItem, BulkBuyRequest
from portal.models.employee import Employee
from portal.models.product import Product
from portal.schemas.bulk_buy import (
    BulkBuyAccessUpsert,
    BulkBuyCartItemCreate,
    BulkBuyCheckoutRequest,
    BulkBuyDirectRequest,
    BulkBuyStatusUpdate,
)
from portal.services import campaign_service, notification_service
from portal.services.branding_service import get_checkout_config
from portal.services.cart_service import check_stock
from portal.services.checkout_service import (
    CheckoutPlan,
    load_checkout_inputs,
    next_display_ids,
    plan_checkout,
)

logger = logging.getLogger(__name__)


# ===================== ELIGIBILITY =====================


def has_bulk_buy_access(db: Session, employee: Employee) -> bool:
    if employee.bulk_buy_allowed:
        return True
    row = (
        db.query(BulkBuyAccess)
        .filter(BulkBuyAccess.email == (employee.email or "").lower(), BulkBuyAccess.is_active.is_(True))
        .first()
    )
    return row is not None


def require_bulk_buy_access(db: Session, employee: Employee) -> None:
    if not has_bulk_buy_access(db, employee):
        raise AccessDeniedError("Bulk buy is not enabled for your account")


def get_procurement_recipients(db: Session) -> List[str]:
    rows = (
        db.query(BulkBuyAccess)
        .filter(BulkBuyAccess.is_active.is_(True), BulkBuyAccess.is_procurement.is_(True))
        .all()
    )
    return [r.email for r in rows]


# ===================== CART =====================


def _bulk_product(db: Session, product_id: str) -> Product:
    product = (
        db.query(Product)
        .filter(Product.id == product_id, Product.is_active.is_(True), Product.bulk_buy.is_(True))
        .first()
    )
    if not product:
        raise NotFoundError("Bulk buy product not found", product_id=product_id)
    return product


def _check_variant(product: Product, color: Optional[str], size: Optional[str]) -> None:
    if product.colors and not color:
        raise ValidationError("Please select a color", product_id=product.id)
    if product.sizes and (product.sizes.get("values") or []) and not size:
        raise ValidationError("Please select a size", product_id=product.id)


def list_bulk_cart(db: Session, employee_id: str) -> List[BulkBuyCartItem]:
    return (
        db.query(BulkBuyCartItem)
        .filter(BulkBuyCartItem.employee_id == employee_id)
        .order_by(BulkBuyCartItem.created_at.asc())
        .all()
    )


def add_to_bulk_cart(db: Session, employee: Employee, data: BulkBuyCartItemCreate) -> BulkBuyCartItem:
    require_bulk_buy_access(db, employee)
    product = _bulk_product(db, data.product_id)
    _check_variant(product, data.selected_color, data.selected_size)
    check_stock(product, data.quantity)

    if data.campaign_id:
        campaign = campaign_service.get_campaign(db, data.campaign_id)
        campaign_service.require_campaign_access(db, campaign, employee)
        campaign_service.enforce_campaign_limit(db, campaign.id, employee.id, data.quantity)

    for item in list_bulk_cart(db, employee.id):
        if (
            item.product_id == product.id
            and (item.selected_color or None) == (data.selected_color or None)
            and (item.selected_size or None) == (data.selected_size or None)
            and (item.campaign_id or None) == (data.campaign_id or None)
        ):
            new_quantity = (item.quantity or 1) + data.quantity
            check_stock(product, new_quantity)
            item.quantity = new_quantity
            db.commit()
            db.refresh(item)
            return item

    item = BulkBuyCartItem(
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


def _own_bulk_item(db: Session, employee_id: str, item_id: str) -> BulkBuyCartItem:
    item = (
        db.query(BulkBuyCartItem)
        .filter(BulkBuyCartItem.id == item_id, BulkBuyCartItem.employee_id == employee_id)
        .first()
    )
    if not item:
        raise NotFoundError("Cart item not found", item_id=item_id)
    return item


def update_bulk_cart_item(db: Session, employee: Employee, item_id: str, quantity: int) -> BulkBuyCartItem:
    require_bulk_buy_access(db, employee)
    item = _own_bulk_item(db, employee.id, item_id)
    product = _bulk_product(db, item.product_id)
    check_stock(product, quantity)
    if item.campaign_id:
        campaign_service.enforce_campaign_limit(
            db, item.campaign_id, employee.id, quantity, exclude_item_id=item.id
        )
    item.quantity = quantity
    db.commit()
    db.refresh(item)
    return item


def remove_bulk_cart_item(db: Session, employee: Employee, item_id: str) -> None:
    require_bulk_buy_access(db, employee)
    item = _own_bulk_item(db, employee.id, item_id)
    db.delete(item)
    db.commit()


# ===================== SUBMISSION =====================


def _snapshot(plan: CheckoutPlan) -> List[dict]:
    return [
        {
            "product_id": line.product_id,
            "name": line.product_name,
            "sku": line.sku,
            "selected_color": line.selected_color,
            "selected_size": line.selected_size,
            "campaign_id": line.campaign_id,
            "quantity": line.quantity,
            "unit_price": str(line.unit_price),
            "line_total": str(line.line_total),
        }
        for line in plan.lines
    ]


def _persist_request(
    db: Session,
    employee: Employee,
    plan: CheckoutPlan,
    delivery_method: str,
    delivery_address: Optional[str],
    requester_note: Optional[str],
    clear_cart: bool,
) -> BulkBuyRequest:
    try:
        (request_id,) = next_display_ids(
            db, settings.BULK_BUY_ID_PREFIX, BulkBuyRequest.created_at, 1, width=4
        )
        request = BulkBuyRequest(
            request_id=request_id,
            employee_id=employee.id,
            status=BulkBuyStatus.pending_approval.value,
            delivery_method=delivery_method,
            delivery_address=delivery_address,
            requester_note=requester_note,
            items=_snapshot(plan),
            total_amount=plan.total_amount,
        )
        db.add(request)

        if clear_cart:
            item_ids = [line.item_id for line in plan.lines if line.item_id]
            db.query(BulkBuyCartItem).filter(BulkBuyCartItem.id.in_(item_ids)).delete(
                synchronize_session=False
            )

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Bulk buy request for employee %s failed during commit", employee.id)
        raise CommitFailedError("Failed to submit bulk buy request; please try again") from e

    db.refresh(request)
    logger.info(
        "Bulk buy request %s submitted by %s: %d lines, total %s",
        request.request_id,
        employee.id,
        len(plan.lines),
        plan.total_amount,
    )
    return request


def _notify_submitted(
    db: Session,
    request: BulkBuyRequest,
    employee: Employee,
    background_tasks: Optional[BackgroundTasks],
) -> None:
    messages = notification_service.build_submitted_messages(
        request, employee, get_procurement_recipients(db)
    )
    notification_service.queue(background_tasks, messages)


def checkout_bulk_cart(
    db: Session,
    employee: Employee,
    data: BulkBuyCheckoutRequest,
    background_tasks: Optional[BackgroundTasks] = None,
) -> BulkBuyRequest:
    require_bulk_buy_access(db, employee)

    items = list_bulk_cart(db, employee.id)
    if not items:
        raise ValidationError("Bulk buy cart is empty")

    products, orders, campaigns = load_checkout_inputs(db, employee, items)
    plan = plan_checkout(
        CheckoutPath.bulk_buy, items, products, employee, orders, campaigns, get_checkout_config(db)
    )

    request = _persist_request(
        db,
        employee,
        plan,
        data.delivery_method.value,
        data.delivery_address,
        data.requester_note,
        clear_cart=True,
    )
    _notify_submitted(db, request, employee, background_tasks)
    return request


def submit_direct_request(
    db: Session,
    employee: Employee,
    data: BulkBuyDirectRequest,
    background_tasks: Optional[BackgroundTasks] = None,
) -> BulkBuyRequest:
    """Single-item request that skips the bulk-buy cart."""
    require_bulk_buy_access(db, employee)
    product = _bulk_product(db, data.product_id)
    _check_variant(product, data.selected_color, data.selected_size)

    line = SimpleNamespace(
        id=None,
        product_id=product.id,
        quantity=data.quantity,
        selected_color=data.selected_color or None,
        selected_size=data.selected_size or None,
        campaign_id=data.campaign_id,
    )
    products, orders, campaigns = load_checkout_inputs(db, employee, [line])
    in_progress = list_bulk_cart(db, employee.id)

    if data.campaign_id:
        campaign = campaign_service.get_campaign(db, data.campaign_id)
        campaign_service.require_campaign_access(db, campaign, employee)
        campaign_service.evaluate_campaign_limit(campaign, orders, in_progress, data.quantity)

    plan = plan_checkout(
        CheckoutPath.bulk_buy, [line], products, employee, orders, campaigns, get_checkout_config(db)
    )

    request = _persist_request(
        db,
        employee,
        plan,
        data.delivery_method.value,
        data.delivery_address,
        data.requester_note,
        clear_cart=False,
    )
    _notify_submitted(db, request, employee, background_tasks)
    return request


# ===================== QUERIES =====================


def list_my_requests(db: Session, employee: Employee) -> List[BulkBuyRequest]:
    require_bulk_buy_access(db, employee)
    return (
        db.query(BulkBuyRequest)
        .filter(BulkBuyRequest.employee_id == employee.id)
        .order_by(BulkBuyRequest.created_at.desc())
        .all()
    )


def list_requests(db: Session, status: Optional[str] = None) -> List[BulkBuyRequest]:
    query = db.query(BulkBuyRequest)
    if status:
        query = query.filter(BulkBuyRequest.status == status)
    return query.order_by(BulkBuyRequest.created_at.desc()).all()


def get_request(db: Session, request_pk: str) -> BulkBuyRequest:
    request = db.query(BulkBuyRequest).filter(BulkBuyRequest.id == request_pk).first()
    if not request:
        raise NotFoundError("Request not found", request_id=request_pk)
    return request


# ===================== APPROVAL =====================


def decide_request(
    db: Session,
    request_pk: str,
    data: BulkBuyStatusUpdate,
    approver: Employee,
    background_tasks: Optional[BackgroundTasks] = None,
) -> BulkBuyRequest:
    """Move a pending request to approved or rejected, exactly once."""
    if data.status == BulkBuyStatus.pending_approval:
        raise ValidationError("Invalid status", status=data.status.value)

    request = get_request(db, request_pk)
    if request.status != BulkBuyStatus.pending_approval.value:
        raise ConflictError(
            f"Request already {request.status}",
            request_id=request.request_id,
            status=request.status,
        )

    try:
        # the status guard makes a concurrent second decision match no row
        res = db.execute(
            update(BulkBuyRequest)
            .where(
                and_(
                    BulkBuyRequest.id == request.id,
                    BulkBuyRequest.status == BulkBuyStatus.pending_approval.value,
                )
            )
            .values(
                status=data.status.value,
                procurement_note=data.procurement_note,
                approved_by_employee_id=approver.id,
                approved_at=datetime.utcnow() if data.status == BulkBuyStatus.approved else None,
            )
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            db.rollback()
            db.refresh(request)
            raise ConflictError(
                f"Request already {request.status}",
                request_id=request.request_id,
                status=request.status,
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise CommitFailedError("Failed to update request") from e
    db.refresh(request)

    logger.info("Bulk buy request %s %s by %s", request.request_id, request.status, approver.id)

    requester = db.query(Employee).filter(Employee.id == request.employee_id).first()
    messages = notification_service.build_status_messages(
        request, requester, get_procurement_recipients(db)
    )
    notification_service.queue(background_tasks, messages)
    return request


# ===================== ALLOWLIST =====================


def list_access(db: Session) -> List[BulkBuyAccess]:
    return db.query(BulkBuyAccess).order_by(BulkBuyAccess.email.asc()).all()


def upsert_access(db: Session, data: BulkBuyAccessUpsert) -> List[BulkBuyAccess]:
    for entry in data.entries:
        email = entry.email.strip().lower()
        row = db.query(BulkBuyAccess).filter(BulkBuyAccess.email == email).first()
        if row is None:
            row = BulkBuyAccess(email=email)
            db.add(row)
        row.is_active = entry.is_active
        row.department = entry.department
        row.designation = entry.designation
        row.is_procurement = entry.is_procurement
    db.commit()
    return list_access(db)


def remove_access(db: Session, access_id: str) -> None:
    row = db.query(BulkBuyAccess).filter(BulkBuyAccess.id == access_id).first()
    if not row:
        raise NotFoundError("Bulk buy access entry not found", access_id=access_id)
    db.delete(row)
    db.commit()
