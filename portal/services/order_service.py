from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.core.errors import NotFoundError
from portal.enums.statuses import BulkBuyStatus
from portal.models.bulk_buy import BulkBuyRequest
from portal.models.campaign import Campaign
from portal.models.employee import Employee
from portal.models.order import Order
from portal.models.product import Product
from portal.schemas.order import OrderAmendment
from portal.schemas.system import AdminStatsResponse


def list_employee_orders(db: Session, employee_id: str) -> List[Order]:
    return (
        db.query(Order)
        .filter(Order.employee_id == employee_id)
        .order_by(Order.order_date.desc())
        .all()
    )


def list_orders(db: Session, status: Optional[str] = None) -> List[Order]:
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.order_date.desc()).all()


def get_order(db: Session, order_pk: str) -> Order:
    order = db.query(Order).filter(Order.id == order_pk).first()
    if not order:
        raise NotFoundError("Order not found", order_id=order_pk)
    return order


def amend_order(db: Session, order_pk: str, data: OrderAmendment) -> Order:
    """Orders are immutable apart from status and metadata notes."""
    order = get_order(db, order_pk)

    if data.status is not None:
        order.status = data.status.value
    if data.metadata:
        # reassign so the JSON column is flagged dirty
        order.order_metadata = {**(order.order_metadata or {}), **data.metadata}

    db.commit()
    db.refresh(order)
    return order


def count_orders(db: Session, since: Optional[datetime] = None) -> int:
    query = db.query(func.count(Order.id))
    if since is not None:
        query = query.filter(Order.order_date >= since)
    return query.scalar() or 0


def count_pending_bulk_buy(db: Session) -> int:
    return (
        db.query(func.count(BulkBuyRequest.id))
        .filter(BulkBuyRequest.status == BulkBuyStatus.pending_approval.value)
        .scalar()
        or 0
    )


def admin_stats(db: Session) -> AdminStatsResponse:
    by_status: Dict[str, int] = {
        status: count
        for status, count in db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    }
    return AdminStatsResponse(
        total_employees=db.query(func.count(Employee.id)).scalar() or 0,
        total_products=db.query(func.count(Product.id)).scalar() or 0,
        active_products=db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar() or 0,
        total_orders=count_orders(db),
        orders_by_status=by_status,
        total_points_outstanding=db.query(func.coalesce(func.sum(Employee.points), 0)).scalar() or 0,
        active_campaigns=db.query(func.count(Campaign.id)).filter(Campaign.is_active.is_(True)).scalar() or 0,
        pending_bulk_buy_requests=count_pending_bulk_buy(db),
    )
