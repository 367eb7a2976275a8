import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx
from sqlalchemy import and_, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.errors import (
    AccessDeniedError,
    CommitFailedError,
    ConflictError,
    InsufficientResourceError,
    LimitExceededError,
    NotFoundError,
    PaymentError,
    PortalError,
    ValidationError,
)
from portal.enums.statuses import CheckoutPath, OrderStatus
from portal.models.campaign import Campaign
from portal.models.employee import Employee
from portal.models.order import CartItem, Order, PaymentIntent
from portal.models.product import Product
from portal.schemas.checkout import (
    CheckoutLinePreview,
    CheckoutPreviewResponse,
    CopayInitiateResponse,
    DeliveryDetails,
)
from portal.services.branding_service import CheckoutConfig
from portal.services.campaign_service import evaluate_campaign_limit
from portal.services.payment_gateway import PaymentStatus, PhonePeGateway
from portal.services.pricing_service.calculate_price import (
    copay_amount,
    get_unit_price_for_qty,
    line_total,
    points_per_unit,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedLine:
    item_id: Optional[str]
    product_id: str
    product_name: str
    sku: str
    quantity: int
    selected_color: Optional[str]
    selected_size: Optional[str]
    campaign_id: Optional[str]
    unit_price: Decimal
    points_per_unit: int
    used_points: int
    line_total: Decimal


@dataclass(frozen=True)
class CheckoutPlan:
    path: CheckoutPath
    lines: Tuple[PlannedLine, ...]
    total_points_required: int
    available_points: int
    deficit_points: int
    copay_inr: int
    total_amount: Decimal
    # versions observed while planning; the commit is guarded by them
    product_versions: Mapping[str, int]
    employee_version: int

    def quantity_by_product(self) -> Dict[str, int]:
        totals: Dict[str, int] = defaultdict(int)
        for line in self.lines:
            totals[line.product_id] += line.quantity
        return dict(totals)


# ===================== PLANNING =====================


def price_lines(
    path: CheckoutPath,
    items: Sequence[Any],
    products: Mapping[str, Product],
    orders: Sequence[Any],
    campaigns: Mapping[str, Campaign],
    config: CheckoutConfig,
) -> List[PlannedLine]:
    """
    Validate cart rows against current state and price each one.

    `items` are cart rows (regular or bulk-buy). Checks run in a fixed order
    and the first failure raises. The points balance is not looked at here.
    """
    if not items:
        raise ValidationError("Cart is empty")

    cap = config.max_selections_per_user
    if path != CheckoutPath.bulk_buy and cap != -1 and len(orders) + len(items) > cap:
        raise LimitExceededError(
            "Selection limit reached",
            limit=cap,
            existing_orders=len(orders),
            cart_items=len(items),
        )

    needed: Dict[str, int] = defaultdict(int)
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise NotFoundError(f"Product {item.product_id} not found", product_id=item.product_id)
        if path == CheckoutPath.bulk_buy and not product.bulk_buy:
            raise NotFoundError("Bulk buy product not found", product_id=product.id)
        if not product.is_active or (product.stock or 0) < item.quantity:
            raise InsufficientResourceError(f"Product {product.name} unavailable", product_id=product.id)
        needed[product.id] += item.quantity

    for product_id, quantity in needed.items():
        product = products[product_id]
        if (product.stock or 0) < quantity:
            raise InsufficientResourceError(
                f"Product {product.name} unavailable",
                product_id=product_id,
                available=product.stock or 0,
                requested=quantity,
            )

    for item in items:
        if not item.campaign_id:
            continue
        campaign = campaigns.get(item.campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign not found", campaign_id=item.campaign_id)
        evaluate_campaign_limit(campaign, orders, items, item.quantity, exclude_item_id=item.id)

    lines = []
    for item in items:
        product = products[item.product_id]
        unit_price = get_unit_price_for_qty(product, item.quantity)
        per_unit = points_per_unit(unit_price, config.inr_per_point)
        lines.append(
            PlannedLine(
                item_id=item.id,
                product_id=product.id,
                product_name=product.name,
                sku=product.sku,
                quantity=item.quantity,
                selected_color=item.selected_color,
                selected_size=item.selected_size,
                campaign_id=item.campaign_id,
                unit_price=unit_price,
                points_per_unit=per_unit,
                used_points=per_unit * item.quantity,
                line_total=line_total(unit_price, item.quantity),
            )
        )
    return lines


def plan_checkout(
    path: CheckoutPath,
    items: Sequence[Any],
    products: Mapping[str, Product],
    employee: Employee,
    orders: Sequence[Any],
    campaigns: Mapping[str, Campaign],
    config: CheckoutConfig,
) -> CheckoutPlan:
    """Validate and price a cart for one checkout path, without writing."""
    path = CheckoutPath(path)
    lines = price_lines(path, items, products, orders, campaigns, config)

    total_points = sum(line.used_points for line in lines)
    available = employee.points or 0
    deficit = 0
    copay = 0

    if path == CheckoutPath.points and available < total_points:
        raise InsufficientResourceError(
            "Insufficient points",
            required=total_points,
            available=available,
        )

    if path == CheckoutPath.copay:
        if available >= total_points:
            raise ValidationError(
                "Sufficient points, use normal checkout",
                required=total_points,
                available=available,
            )
        deficit = total_points - available
        copay = copay_amount(deficit, config.inr_per_point)

    return CheckoutPlan(
        path=path,
        lines=tuple(lines),
        total_points_required=total_points,
        available_points=available,
        deficit_points=deficit,
        copay_inr=copay,
        total_amount=sum((line.line_total for line in lines), Decimal("0.00")),
        product_versions={line.product_id: products[line.product_id].version or 0 for line in lines},
        employee_version=employee.version or 0,
    )


def load_checkout_inputs(db: Session, employee: Employee, items: Sequence[Any]):
    """Products, orders and campaigns referenced by a cart, read in one place."""
    product_ids = {item.product_id for item in items}
    campaign_ids = {item.campaign_id for item in items if item.campaign_id}

    products = {}
    if product_ids:
        products = {p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()}
    campaigns = {}
    if campaign_ids:
        campaigns = {c.id: c for c in db.query(Campaign).filter(Campaign.id.in_(campaign_ids)).all()}
    orders = db.query(Order).filter(Order.employee_id == employee.id).all()
    return products, orders, campaigns


def _cart_items(db: Session, employee_id: str) -> List[CartItem]:
    return (
        db.query(CartItem)
        .filter(CartItem.employee_id == employee_id)
        .order_by(CartItem.created_at.asc())
        .all()
    )


def plan_for_cart(db: Session, employee: Employee, path: CheckoutPath, config: CheckoutConfig):
    items = _cart_items(db, employee.id)
    products, orders, campaigns = load_checkout_inputs(db, employee, items)
    plan = plan_checkout(path, items, products, employee, orders, campaigns, config)
    return plan, items


def preview_cart(db: Session, employee: Employee, config: CheckoutConfig) -> CheckoutPreviewResponse:
    """Points the cart costs and the co-pay a short balance would need."""
    items = _cart_items(db, employee.id)
    products, orders, campaigns = load_checkout_inputs(db, employee, items)
    lines = price_lines(CheckoutPath.points, items, products, orders, campaigns, config)

    total = sum(line.used_points for line in lines)
    available = employee.points or 0
    deficit = max(total - available, 0)
    return CheckoutPreviewResponse(
        lines=[
            CheckoutLinePreview(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                points_per_unit=line.points_per_unit,
                used_points=line.used_points,
            )
            for line in lines
        ],
        total_points_required=total,
        available_points=available,
        deficit_points=deficit,
        copay_inr=copay_amount(deficit, config.inr_per_point) if deficit else 0,
    )


# ===================== DISPLAY IDS =====================


def next_display_ids(db: Session, prefix: str, column, count: int, width: int) -> List[str]:
    """
    `PREFIX-YYYY-NNN` ids continuing the count of rows created this year.

    Display only: two concurrent checkouts may produce the same id.
    """
    now = datetime.utcnow()
    year_start = datetime(now.year, 1, 1)
    existing = (
        db.query(func.count())
        .select_from(column.class_)
        .filter(and_(column >= year_start, column < datetime(now.year + 1, 1, 1)))
        .scalar()
        or 0
    )
    return [f"{prefix}-{now.year}-{str(existing + i + 1).zfill(width)}" for i in range(count)]


# ===================== COMMIT =====================


def _decrement_stock(db: Session, plan: CheckoutPlan) -> None:
    for product_id, quantity in plan.quantity_by_product().items():
        res = db.execute(
            update(Product)
            .where(
                and_(
                    Product.id == product_id,
                    Product.version == plan.product_versions[product_id],
                    Product.stock >= quantity,
                )
            )
            .values(stock=Product.stock - quantity, version=Product.version + 1)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            raise ConflictError(
                "Product stock changed during checkout, please retry",
                product_id=product_id,
            )


def _write_points(db: Session, plan: CheckoutPlan, employee_id: str) -> None:
    if plan.path == CheckoutPath.copay:
        new_points = 0
    else:
        new_points = Employee.points - plan.total_points_required

    res = db.execute(
        update(Employee)
        .where(
            and_(
                Employee.id == employee_id,
                Employee.version == plan.employee_version,
                Employee.points >= (0 if plan.path == CheckoutPath.copay else plan.total_points_required),
            )
        )
        .values(points=new_points, version=Employee.version + 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise ConflictError("Points balance changed during checkout, please retry", employee_id=employee_id)


def commit_checkout(
    db: Session,
    plan: CheckoutPlan,
    employee: Employee,
    delivery: DeliveryDetails,
    payment: Optional[PaymentStatus] = None,
) -> List[Order]:
    """
    Apply a points or co-pay plan as one transaction.

    Stock, balance, orders and cart removal either all land or none do.
    """
    if plan.path == CheckoutPath.bulk_buy:
        raise ValidationError("Bulk buy requests are not committed as orders")

    try:
        _decrement_stock(db, plan)
        _write_points(db, plan, employee.id)

        display_ids = next_display_ids(
            db, settings.ORDER_ID_PREFIX, Order.order_date, len(plan.lines), width=3
        )

        orders = []
        for display_id, line in zip(display_ids, plan.lines):
            metadata = {
                "used_points": line.used_points,
                "unit_price": str(line.unit_price),
                "delivery_method": delivery.delivery_method.value,
                "delivery_address": delivery.delivery_address,
            }
            if payment is not None:
                metadata.update(
                    copay_inr=plan.copay_inr,
                    payment_id=payment.transaction_id,
                    gateway_order_id=payment.merchant_transaction_id,
                )
            order = Order(
                order_id=display_id,
                employee_id=employee.id,
                product_id=line.product_id,
                selected_color=line.selected_color,
                selected_size=line.selected_size,
                quantity=line.quantity,
                status=OrderStatus.confirmed.value,
                campaign_id=line.campaign_id,
                order_metadata=metadata,
                payment_reference=payment.merchant_transaction_id if payment else None,
            )
            db.add(order)
            orders.append(order)

        item_ids = [line.item_id for line in plan.lines if line.item_id]
        if item_ids:
            db.query(CartItem).filter(CartItem.id.in_(item_ids)).delete(synchronize_session=False)

        db.commit()
    except PortalError as e:
        db.rollback()
        logger.info("Checkout for employee %s aborted: %s", employee.id, e.message)
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Checkout for employee %s failed during commit", employee.id)
        raise CommitFailedError("Failed to complete checkout; please try again") from e

    for order in orders:
        db.refresh(order)
    db.refresh(employee)

    logger.info(
        "Checkout committed: employee=%s path=%s orders=%d points=%d copay_inr=%d",
        employee.id,
        plan.path.value,
        len(orders),
        plan.total_points_required,
        plan.copay_inr,
    )
    return orders


# ===================== ENTRY POINTS =====================


def checkout_with_points(
    db: Session, employee: Employee, delivery: DeliveryDetails, config: CheckoutConfig
) -> Tuple[CheckoutPlan, List[Order]]:
    plan, _ = plan_for_cart(db, employee, CheckoutPath.points, config)
    return plan, commit_checkout(db, plan, employee, delivery)


def _merchant_transaction_id() -> str:
    return f"TXN_{uuid.uuid4().hex}"


def initiate_copay(
    db: Session,
    employee: Employee,
    delivery: DeliveryDetails,
    config: CheckoutConfig,
    gateway: PhonePeGateway,
    callback_base: str,
) -> CopayInitiateResponse:
    """
    Price the shortfall and open a gateway payment for it.

    Only the payment intent is written, so verification can tell whose
    transaction it is.
    """
    plan, _ = plan_for_cart(db, employee, CheckoutPath.copay, config)

    redirect_base = (settings.PHONEPE_REDIRECT_URL_BASE or "http://localhost:5173").rstrip("/")
    txn_id = _merchant_transaction_id()

    session = gateway.initiate_payment(
        merchant_transaction_id=txn_id,
        amount_inr=plan.copay_inr,
        merchant_user_id=employee.id,
        redirect_url=f"{redirect_base}/cart",
        callback_url=_callback_url(callback_base, txn_id, delivery),
        mobile_number=employee.phone_number,
    )

    db.add(
        PaymentIntent(
            merchant_transaction_id=txn_id,
            employee_id=employee.id,
            copay_inr=plan.copay_inr,
        )
    )
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Co-pay intent for employee %s could not be saved", employee.id)
        raise CommitFailedError("Failed to start payment; please try again") from e

    logger.info(
        "Co-pay initiated: employee=%s txn=%s copay_inr=%d deficit=%d",
        employee.id,
        txn_id,
        plan.copay_inr,
        plan.deficit_points,
    )
    return CopayInitiateResponse(
        merchant_transaction_id=txn_id,
        redirect_url=session.redirect_url,
        copay_inr=plan.copay_inr,
        deficit_points=plan.deficit_points,
        total_points_required=plan.total_points_required,
    )


def _callback_url(base: str, txn_id: str, delivery: DeliveryDetails) -> str:
    params = {"merchant_transaction_id": txn_id, "delivery_method": delivery.delivery_method.value}
    if delivery.delivery_address:
        params["delivery_address"] = delivery.delivery_address
    return str(httpx.URL(f"{base.rstrip('/')}/orders/copay/callback", params=params))


def verify_copay(
    db: Session,
    employee: Employee,
    merchant_transaction_id: str,
    delivery: DeliveryDetails,
    config: CheckoutConfig,
    gateway: PhonePeGateway,
) -> Tuple[CheckoutPlan, List[Order]]:
    """
    Confirm a gateway payment and commit the co-pay checkout it paid for.

    The transaction must have been started by this employee, the paid
    amount must equal the freshly recomputed co-pay to the paisa, and one
    gateway transaction can back at most one checkout.
    """
    intent = (
        db.query(PaymentIntent)
        .filter(PaymentIntent.merchant_transaction_id == merchant_transaction_id)
        .first()
    )
    if intent is None:
        raise PaymentError("Payment not found", merchant_transaction_id=merchant_transaction_id)
    if intent.employee_id != employee.id:
        logger.warning(
            "Co-pay verify refused: employee=%s txn=%s belongs to %s",
            employee.id,
            merchant_transaction_id,
            intent.employee_id,
        )
        raise AccessDeniedError(
            "Payment was started by another employee",
            merchant_transaction_id=merchant_transaction_id,
        )

    already_used = (
        db.query(Order).filter(Order.payment_reference == merchant_transaction_id).first()
    )
    if already_used:
        raise ConflictError(
            "Payment has already been used for a checkout",
            merchant_transaction_id=merchant_transaction_id,
        )

    status = gateway.check_status(merchant_transaction_id)

    plan, _ = plan_for_cart(db, employee, CheckoutPath.copay, config)

    if status.amount_paise != plan.copay_inr * 100:
        logger.warning(
            "Co-pay amount mismatch: employee=%s txn=%s expected_inr=%d paid_paise=%d",
            employee.id,
            merchant_transaction_id,
            plan.copay_inr,
            status.amount_paise,
        )
        raise PaymentError(
            "Amount mismatch",
            expected=plan.copay_inr,
            paid=status.amount_paise / 100,
        )

    return plan, commit_checkout(db, plan, employee, delivery, payment=status)
