from decimal import Decimal

import pytest
from fastapi import BackgroundTasks
from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value

from factories import auth_header, make_employee, make_product
from portal.core.errors import AccessDeniedError, ConflictError, InsufficientResourceError, NotFoundError, ValidationError
from portal.models.bulk_buy import BulkBuyAccess, BulkBuyCartItem, BulkBuyRequest
from portal.models.order import Order
from portal.schemas.bulk_buy import (
    BulkBuyCartItemCreate,
    BulkBuyCheckoutRequest,
    BulkBuyDirectRequest,
    BulkBuyStatusUpdate,
)
from portal.services import bulk_buy_service

SLABS = [
    {"min_qty": 1, "max_qty": 49, "price": "100"},
    {"min_qty": 50, "max_qty": None, "price": "80"},
]


def test_access_by_flag_or_allowlist(db):
    flagged = make_employee(db, bulk_buy_allowed=True)
    listed = make_employee(db, email="buyer@example.com")
    outsider = make_employee(db)
    db.add(BulkBuyAccess(email="buyer@example.com", is_active=True))
    db.commit()

    assert bulk_buy_service.has_bulk_buy_access(db, flagged)
    assert bulk_buy_service.has_bulk_buy_access(db, listed)
    with pytest.raises(AccessDeniedError) as exc:
        bulk_buy_service.require_bulk_buy_access(db, outsider)
    assert exc.value.message == "Bulk buy is not enabled for your account"


def test_cart_requires_bulk_product_and_variant(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    regular = make_product(db)
    coloured = make_product(db, bulk_buy=True, colors=["Black"])

    with pytest.raises(NotFoundError):
        bulk_buy_service.add_to_bulk_cart(db, employee, BulkBuyCartItemCreate(product_id=regular.id))
    with pytest.raises(ValidationError) as exc:
        bulk_buy_service.add_to_bulk_cart(db, employee, BulkBuyCartItemCreate(product_id=coloured.id))
    assert exc.value.message == "Please select a color"


def test_checkout_submits_pending_request_without_touching_stock(db):
    employee = make_employee(db, bulk_buy_allowed=True, points=0)
    product = make_product(db, bulk_buy=True, stock=100, slabs=SLABS)
    bulk_buy_service.add_to_bulk_cart(
        db, employee, BulkBuyCartItemCreate(product_id=product.id, quantity=60)
    )

    request = bulk_buy_service.checkout_bulk_cart(
        db, employee, BulkBuyCheckoutRequest(requester_note="Offsite kits")
    )

    assert request.status == "pending_approval"
    assert request.request_id.startswith("BBR-")
    assert request.request_id.endswith("-0001")
    assert request.items[0]["quantity"] == 60
    assert Decimal(request.items[0]["unit_price"]) == Decimal("80")
    assert Decimal(request.total_amount) == Decimal("4800.00")
    db.refresh(product)
    db.refresh(employee)
    assert product.stock == 100
    assert employee.points == 0
    assert db.query(BulkBuyCartItem).count() == 0
    assert db.query(Order).count() == 0


def test_checkout_fails_on_short_stock(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    product = make_product(db, bulk_buy=True, stock=10)
    db.add(BulkBuyCartItem(employee_id=employee.id, product_id=product.id, quantity=11))
    db.commit()

    with pytest.raises(InsufficientResourceError):
        bulk_buy_service.checkout_bulk_cart(db, employee, BulkBuyCheckoutRequest())
    assert db.query(BulkBuyCartItem).count() == 1


def test_empty_bulk_cart_rejected(db):
    employee = make_employee(db, bulk_buy_allowed=True)

    with pytest.raises(ValidationError) as exc:
        bulk_buy_service.checkout_bulk_cart(db, employee, BulkBuyCheckoutRequest())
    assert exc.value.message == "Bulk buy cart is empty"


def test_direct_request_and_single_decision(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    approver = make_employee(db, role="procurement")
    product = make_product(db, bulk_buy=True, stock=500, slabs=SLABS)

    request = bulk_buy_service.submit_direct_request(
        db, employee, BulkBuyDirectRequest(product_id=product.id, quantity=5)
    )
    assert Decimal(request.total_amount) == Decimal("500.00")

    approved = bulk_buy_service.decide_request(
        db, request.id, BulkBuyStatusUpdate(status="approved", procurement_note="ok"), approver
    )
    assert approved.status == "approved"
    assert approved.approved_by_employee_id == approver.id
    assert approved.approved_at is not None

    with pytest.raises(ConflictError) as exc:
        bulk_buy_service.decide_request(db, request.id, BulkBuyStatusUpdate(status="rejected"), approver)
    assert exc.value.message == "Request already approved"


def test_pending_is_not_a_decision(db):
    approver = make_employee(db, role="procurement")

    with pytest.raises(ValidationError):
        bulk_buy_service.decide_request(
            db, "whatever", BulkBuyStatusUpdate(status="pending_approval"), approver
        )


def test_bulk_buy_routes(client, db):
    employee = make_employee(db, bulk_buy_allowed=True)
    procurement = make_employee(db, role="procurement")
    product = make_product(db, bulk_buy=True, stock=100)
    headers = auth_header(employee)

    eligibility = client.get("/bulk-buy/eligibility", headers=headers)
    assert eligibility.status_code == 200

    added = client.post("/bulk-buy/cart", json={"product_id": product.id, "quantity": 20}, headers=headers)
    assert added.status_code == 200

    submitted = client.post("/bulk-buy/checkout", json={"delivery_method": "office"}, headers=headers)
    assert submitted.status_code == 200
    request_pk = submitted.json()["request"]["id"]

    forbidden = client.put(
        f"/admin/bulk-buy/requests/{request_pk}", json={"status": "approved"}, headers=headers
    )
    assert forbidden.status_code == 403

    decided = client.put(
        f"/admin/bulk-buy/requests/{request_pk}",
        json={"status": "rejected", "procurement_note": "budget"},
        headers=auth_header(procurement),
    )
    assert decided.status_code == 200
    assert decided.json()["status"] == "rejected"

    mine = client.get("/bulk-buy/requests/my", headers=headers)
    assert [r["status"] for r in mine.json()] == ["rejected"]


def test_submission_mails_requester_and_procurement(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    product = make_product(db, bulk_buy=True, stock=50)
    db.add(BulkBuyAccess(email="buyer.team@example.com", is_active=True, is_procurement=True))
    db.commit()
    tasks = BackgroundTasks()

    bulk_buy_service.submit_direct_request(
        db, employee, BulkBuyDirectRequest(product_id=product.id, quantity=3), tasks
    )

    recipients = [task.args[1].to for task in tasks.tasks]
    assert recipients == [[employee.email], ["buyer.team@example.com"]]


def test_decision_already_taken_elsewhere_is_not_overwritten(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    first_approver = make_employee(db, role="procurement")
    second_approver = make_employee(db, role="admin")
    product = make_product(db, bulk_buy=True, stock=50)
    request = bulk_buy_service.submit_direct_request(
        db, employee, BulkBuyDirectRequest(product_id=product.id, quantity=2)
    )
    assert request.status == "pending_approval"

    # another approver commits first; this session still holds the row as pending
    db.execute(
        update(BulkBuyRequest)
        .where(BulkBuyRequest.id == request.id)
        .values(status="approved", approved_by_employee_id=first_approver.id)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(request)
    set_committed_value(request, "status", "pending_approval")

    with pytest.raises(ConflictError) as exc:
        bulk_buy_service.decide_request(
            db, request.id, BulkBuyStatusUpdate(status="rejected"), second_approver
        )

    assert exc.value.message == "Request already approved"
    db.refresh(request)
    assert request.status == "approved"
    assert request.approved_by_employee_id == first_approver.id


def test_bulk_cart_checks_stock_on_add_merge_and_update(db):
    employee = make_employee(db, bulk_buy_allowed=True)
    product = make_product(db, bulk_buy=True, stock=10)

    with pytest.raises(InsufficientResourceError):
        bulk_buy_service.add_to_bulk_cart(
            db, employee, BulkBuyCartItemCreate(product_id=product.id, quantity=11)
        )

    item = bulk_buy_service.add_to_bulk_cart(
        db, employee, BulkBuyCartItemCreate(product_id=product.id, quantity=6)
    )
    with pytest.raises(InsufficientResourceError):
        bulk_buy_service.add_to_bulk_cart(
            db, employee, BulkBuyCartItemCreate(product_id=product.id, quantity=5)
        )
    with pytest.raises(InsufficientResourceError):
        bulk_buy_service.update_bulk_cart_item(db, employee, item.id, 12)

    db.refresh(item)
    assert item.quantity == 6
