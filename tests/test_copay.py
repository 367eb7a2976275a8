import pytest

from factories import (
    FakeGateway,
    add_cart_item,
    auth_header,
    make_employee,
    make_payment_intent,
    make_product,
    set_branding,
)
from portal.core.errors import AccessDeniedError, ConflictError, PaymentError, ValidationError
from portal.models.order import CartItem, Order, PaymentIntent
from portal.schemas.checkout import DeliveryDetails
from portal.services import checkout_service
from portal.services.branding_service import get_checkout_config


def _cart_worth_500(db, points=300, stock=5):
    set_branding(db, inr_per_point="1", max_selections=-1)
    employee = make_employee(db, points=points, phone_number="+919876543210")
    product = make_product(db, base_price="250", stock=stock)
    add_cart_item(db, employee, product, quantity=2)
    return employee, product


def test_initiate_prices_the_shortfall(db):
    employee, _ = _cart_worth_500(db)
    gateway = FakeGateway()

    response = checkout_service.initiate_copay(
        db, employee, DeliveryDetails(), get_checkout_config(db), gateway, "http://testserver/"
    )

    assert response.copay_inr == 200
    assert response.deficit_points == 200
    assert response.total_points_required == 500
    assert response.merchant_transaction_id.startswith("TXN_")
    txn_id, amount, kwargs = gateway.initiated[0]
    assert amount == 200
    assert kwargs["mobile_number"] == "+919876543210"
    assert kwargs["callback_url"].startswith("http://testserver/orders/copay/callback?")
    assert f"merchant_transaction_id={txn_id}" in kwargs["callback_url"]
    assert db.query(Order).count() == 0
    intent = db.query(PaymentIntent).one()
    assert intent.merchant_transaction_id == txn_id
    assert intent.employee_id == employee.id
    assert intent.copay_inr == 200


def test_initiate_refused_when_points_suffice(db):
    employee, _ = _cart_worth_500(db, points=600)

    with pytest.raises(ValidationError) as exc:
        checkout_service.initiate_copay(
            db, employee, DeliveryDetails(), get_checkout_config(db), FakeGateway(), "http://testserver"
        )
    assert exc.value.message == "Sufficient points, use normal checkout"


def test_amount_off_by_one_paisa_rejected(db):
    employee, product = _cart_worth_500(db)
    make_payment_intent(db, employee)
    gateway = FakeGateway(paid_amount_inr="199.99")

    with pytest.raises(PaymentError) as exc:
        checkout_service.verify_copay(
            db, employee, "TXN_1", DeliveryDetails(), get_checkout_config(db), gateway
        )

    assert exc.value.message == "Amount mismatch"
    db.refresh(product)
    db.refresh(employee)
    assert product.stock == 5
    assert employee.points == 300
    assert db.query(Order).count() == 0


def test_failed_payment_commits_nothing(db):
    employee, _ = _cart_worth_500(db)
    make_payment_intent(db, employee)

    with pytest.raises(PaymentError):
        checkout_service.verify_copay(
            db, employee, "TXN_1", DeliveryDetails(), get_checkout_config(db), FakeGateway(200, success=False)
        )
    assert db.query(Order).count() == 0
    assert db.query(CartItem).count() == 1


def test_verified_payment_commits_and_zeroes_points(db):
    employee, product = _cart_worth_500(db)
    make_payment_intent(db, employee)
    gateway = FakeGateway(paid_amount_inr=200)

    plan, orders = checkout_service.verify_copay(
        db, employee, "TXN_1", DeliveryDetails(), get_checkout_config(db), gateway
    )

    assert plan.copay_inr == 200
    assert employee.points == 0
    db.refresh(product)
    assert product.stock == 3
    assert db.query(CartItem).count() == 0
    order = orders[0]
    assert order.payment_reference == "TXN_1"
    assert order.order_metadata["copay_inr"] == 200
    assert order.order_metadata["gateway_order_id"] == "TXN_1"
    assert order.order_metadata["payment_id"]


def test_payment_cannot_back_two_checkouts(db):
    employee, product = _cart_worth_500(db, stock=10)
    make_payment_intent(db, employee)
    gateway = FakeGateway(paid_amount_inr=200)
    config = get_checkout_config(db)
    checkout_service.verify_copay(db, employee, "TXN_1", DeliveryDetails(), config, gateway)

    employee.points = 300
    db.commit()
    add_cart_item(db, employee, product, quantity=2)

    with pytest.raises(ConflictError):
        checkout_service.verify_copay(db, employee, "TXN_1", DeliveryDetails(), config, gateway)
    assert db.query(Order).count() == 1
    assert len(gateway.checked) == 1


def test_copay_routes(client, db, gateway):
    employee, _ = _cart_worth_500(db)
    headers = auth_header(employee)

    started = client.post("/orders/copay/initiate", json={"delivery_method": "office"}, headers=headers)
    assert started.status_code == 200
    txn_id = started.json()["merchant_transaction_id"]
    assert started.json()["redirect_url"].endswith(txn_id)

    gateway.paid_amount_inr = 200
    verified = client.post(
        "/orders/copay/verify",
        json={"merchant_transaction_id": txn_id, "delivery_method": "office"},
        headers=headers,
    )
    assert verified.status_code == 200
    body = verified.json()
    assert body["copay_inr"] == 200
    assert body["used_points"] == 300
    assert body["remaining_points"] == 0

    replay = client.post(
        "/orders/copay/verify",
        json={"merchant_transaction_id": txn_id, "delivery_method": "office"},
        headers=headers,
    )
    assert replay.status_code == 409


def test_callback_redirects_to_cart(client, db):
    ok = client.post(
        "/orders/copay/callback",
        params={"merchant_transaction_id": "TXN_9", "delivery_method": "office"},
        data={"code": "PAYMENT_SUCCESS"},
        follow_redirects=False,
    )
    assert ok.status_code == 303
    assert "merchant_transaction_id=TXN_9" in ok.headers["location"]

    failed = client.post(
        "/orders/copay/callback",
        json={"code": "PAYMENT_ERROR"},
        follow_redirects=False,
    )
    assert failed.status_code == 303
    assert failed.headers["location"].endswith("?payment=failure")


def test_payment_started_by_someone_else_is_refused(db):
    alice, _ = _cart_worth_500(db)
    bob, _ = _cart_worth_500(db)
    gateway = FakeGateway(paid_amount_inr=200)
    config = get_checkout_config(db)
    started = checkout_service.initiate_copay(
        db, alice, DeliveryDetails(), config, gateway, "http://testserver"
    )

    with pytest.raises(AccessDeniedError):
        checkout_service.verify_copay(
            db, bob, started.merchant_transaction_id, DeliveryDetails(), config, gateway
        )
    db.refresh(bob)
    assert bob.points == 300
    assert db.query(Order).count() == 0
    assert gateway.checked == []

    _, orders = checkout_service.verify_copay(
        db, alice, started.merchant_transaction_id, DeliveryDetails(), config, gateway
    )
    assert [o.employee_id for o in orders] == [alice.id]


def test_unknown_payment_is_refused(db):
    employee, _ = _cart_worth_500(db)

    with pytest.raises(PaymentError) as exc:
        checkout_service.verify_copay(
            db, employee, "TXN_NEVER_STARTED", DeliveryDetails(), get_checkout_config(db), FakeGateway(200)
        )
    assert exc.value.message == "Payment not found"
    assert db.query(Order).count() == 0
