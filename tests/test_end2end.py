import pytest

from factories import add_cart_item, auth_header, make_employee, make_product, set_branding
from portal.models.order import CartItem, Order

SLABS = [
    {"min_qty": 1, "max_qty": 1, "price": "80"},
    {"min_qty": 2, "max_qty": None, "price": "50"},
]


def _zero_balance_cart(db):
    set_branding(db, inr_per_point="1", max_selections=-1)
    employee = make_employee(db, points=0)
    product = make_product(db, base_price="80", stock=10, slabs=SLABS)
    add_cart_item(db, employee, product, quantity=2)
    return employee, product


@pytest.mark.order(1)
def test_points_checkout_rejected_without_balance(client, db):
    employee, product = _zero_balance_cart(db)

    response = client.post("/orders/checkout", json={"delivery_method": "office"}, headers=auth_header(employee))

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "insufficient_resource"
    assert body["details"]["required"] == 100
    db.refresh(product)
    assert product.stock == 10


@pytest.mark.order(2)
def test_copay_pays_whole_cart(client, db, gateway):
    employee, product = _zero_balance_cart(db)
    headers = auth_header(employee)

    started = client.post(
        "/orders/copay/initiate",
        json={"delivery_method": "delivery", "delivery_address": "12 MG Road, Bengaluru"},
        headers=headers,
    )
    assert started.status_code == 200
    assert started.json()["copay_inr"] == 100

    gateway.paid_amount_inr = 100
    verified = client.post(
        "/orders/copay/verify",
        json={
            "merchant_transaction_id": started.json()["merchant_transaction_id"],
            "delivery_method": "delivery",
            "delivery_address": "12 MG Road, Bengaluru",
        },
        headers=headers,
    )

    assert verified.status_code == 200
    db.refresh(product)
    db.refresh(employee)
    assert product.stock == 8
    assert employee.points == 0
    assert db.query(CartItem).count() == 0
    orders = db.query(Order).all()
    assert len(orders) == 1
    assert orders[0].quantity == 2
    assert orders[0].order_metadata["delivery_address"] == "12 MG Road, Bengaluru"
    assert orders[0].order_metadata["copay_inr"] == 100


@pytest.mark.order(3)
def test_order_history_lists_committed_orders(client, db, gateway):
    employee, _ = _zero_balance_cart(db)
    headers = auth_header(employee)
    started = client.post("/orders/copay/initiate", json={"delivery_method": "office"}, headers=headers)
    gateway.paid_amount_inr = 100
    client.post(
        "/orders/copay/verify",
        json={"merchant_transaction_id": started.json()["merchant_transaction_id"], "delivery_method": "office"},
        headers=headers,
    )

    history = client.get("/orders/", headers=headers)

    assert history.status_code == 200
    assert [o["quantity"] for o in history.json()] == [2]
