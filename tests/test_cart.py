import pytest

from factories import add_cart_item, auth_header, make_campaign, make_employee, make_product
from portal.core.errors import InsufficientResourceError, LimitExceededError, ValidationError
from portal.schemas.cart import CartItemCreate
from portal.services import cart_service


def test_add_merges_same_variant(db):
    employee = make_employee(db)
    product = make_product(db, stock=10, colors=["Red", "Blue"])

    first = cart_service.add_to_cart(
        db, employee, CartItemCreate(product_id=product.id, quantity=2, selected_color="Red")
    )
    second = cart_service.add_to_cart(
        db, employee, CartItemCreate(product_id=product.id, quantity=3, selected_color="Red")
    )
    other = cart_service.add_to_cart(
        db, employee, CartItemCreate(product_id=product.id, quantity=1, selected_color="Blue")
    )

    assert first.id == second.id
    assert second.quantity == 5
    assert other.id != first.id
    assert len(cart_service.list_cart(db, employee.id)) == 2


def test_add_rejects_inactive_product(db):
    employee = make_employee(db)
    product = make_product(db, is_active=False)

    with pytest.raises(ValidationError):
        cart_service.add_to_cart(db, employee, CartItemCreate(product_id=product.id))


def test_add_rejects_more_than_stock(db):
    employee = make_employee(db)
    product = make_product(db, stock=2)

    with pytest.raises(InsufficientResourceError):
        cart_service.add_to_cart(db, employee, CartItemCreate(product_id=product.id, quantity=3))


def test_add_rejects_product_outside_campaign(db):
    employee = make_employee(db)
    product = make_product(db)
    campaign = make_campaign(db, products=[], cap=5)

    with pytest.raises(ValidationError):
        cart_service.add_to_cart(
            db, employee, CartItemCreate(product_id=product.id, campaign_id=campaign.id)
        )


def test_add_enforces_campaign_cap(db):
    employee = make_employee(db)
    product = make_product(db)
    campaign = make_campaign(db, products=[product], cap=2)

    cart_service.add_to_cart(
        db, employee, CartItemCreate(product_id=product.id, quantity=2, campaign_id=campaign.id)
    )
    with pytest.raises(LimitExceededError):
        cart_service.add_to_cart(
            db, employee, CartItemCreate(product_id=product.id, quantity=1, campaign_id=campaign.id)
        )


def test_update_excludes_the_item_being_changed(db):
    employee = make_employee(db)
    product = make_product(db)
    campaign = make_campaign(db, products=[product], cap=3)
    item = add_cart_item(db, employee, product, quantity=2, campaign=campaign)

    updated = cart_service.update_cart_quantity(db, employee, item.id, 3)
    assert updated.quantity == 3

    with pytest.raises(LimitExceededError):
        cart_service.update_cart_quantity(db, employee, item.id, 4)


def test_cart_routes(client, db):
    employee = make_employee(db)
    product = make_product(db, stock=5)
    headers = auth_header(employee)

    added = client.post("/cart/", json={"product_id": product.id, "quantity": 2}, headers=headers)
    assert added.status_code == 200
    item_id = added.json()["id"]

    listed = client.get("/cart/", headers=headers)
    assert listed.status_code == 200
    assert listed.json()[0]["product"]["id"] == product.id

    too_many = client.put(f"/cart/{item_id}", json={"quantity": 9}, headers=headers)
    assert too_many.status_code == 400
    assert too_many.json()["kind"] == "insufficient_resource"

    removed = client.delete(f"/cart/{item_id}", headers=headers)
    assert removed.status_code in (200, 204)
    assert client.get("/cart/", headers=headers).json() == []


def test_cart_requires_token(client, db):
    assert client.get("/cart/").status_code == 401
