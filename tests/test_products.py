import pytest

from factories import auth_header, make_employee, make_product
from portal.core.errors import ConflictError
from portal.schemas.product import ProductCreate, ProductUpdate
from portal.services import product_service


def test_create_stores_normalized_slabs(db):
    product = product_service.create_product(
        db,
        ProductCreate(
            name="Steel Bottle",
            sku="BTL-01",
            base_price="450",
            stock=40,
            price_slabs=[
                {"minQty": 25, "maxQty": "", "price": "380"},
                {"minQty": 1, "maxQty": 24, "price": "420"},
                {"minQty": 0, "maxQty": 3, "price": "1"},
            ],
        ),
    )

    assert product.price_slabs == [
        {"min_qty": 1, "max_qty": 24, "price": "420"},
        {"min_qty": 25, "max_qty": None, "price": "380"},
    ]


def test_duplicate_sku_rejected(db):
    existing = make_product(db)

    with pytest.raises(ConflictError):
        product_service.create_product(
            db, ProductCreate(name="Copy", sku=existing.sku, base_price="10")
        )


def test_stock_update_bumps_version(db):
    product = make_product(db, stock=5)
    version = product.version

    product_service.update_product(db, product.id, ProductUpdate(stock=9))
    assert product.version == version + 1

    product_service.update_product(db, product.id, ProductUpdate(name="Renamed"))
    assert product.version == version + 1


def test_bad_slabs_rejected_over_http(client, db):
    admin = make_employee(db, role="admin")

    response = client.post(
        "/products/",
        json={
            "name": "Hoodie",
            "sku": "HD-1",
            "base_price": "900",
            "price_slabs": [
                {"min_qty": 1, "max_qty": 10, "price": "850"},
                {"min_qty": 5, "max_qty": 15, "price": "800"},
            ],
        },
        headers=auth_header(admin),
    )

    assert response.status_code == 400
    assert response.json() == {
        "kind": "validation_error",
        "message": "Slab ranges overlap. Please make ranges non-overlapping.",
        "details": {"first_min_qty": 1, "second_min_qty": 5},
    }


def test_storefront_lists_active_only(client, db):
    active = make_product(db)
    make_product(db, is_active=False)

    response = client.get("/products/")

    assert [p["id"] for p in response.json()] == [active.id]
