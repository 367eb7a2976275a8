from decimal import Decimal
from types import SimpleNamespace

import pytest

from factories import auth_header, make_employee, make_product, set_branding
from portal.core.errors import ValidationError
from portal.services.pricing_service.calculate_price import (
    copay_amount,
    get_unit_price_for_qty,
    line_total,
    points_per_unit,
    price_breakdown,
    used_points,
)

SLABS = [
    {"min_qty": 1, "max_qty": 9, "price": "100"},
    {"min_qty": 10, "max_qty": 49, "price": "90"},
    {"min_qty": 50, "max_qty": None, "price": "75"},
]


def _product(base_price="120", slabs=None):
    return SimpleNamespace(base_price=Decimal(base_price), price_slabs=slabs or [])


@pytest.mark.parametrize(
    "quantity, expected",
    [(1, "100"), (9, "100"), (10, "90"), (49, "90"), (50, "75"), (500, "75")],
)
def test_slab_boundaries(quantity, expected):
    assert get_unit_price_for_qty(_product(slabs=SLABS), quantity) == Decimal(expected)


def test_no_slabs_uses_base_price():
    assert get_unit_price_for_qty(_product("120"), 3) == Decimal("120")


def test_gap_between_slabs_falls_back_to_base():
    product = _product("120", [{"min_qty": 5, "max_qty": 9, "price": "100"}])
    assert get_unit_price_for_qty(product, 2) == Decimal("120")


def test_unusable_slab_price_falls_back_to_base():
    product = _product("120", [{"min_qty": 1, "max_qty": None, "price": "n/a"}])
    assert get_unit_price_for_qty(product, 4) == Decimal("120")


def test_quantity_below_one_rejected():
    with pytest.raises(ValidationError):
        get_unit_price_for_qty(_product(), 0)


def test_points_are_ceiled_per_unit():
    # 99 / 2 = 49.5 -> 50 points per unit, 150 for three units
    assert points_per_unit(Decimal("99"), Decimal("2")) == 50
    assert used_points(Decimal("99"), 3, Decimal("2")) == 150


def test_fractional_rate():
    assert points_per_unit("100", "0.75") == 134
    assert copay_amount(7, "0.75") == 6


def test_copay_rounds_up_to_whole_rupees():
    assert copay_amount(200, Decimal("1")) == 200
    assert copay_amount(3, Decimal("1.5")) == 5


def test_line_total_two_decimals():
    assert line_total(Decimal("33.333"), 3) == Decimal("100.00")


def test_price_breakdown():
    breakdown = price_breakdown(_product(slabs=SLABS), 10, Decimal("4"))

    assert breakdown == {
        "unit_price": Decimal("90"),
        "line_total": Decimal("900.00"),
        "points_per_unit": 23,
        "total_points": 230,
    }


def test_calculate_price_route(client, db):
    set_branding(db, inr_per_point="2")
    product = make_product(db, base_price="120", slabs=SLABS)
    employee = make_employee(db)

    response = client.get(
        f"/products/{product.id}/calculate-price",
        params={"quantity": 10},
        headers=auth_header(employee),
    )

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["unit_price"]) == Decimal("90")
    assert body["points_per_unit"] == 45
    assert body["total_points"] == 450


def test_calculate_price_route_unknown_product(client, db):
    employee = make_employee(db)
    response = client.get(
        "/products/missing/calculate-price", params={"quantity": 1}, headers=auth_header(employee)
    )
    assert response.status_code == 404


def test_two_slab_catalogue_boundaries():
    product = _product(
        "120",
        [{"min_qty": 1, "max_qty": 9, "price": "100"}, {"min_qty": 10, "max_qty": None, "price": "80"}],
    )

    assert get_unit_price_for_qty(product, 5) == Decimal("100")
    assert get_unit_price_for_qty(product, 9) == Decimal("100")
    assert get_unit_price_for_qty(product, 10) == Decimal("80")
    assert get_unit_price_for_qty(product, 7) == get_unit_price_for_qty(product, 7)
