import pytest

from portal.core.errors import ValidationError
from portal.services.pricing_service.price_slabs import normalize_price_slabs, slabs_to_json


def test_non_list_input_gives_no_slabs():
    assert normalize_price_slabs(None) == []
    assert normalize_price_slabs("1-9:100") == []
    assert normalize_price_slabs({"min_qty": 1, "price": "10"}) == []


def test_slabs_are_sorted_and_keep_price_text():
    slabs = normalize_price_slabs(
        [
            {"min_qty": 10, "max_qty": "", "price": "80"},
            {"minQty": "1", "maxQty": "9", "price": " 100 "},
        ]
    )

    assert [(s.min_qty, s.max_qty, s.price) for s in slabs] == [(1, 9, "100"), (10, None, "80")]


def test_records_without_min_or_price_are_dropped():
    slabs = normalize_price_slabs(
        [
            {"min_qty": 0, "max_qty": 5, "price": "10"},
            {"min_qty": 1, "max_qty": 5, "price": ""},
            {"max_qty": 5, "price": "10"},
            "garbage",
            {"min_qty": 6, "max_qty": None, "price": "9"},
        ]
    )

    assert len(slabs) == 1
    assert slabs[0].min_qty == 6


def test_negative_price_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_price_slabs([{"min_qty": 1, "max_qty": 5, "price": "-1"}])
    assert exc.value.message == "Slab price must be a number >= 0"


def test_non_numeric_price_rejected():
    with pytest.raises(ValidationError):
        normalize_price_slabs([{"min_qty": 1, "max_qty": 5, "price": "abc"}])


def test_max_below_min_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_price_slabs([{"min_qty": 5, "max_qty": 2, "price": "10"}])
    assert exc.value.message == "Max Qty must be empty (open-ended) or >= Min Qty"


def test_fractional_quantities_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_price_slabs([{"min_qty": 1.5, "max_qty": 5, "price": "10"}])
    assert exc.value.message == "Slab quantities must be whole numbers"


def test_second_open_ended_slab_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_price_slabs(
            [
                {"min_qty": 1, "max_qty": "", "price": "10"},
                {"min_qty": 50, "price": "8"},
            ]
        )
    assert exc.value.message == "Only one open-ended slab (blank Max Qty) is allowed"


def test_overlapping_ranges_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_price_slabs(
            [
                {"min_qty": 1, "max_qty": 10, "price": "10"},
                {"min_qty": 10, "max_qty": 20, "price": "9"},
            ]
        )
    assert exc.value.message == "Slab ranges overlap. Please make ranges non-overlapping."


def test_open_ended_slab_overlapping_later_slab_rejected():
    with pytest.raises(ValidationError):
        normalize_price_slabs(
            [
                {"min_qty": 5, "max_qty": "", "price": "10"},
                {"min_qty": 20, "max_qty": 30, "price": "9"},
            ]
        )


def test_adjacent_ranges_allowed_and_serialized():
    slabs = normalize_price_slabs(
        [
            {"min_qty": 1, "max_qty": 9, "price": "100"},
            {"min_qty": 10, "max_qty": 49, "price": "90"},
            {"min_qty": 50, "max_qty": "", "price": "75.50"},
        ]
    )

    assert slabs_to_json(slabs) == [
        {"min_qty": 1, "max_qty": 9, "price": "100"},
        {"min_qty": 10, "max_qty": 49, "price": "90"},
        {"min_qty": 50, "max_qty": None, "price": "75.50"},
    ]


def test_partially_overlapping_ranges_rejected():
    with pytest.raises(ValidationError):
        normalize_price_slabs(
            [
                {"min_qty": 1, "max_qty": 10, "price": "100"},
                {"min_qty": 5, "max_qty": 15, "price": "90"},
            ]
        )
