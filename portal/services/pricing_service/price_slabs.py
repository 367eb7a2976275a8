from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from portal.core.errors import ValidationError
from portal.schemas.product import PriceSlab


def _to_number(value: Any) -> Optional[Decimal]:
    """Finite Decimal for numbers and numeric strings, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _field(record: Any, snake: str, camel: str) -> Any:
    if not isinstance(record, dict):
        return None
    if snake in record:
        return record[snake]
    return record.get(camel)


def _upper(max_qty: Optional[Decimal]):
    return float("inf") if max_qty is None else max_qty


def normalize_price_slabs(raw: Any) -> List[PriceSlab]:
    """
    Turn the admin-supplied slab array into validated, sorted slabs.

    Records without a positive min quantity or without a price are dropped
    silently; everything else that is malformed raises ValidationError.
    A blank max quantity means the slab is open-ended.
    """
    if not isinstance(raw, list):
        return []

    cleaned = []
    for record in raw:
        min_qty = _to_number(_field(record, "min_qty", "minQty"))

        raw_max = _field(record, "max_qty", "maxQty")
        if raw_max is None or raw_max == "":
            max_qty = None
            max_given = False
        else:
            max_qty = _to_number(raw_max)
            max_given = True

        price = _field(record, "price", "price")
        price = str(price if price is not None else "").strip()

        if min_qty is None or min_qty <= 0 or price == "":
            continue
        cleaned.append((min_qty, max_qty, max_given, price))

    for min_qty, max_qty, max_given, price in cleaned:
        parsed_price = _to_number(price)
        if parsed_price is None or parsed_price < 0:
            raise ValidationError("Slab price must be a number >= 0", price=price)

        if max_given and (max_qty is None or max_qty < min_qty):
            raise ValidationError(
                "Max Qty must be empty (open-ended) or >= Min Qty",
                min_qty=str(min_qty),
            )

        if min_qty != min_qty.to_integral_value() or (
            max_qty is not None and max_qty != max_qty.to_integral_value()
        ):
            raise ValidationError("Slab quantities must be whole numbers", min_qty=str(min_qty))

    if sum(1 for s in cleaned if s[1] is None) > 1:
        raise ValidationError("Only one open-ended slab (blank Max Qty) is allowed")

    cleaned.sort(key=lambda s: (s[0], _upper(s[1])))

    for i, (a_min, a_max, _, _) in enumerate(cleaned):
        for b_min, b_max, _, _ in cleaned[i + 1:]:
            if a_min <= _upper(b_max) and b_min <= _upper(a_max):
                raise ValidationError(
                    "Slab ranges overlap. Please make ranges non-overlapping.",
                    first_min_qty=int(a_min),
                    second_min_qty=int(b_min),
                )

    return [
        PriceSlab(
            min_qty=int(min_qty),
            max_qty=None if max_qty is None else int(max_qty),
            price=price,
        )
        for min_qty, max_qty, _, price in cleaned
    ]


def slabs_to_json(slabs: List[PriceSlab]) -> List[dict]:
    return [slab.model_dump() for slab in slabs]
