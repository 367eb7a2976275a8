import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Union

from portal.core.errors import ValidationError
from portal.schemas.product import PriceSlab

Number = Union[int, float, str, Decimal]

_CENTS = Decimal("0.01")


def _decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _stored_slabs(product: Any) -> List[PriceSlab]:
    """Slabs are persisted already normalized; re-read them as typed records."""
    raw = getattr(product, "price_slabs", None) or []
    return [s if isinstance(s, PriceSlab) else PriceSlab.model_validate(s) for s in raw]


def get_unit_price_for_qty(product: Any, quantity: int) -> Decimal:
    """
    Unit price for buying `quantity` units of `product`.

    The first slab (ascending) whose range holds the quantity wins; no slabs,
    no match, or an unusable slab price all fall back to the base price.
    """
    if quantity is None or quantity < 1:
        raise ValidationError("Quantity must be at least 1", quantity=quantity)

    base = _decimal(product.base_price or 0)
    for slab in _stored_slabs(product):
        upper = slab.max_qty if slab.max_qty is not None else math.inf
        if slab.min_qty <= quantity <= upper:
            try:
                price = Decimal(slab.price)
            except InvalidOperation:
                return base
            if not price.is_finite() or price < 0:
                return base
            return price
    return base


# ===================== POINTS ARITHMETIC =====================


def points_per_unit(unit_price: Number, inr_per_point: Number) -> int:
    return math.ceil(_decimal(unit_price) / _decimal(inr_per_point))


def used_points(unit_price: Number, quantity: int, inr_per_point: Number) -> int:
    # ceiling is taken per unit, never on the line total
    return points_per_unit(unit_price, inr_per_point) * quantity


def copay_amount(deficit_points: int, inr_per_point: Number) -> int:
    return math.ceil(Decimal(deficit_points) * _decimal(inr_per_point))


def line_total(unit_price: Number, quantity: int) -> Decimal:
    return (_decimal(unit_price) * quantity).quantize(_CENTS, rounding=ROUND_HALF_UP)


def price_breakdown(product: Any, quantity: int, inr_per_point: Number) -> Dict[str, Any]:
    unit_price = get_unit_price_for_qty(product, quantity)
    per_unit = points_per_unit(unit_price, inr_per_point)
    return {
        "unit_price": unit_price,
        "line_total": line_total(unit_price, quantity),
        "points_per_unit": per_unit,
        "total_points": per_unit * quantity,
    }
