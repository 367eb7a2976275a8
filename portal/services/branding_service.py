from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from portal.core.errors import ValidationError
from portal.models.branding import Branding
from portal.schemas.branding import BrandingUpdate


@dataclass(frozen=True)
class CheckoutConfig:
    """Points rate and selection cap in force for one checkout."""

    inr_per_point: Decimal = Decimal("1")
    max_selections_per_user: int = 1  # -1 = unlimited


def get_branding(db: Session) -> Branding:
    branding = db.query(Branding).first()
    if branding is None:
        branding = Branding()
        db.add(branding)
        db.commit()
        db.refresh(branding)
    return branding


def update_branding(db: Session, data: BrandingUpdate) -> Branding:
    branding = get_branding(db)
    updates = data.model_dump(exclude_unset=True)

    rate = updates.get("inr_per_point")
    if rate is not None and (not rate.is_finite() or rate <= 0):
        raise ValidationError("INR per point must be greater than 0", inr_per_point=str(rate))

    cap = updates.get("max_selections_per_user")
    if cap is not None and cap < -1:
        raise ValidationError(
            "Max selections must be -1 (unlimited) or a non-negative number",
            max_selections_per_user=cap,
        )

    for key, value in updates.items():
        setattr(branding, key, value)

    db.commit()
    db.refresh(branding)
    return branding


def get_checkout_config(db: Session) -> CheckoutConfig:
    """Read the branding row fresh; called once per checkout."""
    branding = get_branding(db)
    rate = Decimal(str(branding.inr_per_point or 1))
    if rate <= 0:
        rate = Decimal("1")
    cap = branding.max_selections_per_user
    return CheckoutConfig(
        inr_per_point=rate,
        max_selections_per_user=1 if cap is None else int(cap),
    )
