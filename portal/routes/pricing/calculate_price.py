import logging
from datetime import datetime
from time import perf_counter

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_auth
from portal.schemas.product import PricePreviewResponse
from portal.services.branding_service import get_checkout_config
from portal.services.pricing_service.calculate_price import price_breakdown
from portal.services.product_service import get_product_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pricing"])


@router.get(
    "/products/{product_id}/calculate-price",
    response_model=PricePreviewResponse,
    dependencies=[Depends(require_auth)],
)
def calculate_price(
    product_id: str,
    quantity: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """
    Slab-aware unit price for a quantity, with the points it would cost
    at the current points rate.
    """
    product = get_product_or_404(db, product_id)
    config = get_checkout_config(db)

    start = perf_counter()
    result = price_breakdown(product, quantity, config.inr_per_point)
    duration_ms = (perf_counter() - start) * 1000.0

    if duration_ms > 30.0:
        logger.warning(
            "Price calculation for product %s took %.2f ms (quantity=%d)",
            product_id,
            duration_ms,
            quantity,
        )

    return PricePreviewResponse(
        product_id=product.id,
        quantity=quantity,
        computed_at=datetime.utcnow(),
        **result,
    )
