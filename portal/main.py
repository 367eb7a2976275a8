import logging
from datetime import datetime

from fastapi import FastAPI

from portal.core.config import settings
from portal.core.errors import PortalError, portal_error_handler
from portal.database.connection import Base, engine
from portal.middleware.metrics import MetricsMiddleware, new_metrics
from portal.models import branding, bulk_buy, campaign, domain_whitelist, employee, order, product  # noqa: F401
from portal.routes import system
from portal.routes.admin import router as admin_router
from portal.routes.auth import router as auth_router
from portal.routes.bulk_buy import router as bulk_buy_router
from portal.routes.campaigns import router as campaigns_router
from portal.routes.cart import router as cart_router
from portal.routes.categories import router as categories_router
from portal.routes.domains import router as domains_router
from portal.routes.orders import router as orders_router
from portal.routes.pricing.calculate_price import router as calculate_price_router
from portal.routes.products import router as product_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Rewards Portal Checkout Service")

app.add_middleware(MetricsMiddleware)
app.add_exception_handler(PortalError, portal_error_handler)


app.include_router(auth_router)
app.include_router(product_router)
app.include_router(calculate_price_router)
app.include_router(categories_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(campaigns_router)
app.include_router(bulk_buy_router)
app.include_router(domains_router)
app.include_router(admin_router)
app.include_router(system.router)


@app.on_event("startup")
async def startup_event():
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()
