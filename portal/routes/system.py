from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_admin
from portal.schemas.system import HealthCheckResponse, SystemMetricsResponse
from portal.services.order_service import count_orders, count_pending_bulk_buy

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = datetime.utcnow()
    start_time = getattr(request.app.state, "start_time", now)

    db_ok = True
    extra = {}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_ok = False
        extra["db_error"] = str(e)

    return HealthCheckResponse(
        status="ok" if db_ok else "degraded",
        now=now,
        uptime_seconds=(now - start_time).total_seconds(),
        db_ok=db_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse, dependencies=[Depends(require_admin)])
def system_metrics(request: Request, db: Session = Depends(get_db)):
    """
    Admin-only system metrics in JSON form.
    Uses in-process counters stored on app.state.metrics and DB-derived metrics.
    """
    now = datetime.utcnow()
    start_time = getattr(request.app.state, "start_time", now)

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    start_today = datetime.combine(now.date(), datetime.min.time())

    return SystemMetricsResponse(
        uptime_seconds=(now - start_time).total_seconds(),
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        slow_requests=int(metrics.get("slow_requests", 0)),
        checkouts_committed=int(metrics.get("checkouts_committed", 0)),
        checkout_conflicts=int(metrics.get("checkout_conflicts", 0)),
        total_orders_today=count_orders(db, since=start_today),
        total_orders=count_orders(db),
        pending_bulk_buy_requests=count_pending_bulk_buy(db),
    )
