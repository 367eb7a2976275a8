from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    db_ok: bool
    extra: Optional[Dict[str, Any]] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    avg_response_ms: Optional[float] = None
    slow_requests: int = 0
    checkouts_committed: int = 0
    checkout_conflicts: int = 0

    # DB metrics
    total_orders_today: int
    total_orders: int
    pending_bulk_buy_requests: int

    extra: Optional[Dict[str, Any]] = None


class AdminStatsResponse(BaseModel):
    total_employees: int
    total_products: int
    active_products: int
    total_orders: int
    orders_by_status: Dict[str, int]
    total_points_outstanding: int
    active_campaigns: int
    pending_bulk_buy_requests: int
