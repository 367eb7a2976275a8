from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_admin, require_procurement
from portal.models.employee import Employee
from portal.schemas.branding import BrandingResponse, BrandingUpdate
from portal.schemas.bulk_buy import (
    BulkBuyAccessResponse,
    BulkBuyAccessUpsert,
    BulkBuyRequestResponse,
    BulkBuyStatusUpdate,
)
from portal.schemas.domain_whitelist import (
    DomainWhitelistCreate,
    DomainWhitelistResponse,
    DomainWhitelistUpdate,
)
from portal.schemas.employee import (
    EmployeeCreate,
    EmployeeImportRequest,
    EmployeeImportResult,
    EmployeeResponse,
    EmployeeUpdate,
)
from portal.schemas.order import OrderAmendment, OrderResponse
from portal.schemas.system import AdminStatsResponse
from portal.services import (
    branding_service,
    bulk_buy_service,
    domain_whitelist_service,
    employee_service,
    order_service,
)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ---------- EMPLOYEES ----------

@router.get("/employees", response_model=List[EmployeeResponse], dependencies=[Depends(require_admin)])
def list_employees_route(db: Session = Depends(get_db)):
    return employee_service.list_employees(db)


@router.post("/employees", response_model=EmployeeResponse, dependencies=[Depends(require_admin)])
def create_employee_route(data: EmployeeCreate, db: Session = Depends(get_db)):
    return employee_service.create_employee(db, data)


@router.post("/employees/bulk", response_model=EmployeeImportResult, dependencies=[Depends(require_admin)])
def import_employees_route(data: EmployeeImportRequest, db: Session = Depends(get_db)):
    return employee_service.import_employees(db, data.rows)


@router.put("/employees/{employee_id}", response_model=EmployeeResponse, dependencies=[Depends(require_admin)])
def update_employee_route(employee_id: str, data: EmployeeUpdate, db: Session = Depends(get_db)):
    return employee_service.update_employee(db, employee_id, data)


@router.post(
    "/employees/{employee_id}/unlock",
    response_model=EmployeeResponse,
    dependencies=[Depends(require_admin)],
)
def unlock_employee_route(employee_id: str, db: Session = Depends(get_db)):
    return employee_service.unlock_employee(db, employee_id)


# ---------- BRANDING ----------

@router.get("/branding", response_model=BrandingResponse)
def get_branding_route(db: Session = Depends(get_db)):
    return branding_service.get_branding(db)


@router.put("/branding", response_model=BrandingResponse, dependencies=[Depends(require_admin)])
def update_branding_route(data: BrandingUpdate, db: Session = Depends(get_db)):
    return branding_service.update_branding(db, data)


# ---------- DOMAIN WHITELIST ----------

@router.get(
    "/domain-whitelist",
    response_model=List[DomainWhitelistResponse],
    dependencies=[Depends(require_admin)],
)
def list_domains_route(db: Session = Depends(get_db)):
    return domain_whitelist_service.list_domains(db)


@router.post("/domain-whitelist", response_model=DomainWhitelistResponse, dependencies=[Depends(require_admin)])
def create_domain_route(data: DomainWhitelistCreate, db: Session = Depends(get_db)):
    return domain_whitelist_service.create_domain(db, data)


@router.put(
    "/domain-whitelist/{domain_id}",
    response_model=DomainWhitelistResponse,
    dependencies=[Depends(require_admin)],
)
def update_domain_route(domain_id: str, data: DomainWhitelistUpdate, db: Session = Depends(get_db)):
    return domain_whitelist_service.update_domain(db, domain_id, data)


@router.delete("/domain-whitelist/{domain_id}", dependencies=[Depends(require_admin)])
def delete_domain_route(domain_id: str, db: Session = Depends(get_db)):
    domain_whitelist_service.delete_domain(db, domain_id)
    return {"message": "Domain removed"}


# ---------- ORDERS ----------

@router.get("/orders", response_model=List[OrderResponse], dependencies=[Depends(require_admin)])
def list_orders_route(status: Optional[str] = None, db: Session = Depends(get_db)):
    return order_service.list_orders(db, status=status)


@router.patch("/orders/{order_pk}", response_model=OrderResponse, dependencies=[Depends(require_admin)])
def amend_order_route(order_pk: str, data: OrderAmendment, db: Session = Depends(get_db)):
    return order_service.amend_order(db, order_pk, data)


@router.get("/stats", response_model=AdminStatsResponse, dependencies=[Depends(require_admin)])
def stats_route(db: Session = Depends(get_db)):
    return order_service.admin_stats(db)


# ---------- BULK BUY ----------

@router.get(
    "/bulk-buy/requests",
    response_model=List[BulkBuyRequestResponse],
    dependencies=[Depends(require_procurement)],
)
def list_bulk_requests_route(status: Optional[str] = None, db: Session = Depends(get_db)):
    return bulk_buy_service.list_requests(db, status=status)


@router.put("/bulk-buy/requests/{request_pk}", response_model=BulkBuyRequestResponse)
def decide_bulk_request_route(
    request_pk: str,
    data: BulkBuyStatusUpdate,
    background_tasks: BackgroundTasks,
    approver: Employee = Depends(require_procurement),
    db: Session = Depends(get_db),
):
    return bulk_buy_service.decide_request(db, request_pk, data, approver, background_tasks)


@router.get(
    "/bulk-buy/access",
    response_model=List[BulkBuyAccessResponse],
    dependencies=[Depends(require_admin)],
)
def list_access_route(db: Session = Depends(get_db)):
    return bulk_buy_service.list_access(db)


@router.post(
    "/bulk-buy/access",
    response_model=List[BulkBuyAccessResponse],
    dependencies=[Depends(require_admin)],
)
def upsert_access_route(data: BulkBuyAccessUpsert, db: Session = Depends(get_db)):
    return bulk_buy_service.upsert_access(db, data)


@router.delete("/bulk-buy/access/{access_id}", dependencies=[Depends(require_admin)])
def remove_access_route(access_id: str, db: Session = Depends(get_db)):
    bulk_buy_service.remove_access(db, access_id)
    return {"message": "Access removed"}


@router.get("/bulk-buy/recipients", response_model=List[str], dependencies=[Depends(require_admin)])
def recipients_route(db: Session = Depends(get_db)):
    return bulk_buy_service.get_procurement_recipients(db)
