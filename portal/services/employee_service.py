import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from portal.core.errors import AccessDeniedError, ConflictError, NotFoundError
from portal.models.employee import Employee
from portal.schemas.employee import (
    EmployeeCreate,
    EmployeeImportRow,
    EmployeeImportResult,
    EmployeeUpdate,
)
from portal.services.domain_whitelist_service import find_active_domain

logger = logging.getLogger(__name__)


def to_bool_loose(value: Any) -> Optional[bool]:
    """Spreadsheet booleans: 1/0, true/false, yes/no, y/n. Anything else is None."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "y"):
        return True
    if text in ("0", "false", "no", "n"):
        return False
    return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return None


def _is_valid_email(email: str) -> bool:
    local, at, domain = email.partition("@")
    return bool(local and at and "." in domain and " " not in email and not domain.startswith("."))


def _domain_blocks(db: Session, email: str, employee_code: Optional[str]) -> bool:
    row = find_active_domain(db, email)
    return row is not None and row.can_login_without_employee_id is False and not employee_code


def get_employee(db: Session, employee_id: str) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id).first()


def get_employee_or_404(db: Session, employee_id: str) -> Employee:
    employee = get_employee(db, employee_id)
    if not employee:
        raise NotFoundError("Employee not found", employee_id=employee_id)
    return employee


def get_employee_by_email(db: Session, email: str) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.email == email.strip().lower()).first()


def list_employees(db: Session) -> List[Employee]:
    return db.query(Employee).order_by(Employee.created_at.desc()).all()


# ---------- CREATE ----------

def create_employee(db: Session, data: EmployeeCreate) -> Employee:
    email = data.email.strip().lower()

    if _domain_blocks(db, email, data.employee_code):
        raise AccessDeniedError("Email domain not authorized or requires whitelisting", email=email)
    if get_employee_by_email(db, email):
        raise ConflictError("Employee already exists (email)", email=email)

    values = data.model_dump()
    values["email"] = email
    values["role"] = data.role.value
    employee = Employee(**values)
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def import_employees(db: Session, rows: List[EmployeeImportRow]) -> EmployeeImportResult:
    """
    Insert new employees from sheet rows.

    Rows for existing emails only patch points and bulk buy access and are
    reported as skipped, as are rows with a bad email or missing names.
    """
    inserted = 0
    skipped = 0
    errors = []

    for index, row in enumerate(rows):
        email = (row.email or "").strip().lower()
        if not email or not _is_valid_email(email):
            skipped += 1
            errors.append(f"row {index + 1}: invalid email")
            continue
        if _domain_blocks(db, email, row.employee_code):
            skipped += 1
            errors.append(f"row {index + 1}: domain not authorized")
            continue

        bulk_buy_allowed = to_bool_loose(row.bulk_buy_allowed)
        points = _to_int(row.points)

        existing = get_employee_by_email(db, email)
        if existing:
            if points is not None and points >= 0:
                existing.points = points
                existing.version = (existing.version or 0) + 1
            if bulk_buy_allowed is not None:
                existing.bulk_buy_allowed = bulk_buy_allowed
            skipped += 1
            continue

        first_name = (row.first_name or "").strip()
        last_name = (row.last_name or "").strip()
        if not first_name or not last_name:
            skipped += 1
            errors.append(f"row {index + 1}: missing name")
            continue

        db.add(
            Employee(
                first_name=first_name,
                last_name=last_name,
                email=email,
                employee_code=(row.employee_code or "").strip() or None,
                phone_number=(row.phone_number or "").strip() or None,
                points=max(points or 0, 0),
                bulk_buy_allowed=bulk_buy_allowed or False,
            )
        )
        db.flush()
        inserted += 1

    db.commit()
    logger.info("Employee import: %d inserted, %d skipped", inserted, skipped)
    return EmployeeImportResult(inserted=inserted, skipped=skipped, errors=errors)


# ---------- UPDATE ----------

def update_employee(db: Session, employee_id: str, data: EmployeeUpdate) -> Employee:
    employee = get_employee_or_404(db, employee_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("email"):
        email = updates["email"].strip().lower()
        clash = get_employee_by_email(db, email)
        if clash and clash.id != employee.id:
            raise ConflictError("Employee already exists (email)", email=email)
        updates["email"] = email

    if updates.get("role") is not None:
        updates["role"] = updates["role"].value

    if "points" in updates:
        employee.version = (employee.version or 0) + 1

    for key, value in updates.items():
        if value is not None:
            setattr(employee, key, value)

    db.commit()
    db.refresh(employee)
    return employee


def unlock_employee(db: Session, employee_id: str) -> Employee:
    employee = get_employee_or_404(db, employee_id)
    employee.is_locked = False
    employee.login_attempts = 0
    db.commit()
    db.refresh(employee)
    return employee
