from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from portal.core.security import create_access_token, decode_refresh_token
from portal.database.connection import get_db
from portal.dependencies.auth import require_auth
from portal.models.employee import Employee
from portal.schemas.employee import EmployeeResponse, RefreshRequest, Token

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/session", response_model=EmployeeResponse)
def current_session(employee: Employee = Depends(require_auth)):
    return employee


@router.post("/refresh", response_model=Token)
def refresh_token(data: RefreshRequest, db: Session = Depends(get_db)):
    payload = decode_refresh_token(data.refresh_token)

    if not payload.employee_id:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    employee = db.query(Employee).filter(Employee.id == payload.employee_id).first()
    if not employee or employee.is_locked:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    return Token(access_token=create_access_token({"sub": employee.id, "role": employee.role}))
