from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from portal.core.security import decode_access_token
from portal.database.connection import get_db
from portal.enums.roles import EmployeeRole
from portal.models.employee import Employee

# tokens are minted by the OTP login service; this app only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/refresh")


def get_current_employee(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Employee:
    token_data = decode_access_token(token)

    if not token_data.employee_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    employee = db.query(Employee).filter(Employee.id == token_data.employee_id).first()
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Employee not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if employee.is_locked:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Account is locked",
        )
    return employee


def require_auth(employee: Employee = Depends(get_current_employee)) -> Employee:
    return employee


def require_admin(employee: Employee = Depends(get_current_employee)) -> Employee:
    if employee.role != EmployeeRole.admin.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return employee


def require_procurement(employee: Employee = Depends(get_current_employee)) -> Employee:
    if employee.role not in (EmployeeRole.admin.value, EmployeeRole.procurement.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Procurement privileges required",
        )
    return employee
