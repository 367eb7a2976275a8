from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from portal.enums.roles import EmployeeRole


class EmployeeBase(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    employee_code: Optional[str] = None
    phone_number: Optional[str] = None
    points: int = Field(default=0, ge=0)
    bulk_buy_allowed: bool = False
    role: EmployeeRole = EmployeeRole.user


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    employee_code: Optional[str] = None
    phone_number: Optional[str] = None
    points: Optional[int] = Field(default=None, ge=0)
    bulk_buy_allowed: Optional[bool] = None
    role: Optional[EmployeeRole] = None


class EmployeeResponse(BaseModel):
    id: str
    employee_code: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    points: int
    bulk_buy_allowed: bool
    role: str
    is_locked: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Rows arrive from spreadsheets, so every column is loose text.
class EmployeeImportRow(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    employee_code: Optional[str] = None
    phone_number: Optional[str] = None
    points: Optional[str] = None
    bulk_buy_allowed: Optional[str] = None
    role: Optional[str] = None


class EmployeeImportRequest(BaseModel):
    rows: List[EmployeeImportRow]


class EmployeeImportResult(BaseModel):
    inserted: int
    skipped: int
    errors: List[str] = []


class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenData(BaseModel):
    employee_id: Optional[str] = None
    role: Optional[str] = None
