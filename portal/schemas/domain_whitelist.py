from typing import Optional

from pydantic import BaseModel


class DomainWhitelistCreate(BaseModel):
    domain: str
    is_active: bool = True
    auto_create_user: bool = True
    default_points: int = 0
    can_login_without_employee_id: bool = True


class DomainWhitelistUpdate(BaseModel):
    domain: Optional[str] = None
    is_active: Optional[bool] = None
    auto_create_user: Optional[bool] = None
    default_points: Optional[int] = None
    can_login_without_employee_id: Optional[bool] = None


class DomainWhitelistResponse(DomainWhitelistCreate):
    id: str

    class Config:
        from_attributes = True


class DomainCheckResponse(BaseModel):
    domain: str
    allowed: bool
    auto_create_user: bool = False
    default_points: int = 0
