from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.schemas.domain_whitelist import DomainCheckResponse
from portal.services.domain_whitelist_service import check_domain

router = APIRouter(prefix="/domains", tags=["Domain Whitelist"])


# public: the login page asks before sending an OTP
@router.get("/check", response_model=DomainCheckResponse)
def check_route(email: str, db: Session = Depends(get_db)):
    return check_domain(db, email)
