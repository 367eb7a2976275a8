from typing import List, Optional

from sqlalchemy.orm import Session

from portal.core.errors import ConflictError, NotFoundError, ValidationError
from portal.models.domain_whitelist import DomainWhitelist
from portal.schemas.domain_whitelist import (
    DomainCheckResponse,
    DomainWhitelistCreate,
    DomainWhitelistUpdate,
)


def clean_domain(value: str) -> str:
    domain = (value or "").strip().lower().lstrip("@")
    if not domain or "." not in domain or " " in domain:
        raise ValidationError("Invalid domain", domain=value)
    return domain


def email_domain(email: str) -> Optional[str]:
    _, _, domain = (email or "").strip().lower().partition("@")
    return domain or None


def list_domains(db: Session) -> List[DomainWhitelist]:
    return db.query(DomainWhitelist).order_by(DomainWhitelist.domain.asc()).all()


def get_domain(db: Session, domain_id: str) -> DomainWhitelist:
    row = db.query(DomainWhitelist).filter(DomainWhitelist.id == domain_id).first()
    if not row:
        raise NotFoundError("Domain not found", domain_id=domain_id)
    return row


def find_active_domain(db: Session, email: str) -> Optional[DomainWhitelist]:
    domain = email_domain(email)
    if not domain:
        return None
    return (
        db.query(DomainWhitelist)
        .filter(DomainWhitelist.domain == domain, DomainWhitelist.is_active.is_(True))
        .first()
    )


def create_domain(db: Session, data: DomainWhitelistCreate) -> DomainWhitelist:
    domain = clean_domain(data.domain)
    if db.query(DomainWhitelist).filter(DomainWhitelist.domain == domain).first():
        raise ConflictError("Domain already whitelisted", domain=domain)

    row = DomainWhitelist(**{**data.model_dump(), "domain": domain})
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_domain(db: Session, domain_id: str, data: DomainWhitelistUpdate) -> DomainWhitelist:
    row = get_domain(db, domain_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("domain") is not None:
        domain = clean_domain(updates["domain"])
        clash = (
            db.query(DomainWhitelist)
            .filter(DomainWhitelist.domain == domain, DomainWhitelist.id != row.id)
            .first()
        )
        if clash:
            raise ConflictError("Domain already whitelisted", domain=domain)
        updates["domain"] = domain

    for key, value in updates.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def delete_domain(db: Session, domain_id: str) -> None:
    row = get_domain(db, domain_id)
    db.delete(row)
    db.commit()


def check_domain(db: Session, email_or_domain: str) -> DomainCheckResponse:
    value = email_or_domain or ""
    domain = email_domain(value) if "@" in value else value.strip().lower()
    row = find_active_domain(db, f"x@{domain}") if domain else None
    return DomainCheckResponse(
        domain=domain or "",
        allowed=row is not None,
        auto_create_user=bool(row and row.auto_create_user),
        default_points=(row.default_points or 0) if row else 0,
    )
