from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.database.connection import get_db
from portal.dependencies.auth import require_admin, require_auth
from portal.models.employee import Employee
from portal.schemas.campaign import (
    CampaignCreate,
    CampaignProductLink,
    CampaignResponse,
    CampaignUpdate,
    RemainingLimitResponse,
    WhitelistEntryCreate,
    WhitelistEntryResponse,
)
from portal.schemas.product import ProductResponse
from portal.services import campaign_service

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


# ---------- EMPLOYEE VIEWS ----------

@router.get("/", response_model=List[CampaignResponse])
def available_route(employee: Employee = Depends(require_auth), db: Session = Depends(get_db)):
    return campaign_service.list_available_campaigns(db, employee)


@router.get("/all", response_model=List[CampaignResponse], dependencies=[Depends(require_admin)])
def list_all_route(db: Session = Depends(get_db)):
    return campaign_service.list_campaigns(db)


@router.get("/{campaign_id}", response_model=CampaignResponse, dependencies=[Depends(require_auth)])
def get_route(campaign_id: str, db: Session = Depends(get_db)):
    return campaign_service.get_campaign(db, campaign_id)


@router.get("/{campaign_id}/products", response_model=List[ProductResponse], dependencies=[Depends(require_auth)])
def products_route(campaign_id: str, db: Session = Depends(get_db)):
    campaign_service.get_campaign(db, campaign_id)
    return campaign_service.get_campaign_products(db, campaign_id)


@router.get("/{campaign_id}/remaining", response_model=RemainingLimitResponse)
def remaining_route(
    campaign_id: str,
    employee: Employee = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return campaign_service.get_remaining_limit(db, campaign_id, employee)


# ---------- ADMIN ----------

@router.post("/", response_model=CampaignResponse, dependencies=[Depends(require_admin)])
def create_route(data: CampaignCreate, db: Session = Depends(get_db)):
    return campaign_service.create_campaign(db, data)


@router.put("/{campaign_id}", response_model=CampaignResponse, dependencies=[Depends(require_admin)])
def update_route(campaign_id: str, data: CampaignUpdate, db: Session = Depends(get_db)):
    return campaign_service.update_campaign(db, campaign_id, data)


@router.delete("/{campaign_id}", dependencies=[Depends(require_admin)])
def delete_route(campaign_id: str, db: Session = Depends(get_db)):
    campaign_service.delete_campaign(db, campaign_id)
    return {"message": "Campaign deleted"}


@router.post("/{campaign_id}/products", response_model=List[ProductResponse], dependencies=[Depends(require_admin)])
def link_products_route(campaign_id: str, data: CampaignProductLink, db: Session = Depends(get_db)):
    return campaign_service.add_products(db, campaign_id, data.product_ids)


@router.delete("/{campaign_id}/products/{product_id}", dependencies=[Depends(require_admin)])
def unlink_product_route(campaign_id: str, product_id: str, db: Session = Depends(get_db)):
    campaign_service.remove_product(db, campaign_id, product_id)
    return {"message": "Product removed from campaign"}


@router.get(
    "/{campaign_id}/whitelist",
    response_model=List[WhitelistEntryResponse],
    dependencies=[Depends(require_admin)],
)
def whitelist_route(campaign_id: str, db: Session = Depends(get_db)):
    return campaign_service.list_whitelist(db, campaign_id)


@router.post(
    "/{campaign_id}/whitelist",
    response_model=WhitelistEntryResponse,
    dependencies=[Depends(require_admin)],
)
def add_whitelist_route(campaign_id: str, data: WhitelistEntryCreate, db: Session = Depends(get_db)):
    return campaign_service.add_whitelist_entry(db, campaign_id, data)


@router.delete("/{campaign_id}/whitelist/{entry_id}", dependencies=[Depends(require_admin)])
def remove_whitelist_route(campaign_id: str, entry_id: str, db: Session = Depends(get_db)):
    campaign_service.remove_whitelist_entry(db, campaign_id, entry_id)
    return {"message": "Whitelist entry removed"}
