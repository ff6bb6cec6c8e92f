from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.database import get_db
from se4x_ledger.dependencies import apply_turn_operation, get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.planet import CapacityUpdate, ColonyCreate, FacilityRequest, PlanetRename
from se4x_ledger.schemas.turn import FacilityType, Turn
from se4x_ledger.services.planet_service import (
    add_colony,
    add_facility,
    conquer_planet,
    remove_facility,
    remove_planet,
    rename_planet,
    set_capacity,
)

router = APIRouter(prefix="/campaigns/{campaign_id}/planets", tags=["planets"])


@router.post("", response_model=list[Turn], status_code=status.HTTP_201_CREATED)
async def add_colony_endpoint(
    body: ColonyCreate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, add_colony, body.name)


@router.delete("/{planet_id}", response_model=list[Turn])
async def remove_planet_endpoint(
    planet_id: str,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, remove_planet, planet_id)


@router.post("/{planet_id}/facilities", response_model=list[Turn])
async def add_facility_endpoint(
    planet_id: str,
    body: FacilityRequest,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, add_facility, planet_id, body.type)


@router.delete("/{planet_id}/facilities/{facility_type}", response_model=list[Turn])
async def remove_facility_endpoint(
    planet_id: str,
    facility_type: FacilityType,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, remove_facility, planet_id, facility_type)


@router.post("/{planet_id}/conquer", response_model=list[Turn])
async def conquer_planet_endpoint(
    planet_id: str,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, conquer_planet, planet_id)


@router.put("/{planet_id}/capacity", response_model=list[Turn])
async def set_capacity_endpoint(
    planet_id: str,
    body: CapacityUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(
        db, campaign, set_capacity, planet_id, body.cp, manual=body.manual
    )


@router.put("/{planet_id}/name", response_model=list[Turn])
async def rename_planet_endpoint(
    planet_id: str,
    body: PlanetRename,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Rename a planet across the whole campaign."""
    return await apply_turn_operation(db, campaign, rename_planet, planet_id, body.name)
