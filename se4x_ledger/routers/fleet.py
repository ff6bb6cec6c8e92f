from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.data.technologies import TechName
from se4x_ledger.data.units import list_units
from se4x_ledger.database import get_db
from se4x_ledger.dependencies import apply_turn_operation, get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.fleet import (
    CountUpdate,
    ExperienceUpdate,
    GroupTechUpdate,
    NotesUpdate,
    UnitResponse,
    UpgradeUpdate,
)
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.campaign_service import load_turns
from se4x_ledger.services.fleet_service import (
    effective_move,
    is_unit_locked,
    set_adjust,
    set_experience,
    set_group_tech,
    set_notes,
    set_purchase,
    set_upgraded,
    unit_badges,
)
from se4x_ledger.services.tech_resolver import accumulate_techs

router = APIRouter(prefix="/campaigns/{campaign_id}", tags=["fleet"])


@router.get("/units", response_model=list[UnitResponse])
async def list_units_endpoint(campaign: Campaign = Depends(get_campaign_or_404)):
    """Unit catalog with build locks and badges as of the latest turn."""
    ledger = accumulate_techs(load_turns(campaign))[-1]
    move_tech = ledger.best_level(TechName.movement)
    return [
        UnitResponse(
            acronym=unit.acronym,
            name=unit.name,
            category=unit.category,
            base_class=unit.base_class,
            hull_size=unit.hull_size,
            ship_size=unit.ship_size,
            cost=unit.cost,
            max_count=unit.max_count,
            groups=list(unit.groups),
            base_attack=unit.base_attack,
            base_defense=unit.base_defense,
            move_type=unit.move_type,
            special=unit.special,
            notes=unit.notes,
            locked=is_unit_locked(unit, ledger),
            badges=unit_badges(unit, ledger),
            move=effective_move(unit, move_tech),
        )
        for unit in list_units()
    ]


@router.put("/fleet/{acronym}/groups/{group_id}/purchase", response_model=list[Turn])
async def set_purchase_endpoint(
    acronym: str,
    group_id: int,
    body: CountUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, set_purchase, acronym, group_id, body.value)


@router.put("/fleet/{acronym}/groups/{group_id}/adjust", response_model=list[Turn])
async def set_adjust_endpoint(
    acronym: str,
    group_id: int,
    body: CountUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, set_adjust, acronym, group_id, body.value)


@router.put("/fleet/{acronym}/groups/{group_id}/upgrade", response_model=list[Turn])
async def set_upgraded_endpoint(
    acronym: str,
    group_id: int,
    body: UpgradeUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, set_upgraded, acronym, group_id, body.upgraded)


@router.put("/fleet/{acronym}/groups/{group_id}/experience", response_model=list[Turn])
async def set_experience_endpoint(
    acronym: str,
    group_id: int,
    body: ExperienceUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(
        db, campaign, set_experience, acronym, group_id, body.experience
    )


@router.put("/fleet/{acronym}/groups/{group_id}/techs", response_model=list[Turn])
async def set_group_tech_endpoint(
    acronym: str,
    group_id: int,
    body: GroupTechUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(
        db, campaign, set_group_tech, acronym, group_id, body.field, body.level
    )


@router.put("/fleet/{acronym}/notes", response_model=list[Turn])
async def set_notes_endpoint(
    acronym: str,
    body: NotesUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, set_notes, acronym, body.notes)
