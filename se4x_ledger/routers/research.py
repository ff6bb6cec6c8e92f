"""Research router: technology catalog, research board, buying and refunds."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.data.technologies import list_technologies
from se4x_ledger.database import get_db
from se4x_ledger.dependencies import apply_turn_operation, get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.research import (
    ResearchEntryResponse,
    TechnologyResponse,
    TechPurchase,
)
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.campaign_service import load_turns
from se4x_ledger.services.research_service import (
    buy_technology,
    refund_technology,
    research_board,
)

router = APIRouter(prefix="/campaigns/{campaign_id}/research", tags=["research"])
catalog_router = APIRouter(prefix="/technologies", tags=["research"])


@catalog_router.get("", response_model=list[TechnologyResponse])
async def list_technologies_endpoint():
    return [TechnologyResponse.model_validate(tech) for tech in list_technologies()]


@router.get("", response_model=list[ResearchEntryResponse])
async def research_board_endpoint(
    turn_id: Optional[int] = None,
    campaign: Campaign = Depends(get_campaign_or_404),
):
    """Status of every technology level as seen from a turn (latest by default)."""
    try:
        board = research_board(load_turns(campaign), turn_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [ResearchEntryResponse.model_validate(entry) for entry in board]


@router.post("/purchases", response_model=list[Turn])
async def buy_technology_endpoint(
    body: TechPurchase,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, buy_technology, body.name, body.level)


@router.post("/refunds", response_model=list[Turn])
async def refund_technology_endpoint(
    body: TechPurchase,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, refund_technology, body.name, body.level)
