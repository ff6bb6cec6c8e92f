from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.database import get_db
from se4x_ledger.dependencies import apply_turn_operation, get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.turn import (
    AddTurnRequest,
    LedgerUpdate,
    LogUpdate,
    Turn,
    TurnSummaryResponse,
)
from se4x_ledger.services.campaign_service import load_turns
from se4x_ledger.services.turn_service import (
    add_turn,
    delete_last_turn,
    turn_summary,
    update_ledger,
    update_log,
)

router = APIRouter(prefix="/campaigns/{campaign_id}/turns", tags=["turns"])


@router.get("", response_model=list[Turn])
async def list_turns(campaign: Campaign = Depends(get_campaign_or_404)):
    return load_turns(campaign)


@router.post("", response_model=list[Turn], status_code=status.HTTP_201_CREATED)
async def add_turn_endpoint(
    body: Optional[AddTurnRequest] = None,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Advance to the next turn, carrying fleet, planets and balances forward."""
    auto_adjust = body.auto_adjust if body is not None else False
    return await apply_turn_operation(db, campaign, add_turn, auto_adjust=auto_adjust)


@router.delete("/last", response_model=list[Turn])
async def delete_last_turn_endpoint(
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, delete_last_turn)


@router.get("/summaries", response_model=list[TurnSummaryResponse])
async def turn_summaries(campaign: Campaign = Depends(get_campaign_or_404)):
    return [
        TurnSummaryResponse(
            turn_id=turn.id,
            events=turn_summary(turn),
            log_commentary=turn.log_commentary or "",
        )
        for turn in load_turns(campaign)
    ]


@router.patch("/{turn_id}/ledgers/{section}", response_model=list[Turn])
async def update_ledger_endpoint(
    turn_id: int,
    section: str,
    body: LedgerUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, update_ledger, turn_id, section, body.updates)


@router.put("/{turn_id}/log", response_model=list[Turn])
async def update_log_endpoint(
    turn_id: int,
    body: LogUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await apply_turn_operation(db, campaign, update_log, turn_id, body.text)
