from collections.abc import Callable
from typing import Any

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.database import get_db
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.campaign_service import get_campaign, load_turns, store_turns


async def get_campaign_or_404(campaign_id: int, db: AsyncSession = Depends(get_db)) -> Campaign:
    campaign = await get_campaign(db, campaign_id)
    if campaign is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
    return campaign


async def apply_turn_operation(
    db: AsyncSession,
    campaign: Campaign,
    operation: Callable[..., list[Turn]],
    *args: Any,
    **kwargs: Any,
) -> list[Turn]:
    """Run a turn-history operation on a campaign and store the result.

    The operation's ValueError becomes a 400 and nothing is stored.
    """
    try:
        turns = operation(load_turns(campaign), *args, **kwargs)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await store_turns(db, campaign, turns)
    return turns
