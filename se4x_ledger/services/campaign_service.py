"""Campaign storage: loading and saving turn histories in the database."""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.campaign import AppSettings
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.save_service import import_document
from se4x_ledger.services.turn_service import new_campaign_turns

logger = logging.getLogger(__name__)


def _dump_turns(turns: Sequence[Turn]) -> list[dict[str, Any]]:
    return [turn.model_dump(mode="json", by_alias=True, exclude_none=True) for turn in turns]


def _dump_settings(settings: AppSettings) -> dict[str, Any]:
    return settings.model_dump(mode="json", by_alias=True)


def load_turns(campaign: Campaign) -> list[Turn]:
    return [Turn.model_validate(data) for data in campaign.turns]


def load_settings(campaign: Campaign) -> AppSettings:
    return AppSettings.model_validate(campaign.settings or {})


async def create_campaign(
    db: AsyncSession,
    name: str,
    settings: AppSettings | None = None,
    turns: Sequence[Turn] | None = None,
) -> Campaign:
    """Start a campaign, seeded with the opening turn unless turns are given."""
    campaign = Campaign(
        name=name,
        settings=_dump_settings(settings or AppSettings()),
        turns=_dump_turns(turns if turns is not None else new_campaign_turns()),
    )
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    logger.info("Created campaign %d (%s)", campaign.id, campaign.name)
    return campaign


async def import_campaign(db: AsyncSession, name: str, raw: Any) -> Campaign:
    """Create a campaign from a save document; raises SaveDataError when invalid."""
    document = import_document(raw)
    return await create_campaign(db, name, settings=document.settings, turns=document.turns)


async def get_campaign(db: AsyncSession, campaign_id: int) -> Campaign | None:
    result = await db.execute(select(Campaign).where(Campaign.id == campaign_id))
    return result.scalar_one_or_none()


async def list_campaigns(db: AsyncSession) -> list[Campaign]:
    result = await db.execute(select(Campaign).order_by(Campaign.updated_at.desc(), Campaign.id.desc()))
    return list(result.scalars().all())


async def store_turns(db: AsyncSession, campaign: Campaign, turns: Sequence[Turn]) -> Campaign:
    campaign.turns = _dump_turns(turns)
    await db.commit()
    await db.refresh(campaign)
    return campaign


async def update_settings(db: AsyncSession, campaign: Campaign, settings: AppSettings) -> Campaign:
    campaign.settings = _dump_settings(settings)
    await db.commit()
    await db.refresh(campaign)
    return campaign


async def delete_campaign(db: AsyncSession, campaign: Campaign) -> None:
    await db.delete(campaign)
    await db.commit()
    logger.info("Deleted campaign %d", campaign.id)
