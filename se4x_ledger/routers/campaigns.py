from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from se4x_ledger.database import get_db
from se4x_ledger.dependencies import get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.campaign import (
    CampaignCreate,
    CampaignImport,
    CampaignResponse,
    CampaignSettingsUpdate,
    CampaignSummary,
)
from se4x_ledger.services.campaign_service import (
    create_campaign,
    delete_campaign,
    import_campaign,
    list_campaigns,
    load_settings,
    load_turns,
    update_settings,
)
from se4x_ledger.services.save_service import SaveDataError, export_document, export_filename

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def _to_response(campaign: Campaign) -> CampaignResponse:
    return CampaignResponse(
        id=campaign.id,
        name=campaign.name,
        settings=load_settings(campaign),
        turns=load_turns(campaign),
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign_endpoint(body: CampaignCreate, db: AsyncSession = Depends(get_db)):
    campaign = await create_campaign(db, body.name, settings=body.settings)
    return _to_response(campaign)


@router.get("", response_model=list[CampaignSummary])
async def list_campaigns_endpoint(db: AsyncSession = Depends(get_db)):
    campaigns = await list_campaigns(db)
    return [
        CampaignSummary(
            id=c.id,
            name=c.name,
            turn_count=len(c.turns),
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
        for c in campaigns
    ]


@router.post("/import", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def import_campaign_endpoint(body: CampaignImport, db: AsyncSession = Depends(get_db)):
    try:
        campaign = await import_campaign(db, body.name, body.document)
    except SaveDataError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _to_response(campaign)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign_endpoint(campaign: Campaign = Depends(get_campaign_or_404)):
    return _to_response(campaign)


@router.put("/{campaign_id}/settings", response_model=CampaignResponse)
async def update_settings_endpoint(
    body: CampaignSettingsUpdate,
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    campaign = await update_settings(db, campaign, body.settings)
    return _to_response(campaign)


@router.get("/{campaign_id}/export")
async def export_campaign_endpoint(campaign: Campaign = Depends(get_campaign_or_404)):
    """Download the campaign as a save document."""
    document = export_document(load_settings(campaign), load_turns(campaign))
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign_endpoint(
    campaign: Campaign = Depends(get_campaign_or_404),
    db: AsyncSession = Depends(get_db),
):
    await delete_campaign(db, campaign)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
