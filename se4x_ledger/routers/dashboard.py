from fastapi import APIRouter, Depends

from se4x_ledger.dependencies import get_campaign_or_404
from se4x_ledger.models.campaign import Campaign
from se4x_ledger.schemas.report import (
    DashboardResponse,
    GroupReadinessResponse,
    PlanetProductionResponse,
)
from se4x_ledger.services.campaign_service import load_turns
from se4x_ledger.services.report_service import empire_report

router = APIRouter(prefix="/campaigns/{campaign_id}", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(campaign: Campaign = Depends(get_campaign_or_404)):
    """Empire status report for the latest turn."""
    report = empire_report(load_turns(campaign))
    return DashboardResponse(
        turn_id=report.turn_id,
        vessels=report.vessels,
        obsolete_vessels=report.obsolete_vessels,
        planet_count=len(report.planets),
        technologies=report.technologies,
        fleet=[GroupReadinessResponse.model_validate(g) for g in report.fleet],
        planets=[PlanetProductionResponse.model_validate(p) for p in report.planets],
    )
