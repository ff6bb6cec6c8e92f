"""Pydantic schemas for the research endpoints."""

from typing import Optional

from pydantic import BaseModel

from se4x_ledger.data.technologies import TechName
from se4x_ledger.services.research_service import TechStatus


class TechnologyResponse(BaseModel):
    name: TechName
    level: int
    cost: int
    description: str
    title: Optional[str]
    label: str

    model_config = {"from_attributes": True}


class ResearchEntryResponse(BaseModel):
    technology: TechnologyResponse
    status: TechStatus
    refundable: bool
    multi_level: bool

    model_config = {"from_attributes": True}


class TechPurchase(BaseModel):
    name: TechName
    level: int
