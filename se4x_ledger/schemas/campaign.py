from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from se4x_ledger.schemas.turn import CamelModel, Turn


class ResourceColors(CamelModel):
    cp: str = "#ffd700"
    lp: str = "#44ff44"
    rp: str = "#00f0ff"
    tp: str = "#a040ff"


class AppSettings(CamelModel):
    show_hud: bool = True
    colors: ResourceColors = Field(default_factory=ResourceColors)


class SaveDocument(CamelModel):
    """The portable campaign document: display settings plus the turn history."""
    settings: AppSettings = Field(default_factory=AppSettings)
    turns: list[Turn]


class CampaignCreate(BaseModel):
    name: str
    settings: Optional[AppSettings] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 255:
            raise ValueError("name must be between 1 and 255 characters")
        return v


class CampaignImport(BaseModel):
    name: str
    document: Any   # a SaveDocument as JSON text or an already-parsed object


class CampaignSettingsUpdate(BaseModel):
    settings: AppSettings


class CampaignSummary(BaseModel):
    id: int
    name: str
    turn_count: int
    created_at: datetime
    updated_at: datetime


class CampaignResponse(BaseModel):
    id: int
    name: str
    settings: AppSettings
    turns: list[Turn]
    created_at: datetime
    updated_at: datetime
