from typing import Optional

from pydantic import BaseModel

from se4x_ledger.schemas.turn import FacilityType


class ColonyCreate(BaseModel):
    name: Optional[str] = None


class FacilityRequest(BaseModel):
    type: FacilityType


class CapacityUpdate(BaseModel):
    cp: int
    manual: bool = True


class PlanetRename(BaseModel):
    name: str
