from pydantic import BaseModel

from se4x_ledger.data.technologies import TechName
from se4x_ledger.schemas.turn import PlanetType


class GroupReadinessResponse(BaseModel):
    acronym: str
    name: str
    group_id: int
    base_class: str
    count: int
    attack: int
    defense: int
    move: int
    tactics: int
    obsolete: bool

    model_config = {"from_attributes": True}


class PlanetProductionResponse(BaseModel):
    planet_id: str
    name: str
    type: PlanetType
    capacity: int
    lp: int
    cp: int
    rp: int
    tp: int

    model_config = {"from_attributes": True}


class DashboardResponse(BaseModel):
    turn_id: int
    vessels: int
    obsolete_vessels: int
    planet_count: int
    technologies: dict[TechName, int]
    fleet: list[GroupReadinessResponse]
    planets: list[PlanetProductionResponse]
