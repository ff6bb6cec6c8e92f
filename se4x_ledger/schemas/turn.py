"""Pydantic schemas for the persisted turn history.

Field names are snake_case in Python and camelCase on the wire so that save
files keep the keys players already have (``placedOnLC``, ``isManualCP``,
``purchasedTechs`` ...).  Numeric ledger fields accept ``None`` and read it as 0.
"""

import enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _none_to_zero(value: Any) -> Any:
    return 0 if value is None or value == "" else value


Points = Annotated[int, BeforeValidator(_none_to_zero)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Experience(str, enum.Enum):
    green = "Green"
    skilled = "Skilled"
    veteran = "Veteran"
    elite = "Elite"
    legendary = "Legendary"


class PlanetType(str, enum.Enum):
    homeworld = "Homeworld"
    colony = "Colony"


class FacilityType(str, enum.Enum):
    industrial = "IC"
    research = "RC"
    temporal = "TC"
    logistic = "LC"


# ---------------------------------------------------------------------------
# Resource ledgers
# ---------------------------------------------------------------------------


class PlanetContribution(CamelModel):
    planet_name: str
    amount: int


class LogisticsLedger(CamelModel):
    carry_over: Points = 0
    income: Points = 0
    total_maintenance: Points = 0
    maintenance: Points = 0
    bid: Points = 0
    placed_on_lc: Points = Field(default=0, alias="placedOnLC")
    adjustment: Points = 0
    remaining: Points = 0
    planet_contributions: list[PlanetContribution] = Field(default_factory=list)
    maintenance_contributions: list[str] = Field(default_factory=list)


class ConstructionLedger(CamelModel):
    carry_over: Points = 0
    income: Points = 0
    mineral_cards: Points = 0
    pipeline: Points = 0
    penalty: Points = 0
    adjustment: Points = 0
    purchases: Points = 0
    remaining: Points = 0
    spent_on_upgrades: Points = 0
    purchased_units: list[str] = Field(default_factory=list)
    upgraded_units: list[str] = Field(default_factory=list)
    planet_contributions: list[PlanetContribution] = Field(default_factory=list)


class ResearchLedger(CamelModel):
    carry_over: Points = 0
    income: Points = 0
    spending: Points = 0
    adjustment: Points = 0
    remaining: Points = 0
    purchased_techs: list[str] = Field(default_factory=list)
    planet_contributions: list[PlanetContribution] = Field(default_factory=list)


class TemporalLedger(CamelModel):
    carry_over: Points = 0
    income: Points = 0
    spending: Points = 0
    adjustment: Points = 0
    remaining: Points = 0
    planet_contributions: list[PlanetContribution] = Field(default_factory=list)


# Fields a player may type into each ledger; everything else is derived
LEDGER_INPUT_FIELDS: dict[str, frozenset[str]] = {
    "lp": frozenset({"bid", "placed_on_lc", "adjustment"}),
    "cp": frozenset({"mineral_cards", "pipeline", "adjustment"}),
    "rp": frozenset({"spending", "adjustment"}),
    "tp": frozenset({"spending", "adjustment"}),
}


# ---------------------------------------------------------------------------
# Fleet
# ---------------------------------------------------------------------------


class TechSnapshot(CamelModel):
    """Technology levels fitted to a unit group, stored as level strings."""
    attack: Optional[str] = None
    defense: Optional[str] = None
    tactics: Optional[str] = None
    move: Optional[str] = None


class UnitGroup(CamelModel):
    id: int
    count: Points = 0
    purchase: Points = 0
    adjust: Points = 0
    tech_level: list[str] = Field(default_factory=list)
    is_upgraded: bool = False
    experience: Optional[Experience] = None
    techs: TechSnapshot = Field(default_factory=TechSnapshot)

    @property
    def total(self) -> int:
        return self.count + self.purchase + self.adjust


class FleetEntry(CamelModel):
    groups: list[UnitGroup] = Field(default_factory=list)
    notes: Optional[str] = None

    def find_group(self, group_id: int) -> UnitGroup | None:
        return next((g for g in self.groups if g.id == group_id), None)


# ---------------------------------------------------------------------------
# Planets
# ---------------------------------------------------------------------------


class Facility(CamelModel):
    type: FacilityType
    built_turn_id: int   # 0 = pre-existing, -1 = captured (active immediately)


class DemolishedFacility(CamelModel):
    type: FacilityType
    original_built_turn_id: int


class Planet(CamelModel):
    id: str
    name: str
    type: PlanetType
    cp: Points = 0
    facilities: list[Facility] = Field(default_factory=list)
    image: Optional[str] = None
    is_manual_cp: Optional[bool] = Field(default=None, alias="isManualCP")
    is_newly_added: Optional[bool] = None
    is_conquered: Optional[bool] = None
    demolished_facilities: Optional[list[DemolishedFacility]] = None


# ---------------------------------------------------------------------------
# Turn
# ---------------------------------------------------------------------------


class Turn(CamelModel):
    id: int
    lp: LogisticsLedger = Field(default_factory=LogisticsLedger)
    cp: ConstructionLedger = Field(default_factory=ConstructionLedger)
    rp: ResearchLedger = Field(default_factory=ResearchLedger)
    tp: TemporalLedger = Field(default_factory=TemporalLedger)
    fleet: dict[str, FleetEntry] = Field(default_factory=dict)
    planets: list[Planet] = Field(default_factory=list)
    deleted_planet_ids: Optional[list[str]] = None
    log_commentary: Optional[str] = None

    def find_planet(self, planet_id: str) -> Planet | None:
        return next((p for p in self.planets if p.id == planet_id), None)

    def ledger(self, section: str) -> BaseModel:
        if section not in LEDGER_INPUT_FIELDS:
            raise ValueError(f"Unknown ledger section: '{section}'")
        return getattr(self, section)


# ---------------------------------------------------------------------------
# Request / response bodies for the turn endpoints
# ---------------------------------------------------------------------------


class AddTurnRequest(BaseModel):
    auto_adjust: bool = False


class LedgerUpdate(BaseModel):
    updates: dict[str, Optional[int]]


class LogUpdate(BaseModel):
    text: str


class TurnSummaryResponse(BaseModel):
    turn_id: int
    events: list[str]
    log_commentary: str = ""
