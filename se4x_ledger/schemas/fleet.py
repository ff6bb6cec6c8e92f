"""Pydantic schemas for the fleet and unit catalog endpoints."""

from typing import Literal, Optional, Union

from pydantic import BaseModel

from se4x_ledger.data.units import MoveType, UnitCategory
from se4x_ledger.schemas.turn import Experience


class UnitResponse(BaseModel):
    acronym: str
    name: str
    category: UnitCategory
    base_class: str
    hull_size: int
    ship_size: Optional[int]
    cost: int
    max_count: int
    groups: list[int]
    base_attack: Union[int, str]
    base_defense: Union[int, str]
    move_type: MoveType
    special: str
    notes: str
    locked: bool
    badges: list[str]
    move: int


class CountUpdate(BaseModel):
    value: int


class UpgradeUpdate(BaseModel):
    upgraded: bool


class ExperienceUpdate(BaseModel):
    experience: Optional[Experience] = None


class GroupTechUpdate(BaseModel):
    field: Literal["attack", "defense", "tactics", "move"]
    level: int


class NotesUpdate(BaseModel):
    notes: str
