"""Empire status report for the latest turn of a campaign.

Responsibilities:
  - Technology inventory: the best level reached on every track
  - Fleet readiness: each active group, flagged obsolete when a refit would
    improve it
  - Planet production per resource
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from se4x_ledger.data.technologies import TechName, list_technologies
from se4x_ledger.data.units import MoveType, UnitCategory, UnitDefinition, find_unit
from se4x_ledger.schemas.turn import PlanetType, Turn, UnitGroup
from se4x_ledger.services.planet_service import planet_output
from se4x_ledger.services.tech_resolver import TechLedger, accumulate_techs


@dataclass
class GroupReadiness:
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


@dataclass
class PlanetProduction:
    planet_id: str
    name: str
    type: PlanetType
    capacity: int
    lp: int
    cp: int
    rp: int
    tp: int


@dataclass
class EmpireReport:
    turn_id: int
    technologies: dict[TechName, int] = field(default_factory=dict)
    fleet: list[GroupReadiness] = field(default_factory=list)
    planets: list[PlanetProduction] = field(default_factory=list)

    @property
    def vessels(self) -> int:
        return sum(g.count for g in self.fleet)

    @property
    def obsolete_vessels(self) -> int:
        return sum(g.count for g in self.fleet if g.obsolete)


def _level(value: str | None, default: int = 0) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


def _is_obsolete(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> bool:
    """True when the group carries less technology than it could be refitted with.

    Constructions are refitted automatically and ground units carry no
    fitted technology, so only spaceships can fall behind.
    """
    if unit.category is not UnitCategory.spaceship:
        return False
    techs = group.techs
    if _level(techs.attack) < min(ledger.best_level(TechName.attack), unit.attack_cap):
        return True
    if _level(techs.defense) < min(ledger.best_level(TechName.defense), unit.defense_cap):
        return True
    if unit.move_type is MoveType.normal and _level(techs.move, 1) < ledger.best_level(TechName.movement):
        return True
    return _level(techs.tactics) < ledger.best_level(TechName.tactics)


def technology_inventory(ledger: TechLedger) -> dict[TechName, int]:
    """Best purchased level of every catalog track that has been bought into."""
    inventory: dict[TechName, int] = {}
    for tech in list_technologies():
        if tech.name in inventory:
            continue
        level = max((ref.level for ref in ledger.refs if ref.name == tech.name), default=0)
        if level > 0:
            inventory[tech.name] = level
    return inventory


def empire_report(turns: Sequence[Turn]) -> EmpireReport:
    if not turns:
        raise ValueError("The turn history is empty")
    latest = turns[-1]
    ledger = accumulate_techs(turns)[-1]
    report = EmpireReport(turn_id=latest.id, technologies=technology_inventory(ledger))

    for acronym, entry in latest.fleet.items():
        unit = find_unit(acronym)
        if unit is None:
            continue
        for group in entry.groups:
            if group.total <= 0:
                continue
            report.fleet.append(
                GroupReadiness(
                    acronym=acronym,
                    name=unit.name,
                    group_id=group.id,
                    base_class=unit.base_class,
                    count=group.total,
                    attack=_level(group.techs.attack),
                    defense=_level(group.techs.defense),
                    move=_level(group.techs.move, 1),
                    tactics=_level(group.techs.tactics),
                    obsolete=_is_obsolete(unit, group, ledger),
                )
            )

    for planet in latest.planets:
        output = planet_output(planet, latest.id)
        report.planets.append(
            PlanetProduction(
                planet_id=planet.id,
                name=planet.name,
                type=planet.type,
                capacity=planet.cp,
                **output,
            )
        )
    return report
