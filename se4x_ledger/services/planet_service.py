"""Planet service: colony growth, production and planet edits.

Responsibilities:
  - Carry planets from one turn into the next, honouring deletions
  - Grow planet capacity one rung of its ladder per turn
  - Compute the LP/CP/RP/TP each planet produces
  - Charge CP for facilities built this turn
  - Apply player edits (colonies, facilities, conquest, capacity, names)
"""

import logging
import uuid
from dataclasses import dataclass, field

from se4x_ledger.schemas.turn import (
    DemolishedFacility,
    Facility,
    FacilityType,
    Planet,
    PlanetContribution,
    PlanetType,
    Turn,
)
from se4x_ledger.services.history import editable_index, with_turn

logger = logging.getLogger(__name__)

CAPACITY_LADDERS: dict[PlanetType, tuple[int, ...]] = {
    PlanetType.colony: (0, 1, 3, 5),
    PlanetType.homeworld: (0, 5, 10, 15, 20),
}

FACILITY_SLOTS: dict[PlanetType, int] = {
    PlanetType.colony: 1,
    PlanetType.homeworld: 2,
}

# Ledger section each facility type produces into
FACILITY_OUTPUT: dict[FacilityType, str] = {
    FacilityType.industrial: "cp",
    FacilityType.research: "rp",
    FacilityType.temporal: "tp",
    FacilityType.logistic: "lp",
}

FACILITY_COST = 5
FACILITY_OUTPUT_BONUS = 5
CONQUERED_BUILT_TURN_ID = -1

COLONY_IMAGES: tuple[str, ...] = tuple(
    f"/images/planets/colony_{n}.jpg" for n in range(1, 21)
)

RESOURCE_SECTIONS: tuple[str, ...] = ("lp", "cp", "rp", "tp")


# ---------------------------------------------------------------------------
# Propagation and production
# ---------------------------------------------------------------------------


def grow_capacity(planet_type: PlanetType, cp: int) -> int:
    """Return the next rung of the capacity ladder (unchanged at the top or off-ladder)."""
    ladder = CAPACITY_LADDERS[planet_type]
    if cp in ladder and cp != ladder[-1]:
        return ladder[ladder.index(cp) + 1]
    return cp


def propagate_planets(prev: Turn, turn: Turn) -> None:
    """Carry the planets of ``prev`` into ``turn``; mutates ``turn`` in place."""
    deleted = list(dict.fromkeys([*(turn.deleted_planet_ids or []), *(prev.deleted_planet_ids or [])]))
    turn.deleted_planet_ids = deleted
    deleted_ids = set(deleted)

    for prev_planet in prev.planets:
        if prev_planet.id in deleted_ids:
            continue
        grown = grow_capacity(prev_planet.type, prev_planet.cp)
        planet = turn.find_planet(prev_planet.id)
        if planet is None:
            turn.planets.append(
                prev_planet.model_copy(
                    deep=True,
                    update={"cp": grown, "is_manual_cp": False, "is_newly_added": False},
                )
            )
            continue
        planet.is_newly_added = False
        if not planet.is_manual_cp:
            planet.cp = grown


def active_facilities(planet: Planet, turn_id: int) -> list[Facility]:
    """Facilities producing during a turn: those built in an earlier turn."""
    return [f for f in planet.facilities if f.built_turn_id < turn_id]


def planet_output(planet: Planet, turn_id: int) -> dict[str, int]:
    """Return what one planet produces in a turn, per ledger section."""
    output = dict.fromkeys(RESOURCE_SECTIONS, 0)
    active = active_facilities(planet, turn_id)

    if planet.type is PlanetType.homeworld:
        output["cp"] += planet.cp
        for facility in active:
            output[FACILITY_OUTPUT[facility.type]] += FACILITY_OUTPUT_BONUS
    elif active:
        # A colony converts its whole production to its facility's resource
        output[FACILITY_OUTPUT[active[0].type]] += planet.cp + FACILITY_OUTPUT_BONUS
    else:
        output["cp"] += planet.cp
    return output


@dataclass
class PlanetIncome:
    contributions: dict[str, list[PlanetContribution]] = field(
        default_factory=lambda: {section: [] for section in RESOURCE_SECTIONS}
    )

    def total(self, section: str) -> int:
        return sum(c.amount for c in self.contributions[section])


def compute_income(turn: Turn) -> PlanetIncome:
    """Sum planet production for a turn, recording each nonzero contribution."""
    income = PlanetIncome()
    for planet in turn.planets:
        for section, amount in planet_output(planet, turn.id).items():
            if amount > 0:
                income.contributions[section].append(
                    PlanetContribution(planet_name=planet.name, amount=amount)
                )
    return income


def facility_build_costs(turn: Turn) -> tuple[int, list[str]]:
    """Return (CP cost, badges) for facilities built this turn.

    Facilities on conquered planets are free.
    """
    total = 0
    badges: list[str] = []
    for planet in turn.planets:
        if planet.is_conquered:
            continue
        for facility in planet.facilities:
            if facility.built_turn_id == turn.id:
                total += FACILITY_COST
                badges.append(f"{planet.name} {facility.type.value} {FACILITY_COST}")
    return total, badges


# ---------------------------------------------------------------------------
# Player edits
# ---------------------------------------------------------------------------


def _recalculate(turns: list[Turn]) -> list[Turn]:
    from se4x_ledger.services.turn_engine import recalculate

    return recalculate(turns)


def _editable_planet(
    turns: list[Turn], planet_id: str, turn_id: int | None
) -> tuple[int, Turn, Planet]:
    index = editable_index(turns, turn_id)
    turn = turns[index].model_copy(deep=True)
    planet = turn.find_planet(planet_id)
    if planet is None:
        raise ValueError(f"Planet '{planet_id}' not found in turn {turn.id}")
    return index, turn, planet


def _pick_colony_image(turn: Turn) -> str:
    used = {p.image for p in turn.planets if p.type is PlanetType.colony and p.image}
    return next((img for img in COLONY_IMAGES if img not in used), COLONY_IMAGES[0])


def add_colony(
    turns: list[Turn], name: str | None = None, turn_id: int | None = None
) -> list[Turn]:
    """Found a new colony with zero capacity in the latest turn."""
    index = editable_index(turns, turn_id)
    turn = turns[index].model_copy(deep=True)
    colony_count = sum(1 for p in turn.planets if p.type is PlanetType.colony)
    colony = Planet(
        id=f"colony-{uuid.uuid4().hex[:12]}",
        name=(name or "").strip() or f"Colony {colony_count + 1}",
        type=PlanetType.colony,
        cp=0,
        facilities=[],
        image=_pick_colony_image(turn),
        is_newly_added=True,
    )
    turn.planets.append(colony)
    logger.info("Colony %s (%s) founded in turn %d", colony.name, colony.id, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def remove_planet(turns: list[Turn], planet_id: str, turn_id: int | None = None) -> list[Turn]:
    """Lose a planet from this turn on; it never reappears in later turns."""
    index, turn, planet = _editable_planet(turns, planet_id, turn_id)
    if planet.type is PlanetType.homeworld:
        raise ValueError("The homeworld cannot be removed")
    turn.planets = [p for p in turn.planets if p.id != planet_id]
    turn.deleted_planet_ids = [*(turn.deleted_planet_ids or []), planet_id]
    logger.info("Planet %s removed in turn %d", planet.name, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def add_facility(
    turns: list[Turn],
    planet_id: str,
    facility_type: FacilityType,
    turn_id: int | None = None,
) -> list[Turn]:
    """Build a facility, or restore one demolished earlier with its original build turn."""
    index, turn, planet = _editable_planet(turns, planet_id, turn_id)
    if any(f.type == facility_type for f in planet.facilities):
        raise ValueError(f"{planet.name} already has a {facility_type.value}")
    if len(planet.facilities) >= FACILITY_SLOTS[planet.type]:
        raise ValueError(f"{planet.name} has no free facility slot")

    demolished = next(
        (d for d in planet.demolished_facilities or [] if d.type == facility_type), None
    )
    if demolished is not None:
        built_turn_id = demolished.original_built_turn_id
        planet.demolished_facilities = [
            d for d in planet.demolished_facilities or [] if d.type != facility_type
        ]
    elif planet.is_conquered:
        built_turn_id = CONQUERED_BUILT_TURN_ID
    else:
        built_turn_id = turn.id

    planet.facilities.append(Facility(type=facility_type, built_turn_id=built_turn_id))
    return _recalculate(with_turn(turns, index, turn))


def remove_facility(
    turns: list[Turn],
    planet_id: str,
    facility_type: FacilityType,
    turn_id: int | None = None,
) -> list[Turn]:
    """Cancel a pending facility or demolish an active one."""
    index, turn, planet = _editable_planet(turns, planet_id, turn_id)
    facility = next((f for f in planet.facilities if f.type == facility_type), None)
    if facility is None:
        raise ValueError(f"{planet.name} has no {facility_type.value}")

    planet.facilities = [f for f in planet.facilities if f.type != facility_type]
    if facility.built_turn_id < turn.id:
        planet.demolished_facilities = [
            *(planet.demolished_facilities or []),
            DemolishedFacility(type=facility_type, original_built_turn_id=facility.built_turn_id),
        ]
        logger.info("%s on %s demolished in turn %d", facility_type.value, planet.name, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def conquer_planet(turns: list[Turn], planet_id: str, turn_id: int | None = None) -> list[Turn]:
    """Mark a planet conquered; its pending facilities become active and free."""
    index, turn, planet = _editable_planet(turns, planet_id, turn_id)
    if planet.type is PlanetType.homeworld:
        raise ValueError("The homeworld cannot be conquered")
    planet.is_conquered = True
    for facility in planet.facilities:
        if facility.built_turn_id == turn.id:
            facility.built_turn_id = CONQUERED_BUILT_TURN_ID
    logger.info("Planet %s conquered in turn %d", planet.name, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def set_capacity(
    turns: list[Turn],
    planet_id: str,
    cp: int,
    manual: bool = True,
    turn_id: int | None = None,
) -> list[Turn]:
    """Set a planet's capacity; a manual value stops automatic growth."""
    index, turn, planet = _editable_planet(turns, planet_id, turn_id)
    ladder = CAPACITY_LADDERS[planet.type]
    if cp not in ladder:
        raise ValueError(
            f"{planet.type.value} capacity must be one of {', '.join(map(str, ladder))}"
        )
    planet.cp = cp
    planet.is_manual_cp = manual
    return _recalculate(with_turn(turns, index, turn))


def rename_planet(turns: list[Turn], planet_id: str, name: str) -> list[Turn]:
    """Rename a planet in every turn it appears in."""
    name = name.strip()
    if not name:
        raise ValueError("Planet name cannot be empty")
    if not any(t.find_planet(planet_id) for t in turns):
        raise ValueError(f"Planet '{planet_id}' not found")

    renamed: list[Turn] = []
    for turn in turns:
        copy = turn.model_copy(deep=True)
        planet = copy.find_planet(planet_id)
        if planet is not None:
            planet.name = name
        renamed.append(copy)
    return _recalculate(renamed)
