"""Static definitions for every Space Empires 4X unit type.

Units fall into three categories:
  Spaceship    - Ships that move, fight and pay maintenance
  Construction - Shipyards, bases and defense networks; always fielded at the
                 best available technology, never pay maintenance or upgrades
  Ground Unit  - Troops carried by transports; never pay maintenance

Move types:
  normal   - Movement technology applies
  fixed-1  - Always moves at Movement 1 (colony ships, miners, pipelines, mines)
  none     - Does not move on its own

Per-acronym exceptions (special badges, movement bonuses, build requirements)
are kept in the tables at the bottom of this module so the turn engine and
resolver never branch on acronyms directly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from se4x_ledger.data.technologies import TechName


class UnitCategory(str, enum.Enum):
    spaceship = "Spaceship"
    construction = "Construction"
    ground_unit = "Ground Unit"


class MoveType(str, enum.Enum):
    normal = "normal"
    fixed_1 = "fixed-1"
    none = "none"


@dataclass(frozen=True)
class UnitDefinition:
    """Definition of a single unit type."""
    name: str                           # display name, e.g. "Scout"
    acronym: str                        # fleet key, e.g. "SC"
    hull_size: int
    ship_size: int | None               # Ship Size level needed to build; None = special
    base_class: str
    base_attack: int | str
    base_defense: int | str
    tactics: int | str
    move: int
    max_count: int
    groups: tuple[int, ...]
    category: UnitCategory = UnitCategory.spaceship
    cost: int = 0                       # CP per unit
    max_attack: int | None = None       # overrides hull size as the attack tech cap
    max_defense: int | None = None
    move_type: MoveType = MoveType.normal
    special: str = ""
    notes: str = ""

    @property
    def attack_cap(self) -> int:
        return self.max_attack if self.max_attack is not None else self.hull_size

    @property
    def defense_cap(self) -> int:
        return self.max_defense if self.max_defense is not None else self.hull_size


def _groups(n: int) -> tuple[int, ...]:
    return tuple(range(1, n + 1))


# ── SPACESHIPS ─────────────────────────────────────────────────────────────────

_SPACESHIPS: list[UnitDefinition] = [
    UnitDefinition("Scout", "SC", 1, 1, "E", 3, 0, 3, 1, 6, _groups(6), cost=6,
                   special="Increased firepower versus fighters with Point Defense."),
    UnitDefinition("Scout X", "SCX", 1, 1, "E", 2, 0, 3, 1, 1, (7,), cost=6,
                   max_attack=2, max_defense=2,
                   special="Movement technology +3 levels (maximum 7).", notes="Requires AC3"),
    UnitDefinition("Destroyer", "DD", 1, 2, "D", 4, 0, 3, 1, 6, _groups(6), cost=9,
                   special="Can detect cloaked ships depending on Scanner technology."),
    UnitDefinition("Destroyer X", "DDX", 1, 2, "D", 4, 0, 3, 1, 6, _groups(6), cost=9,
                   max_attack=2, max_defense=2,
                   special="Attack/Defense +1 above Hull Size. Heavy Warheads. Fast 2.",
                   notes="Requires AC1"),
    UnitDefinition("Cruiser", "CA", 2, 3, "C", 4, 1, 3, 1, 6, _groups(6), cost=12,
                   special="Exploration technology. Jammer."),
    UnitDefinition("Battlecruiser", "BC", 2, 4, "B", 5, 1, 4, 1, 6, _groups(6), cost=15,
                   special="Fast 1 technology (+1 hex on turn 1 only)."),
    UnitDefinition("Battleship", "BB", 3, 5, "A", 5, 2, 5, 1, 6, _groups(6), cost=20,
                   special="Tractor Beam."),
    UnitDefinition("Dreadnought", "DN", 3, 6, "A", 6, 3, 6, 1, 4, _groups(4), cost=24,
                   special="Shield Projector."),
    UnitDefinition("Titan", "TN", 5, 7, "A", 8, 3, "-", 1, 5, _groups(5), cost=32,
                   max_attack=4, max_defense=3,
                   special="Does 2 damage per hit. Carries up to 3 fighter squadrons.",
                   notes="Cannot be screened/boarded/retreat"),
    UnitDefinition("Raider", "R", 2, None, "A/D", "4/5", 0, 3, 1, 6, _groups(6), cost=12,
                   special="Cloaked: Class A when undetected, Class D when detected."),
    UnitDefinition("Raider X", "RX", 2, None, "A/D", "4/5", 0, 3, 1, 6, _groups(6), cost=12,
                   special="Same as Raider. Carries 1 Ground Unit. Fast 2.", notes="Requires AC3"),
    UnitDefinition("Carrier", "CV", 1, None, "E", 3, 1, 5, 1, 6, _groups(6), cost=12,
                   special="Carries up to 3 fighter squadrons."),
    UnitDefinition("Battle Carrier", "BV", 3, None, "B", 5, 3, 5, 1, 6, _groups(6), cost=20,
                   max_attack=3, max_defense=3,
                   special="Carries up to 6 fighter squadrons. Immune to Mines."),
    UnitDefinition("Fighter", "F", 1, None, "B", 5, 0, "-", 0, 6, _groups(10), cost=5,
                   max_attack=0, max_defense=0, move_type=MoveType.none,
                   special="Fighter 1: B5-0, Fighter 2: B6-0, Fighter 3: B7-1, Fighter 4: B8-2."),
    UnitDefinition("Transport", "T", 2, 1, "-", 0, 0, 5, 1, 6, _groups(6), cost=6,
                   max_attack=0, max_defense=0,
                   special="Carries up to 6 Ground Units."),
    UnitDefinition("Boarding Ship", "BD", 2, None, "F", 5, 0, 4, 1, 6, _groups(6), cost=9,
                   special="Captures enemy ships instead of destroying them."),
    UnitDefinition("Mine Sweeper", "SW", 1, None, "-", 0, 1, 6, 1, 6, _groups(6), cost=6,
                   max_attack=0, max_defense=0,
                   special="Removes mines before combat."),
    UnitDefinition("Missile Boat", "MB", 1, None, "A", 4, 3, 4, 1, 6, _groups(6), cost=6,
                   max_attack=3, max_defense=1, special="MB 1+ (Alt. Empire)"),
    UnitDefinition("Colony Ship", "CO", 1, 1, "-", 0, 0, "-", 0, 1, _groups(8), cost=8,
                   max_attack=0, max_defense=0, move_type=MoveType.fixed_1,
                   special="Can colonize planets. Maintenance = 0."),
    UnitDefinition("Mining Ship", "Miner", 1, 1, "-", 0, 0, "-", 0, 1, _groups(4), cost=5,
                   max_attack=0, max_defense=0, move_type=MoveType.fixed_1,
                   special="Picks up minerals and Space Wrecks. Maintenance = 0."),
    UnitDefinition("Miner X", "MinerX", 1, None, "-", 0, 0, "-", 0, 4, _groups(4), cost=5,
                   max_attack=0, max_defense=0,
                   special="Normal movement miner. Maintenance = 0."),
    UnitDefinition("Mine", "Mine", 1, None, "-", 0, 0, "-", 0, 6, _groups(6), cost=5,
                   max_attack=0, max_defense=0, move_type=MoveType.fixed_1,
                   special="Destroys one ship after sweeping. Maintenance = 0."),
    UnitDefinition("Decoy", "Decoy", 0, None, "-", 0, 0, "-", 0, 6, _groups(6), cost=1,
                   max_attack=0, max_defense=0,
                   special="Automatically removed in combat."),
    UnitDefinition("MS Pipeline", "MS", 1, None, "-", 0, 0, "-", 0, 6, _groups(6), cost=3,
                   max_attack=0, max_defense=0, move_type=MoveType.fixed_1,
                   special="CP bonus from trade and movement bonus. Maintenance = 0."),
]

# ── CONSTRUCTIONS ──────────────────────────────────────────────────────────────

_CONSTRUCTIONS: list[UnitDefinition] = [
    UnitDefinition("Shipyard", "SY", 1, 1, "C", 3, 1, "-", 1, 6, _groups(6),
                   category=UnitCategory.construction, cost=6, move_type=MoveType.none,
                   special="Allows ships to be built. Upgraded for free."),
    UnitDefinition("Base", "Base", 3, 2, "A", 7, 3, "-", 3, 4, _groups(4),
                   category=UnitCategory.construction, cost=12, move_type=MoveType.none,
                   special="Cannot move. One per system. Upgraded for free."),
    UnitDefinition("Starbase", "SB", 4, None, "A", 7, 4, "-", 3, 4, _groups(4),
                   category=UnitCategory.construction, cost=12, max_attack=4,
                   move_type=MoveType.none,
                   special="Upgrade from Base. 2 attacks per round. Upgraded for free."),
    UnitDefinition("Defense Satellite Network", "DSN", 2, 2, "B", 4, 2, "-", 2, 4, _groups(4),
                   category=UnitCategory.construction, cost=6, move_type=MoveType.none,
                   special="Cannot retreat. Cannot gain Experience."),
]

# ── GROUND UNITS ───────────────────────────────────────────────────────────────

_GROUND_UNITS: list[UnitDefinition] = [
    UnitDefinition("Infantry", "Inf", 1, None, "D", 5, 1, "-", 0, 10, _groups(10),
                   category=UnitCategory.ground_unit, cost=1, max_attack=0, max_defense=0,
                   move_type=MoveType.none, notes="At Start"),
    UnitDefinition("Heavy Infantry", "HI", 2, None, "D/C", "4/6", 2, "-", 0, 10, _groups(10),
                   category=UnitCategory.ground_unit, cost=2, max_attack=0, max_defense=0,
                   move_type=MoveType.none, notes="Ground Combat 2"),
    UnitDefinition("Marines", "Mar", 2, None, "C/D", "6/5", 1, "-", 0, 10, _groups(10),
                   category=UnitCategory.ground_unit, cost=2, max_attack=0, max_defense=0,
                   move_type=MoveType.none, notes="Ground Combat 2"),
    UnitDefinition("Grav Armor", "Grav", 2, None, "C", 6, 2, "-", 0, 10, _groups(10),
                   category=UnitCategory.ground_unit, cost=3, max_attack=0, max_defense=0,
                   move_type=MoveType.none, notes="Ground Combat 3"),
    UnitDefinition("Cyber Armor", "Cyber", 3, None, "B", 8, 3, "-", 0, 10, _groups(10),
                   category=UnitCategory.ground_unit, cost=4, max_attack=0, max_defense=0,
                   move_type=MoveType.none, notes="Ground Combat 3 + Advanced Construction 2"),
    UnitDefinition("Militia", "Militia", 1, None, "E", 5, 0, "-", 0, 10, (1,),
                   category=UnitCategory.ground_unit, cost=0, max_attack=0, max_defense=0,
                   move_type=MoveType.none,
                   special="Auto-spawns when a colony is ground attacked; removed after combat."),
]

# ── MASTER REGISTRY ────────────────────────────────────────────────────────────

_ALL_UNITS: dict[str, UnitDefinition] = {
    unit.acronym: unit for unit in _SPACESHIPS + _CONSTRUCTIONS + _GROUND_UNITS
}

# Spaceships that never pay maintenance
MAINTENANCE_EXEMPT: frozenset[str] = frozenset({"CO", "Miner", "MinerX", "Mine", "MS"})

# Transient unit whose count never carries into the next turn
MILITIA = "Militia"


def find_unit(acronym: str) -> UnitDefinition | None:
    """Return the unit for an acronym, or None for unknown (stale) fleet keys."""
    return _ALL_UNITS.get(acronym)


def get_unit(acronym: str) -> UnitDefinition:
    """Return a UnitDefinition or raise KeyError."""
    unit = _ALL_UNITS.get(acronym)
    if unit is None:
        raise KeyError(f"Unknown unit type: '{acronym}'")
    return unit


def list_units(category: UnitCategory | None = None) -> list[UnitDefinition]:
    """Return all unit definitions, optionally restricted to one category."""
    return [u for u in _ALL_UNITS.values() if category is None or u.category == category]


def is_maintenance_exempt(unit: UnitDefinition) -> bool:
    return (
        unit.category in (UnitCategory.ground_unit, UnitCategory.construction)
        or unit.acronym in MAINTENANCE_EXEMPT
    )


# ── PER-CATEGORY TECHNOLOGY TRACKS ─────────────────────────────────────────────

CATEGORY_TECHS: dict[UnitCategory, tuple[TechName, ...]] = {
    UnitCategory.spaceship: (
        TechName.attack,
        TechName.defense,
        TechName.movement,
        TechName.tactics,
        TechName.point_defense,
        TechName.cloaking,
        TechName.scanner,
        TechName.fighter,
        TechName.missile_boats,
        TechName.fast,
        TechName.boarding,
        TechName.security_forces,
        TechName.military_academy,
        TechName.advanced_construction,
    ),
    UnitCategory.construction: (
        TechName.shipyard,
        TechName.advanced_construction,
        TechName.ship_size,
        TechName.terraforming,
        TechName.mines,
        TechName.mine_sweep,
        TechName.attack,
        TechName.defense,
    ),
    UnitCategory.ground_unit: (
        TechName.ground_combat,
        TechName.security_forces,
        TechName.military_academy,
    ),
}

# Fleet-wide bonuses that are not listed on a group's technology badges.
# Tactics is only automatic for units that are not spaceships.
AUTOMATIC_TECHS: dict[UnitCategory, frozenset[TechName]] = {
    UnitCategory.spaceship: frozenset({TechName.military_academy}),
    UnitCategory.construction: frozenset({TechName.military_academy, TechName.tactics}),
    UnitCategory.ground_unit: frozenset({TechName.military_academy, TechName.tactics}),
}


# ── PER-ACRONYM EXCEPTIONS ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class BadgeRule:
    """A technology shown as a special badge for one unit type."""
    tech: TechName
    min_level: int = 1
    max_level: int | None = None    # caps the level shown (BC only benefits from Fast 1)
    show_level: bool = True


SPECIAL_BADGES: dict[str, tuple[BadgeRule, ...]] = {
    "SC": (BadgeRule(TechName.point_defense),),
    "DD": (BadgeRule(TechName.scanner, show_level=False),),
    "DDX": (BadgeRule(TechName.scanner, show_level=False),),
    "CA": (BadgeRule(TechName.jammer, show_level=False), BadgeRule(TechName.exploration)),
    "BC": (BadgeRule(TechName.fast, max_level=1),),
    "BB": (BadgeRule(TechName.tractor_beam, show_level=False),),
    "DN": (BadgeRule(TechName.shield_projector, show_level=False),),
    "R": (BadgeRule(TechName.cloaking, show_level=False),),
    "RX": (BadgeRule(TechName.cloaking, show_level=False),),
    "BV": (BadgeRule(TechName.exploration, min_level=2),),
    "F": (BadgeRule(TechName.fighter),),
    "BD": (BadgeRule(TechName.boarding),),
    "Mine": (BadgeRule(TechName.mines),),
    "SW": (BadgeRule(TechName.mine_sweep),),
    "MB": (BadgeRule(TechName.missile_boats),),
}

# Ground units all show their Ground Combat level
CATEGORY_BADGES: dict[UnitCategory, tuple[BadgeRule, ...]] = {
    UnitCategory.ground_unit: (BadgeRule(TechName.ground_combat),),
}

# Extra movement levels granted on top of the Movement technology
MOVE_BONUS: dict[str, int] = {"SCX": 3}
MAX_MOVE_LEVEL = 7


@dataclass(frozen=True)
class BuildRequirement:
    """Technology levels that unlock building a unit type.

    Units not listed here are unlocked by the Ship Size technology reaching
    their ship_size.
    """
    techs: dict[TechName, int] = field(default_factory=dict)


BUILD_REQUIREMENTS: dict[str, BuildRequirement] = {
    "F": BuildRequirement({TechName.fighter: 1}),
    "CV": BuildRequirement({TechName.fighter: 1}),
    "BV": BuildRequirement({TechName.fighter: 1, TechName.fast: 2}),
}
