"""Static definitions for all Space Empires 4X technologies.

Each technology is a named track with numbered levels.  A purchase is stored
in the save file as the label "<Name> <Level>" (e.g. "Attack 2"); inside the
service it is parsed into a structured TechRef so that lookups compare the
track name exactly instead of by string prefix.

Rules encoded here:
  - Level 0 entries describe the baseline and are never bought
  - Entries with cost 0 above level 0 (Ship Size 1, Movement 1, Shipyard 1,
    Ground Combat 1) are owned from the start of the game
  - Movement, Ship Size and Shipyard resolve to at least level 1 even when
    nothing was purchased
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple


class TechName(str, enum.Enum):
    ship_size = "Ship Size"
    attack = "Attack"
    defense = "Defense"
    tactics = "Tactics"
    movement = "Movement"
    terraforming = "Terraforming"
    exploration = "Exploration"
    shipyard = "Shipyard"
    fighter = "Fighter"
    point_defense = "Point Defense"
    cloaking = "Cloaking"
    scanner = "Scanner"
    mines = "Mines"
    mine_sweep = "Mine Sweep"
    ground_combat = "Ground Combat"
    boarding = "Boarding"
    security_forces = "Security Forces"
    military_academy = "Military Academy"
    fast = "Fast"
    missile_boats = "Missile Boats"
    jammer = "Jammer"
    advanced_construction = "Advanced Construction"
    tractor_beam = "Tractor Beam"
    shield_projector = "Shield Projector"


# Tracks that resolve to level 1 with no purchase
BASELINE_LEVEL_ONE: frozenset[TechName] = frozenset(
    {TechName.movement, TechName.ship_size, TechName.shipyard}
)


class TechRef(NamedTuple):
    """One purchased level of a technology track."""
    name: TechName
    level: int

    @property
    def label(self) -> str:
        return f"{self.name.value} {self.level}"


def parse_tech_label(label: str) -> TechRef | None:
    """Parse a "<Name> <Level>" label; return None when it is not a known tech."""
    if not isinstance(label, str):
        return None
    name, _, level = label.strip().rpartition(" ")
    try:
        return TechRef(TechName(name), int(level))
    except ValueError:
        return None


@dataclass(frozen=True)
class Technology:
    name: TechName
    level: int
    cost: int                 # RP cost
    description: str
    title: str | None = None

    @property
    def ref(self) -> TechRef:
        return TechRef(self.name, self.level)

    @property
    def label(self) -> str:
        return self.ref.label


def _track(name: TechName, *levels: tuple) -> list[Technology]:
    return [Technology(name, *entry) for entry in levels]


# ── CATALOG ────────────────────────────────────────────────────────────────────

_CATALOG: list[Technology] = [
    *_track(
        TechName.ship_size,
        (1, 0, "Can build Scout (SC), Colony Ship (CO), Shipyard (SY), Miner, Decoy, MS Pipeline."),
        (2, 10, "Can build Destroyer (DD), Base, Defense Satellite Network (DSN)."),
        (3, 15, "Can build Cruiser (CA)."),
        (4, 20, "Can build Battlecruiser (BC)."),
        (5, 20, "Can build Battleship (BB)."),
        (6, 20, "Can build Dreadnought (DN)."),
        (7, 32, "Can build Titan (TN)."),
    ),
    *_track(
        TechName.attack,
        (0, 0, "Add 0 to a ship's attack rating when in battle."),
        (1, 20, "Add 1 to a ship's attack rating when in battle.", "Enhanced Targeting"),
        (2, 30, "Add 2 to a ship's attack rating (limited by Hull Size).", "Rapid-Fire Laser Emitters"),
        (3, 25, "Add 3 to a ship's attack rating (limited by Hull Size).", "Hypervelocity Missile Salvos"),
        (4, 25, "Add 4 to attack rating. Only for Titans (TN) and Starbases.", "Apocalypse-Class Artillery"),
    ),
    *_track(
        TechName.defense,
        (0, 0, "Add 0 to a ship's defense rating when in battle."),
        (1, 20, "Add 1 to a ship's defense rating when in battle.", "Reinforced Plating"),
        (2, 30, "Add 2 to a ship's defense rating (limited by Hull Size).", "Projected Force Shields"),
        (3, 25, "Add 3 to a ship's defense rating (limited by Hull Size).", "Integrated Countermeasure Grid"),
    ),
    *_track(
        TechName.tactics,
        (0, 0, "Same Weapon Class: the side with the higher Tactics fires first."),
        (1, 15, "Higher tactical rating fires first. Not limited by Hull Size.", "Coordinated Engagement"),
        (2, 15, "Higher tactical rating fires first. Not limited by Hull Size.", "Battlefield Control Doctrine"),
        (3, 15, "Higher tactical rating fires first. Not limited by Hull Size.", "Operational Singularity"),
    ),
    *_track(
        TechName.movement,
        (1, 0, "Can move 1 hex per turn.", "Impulse Thrusters"),
        (2, 20, "Turn 1: 1 hex, Turn 2: 1 hex, Turn 3: 2 hexes.", "Vector-Control Engines"),
        (3, 25, "Turn 1: 1 hex, Turn 2: 2 hexes, Turn 3: 2 hexes.", "High-Efficiency Drive Systems"),
        (4, 25, "Can move 2 hexes per turn.", "Advanced Injection Systems"),
        (5, 25, "Turn 1: 2 hexes, Turn 2: 2 hexes, Turn 3: 3 hexes.", "Dynamic Mass Redistribution"),
        (6, 20, "Turn 1: 2 hexes, Turn 2: 3 hexes, Turn 3: 3 hexes.", "Structural Acceleration Compensation"),
        (7, 20, "Can move 3 hexes per turn.", "Zero-Loss Propulsion Cycle"),
    ),
    *_track(
        TechName.terraforming,
        (0, 0, "Can only colonize non-barren planets."),
        (1, 20, "Colony Ships (CO) may colonize any unoccupied planet including Barren planets."),
    ),
    *_track(
        TechName.exploration,
        (0, 0, "Exploration as normal (must enter hex to reveal System marker)."),
        (1, 15, "Cruisers (CA) can peek at one adjacent face-down System marker before moving."),
        (2, 15, "Ships with Exploration 2 can be watchdogs that trigger Reaction Movement."),
    ),
    *_track(
        TechName.shipyard,
        (1, 0, "Each Shipyard (SY) can build 1 Hull Point of ships per Economic Phase."),
        (2, 20, "Each Shipyard (SY) can build 1.5 Hull Points per Economic Phase (rounded down)."),
        (3, 25, "Each Shipyard (SY) can build 2 Hull Points per Economic Phase."),
    ),
    *_track(
        TechName.fighter,
        (0, 0, "Cannot build Carriers (CV) or Fighters (F)."),
        (1, 25, "Can build Carriers (CV) and Fighter (F) 1 squadrons (B5-0-x1).", "Interceptor Class"),
        (2, 25, "Can build and upgrade to Fighter (F) 2 (B6-0-x1).", "Striker Class"),
        (3, 25, "Can build and upgrade to Fighter (F) 3 (B7-1-x1).", "Vanguard Class"),
        (4, 25, "Fighter (F) 4 squadrons (B8-2-x1). Can be built on Battle Carriers (BV).", "Dominance Class"),
    ),
    *_track(
        TechName.point_defense,
        (0, 0, "Scouts (SC) fire at Fighters (F) at E3 (normal attack)."),
        (1, 20, "Scouts (SC) fire at Fighters (F) at A6 instead of E3."),
        (2, 20, "Scouts (SC) fire at Fighters (F) at A7."),
        (3, 20, "Scouts (SC) fire at Fighters (F) at A8."),
    ),
    *_track(
        TechName.cloaking,
        (0, 0, "Cannot build Raiders (R)."),
        (1, 30, "Can build Raiders (R). Raiders are cloaked vs enemies without Scanners."),
        (2, 30, "Raiders (R) increase in strength and require Scanner 2 to detect."),
    ),
    *_track(
        TechName.scanner,
        (0, 0, "Cannot detect cloaked Raiders (R)."),
        (1, 20, "Destroyers (DD) can detect Raiders (R) with Cloaking 1."),
        (2, 20, "Destroyers (DD) can detect Raiders (R) with Cloaking 2."),
    ),
    *_track(
        TechName.mines,
        (0, 0, "Cannot build Mines."),
        (1, 30, "Can build Mines. After mine sweeping, each Mine destroys one ship and is removed."),
    ),
    *_track(
        TechName.mine_sweep,
        (0, 0, "Cannot build Mine Sweepers (SW)."),
        (1, 10, "Can build Mine Sweepers (SW). Each removes 1 Mine before combat."),
        (2, 15, "Each Mine Sweeper (SW) removes 2 Mines before combat."),
    ),
    *_track(
        TechName.ground_combat,
        (1, 0, "Can build Transports (T) and Infantry."),
        (2, 20, "Can build Space Marines and Heavy Infantry."),
        (3, 25, "Armored Transports with Drop Ships. Can build Grav Armor."),
    ),
    *_track(
        TechName.boarding,
        (0, 0, "Cannot build Boarding Ships (BD)."),
        (1, 20, "Can build Boarding Ships (BD)."),
        (2, 25, "Boarding Ships (BD) attack at strength 6 instead of 5."),
    ),
    *_track(
        TechName.security_forces,
        (0, 0, "No protection vs Boarding attacks."),
        (1, 15, "All ships get +1 Hull Size vs Boarding attacks."),
        (2, 15, "All ships get +2 Hull Size vs Boarding attacks."),
    ),
    *_track(
        TechName.military_academy,
        (0, 0, "All new ships start as Green."),
        (1, 15, "All new ships start as Skilled instead of Green."),
        (2, 20, "New ships start as Skilled. -1 modifier to Experience rolls."),
    ),
    *_track(
        TechName.fast,
        (0, 0, "No Fast technology available."),
        (1, 10, "Battlecruisers (BC) can move +1 hex on Turn 1 only."),
        (2, 10, "Destroyer X (DDX), Battle Carriers (BV) and Raider X (RX) can be equipped with Fast."),
    ),
    *_track(
        TechName.missile_boats,
        (0, 0, "Cannot build Missile Boats (MB)."),
        (1, 20, "Can build Missile Boats (MB)."),
        (2, 15, "Improved Missile Boats (MB)."),
    ),
    *_track(
        TechName.jammer,
        (0, 0, "Cannot reduce enemy Missile attack."),
        (1, 15, "Cruisers (CA) with Jammer reduce enemy Missile Attack Strength by 2."),
        (2, 15, "Two Cruisers (CA) with Jammer 2 reduce enemy Missile Attack to 0."),
    ),
    *_track(
        TechName.advanced_construction,
        (0, 0, "Requires a Ship Size 4+ ship to have been built."),
        (1, 10, "Build Destroyer X (DDX), Advanced Bases, Tractor Beams, Shield Projectors."),
        (2, 10, "Build Starbases, Cyber Armor, Battle Carriers (BV), Fighter 4, Miner X."),
        (3, 10, "Build Raider X (RX), Scout X (SCX)."),
    ),
    *_track(
        TechName.tractor_beam,
        (0, 0, "Not available. Requires Advanced Construction 1."),
        (1, 10, "Battleships (BB) can mount. One enemy ship per combat round cannot retreat."),
    ),
    *_track(
        TechName.shield_projector,
        (0, 0, "Not available. Requires Advanced Construction 1."),
        (1, 10, "Dreadnoughts (DN) can mount. Protects one friendly ship from 1 hit each round."),
    ),
]

# ── MASTER REGISTRY ────────────────────────────────────────────────────────────

_ALL_TECHS: dict[TechRef, Technology] = {tech.ref: tech for tech in _CATALOG}


def get_technology(name: TechName | str, level: int) -> Technology:
    """Return a Technology definition or raise KeyError."""
    try:
        ref = TechRef(TechName(name), int(level))
    except ValueError as exc:
        raise KeyError(f"Unknown technology: '{name} {level}'") from exc
    tech = _ALL_TECHS.get(ref)
    if tech is None:
        raise KeyError(f"Unknown technology: '{ref.label}'")
    return tech


def list_technologies() -> list[Technology]:
    """Return all technology definitions in catalog order."""
    return list(_CATALOG)


def list_track(name: TechName) -> list[Technology]:
    """Return every level of one technology track, lowest first."""
    return sorted((t for t in _CATALOG if t.name == name), key=lambda t: t.level)


def max_free_level(name: TechName) -> int:
    """Highest level of a track that costs nothing (owned from game start)."""
    return max((t.level for t in list_track(name) if t.cost == 0), default=0)


def tech_cost(label: str) -> int:
    """RP cost of a purchased label; 0 for anything not in the catalog."""
    ref = parse_tech_label(label)
    tech = _ALL_TECHS.get(ref) if ref is not None else None
    return tech.cost if tech is not None else 0
