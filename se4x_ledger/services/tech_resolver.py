"""Technology level resolver.

Technology in Space Empires 4X is cumulative: once a level is bought it is
available to every later turn.  Unit groups do not store absolute combat
values; they store the technology levels fitted to them, and those levels are
re-resolved against the accumulated technology set whenever a group is built,
upgraded or (for constructions) simply carried forward.

Responsibilities:
  - Hold an immutable accumulated technology set (TechLedger)
  - Build the running prefix union of purchases, one ledger per turn
  - Answer "best level of track X" and "best techs for unit category Y"
  - Resolve a unit group's technology snapshot, per unit category
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Callable

from se4x_ledger.data.technologies import (
    BASELINE_LEVEL_ONE,
    TechName,
    TechRef,
    parse_tech_label,
)
from se4x_ledger.data.units import (
    AUTOMATIC_TECHS,
    CATEGORY_TECHS,
    MoveType,
    UnitCategory,
    UnitDefinition,
)
from se4x_ledger.schemas.turn import TechSnapshot, Turn


@dataclass(frozen=True)
class CategoryTechs:
    """Best technology available to one unit category."""
    tech_list: tuple[str, ...]
    attack: int = 0
    defense: int = 0
    move: int = 1
    tactics: int = 0


@dataclass(frozen=True)
class TechLedger:
    """Immutable set of technologies owned at some point in time."""
    refs: frozenset[TechRef] = frozenset()

    def absorb(self, labels: Iterable[str]) -> TechLedger:
        """Return a new ledger that also owns the given purchase labels.

        Labels that do not parse to a known technology are ignored.
        """
        new_refs = {ref for ref in map(parse_tech_label, labels or ()) if ref is not None}
        if new_refs <= self.refs:
            return self
        return TechLedger(self.refs | new_refs)

    def best_level(self, name: TechName) -> int:
        """Highest owned level of a track (baseline tracks resolve to at least 1)."""
        best = max((ref.level for ref in self.refs if ref.name == name), default=0)
        if best == 0 and name in BASELINE_LEVEL_ONE:
            return 1
        return best

    def has(self, name: TechName, level: int = 1) -> bool:
        return self.best_level(name) >= level

    def best_for_category(self, category: UnitCategory) -> CategoryTechs:
        """Resolve every track relevant to a unit category."""
        automatic = AUTOMATIC_TECHS[category]
        labels: list[str] = []
        levels: dict[TechName, int] = {}
        for name in CATEGORY_TECHS[category]:
            level = self.best_level(name)
            if level <= 0:
                continue
            levels[name] = level
            if name not in automatic:
                labels.append(TechRef(name, level).label)
        return CategoryTechs(
            tech_list=tuple(labels),
            attack=levels.get(TechName.attack, 0),
            defense=levels.get(TechName.defense, 0),
            move=levels.get(TechName.movement, 1),
            tactics=levels.get(TechName.tactics, 0),
        )


def accumulate_techs(turns: Sequence[Turn]) -> list[TechLedger]:
    """Return the technology ledger in force during each turn.

    Entry i is the union of the purchases of turns 1..i+1, so a technology
    bought in a turn is already available to that turn's fleet.
    """
    ledgers: list[TechLedger] = []
    ledger = TechLedger()
    for turn in turns:
        ledger = ledger.absorb(turn.rp.purchased_techs)
        ledgers.append(ledger)
    return ledgers


# ---------------------------------------------------------------------------
# Snapshot resolution, one strategy per unit category
# ---------------------------------------------------------------------------


def _move_level(unit: UnitDefinition, best: CategoryTechs) -> int:
    if unit.move_type is MoveType.normal:
        return best.move
    return 1


def _spaceship_snapshot(unit: UnitDefinition, best: CategoryTechs) -> TechSnapshot:
    return TechSnapshot(
        attack=str(min(best.attack, unit.attack_cap)),
        defense=str(min(best.defense, unit.defense_cap)),
        tactics=str(best.tactics),
        move=str(_move_level(unit, best)),
    )


def _construction_snapshot(unit: UnitDefinition, best: CategoryTechs) -> TechSnapshot:
    return TechSnapshot(
        attack=str(min(best.attack, unit.attack_cap)),
        defense=str(min(best.defense, unit.defense_cap)),
        tactics="0",
        move="1",
    )


def _ground_unit_snapshot(unit: UnitDefinition, best: CategoryTechs) -> TechSnapshot:
    return TechSnapshot(attack="0", defense="0", tactics="0", move="1")


_SNAPSHOT_STRATEGIES: dict[UnitCategory, Callable[[UnitDefinition, CategoryTechs], TechSnapshot]] = {
    UnitCategory.spaceship: _spaceship_snapshot,
    UnitCategory.construction: _construction_snapshot,
    UnitCategory.ground_unit: _ground_unit_snapshot,
}


def resolve_snapshot(unit: UnitDefinition, ledger: TechLedger) -> tuple[list[str], TechSnapshot]:
    """Return (tech labels, snapshot) for a group fitted with the best available tech."""
    best = ledger.best_for_category(unit.category)
    return list(best.tech_list), _SNAPSHOT_STRATEGIES[unit.category](unit, best)
