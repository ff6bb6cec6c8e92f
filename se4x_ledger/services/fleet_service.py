"""Fleet service: unit group propagation, maintenance, unit costs and fleet edits.

Responsibilities:
  - Carry unit groups from one turn into the next (counts, experience,
    technology snapshots, upgrade flags)
  - Normalise the groups seeded into the first turn
  - Compute LP maintenance and CP purchase/upgrade costs for a turn's fleet
  - Apply player edits (purchase, adjust, upgrade, experience, notes) to the
    latest turn, clamped so a group never leaves [0, max_count]
  - Expose build-lock, badge and movement helpers for the unit catalog
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from se4x_ledger.data.technologies import TechName, TechRef
from se4x_ledger.data.units import (
    BUILD_REQUIREMENTS,
    CATEGORY_BADGES,
    MAX_MOVE_LEVEL,
    MILITIA,
    MOVE_BONUS,
    SPECIAL_BADGES,
    MoveType,
    UnitCategory,
    UnitDefinition,
    find_unit,
    get_unit,
    is_maintenance_exempt,
)
from se4x_ledger.schemas.turn import Experience, FleetEntry, Turn, UnitGroup
from se4x_ledger.services.history import editable_index, with_turn
from se4x_ledger.services.tech_resolver import TechLedger, accumulate_techs, resolve_snapshot

logger = logging.getLogger(__name__)

# Experience tiers that pay half maintenance
HALF_UPKEEP: frozenset[Experience] = frozenset({Experience.elite, Experience.legendary})

SNAPSHOT_FIELDS: dict[str, TechName] = {
    "attack": TechName.attack,
    "defense": TechName.defense,
    "tactics": TechName.tactics,
    "move": TechName.movement,
}


# ---------------------------------------------------------------------------
# Propagation
# ---------------------------------------------------------------------------


def normalize_first_turn_fleet(turn: Turn, ledger: TechLedger) -> None:
    """Fit seeded first-turn groups with technology; mutates ``turn`` in place."""
    for acronym, entry in turn.fleet.items():
        unit = find_unit(acronym)
        if unit is None:
            logger.debug("Skipping unknown unit type %r in turn %d", acronym, turn.id)
            continue
        fresh_levels, fresh_techs = resolve_snapshot(unit, ledger)
        is_construction = unit.category is UnitCategory.construction

        for group in entry.groups:
            has_purchase = group.purchase > 0
            newly_formed = group.total > 0 and group.count == 0
            refresh = (
                group.is_upgraded or newly_formed or has_purchase or is_construction
            ) and acronym != MILITIA
            if refresh or (group.total > 0 and not group.tech_level):
                group.tech_level = list(fresh_levels)
                group.techs = fresh_techs.model_copy()
            if has_purchase:
                group.experience = None


def _inherited_experience(
    prev_group: UnitGroup, has_purchase: bool, is_militia: bool
) -> Experience | None:
    if has_purchase:
        return None
    if (
        prev_group.experience in (None, Experience.green)
        and prev_group.total > 0
        and not is_militia
    ):
        # Survived a turn in service: first veterancy step
        return Experience.skilled
    return prev_group.experience or Experience.green


def propagate_fleet(prev: Turn, turn: Turn, ledger: TechLedger) -> None:
    """Carry every unit group of ``prev`` into ``turn``; mutates ``turn`` in place.

    ``prev`` must already be recalculated.  Groups present in ``turn`` keep
    their purchase/adjust/upgrade inputs; groups missing from ``turn`` are
    materialised from ``prev`` with those inputs zeroed.
    """
    for acronym, prev_entry in prev.fleet.items():
        unit = find_unit(acronym)
        if unit is None:
            logger.debug("Skipping unknown unit type %r in turn %d", acronym, turn.id)
            continue

        entry = turn.fleet.get(acronym)
        if entry is None:
            entry = turn.fleet[acronym] = FleetEntry(notes=prev_entry.notes or "")

        fresh_levels, fresh_techs = resolve_snapshot(unit, ledger)
        is_militia = acronym == MILITIA
        is_construction = unit.category is UnitCategory.construction

        for prev_group in prev_entry.groups:
            inherited_count = 0 if is_militia else prev_group.total
            group = entry.find_group(prev_group.id)
            has_purchase = group is not None and group.purchase > 0
            inherited_experience = _inherited_experience(prev_group, has_purchase, is_militia)

            if prev_group.is_upgraded or is_construction:
                inherited_levels, inherited_techs = list(fresh_levels), fresh_techs.model_copy()
            else:
                inherited_levels = list(prev_group.tech_level)
                inherited_techs = prev_group.techs.model_copy()

            if group is None:
                entry.groups.append(
                    prev_group.model_copy(
                        deep=True,
                        update={
                            "count": inherited_count,
                            "tech_level": inherited_levels,
                            "techs": inherited_techs,
                            "experience": inherited_experience,
                            "is_upgraded": False,
                            "purchase": 0,
                            "adjust": 0,
                        },
                    )
                )
                continue

            group.count = inherited_count
            if has_purchase:
                group.experience = None
            elif group.experience is None:
                group.experience = inherited_experience

            newly_formed = (
                inherited_count == 0 or inherited_count + group.adjust == 0
            ) and inherited_count + group.purchase + group.adjust > 0
            refresh = group.is_upgraded or newly_formed or has_purchase or is_construction
            if refresh and not is_militia:
                group.tech_level = list(fresh_levels)
                group.techs = fresh_techs.model_copy()
            else:
                group.tech_level = inherited_levels
                group.techs = inherited_techs

            # An upgrade bought last turn is now baked into the inherited snapshot
            if prev_group.is_upgraded:
                group.is_upgraded = False

    for acronym, entry in turn.fleet.items():
        unit = find_unit(acronym)
        if unit is None:
            continue
        prev_entry = prev.fleet.get(acronym)
        known_ids = {g.id for g in prev_entry.groups} if prev_entry is not None else set()
        for group in entry.groups:
            if group.id not in known_ids:
                _fit_unseen_group(unit, group, ledger)


def _fit_unseen_group(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
    """Settle a group that did not exist in the previous turn: it starts from zero."""
    group.count = 0
    if group.purchase > 0:
        group.experience = None
    refresh = group.is_upgraded or group.total > 0 or unit.category is UnitCategory.construction
    if refresh and unit.acronym != MILITIA:
        fresh_levels, fresh_techs = resolve_snapshot(unit, ledger)
        group.tech_level = list(fresh_levels)
        group.techs = fresh_techs.model_copy()


# ---------------------------------------------------------------------------
# Maintenance and CP costs
# ---------------------------------------------------------------------------


@dataclass
class MaintenanceSummary:
    total: int = 0
    contributions: list[str] = field(default_factory=list)


@dataclass
class UnitCosts:
    purchases: int = 0
    upgrades: int = 0
    purchase_badges: list[str] = field(default_factory=list)
    upgrade_badges: list[str] = field(default_factory=list)


def compute_maintenance(fleet: dict[str, FleetEntry]) -> MaintenanceSummary:
    """Return the LP maintenance owed by a fleet.

    Elite and Legendary groups pay half: their base costs are pooled and the
    pool is halved (rounded down) once.  The per-type display amounts halve
    each group individually.
    """
    total = 0
    veteran_pool = 0
    by_type: dict[str, int] = {}

    for acronym, entry in fleet.items():
        unit = find_unit(acronym)
        if unit is None or is_maintenance_exempt(unit):
            continue
        for group in entry.groups:
            upkeep_count = group.count + group.adjust
            if upkeep_count <= 0:
                continue
            base = upkeep_count * (unit.hull_size or 1)
            if group.experience in HALF_UPKEEP:
                veteran_pool += base
                by_type[unit.name] = by_type.get(unit.name, 0) + base // 2
            else:
                total += base
                by_type[unit.name] = by_type.get(unit.name, 0) + base

    total += veteran_pool // 2
    return MaintenanceSummary(
        total=total,
        contributions=[f"{name} {amount}" for name, amount in by_type.items() if amount > 0],
    )


def compute_unit_costs(fleet: dict[str, FleetEntry]) -> UnitCosts:
    """Return CP spent on new units and on upgrades this turn.

    Constructions are always fitted with the best technology, so their
    upgrades are free.
    """
    costs = UnitCosts()
    for acronym, entry in fleet.items():
        unit = find_unit(acronym)
        if unit is None:
            continue
        purchase_cost = sum(g.purchase * unit.cost for g in entry.groups if g.purchase > 0)
        upgrade_cost = 0
        if unit.category is not UnitCategory.construction:
            upgrade_cost = sum(g.count * unit.hull_size for g in entry.groups if g.is_upgraded)

        if purchase_cost > 0:
            costs.purchases += purchase_cost
            costs.purchase_badges.append(f"{unit.name} {purchase_cost}")
        if upgrade_cost > 0:
            costs.upgrades += upgrade_cost
            costs.upgrade_badges.append(f"{unit.name} {upgrade_cost}")
    return costs


# ---------------------------------------------------------------------------
# Unit catalog helpers
# ---------------------------------------------------------------------------


def is_unit_locked(unit: UnitDefinition, ledger: TechLedger) -> bool:
    """True when the owned technology does not yet allow building the unit."""
    requirement = BUILD_REQUIREMENTS.get(unit.acronym)
    if requirement is not None:
        return any(ledger.best_level(name) < level for name, level in requirement.techs.items())
    return unit.ship_size is not None and unit.ship_size > ledger.best_level(TechName.ship_size)


def effective_move(unit: UnitDefinition, move_tech: int) -> int:
    """Movement level a unit actually moves at with a given Movement tech."""
    if unit.move_type is MoveType.fixed_1:
        return 1
    level = max(unit.move, move_tech)
    bonus = MOVE_BONUS.get(unit.acronym, 0)
    if bonus:
        level = min(MAX_MOVE_LEVEL, level + bonus)
    return level


def unit_badges(unit: UnitDefinition, ledger: TechLedger) -> list[str]:
    """Technology badges a newly built unit of this type would carry."""
    badges: list[str] = []

    attack = min(ledger.best_level(TechName.attack), unit.attack_cap)
    if attack > 0:
        badges.append(TechRef(TechName.attack, attack).label)
    defense = min(ledger.best_level(TechName.defense), unit.defense_cap)
    if defense > 0:
        badges.append(TechRef(TechName.defense, defense).label)
    if unit.category is UnitCategory.spaceship and ledger.best_level(TechName.tactics) > 0:
        badges.append(TechRef(TechName.tactics, ledger.best_level(TechName.tactics)).label)
    for name in (TechName.military_academy, TechName.security_forces):
        if ledger.best_level(name) > 0:
            badges.append(TechRef(name, ledger.best_level(name)).label)

    rules = CATEGORY_BADGES.get(unit.category, ()) + SPECIAL_BADGES.get(unit.acronym, ())
    for rule in rules:
        level = ledger.best_level(rule.tech)
        if level < rule.min_level:
            continue
        if rule.max_level is not None:
            level = min(level, rule.max_level)
        badges.append(TechRef(rule.tech, level).label if rule.show_level else rule.tech.value)

    if unit.move_type is not MoveType.none:
        badges.append(f"Move {effective_move(unit, ledger.best_level(TechName.movement))}")
    return badges


# ---------------------------------------------------------------------------
# Player edits on the latest turn
# ---------------------------------------------------------------------------


def _recalculate(turns: list[Turn]) -> list[Turn]:
    from se4x_ledger.services.turn_engine import recalculate

    return recalculate(turns)


def _lookup_unit(acronym: str) -> UnitDefinition:
    try:
        return get_unit(acronym)
    except KeyError as exc:
        raise ValueError(str(exc)) from exc


def _edit_group(
    turns: list[Turn],
    acronym: str,
    group_id: int,
    turn_id: int | None,
    edit: Callable[[UnitDefinition, UnitGroup, TechLedger], None],
) -> list[Turn]:
    unit = _lookup_unit(acronym)
    if group_id not in unit.groups:
        raise ValueError(f"{unit.name} has no group #{group_id}")

    index = editable_index(turns, turn_id)
    turn = turns[index].model_copy(deep=True)
    entry = turn.fleet.get(acronym)
    if entry is None:
        entry = turn.fleet[acronym] = FleetEntry(notes="")
    group = entry.find_group(group_id)
    if group is None:
        group = UnitGroup(id=group_id)
        entry.groups.append(group)

    ledger = accumulate_techs(turns[: index + 1])[-1]
    edit(unit, group, ledger)
    return _recalculate(with_turn(turns, index, turn))


def set_purchase(
    turns: list[Turn], acronym: str, group_id: int, value: int, turn_id: int | None = None
) -> list[Turn]:
    """Set how many units a group buys this turn, clamped to what may be built."""

    def edit(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
        if is_unit_locked(unit, ledger):
            ceiling = 0
        else:
            ceiling = max(0, unit.max_count - (group.count + group.adjust))
        group.purchase = max(0, min(value, ceiling))
        if group.purchase != value:
            logger.debug("Clamped %s #%d purchase %d -> %d", acronym, group_id, value, group.purchase)
        if group.purchase > 0:
            group.experience = None

    return _edit_group(turns, acronym, group_id, turn_id, edit)


def set_adjust(
    turns: list[Turn], acronym: str, group_id: int, value: int, turn_id: int | None = None
) -> list[Turn]:
    """Set a signed correction to a group's size (losses, captures, free units)."""

    def edit(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
        base = group.count + group.purchase
        group.adjust = max(-base, min(value, unit.max_count - base))
        if group.adjust != value:
            logger.debug("Clamped %s #%d adjust %d -> %d", acronym, group_id, value, group.adjust)

    return _edit_group(turns, acronym, group_id, turn_id, edit)


def set_upgraded(
    turns: list[Turn], acronym: str, group_id: int, upgraded: bool, turn_id: int | None = None
) -> list[Turn]:
    """Flag a group to be refitted with the best available technology."""

    def edit(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
        group.is_upgraded = bool(upgraded)

    return _edit_group(turns, acronym, group_id, turn_id, edit)


def set_experience(
    turns: list[Turn],
    acronym: str,
    group_id: int,
    experience: Experience | None,
    turn_id: int | None = None,
) -> list[Turn]:
    def edit(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
        group.experience = experience

    return _edit_group(turns, acronym, group_id, turn_id, edit)


def set_group_tech(
    turns: list[Turn],
    acronym: str,
    group_id: int,
    tech_type: str,
    level: int,
    turn_id: int | None = None,
) -> list[Turn]:
    """Manually set one level of a group's technology snapshot.

    The level must already be owned; Movement cannot drop below 1.
    """
    tech = SNAPSHOT_FIELDS.get(tech_type)
    if tech is None:
        raise ValueError(f"Unknown technology field '{tech_type}'")

    def edit(unit: UnitDefinition, group: UnitGroup, ledger: TechLedger) -> None:
        floor = 1 if tech is TechName.movement else 0
        best = ledger.best_level(tech)
        if not floor <= level <= best:
            raise ValueError(f"{tech.value} {level} is not available (owned: {best})")
        group.techs = group.techs.model_copy(update={tech_type: str(level)})

    return _edit_group(turns, acronym, group_id, turn_id, edit)


def set_notes(
    turns: list[Turn], acronym: str, notes: str, turn_id: int | None = None
) -> list[Turn]:
    _lookup_unit(acronym)
    index = editable_index(turns, turn_id)
    turn = turns[index].model_copy(deep=True)
    entry = turn.fleet.get(acronym)
    if entry is None:
        entry = turn.fleet[acronym] = FleetEntry()
    entry.notes = notes
    return _recalculate(with_turn(turns, index, turn))
