"""Turn management: seeding, advancing, rewinding and editing the turn history.

Every operation takes the current history and returns a new, recalculated
one; the caller decides where to store it.
"""

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import TypeAdapter

from se4x_ledger.config import settings
from se4x_ledger.schemas.turn import (
    LEDGER_INPUT_FIELDS,
    Facility,
    FacilityType,
    FleetEntry,
    Planet,
    PlanetType,
    TechSnapshot,
    Turn,
    UnitGroup,
)
from se4x_ledger.services.history import editable_index, turn_index, with_turn
from se4x_ledger.services.resource_service import negative_balances
from se4x_ledger.services.turn_engine import recalculate

logger = logging.getLogger(__name__)

HOMEWORLD_ID = "homeworld-start"

_points = TypeAdapter(int)


def _starting_group(group_id: int, count: int, tech_level: list[str]) -> UnitGroup:
    return UnitGroup(
        id=group_id,
        count=count,
        tech_level=tech_level,
        techs=TechSnapshot(attack="0", defense="0", move="1"),
    )


def initial_turn() -> Turn:
    """The first turn of every campaign, before recalculation."""
    return Turn(
        id=1,
        fleet={
            "SC": FleetEntry(groups=[_starting_group(1, 3, ["Movement 1"])]),
            "Miner": FleetEntry(groups=[_starting_group(1, 1, ["Movement 1"])]),
            "CO": FleetEntry(
                groups=[_starting_group(i, 1, ["Movement 1"]) for i in (1, 2, 3)]
            ),
            "SY": FleetEntry(groups=[_starting_group(1, 4, ["Shipyard 1", "Ship Size 1"])]),
        },
        planets=[
            Planet(
                id=HOMEWORLD_ID,
                name="Homeworld",
                type=PlanetType.homeworld,
                cp=20,
                facilities=[
                    Facility(type=FacilityType.research, built_turn_id=0),
                    Facility(type=FacilityType.logistic, built_turn_id=0),
                ],
                image="/images/planets/homeworld.jpg",
            )
        ],
        log_commentary="",
    )


def new_campaign_turns() -> list[Turn]:
    return recalculate([initial_turn()])


def _settle_negatives(turns: list[Turn]) -> list[Turn]:
    """Raise each negative ledger's adjustment on the last turn so it ends at 0."""
    last = turns[-1].model_copy(deep=True)
    for section, balance in negative_balances(last).items():
        ledger = last.ledger(section)
        ledger.adjustment += -balance
        logger.info("Auto-adjusted %s by %+d in turn %d", section.upper(), -balance, last.id)
    return recalculate(with_turn(turns, len(turns) - 1, last))


def _fresh_turn(last: Turn, new_id: int) -> Turn:
    """Copy the last turn and clear everything that only applies to one turn."""
    turn = last.model_copy(deep=True)
    turn.id = new_id
    turn.log_commentary = ""

    turn.lp.bid = 0
    turn.lp.placed_on_lc = 0
    turn.lp.adjustment = 0

    turn.cp.purchases = 0
    turn.cp.adjustment = 0
    turn.cp.purchased_units = []
    turn.cp.upgraded_units = []
    turn.cp.spent_on_upgrades = 0

    turn.rp.spending = 0
    turn.rp.adjustment = 0
    turn.rp.purchased_techs = []

    turn.tp.spending = 0
    turn.tp.adjustment = 0

    for entry in turn.fleet.values():
        for group in entry.groups:
            group.purchase = 0
            group.adjust = 0
            group.is_upgraded = False
    return turn


def add_turn(turns: Sequence[Turn], auto_adjust: bool = False) -> list[Turn]:
    """Advance the campaign by one turn.

    Raises ValueError while the last turn ends with a negative balance, unless
    ``auto_adjust`` is set.
    """
    if not turns:
        raise ValueError("The turn history is empty")
    if len(turns) >= settings.max_turns:
        raise ValueError(f"A campaign cannot exceed {settings.max_turns} turns")

    current = list(turns)
    negatives = negative_balances(current[-1])
    if negatives:
        if not auto_adjust:
            detail = ", ".join(f"{s.upper()} {v}" for s, v in negatives.items())
            raise ValueError(f"Turn {current[-1].id} ends with a negative balance ({detail})")
        current = _settle_negatives(current)

    new_turn = _fresh_turn(current[-1], len(current) + 1)
    logger.info("Advancing to turn %d", new_turn.id)
    return recalculate([*current, new_turn])


def delete_last_turn(turns: Sequence[Turn]) -> list[Turn]:
    if len(turns) <= 1:
        raise ValueError("The only turn of a campaign cannot be deleted")
    logger.info("Deleting turn %d", turns[-1].id)
    return recalculate(turns[:-1])


def update_ledger(
    turns: Sequence[Turn], turn_id: int, section: str, updates: dict[str, Any]
) -> list[Turn]:
    """Set player-entered values of one ledger (bid, adjustment, spending ...)."""
    index = editable_index(turns, turn_id)
    allowed = LEDGER_INPUT_FIELDS.get(section)
    if allowed is None:
        raise ValueError(f"Unknown ledger section: '{section}'")
    rejected = sorted(set(updates) - allowed)
    if rejected:
        raise ValueError(
            f"Fields {', '.join(rejected)} of {section.upper()} are calculated and cannot be set"
        )

    turn = turns[index].model_copy(deep=True)
    ledger = turn.ledger(section)
    for field_name, value in updates.items():
        setattr(ledger, field_name, _points.validate_python(0 if value is None else value))
    return recalculate(with_turn(turns, index, turn))


def update_log(turns: Sequence[Turn], turn_id: int, text: str) -> list[Turn]:
    """Set a turn's log commentary. Any turn may be annotated."""
    index = turn_index(turns, turn_id)
    updated = [turn.model_copy(deep=True) for turn in turns]
    updated[index].log_commentary = text
    return updated


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def turn_summary(turn: Turn) -> list[str]:
    """Human-readable logbook events for a turn."""
    events: list[str] = []

    new_colonies = [p.name for p in turn.planets if p.is_newly_added and p.type is PlanetType.colony]
    if new_colonies:
        noun = "colonies" if len(new_colonies) > 1 else "colony"
        events.append(f"Founded {len(new_colonies)} new {noun}: {', '.join(new_colonies)}")

    conquered = [p.name for p in turn.planets if p.is_conquered]
    if conquered:
        events.append(f"Conquered planets: {', '.join(conquered)}")

    if turn.deleted_planet_ids:
        events.append(f"Lost or abandoned {len(turn.deleted_planet_ids)} planet(s)")

    if turn.rp.purchased_techs:
        events.append(f"Advanced technology: {', '.join(turn.rp.purchased_techs)}")
    if turn.cp.purchased_units:
        events.append(f"Constructed units: {', '.join(turn.cp.purchased_units)}")
    if turn.cp.upgraded_units:
        events.append(f"Upgraded units: {', '.join(turn.cp.upgraded_units)}")

    for section in ("cp", "lp", "rp", "tp"):
        adjustment = turn.ledger(section).adjustment
        if adjustment != 0:
            events.append(f"{section.upper()} Adjustment: {_signed(adjustment)}")
    return events
