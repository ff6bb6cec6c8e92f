"""Research service: buying and refunding technology on the latest turn.

Responsibilities:
  - Work out the level of each track owned before a turn starts
  - Validate that only the next level of a track is bought
  - Keep RP spending in step with the technologies bought this turn
  - Build the research board (owned / bought / available / locked per level)
"""

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from se4x_ledger.data.technologies import (
    TechName,
    TechRef,
    Technology,
    get_technology,
    list_technologies,
    list_track,
    max_free_level,
    parse_tech_label,
)
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.history import editable_index, turn_index, with_turn

logger = logging.getLogger(__name__)


class TechStatus(str, enum.Enum):
    owned = "owned"
    bought = "bought"
    available = "available"
    locked = "locked"


@dataclass
class TrackLevels:
    """Where a technology track stands during one turn."""
    name: TechName
    pre_owned: int      # owned before the turn, including free levels
    bought: int         # highest level bought during the turn, 0 if none

    @property
    def current(self) -> int:
        return max(self.pre_owned, self.bought)


@dataclass
class ResearchEntry:
    technology: Technology
    status: TechStatus
    refundable: bool = False
    # Bought more than one level above what was owned at the start of the turn
    multi_level: bool = False


def _levels_bought(turns: Sequence[Turn], name: TechName) -> list[int]:
    refs = (parse_tech_label(label) for turn in turns for label in turn.rp.purchased_techs)
    return [ref.level for ref in refs if ref is not None and ref.name == name]


def track_levels(turns: Sequence[Turn], index: int, name: TechName) -> TrackLevels:
    """Levels of one track as seen from ``turns[index]``."""
    earlier = max(_levels_bought(turns[:index], name), default=0)
    return TrackLevels(
        name=name,
        pre_owned=max(earlier, max_free_level(name)),
        bought=max(_levels_bought(turns[index : index + 1], name), default=0),
    )


def _lookup(name: TechName | str, level: int) -> Technology:
    try:
        return get_technology(name, level)
    except KeyError as exc:
        raise ValueError(str(exc)) from exc


def _recalculate(turns: list[Turn]) -> list[Turn]:
    from se4x_ledger.services.turn_engine import recalculate

    return recalculate(turns)


def buy_technology(
    turns: Sequence[Turn], name: TechName | str, level: int, turn_id: int | None = None
) -> list[Turn]:
    """Buy the next level of a track in the latest turn, charging its RP cost."""
    tech = _lookup(name, level)
    index = editable_index(turns, turn_id)
    levels = track_levels(turns, index, tech.name)
    if level <= levels.current:
        raise ValueError(f"{tech.label} is already owned")
    if level != levels.current + 1:
        raise ValueError(
            f"{tech.label} is locked; buy {TechRef(tech.name, levels.current + 1).label} first"
        )

    turn = turns[index].model_copy(deep=True)
    turn.rp.purchased_techs = [*turn.rp.purchased_techs, tech.label]
    turn.rp.spending += tech.cost
    logger.info("Bought %s for %d RP in turn %d", tech.label, tech.cost, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def refund_technology(
    turns: Sequence[Turn], name: TechName | str, level: int, turn_id: int | None = None
) -> list[Turn]:
    """Undo the highest level of a track bought in the latest turn."""
    tech = _lookup(name, level)
    index = editable_index(turns, turn_id)
    levels = track_levels(turns, index, tech.name)
    if tech.label not in turns[index].rp.purchased_techs:
        raise ValueError(f"{tech.label} was not bought this turn")
    if level != levels.bought:
        raise ValueError(f"Refund {TechRef(tech.name, levels.bought).label} first")

    turn = turns[index].model_copy(deep=True)
    turn.rp.purchased_techs = [t for t in turn.rp.purchased_techs if t != tech.label]
    turn.rp.spending -= tech.cost
    logger.info("Refunded %s in turn %d", tech.label, turn.id)
    return _recalculate(with_turn(turns, index, turn))


def research_board(turns: Sequence[Turn], turn_id: int | None = None) -> list[ResearchEntry]:
    """Status of every catalog technology as seen from one turn (latest by default)."""
    if not turns:
        raise ValueError("The turn history is empty")
    index = len(turns) - 1 if turn_id is None else turn_index(turns, turn_id)
    editable = index == len(turns) - 1

    board: list[ResearchEntry] = []
    track_cache: dict[TechName, TrackLevels] = {}
    for tech in list_technologies():
        levels = track_cache.get(tech.name)
        if levels is None:
            levels = track_cache[tech.name] = track_levels(turns, index, tech.name)

        if tech.level <= levels.pre_owned or tech.cost == 0:
            status = TechStatus.owned
        elif tech.level <= levels.bought:
            status = TechStatus.bought
        elif tech.level == levels.current + 1:
            status = TechStatus.available
        else:
            status = TechStatus.locked

        board.append(
            ResearchEntry(
                technology=tech,
                status=status,
                refundable=editable and status is TechStatus.bought and tech.level == levels.bought,
                multi_level=status is TechStatus.bought and tech.level > levels.pre_owned + 1,
            )
        )
    return board


def owned_technologies(turns: Sequence[Turn], turn_id: int | None = None) -> dict[TechName, int]:
    """Current level of every track that has at least one owned level."""
    if not turns:
        raise ValueError("The turn history is empty")
    index = len(turns) - 1 if turn_id is None else turn_index(turns, turn_id)
    owned: dict[TechName, int] = {}
    for name in TechName:
        if not list_track(name):
            continue
        level = track_levels(turns, index, name).current
        if level > 0:
            owned[name] = level
    return owned
