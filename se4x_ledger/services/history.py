"""Helpers for locating and replacing turns in a turn history.

Only the latest turn of a history accepts new purchases and edits; earlier
turns are locked once a newer economic phase exists.
"""

from collections.abc import Sequence

from se4x_ledger.schemas.turn import Turn


def turn_index(turns: Sequence[Turn], turn_id: int) -> int:
    """Return the list index of a turn id or raise ValueError."""
    for index, turn in enumerate(turns):
        if turn.id == turn_id:
            return index
    raise ValueError(f"Turn {turn_id} does not exist")


def editable_index(turns: Sequence[Turn], turn_id: int | None = None) -> int:
    """Return the index of the turn being edited, defaulting to the latest.

    Raises ValueError when the turn is locked (not the latest turn).
    """
    if not turns:
        raise ValueError("The turn history is empty")
    if turn_id is None:
        return len(turns) - 1
    index = turn_index(turns, turn_id)
    if index != len(turns) - 1:
        raise ValueError(f"Turn {turn_id} is locked; only turn {turns[-1].id} can be edited")
    return index


def with_turn(turns: Sequence[Turn], index: int, turn: Turn) -> list[Turn]:
    """Return a new list with one turn replaced."""
    updated = list(turns)
    updated[index] = turn
    return updated
