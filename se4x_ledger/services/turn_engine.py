"""Turn recalculation engine.

``recalculate`` rebuilds every derived value of a turn history from the
player's inputs, oldest turn first, so that an edit anywhere ripples forward
through carry-overs, fleet experience and technology, and planet growth.

The input list and its turns are never modified; every returned turn is a
fresh deep copy.  Running it twice gives the same result as running it once.
"""

import logging
from collections.abc import Sequence

from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.fleet_service import (
    compute_maintenance,
    compute_unit_costs,
    normalize_first_turn_fleet,
    propagate_fleet,
)
from se4x_ledger.services.planet_service import (
    compute_income,
    facility_build_costs,
    propagate_planets,
)
from se4x_ledger.services.resource_service import (
    apply_income,
    settle_construction,
    settle_logistics,
    settle_research,
    settle_temporal,
)
from se4x_ledger.services.tech_resolver import TechLedger

logger = logging.getLogger(__name__)


def recalculate(turns: Sequence[Turn]) -> list[Turn]:
    """Return a fully recomputed copy of a turn history."""
    result: list[Turn] = []
    ledger = TechLedger()
    prev: Turn | None = None

    for source in turns:
        turn = source.model_copy(deep=True)
        ledger = ledger.absorb(turn.rp.purchased_techs)

        if prev is None:
            normalize_first_turn_fleet(turn, ledger)
        else:
            propagate_fleet(prev, turn, ledger)
            propagate_planets(prev, turn)

        apply_income(turn, compute_income(turn))

        unpaid = settle_logistics(turn, prev, compute_maintenance(turn.fleet))
        facility_cost, facility_badges = facility_build_costs(turn)
        settle_construction(
            turn, prev, unpaid, compute_unit_costs(turn.fleet), facility_cost, facility_badges
        )
        settle_research(turn, prev)
        settle_temporal(turn, prev)

        result.append(turn)
        prev = turn

    logger.debug("Recalculated %d turns", len(result))
    return result
