"""Resource ledgers: the LP, CP, RP and TP columns of a turn.

Each function fills the derived fields of one ledger in place from the
turn's own inputs and the previous turn's remaining balance.  Planet income,
maintenance and costs are computed by the planet and fleet services and
passed in.
"""

from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.fleet_service import MaintenanceSummary, UnitCosts
from se4x_ledger.services.planet_service import PlanetIncome

MAX_CARRY_OVER = 30

# Each LP of maintenance left unpaid costs this much CP
PENALTY_MULTIPLIER = 3


def apply_income(turn: Turn, income: PlanetIncome) -> None:
    for section in ("lp", "cp", "rp", "tp"):
        ledger = getattr(turn, section)
        ledger.income = income.total(section)
        ledger.planet_contributions = income.contributions[section]


def settle_logistics(turn: Turn, prev: Turn | None, maintenance: MaintenanceSummary) -> int:
    """Pay maintenance out of LP; return the unpaid remainder."""
    lp = turn.lp
    lp.carry_over = prev.lp.remaining if prev is not None else 0
    lp.total_maintenance = maintenance.total
    lp.maintenance_contributions = list(maintenance.contributions)

    available = lp.carry_over + lp.income + lp.adjustment - lp.bid - lp.placed_on_lc
    paid = min(maintenance.total, max(0, available))
    lp.maintenance = paid
    lp.remaining = available - paid
    return max(0, maintenance.total - paid)


def settle_construction(
    turn: Turn,
    prev: Turn | None,
    unpaid_maintenance: int,
    unit_costs: UnitCosts,
    facility_cost: int,
    facility_badges: list[str],
) -> None:
    cp = turn.cp
    cp.carry_over = min(max(0, prev.cp.remaining), MAX_CARRY_OVER) if prev is not None else 0
    cp.penalty = unpaid_maintenance * PENALTY_MULTIPLIER
    cp.purchases = unit_costs.purchases + facility_cost
    cp.spent_on_upgrades = unit_costs.upgrades
    cp.purchased_units = [*unit_costs.purchase_badges, *facility_badges]
    cp.upgraded_units = list(unit_costs.upgrade_badges)

    subtotal = cp.carry_over + cp.income + cp.mineral_cards + cp.pipeline - cp.penalty
    cp.remaining = subtotal - cp.purchases - cp.spent_on_upgrades + cp.adjustment


def settle_research(turn: Turn, prev: Turn | None) -> None:
    rp = turn.rp
    rp.carry_over = min(prev.rp.remaining, MAX_CARRY_OVER) if prev is not None else 0
    rp.remaining = rp.carry_over + rp.income - rp.spending + rp.adjustment


def settle_temporal(turn: Turn, prev: Turn | None) -> None:
    tp = turn.tp
    tp.carry_over = prev.tp.remaining if prev is not None else 0
    tp.remaining = tp.carry_over + tp.income - tp.spending + tp.adjustment


def negative_balances(turn: Turn) -> dict[str, int]:
    """Ledger sections of a turn that end below zero, with their balance."""
    return {
        section: getattr(turn, section).remaining
        for section in ("lp", "cp", "rp", "tp")
        if getattr(turn, section).remaining < 0
    }
