"""Tests for the turn recalculation engine.

Covers:
- Opening turn economy (homeworld income, starting maintenance)
- Maintenance shortfall penalties and the Elite/Legendary half-upkeep pool
- Carry-over chain between turns (LP, CP and RP caps, TP)
- Fleet propagation: counts, experience, snapshots, upgrades, Militia
- Planet propagation: growth ladder, deletions, facility activation
- Purity: no mutation of the input, no shared objects, idempotence
"""

from se4x_ledger.schemas.turn import (
    Experience,
    Facility,
    FacilityType,
    FleetEntry,
    Planet,
    PlanetType,
    Turn,
    UnitGroup,
)
from se4x_ledger.services.fleet_service import set_purchase, set_upgraded
from se4x_ledger.services.planet_service import add_colony, remove_planet
from se4x_ledger.services.research_service import buy_technology
from se4x_ledger.services.turn_engine import recalculate
from se4x_ledger.services.turn_service import (
    add_turn,
    delete_last_turn,
    initial_turn,
    new_campaign_turns,
    update_ledger,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _homeworld() -> Planet:
    return initial_turn().planets[0]


def _turn_with_fleet(turn_id: int = 1, **fleet: list[UnitGroup]) -> Turn:
    return Turn(
        id=turn_id,
        fleet={acronym: FleetEntry(groups=groups) for acronym, groups in fleet.items()},
        planets=[_homeworld()],
    )


def _dump(turns: list[Turn]) -> list[dict]:
    return [t.model_dump(by_alias=True) for t in turns]


def _campaign(length: int) -> list[Turn]:
    turns = new_campaign_turns()
    for _ in range(length - 1):
        turns = add_turn(turns)
    return turns


# ---------------------------------------------------------------------------
# Opening turn
# ---------------------------------------------------------------------------


class TestOpeningTurn:
    def test_homeworld_income(self):
        turn = new_campaign_turns()[0]
        assert turn.cp.income == 20
        assert turn.rp.income == 5
        assert turn.lp.income == 5
        assert turn.tp.income == 0
        assert turn.cp.remaining == 20

    def test_homeworld_contributions(self):
        turn = new_campaign_turns()[0]
        assert [(c.planet_name, c.amount) for c in turn.cp.planet_contributions] == [("Homeworld", 20)]
        assert [(c.planet_name, c.amount) for c in turn.rp.planet_contributions] == [("Homeworld", 5)]
        assert turn.tp.planet_contributions == []

    def test_starting_maintenance(self):
        turn = new_campaign_turns()[0]
        # 3 Scouts pay; Colony Ships, the Miner and Shipyards are exempt
        assert turn.lp.total_maintenance == 3
        assert turn.lp.maintenance == 3
        assert turn.lp.remaining == 2
        assert turn.lp.maintenance_contributions == ["Scout 3"]
        assert turn.cp.penalty == 0

    def test_first_turn_carry_over_is_zero(self):
        turn = new_campaign_turns()[0]
        assert (turn.lp.carry_over, turn.cp.carry_over, turn.rp.carry_over, turn.tp.carry_over) == (0, 0, 0, 0)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


class TestMaintenance:
    def test_shortfall_becomes_cp_penalty(self):
        turn = _turn_with_fleet(SC=[UnitGroup(id=1, count=6)])
        result = recalculate([turn])[0]
        assert result.lp.total_maintenance == 6
        assert result.lp.maintenance == 5
        assert result.lp.remaining == 0
        assert result.cp.penalty == 3
        assert result.cp.remaining == 20 - 3

    def test_bid_reduces_lp_before_maintenance(self):
        turn = _turn_with_fleet(SC=[UnitGroup(id=1, count=2)])
        turn.lp.bid = 4
        result = recalculate([turn])[0]
        assert result.lp.maintenance == 1
        assert result.lp.remaining == 0
        assert result.cp.penalty == 3

    def test_negative_lp_pays_nothing(self):
        turn = _turn_with_fleet(SC=[UnitGroup(id=1, count=2)])
        turn.lp.placed_on_lc = 8
        result = recalculate([turn])[0]
        assert result.lp.maintenance == 0
        assert result.lp.remaining == -3
        assert result.cp.penalty == 6

    def test_elite_pool_is_halved_once(self):
        turn = _turn_with_fleet(
            SC=[
                UnitGroup(id=1, count=1, experience=Experience.elite),
                UnitGroup(id=2, count=1, experience=Experience.legendary),
            ]
        )
        result = recalculate([turn])[0]
        # Halving each group would give 0; the pooled base of 2 gives 1
        assert result.lp.total_maintenance == 1
        assert result.lp.maintenance_contributions == []

    def test_elite_group_display_amount(self):
        turn = _turn_with_fleet(CA=[UnitGroup(id=1, count=3, experience=Experience.elite)])
        result = recalculate([turn])[0]
        assert result.lp.total_maintenance == 3
        assert result.lp.maintenance_contributions == ["Cruiser 3"]

    def test_adjust_counts_toward_upkeep(self):
        turn = _turn_with_fleet(SC=[UnitGroup(id=1, count=2, adjust=1)])
        assert recalculate([turn])[0].lp.total_maintenance == 3

    def test_zero_hull_unit_pays_one(self):
        turn = _turn_with_fleet(Decoy=[UnitGroup(id=1, count=2)])
        assert recalculate([turn])[0].lp.total_maintenance == 2

    def test_ground_units_exempt(self):
        turn = _turn_with_fleet(Inf=[UnitGroup(id=1, count=5)], Mine=[UnitGroup(id=1, count=2)])
        assert recalculate([turn])[0].lp.total_maintenance == 0


# ---------------------------------------------------------------------------
# Carry-over chain
# ---------------------------------------------------------------------------


class TestCarryOver:
    def test_chain_integrity(self):
        turns = _campaign(4)
        for prev, turn in zip(turns, turns[1:]):
            assert turn.lp.carry_over == prev.lp.remaining
            assert turn.cp.carry_over == min(max(0, prev.cp.remaining), 30)
            assert turn.rp.carry_over == min(prev.rp.remaining, 30)
            assert turn.tp.carry_over == prev.tp.remaining

    def test_cp_carry_over_capped_at_thirty(self):
        turns = _campaign(2)
        assert turns[0].cp.remaining == 20
        # 20 carried + 20 income in turn 2, only 30 of it carries into turn 3
        turns = add_turn(turns)
        assert turns[1].cp.remaining == 40
        assert turns[2].cp.carry_over == 30

    def test_negative_cp_does_not_carry(self):
        turn = initial_turn()
        turn.cp.adjustment = -25
        result = recalculate([turn, Turn(id=2)])
        assert result[0].cp.remaining == -5
        assert result[1].cp.carry_over == 0

    def test_rp_carry_over_capped(self):
        turns = update_ledger(new_campaign_turns(), 1, "rp", {"adjustment": 40})
        turns = add_turn(turns)
        assert turns[0].rp.remaining == 45
        assert turns[1].rp.carry_over == 30

    def test_lp_carries_uncapped(self):
        turns = update_ledger(new_campaign_turns(), 1, "lp", {"adjustment": 50})
        turns = add_turn(turns)
        assert turns[1].lp.carry_over == 52


# ---------------------------------------------------------------------------
# Fleet propagation
# ---------------------------------------------------------------------------


class TestFleetPropagation:
    def test_counts_fold_into_next_turn(self):
        turns = set_purchase(new_campaign_turns(), "SC", 1, 2)
        turns = add_turn(turns, auto_adjust=True)
        group = turns[1].fleet["SC"].find_group(1)
        assert group.count == 5
        assert group.purchase == 0

    def test_survivors_become_skilled(self):
        turns = _campaign(2)
        assert turns[1].fleet["SC"].find_group(1).experience == Experience.skilled

    def test_purchase_clears_experience(self):
        turns = set_purchase(_campaign(2), "SC", 1, 1)
        assert turns[1].fleet["SC"].find_group(1).experience is None

    def test_existing_experience_kept(self):
        turns = _campaign(2)
        turns[1].fleet["SC"].groups[0].experience = Experience.veteran
        result = recalculate(turns)
        assert result[1].fleet["SC"].find_group(1).experience == Experience.veteran

    def test_attack_bought_this_turn_fits_new_ships(self):
        turns = buy_technology(_campaign(2), "Attack", 1)
        turns = set_purchase(turns, "SC", 2, 1)
        fleet = turns[1].fleet["SC"]
        assert fleet.find_group(2).techs.attack == "1"
        assert "Attack 1" in fleet.find_group(2).tech_level
        # The veteran group keeps its old fit until upgraded
        assert fleet.find_group(1).techs.attack == "0"

    def test_upgrade_costs_hull_points_and_refits(self):
        turns = buy_technology(_campaign(2), "Attack", 1)
        turns = set_upgraded(turns, "SC", 1, True)
        turn = turns[1]
        assert turn.cp.spent_on_upgrades == 3
        assert turn.cp.upgraded_units == ["Scout 3"]
        assert turn.fleet["SC"].find_group(1).techs.attack == "1"

    def test_upgrade_flag_cleared_next_turn_and_fit_kept(self):
        turns = buy_technology(_campaign(2), "Attack", 1)
        turns = set_upgraded(turns, "SC", 1, True)
        turns = add_turn(turns, auto_adjust=True)
        group = turns[2].fleet["SC"].find_group(1)
        assert group.is_upgraded is False
        assert group.techs.attack == "1"
        assert turns[2].cp.spent_on_upgrades == 0

    def test_constructions_refit_for_free(self):
        turns = buy_technology(_campaign(2), "Ship Size", 2)
        shipyards = turns[1].fleet["SY"].find_group(1)
        assert "Ship Size 2" in shipyards.tech_level
        assert turns[1].cp.spent_on_upgrades == 0

    def test_materialises_missing_groups(self):
        turns = _campaign(2)
        turns[1].fleet = {}
        result = recalculate(turns)
        assert result[1].fleet["CO"].find_group(3).count == 1
        assert result[1].fleet["SC"].find_group(1).count == 3

    def test_militia_never_carries(self):
        turn = _turn_with_fleet(Militia=[UnitGroup(id=1, count=4)])
        next_turn = Turn(id=2)
        result = recalculate([turn, next_turn])
        militia = result[1].fleet["Militia"].find_group(1)
        assert militia.count == 0
        assert militia.experience == Experience.green
        assert result[1].lp.total_maintenance == 0

    def test_unknown_units_left_untouched(self):
        turns = _campaign(2)
        turns[0].fleet["XYZ"] = FleetEntry(groups=[UnitGroup(id=1, count=9)])
        turns[1].fleet["XYZ"] = FleetEntry(groups=[UnitGroup(id=1, count=2)])
        result = recalculate(turns)
        assert result[1].fleet["XYZ"].find_group(1).count == 2
        assert result[1].lp.total_maintenance == turns[1].lp.total_maintenance


# ---------------------------------------------------------------------------
# Planet propagation
# ---------------------------------------------------------------------------


class TestPlanetPropagation:
    def test_colony_growth_ladder(self):
        turns = add_colony(new_campaign_turns(), "Vega")
        for _ in range(4):
            turns = add_turn(turns)
        capacities = [t.planets[1].cp for t in turns]
        assert capacities == [0, 1, 3, 5, 5]

    def test_newly_added_flag_clears(self):
        turns = add_turn(add_colony(new_campaign_turns(), "Vega"))
        assert turns[0].planets[1].is_newly_added is True
        assert turns[1].planets[1].is_newly_added is False

    def test_damaged_homeworld_regrows(self):
        turn = initial_turn()
        turn.planets[0].cp = 5
        result = recalculate([turn, Turn(id=2), Turn(id=3)])
        assert [t.find_planet("homeworld-start").cp for t in result] == [5, 10, 15]

    def test_deletions_are_permanent(self):
        turns = add_turn(add_colony(new_campaign_turns(), "Vega"))
        colony_id = turns[1].planets[1].id
        turns = add_turn(remove_planet(turns, colony_id))
        assert colony_id in turns[2].deleted_planet_ids
        assert turns[2].find_planet(colony_id) is None
        # The deletion set is rebuilt from the previous turn
        turns[2].deleted_planet_ids = []
        result = recalculate(turns)
        assert colony_id in result[2].deleted_planet_ids
        assert result[2].find_planet(colony_id) is None

    def test_facility_built_now_produces_next_turn(self):
        turn = initial_turn()
        turn.planets.append(
            Planet(
                id="colony-a",
                name="Vega",
                type=PlanetType.colony,
                cp=1,
                facilities=[Facility(type=FacilityType.temporal, built_turn_id=1)],
            )
        )
        result = recalculate([turn, Turn(id=2)])
        assert result[0].tp.income == 0
        assert result[0].cp.income == 21
        assert result[0].cp.purchases == 5
        assert result[0].cp.purchased_units == ["Vega TC 5"]
        # Turn 2: colony grew to 3 and converts 3 + 5 into TP
        assert result[1].tp.income == 8
        assert result[1].cp.income == 20
        assert result[1].cp.purchases == 0


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------


class TestPurity:
    def test_idempotent(self):
        turns = buy_technology(add_colony(_campaign(3), "Vega"), "Attack", 1)
        turns = set_purchase(turns, "DD", 1, 0)
        once = recalculate(turns)
        twice = recalculate(once)
        assert _dump(once) == _dump(twice)

    def test_input_not_mutated(self):
        turns = _campaign(3)
        turns[2].fleet = {}
        before = _dump(turns)
        recalculate(turns)
        assert _dump(turns) == before

    def test_no_shared_objects(self):
        turns = _campaign(2)
        result = recalculate(turns)
        assert result[0] is not turns[0]
        result[0].fleet["SC"].groups[0].count = 99
        result[0].planets[0].name = "Changed"
        assert turns[0].fleet["SC"].groups[0].count == 3
        assert turns[0].planets[0].name == "Homeworld"

    def test_consecutive_turns_do_not_share_groups(self):
        turns = recalculate([initial_turn(), Turn(id=2)])
        turns[1].fleet["SC"].groups[0].techs.attack = "9"
        assert turns[0].fleet["SC"].groups[0].techs.attack == "0"

    def test_delete_last_turn_matches_prefix(self):
        turns = _campaign(3)
        shortened = delete_last_turn(turns)
        assert _dump(shortened) == _dump(turns[:2])
