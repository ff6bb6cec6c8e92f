"""Tests for the empire status report."""

import pytest

from se4x_ledger.data.technologies import TechName
from se4x_ledger.schemas.turn import PlanetType
from se4x_ledger.services.fleet_service import set_upgraded
from se4x_ledger.services.report_service import empire_report
from se4x_ledger.services.research_service import buy_technology
from se4x_ledger.services.turn_service import HOMEWORLD_ID, add_turn, new_campaign_turns


def _group(report, acronym: str, group_id: int = 1):
    return next(g for g in report.fleet if g.acronym == acronym and g.group_id == group_id)


class TestFleetReadiness:
    def test_opening_fleet(self):
        report = empire_report(new_campaign_turns())
        assert report.turn_id == 1
        assert report.vessels == 3 + 1 + 3 + 4
        assert report.obsolete_vessels == 0
        scouts = _group(report, "SC")
        assert (scouts.count, scouts.attack, scouts.move) == (3, 0, 1)
        assert scouts.name == "Scout"

    def test_new_technology_makes_ships_obsolete(self):
        turns = add_turn(new_campaign_turns())
        turns = buy_technology(turns, "Attack", 1)
        report = empire_report(turns)
        assert _group(report, "SC").obsolete
        # Colony ships and miners cannot mount attack technology
        assert not _group(report, "CO").obsolete
        assert not _group(report, "Miner").obsolete
        # Shipyards are refitted automatically
        assert not _group(report, "SY").obsolete
        assert report.obsolete_vessels == 3

    def test_upgrade_clears_obsolescence(self):
        turns = add_turn(new_campaign_turns())
        turns = buy_technology(turns, "Attack", 1)
        turns = set_upgraded(turns, "SC", 1, True)
        report = empire_report(turns)
        assert not _group(report, "SC").obsolete
        assert _group(report, "SC").attack == 1

    def test_fixed_move_units_ignore_movement(self):
        turns = add_turn(new_campaign_turns())
        turns = buy_technology(turns, "Movement", 2)
        report = empire_report(turns)
        assert _group(report, "SC").obsolete
        assert not _group(report, "CO").obsolete

    def test_empty_groups_left_out(self):
        turns = add_turn(new_campaign_turns())
        report = empire_report(turns)
        assert all(g.count > 0 for g in report.fleet)


class TestInventoryAndProduction:
    def test_inventory_lists_purchased_tracks(self):
        turns = buy_technology(new_campaign_turns(), "Attack", 1)
        report = empire_report(turns)
        assert report.technologies == {TechName.attack: 1}

    def test_homeworld_production(self):
        report = empire_report(new_campaign_turns())
        homeworld = next(p for p in report.planets if p.planet_id == HOMEWORLD_ID)
        assert homeworld.type is PlanetType.homeworld
        assert (homeworld.capacity, homeworld.cp, homeworld.rp, homeworld.lp, homeworld.tp) == (
            20,
            20,
            5,
            5,
            0,
        )

    def test_empty_history(self):
        with pytest.raises(ValueError):
            empire_report([])
