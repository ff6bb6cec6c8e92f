"""Tests for the technology level resolver.

Covers:
- Parsing "<Name> <Level>" purchase labels
- TechLedger accumulation, exact track matching and baseline levels
- Per-category best technology lists
- Snapshot resolution for spaceships, constructions and ground units
- Prefix accumulation across a turn history
"""

from se4x_ledger.data.technologies import TechName, TechRef, parse_tech_label
from se4x_ledger.data.units import UnitCategory, get_unit
from se4x_ledger.schemas.turn import ResearchLedger, Turn
from se4x_ledger.services.tech_resolver import TechLedger, accumulate_techs, resolve_snapshot


def _turn(turn_id: int, *techs: str) -> Turn:
    return Turn(id=turn_id, rp=ResearchLedger(purchased_techs=list(techs)))


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


class TestLabels:
    def test_parse_multi_word_name(self):
        assert parse_tech_label("Point Defense 2") == TechRef(TechName.point_defense, 2)

    def test_parse_rejects_unknown_name(self):
        assert parse_tech_label("Warp Drive 1") is None

    def test_parse_rejects_missing_level(self):
        assert parse_tech_label("Attack") is None
        assert parse_tech_label("Attack x") is None

    def test_label_round_trip(self):
        assert TechRef(TechName.mine_sweep, 1).label == "Mine Sweep 1"


# ---------------------------------------------------------------------------
# TechLedger
# ---------------------------------------------------------------------------


class TestTechLedger:
    def test_empty_ledger_has_baseline_levels(self):
        ledger = TechLedger()
        assert ledger.best_level(TechName.movement) == 1
        assert ledger.best_level(TechName.ship_size) == 1
        assert ledger.best_level(TechName.shipyard) == 1
        assert ledger.best_level(TechName.attack) == 0

    def test_absorb_returns_new_ledger(self):
        ledger = TechLedger()
        updated = ledger.absorb(["Attack 1"])
        assert ledger.best_level(TechName.attack) == 0
        assert updated.best_level(TechName.attack) == 1

    def test_absorb_nothing_new_returns_same_ledger(self):
        ledger = TechLedger().absorb(["Attack 1"])
        assert ledger.absorb(["Attack 1", "garbage"]) is ledger

    def test_unparseable_labels_ignored(self):
        ledger = TechLedger().absorb(["Attack", "Hyperdrive 3", "Defense 2"])
        assert ledger.best_level(TechName.defense) == 2
        assert len(ledger.refs) == 1

    def test_best_level_is_highest_owned(self):
        ledger = TechLedger().absorb(["Attack 1", "Attack 3", "Attack 2"])
        assert ledger.best_level(TechName.attack) == 3

    def test_tracks_with_shared_prefix_do_not_mix(self):
        ledger = TechLedger().absorb(["Mine Sweep 2"])
        assert ledger.best_level(TechName.mines) == 0
        assert ledger.best_level(TechName.mine_sweep) == 2

    def test_has(self):
        ledger = TechLedger().absorb(["Fighter 2"])
        assert ledger.has(TechName.fighter)
        assert ledger.has(TechName.fighter, 2)
        assert not ledger.has(TechName.fighter, 3)


# ---------------------------------------------------------------------------
# Category best techs
# ---------------------------------------------------------------------------


class TestBestForCategory:
    def test_spaceship_defaults(self):
        best = TechLedger().best_for_category(UnitCategory.spaceship)
        assert best.tech_list == ("Movement 1",)
        assert best.attack == 0
        assert best.move == 1

    def test_spaceship_lists_tactics_but_not_military_academy(self):
        ledger = TechLedger().absorb(["Attack 2", "Tactics 1", "Military Academy 1"])
        best = ledger.best_for_category(UnitCategory.spaceship)
        assert "Attack 2" in best.tech_list
        assert "Tactics 1" in best.tech_list
        assert not any(label.startswith("Military Academy") for label in best.tech_list)
        assert best.tactics == 1

    def test_construction_list(self):
        ledger = TechLedger().absorb(["Defense 1", "Terraforming 1", "Tactics 2"])
        best = ledger.best_for_category(UnitCategory.construction)
        assert best.tech_list == ("Shipyard 1", "Ship Size 1", "Terraforming 1", "Defense 1")
        assert best.tactics == 0

    def test_ground_unit_list(self):
        ledger = TechLedger().absorb(["Ground Combat 2", "Security Forces 1", "Attack 3"])
        best = ledger.best_for_category(UnitCategory.ground_unit)
        assert best.tech_list == ("Ground Combat 2", "Security Forces 1")
        assert best.attack == 0


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


class TestResolveSnapshot:
    def test_attack_capped_by_hull_size(self):
        ledger = TechLedger().absorb(["Attack 3", "Defense 2"])
        _, snapshot = resolve_snapshot(get_unit("SC"), ledger)
        assert snapshot.attack == "1"
        assert snapshot.defense == "1"

    def test_explicit_cap_overrides_hull_size(self):
        ledger = TechLedger().absorb(["Attack 4", "Defense 3"])
        _, titan = resolve_snapshot(get_unit("TN"), ledger)
        assert titan.attack == "4"
        assert titan.defense == "3"

    def test_fixed_move_units_stay_at_one(self):
        ledger = TechLedger().absorb(["Movement 2", "Movement 3"])
        _, colony_ship = resolve_snapshot(get_unit("CO"), ledger)
        _, scout = resolve_snapshot(get_unit("SC"), ledger)
        assert colony_ship.move == "1"
        assert scout.move == "3"

    def test_spaceship_carries_tactics(self):
        ledger = TechLedger().absorb(["Tactics 2"])
        levels, snapshot = resolve_snapshot(get_unit("DD"), ledger)
        assert snapshot.tactics == "2"
        assert "Tactics 2" in levels

    def test_construction_snapshot(self):
        ledger = TechLedger().absorb(["Attack 2", "Tactics 1", "Movement 2"])
        levels, snapshot = resolve_snapshot(get_unit("Base"), ledger)
        assert snapshot.attack == "2"
        assert snapshot.tactics == "0"
        assert snapshot.move == "1"
        assert "Attack 2" in levels

    def test_ground_unit_snapshot_is_flat(self):
        ledger = TechLedger().absorb(["Attack 3", "Ground Combat 2"])
        levels, snapshot = resolve_snapshot(get_unit("Inf"), ledger)
        assert (snapshot.attack, snapshot.defense, snapshot.tactics, snapshot.move) == ("0", "0", "0", "1")
        assert levels == ["Ground Combat 2"]

    def test_resolved_lists_are_independent(self):
        ledger = TechLedger().absorb(["Attack 1"])
        first, _ = resolve_snapshot(get_unit("SC"), ledger)
        first.append("junk")
        second, _ = resolve_snapshot(get_unit("SC"), ledger)
        assert "junk" not in second


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


class TestAccumulateTechs:
    def test_prefix_union(self):
        turns = [_turn(1), _turn(2, "Attack 1"), _turn(3, "Defense 1")]
        ledgers = accumulate_techs(turns)
        assert len(ledgers) == 3
        assert ledgers[0].best_level(TechName.attack) == 0
        assert ledgers[1].best_level(TechName.attack) == 1
        assert ledgers[2].best_level(TechName.attack) == 1
        assert ledgers[2].best_level(TechName.defense) == 1
        assert ledgers[1].best_level(TechName.defense) == 0

    def test_empty_history(self):
        assert accumulate_techs([]) == []
