from dataclasses import replace

import pytest

from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import ConsistencyViolation, IneligibleAssignmentError, ValidationError
from wrestling_roster_manager.domain.mutation import EntityKind, MutationOp, Transaction
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import WrestlerStatus
from wrestling_roster_manager.roster.table import Role, roster_references
from wrestling_roster_manager.transactions.apply import apply_transaction
from wrestling_roster_manager.transactions.builder import (
    build_assignment_transaction,
    build_slot_clear_transaction,
    build_team_deletion,
    build_unassignment_transaction,
    build_wrestler_deletion,
)

from tests.helpers import (
    make_farm_out,
    make_home_team,
    make_snapshot,
    make_team,
    make_wrestler,
    seat_reserve,
    seat_starter,
)

H1 = make_home_team("h1", "Central")
H2 = make_home_team("h2", "East")


def _make_snapshot() -> Snapshot:
    return make_snapshot(
        home_teams=[H1, H2],
        wrestlers=[
            make_wrestler("x", "Xavier", home_team=H1, weight=150),
            make_farm_out("y", "Yuri", home_team=H2, weight=150, division=Division.ONE),
            make_wrestler("l", "Lou", home_team=H1, weight=140),
            make_wrestler("k", "Kim", home_team=H1, weight=0),
        ],
        teams=[
            make_team("t", "Central A", home_team=H1, division=Division.ONE),
            make_team("t2", "Central B", home_team=H1, division=Division.ONE),
        ],
    )


def _ok(result: Result[Transaction, object]) -> Transaction:
    assert isinstance(result, Ok), result
    return result.value


def _assign(snapshot: Snapshot, wrestler_id: str, team_id: str, role: Role, slot: str | None = None) -> Snapshot:
    return apply_transaction(snapshot, _ok(build_assignment_transaction(snapshot, wrestler_id, team_id, role, slot)))


def _assert_consistent(snapshot: Snapshot) -> None:
    refs = roster_references(snapshot.competition_teams.values())
    for wrestler_id, places in refs.items():
        assert len(places) == 1, f"{wrestler_id} listed {len(places)} times"
        wrestler = snapshot.wrestlers[wrestler_id]
        place = places[0]
        assert wrestler.competition_team_id == place.team_id
        expected = WrestlerStatus.STARTER if place.role is Role.STARTER else WrestlerStatus.RESERVE
        assert wrestler.status is expected
        assert wrestler.assigned_weight_class_slot == place.slot
    for wrestler in snapshot.wrestlers.values():
        if wrestler.is_placed:
            assert wrestler.id in refs


class TestConcreteScenario:
    def test_home_starter_unassigns_to_unassigned(self) -> None:
        snapshot = _assign(_make_snapshot(), "x", "t", Role.STARTER, "150")
        x = snapshot.wrestlers["x"]
        assert x.status is WrestlerStatus.STARTER
        assert x.assigned_weight_class_slot == "150"
        assert snapshot.competition_teams["t"].roster["150"] == "x"

        snapshot = apply_transaction(
            snapshot, _ok(build_unassignment_transaction(snapshot, "x", "t", Role.STARTER, "150"))
        )
        assert snapshot.wrestlers["x"].status is WrestlerStatus.UNASSIGNED
        assert snapshot.competition_teams["t"].roster["150"] is None

    def test_farmed_starter_unassigns_to_farm_pool(self) -> None:
        snapshot = _assign(_make_snapshot(), "y", "t", Role.STARTER, "150")
        y = snapshot.wrestlers["y"]
        assert y.status is WrestlerStatus.STARTER
        assert y.farm_out_division is None

        snapshot = apply_transaction(
            snapshot, _ok(build_unassignment_transaction(snapshot, "y", "t", Role.STARTER, "150"))
        )
        y = snapshot.wrestlers["y"]
        assert y.status is WrestlerStatus.FARM_OUT_AVAILABLE
        assert y.farm_out_division is Division.ONE


class TestRoundTrip:
    @pytest.mark.parametrize(("wrestler_id", "role", "slot"), [("x", Role.STARTER, "157"), ("y", Role.RESERVE, None)])
    def test_assign_then_unassign_restores_wrestler(self, wrestler_id: str, role: Role, slot: str | None) -> None:
        original = _make_snapshot()
        placed = _assign(original, wrestler_id, "t", role, slot)
        released = apply_transaction(
            placed, _ok(build_unassignment_transaction(placed, wrestler_id, "t", role, slot))
        )
        assert released.wrestlers[wrestler_id] == original.wrestlers[wrestler_id]
        assert released.competition_teams["t"] == original.competition_teams["t"]


class TestIdempotence:
    def test_reassigning_same_slot_is_noop(self) -> None:
        snapshot = _assign(_make_snapshot(), "x", "t", Role.STARTER, "150")
        transaction = _ok(build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150"))
        assert transaction.is_noop
        assert apply_transaction(snapshot, transaction) == snapshot

    def test_re_adding_reserve_is_noop(self) -> None:
        snapshot = _assign(_make_snapshot(), "l", "t", Role.RESERVE)
        assert _ok(build_assignment_transaction(snapshot, "l", "t", Role.RESERVE)).is_noop


class TestDisplacement:
    def test_home_occupant_returns_to_unassigned(self) -> None:
        snapshot = _assign(_make_snapshot(), "l", "t", Role.STARTER, "150")
        transaction = _ok(build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150"))
        assert {m.entity_id for m in transaction.mutations} == {"l", "x", "t"}

        snapshot = apply_transaction(snapshot, transaction)
        assert snapshot.competition_teams["t"].roster["150"] == "x"
        assert snapshot.wrestlers["l"].status is WrestlerStatus.UNASSIGNED
        assert snapshot.wrestlers["l"].competition_team_id is None
        _assert_consistent(snapshot)

    def test_farmed_occupant_returns_to_farm_pool(self) -> None:
        snapshot = _assign(_make_snapshot(), "y", "t", Role.STARTER, "150")
        snapshot = _assign(snapshot, "x", "t", Role.STARTER, "150")
        y = snapshot.wrestlers["y"]
        assert y.status is WrestlerStatus.FARM_OUT_AVAILABLE
        assert y.farm_out_division is Division.ONE
        _assert_consistent(snapshot)

    def test_reserve_promoted_leaves_reserve_list(self) -> None:
        snapshot = _assign(_make_snapshot(), "x", "t", Role.RESERVE)
        snapshot = _assign(snapshot, "x", "t", Role.STARTER, "150")
        team = snapshot.competition_teams["t"]
        assert team.reserves == ()
        assert team.roster["150"] == "x"
        assert snapshot.wrestlers["x"].status is WrestlerStatus.STARTER
        _assert_consistent(snapshot)


class TestNoDoubleOccupancy:
    def test_sequence_keeps_tables_consistent(self) -> None:
        snapshot = _make_snapshot()
        steps: list[tuple[str, str, Role, str | None]] = [
            ("x", "t", Role.STARTER, "150"),
            ("y", "t", Role.STARTER, "150"),
            ("x", "t", Role.STARTER, "157"),
            ("l", "t2", Role.RESERVE, None),
            ("l", "t2", Role.STARTER, "144"),
            ("x", "t2", Role.STARTER, "150"),
            ("y", "t2", Role.STARTER, "157"),
        ]
        for wrestler_id, team_id, role, slot in steps:
            result = build_assignment_transaction(snapshot, wrestler_id, team_id, role, slot)
            if isinstance(result, Ok):
                snapshot = apply_transaction(snapshot, result.value)
            _assert_consistent(snapshot)
        assert snapshot.competition_teams["t"].roster["157"] == "x"
        assert snapshot.competition_teams["t2"].roster["144"] == "l"


class TestRejections:
    def test_weight_not_adjacent(self) -> None:
        result = build_assignment_transaction(_make_snapshot(), "x", "t", Role.STARTER, "165")
        assert isinstance(result, Err)
        assert isinstance(result.error, IneligibleAssignmentError)
        assert result.error.wrestler_id == "x"
        assert result.error.slot == "165"
        assert "cannot wrestle at 165" in result.error.message

    def test_not_weighed_in(self) -> None:
        result = build_assignment_transaction(_make_snapshot(), "k", "t", Role.RESERVE)
        assert isinstance(result, Err)
        assert isinstance(result.error, IneligibleAssignmentError)

    def test_starter_must_be_unassigned_before_moving(self) -> None:
        snapshot = _assign(_make_snapshot(), "x", "t", Role.STARTER, "150")
        for team_id, role, slot in [("t", Role.STARTER, "157"), ("t", Role.RESERVE, None), ("t2", Role.STARTER, "150")]:
            result = build_assignment_transaction(snapshot, "x", team_id, role, slot)
            assert isinstance(result, Err)
            assert isinstance(result.error, IneligibleAssignmentError)

    def test_missing_home_team(self) -> None:
        snapshot = _make_snapshot()
        orphan = replace(snapshot.wrestlers["x"], home_team_id="")
        snapshot = replace(snapshot, wrestlers={**snapshot.wrestlers, "x": orphan})
        result = build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150")
        assert isinstance(result, Err)
        assert isinstance(result.error, ValidationError)
        assert result.error.field == "home_team_id"

    def test_unknown_ids(self) -> None:
        assert isinstance(build_assignment_transaction(_make_snapshot(), "nobody", "t", Role.RESERVE), Err)
        assert isinstance(build_assignment_transaction(_make_snapshot(), "x", "nowhere", Role.RESERVE), Err)

    def test_slot_not_in_division(self) -> None:
        result = build_assignment_transaction(_make_snapshot(), "x", "t", Role.STARTER, "151")
        assert isinstance(result, Err)
        assert isinstance(result.error, ValidationError)

    def test_half_written_placement_is_consistency_violation(self) -> None:
        snapshot = _make_snapshot()
        # wrestler record claims the slot but the roster never recorded it
        claimed, _ = seat_starter(snapshot.wrestlers["x"], snapshot.competition_teams["t"], "150")
        snapshot = replace(snapshot, wrestlers={**snapshot.wrestlers, "x": claimed})
        result = build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConsistencyViolation)
        assert "x" in result.error.entity_ids

    def test_dangling_slot_reference(self) -> None:
        snapshot = _make_snapshot()
        team = snapshot.competition_teams["t"]
        broken = replace(team, roster={**team.roster, "150": "ghost"})
        snapshot = replace(snapshot, competition_teams={**snapshot.competition_teams, "t": broken})
        result = build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConsistencyViolation)

    def test_unassign_wrestler_not_on_team(self) -> None:
        result = build_unassignment_transaction(_make_snapshot(), "x", "t", Role.STARTER, "150")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConsistencyViolation)


class TestMutations:
    def test_carry_expected_values(self) -> None:
        transaction = _ok(build_assignment_transaction(_make_snapshot(), "x", "t", Role.STARTER, "150"))
        (wrestler_update,) = transaction.for_entity(EntityKind.WRESTLER, "x")
        assert wrestler_update.op is MutationOp.UPDATE
        assert wrestler_update.changes["status"] is WrestlerStatus.STARTER
        assert wrestler_update.expected["status"] is WrestlerStatus.UNASSIGNED
        (team_update,) = transaction.for_entity(EntityKind.COMPETITION_TEAM, "t")
        assert set(team_update.changes) == {"roster"}
        assert team_update.expected["roster"]["150"] is None  # type: ignore[index]

    def test_builder_does_not_touch_snapshot(self) -> None:
        snapshot = _make_snapshot()
        build_assignment_transaction(snapshot, "x", "t", Role.STARTER, "150")
        assert snapshot == _make_snapshot()


class TestSlotClear:
    def test_empty_slot_is_noop(self) -> None:
        assert _ok(build_slot_clear_transaction(_make_snapshot(), "t", "150")).is_noop

    def test_clears_occupant(self) -> None:
        snapshot = _assign(_make_snapshot(), "y", "t", Role.STARTER, "150")
        snapshot = apply_transaction(snapshot, _ok(build_slot_clear_transaction(snapshot, "t", "150")))
        assert snapshot.competition_teams["t"].roster["150"] is None
        assert snapshot.wrestlers["y"].status is WrestlerStatus.FARM_OUT_AVAILABLE


class TestDeletion:
    def test_deleting_starter_clears_roster(self) -> None:
        snapshot = _assign(_make_snapshot(), "x", "t", Role.STARTER, "150")
        transaction = _ok(build_wrestler_deletion(snapshot, "x"))
        assert transaction.mutations[-1].op is MutationOp.DELETE
        snapshot = apply_transaction(snapshot, transaction)
        assert "x" not in snapshot.wrestlers
        assert snapshot.competition_teams["t"].roster["150"] is None
        _assert_consistent(snapshot)

    def test_deleting_unplaced_wrestler(self) -> None:
        transaction = _ok(build_wrestler_deletion(_make_snapshot(), "l"))
        assert len(transaction) == 1

    def test_deleting_team_releases_everyone(self) -> None:
        snapshot = _make_snapshot()
        team = snapshot.competition_teams["t"]
        x, team = seat_starter(snapshot.wrestlers["x"], team, "150")
        y, team = seat_reserve(snapshot.wrestlers["y"], team)
        snapshot = replace(
            snapshot,
            wrestlers={**snapshot.wrestlers, "x": x, "y": y},
            competition_teams={**snapshot.competition_teams, "t": team},
        )
        snapshot = apply_transaction(snapshot, _ok(build_team_deletion(snapshot, "t")))
        assert "t" not in snapshot.competition_teams
        assert snapshot.wrestlers["x"].status is WrestlerStatus.UNASSIGNED
        assert snapshot.wrestlers["y"].status is WrestlerStatus.FARM_OUT_AVAILABLE
        assert snapshot.wrestlers["y"].farm_out_division is Division.ONE
        _assert_consistent(snapshot)

    def test_unknown_entities(self) -> None:
        assert isinstance(build_wrestler_deletion(_make_snapshot(), "nobody"), Err)
        assert isinstance(build_team_deletion(_make_snapshot(), "nowhere"), Err)
