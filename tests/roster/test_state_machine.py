import math
from dataclasses import replace

import pytest

from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.result import Err, Ok
from wrestling_roster_manager.domain.wrestler import WrestlerStatus
from wrestling_roster_manager.roster import state_machine

from tests.helpers import make_farm_out, make_home_team, make_team, make_wrestler, seat_reserve, seat_starter

HOME = make_home_team("h1", "Central")
OTHER = make_home_team("h2", "East")


class TestTransitions:
    @pytest.mark.parametrize(
        ("source", "target", "allowed"),
        [
            (WrestlerStatus.UNASSIGNED, WrestlerStatus.FARM_OUT_AVAILABLE, True),
            (WrestlerStatus.UNASSIGNED, WrestlerStatus.STARTER, True),
            (WrestlerStatus.RESERVE, WrestlerStatus.STARTER, True),
            (WrestlerStatus.STARTER, WrestlerStatus.RESERVE, False),
            (WrestlerStatus.STARTER, WrestlerStatus.STARTER, False),
            (WrestlerStatus.FARM_OUT_AVAILABLE, WrestlerStatus.UNASSIGNED, True),
        ],
    )
    def test_can_transition(self, source: WrestlerStatus, target: WrestlerStatus, allowed: bool) -> None:
        assert state_machine.can_transition(source, target) is allowed


class TestFarmOut:
    def test_requires_division(self) -> None:
        result = state_machine.to_farm_out(make_wrestler(), None)
        assert isinstance(result, Err)
        assert result.error.field == "farm_out_division"

    def test_rejects_unknown_division(self) -> None:
        assert isinstance(state_machine.to_farm_out(make_wrestler(), "III"), Err)

    def test_clears_division_flags(self) -> None:
        wrestler = make_wrestler(is_female=True)
        result = state_machine.to_farm_out(wrestler, "II")
        assert isinstance(result, Ok)
        assert result.value.status is WrestlerStatus.FARM_OUT_AVAILABLE
        assert result.value.farm_out_division is Division.TWO
        assert not result.value.is_female
        assert not result.value.is_middle_school

    def test_division_change(self) -> None:
        wrestler = make_farm_out("w1", "Sam", home_team=HOME, weight=120, division=Division.ONE)
        result = state_machine.to_farm_out(wrestler, Division.TWO)
        assert isinstance(result, Ok)
        assert result.value.farm_out_division is Division.TWO

    def test_placed_wrestler_rejected(self) -> None:
        starter, _ = seat_starter(make_wrestler(weight=120), make_team(home_team=HOME), "120")
        assert isinstance(state_machine.to_farm_out(starter, Division.ONE), Err)

    def test_recall(self) -> None:
        wrestler = make_farm_out("w1", "Sam", home_team=HOME, weight=120)
        result = state_machine.recall(wrestler)
        assert isinstance(result, Ok)
        assert result.value.status is WrestlerStatus.UNASSIGNED
        assert result.value.farm_out_division is None

    def test_recall_requires_farm_out(self) -> None:
        assert isinstance(state_machine.recall(make_wrestler()), Err)


class TestPlacement:
    def test_starter_sets_team_and_slot(self) -> None:
        team = make_team(home_team=HOME)
        result = state_machine.to_starter(make_farm_out("w1", "Sam", home_team=OTHER, weight=120), team, "120")
        assert isinstance(result, Ok)
        placed = result.value
        assert placed.status is WrestlerStatus.STARTER
        assert placed.competition_team_id == team.id
        assert placed.competition_team_name == team.name
        assert placed.assigned_weight_class_slot == "120"
        assert placed.farm_out_division is None
        assert state_machine.invariant_violations(placed) == []

    def test_starter_requires_slot(self) -> None:
        assert isinstance(state_machine.to_starter(make_wrestler(), make_team(), ""), Err)

    def test_reserve_has_no_slot(self) -> None:
        result = state_machine.to_reserve(make_wrestler(weight=130), make_team())
        assert isinstance(result, Ok)
        assert result.value.status is WrestlerStatus.RESERVE
        assert result.value.assigned_weight_class_slot is None

    def test_starter_cannot_become_reserve_directly(self) -> None:
        starter, team = seat_starter(make_wrestler(weight=120), make_team(), "120")
        assert isinstance(state_machine.to_reserve(starter, team), Err)


class TestRelease:
    def test_home_wrestler_returns_to_unassigned(self) -> None:
        starter, team = seat_starter(make_wrestler(home_team=HOME, weight=150), make_team(home_team=HOME), "150")
        result = state_machine.release(starter, team)
        assert isinstance(result, Ok)
        assert result.value.status is WrestlerStatus.UNASSIGNED
        assert result.value.competition_team_id is None
        assert result.value.assigned_weight_class_slot is None

    def test_farmed_wrestler_returns_to_farm_pool(self) -> None:
        team = make_team(home_team=HOME, division=Division.TWO)
        reserve, team = seat_reserve(make_wrestler("w2", home_team=OTHER, weight=150), team)
        result = state_machine.release(reserve, team)
        assert isinstance(result, Ok)
        assert result.value.status is WrestlerStatus.FARM_OUT_AVAILABLE
        assert result.value.farm_out_division is Division.TWO
        assert state_machine.invariant_violations(result.value) == []

    def test_unplaced_wrestler_rejected(self) -> None:
        assert isinstance(state_machine.release(make_wrestler(), make_team()), Err)


class TestWeight:
    def test_recomputes_class_and_keeps_status(self) -> None:
        wrestler = make_farm_out("w1", "Sam", home_team=HOME, weight=120)
        result = state_machine.with_weight(wrestler, 133.4)
        assert isinstance(result, Ok)
        assert result.value.calculated_weight_class == "138"
        assert result.value.status is WrestlerStatus.FARM_OUT_AVAILABLE

    def test_negative_rejected(self) -> None:
        assert isinstance(state_machine.with_weight(make_wrestler(), -1), Err)

    def test_zero_is_not_weighed_in(self) -> None:
        result = state_machine.with_weight(make_wrestler(weight=120), 0)
        assert isinstance(result, Ok)
        assert result.value.calculated_weight_class == "N/A"

    @pytest.mark.parametrize("weight", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, weight: float) -> None:
        result = state_machine.with_weight(make_wrestler(weight=120), weight)
        assert isinstance(result, Err)
        assert result.error.field == "actual_weight"


class TestDivisionFlags:
    def test_setting_one_clears_the_other(self) -> None:
        result = state_machine.with_division_flags(make_wrestler(is_female=True), is_middle_school=True)
        assert isinstance(result, Ok)
        assert result.value.is_middle_school
        assert not result.value.is_female

    def test_both_rejected(self) -> None:
        result = state_machine.with_division_flags(make_wrestler(), is_female=True, is_middle_school=True)
        assert isinstance(result, Err)

    def test_clearing_flag(self) -> None:
        result = state_machine.with_division_flags(make_wrestler(is_female=True), is_female=False)
        assert isinstance(result, Ok)
        assert not result.value.is_female

    def test_placed_wrestler_rejected(self) -> None:
        reserve, _ = seat_reserve(make_wrestler(weight=120), make_team())
        assert isinstance(state_machine.with_division_flags(reserve, is_female=True), Err)

    def test_farm_out_cannot_take_flag(self) -> None:
        wrestler = make_farm_out("w1", "Sam", home_team=HOME, weight=120)
        assert isinstance(state_machine.with_division_flags(wrestler, is_female=True), Err)

    def test_flags_never_both_after_any_sequence(self) -> None:
        wrestler = make_wrestler(weight=110)
        for female, middle in [(True, None), (None, True), (True, None), (False, None), (None, False)]:
            result = state_machine.with_division_flags(wrestler, is_female=female, is_middle_school=middle)
            assert isinstance(result, Ok)
            wrestler = result.value
            assert not (wrestler.is_female and wrestler.is_middle_school)


class TestInvariantViolations:
    def test_consistent_record(self) -> None:
        assert state_machine.invariant_violations(make_wrestler(weight=120)) == []

    def test_detects_stale_class(self) -> None:
        wrestler = replace(make_wrestler(weight=120), calculated_weight_class="106")
        assert state_machine.invariant_violations(wrestler) == ["calculated weight class does not match actual weight"]

    def test_detects_slot_without_starter_status(self) -> None:
        wrestler = replace(make_wrestler(weight=120), assigned_weight_class_slot="120")
        assert "assigned slot must be set exactly when Starter" in state_machine.invariant_violations(wrestler)
