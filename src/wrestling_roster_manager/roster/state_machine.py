"""Wrestler placement status state machine.

Every function here is pure: it takes a wrestler record and returns the record
after the transition, or an error when the transition is not allowed.
"""

from __future__ import annotations

import math
from dataclasses import replace

from wrestling_roster_manager.catalog.weight_classes import classify_standard
from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import RosterError, ValidationError
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus

_U = WrestlerStatus.UNASSIGNED
_F = WrestlerStatus.FARM_OUT_AVAILABLE
_S = WrestlerStatus.STARTER
_R = WrestlerStatus.RESERVE

# FarmOutAvailable -> FarmOutAvailable is a change of farm-out division.
ALLOWED_TRANSITIONS: dict[WrestlerStatus, frozenset[WrestlerStatus]] = {
    _U: frozenset({_F, _S, _R}),
    _F: frozenset({_F, _S, _R, _U}),
    _S: frozenset({_U, _F}),
    _R: frozenset({_S, _U, _F}),
}


def can_transition(source: WrestlerStatus, target: WrestlerStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[source]


def is_farmed(wrestler: Wrestler, team: CompetitionTeam) -> bool:
    return wrestler.home_team_id != team.associated_home_team_id


def _rejected(wrestler: Wrestler, target: WrestlerStatus) -> Err[RosterError]:
    return Err(
        ValidationError(
            message=f"{wrestler.name} cannot move from {wrestler.status} to {target}",
            field="status",
        )
    )


def to_farm_out(wrestler: Wrestler, division: Division | str | None) -> Result[Wrestler, RosterError]:
    if not division:
        return Err(ValidationError(message="A farm-out division is required", field="farm_out_division"))
    try:
        chosen = Division(division)
    except ValueError:
        return Err(ValidationError(message=f"Unknown division {division!r}", field="farm_out_division"))
    # Placed wrestlers reach the farm-out pool only through release().
    if wrestler.status not in (_U, _F):
        return _rejected(wrestler, _F)
    return Ok(
        replace(
            wrestler,
            status=_F,
            farm_out_division=chosen,
            is_female=False,
            is_middle_school=False,
        )
    )


def recall(wrestler: Wrestler) -> Result[Wrestler, RosterError]:
    if wrestler.status is not _F:
        return _rejected(wrestler, _U)
    return Ok(replace(wrestler, status=_U, farm_out_division=None))


def to_starter(wrestler: Wrestler, team: CompetitionTeam, slot: str) -> Result[Wrestler, RosterError]:
    if not slot:
        return Err(ValidationError(message="A starter placement needs a weight-class slot", field="slot"))
    if not can_transition(wrestler.status, _S):
        return _rejected(wrestler, _S)
    return Ok(
        replace(
            wrestler,
            status=_S,
            competition_team_id=team.id,
            competition_team_name=team.name,
            assigned_weight_class_slot=slot,
            farm_out_division=None,
        )
    )


def to_reserve(wrestler: Wrestler, team: CompetitionTeam) -> Result[Wrestler, RosterError]:
    if wrestler.status not in (_U, _F):
        return _rejected(wrestler, _R)
    return Ok(
        replace(
            wrestler,
            status=_R,
            competition_team_id=team.id,
            competition_team_name=team.name,
            assigned_weight_class_slot=None,
            farm_out_division=None,
        )
    )


def release(wrestler: Wrestler, team: CompetitionTeam) -> Result[Wrestler, RosterError]:
    """Take a Starter or Reserve off ``team``.

    Home wrestlers go back to Unassigned. Farmed wrestlers go back to the
    farm-out pool of the team's division, which is the division they were
    farmed into.
    """
    if not wrestler.is_placed:
        return _rejected(wrestler, _U)
    if is_farmed(wrestler, team):
        return Ok(
            replace(
                wrestler,
                status=_F,
                competition_team_id=None,
                competition_team_name=None,
                assigned_weight_class_slot=None,
                farm_out_division=team.division,
            )
        )
    return Ok(
        replace(
            wrestler,
            status=_U,
            competition_team_id=None,
            competition_team_name=None,
            assigned_weight_class_slot=None,
            farm_out_division=None,
        )
    )


def with_weight(wrestler: Wrestler, weight: float) -> Result[Wrestler, RosterError]:
    if not math.isfinite(weight):
        return Err(ValidationError(message=f"Weight must be a finite number, got {weight}", field="actual_weight"))
    if weight < 0:
        return Err(ValidationError(message="Weight cannot be negative", field="actual_weight"))
    return Ok(replace(wrestler, actual_weight=weight, calculated_weight_class=classify_standard(weight)))


def with_division_flags(
    wrestler: Wrestler,
    *,
    is_female: bool | None = None,
    is_middle_school: bool | None = None,
) -> Result[Wrestler, RosterError]:
    """Set the female or middle-school flag; turning one on turns the other off."""
    if is_female and is_middle_school:
        return Err(ValidationError(message="A wrestler cannot be both female and middle school", field="is_female"))
    if wrestler.is_placed:
        return Err(
            ValidationError(
                message=f"{wrestler.name} is on a competition roster; unassign before changing divisions",
                field="is_female" if is_female is not None else "is_middle_school",
            )
        )
    female = wrestler.is_female if is_female is None else is_female
    middle_school = wrestler.is_middle_school if is_middle_school is None else is_middle_school
    if is_female:
        middle_school = False
    if is_middle_school:
        female = False
    if wrestler.status is _F and (female or middle_school):
        return Err(
            ValidationError(
                message=f"{wrestler.name} is a farm-out and competes in the open division",
                field="is_female" if female else "is_middle_school",
            )
        )
    return Ok(replace(wrestler, is_female=female, is_middle_school=middle_school))


def invariant_violations(wrestler: Wrestler) -> list[str]:
    problems: list[str] = []
    if wrestler.is_female and wrestler.is_middle_school:
        problems.append("female and middle-school flags are both set")
    if (wrestler.farm_out_division is not None) != (wrestler.status is _F):
        problems.append("farm-out division must be set exactly when FarmOutAvailable")
    if (wrestler.assigned_weight_class_slot is not None) != (wrestler.status is _S):
        problems.append("assigned slot must be set exactly when Starter")
    placed = wrestler.is_placed
    if (wrestler.competition_team_id is not None) != placed or (wrestler.competition_team_name is not None) != placed:
        problems.append("competition team must be set exactly when Starter or Reserve")
    if wrestler.calculated_weight_class != classify_standard(wrestler.actual_weight):
        problems.append("calculated weight class does not match actual weight")
    return problems
