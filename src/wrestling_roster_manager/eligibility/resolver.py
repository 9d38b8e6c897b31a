"""Who may fill a starter slot or a reserve spot on a competition team.

Candidates come from two pools. The home pool is the team's associated home
team; the farm pool is every FarmOutAvailable wrestler lent to the team's
division. Starter slots also require weight adjacency: a wrestler may fill
their own class or the class directly above it, never below and never two up.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from wrestling_roster_manager.catalog.weight_classes import class_index, classes_for, slot_index
from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.errors import ValidationError
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.weight_class import WeightClass
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus
from wrestling_roster_manager.roster.table import RosterReference, Role, roster_references


@dataclass(frozen=True)
class EligibleCandidates:
    home_pool: tuple[Wrestler, ...]
    farm_pool: tuple[Wrestler, ...]

    def __contains__(self, wrestler_id: object) -> bool:
        return any(w.id == wrestler_id for w in (*self.home_pool, *self.farm_pool))

    @property
    def is_empty(self) -> bool:
        return not self.home_pool and not self.farm_pool


def weight_adjacent(weight: float, slot: str, classes: Sequence[WeightClass]) -> bool:
    own = class_index(weight, classes)
    target = slot_index(slot, classes)
    if own == -1 or target == -1:
        return False
    return target - own in (0, 1)


def validate_target(
    team: CompetitionTeam,
    role: Role,
    slot: str | None,
    classes: Sequence[WeightClass],
) -> ValidationError | None:
    if role is Role.STARTER:
        if not slot:
            return ValidationError(message="A starter placement needs a weight-class slot", field="slot")
        if slot_index(slot, classes) == -1:
            return ValidationError(
                message=f"{slot} is not a weight class in division {team.division}",
                field="slot",
            )
    return None


def _occupies_target(wrestler: Wrestler, team: CompetitionTeam, role: Role, slot: str | None) -> bool:
    return (
        role is Role.STARTER
        and slot is not None
        and team.roster.get(slot) == wrestler.id
        and wrestler.status is WrestlerStatus.STARTER
        and wrestler.competition_team_id == team.id
        and wrestler.assigned_weight_class_slot == slot
    )


def _placed_elsewhere(refs: Sequence[RosterReference], team: CompetitionTeam, role: Role) -> bool:
    for ref in refs:
        if ref.team_id != team.id or ref.role is Role.STARTER:
            return True
        if role is Role.RESERVE:
            return True
    return False


def _in_home_pool(wrestler: Wrestler, team: CompetitionTeam, role: Role, occupying: bool) -> bool:
    if wrestler.home_team_id != team.associated_home_team_id:
        return False
    if occupying or wrestler.status is WrestlerStatus.UNASSIGNED:
        return True
    return (
        role is Role.STARTER
        and wrestler.status is WrestlerStatus.RESERVE
        and wrestler.competition_team_id == team.id
    )


def _in_farm_pool(wrestler: Wrestler, team: CompetitionTeam, occupying: bool) -> bool:
    if occupying:
        return True
    return wrestler.status is WrestlerStatus.FARM_OUT_AVAILABLE and wrestler.farm_out_division == team.division


def _by_weight(wrestlers: list[Wrestler]) -> tuple[Wrestler, ...]:
    return tuple(sorted(wrestlers, key=lambda w: (w.actual_weight, w.name, w.id)))


def resolve_eligibility(
    snapshot: Snapshot,
    team: CompetitionTeam,
    role: Role,
    slot: str | None = None,
) -> Result[EligibleCandidates, ValidationError]:
    classes = classes_for(team.division, snapshot.session)
    problem = validate_target(team, role, slot, classes)
    if problem is not None:
        return Err(problem)

    refs = roster_references(snapshot.competition_teams.values())
    home: list[Wrestler] = []
    farm: list[Wrestler] = []
    for wrestler in snapshot.wrestlers.values():
        if not wrestler.is_weighed_in or not wrestler.in_open_division:
            continue
        occupying = _occupies_target(wrestler, team, role, slot)
        if not occupying and _placed_elsewhere(refs.get(wrestler.id, ()), team, role):
            continue
        if role is Role.STARTER and slot is not None and not weight_adjacent(wrestler.actual_weight, slot, classes):
            continue
        if _in_home_pool(wrestler, team, role, occupying):
            home.append(wrestler)
        elif _in_farm_pool(wrestler, team, occupying):
            farm.append(wrestler)
    return Ok(EligibleCandidates(home_pool=_by_weight(home), farm_pool=_by_weight(farm)))


def ineligibility_reason(
    snapshot: Snapshot,
    wrestler: Wrestler,
    team: CompetitionTeam,
    role: Role,
    slot: str | None = None,
) -> str:
    """Human-readable reason a wrestler is missing from the resolver's pools."""
    classes = classes_for(team.division, snapshot.session)
    if not wrestler.is_weighed_in:
        return f"{wrestler.name} has not weighed in"
    if wrestler.is_female:
        return f"{wrestler.name} is entered in the female division"
    if wrestler.is_middle_school:
        return f"{wrestler.name} is entered in the middle-school division"
    if role is Role.STARTER and slot is not None and not weight_adjacent(wrestler.actual_weight, slot, classes):
        return f"{wrestler.name} at {wrestler.actual_weight:g} lbs cannot wrestle at {slot}"
    if wrestler.home_team_id != team.associated_home_team_id:
        if wrestler.status is not WrestlerStatus.FARM_OUT_AVAILABLE:
            return f"{wrestler.name} is not available as a farm-out"
        if wrestler.farm_out_division != team.division:
            return f"{wrestler.name} is farmed out to division {wrestler.farm_out_division}, not {team.division}"
    if wrestler.is_placed:
        where = wrestler.competition_team_name or wrestler.competition_team_id
        return f"{wrestler.name} is already a {wrestler.status} on {where}"
    return f"{wrestler.name} is not eligible for this placement"


def slot_availability(snapshot: Snapshot, team: CompetitionTeam) -> dict[str, bool]:
    """Whether each slot of the team's division has at least one candidate."""
    availability: dict[str, bool] = {}
    for wc in classes_for(team.division, snapshot.session):
        match resolve_eligibility(snapshot, team, Role.STARTER, wc.name):
            case Ok(candidates):
                availability[wc.name] = not candidates.is_empty
            case Err(_):
                availability[wc.name] = False
    return availability
