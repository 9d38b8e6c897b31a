"""Assignment transaction builder.

Given a snapshot and a requested placement change, compute every entity
update needed to realise it in one commit: the wrestler's status fields, any
wrestler displaced from the target slot, and the roster tables on both sides.
The builder never writes; it returns a ``Transaction`` or the reason the
change was rejected.
"""

from __future__ import annotations

from collections.abc import Iterable

from wrestling_roster_manager.catalog.weight_classes import classes_for
from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.errors import (
    ConsistencyViolation,
    IneligibleAssignmentError,
    RosterError,
    ValidationError,
)
from wrestling_roster_manager.domain.mutation import Mutation, Transaction
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus
from wrestling_roster_manager.eligibility.resolver import (
    ineligibility_reason,
    resolve_eligibility,
    validate_target,
)
from wrestling_roster_manager.roster import state_machine, table
from wrestling_roster_manager.roster.table import Role, roster_references
from wrestling_roster_manager.transactions.diff import delete_mutation, update_mutation


def _lookup(
    snapshot: Snapshot,
    wrestler_id: str,
    team_id: str,
) -> Result[tuple[Wrestler, CompetitionTeam], RosterError]:
    wrestler = snapshot.wrestler(wrestler_id)
    if wrestler is None:
        return Err(ValidationError(message=f"Unknown wrestler {wrestler_id!r}", field="wrestler_id"))
    team = snapshot.team(team_id)
    if team is None:
        return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
    return Ok((wrestler, team))


def _wrestler_problems(snapshot: Snapshot, wrestler: Wrestler) -> list[str]:
    problems = [f"{wrestler.name}: {p}" for p in state_machine.invariant_violations(wrestler)]
    refs = roster_references(snapshot.competition_teams.values()).get(wrestler.id, [])
    if len(refs) > 1:
        problems.append(f"{wrestler.name} appears in {len(refs)} roster entries")
    if wrestler.is_placed:
        role = Role.STARTER if wrestler.status is WrestlerStatus.STARTER else Role.RESERVE
        claimed = table.RosterReference(wrestler.competition_team_id or "", role, wrestler.assigned_weight_class_slot)
        if claimed not in refs:
            problems.append(f"{wrestler.name} claims a {role} place that the team roster does not hold")
    elif refs:
        problems.append(f"{wrestler.name} is {wrestler.status} but still listed on a roster")
    return problems


def _check_consistency(snapshot: Snapshot, wrestlers: Iterable[Wrestler]) -> ConsistencyViolation | None:
    checked = list(wrestlers)
    problems: list[str] = []
    for wrestler in checked:
        problems.extend(_wrestler_problems(snapshot, wrestler))
    if not problems:
        return None
    return ConsistencyViolation(message="; ".join(problems), entity_ids=tuple(w.id for w in checked))


def _collect(
    snapshot: Snapshot,
    wrestlers_after: Iterable[Wrestler],
    teams_after: Iterable[CompetitionTeam],
) -> tuple[Mutation, ...]:
    mutations: list[Mutation] = []
    for wrestler in wrestlers_after:
        before = snapshot.wrestlers[wrestler.id]
        mutation = update_mutation(before, wrestler)
        if mutation is not None:
            mutations.append(mutation)
    for team in teams_after:
        before_team = snapshot.competition_teams[team.id]
        mutation = update_mutation(before_team, team)
        if mutation is not None:
            mutations.append(mutation)
    return tuple(mutations)


def _already_there(wrestler: Wrestler, team: CompetitionTeam, role: Role, slot: str | None) -> bool:
    if wrestler.competition_team_id != team.id:
        return False
    if role is Role.STARTER:
        return (
            wrestler.status is WrestlerStatus.STARTER
            and wrestler.assigned_weight_class_slot == slot
            and team.roster.get(slot or "") == wrestler.id
        )
    return wrestler.status is WrestlerStatus.RESERVE and wrestler.id in team.reserves


def build_assignment_transaction(
    snapshot: Snapshot,
    wrestler_id: str,
    team_id: str,
    role: Role,
    slot: str | None = None,
) -> Result[Transaction, RosterError]:
    looked_up = _lookup(snapshot, wrestler_id, team_id)
    if isinstance(looked_up, Err):
        return looked_up
    wrestler, team = looked_up.value

    if not wrestler.home_team_id:
        return Err(ValidationError(message=f"{wrestler.name} has no home team", field="home_team_id"))
    classes = classes_for(team.division, snapshot.session)
    problem = validate_target(team, role, slot, classes)
    if problem is not None:
        return Err(problem)

    if _already_there(wrestler, team, role, slot):
        return Ok(Transaction(description=f"{wrestler.name} already placed"))

    displaced: Wrestler | None = None
    if role is Role.STARTER and slot is not None:
        occupant_id = team.roster.get(slot)
        if occupant_id and occupant_id != wrestler.id:
            displaced = snapshot.wrestler(occupant_id)
            if displaced is None:
                return Err(
                    ConsistencyViolation(
                        message=f"Slot {slot} on {team.name} references missing wrestler {occupant_id!r}",
                        entity_ids=(team.id, occupant_id),
                    )
                )
    violation = _check_consistency(snapshot, [w for w in (wrestler, displaced) if w is not None])
    if violation is not None:
        return Err(violation)

    resolved = resolve_eligibility(snapshot, team, role, slot)
    if isinstance(resolved, Err):
        return resolved
    if wrestler.id not in resolved.value:
        return Err(
            IneligibleAssignmentError(
                message=ineligibility_reason(snapshot, wrestler, team, role, slot),
                wrestler_id=wrestler.id,
                team_id=team.id,
                slot=slot,
            )
        )

    teams_after: dict[str, CompetitionTeam] = {}
    wrestlers_after: dict[str, Wrestler] = {}

    if displaced is not None:
        vacated = state_machine.release(displaced, team)
        if isinstance(vacated, Err):
            return vacated
        wrestlers_after[displaced.id] = vacated.value

    if wrestler.competition_team_id and wrestler.competition_team_id != team.id:
        previous = snapshot.team(wrestler.competition_team_id)
        if previous is not None:
            teams_after[previous.id] = table.without_wrestler(previous, wrestler.id)

    destination = table.without_wrestler(team, wrestler.id)
    if role is Role.STARTER and slot is not None:
        destination = table.with_starter(destination, slot, wrestler.id)
        placed = state_machine.to_starter(wrestler, team, slot)
    else:
        destination = table.with_reserve(destination, wrestler.id)
        placed = state_machine.to_reserve(wrestler, team)
    if isinstance(placed, Err):
        return placed
    wrestlers_after[wrestler.id] = placed.value
    teams_after[team.id] = destination

    where = f"{team.name} @ {slot}" if role is Role.STARTER else f"{team.name} reserves"
    return Ok(
        Transaction(
            mutations=_collect(snapshot, wrestlers_after.values(), teams_after.values()),
            description=f"assign {wrestler.name} to {where}",
        )
    )


def build_unassignment_transaction(
    snapshot: Snapshot,
    wrestler_id: str,
    team_id: str,
    role: Role,
    slot: str | None = None,
) -> Result[Transaction, RosterError]:
    looked_up = _lookup(snapshot, wrestler_id, team_id)
    if isinstance(looked_up, Err):
        return looked_up
    wrestler, team = looked_up.value

    expected_slot = slot if slot is not None else wrestler.assigned_weight_class_slot
    if not _already_there(wrestler, team, role, expected_slot):
        return Err(
            ConsistencyViolation(
                message=f"{wrestler.name} is not a {role} on {team.name}",
                entity_ids=(wrestler.id, team.id),
            )
        )

    released = state_machine.release(wrestler, team)
    if isinstance(released, Err):
        return released
    return Ok(
        Transaction(
            mutations=_collect(snapshot, [released.value], [table.without_wrestler(team, wrestler.id)]),
            description=f"unassign {wrestler.name} from {team.name}",
        )
    )


def build_slot_clear_transaction(snapshot: Snapshot, team_id: str, slot: str) -> Result[Transaction, RosterError]:
    """Unassign whoever holds ``slot``; an empty slot yields a no-op."""
    team = snapshot.team(team_id)
    if team is None:
        return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
    occupant_id = team.roster.get(slot)
    if not occupant_id:
        return Ok(Transaction(description=f"{slot} on {team.name} is already open"))
    return build_unassignment_transaction(snapshot, occupant_id, team.id, Role.STARTER, slot)


def build_wrestler_deletion(snapshot: Snapshot, wrestler_id: str) -> Result[Transaction, RosterError]:
    wrestler = snapshot.wrestler(wrestler_id)
    if wrestler is None:
        return Err(ValidationError(message=f"Unknown wrestler {wrestler_id!r}", field="wrestler_id"))
    teams_after = [
        table.without_wrestler(team, wrestler.id)
        for team in snapshot.competition_teams.values()
        if table.holds(team, wrestler.id)
    ]
    mutations = [
        *_collect(snapshot, [], teams_after),
        delete_mutation(wrestler, "status", "competition_team_id"),
    ]
    return Ok(Transaction(mutations=tuple(mutations), description=f"delete wrestler {wrestler.name}"))


def build_team_deletion(snapshot: Snapshot, team_id: str) -> Result[Transaction, RosterError]:
    """Delete a competition team and release every wrestler placed on it."""
    team = snapshot.team(team_id)
    if team is None:
        return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
    released: list[Wrestler] = []
    for wrestler in snapshot.wrestlers.values():
        if wrestler.competition_team_id != team.id or not wrestler.is_placed:
            continue
        outcome = state_machine.release(wrestler, team)
        if isinstance(outcome, Err):
            return outcome
        released.append(outcome.value)
    mutations = [
        *_collect(snapshot, released, []),
        delete_mutation(team, "roster", "reserves"),
    ]
    return Ok(Transaction(mutations=tuple(mutations), description=f"delete competition team {team.name}"))
