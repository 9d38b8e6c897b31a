"""Wrestler, team and session changes outside of roster placement.

Weigh-ins, division flags, farm-out declarations, organizer progress flags,
custom weight classes, entity creation and session duplication.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from enum import StrEnum

from wrestling_roster_manager.catalog.weight_classes import (
    NOT_WEIGHED_IN,
    STANDARD_WEIGHT_CLASSES,
    classes_for,
    parse_custom_classes,
)
from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import ConsistencyViolation, RosterError, ValidationError
from wrestling_roster_manager.domain.mutation import Mutation, Transaction
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus
from wrestling_roster_manager.roster import state_machine
from wrestling_roster_manager.roster.table import new_roster
from wrestling_roster_manager.transactions.diff import entity_fields, insert_mutation, update_mutation


class DivisionFlag(StrEnum):
    FEMALE = "female"
    MIDDLE_SCHOOL = "middle_school"


def _wrestler(snapshot: Snapshot, wrestler_id: str) -> Result[Wrestler, RosterError]:
    wrestler = snapshot.wrestler(wrestler_id)
    if wrestler is None:
        return Err(ValidationError(message=f"Unknown wrestler {wrestler_id!r}", field="wrestler_id"))
    return Ok(wrestler)


def _single_update(
    before: Wrestler,
    after: Result[Wrestler, RosterError],
    description: str,
) -> Result[Transaction, RosterError]:
    if isinstance(after, Err):
        return after
    mutation = update_mutation(before, after.value)
    mutations = (mutation,) if mutation is not None else ()
    return Ok(Transaction(mutations=mutations, description=description))


def build_weigh_in(snapshot: Snapshot, wrestler_id: str, weight: float) -> Result[Transaction, RosterError]:
    """Record a body weight. Status is left alone; eligibility is re-evaluated at assignment time."""
    found = _wrestler(snapshot, wrestler_id)
    if isinstance(found, Err):
        return found
    wrestler = found.value
    return _single_update(
        wrestler,
        state_machine.with_weight(wrestler, weight),
        f"weigh in {wrestler.name} at {weight:g}",
    )


def build_division_flags(
    snapshot: Snapshot,
    wrestler_id: str,
    *,
    is_female: bool | None = None,
    is_middle_school: bool | None = None,
) -> Result[Transaction, RosterError]:
    found = _wrestler(snapshot, wrestler_id)
    if isinstance(found, Err):
        return found
    wrestler = found.value
    return _single_update(
        wrestler,
        state_machine.with_division_flags(wrestler, is_female=is_female, is_middle_school=is_middle_school),
        f"update division flags for {wrestler.name}",
    )


def build_farm_out(
    snapshot: Snapshot,
    wrestler_id: str,
    division: Division | str | None,
) -> Result[Transaction, RosterError]:
    found = _wrestler(snapshot, wrestler_id)
    if isinstance(found, Err):
        return found
    wrestler = found.value
    return _single_update(
        wrestler,
        state_machine.to_farm_out(wrestler, division),
        f"farm out {wrestler.name} to division {division}",
    )


def build_recall(snapshot: Snapshot, wrestler_id: str) -> Result[Transaction, RosterError]:
    found = _wrestler(snapshot, wrestler_id)
    if isinstance(found, Err):
        return found
    wrestler = found.value
    return _single_update(wrestler, state_machine.recall(wrestler), f"recall {wrestler.name}")


def build_bulk_farm_out(
    snapshot: Snapshot,
    wrestler_ids: Iterable[str],
    division: Division | str | None,
) -> Result[Transaction, RosterError]:
    """Farm out many wrestlers at once; one rejected wrestler rejects the batch."""
    mutations: list[Mutation] = []
    for wrestler_id in wrestler_ids:
        found = _wrestler(snapshot, wrestler_id)
        if isinstance(found, Err):
            return found
        moved = state_machine.to_farm_out(found.value, division)
        if isinstance(moved, Err):
            return moved
        mutation = update_mutation(found.value, moved.value)
        if mutation is not None:
            mutations.append(mutation)
    return Ok(Transaction(mutations=tuple(mutations), description=f"farm out {len(mutations)} to division {division}"))


def build_bulk_division_flags(
    snapshot: Snapshot,
    home_team_id: str,
    flag: DivisionFlag,
) -> Result[Transaction, RosterError]:
    """Mark every unassigned open-division wrestler of a home team female or middle school."""
    home_team = snapshot.home_team(home_team_id)
    if home_team is None:
        return Err(ValidationError(message=f"Unknown home team {home_team_id!r}", field="home_team_id"))
    mutations: list[Mutation] = []
    for wrestler in sorted(snapshot.wrestlers_of(home_team.id), key=lambda w: w.id):
        if wrestler.status is not WrestlerStatus.UNASSIGNED or not wrestler.in_open_division:
            continue
        if flag is DivisionFlag.FEMALE:
            flagged = state_machine.with_division_flags(wrestler, is_female=True)
        else:
            flagged = state_machine.with_division_flags(wrestler, is_middle_school=True)
        if isinstance(flagged, Err):
            return flagged
        mutation = update_mutation(wrestler, flagged.value)
        if mutation is not None:
            mutations.append(mutation)
    return Ok(Transaction(mutations=tuple(mutations), description=f"mark {home_team.name} wrestlers {flag}"))


def build_home_team_progress(
    snapshot: Snapshot,
    home_team_id: str,
    *,
    weigh_in_complete: bool | None = None,
    roster_complete: bool | None = None,
) -> Result[Transaction, RosterError]:
    home_team = snapshot.home_team(home_team_id)
    if home_team is None:
        return Err(ValidationError(message=f"Unknown home team {home_team_id!r}", field="home_team_id"))
    updated = replace(
        home_team,
        weigh_in_complete=home_team.weigh_in_complete if weigh_in_complete is None else weigh_in_complete,
        roster_complete=home_team.roster_complete if roster_complete is None else roster_complete,
    )
    mutation = update_mutation(home_team, updated)
    return Ok(
        Transaction(
            mutations=(mutation,) if mutation is not None else (),
            description=f"update progress for {home_team.name}",
        )
    )


def build_custom_weights(
    snapshot: Snapshot,
    division: Division,
    raw_maxes: Iterable[float | str],
) -> Result[Transaction, RosterError]:
    """Replace a division's custom weight classes.

    A custom class may not be removed while a starter still holds it on any
    team of that division.
    """
    parsed = parse_custom_classes(raw_maxes, STANDARD_WEIGHT_CLASSES)
    if isinstance(parsed, Err):
        return parsed
    kept = {wc.name for wc in parsed.value}
    removed = {wc.name for wc in snapshot.session.custom_weights(division)} - kept
    for team in snapshot.competition_teams.values():
        if team.division != division:
            continue
        held = sorted(slot for slot in removed if team.roster.get(slot))
        if held:
            return Err(
                ConsistencyViolation(
                    message=f"{team.name} still has starters at {', '.join(held)}",
                    entity_ids=(team.id,),
                )
            )
    field_name = "custom_weights_div_i" if division is Division.ONE else "custom_weights_div_ii"
    updated = replace(snapshot.session, **{field_name: parsed.value})
    mutation = update_mutation(snapshot.session, updated)
    return Ok(
        Transaction(
            mutations=(mutation,) if mutation is not None else (),
            description=f"set division {division} custom weights",
        )
    )


def new_home_team_fields(name: str, state: str = "") -> Result[dict[str, object], ValidationError]:
    if not name.strip():
        return Err(ValidationError(message="Home team name is required", field="name"))
    return Ok({"name": name.strip(), "state": state.strip(), "weigh_in_complete": False, "roster_complete": False})


def new_wrestler_fields(
    snapshot: Snapshot,
    name: str,
    home_team_id: str,
) -> Result[dict[str, object], ValidationError]:
    """Field values for a newly registered wrestler: Unassigned, not yet weighed in."""
    if not name.strip():
        return Err(ValidationError(message="Wrestler name is required", field="name"))
    if not home_team_id:
        return Err(ValidationError(message="A home team is required", field="home_team_id"))
    home_team = snapshot.home_team(home_team_id)
    if home_team is None:
        return Err(ValidationError(message=f"Unknown home team {home_team_id!r}", field="home_team_id"))
    template = Wrestler(
        id="",
        name=name.strip(),
        home_team_id=home_team.id,
        home_team_name=home_team.name,
        actual_weight=0.0,
        calculated_weight_class=NOT_WEIGHED_IN,
    )
    return Ok(entity_fields(template))


def new_competition_team_fields(
    snapshot: Snapshot,
    name: str,
    home_team_id: str,
    division: Division | str,
    pool: str = "",
) -> Result[dict[str, object], ValidationError]:
    """Field values for a new competition team, with an open slot for every class of its division."""
    if not name.strip():
        return Err(ValidationError(message="Team name is required", field="name"))
    home_team = snapshot.home_team(home_team_id)
    if home_team is None:
        return Err(ValidationError(message="An associated home team is required", field="associated_home_team_id"))
    try:
        chosen = Division(division)
    except ValueError:
        return Err(ValidationError(message=f"Unknown division {division!r}", field="division"))
    template = CompetitionTeam(
        id="",
        name=name.strip(),
        associated_home_team_id=home_team.id,
        associated_home_team_name=home_team.name,
        division=chosen,
        pool=pool.strip().upper(),
        roster=new_roster(classes_for(chosen, snapshot.session)),
        reserves=(),
    )
    return Ok(entity_fields(template))


def build_session_copy(snapshot: Snapshot, new_session_id: str) -> Transaction:
    """Insert a copy of every home team, wrestler and competition team into another session.

    Entity ids are kept; they are scoped by session.
    """
    mutations: list[Mutation] = []
    for home_team in snapshot.home_teams.values():
        mutations.append(insert_mutation(home_team, new_session_id))
    for wrestler in snapshot.wrestlers.values():
        mutations.append(insert_mutation(wrestler, new_session_id))
    for team in snapshot.competition_teams.values():
        mutations.append(insert_mutation(team, new_session_id))
    return Transaction(mutations=tuple(mutations), description=f"copy session {snapshot.session.name}")
