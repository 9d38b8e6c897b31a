"""Roster table operations on a competition team.

Teams are immutable; each helper returns a new team with the roster or
reserve list changed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.weight_class import WeightClass


class Role(StrEnum):
    STARTER = "starter"
    RESERVE = "reserve"


@dataclass(frozen=True)
class RosterReference:
    team_id: str
    role: Role
    slot: str | None = None


def new_roster(classes: Iterable[WeightClass]) -> dict[str, str | None]:
    return {wc.name: None for wc in classes}


def starter_slot_of(team: CompetitionTeam, wrestler_id: str) -> str | None:
    for slot, occupant in team.roster.items():
        if occupant == wrestler_id:
            return slot
    return None


def holds(team: CompetitionTeam, wrestler_id: str) -> bool:
    return starter_slot_of(team, wrestler_id) is not None or wrestler_id in team.reserves


def with_starter(team: CompetitionTeam, slot: str, wrestler_id: str) -> CompetitionTeam:
    roster = dict(team.roster)
    roster[slot] = wrestler_id
    return replace(team, roster=roster)


def with_reserve(team: CompetitionTeam, wrestler_id: str) -> CompetitionTeam:
    if wrestler_id in team.reserves:
        return team
    return replace(team, reserves=(*team.reserves, wrestler_id))


def without_wrestler(team: CompetitionTeam, wrestler_id: str) -> CompetitionTeam:
    """Clear every slot and reserve entry that names ``wrestler_id``."""
    if not holds(team, wrestler_id):
        return team
    roster = {slot: (None if occupant == wrestler_id else occupant) for slot, occupant in team.roster.items()}
    reserves = tuple(r for r in team.reserves if r != wrestler_id)
    return replace(team, roster=roster, reserves=reserves)


def open_slots(team: CompetitionTeam, classes: Sequence[WeightClass]) -> list[str]:
    return [wc.name for wc in classes if not team.roster.get(wc.name)]


def forfeit_count(team: CompetitionTeam, classes: Sequence[WeightClass]) -> int:
    return len(open_slots(team, classes))


def roster_references(teams: Iterable[CompetitionTeam]) -> dict[str, list[RosterReference]]:
    """Every place each wrestler id appears across the given teams' tables."""
    refs: dict[str, list[RosterReference]] = {}
    for team in teams:
        for slot, occupant in team.roster.items():
            if occupant:
                refs.setdefault(occupant, []).append(RosterReference(team.id, Role.STARTER, slot))
        for reserve_id in team.reserves:
            refs.setdefault(reserve_id, []).append(RosterReference(team.id, Role.RESERVE))
    return refs
