from __future__ import annotations

from dataclasses import dataclass

from wrestling_roster_manager.catalog.weight_classes import class_index, classes_for
from wrestling_roster_manager.domain.errors import ValidationError
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import WrestlerStatus
from wrestling_roster_manager.roster.table import forfeit_count


@dataclass(frozen=True)
class FarmOutPlacement:
    team_id: str
    team_name: str
    open_slots: tuple[str, ...]
    forfeit_count: int


def farm_out_placements(
    snapshot: Snapshot,
    wrestler_id: str,
) -> Result[tuple[FarmOutPlacement, ...], ValidationError]:
    """Teams in the farm-out's division with an open slot the wrestler can fill.

    Teams with the most forfeits come first.
    """
    wrestler = snapshot.wrestler(wrestler_id)
    if wrestler is None:
        return Err(ValidationError(message=f"Unknown wrestler {wrestler_id!r}", field="wrestler_id"))
    if wrestler.status is not WrestlerStatus.FARM_OUT_AVAILABLE or wrestler.farm_out_division is None:
        return Err(ValidationError(message=f"{wrestler.name} is not available as a farm-out", field="status"))
    if not wrestler.is_weighed_in:
        return Err(ValidationError(message=f"{wrestler.name} has not weighed in", field="actual_weight"))

    classes = classes_for(wrestler.farm_out_division, snapshot.session)
    own = class_index(wrestler.actual_weight, classes)
    if own == -1:
        return Ok(())
    reachable = [wc.name for wc in classes[own : own + 2]]

    placements: list[FarmOutPlacement] = []
    for team in snapshot.competition_teams.values():
        if team.division != wrestler.farm_out_division:
            continue
        slots = tuple(slot for slot in reachable if not team.roster.get(slot))
        if not slots:
            continue
        placements.append(
            FarmOutPlacement(
                team_id=team.id,
                team_name=team.name,
                open_slots=slots,
                forfeit_count=forfeit_count(team, classes),
            )
        )
    placements.sort(key=lambda p: (-p.forfeit_count, p.team_name))
    return Ok(tuple(placements))
