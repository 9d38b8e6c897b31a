from __future__ import annotations

from dataclasses import dataclass

from wrestling_roster_manager.catalog.weight_classes import classes_for
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import WrestlerStatus

FORFEIT: str = "FORFEIT"


@dataclass(frozen=True)
class RosterLine:
    slot: str
    wrestler_id: str | None
    label: str
    is_farm_out: bool = False


@dataclass(frozen=True)
class PlacementLine:
    wrestler_id: str
    name: str
    actual_weight: float
    placement: str


def team_roster_sheet(snapshot: Snapshot, team_id: str) -> list[RosterLine]:
    """One line per class of the team's division; farm-outs show their home team."""
    team = snapshot.competition_teams[team_id]
    lines: list[RosterLine] = []
    for wc in classes_for(team.division, snapshot.session):
        occupant_id = team.roster.get(wc.name)
        wrestler = snapshot.wrestler(occupant_id) if occupant_id else None
        if wrestler is None:
            lines.append(RosterLine(slot=wc.name, wrestler_id=None, label=FORFEIT))
            continue
        farmed = wrestler.home_team_id != team.associated_home_team_id
        label = f"{wrestler.name} ({wrestler.home_team_name})" if farmed else wrestler.name
        lines.append(RosterLine(slot=wc.name, wrestler_id=wrestler.id, label=label, is_farm_out=farmed))
    return lines


def home_team_placements(snapshot: Snapshot, home_team_id: str) -> list[PlacementLine]:
    lines: list[PlacementLine] = []
    for wrestler in snapshot.wrestlers_of(home_team_id):
        if wrestler.status is WrestlerStatus.STARTER:
            placement = f"{wrestler.competition_team_name} @ {wrestler.assigned_weight_class_slot}"
        elif wrestler.status is WrestlerStatus.RESERVE:
            placement = f"{wrestler.competition_team_name} @ Reserve"
        elif wrestler.status is WrestlerStatus.FARM_OUT_AVAILABLE:
            placement = f"{wrestler.status} (Div {wrestler.farm_out_division})"
        else:
            placement = str(wrestler.status)
        lines.append(
            PlacementLine(
                wrestler_id=wrestler.id,
                name=wrestler.name,
                actual_weight=wrestler.actual_weight,
                placement=placement,
            )
        )
    lines.sort(key=lambda line: (line.actual_weight, line.name))
    return lines
