"""Dashboard statistics computed from a snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from wrestling_roster_manager.catalog.weight_classes import classes_for, slot_names
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.statistics.aggregates import (
    TeamForfeits,
    division_forfeits,
    farm_out_pool_by_class,
    forfeits_by_team,
    percent_complete,
)


@dataclass(frozen=True)
class DivisionOverview:
    division: Division
    weight_classes: tuple[str, ...]
    team_count: int
    forfeits: dict[str, int]
    farm_outs: dict[str, int]

    @property
    def total_forfeits(self) -> int:
        return sum(self.forfeits.values())


@dataclass(frozen=True)
class StatisticsReport:
    total_wrestlers: int
    home_team_count: int
    weigh_in_percent: float
    female_count: int
    middle_school_count: int
    divisions: tuple[DivisionOverview, ...]
    team_forfeits: tuple[TeamForfeits, ...]
    home_team_weigh_in_percent: float
    home_team_roster_percent: float
    teams_pending_weigh_in: tuple[str, ...]
    teams_pending_roster: tuple[str, ...]

    def division(self, division: Division) -> DivisionOverview:
        return next(d for d in self.divisions if d.division is division)


def compute_statistics(snapshot: Snapshot) -> StatisticsReport:
    wrestlers = list(snapshot.wrestlers.values())
    home_teams = list(snapshot.home_teams.values())
    teams = list(snapshot.competition_teams.values())

    divisions: list[DivisionOverview] = []
    for division in Division:
        classes = classes_for(division, snapshot.session)
        division_teams = [t for t in teams if t.division is division]
        divisions.append(
            DivisionOverview(
                division=division,
                weight_classes=tuple(slot_names(classes)),
                team_count=len(division_teams),
                forfeits=division_forfeits(division_teams, classes),
                farm_outs=farm_out_pool_by_class(wrestlers, division),
            )
        )

    weighed_in = sum(1 for w in wrestlers if w.is_weighed_in)
    weigh_ins_done = sum(1 for h in home_teams if h.weigh_in_complete)
    rosters_done = sum(1 for h in home_teams if h.roster_complete)
    return StatisticsReport(
        total_wrestlers=len(wrestlers),
        home_team_count=len(home_teams),
        weigh_in_percent=percent_complete(weighed_in, len(wrestlers)),
        female_count=sum(1 for w in wrestlers if w.is_female),
        middle_school_count=sum(1 for w in wrestlers if w.is_middle_school),
        divisions=tuple(divisions),
        team_forfeits=tuple(forfeits_by_team(teams, partial(classes_for, session=snapshot.session))),
        home_team_weigh_in_percent=percent_complete(weigh_ins_done, len(home_teams)),
        home_team_roster_percent=percent_complete(rosters_done, len(home_teams)),
        teams_pending_weigh_in=tuple(sorted(h.name for h in home_teams if not h.weigh_in_complete)),
        teams_pending_roster=tuple(sorted(h.name for h in home_teams if not h.roster_complete)),
    )
