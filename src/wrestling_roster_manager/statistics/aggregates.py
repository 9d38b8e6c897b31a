from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.weight_class import WeightClass
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus


@dataclass(frozen=True)
class TeamForfeits:
    team_id: str
    team_name: str
    division: Division
    by_class: dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.by_class.values())


def forfeits_by_class(team: CompetitionTeam, classes: Sequence[WeightClass]) -> dict[str, int]:
    return {wc.name: 0 if team.roster.get(wc.name) else 1 for wc in classes}


def forfeits_by_team(
    teams: Iterable[CompetitionTeam],
    classes_of: Callable[[Division], Sequence[WeightClass]],
) -> list[TeamForfeits]:
    result = [
        TeamForfeits(
            team_id=team.id,
            team_name=team.name,
            division=team.division,
            by_class=forfeits_by_class(team, classes_of(team.division)),
        )
        for team in teams
    ]
    result.sort(key=lambda tf: (tf.team_name, tf.team_id))
    return result


def division_forfeits(teams: Iterable[CompetitionTeam], classes: Sequence[WeightClass]) -> dict[str, int]:
    """Forfeits per class summed over the given teams."""
    totals = {wc.name: 0 for wc in classes}
    for team in teams:
        for name, count in forfeits_by_class(team, classes).items():
            totals[name] += count
    return totals


def farm_out_pool_by_class(wrestlers: Iterable[Wrestler], division: Division) -> dict[str, int]:
    counts = Counter(
        w.calculated_weight_class
        for w in wrestlers
        if w.status is WrestlerStatus.FARM_OUT_AVAILABLE and w.farm_out_division == division
    )
    return dict(counts)


def percent_complete(completed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return completed / total * 100
