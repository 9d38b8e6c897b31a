"""Point-in-time view of one session's entities, keyed by id."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.home_team import HomeTeam
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.wrestler import Wrestler


@dataclass(frozen=True)
class Snapshot:
    session: Session
    wrestlers: Mapping[str, Wrestler] = field(default_factory=dict)
    competition_teams: Mapping[str, CompetitionTeam] = field(default_factory=dict)
    home_teams: Mapping[str, HomeTeam] = field(default_factory=dict)

    @classmethod
    def of(
        cls,
        session: Session,
        *,
        wrestlers: Iterable[Wrestler] = (),
        competition_teams: Iterable[CompetitionTeam] = (),
        home_teams: Iterable[HomeTeam] = (),
    ) -> Snapshot:
        return cls(
            session=session,
            wrestlers={w.id: w for w in wrestlers},
            competition_teams={t.id: t for t in competition_teams},
            home_teams={h.id: h for h in home_teams},
        )

    def wrestler(self, wrestler_id: str) -> Wrestler | None:
        return self.wrestlers.get(wrestler_id)

    def team(self, team_id: str) -> CompetitionTeam | None:
        return self.competition_teams.get(team_id)

    def home_team(self, home_team_id: str) -> HomeTeam | None:
        return self.home_teams.get(home_team_id)

    def wrestlers_of(self, home_team_id: str) -> list[Wrestler]:
        return [w for w in self.wrestlers.values() if w.home_team_id == home_team_id]
