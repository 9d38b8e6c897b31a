from collections.abc import Mapping
from dataclasses import dataclass, field

from wrestling_roster_manager.domain.division import Division


@dataclass(frozen=True)
class CompetitionTeam:
    id: str
    name: str
    associated_home_team_id: str
    associated_home_team_name: str
    division: Division
    pool: str = ""
    roster: Mapping[str, str | None] = field(default_factory=dict)
    reserves: tuple[str, ...] = ()

    def occupant(self, slot: str) -> str | None:
        return self.roster.get(slot)

    def starter_ids(self) -> list[str]:
        return [wrestler_id for wrestler_id in self.roster.values() if wrestler_id]
