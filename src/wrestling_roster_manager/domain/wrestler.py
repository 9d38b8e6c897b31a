from dataclasses import dataclass
from enum import StrEnum

from wrestling_roster_manager.domain.division import Division


class WrestlerStatus(StrEnum):
    UNASSIGNED = "Unassigned"
    FARM_OUT_AVAILABLE = "FarmOutAvailable"
    STARTER = "Starter"
    RESERVE = "Reserve"


PLACED_STATUSES: frozenset[WrestlerStatus] = frozenset({WrestlerStatus.STARTER, WrestlerStatus.RESERVE})


@dataclass(frozen=True)
class Wrestler:
    id: str
    name: str
    home_team_id: str
    home_team_name: str
    actual_weight: float = 0.0
    calculated_weight_class: str = "N/A"
    status: WrestlerStatus = WrestlerStatus.UNASSIGNED
    competition_team_id: str | None = None
    competition_team_name: str | None = None
    assigned_weight_class_slot: str | None = None
    is_female: bool = False
    is_middle_school: bool = False
    farm_out_division: Division | None = None

    @property
    def is_weighed_in(self) -> bool:
        return self.actual_weight > 0

    @property
    def is_placed(self) -> bool:
        return self.status in PLACED_STATUSES

    @property
    def in_open_division(self) -> bool:
        return not self.is_female and not self.is_middle_school
