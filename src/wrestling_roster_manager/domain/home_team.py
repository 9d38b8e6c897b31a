from dataclasses import dataclass


@dataclass(frozen=True)
class HomeTeam:
    id: str
    name: str
    state: str = ""
    weigh_in_complete: bool = False
    roster_complete: bool = False
