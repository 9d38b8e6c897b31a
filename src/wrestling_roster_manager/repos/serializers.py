"""Column encoding for roster entities stored in SQLite.

Enums are stored by value, flags as integers, and roster maps, reserve lists
and custom weight lists as JSON text.
"""

from __future__ import annotations

import json
import sqlite3

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.home_team import HomeTeam
from wrestling_roster_manager.domain.mutation import EntityKind
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.weight_class import WeightClass
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus
from wrestling_roster_manager.transactions.diff import Entity

COLUMNS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.SESSION: ("name", "custom_weights_div_i", "custom_weights_div_ii"),
    EntityKind.HOME_TEAM: ("name", "state", "weigh_in_complete", "roster_complete"),
    EntityKind.WRESTLER: (
        "name",
        "home_team_id",
        "home_team_name",
        "actual_weight",
        "calculated_weight_class",
        "status",
        "competition_team_id",
        "competition_team_name",
        "assigned_weight_class_slot",
        "is_female",
        "is_middle_school",
        "farm_out_division",
    ),
    EntityKind.COMPETITION_TEAM: (
        "name",
        "associated_home_team_id",
        "associated_home_team_name",
        "division",
        "pool",
        "roster",
        "reserves",
    ),
}


def _encode_weights(weights: object) -> str:
    classes = weights if isinstance(weights, (list, tuple)) else ()
    return json.dumps([{"name": wc.name, "max_weight": wc.max_weight} for wc in classes])


def _decode_weights(raw: str) -> tuple[WeightClass, ...]:
    return tuple(WeightClass(name=item["name"], max_weight=float(item["max_weight"])) for item in json.loads(raw))


def encode_value(column: str, value: object) -> object:
    if column in ("custom_weights_div_i", "custom_weights_div_ii"):
        return _encode_weights(value)
    if column == "roster":
        return json.dumps(dict(value) if isinstance(value, dict) else {}, sort_keys=True)
    if column == "reserves":
        return json.dumps(list(value) if isinstance(value, (list, tuple)) else [])
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (WrestlerStatus, Division)):
        return value.value
    return value


def row_to_session(row: sqlite3.Row) -> Session:
    return Session(
        id=row["id"],
        name=row["name"],
        custom_weights_div_i=_decode_weights(row["custom_weights_div_i"]),
        custom_weights_div_ii=_decode_weights(row["custom_weights_div_ii"]),
    )


def row_to_home_team(row: sqlite3.Row) -> HomeTeam:
    return HomeTeam(
        id=row["id"],
        name=row["name"],
        state=row["state"],
        weigh_in_complete=bool(row["weigh_in_complete"]),
        roster_complete=bool(row["roster_complete"]),
    )


def row_to_wrestler(row: sqlite3.Row) -> Wrestler:
    division = row["farm_out_division"]
    return Wrestler(
        id=row["id"],
        name=row["name"],
        home_team_id=row["home_team_id"],
        home_team_name=row["home_team_name"],
        actual_weight=float(row["actual_weight"]),
        calculated_weight_class=row["calculated_weight_class"],
        status=WrestlerStatus(row["status"]),
        competition_team_id=row["competition_team_id"],
        competition_team_name=row["competition_team_name"],
        assigned_weight_class_slot=row["assigned_weight_class_slot"],
        is_female=bool(row["is_female"]),
        is_middle_school=bool(row["is_middle_school"]),
        farm_out_division=Division(division) if division else None,
    )


def row_to_competition_team(row: sqlite3.Row) -> CompetitionTeam:
    return CompetitionTeam(
        id=row["id"],
        name=row["name"],
        associated_home_team_id=row["associated_home_team_id"],
        associated_home_team_name=row["associated_home_team_name"],
        division=Division(row["division"]),
        pool=row["pool"],
        roster=json.loads(row["roster"]),
        reserves=tuple(json.loads(row["reserves"])),
    )


def row_to_entity(kind: EntityKind, row: sqlite3.Row) -> Entity:
    match kind:
        case EntityKind.SESSION:
            return row_to_session(row)
        case EntityKind.HOME_TEAM:
            return row_to_home_team(row)
        case EntityKind.WRESTLER:
            return row_to_wrestler(row)
        case EntityKind.COMPETITION_TEAM:
            return row_to_competition_team(row)
