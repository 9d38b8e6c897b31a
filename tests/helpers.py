import sqlite3
from collections.abc import Iterable
from dataclasses import replace

from wrestling_roster_manager.catalog.weight_classes import classes_for, classify_standard
from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.home_team import HomeTeam
from wrestling_roster_manager.domain.mutation import EntityKind, Mutation, MutationOp, Transaction
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.weight_class import WeightClass
from wrestling_roster_manager.domain.wrestler import Wrestler, WrestlerStatus
from wrestling_roster_manager.repos.sqlite_store import SqliteRosterStore
from wrestling_roster_manager.roster.table import new_roster
from wrestling_roster_manager.transactions.diff import insert_mutation

SESSION_ID = "s1"


def make_session(
    *,
    session_id: str = SESSION_ID,
    name: str = "Winter Duals",
    custom_i: Iterable[float] = (),
    custom_ii: Iterable[float] = (),
) -> Session:
    return Session(
        id=session_id,
        name=name,
        custom_weights_div_i=tuple(WeightClass(name=f"{m:g}", max_weight=float(m)) for m in custom_i),
        custom_weights_div_ii=tuple(WeightClass(name=f"{m:g}", max_weight=float(m)) for m in custom_ii),
    )


def make_home_team(home_team_id: str = "h1", name: str = "Central", **kwargs: object) -> HomeTeam:
    return HomeTeam(id=home_team_id, name=name, **kwargs)  # type: ignore[arg-type]


def make_wrestler(
    wrestler_id: str = "w1",
    name: str = "Alex",
    *,
    home_team: HomeTeam | None = None,
    weight: float = 0.0,
    **kwargs: object,
) -> Wrestler:
    """An Unassigned wrestler whose calculated class matches ``weight``."""
    home = home_team or make_home_team()
    return Wrestler(
        id=wrestler_id,
        name=name,
        home_team_id=home.id,
        home_team_name=home.name,
        actual_weight=weight,
        calculated_weight_class=classify_standard(weight),
        **kwargs,  # type: ignore[arg-type]
    )


def make_farm_out(
    wrestler_id: str,
    name: str,
    *,
    home_team: HomeTeam,
    weight: float,
    division: Division = Division.ONE,
) -> Wrestler:
    return make_wrestler(
        wrestler_id,
        name,
        home_team=home_team,
        weight=weight,
        status=WrestlerStatus.FARM_OUT_AVAILABLE,
        farm_out_division=division,
    )


def make_team(
    team_id: str = "t1",
    name: str = "Central A",
    *,
    home_team: HomeTeam | None = None,
    division: Division = Division.ONE,
    session: Session | None = None,
    pool: str = "",
) -> CompetitionTeam:
    """A competition team with every slot of its division open."""
    home = home_team or make_home_team()
    return CompetitionTeam(
        id=team_id,
        name=name,
        associated_home_team_id=home.id,
        associated_home_team_name=home.name,
        division=division,
        pool=pool,
        roster=new_roster(classes_for(division, session or make_session())),
    )


def seat_starter(wrestler: Wrestler, team: CompetitionTeam, slot: str) -> tuple[Wrestler, CompetitionTeam]:
    """Consistent Starter record and roster entry, as if committed earlier."""
    roster = dict(team.roster)
    roster[slot] = wrestler.id
    return (
        replace(
            wrestler,
            status=WrestlerStatus.STARTER,
            competition_team_id=team.id,
            competition_team_name=team.name,
            assigned_weight_class_slot=slot,
            farm_out_division=None,
        ),
        replace(team, roster=roster),
    )


def seat_reserve(wrestler: Wrestler, team: CompetitionTeam) -> tuple[Wrestler, CompetitionTeam]:
    return (
        replace(
            wrestler,
            status=WrestlerStatus.RESERVE,
            competition_team_id=team.id,
            competition_team_name=team.name,
            assigned_weight_class_slot=None,
            farm_out_division=None,
        ),
        replace(team, reserves=(*team.reserves, wrestler.id)),
    )


def make_snapshot(
    *,
    session: Session | None = None,
    home_teams: Iterable[HomeTeam] = (),
    wrestlers: Iterable[Wrestler] = (),
    teams: Iterable[CompetitionTeam] = (),
) -> Snapshot:
    return Snapshot.of(
        session or make_session(),
        home_teams=home_teams,
        wrestlers=wrestlers,
        competition_teams=teams,
    )


def seed_snapshot(conn: sqlite3.Connection, snapshot: Snapshot) -> SqliteRosterStore:
    """Write a whole snapshot into a fresh database and return a store over it."""
    store = SqliteRosterStore(conn)
    session = snapshot.session
    store.commit(
        session.id,
        Transaction(
            mutations=(
                Mutation(
                    kind=EntityKind.SESSION,
                    entity_id=session.id,
                    op=MutationOp.INSERT,
                    changes={
                        "name": session.name,
                        "custom_weights_div_i": session.custom_weights_div_i,
                        "custom_weights_div_ii": session.custom_weights_div_ii,
                    },
                ),
            ),
            description="seed session",
        ),
    )
    entities = [*snapshot.home_teams.values(), *snapshot.wrestlers.values(), *snapshot.competition_teams.values()]
    if entities:
        store.commit(
            session.id,
            Transaction(mutations=tuple(insert_mutation(e, session.id) for e in entities), description="seed"),
        )
    return store
