import math
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

import typer

from wrestling_roster_manager.catalog.weight_classes import classify_for_division, classify_standard
from wrestling_roster_manager.cli._logging import configure_logging
from wrestling_roster_manager.cli._output import (
    print_candidates,
    print_classification,
    print_created,
    print_error,
    print_farm_out_placements,
    print_home_team_placements,
    print_roster_sheet,
    print_sessions,
    print_statistics,
    print_transaction,
)
from wrestling_roster_manager.cli.factory import RosterContext, build_roster_context
from wrestling_roster_manager.config import create_config, load_store_settings
from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import RosterError
from wrestling_roster_manager.domain.mutation import Transaction
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.exceptions import RosterException
from wrestling_roster_manager.roster.table import Role
from wrestling_roster_manager.transactions.lifecycle import DivisionFlag

app = typer.Typer(name="wrm", help="Wrestling roster manager — weight classes, eligibility and team rosters")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
) -> None:
    """Wrestling roster manager — weight classes, eligibility and team rosters."""
    configure_logging(verbose=verbose, quiet=quiet)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_SessionOpt = Annotated[str | None, typer.Option("--session", help="Session id (defaults to session.id in config)")]
_DbOpt = Annotated[str | None, typer.Option("--db", help="SQLite database path (defaults to db.path in config)")]
_SlotOpt = Annotated[str | None, typer.Option("--slot", help="Weight-class slot, e.g. 120")]
_ReserveOpt = Annotated[bool, typer.Option("--reserve", help="Target the reserve list instead of a slot")]


@contextmanager
def _open(db: str | None, session: str | None, *, need_session: bool = True) -> Iterator[tuple[RosterContext, str]]:
    settings = load_store_settings(create_config(db_path=db, session_id=session))
    if isinstance(settings, Err):
        print_error(settings.error.message)
        raise typer.Exit(code=1)
    session_id = settings.value.default_session_id or ""
    if need_session and not session_id:
        print_error("no session selected; pass --session or set session.id")
        raise typer.Exit(code=1)
    with build_roster_context(settings.value) as ctx:
        try:
            yield ctx, session_id
        except RosterException as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e


def _role(slot: str | None, reserve: bool) -> tuple[Role, str]:
    if reserve and slot:
        print_error("pass either --slot or --reserve, not both")
        raise typer.Exit(code=1)
    if reserve:
        return Role.RESERVE, "reserves"
    if not slot:
        print_error("pass --slot SLOT or --reserve")
        raise typer.Exit(code=1)
    return Role.STARTER, f"@ {slot}"


def _report(result: Result[Transaction, RosterError]) -> None:
    match result:
        case Ok(transaction):
            print_transaction(transaction)
        case Err(e):
            print_error(e.message)
            raise typer.Exit(code=1)


@app.command()
def classify(
    weight: Annotated[float, typer.Argument(help="Body weight in pounds")],
    division: Annotated[
        Division | None, typer.Option("--division", help="Classify against a division's classes")
    ] = None,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Show the weight class a body weight falls in."""
    if not math.isfinite(weight):
        print_error(f"weight must be a finite number, got {weight}")
        raise typer.Exit(code=1)
    if division is None:
        print_classification(weight, classify_standard(weight), "standard classes")
        return
    with _open(db, session) as (ctx, session_id):
        snapshot = ctx.service.snapshot(session_id)
        print_classification(weight, classify_for_division(weight, division, snapshot.session), f"division {division}")


@app.command()
def eligible(
    team: Annotated[str, typer.Argument(help="Competition team id")],
    slot: _SlotOpt = None,
    reserve: _ReserveOpt = False,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """List wrestlers who may fill a slot or join the reserves."""
    role, target = _role(slot, reserve)
    with _open(db, session) as (ctx, session_id):
        match ctx.service.eligible(session_id, team, role, slot if role is Role.STARTER else None):
            case Ok(candidates):
                competition_team = ctx.service.snapshot(session_id).competition_teams[team]
                print_candidates(competition_team, target, candidates)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command()
def assign(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    team: Annotated[str, typer.Argument(help="Competition team id")],
    slot: _SlotOpt = None,
    reserve: _ReserveOpt = False,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Place a wrestler in a starter slot or on the reserve list."""
    role, _ = _role(slot, reserve)
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.assign(session_id, wrestler, team, role, slot if role is Role.STARTER else None))


@app.command()
def unassign(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    team: Annotated[str, typer.Argument(help="Competition team id")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Take a wrestler off a competition team."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.unassign(session_id, wrestler, team))


@app.command("farm-out")
def farm_out(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    division: Annotated[Division, typer.Argument(help="Division to lend the wrestler to")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Make a wrestler available to other teams of a division."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.farm_out(session_id, wrestler, division))


@app.command("weigh-in")
def weigh_in(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    weight: Annotated[float, typer.Argument(help="Body weight in pounds")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Record a wrestler's weigh-in."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.weigh_in(session_id, wrestler, weight))


@app.command()
def stats(session: _SessionOpt = None, db: _DbOpt = None) -> None:
    """Show session statistics: weigh-ins, forfeits and farm-outs."""
    with _open(db, session) as (ctx, session_id):
        print_statistics(ctx.service.statistics(session_id))


@app.command()
def roster(
    team: Annotated[str, typer.Argument(help="Competition team id")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Print a competition team's roster sheet."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.roster_sheet(session_id, team):
            case Ok(lines):
                print_roster_sheet(ctx.service.snapshot(session_id).competition_teams[team], lines)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command("home-placements")
def home_placements(
    home_team: Annotated[str, typer.Argument(help="Home team id")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Show where every wrestler of a home team is placed."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.placements_for(session_id, home_team):
            case Ok(lines):
                print_home_team_placements(ctx.service.snapshot(session_id).home_teams[home_team].name, lines)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command()
def placements(
    wrestler: Annotated[str, typer.Argument(help="Id of a FarmOutAvailable wrestler")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """List teams with an open slot a farm-out wrestler can fill."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.farm_out_placements(session_id, wrestler):
            case Ok(found):
                print_farm_out_placements(ctx.service.snapshot(session_id).wrestlers[wrestler], found)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command()
def sessions(db: _DbOpt = None) -> None:
    """List sessions in the database."""
    with _open(db, None, need_session=False) as (ctx, _):
        print_sessions(ctx.service.sessions())


@app.command("duplicate-session")
def duplicate_session(
    new_name: Annotated[str, typer.Argument(help="Name for the copy")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Copy a session with all of its teams and wrestlers."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.duplicate_session(session_id, new_name):
            case Ok(new_id):
                print_created("session", new_name, new_id)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command("create-session")
def create_session(
    name: Annotated[str, typer.Argument(help="Session name")],
    db: _DbOpt = None,
) -> None:
    """Create an empty session and print its id."""
    with _open(db, None, need_session=False) as (ctx, _):
        match ctx.service.create_session(name):
            case Ok(session_id):
                print_created("session", name.strip(), session_id)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command("add-home-team")
def add_home_team(
    name: Annotated[str, typer.Argument(help="Home team name")],
    state: Annotated[str, typer.Option("--state", help="State or region")] = "",
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Register a home team in the session."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.create_home_team(session_id, name, state):
            case Ok(home_team_id):
                print_created("home team", name.strip(), home_team_id)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command("add-wrestler")
def add_wrestler(
    name: Annotated[str, typer.Argument(help="Wrestler name")],
    home_team: Annotated[str, typer.Argument(help="Home team id")],
    weight: Annotated[float | None, typer.Option("--weight", help="Record a weigh-in right away")] = None,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Register an unassigned wrestler with a home team."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.register_wrestler(session_id, name, home_team):
            case Ok(wrestler_id):
                print_created("wrestler", name.strip(), wrestler_id)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)
        if weight is not None:
            _report(ctx.service.weigh_in(session_id, wrestler_id, weight))


@app.command("add-team")
def add_team(
    name: Annotated[str, typer.Argument(help="Competition team name")],
    home_team: Annotated[str, typer.Argument(help="Associated home team id")],
    division: Annotated[Division, typer.Argument(help="Division the team competes in")],
    pool: Annotated[str, typer.Option("--pool", help="Pool letter")] = "",
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Create a competition team with every slot of its division open."""
    with _open(db, session) as (ctx, session_id):
        match ctx.service.create_competition_team(session_id, name, home_team, division, pool):
            case Ok(team_id):
                print_created("team", name.strip(), team_id)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@app.command("delete-wrestler")
def delete_wrestler(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Delete a wrestler, clearing any roster entry that names them."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.delete_wrestler(session_id, wrestler))


@app.command("delete-team")
def delete_team(
    team: Annotated[str, typer.Argument(help="Competition team id")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Delete a competition team and release its wrestlers."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.delete_team(session_id, team))


@app.command()
def recall(
    wrestler: Annotated[str, typer.Argument(help="Id of a FarmOutAvailable wrestler")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Take a wrestler back out of the farm-out pool."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.recall(session_id, wrestler))


@app.command("clear-slot")
def clear_slot(
    team: Annotated[str, typer.Argument(help="Competition team id")],
    slot: Annotated[str, typer.Argument(help="Weight-class slot")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Empty a starter slot, releasing whoever holds it."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.clear_slot(session_id, team, slot))


@app.command("custom-weights")
def custom_weights(
    division: Annotated[Division, typer.Argument(help="Division the classes belong to")],
    maxes: Annotated[list[str] | None, typer.Argument(help="Max weights; none clears the custom classes")] = None,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Replace a division's custom weight classes."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.set_custom_weights(session_id, division, maxes or []))


@app.command("division-flags")
def division_flags(
    wrestler: Annotated[str, typer.Argument(help="Wrestler id")],
    female: Annotated[bool | None, typer.Option("--female/--not-female", help="Female division")] = None,
    middle_school: Annotated[
        bool | None, typer.Option("--middle-school/--not-middle-school", help="Middle-school division")
    ] = None,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Move an unplaced wrestler into or out of the female and middle-school divisions."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.set_division_flags(session_id, wrestler, is_female=female, is_middle_school=middle_school))


@app.command("mark-home-team")
def mark_home_team(
    home_team: Annotated[str, typer.Argument(help="Home team id")],
    flag: Annotated[DivisionFlag, typer.Argument(help="Division flag to set")],
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Set a division flag on every unassigned open-division wrestler of a home team."""
    with _open(db, session) as (ctx, session_id):
        _report(ctx.service.bulk_division_flags(session_id, home_team, flag))


@app.command()
def progress(
    home_team: Annotated[str, typer.Argument(help="Home team id")],
    weigh_in: Annotated[
        bool | None, typer.Option("--weigh-in-complete/--weigh-in-pending", help="Weigh-in status")
    ] = None,
    roster_done: Annotated[
        bool | None, typer.Option("--roster-complete/--roster-pending", help="Roster status")
    ] = None,
    session: _SessionOpt = None,
    db: _DbOpt = None,
) -> None:
    """Record a home team's weigh-in and roster progress."""
    with _open(db, session) as (ctx, session_id):
        _report(
            ctx.service.set_home_team_progress(
                session_id, home_team, weigh_in_complete=weigh_in, roster_complete=roster_done
            )
        )
