from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.mutation import Transaction
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.wrestler import Wrestler
from wrestling_roster_manager.eligibility.placements import FarmOutPlacement
from wrestling_roster_manager.eligibility.resolver import EligibleCandidates
from wrestling_roster_manager.statistics.report import StatisticsReport
from wrestling_roster_manager.statistics.sheets import FORFEIT, PlacementLine, RosterLine

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_classification(weight: float, label: str, scope: str) -> None:
    console.print(f"{weight:g} lbs → [bold]{label}[/bold] ({scope})")


def print_created(kind: str, name: str, entity_id: str) -> None:
    console.print(f"[bold green]Created[/bold green] {kind} [bold]'{name}'[/bold] ({entity_id})")


def print_transaction(transaction: Transaction) -> None:
    if transaction.is_noop:
        console.print(f"Nothing to change: {transaction.description}")
        return
    console.print(f"[bold green]Saved[/bold green] {transaction.description}")
    console.print(f"  {len(transaction)} records updated")


def _candidate_rows(table: Table, pool: str, wrestlers: Sequence[Wrestler]) -> None:
    for w in wrestlers:
        table.add_row(pool, w.id, w.name, w.home_team_name, f"{w.actual_weight:g}", w.calculated_weight_class)


def print_candidates(team: CompetitionTeam, target: str, candidates: EligibleCandidates) -> None:
    """Print the home and farm pools for one slot or the reserve list."""
    if candidates.is_empty:
        console.print(f"No eligible wrestlers for {team.name} {target}.")
        return
    console.print(f"[bold]Eligible for {team.name} {target}[/bold] (division {team.division})")
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Pool")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Home team")
    table.add_column("Weight", justify="right")
    table.add_column("Class", justify="right")
    _candidate_rows(table, "home", candidates.home_pool)
    _candidate_rows(table, "farm", candidates.farm_pool)
    console.print(table)


def print_roster_sheet(team: CompetitionTeam, lines: Sequence[RosterLine]) -> None:
    console.print(f"[bold]{team.name}[/bold] — division {team.division}{f', pool {team.pool}' if team.pool else ''}")
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Class", justify="right")
    table.add_column("Wrestler")
    for line in lines:
        label = f"[red]{FORFEIT}[/red]" if line.wrestler_id is None else line.label
        table.add_row(line.slot, label)
    console.print(table)
    if team.reserves:
        console.print(f"  Reserves: {len(team.reserves)}")


def print_home_team_placements(home_team_name: str, lines: Sequence[PlacementLine]) -> None:
    if not lines:
        console.print(f"No wrestlers registered for {home_team_name}.")
        return
    table = Table(show_edge=False, pad_edge=False, title=home_team_name)
    table.add_column("Wrestler")
    table.add_column("Weight", justify="right")
    table.add_column("Placement")
    for line in lines:
        table.add_row(line.name, f"{line.actual_weight:g}", line.placement)
    console.print(table)


def print_farm_out_placements(wrestler: Wrestler, placements: Sequence[FarmOutPlacement]) -> None:
    if not placements:
        console.print(f"No open slots for {wrestler.name} in division {wrestler.farm_out_division}.")
        return
    console.print(
        f"[bold]Open slots for {wrestler.name}[/bold] "
        f"({wrestler.actual_weight:g} lbs, division {wrestler.farm_out_division})"
    )
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Team")
    table.add_column("ID")
    table.add_column("Open slots")
    table.add_column("Forfeits", justify="right")
    for p in placements:
        table.add_row(p.team_name, p.team_id, ", ".join(p.open_slots), str(p.forfeit_count))
    console.print(table)


def print_sessions(sessions: Sequence[Session]) -> None:
    if not sessions:
        console.print("No sessions found.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Custom classes (I / II)")
    for s in sessions:
        custom_i = ", ".join(wc.name for wc in s.custom_weights_div_i) or "-"
        custom_ii = ", ".join(wc.name for wc in s.custom_weights_div_ii) or "-"
        table.add_row(s.id, s.name, f"{custom_i} / {custom_ii}")
    console.print(table)


def print_statistics(report: StatisticsReport) -> None:
    summary = Table(show_header=False, box=None, pad_edge=False)
    summary.add_column("Key", style="bold")
    summary.add_column("Value")
    summary.add_row("Wrestlers", str(report.total_wrestlers))
    summary.add_row("Home teams", str(report.home_team_count))
    summary.add_row("Weighed in", f"{report.weigh_in_percent:.1f}%")
    summary.add_row("Female", str(report.female_count))
    summary.add_row("Middle school", str(report.middle_school_count))
    summary.add_row("Weigh-ins complete", f"{report.home_team_weigh_in_percent:.1f}%")
    summary.add_row("Rosters complete", f"{report.home_team_roster_percent:.1f}%")
    console.print(summary)

    for overview in report.divisions:
        console.print()
        console.print(
            f"[bold]Division {overview.division}[/bold]: {overview.team_count} teams, "
            f"{overview.total_forfeits} forfeits"
        )
        table = Table(show_edge=False, pad_edge=False)
        table.add_column("Class", justify="right")
        table.add_column("Forfeits", justify="right")
        table.add_column("Farm-outs", justify="right")
        for name in overview.weight_classes:
            table.add_row(name, str(overview.forfeits.get(name, 0)), str(overview.farm_outs.get(name, 0)))
        console.print(table)

    if report.team_forfeits:
        console.print()
        table = Table(show_edge=False, pad_edge=False, title="Forfeits by team")
        table.add_column("Team")
        table.add_column("Div")
        table.add_column("Forfeits", justify="right")
        for tf in report.team_forfeits:
            table.add_row(tf.team_name, str(tf.division), str(tf.total))
        console.print(table)

    if report.teams_pending_weigh_in:
        console.print(f"\nPending weigh-in: {', '.join(report.teams_pending_weigh_in)}")
    if report.teams_pending_roster:
        console.print(f"Pending roster: {', '.join(report.teams_pending_roster)}")
