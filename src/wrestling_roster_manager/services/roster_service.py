"""Roster operations against a store: load a snapshot, build, commit.

Engine errors come back as ``Err`` values and nothing is written. Store
failures (``CommitFailure``, ``EntityNotFoundError``) propagate to the caller;
a rejected commit is never retried here.
"""

import logging
from collections.abc import Callable, Iterable

from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import RosterError, ValidationError
from wrestling_roster_manager.domain.mutation import EntityKind, Transaction
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.domain.wrestler import WrestlerStatus
from wrestling_roster_manager.eligibility.placements import FarmOutPlacement, farm_out_placements
from wrestling_roster_manager.eligibility.resolver import EligibleCandidates, resolve_eligibility, slot_availability
from wrestling_roster_manager.repos.protocols import RosterStore
from wrestling_roster_manager.roster.table import Role
from wrestling_roster_manager.statistics.report import StatisticsReport, compute_statistics
from wrestling_roster_manager.statistics.sheets import (
    PlacementLine,
    RosterLine,
    home_team_placements,
    team_roster_sheet,
)
from wrestling_roster_manager.transactions import builder, lifecycle
from wrestling_roster_manager.transactions.chunking import chunk_transaction

logger = logging.getLogger(__name__)

type Build = Callable[[Snapshot], Result[Transaction, RosterError]]


class RosterService:
    def __init__(self, store: RosterStore, *, max_batch_size: int = 499) -> None:
        self._store = store
        self._max_batch_size = max_batch_size

    def snapshot(self, session_id: str) -> Snapshot:
        return self._store.load_snapshot(session_id)

    def sessions(self) -> list[Session]:
        return self._store.list_sessions()

    def eligible(
        self,
        session_id: str,
        team_id: str,
        role: Role,
        slot: str | None = None,
    ) -> Result[EligibleCandidates, RosterError]:
        snapshot = self.snapshot(session_id)
        team = snapshot.team(team_id)
        if team is None:
            return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
        return resolve_eligibility(snapshot, team, role, slot)

    def slot_availability(self, session_id: str, team_id: str) -> Result[dict[str, bool], RosterError]:
        snapshot = self.snapshot(session_id)
        team = snapshot.team(team_id)
        if team is None:
            return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
        return Ok(slot_availability(snapshot, team))

    def farm_out_placements(
        self,
        session_id: str,
        wrestler_id: str,
    ) -> Result[tuple[FarmOutPlacement, ...], ValidationError]:
        return farm_out_placements(self.snapshot(session_id), wrestler_id)

    def roster_sheet(self, session_id: str, team_id: str) -> Result[list[RosterLine], RosterError]:
        snapshot = self.snapshot(session_id)
        if snapshot.team(team_id) is None:
            return Err(ValidationError(message=f"Unknown competition team {team_id!r}", field="team_id"))
        return Ok(team_roster_sheet(snapshot, team_id))

    def placements_for(self, session_id: str, home_team_id: str) -> Result[list[PlacementLine], RosterError]:
        snapshot = self.snapshot(session_id)
        if snapshot.home_team(home_team_id) is None:
            return Err(ValidationError(message=f"Unknown home team {home_team_id!r}", field="home_team_id"))
        return Ok(home_team_placements(snapshot, home_team_id))

    def statistics(self, session_id: str) -> StatisticsReport:
        return compute_statistics(self.snapshot(session_id))

    def assign(
        self,
        session_id: str,
        wrestler_id: str,
        team_id: str,
        role: Role,
        slot: str | None = None,
    ) -> Result[Transaction, RosterError]:
        return self._run(
            session_id,
            lambda s: builder.build_assignment_transaction(s, wrestler_id, team_id, role, slot),
        )

    def unassign(self, session_id: str, wrestler_id: str, team_id: str) -> Result[Transaction, RosterError]:
        """Remove a wrestler from a team in whatever role they currently hold."""

        def build(snapshot: Snapshot) -> Result[Transaction, RosterError]:
            wrestler = snapshot.wrestler(wrestler_id)
            if wrestler is None:
                return Err(ValidationError(message=f"Unknown wrestler {wrestler_id!r}", field="wrestler_id"))
            role = Role.STARTER if wrestler.status is WrestlerStatus.STARTER else Role.RESERVE
            return builder.build_unassignment_transaction(snapshot, wrestler_id, team_id, role)

        return self._run(session_id, build)

    def clear_slot(self, session_id: str, team_id: str, slot: str) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: builder.build_slot_clear_transaction(s, team_id, slot))

    def weigh_in(self, session_id: str, wrestler_id: str, weight: float) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: lifecycle.build_weigh_in(s, wrestler_id, weight))

    def set_division_flags(
        self,
        session_id: str,
        wrestler_id: str,
        *,
        is_female: bool | None = None,
        is_middle_school: bool | None = None,
    ) -> Result[Transaction, RosterError]:
        return self._run(
            session_id,
            lambda s: lifecycle.build_division_flags(
                s, wrestler_id, is_female=is_female, is_middle_school=is_middle_school
            ),
        )

    def farm_out(self, session_id: str, wrestler_id: str, division: Division | str) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: lifecycle.build_farm_out(s, wrestler_id, division))

    def recall(self, session_id: str, wrestler_id: str) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: lifecycle.build_recall(s, wrestler_id))

    def delete_wrestler(self, session_id: str, wrestler_id: str) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: builder.build_wrestler_deletion(s, wrestler_id))

    def delete_team(self, session_id: str, team_id: str) -> Result[Transaction, RosterError]:
        return self._run(session_id, lambda s: builder.build_team_deletion(s, team_id))

    def bulk_farm_out(
        self,
        session_id: str,
        wrestler_ids: Iterable[str],
        division: Division | str,
    ) -> Result[Transaction, RosterError]:
        ids = list(wrestler_ids)
        return self._run(session_id, lambda s: lifecycle.build_bulk_farm_out(s, ids, division), chunked=True)

    def bulk_division_flags(
        self,
        session_id: str,
        home_team_id: str,
        flag: lifecycle.DivisionFlag,
    ) -> Result[Transaction, RosterError]:
        return self._run(
            session_id,
            lambda s: lifecycle.build_bulk_division_flags(s, home_team_id, flag),
            chunked=True,
        )

    def set_home_team_progress(
        self,
        session_id: str,
        home_team_id: str,
        *,
        weigh_in_complete: bool | None = None,
        roster_complete: bool | None = None,
    ) -> Result[Transaction, RosterError]:
        return self._run(
            session_id,
            lambda s: lifecycle.build_home_team_progress(
                s, home_team_id, weigh_in_complete=weigh_in_complete, roster_complete=roster_complete
            ),
        )

    def set_custom_weights(
        self,
        session_id: str,
        division: Division,
        raw_maxes: Iterable[float | str],
    ) -> Result[Transaction, RosterError]:
        maxes = list(raw_maxes)
        return self._run(session_id, lambda s: lifecycle.build_custom_weights(s, division, maxes))

    def create_session(self, name: str) -> Result[str, ValidationError]:
        if not name.strip():
            return Err(ValidationError(message="Session name is required", field="name"))
        session_id = self._store.create(EntityKind.SESSION, "", {"name": name.strip()})
        logger.info("Created session %r (%s)", name.strip(), session_id)
        return Ok(session_id)

    def create_home_team(self, session_id: str, name: str, state: str = "") -> Result[str, ValidationError]:
        fields = lifecycle.new_home_team_fields(name, state)
        if isinstance(fields, Err):
            return fields
        return Ok(self._store.create(EntityKind.HOME_TEAM, session_id, fields.value))

    def register_wrestler(self, session_id: str, name: str, home_team_id: str) -> Result[str, ValidationError]:
        fields = lifecycle.new_wrestler_fields(self.snapshot(session_id), name, home_team_id)
        if isinstance(fields, Err):
            return fields
        return Ok(self._store.create(EntityKind.WRESTLER, session_id, fields.value))

    def create_competition_team(
        self,
        session_id: str,
        name: str,
        home_team_id: str,
        division: Division | str,
        pool: str = "",
    ) -> Result[str, ValidationError]:
        fields = lifecycle.new_competition_team_fields(self.snapshot(session_id), name, home_team_id, division, pool)
        if isinstance(fields, Err):
            return fields
        return Ok(self._store.create(EntityKind.COMPETITION_TEAM, session_id, fields.value))

    def duplicate_session(self, session_id: str, new_name: str) -> Result[str, ValidationError]:
        """Copy a session with all its teams and wrestlers under a new name.

        The copy is committed in batches; a failure part way leaves the new
        session partially populated.
        """
        if not new_name.strip():
            return Err(ValidationError(message="Session name is required", field="name"))
        source = self.snapshot(session_id)
        new_id = self._store.create(
            EntityKind.SESSION,
            "",
            {
                "name": new_name.strip(),
                "custom_weights_div_i": source.session.custom_weights_div_i,
                "custom_weights_div_ii": source.session.custom_weights_div_ii,
            },
        )
        copy = lifecycle.build_session_copy(source, new_id)
        chunks = self._commit_chunks(new_id, copy)
        logger.info(
            "Duplicated session %r into %r: %d entities in %d commits",
            source.session.name,
            new_name.strip(),
            len(copy),
            chunks,
        )
        return Ok(new_id)

    def _run(self, session_id: str, build: Build, *, chunked: bool = False) -> Result[Transaction, RosterError]:
        snapshot = self.snapshot(session_id)
        built = build(snapshot)
        if isinstance(built, Err):
            logger.debug("Rejected: %s", built.error.message)
            return built
        transaction = built.value
        if transaction.is_noop:
            logger.debug("Nothing to commit: %s", transaction.description)
            return built
        if chunked:
            self._commit_chunks(session_id, transaction)
        else:
            self._store.commit(session_id, transaction)
        logger.info("Committed %s (%d mutations)", transaction.description, len(transaction))
        return built

    def _commit_chunks(self, session_id: str, transaction: Transaction) -> int:
        chunks = chunk_transaction(transaction, self._max_batch_size)
        for chunk in chunks:
            if not chunk.is_noop:
                self._store.commit(session_id, chunk)
        return len(chunks)
