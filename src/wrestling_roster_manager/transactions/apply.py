"""Apply a transaction to an in-memory snapshot with store semantics.

Expected field values are checked before anything is written, so a failed
apply leaves the input snapshot untouched.
"""

from __future__ import annotations

from dataclasses import replace

from wrestling_roster_manager.domain.mutation import EntityKind, Mutation, MutationOp, Transaction
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.exceptions import CommitFailure
from wrestling_roster_manager.transactions.diff import ENTITY_TYPES, Entity


def _check_expected(current: Entity, mutation: Mutation) -> None:
    for name, expected in mutation.expected.items():
        actual = getattr(current, name)
        if actual != expected:
            raise CommitFailure(
                f"{mutation.kind} {mutation.entity_id!r} changed: {name} is {actual!r}, expected {expected!r}"
            )


def apply_transaction(snapshot: Snapshot, transaction: Transaction) -> Snapshot:
    session = snapshot.session
    tables: dict[EntityKind, dict[str, Entity]] = {
        EntityKind.WRESTLER: dict(snapshot.wrestlers),
        EntityKind.COMPETITION_TEAM: dict(snapshot.competition_teams),
        EntityKind.HOME_TEAM: dict(snapshot.home_teams),
    }
    for mutation in transaction.mutations:
        if mutation.session_id is not None and mutation.session_id != session.id:
            raise CommitFailure(f"Mutation for session {mutation.session_id!r} applied to {session.id!r}")
        if mutation.kind is EntityKind.SESSION:
            if mutation.op is not MutationOp.UPDATE or mutation.entity_id != session.id:
                raise CommitFailure(f"Unsupported session mutation {mutation.op} on {mutation.entity_id!r}")
            _check_expected(session, mutation)
            session = replace(session, **mutation.changes)
            continue

        table = tables[mutation.kind]
        current = table.get(mutation.entity_id)
        if mutation.op is MutationOp.INSERT:
            if current is not None:
                raise CommitFailure(f"{mutation.kind} {mutation.entity_id!r} already exists")
            table[mutation.entity_id] = ENTITY_TYPES[mutation.kind](id=mutation.entity_id, **mutation.changes)
            continue
        if current is None:
            raise CommitFailure(f"{mutation.kind} {mutation.entity_id!r} does not exist")
        _check_expected(current, mutation)
        if mutation.op is MutationOp.DELETE:
            del table[mutation.entity_id]
        else:
            table[mutation.entity_id] = replace(current, **mutation.changes)

    return Snapshot(
        session=session,
        wrestlers=tables[EntityKind.WRESTLER],  # type: ignore[arg-type]
        competition_teams=tables[EntityKind.COMPETITION_TEAM],  # type: ignore[arg-type]
        home_teams=tables[EntityKind.HOME_TEAM],  # type: ignore[arg-type]
    )
