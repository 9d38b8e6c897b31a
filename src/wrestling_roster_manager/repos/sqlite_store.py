import logging
import sqlite3
from uuid import uuid4

from wrestling_roster_manager.domain.mutation import EntityKind, Mutation, MutationOp, Transaction
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.snapshot import Snapshot
from wrestling_roster_manager.exceptions import CommitFailure, EntityNotFoundError
from wrestling_roster_manager.repos.serializers import (
    COLUMNS,
    encode_value,
    row_to_competition_team,
    row_to_entity,
    row_to_home_team,
    row_to_session,
    row_to_wrestler,
)

logger = logging.getLogger(__name__)


def new_entity_id() -> str:
    return uuid4().hex


class SqliteRosterStore:
    """Roster store backed by one SQLite connection.

    Each commit runs inside ``BEGIN IMMEDIATE``; expected field values are
    compared against the stored rows before any write, and any failure rolls
    the whole transaction back.
    """

    def __init__(self, conn: sqlite3.Connection, *, max_batch_size: int = 499) -> None:
        self._conn = conn
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def list_sessions(self) -> list[Session]:
        rows = self._conn.execute("SELECT * FROM session ORDER BY created_at, name").fetchall()
        return [row_to_session(row) for row in rows]

    def load_snapshot(self, session_id: str) -> Snapshot:
        row = self._conn.execute("SELECT * FROM session WHERE id = ?", (session_id,)).fetchone()
        if row is None:
            raise EntityNotFoundError(EntityKind.SESSION, session_id)
        home_teams = self._conn.execute("SELECT * FROM home_team WHERE session_id = ?", (session_id,)).fetchall()
        wrestlers = self._conn.execute("SELECT * FROM wrestler WHERE session_id = ?", (session_id,)).fetchall()
        teams = self._conn.execute("SELECT * FROM competition_team WHERE session_id = ?", (session_id,)).fetchall()
        return Snapshot.of(
            row_to_session(row),
            home_teams=[row_to_home_team(r) for r in home_teams],
            wrestlers=[row_to_wrestler(r) for r in wrestlers],
            competition_teams=[row_to_competition_team(r) for r in teams],
        )

    def create(self, kind: EntityKind, session_id: str, fields: dict[str, object]) -> str:
        entity_id = new_entity_id()
        mutation = Mutation(
            kind=kind,
            entity_id=entity_id,
            op=MutationOp.INSERT,
            changes=fields,
            session_id=None if kind is EntityKind.SESSION else session_id,
        )
        self.commit(session_id, Transaction(mutations=(mutation,), description=f"create {kind}"))
        return entity_id

    def commit(self, session_id: str, transaction: Transaction) -> None:
        if transaction.is_noop:
            logger.debug("Skipping empty transaction: %s", transaction.description)
            return
        if len(transaction) > self._max_batch_size:
            raise CommitFailure(
                f"Transaction has {len(transaction)} mutations; the limit is {self._max_batch_size}",
                mutation_count=len(transaction),
            )
        logger.debug("Committing %d mutations: %s", len(transaction), transaction.description)
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            for mutation in transaction.mutations:
                self._apply(session_id, mutation)
        except CommitFailure:
            self._conn.execute("ROLLBACK")
            logger.warning("Rolled back %r", transaction.description)
            raise
        except sqlite3.Error as e:
            self._conn.execute("ROLLBACK")
            logger.warning("Rolled back %r: %s", transaction.description, e)
            raise CommitFailure(
                f"Store rejected {transaction.description!r}: {e}",
                mutation_count=len(transaction),
            ) from e
        except BaseException:
            self._conn.execute("ROLLBACK")
            logger.warning("Rolled back %r after an unexpected error", transaction.description)
            raise
        self._conn.execute("COMMIT")

    def _where(self, kind: EntityKind, session_id: str) -> tuple[str, tuple[str, ...]]:
        if kind is EntityKind.SESSION:
            return "id = ?", ()
        return "session_id = ? AND id = ?", (session_id,)

    def _apply(self, session_id: str, mutation: Mutation) -> None:
        scope = mutation.session_id or session_id
        table = str(mutation.kind)
        if mutation.op is MutationOp.INSERT:
            self._insert(scope, mutation)
            return

        clause, prefix = self._where(mutation.kind, scope)
        params = (*prefix, mutation.entity_id)
        row = self._conn.execute(f"SELECT * FROM {table} WHERE {clause}", params).fetchone()
        if row is None:
            raise CommitFailure(f"{mutation.kind} {mutation.entity_id!r} does not exist")
        current = row_to_entity(mutation.kind, row)
        for name, expected in mutation.expected.items():
            actual = getattr(current, name)
            if actual != expected:
                raise CommitFailure(
                    f"{mutation.kind} {mutation.entity_id!r} changed: {name} is {actual!r}, expected {expected!r}"
                )

        if mutation.op is MutationOp.DELETE:
            self._conn.execute(f"DELETE FROM {table} WHERE {clause}", params)
            return
        columns = COLUMNS[mutation.kind]
        unknown = set(mutation.changes) - set(columns)
        if unknown:
            raise CommitFailure(f"Unknown {mutation.kind} fields: {', '.join(sorted(unknown))}")
        assignments = ", ".join(f"{name} = ?" for name in mutation.changes)
        values = tuple(encode_value(name, value) for name, value in mutation.changes.items())
        self._conn.execute(f"UPDATE {table} SET {assignments} WHERE {clause}", (*values, *params))

    def _insert(self, session_id: str, mutation: Mutation) -> None:
        columns = [name for name in COLUMNS[mutation.kind] if name in mutation.changes]
        values = [encode_value(name, mutation.changes[name]) for name in columns]
        if mutation.kind is EntityKind.SESSION:
            names = ["id", *columns]
            params = [mutation.entity_id, *values]
        else:
            names = ["session_id", "id", *columns]
            params = [session_id, mutation.entity_id, *values]
        placeholders = ", ".join("?" for _ in names)
        self._conn.execute(f"INSERT INTO {mutation.kind} ({', '.join(names)}) VALUES ({placeholders})", params)
