import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from wrestling_roster_manager.config import StoreSettings
from wrestling_roster_manager.db.connection import create_connection
from wrestling_roster_manager.repos.sqlite_store import SqliteRosterStore
from wrestling_roster_manager.services.roster_service import RosterService


@dataclass(frozen=True)
class RosterContext:
    conn: sqlite3.Connection
    store: SqliteRosterStore
    service: RosterService


@contextmanager
def build_roster_context(settings: StoreSettings) -> Iterator[RosterContext]:
    """Composition-root context manager: opens the DB, wires store + service, yields context, closes DB."""
    if str(settings.db_path) != ":memory:":
        settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = create_connection(settings.db_path)
    try:
        store = SqliteRosterStore(conn, max_batch_size=settings.max_batch_size)
        yield RosterContext(
            conn=conn,
            store=store,
            service=RosterService(store, max_batch_size=settings.max_batch_size),
        )
    finally:
        conn.close()
