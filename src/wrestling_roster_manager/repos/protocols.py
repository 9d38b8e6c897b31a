from typing import Protocol

from wrestling_roster_manager.domain.mutation import EntityKind, Transaction
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.snapshot import Snapshot


class RosterStore(Protocol):
    def load_snapshot(self, session_id: str) -> Snapshot: ...

    def commit(self, session_id: str, transaction: Transaction) -> None: ...

    def create(self, kind: EntityKind, session_id: str, fields: dict[str, object]) -> str: ...

    def list_sessions(self) -> list[Session]: ...
