"""Transaction descriptors handed to the external store.

A mutation names one entity and the field values it should end up with.
``expected`` holds the values the builder read for the same fields; the store
compares them against its current state before writing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum


class EntityKind(StrEnum):
    SESSION = "session"
    HOME_TEAM = "home_team"
    WRESTLER = "wrestler"
    COMPETITION_TEAM = "competition_team"


class MutationOp(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Mutation:
    kind: EntityKind
    entity_id: str
    op: MutationOp
    changes: Mapping[str, object] = field(default_factory=dict)
    expected: Mapping[str, object] = field(default_factory=dict)
    session_id: str | None = None

    @property
    def key(self) -> tuple[EntityKind, str]:
        return (self.kind, self.entity_id)


@dataclass(frozen=True)
class Transaction:
    mutations: tuple[Mutation, ...] = ()
    description: str = ""

    @property
    def is_noop(self) -> bool:
        return not self.mutations

    def __len__(self) -> int:
        return len(self.mutations)

    def touched(self) -> set[tuple[EntityKind, str]]:
        return {m.key for m in self.mutations}

    def for_entity(self, kind: EntityKind, entity_id: str) -> list[Mutation]:
        return [m for m in self.mutations if m.kind is kind and m.entity_id == entity_id]
