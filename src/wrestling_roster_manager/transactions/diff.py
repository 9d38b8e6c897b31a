from __future__ import annotations

from dataclasses import fields

from wrestling_roster_manager.domain.competition_team import CompetitionTeam
from wrestling_roster_manager.domain.home_team import HomeTeam
from wrestling_roster_manager.domain.mutation import EntityKind, Mutation, MutationOp
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.wrestler import Wrestler

type Entity = Wrestler | CompetitionTeam | HomeTeam | Session

ENTITY_TYPES: dict[EntityKind, type[Entity]] = {
    EntityKind.SESSION: Session,
    EntityKind.HOME_TEAM: HomeTeam,
    EntityKind.WRESTLER: Wrestler,
    EntityKind.COMPETITION_TEAM: CompetitionTeam,
}


def entity_kind(entity: Entity) -> EntityKind:
    for kind, cls in ENTITY_TYPES.items():
        if isinstance(entity, cls):
            return kind
    raise TypeError(f"Not a roster entity: {type(entity).__name__}")


def _plain(value: object) -> object:
    if isinstance(value, dict):
        return dict(value)
    return value


def entity_fields(entity: Entity) -> dict[str, object]:
    """All field values except the id, with mappings copied."""
    return {f.name: _plain(getattr(entity, f.name)) for f in fields(entity) if f.name != "id"}


def update_mutation(before: Entity, after: Entity) -> Mutation | None:
    """UPDATE carrying only the fields that differ, or None when nothing changed."""
    changes: dict[str, object] = {}
    expected: dict[str, object] = {}
    for f in fields(before):
        old = getattr(before, f.name)
        new = getattr(after, f.name)
        if old != new:
            changes[f.name] = _plain(new)
            expected[f.name] = _plain(old)
    if not changes:
        return None
    return Mutation(
        kind=entity_kind(before),
        entity_id=before.id,
        op=MutationOp.UPDATE,
        changes=changes,
        expected=expected,
    )


def delete_mutation(entity: Entity, *guarded: str) -> Mutation:
    return Mutation(
        kind=entity_kind(entity),
        entity_id=entity.id,
        op=MutationOp.DELETE,
        expected={name: _plain(getattr(entity, name)) for name in guarded},
    )


def insert_mutation(entity: Entity, session_id: str | None = None) -> Mutation:
    return Mutation(
        kind=entity_kind(entity),
        entity_id=entity.id,
        op=MutationOp.INSERT,
        changes=entity_fields(entity),
        session_id=session_id,
    )
